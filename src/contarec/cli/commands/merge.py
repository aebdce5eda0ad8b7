"""ANAF statement merge command."""

import click
from contarec.cli.error_handling import handle_domain_error, handle_write_error
from contarec.domain.merge import merge_external_files
from contarec.domain.normalizer import EXTERNAL_HEADER_ROWS
from contarec.spreadsheets.loader import load_files
from contarec.spreadsheets.workbook import write_merged_workbook


@click.command("merge")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    required=True,
    type=click.Path(dir_okay=False),
    help="Path of the merged workbook (.xlsx)",
)
@click.option(
    "--header-lines",
    type=int,
    default=EXTERNAL_HEADER_ROWS,
    show_default=True,
    help="Header lines at the top of every file",
)
@click.option(
    "--column-names-row",
    type=int,
    default=EXTERNAL_HEADER_ROWS,
    show_default=True,
    help="Header line holding the column names, compared across files",
)
@click.pass_context
def merge(ctx, files: tuple[str, ...], output: str, header_lines: int, column_names_row: int):
    """Merge ANAF statements into one table.

    The header lines of the first file are kept once. Every data row is
    prefixed with the name of the file it came from.

    Examples:
        contarec merge fise_436.xlsx fise_444.xlsx --output anaf.xlsx
    """
    raw_files = load_files(files)
    try:
        result = merge_external_files(
            raw_files, header_lines=header_lines, column_names_row=column_names_row
        )
        write_merged_workbook(output, result, header_lines=header_lines)
    except ValueError as e:
        handle_domain_error(ctx, e)
    except OSError as e:
        handle_write_error(ctx, output, e)

    for file_name in result.mismatched_files:
        click.echo(f"Warning: column names of {file_name} differ from the first file", err=True)
    click.echo(
        f"Merged {result.total_files} file(s): {result.total_data_rows} data row(s), "
        f"{result.total_rows} row(s) in total"
    )
    click.echo(f"Written to {output}")


def register_commands(cli):
    """Register merge command with main CLI."""
    cli.add_command(merge)
