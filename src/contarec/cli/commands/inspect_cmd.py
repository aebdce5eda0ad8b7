"""File inspection command."""

import click
from contarec.domain.normalizer import (
    EXTERNAL_HEADER_ROWS,
    detect_date_columns,
    normalize_external_file,
    normalize_ledger_file,
)
from contarec.spreadsheets.loader import load_file


@click.command("inspect")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--anaf", is_flag=True, help="Treat the files as ANAF statements")
@click.option(
    "--header-lines",
    type=int,
    default=EXTERNAL_HEADER_ROWS,
    show_default=True,
    help="Header lines at the top of ANAF statements",
)
@click.pass_context
def inspect_files(ctx, files: tuple[str, ...], anaf: bool, header_lines: int):
    """Show how files are read.

    Ledger exports report their layout, the account inferred from the file
    name and the number of rows kept and dropped. ANAF statements report
    their account, data rows and date columns.

    Examples:
        contarec inspect fisa_4423.xlsx
        contarec inspect --anaf fise_436.xlsx cont_444.xlsx
    """
    failed = False
    for file_path in files:
        try:
            raw = load_file(file_path)
        except (ValueError, OSError) as e:
            click.echo(f"Error: {e}", err=True)
            failed = True
            continue

        click.echo(f"\n{raw.file_name}")
        click.echo("-" * 60)
        if anaf:
            external = normalize_external_file(raw, header_lines=header_lines)
            date_columns, with_time = detect_date_columns(raw.data, header_lines=header_lines)
            click.echo(f"Account:      {external.account or '(none)'}")
            click.echo(f"Data rows:    {len(external.rows)}")
            click.echo(f"Date columns: {', '.join(str(i) for i in date_columns) or '(none)'}")
            if with_time:
                click.echo(f"With time:    {', '.join(str(i) for i in with_time)}")
        else:
            ledger = normalize_ledger_file(raw)
            click.echo(f"Layout:       {ledger.layout.value}")
            click.echo(f"Account:      {ledger.account or '(from rows)'}")
            click.echo(f"Rows kept:    {len(ledger.rows)}")
            click.echo(f"Rows dropped: {ledger.dropped_rows}")

    if failed:
        ctx.exit(1)


def register_commands(cli):
    """Register inspect command with main CLI."""
    cli.add_command(inspect_files)
