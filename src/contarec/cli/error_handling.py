"""CLI error rendering."""

import click


def handle_domain_error(ctx: click.Context, error: ValueError) -> None:
    """Print a domain or validation error and exit with status 1."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_write_error(ctx: click.Context, path: str, error: OSError) -> None:
    """Print a failed workbook write and exit with status 1."""
    click.echo(f"Error: Could not write {path}: {error.strerror or error}", err=True)
    ctx.exit(1)
