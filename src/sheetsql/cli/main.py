"""Main CLI application entry point."""

from __future__ import annotations

import typer

from sheetsql.cli.commands import catalog, ingest, query, reset, serve

app = typer.Typer(
    name="sheetsql",
    help="SheetSQL - load spreadsheet archives into DuckDB and query them with read-only SQL.",
    no_args_is_help=True,
)

# Register commands
app.command()(serve.serve)
app.command()(ingest.ingest)
app.command()(query.query)
app.command()(catalog.catalog)
app.command()(reset.reset)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
