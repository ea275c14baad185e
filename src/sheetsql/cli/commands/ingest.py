"""Ingest command - load a spreadsheet archive into the data directory."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated
from uuid import uuid4

import typer
from rich.table import Table as RichTable

from sheetsql.cli.common import (
    DataDirOption,
    VerboseOption,
    console,
    get_manager,
    resolve_data_dir,
    setup_logging,
)


def ingest(
    archive: Annotated[
        Path,
        typer.Argument(
            help="Zip archive of .xlsx/.xlsm/.csv files (or a single .xlsx workbook)",
            exists=True,
            dir_okay=False,
            file_okay=True,
            resolve_path=True,
        ),
    ],
    data_dir: DataDirOption = None,
    max_rows: Annotated[
        int | None,
        typer.Option(
            "--max-rows",
            help="Cumulative row cap for this run (default: SHEETSQL_INGEST_MAX_ROWS)",
            min=0,
        ),
    ] = None,
    verbose: VerboseOption = 0,
) -> None:
    """Ingest every spreadsheet in an archive as a DuckDB table.

    Examples:

        sheetsql ingest sales.zip

        sheetsql ingest q3.xlsx -d ./sheetsql_data --max-rows 100000
    """
    from sheetsql.sources.archive import ArchiveIngestor
    from sheetsql.sources.errors import IngestionError
    from sheetsql.sources.history import record_upload

    setup_logging(verbosity=verbose)

    manager = get_manager(resolve_data_dir(data_dir), must_exist=False)
    upload_id = str(uuid4())

    try:
        ingestor = ArchiveIngestor(manager, max_rows=max_rows)
        try:
            summary = ingestor.ingest(archive.read_bytes(), archive.name)
        except IngestionError as e:
            record_upload(manager, upload_id, archive.name, error=e.message)
            console.print(f"[red]Ingestion failed: {e.message}[/red]")
            if e.details:
                console.print(f"  {e.details}")
            raise typer.Exit(1) from e

        record_upload(manager, upload_id, archive.name, summary=summary)
    finally:
        manager.close()

    table = RichTable(title=f"Tables from {archive.name}")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")
    table.add_column("Columns")
    for entry in summary.tables:
        table.add_row(entry.table_name, f"{entry.rows:,}", entry.columns)
    console.print(table)

    console.print(
        f"\n[green]Created {len(summary.tables)} table(s), {summary.total_rows:,} rows[/green]"
    )
    if summary.truncated:
        console.print("[yellow]Row cap reached: the upload was truncated[/yellow]")
    for warning in summary.warnings:
        console.print(f"[yellow]  ! {warning}[/yellow]")
