"""Catalog command - list the ingested tables."""

from __future__ import annotations

import json

from rich.table import Table as RichTable

from sheetsql.cli.common import DataDirOption, JsonFlag, console, get_manager, resolve_data_dir


def catalog(
    data_dir: DataDirOption = None,
    json_output: JsonFlag = False,
) -> None:
    """List ingested tables with their columns and row counts.

    Examples:

        sheetsql catalog

        sheetsql catalog -d ./sheetsql_data --json
    """
    from sheetsql.catalog.manager import CatalogManager

    manager = get_manager(resolve_data_dir(data_dir))
    try:
        entries = CatalogManager(manager).list()
    finally:
        manager.close()

    if json_output:
        console.print(
            json.dumps([e.model_dump() for e in entries]),
            soft_wrap=True,
            markup=False,
            highlight=False,
        )
        return

    if not entries:
        console.print("[yellow]No tables ingested yet[/yellow]")
        return

    table = RichTable(title="Catalog")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")
    table.add_column("Columns")
    for entry in entries:
        table.add_row(entry.table_name, f"{entry.rows:,}", "\n".join(entry.column_names))
    console.print(table)
