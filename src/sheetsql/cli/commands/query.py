"""Query command - run a guarded read-only SQL statement."""

from __future__ import annotations

import json
from typing import Annotated

import typer
from rich.table import Table as RichTable

from sheetsql.cli.common import (
    DataDirOption,
    JsonFlag,
    VerboseOption,
    console,
    get_manager,
    resolve_data_dir,
    setup_logging,
)


def query(
    sql: Annotated[
        str,
        typer.Argument(
            help="Single SELECT statement",
        ),
    ],
    data_dir: DataDirOption = None,
    json_output: JsonFlag = False,
    verbose: VerboseOption = 0,
) -> None:
    """Run a read-only SELECT against the ingested tables.

    Examples:

        sheetsql query 'SELECT * FROM "_catalog"'

        sheetsql query "SELECT COUNT(*) AS n FROM sales" --json
    """
    from sheetsql.query.errors import QueryError
    from sheetsql.query.guard import QueryGuard

    setup_logging(verbosity=verbose)

    manager = get_manager(resolve_data_dir(data_dir))
    try:
        result = QueryGuard(manager).execute(sql)
    except QueryError as e:
        if json_output:
            _print_json({"ok": False, "error": e.message, "details": e.details})
        else:
            console.print(f"[red]{type(e).__name__}: {e.message}[/red]")
            if e.details:
                console.print(f"  {e.details}")
        raise typer.Exit(1) from e
    finally:
        manager.close()

    if json_output:
        _print_json({"ok": True, **result.model_dump(by_alias=True)})
        return

    table = RichTable()
    for field in result.fields:
        table.add_column(f"{field.name}\n[dim]{field.type}[/dim]")
    for row in result.rows:
        table.add_row(*("" if v is None else str(v) for v in row.values()))
    console.print(table)

    suffix = " (truncated)" if result.truncated else ""
    console.print(f"{result.row_count:,} row(s){suffix}")


def _print_json(payload: dict) -> None:
    console.print(json.dumps(payload), soft_wrap=True, markup=False, highlight=False)
