"""Reset command - delete the data directory's databases."""

from __future__ import annotations

from typing import Annotated

import typer

from sheetsql.cli.common import DataDirOption, console, resolve_data_dir


def reset(
    data_dir: DataDirOption = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Skip confirmation prompt",
        ),
    ] = False,
) -> None:
    """Delete all ingested tables, the catalog and the upload history.

    Removes data.duckdb and metadata.db from the data directory.
    """
    data_dir = resolve_data_dir(data_dir)

    candidates = (data_dir / "data.duckdb", data_dir / "data.duckdb.wal", data_dir / "metadata.db")
    files_to_delete = [path for path in candidates if path.exists()]
    # SQLite WAL side files
    files_to_delete.extend(data_dir.glob("*.db-wal"))
    files_to_delete.extend(data_dir.glob("*.db-shm"))

    if not files_to_delete:
        console.print(f"[yellow]No database files found in {data_dir}[/yellow]")
        return

    console.print("\n[bold]Files to delete:[/bold]")
    for f in files_to_delete:
        size_kb = f.stat().st_size / 1024
        console.print(f"  {f.name} ({size_kb:.1f} KB)")

    if not force:
        confirm = typer.confirm("\nDelete these files?")
        if not confirm:
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    for f in files_to_delete:
        f.unlink()
        console.print(f"[green]Deleted {f.name}[/green]")

    console.print("\n[green]Reset complete. Run 'sheetsql ingest ARCHIVE' to start fresh.[/green]")
