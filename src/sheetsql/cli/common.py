"""Shared CLI utilities and constants."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from sheetsql.core.config import get_settings
from sheetsql.core.logging import configure_logging

if TYPE_CHECKING:
    from sheetsql.core.connections import ConnectionManager

# Load .env file from current directory (SHEETSQL_* settings)
load_dotenv()

# Shared console instance
console = Console()

# Common type aliases for typer options
DataDirOption = Annotated[
    Path | None,
    typer.Option(
        "--data-dir",
        "-d",
        help="Directory holding data.duckdb and metadata.db (default: SHEETSQL_DATA_DIR)",
        dir_okay=True,
        file_okay=False,
        resolve_path=True,
    ),
]

JsonFlag = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Output as JSON for scripting",
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-v=INFO, -vv=DEBUG)",
    ),
]


def setup_logging(verbosity: int = 0, log_format: str = "console") -> None:
    """Configure structured logging based on verbosity level.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2+=DEBUG
        log_format: "console" for development, "json" for production/cloud
    """
    if verbosity >= 2:
        level = "DEBUG"
    elif verbosity >= 1:
        level = "INFO"
    else:
        level = "WARNING"

    configure_logging(
        log_level=level,
        log_format=log_format,
        show_timestamps=verbosity >= 1,
        color=log_format == "console",
    )


def resolve_data_dir(data_dir: Path | None) -> Path:
    """The --data-dir option, or the configured data directory."""
    return data_dir if data_dir is not None else get_settings().data_dir


def get_manager(data_dir: Path, *, must_exist: bool = True) -> ConnectionManager:
    """Create and initialize a ConnectionManager for the data directory.

    Returns the manager. Caller is responsible for closing it.
    """
    from sheetsql.core.connections import ConnectionConfig, ConnectionManager

    config = ConnectionConfig.for_directory(data_dir)

    if must_exist and not config.duckdb_path.exists():
        console.print(f"[red]No database found at {config.duckdb_path}[/red]")
        console.print("Ingest an archive first: sheetsql ingest ARCHIVE")
        raise typer.Exit(1)

    manager = ConnectionManager(config)
    manager.initialize()
    return manager
