"""Serve command - run the HTTP API."""

from __future__ import annotations

from typing import Annotated

import typer

from sheetsql.cli.common import DataDirOption, console, resolve_data_dir


def serve(
    data_dir: DataDirOption = None,
    host: Annotated[
        str | None,
        typer.Option("--host", help="Bind address (default: SHEETSQL_API_HOST)"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Port (default: SHEETSQL_API_PORT)"),
    ] = None,
) -> None:
    """Start the HTTP API server.

    Examples:

        sheetsql serve

        sheetsql serve -d ./sheetsql_data --port 9000
    """
    import uvicorn

    from sheetsql.api.main import create_app
    from sheetsql.core.config import get_settings

    settings = get_settings()
    resolved = resolve_data_dir(data_dir)
    resolved.mkdir(parents=True, exist_ok=True)

    console.print("Starting SheetSQL API server...")
    console.print(f"  Host: {host or settings.api_host}:{port or settings.api_port}")
    console.print(f"  Data dir: {resolved}")

    uvicorn.run(
        create_app(data_dir=resolved, settings=settings),
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
    )
