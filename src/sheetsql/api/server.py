"""API server entry point.

Usage:
    # Via script (recommended)
    sheetsql-api

    # Via uvicorn directly
    uvicorn sheetsql.api.main:create_app --factory --reload
"""

import os

from sheetsql.core.config import get_settings


def main() -> None:
    """Start the API server with uvicorn."""
    import uvicorn

    settings = get_settings()
    reload = os.environ.get("SHEETSQL_API_RELOAD", "false").lower() == "true"

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    print("Starting SheetSQL API server...")
    print(f"  Host: {settings.api_host}:{settings.api_port}")
    print(f"  Data dir: {settings.data_dir}")
    print()

    uvicorn.run(
        "sheetsql.api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
