"""HTTP API for archive ingestion and guarded SQL."""
