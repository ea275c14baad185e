"""Ingestion errors.

InvalidArchive, ArchiveTooLarge and StorageWriteFailure end a run.
UnsupportedMember and RowCapExceeded never escape the ingestor: they are
recorded as warnings / the truncated flag of the run.
"""


class IngestionError(Exception):
    """Base class for ingestion failures."""

    status_code: int = 400

    def __init__(self, message: str, *, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidArchive(IngestionError):
    """The upload is not a readable archive or yields no tables."""


class ArchiveTooLarge(InvalidArchive):
    """The upload exceeds the configured size limit."""

    status_code = 413


class UnsupportedMember(IngestionError):
    """An archive member is not a supported spreadsheet. Skipped, not fatal."""


class StorageWriteFailure(IngestionError):
    """A table or catalog write failed. Aborts the run."""

    status_code = 500


class RowCapExceeded(IngestionError):
    """The run hit its cumulative row cap. Truncates the run, not fatal."""
