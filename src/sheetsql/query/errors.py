"""Query errors. Each carries the HTTP status the API answers with."""


class QueryError(Exception):
    """Base class for query failures."""

    status_code: int = 400

    def __init__(self, message: str, *, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationRejected(QueryError):
    """The statement failed static validation and was never executed."""


class QueryTimeout(QueryError):
    """The statement ran past its wall-clock limit and was interrupted."""

    status_code = 408


class QueryExecutionError(QueryError):
    """DuckDB rejected or failed the statement."""
