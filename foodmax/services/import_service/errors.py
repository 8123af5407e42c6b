"""Exceptions raised by the import service."""


class RepositoryError(Exception):
    """A repository could not store or load records.

    ``status_code`` is the HTTP status when the failure came from the API.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ImportPipelineError(Exception):
    """The batch as a whole cannot be processed."""


class EmptyBatchError(ImportPipelineError):
    """No rows were supplied."""


class BatchTooLargeError(ImportPipelineError):
    """More rows than the configured maximum."""

    def __init__(self, row_count: int, max_rows: int):
        super().__init__(f"Batch has {row_count} rows; the maximum is {max_rows}")
        self.row_count = row_count
        self.max_rows = max_rows


class UnknownEntityError(LookupError):
    """No import schema is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"Unknown import entity '{name}'")
        self.name = name
