"""Service exceptions.

The scoring engine itself never raises for degenerate arithmetic; these
errors come from the boundaries that feed it.
"""


class StreamScoreError(Exception):
    """Base exception for the service."""
    pass


class RecordValidationError(StreamScoreError):
    """Raised when a stream record fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("Invalid stream record: " + "; ".join(errors))


class CsvFormatError(StreamScoreError):
    """Raised when a CSV upload cannot be read at all."""
    pass


class MigrationError(StreamScoreError):
    """Raised when a stored payload cannot be upgraded."""
    pass


class RecordNotFoundError(StreamScoreError):
    """Raised when a stream record is not in the store."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Stream record not found: {record_id}")
