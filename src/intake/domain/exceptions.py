from __future__ import annotations


class IntakeError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MalformedRequestError(IntakeError):
    """Body is not a parseable multipart/form-data payload."""


class PayloadTooLargeError(MalformedRequestError):
    """Declared or observed body length exceeds the policy ceiling."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"request body exceeds {limit} bytes")


class MissingRequiredFileError(IntakeError):
    """A file part the policy marks as required was not supplied."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field} file is required")


class StorageWriteError(IntakeError):
    """Writing an uploaded file to the blob store failed."""

    def __init__(self, field: str, cause: Exception) -> None:
        self.field = field
        self.cause = cause
        super().__init__(f"failed to save {field}: {cause}")


class StoreUnavailableError(IntakeError):
    """No record store is configured; files may already be on disk.

    ``record`` is the record that would have been inserted.
    """

    def __init__(self, record) -> None:
        self.record = record
        super().__init__("record store is not configured")


class PersistError(IntakeError):
    """The insert failed after files were written (files are not retracted)."""

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"insert failed: {cause}")
