"""Typed exceptions for persistence, import and image failures."""


class StoreError(Exception):
    """Base class for document store failures."""


class RemoteUnavailableError(StoreError):
    """
    Remote store unreachable or access denied.

    Moves the dual-backend store to OFFLINE for the rest of the session.
    """


class MalformedRecordError(StoreError):
    """
    A remote record cannot be read back, e.g. an image record without data.

    Treated like an unreachable remote at bootstrap: the local mirror is
    loaded instead of a partial invoice.
    """


class PayloadTooLargeError(StoreError):
    """
    A single document exceeds the remote store's size limit.

    Not a connectivity problem: the store stays ONLINE and the caller should
    ask the user to reduce the image size.
    """

    def __init__(self, path: str, size_bytes: int | None = None, limit_bytes: int | None = None):
        self.path = path
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        if size_bytes is not None and limit_bytes is not None:
            message = f"Document '{path}' is {size_bytes} bytes (limit {limit_bytes})."
        else:
            message = f"Document '{path}' exceeds the maximum allowed size."
        super().__init__(message)


class ImportValidationError(ValueError):
    """Backup file is not valid JSON or does not match the backup schema."""


class ImageProcessingError(ValueError):
    """Uploaded bytes could not be decoded as an image."""
