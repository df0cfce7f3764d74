"""
Storage exceptions shared by the in-memory store and the HTTP client.
"""


class StorageError(Exception):
    """Base exception for storage failures."""
    pass


class StorageValidationError(StorageError):
    """Storage rejected a record (missing field, invalid type)."""
    pass


class TransactionNotFoundError(StorageError):
    """No record with the given id exists."""
    pass


class StorageUnavailableError(StorageError):
    """Storage service could not be reached or answered unexpectedly."""
    pass
