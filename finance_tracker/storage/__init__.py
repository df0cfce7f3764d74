"""
Storage Module - REST storage client and the in-memory document store.
"""

from .client import BatchResult, StorageClient
from .exceptions import (
    StorageError,
    StorageUnavailableError,
    StorageValidationError,
    TransactionNotFoundError,
)
from .memory import InMemoryTransactionStore

__all__ = [
    'BatchResult',
    'StorageClient',
    'StorageError',
    'StorageUnavailableError',
    'StorageValidationError',
    'TransactionNotFoundError',
    'InMemoryTransactionStore',
]
