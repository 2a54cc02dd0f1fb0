"""
Storage Services Package

Provides the abstract record store, its JSON-file and in-memory
implementations, and the typed finance repository built on top.
"""

from fintrack.services.storage.interface import (
    NotFoundError,
    ProtectedCategoryError,
    RecordStore,
    StorageError,
)
from fintrack.services.storage.store import (
    InMemoryRecordStore,
    JsonFileRecordStore,
)
from fintrack.services.storage.repository import (
    CATEGORIES_KEY,
    PROJECTS_KEY,
    TRANSACTIONS_KEY,
    FinanceRepository,
)

__all__ = [
    # Interfaces
    "RecordStore",
    # Exceptions
    "NotFoundError",
    "ProtectedCategoryError",
    "StorageError",
    # Implementations
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    # Repository
    "CATEGORIES_KEY",
    "PROJECTS_KEY",
    "TRANSACTIONS_KEY",
    "FinanceRepository",
]
