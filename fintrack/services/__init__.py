"""Services package."""

from fintrack.services.storage import (
    FinanceRepository,
    InMemoryRecordStore,
    JsonFileRecordStore,
    NotFoundError,
    ProtectedCategoryError,
    RecordStore,
    StorageError,
)
from fintrack.services.sync import (
    AuthError,
    GoogleDriveGateway,
    SessionState,
    SyncError,
    SyncGatewayError,
    SyncSession,
)

__all__ = [
    # Storage services
    "FinanceRepository",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "NotFoundError",
    "ProtectedCategoryError",
    "RecordStore",
    "StorageError",
    # Sync services
    "AuthError",
    "GoogleDriveGateway",
    "SessionState",
    "SyncError",
    "SyncGatewayError",
    "SyncSession",
]
