"""Remote sync package."""

from fintrack.services.sync.session import (
    AuthError,
    SessionState,
    SyncError,
    SyncGatewayError,
    SyncSession,
)
from fintrack.services.sync.google_drive import GoogleDriveGateway

__all__ = [
    "AuthError",
    "GoogleDriveGateway",
    "SessionState",
    "SyncError",
    "SyncGatewayError",
    "SyncSession",
]
