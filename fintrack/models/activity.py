"""
Activity Models for FinTrack

Every significant action (local mutation, login, sync) produces an
ActivityEvent. Events are written to the structured log and kept in a
short in-memory history the settings page can show.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events we record."""
    # Local mutations
    PROJECT_CREATED = "project_created"
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    CATEGORIES_UPDATED = "categories_updated"
    
    # Identity
    LOGIN = "login"
    LOGOUT = "logout"
    AUTH_FAILED = "auth_failed"
    
    # Remote sync
    SNAPSHOT_PULLED = "snapshot_pulled"
    SNAPSHOT_PUSHED = "snapshot_pushed"
    REMOTE_INITIALIZED = "remote_initialized"
    SYNC_FAILED = "sync_failed"
    
    # Advisory
    ADVISORY_FALLBACK = "advisory_fallback"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single recorded action."""
    
    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO
    
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'project', 'transaction', 'snapshot')"
    )
    entity_id: Optional[str] = None
    
    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None
    
    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.
    
    Usage:
        event = ActivityEventBuilder.transaction_added(tx_id, project_id, amount)
        event = ActivityEventBuilder.sync_failed("push", "HTTP 503")
    """
    
    @staticmethod
    def project_created(project_id: str, name: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.PROJECT_CREATED,
            entity_type="project",
            entity_id=project_id,
            description=f"Project created: {name}",
            details={"name": name},
        )
    
    @staticmethod
    def transaction_added(
        transaction_id: str,
        project_id: str,
        amount: float,
        transaction_type: str,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Added {transaction_type} of {amount:,.2f}",
            details={
                "project_id": project_id,
                "amount": amount,
                "type": transaction_type,
            },
        )
    
    @staticmethod
    def transaction_deleted(transaction_id: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction deleted",
        )
    
    @staticmethod
    def categories_updated(count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.CATEGORIES_UPDATED,
            entity_type="category",
            description=f"Category set saved ({count} categories)",
            details={"count": count},
        )
    
    @staticmethod
    def login() -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOGIN,
            description="Signed in to Google Drive",
        )
    
    @staticmethod
    def logout() -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOGOUT,
            description="Signed out of Google Drive",
        )
    
    @staticmethod
    def auth_failed(error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.AUTH_FAILED,
            severity=ActivitySeverity.ERROR,
            description="Google sign-in failed",
            error_message=error_message,
        )
    
    @staticmethod
    def snapshot_pulled(
        projects: int,
        transactions: int,
        categories: int,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_PULLED,
            entity_type="snapshot",
            description="Local data replaced by remote snapshot",
            details={
                "projects": projects,
                "transactions": transactions,
                "categories": categories,
            },
        )
    
    @staticmethod
    def snapshot_pushed(transactions: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_PUSHED,
            entity_type="snapshot",
            description="Local data pushed to Google Drive",
            details={"transactions": transactions},
        )
    
    @staticmethod
    def remote_initialized() -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.REMOTE_INITIALIZED,
            entity_type="snapshot",
            description="No remote snapshot found; created it from local data",
        )
    
    @staticmethod
    def sync_failed(operation: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SYNC_FAILED,
            severity=ActivitySeverity.ERROR,
            entity_type="snapshot",
            description=f"Sync {operation} failed",
            details={"operation": operation},
            error_message=error_message,
        )
    
    @staticmethod
    def advisory_fallback(operation: str, reason: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.ADVISORY_FALLBACK,
            severity=ActivitySeverity.WARNING,
            description=f"AI {operation} fell back to default",
            details={"operation": operation},
            error_message=reason,
        )
