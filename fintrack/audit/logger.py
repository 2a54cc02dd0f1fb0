"""
Activity Logger

DESIGN DECISION: Every significant action is logged.
This provides:
1. Traceability of what happened to local and remote data
2. Debugging capability when a sync fails
3. A short history the user can look at in Settings

The activity logger:
- Logs locally through structlog
- Never raises into the caller
- Keeps only the most recent events in memory
"""

from collections import deque
from typing import Optional

import structlog

from fintrack.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivitySeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class ActivityLogger:
    """
    Central activity logging service.
    
    Logs events to the structured local log and remembers the
    last `history_size` of them.
    """
    
    def __init__(self, history_size: int = 50):
        self._history: deque[ActivityEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("fintrack.activity")
    
    def log(self, event: ActivityEvent) -> None:
        """Record an event. Failures to log are reported, never raised."""
        self._history.append(event)
        try:
            log_dict = event.to_log_dict()
            if event.severity == ActivitySeverity.ERROR:
                self._logger.error("activity_event", **log_dict)
            elif event.severity == ActivitySeverity.WARNING:
                self._logger.warning("activity_event", **log_dict)
            elif event.severity == ActivitySeverity.DEBUG:
                self._logger.debug("activity_event", **log_dict)
            else:
                self._logger.info("activity_event", **log_dict)
        except Exception as e:
            self._logger.error(
                "activity_log_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
    
    def recent(self, limit: Optional[int] = None) -> list[ActivityEvent]:
        """Most recent events, newest first."""
        events = list(reversed(self._history))
        return events[:limit] if limit is not None else events
    
    def log_project_created(self, project_id: str, name: str) -> None:
        self.log(ActivityEventBuilder.project_created(project_id, name))
    
    def log_transaction_added(
        self,
        transaction_id: str,
        project_id: str,
        amount: float,
        transaction_type: str,
    ) -> None:
        self.log(ActivityEventBuilder.transaction_added(
            transaction_id=transaction_id,
            project_id=project_id,
            amount=amount,
            transaction_type=transaction_type,
        ))
    
    def log_transaction_deleted(self, transaction_id: str) -> None:
        self.log(ActivityEventBuilder.transaction_deleted(transaction_id))
    
    def log_categories_updated(self, count: int) -> None:
        self.log(ActivityEventBuilder.categories_updated(count))
    
    def log_login(self) -> None:
        self.log(ActivityEventBuilder.login())
    
    def log_logout(self) -> None:
        self.log(ActivityEventBuilder.logout())
    
    def log_auth_failed(self, error_message: str) -> None:
        self.log(ActivityEventBuilder.auth_failed(error_message))
    
    def log_snapshot_pulled(
        self,
        projects: int,
        transactions: int,
        categories: int,
    ) -> None:
        self.log(ActivityEventBuilder.snapshot_pulled(
            projects=projects,
            transactions=transactions,
            categories=categories,
        ))
    
    def log_snapshot_pushed(self, transactions: int) -> None:
        self.log(ActivityEventBuilder.snapshot_pushed(transactions))
    
    def log_remote_initialized(self) -> None:
        self.log(ActivityEventBuilder.remote_initialized())
    
    def log_sync_failed(self, operation: str, error_message: str) -> None:
        self.log(ActivityEventBuilder.sync_failed(operation, error_message))
    
    def log_advisory_fallback(self, operation: str, reason: str) -> None:
        self.log(ActivityEventBuilder.advisory_fallback(operation, reason))
