"""
Data Models Package

This package contains all Pydantic models used in FinTrack.
All data persisted locally or synced remotely conforms to these schemas.
"""

from fintrack.models.finance import (
    DEFAULT_CATEGORIES,
    FALLBACK_CATEGORY_ID,
    AppData,
    Category,
    CategoryBreakdown,
    CategoryColor,
    CategoryIcon,
    FinancialSummary,
    Project,
    Transaction,
    TransactionType,
    default_categories,
)
from fintrack.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Finance models
    "DEFAULT_CATEGORIES",
    "FALLBACK_CATEGORY_ID",
    "AppData",
    "Category",
    "CategoryBreakdown",
    "CategoryColor",
    "CategoryIcon",
    "FinancialSummary",
    "Project",
    "Transaction",
    "TransactionType",
    "default_categories",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
