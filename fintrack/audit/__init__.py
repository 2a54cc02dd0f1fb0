"""Activity logging package."""

from fintrack.audit.logger import ActivityLogger

__all__ = ["ActivityLogger"]
