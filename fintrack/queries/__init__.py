"""Summary and aggregation package."""

from fintrack.queries.summary import (
    expense_breakdown,
    format_transaction_lines,
    summarize,
)

__all__ = ["expense_breakdown", "format_transaction_lines", "summarize"]
