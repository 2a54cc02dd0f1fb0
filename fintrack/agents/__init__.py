"""AI Agents package."""

from fintrack.agents.advisor import (
    FAILURE_MESSAGE,
    NO_INSIGHT_MESSAGE,
    NOT_ENOUGH_DATA_MESSAGE,
    UNAVAILABLE_MESSAGE,
    AdvisoryFault,
    FinancialAdvisor,
)

__all__ = [
    "FAILURE_MESSAGE",
    "NO_INSIGHT_MESSAGE",
    "NOT_ENOUGH_DATA_MESSAGE",
    "UNAVAILABLE_MESSAGE",
    "AdvisoryFault",
    "FinancialAdvisor",
]
