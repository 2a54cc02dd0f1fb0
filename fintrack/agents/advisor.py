"""
AI Advisor for FinTrack

DESIGN DECISION: AI output is advisory only. Nothing here can change
stored data, and nothing here raises to the caller:

1. PROJECT ANALYSIS:
   - CAN: Read a plain-text list of the project's transactions
   - CAN: Write a short narrative (summary, trends, one tip)
   - FALLS BACK: To a fixed message when disabled, empty or failing

2. CATEGORY SUGGESTION:
   - CAN: Pick one id from the categories the user already has
   - CANNOT: Invent a category - any answer outside the set becomes "other"

Every call is a single attempt. Backend failures become an
AdvisoryFault internally and are turned into the fallback value
right here.
"""

from typing import Any, Optional

import google.generativeai as genai
import structlog

from fintrack.audit import ActivityLogger
from fintrack.config import GeminiSettings, get_settings
from fintrack.models.finance import (
    FALLBACK_CATEGORY_ID,
    Category,
    Project,
    Transaction,
)
from fintrack.queries.summary import format_transaction_lines


UNAVAILABLE_MESSAGE = (
    "AI services are currently unavailable. Please check your API configuration."
)
NOT_ENOUGH_DATA_MESSAGE = (
    "Not enough data to analyze yet. Add some transactions to get AI insights!"
)
NO_INSIGHT_MESSAGE = "Could not generate insights at this time."
FAILURE_MESSAGE = (
    "An error occurred while generating AI insights. Please try again later."
)

logger = structlog.get_logger(__name__)


class AdvisoryFault(Exception):
    """The backend failed or answered with something unusable."""
    pass


class FinancialAdvisor:
    """
    Gemini-backed advisor for project insights and category suggestions.
    
    When no API key is configured the advisor is disabled and every
    call returns its fallback immediately.
    """
    
    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._activity_logger = activity_logger
        self._model = model
        if self._model is None and self._settings.is_configured:
            self._configure_genai()
    
    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )
    
    @property
    def enabled(self) -> bool:
        return self._model is not None
    
    async def _generate(self, prompt: str) -> str:
        try:
            response = await self._model.generate_content_async(prompt)
            return (response.text or "").strip()
        except Exception as e:
            raise AdvisoryFault(str(e)) from e
    
    def _fallback(self, operation: str, reason: str) -> None:
        logger.warning("advisory_fallback", operation=operation, reason=reason)
        if self._activity_logger:
            self._activity_logger.log_advisory_fallback(operation, reason)
    
    async def analyze(
        self,
        project: Project,
        transactions: list[Transaction],
    ) -> str:
        """
        Narrative analysis of a project's transactions.
        
        The prompt asks for a spending-vs-income summary, concerning
        trends or heavy categories, and one actionable tip, formatted
        as Markdown.
        """
        if not self.enabled:
            return UNAVAILABLE_MESSAGE
        
        if not transactions:
            return NOT_ENOUGH_DATA_MESSAGE
        
        try:
            prompt = self._analysis_prompt(project, transactions)
            text = await self._generate(prompt)
        except (AdvisoryFault, ValueError, OverflowError) as e:
            self._fallback("analysis", str(e))
            return FAILURE_MESSAGE
        
        return text or NO_INSIGHT_MESSAGE
    
    def _analysis_prompt(
        self,
        project: Project,
        transactions: list[Transaction],
    ) -> str:
        summary = format_transaction_lines(transactions)
        
        return f"""Analyze the financial health of the project "{project.name}".
Amounts are in {project.currency}.
Here are the recent transactions:
{summary}

Please provide:
1. A brief summary of spending vs income.
2. Identify any concerning trends or high expense categories.
3. One actionable tip to improve the project's budget.

Keep the response concise, encouraging, and formatted in Markdown.
Do not use complex jargon."""
    
    async def suggest_category(
        self,
        title: str,
        description: str,
        categories: list[Category],
    ) -> str:
        """
        Pick the best matching category id for a transaction.
        
        Returns "other" when the advisor is disabled, fails, or answers
        with an id that is not in `categories`.
        """
        if not self.enabled:
            return FALLBACK_CATEGORY_ID
        
        category_list = ", ".join(f"{c.id} ({c.name})" for c in categories)
        
        prompt = f"""Given a transaction with title "{title}" and description "{description}",
categorize it into one of the following exact IDs:
[{category_list}].

Return ONLY the ID string (e.g., 'food' or 'custom_123')."""

        try:
            answer = await self._generate(prompt)
        except AdvisoryFault as e:
            self._fallback("categorization", str(e))
            return FALLBACK_CATEGORY_ID
        
        category_id = answer.strip().strip("'\"`").strip().lower()
        if any(c.id == category_id for c in categories):
            return category_id
        
        self._fallback("categorization", f"Unknown category id: {answer[:50]!r}")
        return FALLBACK_CATEGORY_ID
