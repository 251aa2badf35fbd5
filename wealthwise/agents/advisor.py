"""
AI Financial Advisor for WealthWise

DESIGN DECISION: Advice comes from Gemini, but the ledger never depends on it.

CRITICAL BOUNDARIES:
- CAN: Read a snapshot of transactions (type, amount, category, date only)
- CANNOT: Mutate the ledger or see descriptions
- NEVER retried automatically; a failure becomes a neutral message
- An empty ledger never reaches the model

The call is async so the UI stays responsive while waiting. It works on a
tuple snapshot, so ledger edits made meanwhile are unaffected.
"""

import json
from typing import Any, Optional, Sequence

import google.generativeai as genai
import structlog
from pydantic import BaseModel, Field

from wealthwise.config import GeminiSettings, gemini_settings_or_none
from wealthwise.models.transaction import Transaction


EMPTY_LEDGER_MESSAGE = "Add some transactions to get AI-powered financial insights!"
NO_TEXT_MESSAGE = (
    "I've analyzed your data but couldn't generate a specific insight right now. "
    "Try adding more varied records!"
)
UNAVAILABLE_MESSAGE = (
    "The AI advisor is currently unavailable. "
    "Please check your connection or try again later."
)

SYSTEM_INSTRUCTION = (
    "You are a helpful and concise financial advisor who provides "
    "personalized insights based on spending data."
)


class InsightServiceError(Exception):
    """The advisor model could not be reached or returned an error."""
    pass


class InsightResponse(BaseModel):
    """What the advisor panel displays."""

    text: str = Field(
        description="Advice text or a fallback message"
    )
    from_model: bool = Field(
        description="Whether the text was generated by the model"
    )
    transaction_count: int = Field(
        ge=0,
        description="Size of the snapshot the advice is based on"
    )
    error: Optional[str] = None


def snapshot_for_model(transactions: Sequence[Transaction]) -> list[dict[str, Any]]:
    """Reduce transactions to what the model is allowed to see."""
    return [
        {
            "type": t.type.value,
            "amount": float(t.amount),
            "category": t.category.display_name,
            "date": t.date.date().isoformat(),
        }
        for t in transactions
    ]


def build_prompt(transactions: Sequence[Transaction]) -> str:
    return f"""Act as a professional financial advisor. Analyze the following user transaction data:
{json.dumps(snapshot_for_model(transactions))}

Provide 3 concise, actionable bullet points of financial advice or insights.
Focus on spending habits, potential savings, or category-specific observations.
Keep it encouraging and brief (max 100 words total).
Do not use complex formatting, just bullet points."""


class FinancialAdvisorAgent:
    """
    AI agent producing short advice from the transaction history.

    The Gemini model is created lazily, so the app starts without an API key;
    only this feature degrades.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
    ):
        self._settings = settings
        self._model = model
        self._logger = structlog.get_logger(__name__)

    def _get_model(self):
        """Get or create the Gemini model."""
        if self._model is not None:
            return self._model

        settings = self._settings or gemini_settings_or_none()
        if settings is None:
            raise InsightServiceError("Gemini API key is not configured")

        try:
            genai.configure(api_key=settings.api_key)
            self._model = genai.GenerativeModel(
                model_name=settings.model_name,
                generation_config={
                    "temperature": settings.temperature,
                    "max_output_tokens": settings.max_tokens,
                },
                system_instruction=SYSTEM_INSTRUCTION,
            )
        except Exception as e:
            raise InsightServiceError(f"Could not initialize Gemini: {e}") from e
        return self._model

    async def generate(self, prompt: str) -> str:
        """
        Send one prompt to the model.

        Raises:
            InsightServiceError: On any model or transport failure
        """
        model = self._get_model()
        try:
            response = await model.generate_content_async(prompt)
            return (response.text or "").strip()
        except Exception as e:
            raise InsightServiceError(str(e)) from e

    async def get_insights(self, transactions: Sequence[Transaction]) -> InsightResponse:
        """
        Advice for the given snapshot.

        Never raises: an empty snapshot gets a default prompt to add data,
        and failures get a neutral "unavailable" message.
        """
        snapshot = tuple(transactions)
        if not snapshot:
            return InsightResponse(
                text=EMPTY_LEDGER_MESSAGE,
                from_model=False,
                transaction_count=0,
            )

        try:
            text = await self.generate(build_prompt(snapshot))
        except InsightServiceError as e:
            self._logger.error("insight_generation_failed", error=str(e))
            return InsightResponse(
                text=UNAVAILABLE_MESSAGE,
                from_model=False,
                transaction_count=len(snapshot),
                error=str(e),
            )

        if not text:
            return InsightResponse(
                text=NO_TEXT_MESSAGE,
                from_model=False,
                transaction_count=len(snapshot),
            )

        return InsightResponse(
            text=text,
            from_model=True,
            transaction_count=len(snapshot),
        )
