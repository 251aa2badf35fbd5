"""AI Agents package."""

from wealthwise.agents.advisor import (
    EMPTY_LEDGER_MESSAGE,
    NO_TEXT_MESSAGE,
    UNAVAILABLE_MESSAGE,
    FinancialAdvisorAgent,
    InsightResponse,
    InsightServiceError,
    build_prompt,
)

__all__ = [
    "EMPTY_LEDGER_MESSAGE",
    "NO_TEXT_MESSAGE",
    "UNAVAILABLE_MESSAGE",
    "FinancialAdvisorAgent",
    "InsightResponse",
    "InsightServiceError",
    "build_prompt",
]
