"""
Tests for the AI financial advisor.

The Gemini model is replaced with a fake; no network calls are made.
"""

import asyncio
import json
import pytest
from datetime import datetime
from decimal import Decimal

from wealthwise.agents import (
    EMPTY_LEDGER_MESSAGE,
    NO_TEXT_MESSAGE,
    UNAVAILABLE_MESSAGE,
    FinancialAdvisorAgent,
    InsightServiceError,
    build_prompt,
)
from wealthwise.agents.advisor import snapshot_for_model
from wealthwise.models.transaction import Category, Transaction, TransactionType


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Stands in for genai.GenerativeModel."""

    def __init__(self, text="- Spend less on dining out", error=None):
        self.text = text
        self.error = error
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return FakeResponse(self.text)


@pytest.fixture
def transactions():
    return [
        Transaction(
            amount=Decimal("45.50"),
            category=Category.DINING_OUT,
            type=TransactionType.EXPENSE,
            description="Birthday dinner",
            date=datetime(2024, 3, 2, 20, 0),
        ),
        Transaction(
            amount=Decimal("2000"),
            category=Category.SALARY,
            type=TransactionType.INCOME,
            date=datetime(2024, 3, 1, 9, 0),
        ),
    ]


class TestPrompt:
    """Tests for what the model is allowed to see."""

    def test_snapshot_omits_description_and_id(self, transactions):
        """Test that free text and ids never leave the device."""
        snapshot = snapshot_for_model(transactions)
        assert snapshot[0] == {
            "type": "expense",
            "amount": 45.5,
            "category": "Dining Out",
            "date": "2024-03-02",
        }

    def test_prompt_embeds_snapshot(self, transactions):
        """Test that the prompt carries the JSON snapshot."""
        prompt = build_prompt(transactions)
        assert json.dumps(snapshot_for_model(transactions)) in prompt
        assert "Birthday dinner" not in prompt


class TestFinancialAdvisorAgent:
    """Tests for insight generation and its fallbacks."""

    def test_empty_ledger_skips_model(self):
        """Test that no call is made without data."""
        model = FakeModel()
        response = asyncio.run(FinancialAdvisorAgent(model=model).get_insights([]))
        assert response.text == EMPTY_LEDGER_MESSAGE
        assert response.from_model is False
        assert model.prompts == []

    def test_model_text_returned(self, transactions):
        """Test the happy path."""
        model = FakeModel(text="  - Keep it up  ")
        response = asyncio.run(FinancialAdvisorAgent(model=model).get_insights(transactions))
        assert response.text == "- Keep it up"
        assert response.from_model is True
        assert response.transaction_count == 2
        assert len(model.prompts) == 1

    def test_model_failure_gives_neutral_message(self, transactions):
        """Test that errors become the unavailable message, with one attempt only."""
        model = FakeModel(error=RuntimeError("quota exceeded"))
        response = asyncio.run(FinancialAdvisorAgent(model=model).get_insights(transactions))
        assert response.text == UNAVAILABLE_MESSAGE
        assert response.error == "quota exceeded"
        assert len(model.prompts) == 1

    def test_empty_model_text(self, transactions):
        """Test the no-text fallback."""
        model = FakeModel(text="")
        response = asyncio.run(FinancialAdvisorAgent(model=model).get_insights(transactions))
        assert response.text == NO_TEXT_MESSAGE
        assert response.error is None

    def test_generate_wraps_errors(self):
        """Test that the low-level call raises InsightServiceError."""
        agent = FinancialAdvisorAgent(model=FakeModel(error=ValueError("boom")))
        with pytest.raises(InsightServiceError):
            asyncio.run(agent.generate("hello"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
