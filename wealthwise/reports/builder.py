"""
Ledger Report Builder

Produces the exported financial report: a header, a summary block
(income, savings, expenses, net balance) and one row per transaction,
newest first, with signed amounts.

The report is a read-only view of a ledger snapshot. Rendering to text and
CSV goes through a pandas DataFrame, the same table the UI shows and
offers for download.
"""

from datetime import datetime
from decimal import Decimal
from typing import Sequence

import pandas as pd
from pydantic import BaseModel, Field

from wealthwise.ledger.aggregation import summarize
from wealthwise.models.transaction import (
    Summary,
    Transaction,
    TransactionType,
    quantize_money,
)


REPORT_TITLE = "WealthWise Financial Report"
REPORT_COLUMNS = ["Date", "Category", "Description", "Type", "Amount"]


def format_currency(amount: Decimal, symbol: str = "$") -> str:
    """Format an amount with thousands separators (e.g., '$1,234.56')."""
    return f"{symbol}{quantize_money(amount):,.2f}"


def format_signed(transaction: Transaction, symbol: str = "$") -> str:
    """'+$12.00' for income, '-$12.00' for expenses and savings."""
    sign = "+" if transaction.type == TransactionType.INCOME else "-"
    return f"{sign}{symbol}{quantize_money(transaction.amount):.2f}"


class ReportRow(BaseModel):
    date: str
    category: str
    description: str
    type: str
    amount: str


class LedgerReport(BaseModel):
    """Everything the exported document contains."""

    title: str = REPORT_TITLE
    period_label: str = "All Time"
    generated_at: datetime
    currency_symbol: str = "$"
    summary: Summary
    rows: list[ReportRow] = Field(default_factory=list)

    @property
    def file_stem(self) -> str:
        return f"WealthWise_Report_{self.generated_at.date().isoformat()}"


def build_report(
    transactions: Sequence[Transaction],
    generated_at: datetime,
    currency_symbol: str = "$",
    period_label: str = "All Time",
) -> LedgerReport:
    ordered = sorted(transactions, key=lambda t: t.date, reverse=True)
    rows = [
        ReportRow(
            date=t.date.strftime("%Y-%m-%d %H:%M"),
            category=t.category.display_name,
            description=t.description,
            type=t.type.value.upper(),
            amount=format_signed(t, currency_symbol),
        )
        for t in ordered
    ]
    return LedgerReport(
        period_label=period_label,
        generated_at=generated_at,
        currency_symbol=currency_symbol,
        summary=summarize(transactions),
        rows=rows,
    )


def report_frame(report: LedgerReport) -> pd.DataFrame:
    """Transaction rows as a DataFrame with the report's column headings."""
    records = [
        [row.date, row.category, row.description, row.type, row.amount]
        for row in report.rows
    ]
    return pd.DataFrame(records, columns=REPORT_COLUMNS)


def summary_lines(report: LedgerReport) -> list[tuple[str, str]]:
    symbol = report.currency_symbol
    summary = report.summary
    return [
        ("Total Income", format_currency(summary.total_income, symbol)),
        ("Total Savings", format_currency(summary.total_saving, symbol)),
        ("Total Expenses", format_currency(summary.total_expense, symbol)),
        ("Net Available Balance", format_currency(summary.balance, symbol)),
    ]


def render_text(report: LedgerReport) -> str:
    lines = [
        report.title,
        f"Report Period: {report.period_label}",
        f"Generated on: {report.generated_at.strftime('%Y-%m-%d %H:%M')}",
        "",
        "Summary Overview",
    ]
    for label, value in summary_lines(report):
        lines.append(f"  {label + ':':<24}{value}")
    lines.append("")

    frame = report_frame(report)
    if frame.empty:
        lines.append("No transactions recorded.")
    else:
        lines.append(frame.to_string(index=False))
    return "\n".join(lines) + "\n"


def render_csv(report: LedgerReport) -> str:
    return report_frame(report).to_csv(index=False)
