"""Report export package."""

from wealthwise.reports.builder import (
    REPORT_COLUMNS,
    LedgerReport,
    ReportRow,
    build_report,
    format_currency,
    format_signed,
    render_csv,
    render_text,
    report_frame,
)

__all__ = [
    "REPORT_COLUMNS",
    "LedgerReport",
    "ReportRow",
    "build_report",
    "format_currency",
    "format_signed",
    "render_csv",
    "render_text",
    "report_frame",
]
