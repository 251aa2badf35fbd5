"""
Tests for the audit logger and settings.
"""

import pytest

from pydantic import ValidationError as PydanticValidationError

from wealthwise.audit import AuditLogger, create_correlation_id
from wealthwise.config import AppSettings, StorageSettings
from wealthwise.models.audit import AuditEvent, AuditEventBuilder
from wealthwise.services.storage import AuditStorageInterface


class BrokenAuditStorage(AuditStorageInterface):
    def append_event(self, event: AuditEvent) -> bool:
        raise OSError("read-only filesystem")

    def get_recent_events(self, limit: int = 100) -> list[dict]:
        return []


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_recent_events_newest_first(self):
        """Test the in-memory buffer order."""
        logger = AuditLogger()
        logger.log(AuditEventBuilder.ledger_cleared(removed_count=1))
        logger.log(AuditEventBuilder.ledger_cleared(removed_count=2))
        assert [e.details["removed_count"] for e in logger.recent_events] == [2, 1]

    def test_buffer_size(self):
        """Test that the buffer drops the oldest events."""
        logger = AuditLogger(buffer_size=3)
        for i in range(5):
            logger.log(AuditEventBuilder.ledger_cleared(removed_count=i))
        assert len(logger.recent_events) == 3

    def test_storage_failure_is_swallowed(self):
        """Test that a failing audit store never breaks the caller."""
        logger = AuditLogger(storage=BrokenAuditStorage())
        assert logger.log(AuditEventBuilder.ledger_cleared(removed_count=0)) is False
        assert len(logger.recent_events) == 1

    def test_log_error(self):
        """Test system error helper."""
        logger = AuditLogger()
        correlation_id = create_correlation_id()
        logger.log_error("storage", "disk full", correlation_id=correlation_id)
        event = logger.recent_events[0]
        assert event.error_message == "disk full"
        assert event.correlation_id == correlation_id


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_defaults(self, monkeypatch):
        """Test default thresholds."""
        monkeypatch.delenv("BUDGET_WARNING_PERCENT", raising=False)
        settings = AppSettings(_env_file=None)
        assert settings.budget_warning_percent == 80.0
        assert settings.budget_over_percent == 100.0
        assert settings.recent_limit == 8
        assert settings.week_days == 7

    def test_over_below_warning_rejected(self):
        """Test threshold ordering."""
        with pytest.raises(PydanticValidationError):
            AppSettings(_env_file=None, budget_warning_percent=90, budget_over_percent=80)

    def test_storage_env_prefix(self, monkeypatch, tmp_path):
        """Test WEALTHWISE_STORAGE_ variables."""
        monkeypatch.setenv("WEALTHWISE_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("WEALTHWISE_STORAGE_DATA_DIR", str(tmp_path))
        settings = StorageSettings(_env_file=None)
        assert settings.backend == "memory"
        assert settings.file_path == tmp_path / "wealthwise.json"

    def test_storage_backend_validated(self):
        """Test that unknown backends are rejected."""
        with pytest.raises(PydanticValidationError):
            StorageSettings(_env_file=None, backend="postgres")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
