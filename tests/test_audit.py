"""
Tests for the audit trail.
"""

import pytest
from datetime import datetime, timedelta

from contactlink.audit import (
    BULK_UPLOAD,
    CREATE_USER,
    SEARCH_ORGANIZATION,
    VALIDATION_ERROR,
    AuditLogger,
)
from contactlink.database import AuditEntry, get_session


class TestAuditLog:
    """Test writing audit entries."""

    def test_log_returns_entry_id(self, audit_logger):
        entry_id = audit_logger.log(SEARCH_ORGANIZATION, True, organization_name="Acme")
        assert entry_id.startswith("audit_")

        logs, total = audit_logger.get_logs()
        assert total == 1
        assert logs[0]["id"] == entry_id
        assert logs[0]["client_id"] == "tester@host"
        assert logs[0]["details"] == {"organization_name": "Acme"}

    def test_none_details_dropped(self, audit_logger):
        audit_logger.log_contact_creation("Jane", "Doe", "jane@acme.com", "Acme", True, contact_id="7")
        entry = audit_logger.get_logs()[0][0]
        assert entry["action"] == CREATE_USER
        assert entry["details"]["contact_id"] == "7"
        assert entry["details"]["user_count"] == 1
        assert "error_message" not in entry["details"]

    def test_unknown_action(self, audit_logger):
        with pytest.raises(ValueError):
            audit_logger.log("DELETE_EVERYTHING", True)

    def test_validation_error_joined(self, audit_logger):
        audit_logger.log_validation_error(["Invalid email format", "Missing required field: last_name"])
        entry = audit_logger.get_logs()[0][0]
        assert entry["success"] is False
        assert entry["details"]["error_message"] == "Invalid email format, Missing required field: last_name"

    def test_prunes_oldest(self, tmp_path):
        audit = AuditLogger(tmp_path / "audit.db", client_id="tester@host", max_entries=3)
        ids = [audit.log_organization_search(f"Org {i}", i) for i in range(5)]

        logs, total = audit.get_logs()
        assert total == 3
        assert {e["id"] for e in logs} == set(ids[2:])


class TestAuditQueries:
    """Test filtering and statistics."""

    @pytest.fixture
    def populated(self, audit_logger):
        audit_logger.log_contact_creation("Jane", "Doe", "jane@acme.com", "Acme", True, contact_id="1")
        audit_logger.log_contact_creation("John", "Roe", "john@acme.com", "Acme", False, error_message="409")
        audit_logger.log_bulk_upload(10, "Acme", 8, 2, True)
        audit_logger.log_validation_error(["Invalid email format"])
        return audit_logger

    def test_newest_first(self, populated):
        logs, _ = populated.get_logs()
        assert logs[0]["action"] == VALIDATION_ERROR
        assert logs[-1]["action"] == CREATE_USER

    def test_pagination(self, populated):
        logs, total = populated.get_logs(limit=2, offset=1)
        assert total == 4
        assert [e["action"] for e in logs] == [BULK_UPLOAD, CREATE_USER]

    def test_filters(self, populated):
        logs, total = populated.get_logs(action=CREATE_USER)
        assert total == 2
        logs, total = populated.get_logs(success=False)
        assert total == 2
        assert {e["action"] for e in logs} == {CREATE_USER, VALIDATION_ERROR}
        _, total = populated.get_logs(client_id="someone@else")
        assert total == 0

    def test_stats(self, populated):
        stats = populated.get_stats(days=7)
        assert stats["total_actions"] == 4
        assert stats["successful_actions"] == 2
        assert stats["failed_actions"] == 2
        assert stats["user_creations"] == 2
        assert stats["bulk_uploads"] == 1
        assert stats["validation_errors"] == 1
        assert stats["top_clients"] == [{"client_id": "tester@host", "count": 4}]

    def test_stats_ignore_old_entries(self, audit_logger):
        session = get_session(audit_logger.db_path)
        session.add(AuditEntry(
            id="audit_old", timestamp=datetime.now() - timedelta(days=30),
            action=BULK_UPLOAD, client_id="old@host", success=True, details="{}",
        ))
        session.commit()
        session.close()

        assert audit_logger.get_stats(days=7)["total_actions"] == 0
        assert audit_logger.get_stats(days=60)["total_actions"] == 1
