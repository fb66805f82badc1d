"""
Audit trail for operator actions.

Every contact creation, bulk upload, organization search and rejected input
is written to the audit_entries table so an admin can later review who did
what and how often it failed.
"""

import getpass
import json
import socket
import time
import uuid
from collections import Counter
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .database import AuditEntry, get_session, init_database
from .logger import get_logger

CREATE_USER = "CREATE_USER"
BULK_UPLOAD = "BULK_UPLOAD"
SEARCH_ORGANIZATION = "SEARCH_ORGANIZATION"
VALIDATION_ERROR = "VALIDATION_ERROR"

ACTIONS = (CREATE_USER, BULK_UPLOAD, SEARCH_ORGANIZATION, VALIDATION_ERROR)


def default_client_id() -> str:
    """Operator identity for a CLI session: user@host."""
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "unknown"
    return f"{user}@{socket.gethostname()}"


def _new_entry_id() -> str:
    return f"audit_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _entry_to_dict(entry: AuditEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "timestamp": entry.timestamp.isoformat(),
        "action": entry.action,
        "client_id": entry.client_id,
        "user_id": entry.user_id,
        "success": entry.success,
        "details": json.loads(entry.details or "{}"),
    }


class AuditLogger:
    """Writes and queries audit entries in a SQLite database."""

    def __init__(self, db_path: Path, client_id: Optional[str] = None, max_entries: int = 1000):
        self.db_path = Path(db_path)
        self.client_id = client_id or default_client_id()
        self.max_entries = max_entries
        init_database(self.db_path)

    def log(self, action: str, success: bool, user_id: Optional[str] = None, **details) -> str:
        """Record one action and return its entry id."""
        if action not in ACTIONS:
            raise ValueError(f"Unknown audit action: {action}")
        clean = {k: v for k, v in details.items() if v is not None}
        entry_id = _new_entry_id()
        entry = AuditEntry(
            id=entry_id,
            timestamp=datetime.now(),
            action=action,
            client_id=self.client_id,
            user_id=user_id,
            success=success,
            details=json.dumps(clean, default=str),
        )
        session = get_session(self.db_path)
        try:
            session.add(entry)
            session.commit()
            self._prune(session)
        finally:
            session.close()

        get_logger().info("[AUDIT]", action=action, success=success, client_id=self.client_id, **clean)
        return entry_id

    def _prune(self, session) -> None:
        total = session.query(AuditEntry).count()
        if total <= self.max_entries:
            return
        stale = (
            session.query(AuditEntry.id)
            .order_by(AuditEntry.timestamp.asc(), AuditEntry.id.asc())
            .limit(total - self.max_entries)
            .all()
        )
        session.query(AuditEntry).filter(AuditEntry.id.in_([row.id for row in stale])).delete(
            synchronize_session=False
        )
        session.commit()

    def log_contact_creation(
        self,
        first_name: str,
        last_name: str,
        email: str,
        organization_name: str,
        success: bool,
        contact_id: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> str:
        return self.log(
            CREATE_USER,
            success,
            first_name=first_name,
            last_name=last_name,
            email=email,
            organization_name=organization_name,
            contact_id=contact_id,
            error_message=error_message,
            user_count=1,
        )

    def log_bulk_upload(
        self,
        user_count: int,
        organization_name: str,
        success_count: int,
        failed_count: int,
        success: bool,
        error_message: Optional[str] = None,
    ) -> str:
        return self.log(
            BULK_UPLOAD,
            success,
            user_count=user_count,
            organization_name=organization_name,
            success_count=success_count,
            failed_count=failed_count,
            error_message=error_message,
        )

    def log_organization_search(self, search_term: str, match_count: int) -> str:
        return self.log(SEARCH_ORGANIZATION, True, organization_name=search_term, match_count=match_count)

    def log_validation_error(self, errors: List[str]) -> str:
        return self.log(VALIDATION_ERROR, False, error_message=", ".join(errors))

    def get_logs(
        self,
        limit: int = 50,
        offset: int = 0,
        action: Optional[str] = None,
        success: Optional[bool] = None,
        client_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Filtered audit entries, newest first.

        Returns:
            Tuple of (page of entries, total entries matching the filters)
        """
        session = get_session(self.db_path)
        try:
            query = session.query(AuditEntry)
            if action is not None:
                query = query.filter(AuditEntry.action == action)
            if success is not None:
                query = query.filter(AuditEntry.success == success)
            if client_id is not None:
                query = query.filter(AuditEntry.client_id == client_id)
            if start is not None:
                query = query.filter(AuditEntry.timestamp >= start)
            if end is not None:
                query = query.filter(AuditEntry.timestamp <= end)

            total = query.count()
            rows = (
                query.order_by(AuditEntry.timestamp.desc(), AuditEntry.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            return [_entry_to_dict(r) for r in rows], total
        finally:
            session.close()

    def get_stats(self, days: int = 7) -> Dict[str, Any]:
        cutoff = datetime.now() - timedelta(days=days)
        session = get_session(self.db_path)
        try:
            recent = session.query(AuditEntry).filter(AuditEntry.timestamp >= cutoff).all()
        finally:
            session.close()

        clients = Counter(e.client_id for e in recent)
        return {
            "total_actions": len(recent),
            "successful_actions": sum(1 for e in recent if e.success),
            "failed_actions": sum(1 for e in recent if not e.success),
            "user_creations": sum(1 for e in recent if e.action == CREATE_USER),
            "bulk_uploads": sum(1 for e in recent if e.action == BULK_UPLOAD),
            "validation_errors": sum(1 for e in recent if e.action == VALIDATION_ERROR),
            "top_clients": [
                {"client_id": client, "count": count}
                for client, count in clients.most_common(10)
            ],
        }
