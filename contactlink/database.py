"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for the audit trail.
"""

from datetime import datetime
from pathlib import Path
from sqlalchemy import create_engine, Boolean, Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class AuditEntry(Base):
    """One audited operator action."""

    __tablename__ = "audit_entries"

    id = Column(String, primary_key=True)  # audit_<epoch ms>_<random>
    timestamp = Column(DateTime, nullable=False, default=datetime.now, index=True)
    action = Column(String, nullable=False, index=True)  # CREATE_USER, BULK_UPLOAD, ...
    client_id = Column(String, nullable=False)
    user_id = Column(String, nullable=True)
    success = Column(Boolean, nullable=False)
    details = Column(Text, nullable=False, default="{}")  # JSON


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
