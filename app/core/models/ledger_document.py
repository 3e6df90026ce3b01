"""Ledger document: the whole active dataset persisted as one JSON payload."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String

from app.db.session import Base


class LedgerDocument(Base):
    """Single-row store for the serialized LedgerState (camelCase keys, decimals as strings)."""

    __tablename__ = "ledger_documents"

    id = Column(Integer, primary_key=True)
    academic_year = Column(String(20), nullable=False)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
