"""
Database models for Review Responder Service
"""
import uuid
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean,
    Text, ForeignKey, Index
)
from sqlalchemy.orm import relationship

from ..core.database import Base


def _new_uuid() -> str:
    return str(uuid.uuid4())


class Company(Base):
    """A business whose Google reviews are managed here"""
    __tablename__ = "companies"

    id = Column(String(36), primary_key=True, default=_new_uuid)
    name = Column(String(255), nullable=False)
    contact_email = Column(String(255), nullable=False, default="")

    # Google Business Profile identifiers
    google_place_id = Column(String(255), nullable=False, default="")
    google_account_id = Column(String(255), nullable=False, default="")

    # OAuth state
    google_connected = Column(Boolean, default=False, nullable=False)
    access_token = Column(Text, nullable=False, default="")
    refresh_token = Column(Text, nullable=False, default="")

    automation_enabled = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    reviews = relationship("Review", back_populates="company", cascade="all, delete-orphan")

    __table_args__ = (
        Index('ix_companies_google_connected', 'google_connected'),
    )

    def __repr__(self):
        return f"<Company(id={self.id}, name={self.name}, google_connected={self.google_connected})>"


class Review(Base):
    """A Google review imported by the synchronizer"""
    __tablename__ = "reviews"

    # "{company_id}-{google review id}", so re-syncing overwrites instead of duplicating
    id = Column(String(512), primary_key=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)

    author = Column(String(255), nullable=False)
    rating = Column(Integer, nullable=False, default=0)
    comment = Column(Text, nullable=False, default="")

    answered = Column(Boolean, default=False, nullable=False)
    reply = Column(Text, nullable=True)

    # Copied from Google's createTime
    created_at = Column(DateTime, nullable=True)

    company = relationship("Company", back_populates="reviews")

    __table_args__ = (
        Index('ix_reviews_company_answered', 'company_id', 'answered'),
        Index('ix_reviews_created_at', 'created_at'),
    )

    def __repr__(self):
        return f"<Review(id={self.id}, rating={self.rating}, answered={self.answered})>"


class LogEntry(Base):
    """Operator-visible, append-only activity log"""
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)
    level = Column(String(20), nullable=False)  # info, warning, error
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('ix_logs_level_created', 'level', 'created_at'),
    )

    def __repr__(self):
        return f"<LogEntry(id={self.id}, level={self.level})>"


class SystemConfig(Base):
    """Integration credentials editable from the settings screen (single row)"""
    __tablename__ = "system_config"

    id = Column(Integer, primary_key=True)
    google_client_id = Column(String(255), nullable=False, default="")
    google_client_secret = Column(String(512), nullable=False, default="")
    openai_api_key = Column(String(512), nullable=False, default="")
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<SystemConfig(id={self.id})>"
