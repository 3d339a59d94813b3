"""
Log Service - Operator-visible activity log
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from ..models.database import LogEntry
from ..models.schemas import LogLevel
from ..core.logging import get_logger

logger = get_logger(__name__)

_LEVELS = {
    LogLevel.INFO: logger.info,
    LogLevel.WARNING: logger.warning,
    LogLevel.ERROR: logger.error,
}


class LogService:
    """Service for the append-only log table"""

    @staticmethod
    def record(db: Session, level: LogLevel, message: str) -> LogEntry:
        """
        Append a log entry and mirror it to the application logger

        Args:
            db: Database session
            level: info, warning or error
            message: Free text

        Returns:
            Stored log entry
        """
        _LEVELS[LogLevel(level)](message)

        entry = LogEntry(level=LogLevel(level).value, message=message)
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def info(db: Session, message: str) -> LogEntry:
        return LogService.record(db, LogLevel.INFO, message)

    @staticmethod
    def warning(db: Session, message: str) -> LogEntry:
        return LogService.record(db, LogLevel.WARNING, message)

    @staticmethod
    def error(db: Session, message: str) -> LogEntry:
        return LogService.record(db, LogLevel.ERROR, message)

    @staticmethod
    def list_entries(db: Session, level: Optional[LogLevel] = None, limit: int = 100) -> List[LogEntry]:
        """List log entries, newest first"""
        query = db.query(LogEntry)
        if level is not None:
            query = query.filter(LogEntry.level == LogLevel(level).value)
        return query.order_by(LogEntry.created_at.desc(), LogEntry.id.desc()).limit(limit).all()


# Create singleton instance
log_service = LogService()
