"""Database models, API schemas and Google payload records"""

from .database import Company, Review, LogEntry, SystemConfig

__all__ = [
    "Company",
    "Review",
    "LogEntry",
    "SystemConfig",
]
