"""Database models and session management."""

from docfill.db.models import GeneratedArtifactRecord, TemplateRecord
from docfill.db.repository import SqlTemplateRepository
from docfill.db.session import (
    AsyncSession,
    close_db,
    create_all_tables,
    drop_all_tables,
    get_async_session,
)

__all__ = [
    # Models
    "TemplateRecord",
    "GeneratedArtifactRecord",
    # Repository
    "SqlTemplateRepository",
    # Session
    "AsyncSession",
    "get_async_session",
    "create_all_tables",
    "drop_all_tables",
    "close_db",
]
