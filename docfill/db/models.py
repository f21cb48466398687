"""Database models using SQLModel.

Defines the persisted records of the generation pipeline:
- TemplateRecord: An uploaded template and the placeholders found in it
- GeneratedArtifactRecord: A document generated from a template
"""

import datetime
import uuid
from typing import Any

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JsonColumn = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class TemplateRecord(SQLModel, table=True):
    """Template model.

    Placeholders are captured once at upload time and never re-scanned.
    """

    __tablename__ = "templates"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, primary_key=True),
    )
    owner_id: uuid.UUID = Field(sa_column=Column(Uuid, nullable=False, index=True))
    name: str = Field(max_length=512)
    kind: str = Field(max_length=32)
    file_path: str = Field(max_length=1024)
    file_size: int = Field(default=0, ge=0)
    placeholders: list[str] = Field(
        default_factory=list,
        sa_column=Column(JsonColumn, nullable=False),
    )
    use_count: int = Field(default=0, ge=0)
    upload_date: datetime.datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )


class GeneratedArtifactRecord(SQLModel, table=True):
    """Generated artifact model.

    Stores where the artifact bytes live and a JSON-safe summary of the
    values used to produce it.
    """

    __tablename__ = "generated_artifacts"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, primary_key=True),
    )
    owner_id: uuid.UUID = Field(sa_column=Column(Uuid, nullable=False, index=True))
    template_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid,
            ForeignKey("templates.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    name: str = Field(max_length=512)
    format: str = Field(max_length=16)
    file_path: str = Field(max_length=1024)
    file_size: int = Field(default=0, ge=0)
    placeholder_data: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JsonColumn, nullable=False),
    )
    generated_date: datetime.datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )
