"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from docfill.interfaces.template import TargetFormat, TemplateDocument, TemplateKind


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(description="Error message")
    details: str | None = Field(default=None, description="Underlying cause, when known")


# =============================================================================
# PDF Service Schemas
# =============================================================================


class PdfServiceHealthResponse(BaseModel):
    """Response for the PDF service health check."""

    status: str = Field(description="'healthy' or 'unavailable'")
    libreoffice: bool = Field(description="Whether LibreOffice answered the version check")
    timestamp: datetime


# =============================================================================
# Template Schemas
# =============================================================================


class PlaceholderExtractionResponse(BaseModel):
    """Response for stateless placeholder extraction."""

    filename: str
    kind: TemplateKind
    placeholders: list[str] = Field(default_factory=list)


class TemplateResponse(BaseModel):
    """Response schema for a stored template."""

    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    kind: TemplateKind
    file_path: str
    size_bytes: int
    placeholders: list[str] = Field(default_factory=list)
    use_count: int = 0
    upload_date: datetime | None = None

    @classmethod
    def from_document(cls, template: TemplateDocument) -> "TemplateResponse":
        return cls(
            id=template.id,
            owner_id=template.owner_id,
            name=template.name,
            kind=template.kind,
            file_path=template.file_path,
            size_bytes=template.size_bytes,
            placeholders=list(template.placeholders),
            use_count=template.use_count,
            upload_date=template.upload_date,
        )


class GenerateRequest(BaseModel):
    """Request schema for document generation."""

    values: dict[str, Any] = Field(
        default_factory=dict,
        description=(
            "Placeholder name to value: plain text, a data:image/...;base64 URL, "
            "or an image object {\"_type\": \"image\", \"source\": ..., \"width\": ...}"
        ),
    )
    format: TargetFormat = Field(
        default=TargetFormat.SOURCE,
        description="Output format: 'source', 'docx', 'xlsx' or 'pdf'",
    )
