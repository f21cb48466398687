"""Template and generation domain types.

Shared by the pipeline service, the persistence adapters and the API.
"""

import datetime
import enum
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"


class TemplateKind(str, enum.Enum):
    """Kind of office document a template is."""

    SPREADSHEET = "spreadsheet"
    FLOW_DOCUMENT = "flow_document"

    @property
    def extension(self) -> str:
        return ".xlsx" if self is TemplateKind.SPREADSHEET else ".docx"

    @property
    def media_type(self) -> str:
        return XLSX_MEDIA_TYPE if self is TemplateKind.SPREADSHEET else DOCX_MEDIA_TYPE

    @classmethod
    def detect(cls, filename: str | None, content_type: str | None = None) -> "TemplateKind | None":
        """Guess the kind from a file name or MIME type.

        Args:
            filename: Uploaded file name.
            content_type: Declared MIME type, if any.

        Returns:
            The matching kind, or None for unsupported files.
        """
        suffix = PurePath(filename or "").suffix.lower()
        if suffix == ".xlsx" or content_type == XLSX_MEDIA_TYPE:
            return cls.SPREADSHEET
        if suffix == ".docx" or content_type == DOCX_MEDIA_TYPE:
            return cls.FLOW_DOCUMENT
        return None


class TargetFormat(str, enum.Enum):
    """Output format requested for a generation."""

    SOURCE = "source"
    DOCX = "docx"
    XLSX = "xlsx"
    PDF = "pdf"

    def resolve(self, kind: TemplateKind) -> "TargetFormat":
        """Map SOURCE (and the source extension) to the concrete format.

        Raises:
            ValueError: If a docx template is asked for xlsx output or
                the other way around.
        """
        if self is TargetFormat.PDF:
            return self
        native = TargetFormat.XLSX if kind is TemplateKind.SPREADSHEET else TargetFormat.DOCX
        if self in (TargetFormat.SOURCE, native):
            return native
        raise ValueError(f"Unsupported format '{self.value}' for a {kind.value} template")

    @property
    def media_type(self) -> str:
        return {
            TargetFormat.DOCX: DOCX_MEDIA_TYPE,
            TargetFormat.XLSX: XLSX_MEDIA_TYPE,
            TargetFormat.PDF: PDF_MEDIA_TYPE,
        }.get(self, "application/octet-stream")


@dataclass(frozen=True)
class TemplateDocument:
    """Template document metadata.

    Attributes:
        id: Opaque identifier.
        owner_id: The uploading user.
        kind: Spreadsheet or flow document.
        name: Original file name.
        file_path: Object storage path of the template bytes.
        size_bytes: Size of the uploaded file.
        placeholders: Names captured at upload time. Never re-scanned.
        use_count: Number of successful generations.
        upload_date: When the template was uploaded.
    """

    id: uuid.UUID
    owner_id: uuid.UUID
    kind: TemplateKind
    name: str
    file_path: str
    size_bytes: int
    placeholders: tuple[str, ...] = ()
    use_count: int = 0
    upload_date: datetime.datetime | None = None


@dataclass(frozen=True)
class GenerationRequest:
    """Transient input of a document generation.

    Attributes:
        template_id: The template to fill.
        values: Placeholder name to raw value (text, inline image data or
            structured image object).
        target_format: Requested output format.
    """

    template_id: uuid.UUID
    values: Mapping[str, Any] = field(default_factory=dict)
    target_format: TargetFormat = TargetFormat.SOURCE


@dataclass(frozen=True)
class GeneratedArtifact:
    """Output of a generation, persisted with a reference to its template.

    Attributes:
        id: Opaque identifier.
        template_id: The template the artifact was generated from.
        name: Download file name.
        format: Concrete output format.
        file_path: Object storage path of the artifact bytes.
        content: The artifact bytes.
        placeholder_data: JSON-safe summary of the values used.
    """

    id: uuid.UUID
    template_id: uuid.UUID
    name: str
    format: TargetFormat
    file_path: str
    content: bytes = field(repr=False)
    placeholder_data: dict[str, str] = field(default_factory=dict)

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    @property
    def media_type(self) -> str:
        return self.format.media_type
