"""Template upload and document generation pipeline.

Upload:   detect kind -> extract placeholders -> store bytes -> insert record
Generate: fetch record and bytes -> normalize values -> rewrite by kind
          -> [convert to PDF] -> store artifact -> insert artifact record
          -> increment use count

Extraction is fail-open: an upload never fails because placeholders could
not be found. Generation is fail-closed: any error propagates and nothing is
persisted.
"""

import datetime
import logging
import uuid
from collections.abc import Callable
from pathlib import PurePath

from docfill.core.factory import ComponentFactory, get_factory
from docfill.interfaces.converter import ConversionUnavailable
from docfill.interfaces.repository import BaseObjectStorage, BaseTemplateRepository
from docfill.interfaces.template import (
    GeneratedArtifact,
    GenerationRequest,
    TargetFormat,
    TemplateDocument,
    TemplateKind,
)
from docfill.strategies.values import summarize_values

logger = logging.getLogger(__name__)


class TemplateNotFoundError(Exception):
    """Exception raised when a template id is unknown to its owner."""

    def __init__(self, template_id: uuid.UUID) -> None:
        self.template_id = template_id
        super().__init__(f"Template not found: {template_id}")


class UnsupportedTemplateError(Exception):
    """Exception raised for uploads that are neither .docx nor .xlsx."""


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def storage_path(owner_id: uuid.UUID, file_name: str, now: datetime.datetime) -> str:
    """Object path ``<owner>/<epoch_ms>-<file_name>``."""
    epoch_ms = int(now.timestamp() * 1000)
    return f"{owner_id}/{epoch_ms}-{PurePath(file_name).name}"


def artifact_name(template_name: str, target: TargetFormat, now: datetime.datetime) -> str:
    """Download name ``<template base>_<YYYY-MM-DD>.<ext>``."""
    base = PurePath(template_name).stem or "document"
    return f"{base}_{now.date().isoformat()}.{target.value}"


class TemplateService:
    """Runs the upload and generation pipeline.

    Example:
        ```python
        service = TemplateService(SqlTemplateRepository(session), storage)
        template = await service.upload_template(owner_id, "invoice.xlsx", data)
        artifact = await service.generate(
            owner_id,
            GenerationRequest(template.id, {"name": "Ada"}, TargetFormat.PDF),
        )
        ```
    """

    def __init__(
        self,
        repository: BaseTemplateRepository,
        storage: BaseObjectStorage,
        factory: ComponentFactory | None = None,
        clock: Callable[[], datetime.datetime] = _utcnow,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Template and artifact records.
            storage: Template and artifact bytes.
            factory: Source of extractors, rewriters, normalizer and
                converter. If None, uses the global factory.
            clock: Returns the current time; used for names and paths.
            log: Logger for diagnostics. Defaults to the module logger.
        """
        self._repository = repository
        self._storage = storage
        self._factory = factory or get_factory()
        self._clock = clock
        self._log = log or logger

    async def extract_placeholders(
        self,
        filename: str,
        data: bytes,
        content_type: str | None = None,
    ) -> tuple[TemplateKind, list[str]]:
        """Find the placeholder names in a template without storing it.

        Returns:
            The template kind and the sorted placeholder names.

        Raises:
            UnsupportedTemplateError: If the file is not .docx or .xlsx.
        """
        kind = self._detect_kind(filename, content_type)
        extractor = self._factory.get_extractor(kind)
        placeholders = sorted(await extractor.extract(data))
        self._log.info(f"Found {len(placeholders)} placeholders in {filename}")
        return kind, placeholders

    async def upload_template(
        self,
        owner_id: uuid.UUID,
        filename: str,
        data: bytes,
        content_type: str | None = None,
    ) -> TemplateDocument:
        """Store a new template with the placeholders found in it.

        Args:
            owner_id: The uploading user.
            filename: Original file name.
            data: The template bytes.
            content_type: Declared MIME type, if any.

        Returns:
            The persisted template record.

        Raises:
            UnsupportedTemplateError: If the file is not .docx or .xlsx.
        """
        kind, placeholders = await self.extract_placeholders(filename, data, content_type)

        name = PurePath(filename.replace("\\", "/")).name
        path = storage_path(owner_id, name, self._clock())
        await self._storage.upload(path, data)

        template = TemplateDocument(
            id=uuid.uuid4(),
            owner_id=owner_id,
            kind=kind,
            name=name,
            file_path=path,
            size_bytes=len(data),
            placeholders=tuple(placeholders),
        )

        try:
            stored = await self._repository.insert_template(template)
        except Exception as e:
            self._log.error(f"Failed to save template record for {name}: {e}", exc_info=True)
            await self._discard(path)
            raise

        self._log.info(
            f"Uploaded template {stored.id} ({kind.value}, {len(placeholders)} placeholders)"
        )
        return stored

    async def generate(
        self,
        owner_id: uuid.UUID,
        request: GenerationRequest,
    ) -> GeneratedArtifact:
        """Generate a document from a template.

        Args:
            owner_id: The requesting user; must own the template.
            request: Template id, raw values and target format.

        Returns:
            The persisted artifact, including its bytes.

        Raises:
            TemplateNotFoundError: If the template does not exist for the owner.
            ValueError: If the target format does not fit the template kind.
            ImageDecodeError: If inline image data is malformed and the
                policy is to abort.
            DocumentProcessingError: If the template cannot be rewritten.
            ConversionUnavailable: If PDF was requested and LibreOffice is missing.
            ConversionFailed: If the PDF conversion fails.
        """
        template = await self._repository.get_template(request.template_id, owner_id)
        if template is None:
            raise TemplateNotFoundError(request.template_id)

        target = request.target_format.resolve(template.kind)
        converter = None
        if target is TargetFormat.PDF:
            converter = self._factory.get_pdf_converter()
            if not await converter.is_available():
                raise ConversionUnavailable(
                    "PDF conversion service is not available. LibreOffice may not be installed."
                )

        self._log.info(
            f"Generating {target.value} from template {template.id} "
            f"with {len(request.values)} values"
        )

        source = await self._storage.download(template.file_path)
        values = self._factory.get_value_normalizer().normalize(request.values)
        content = await self._factory.get_rewriter(template.kind).rewrite(source, values)

        if converter is not None:
            source_name = f"{PurePath(template.name).stem}{template.kind.extension}"
            content = await converter.convert(content, source_name)

        now = self._clock()
        name = artifact_name(template.name, target, now)
        path = storage_path(owner_id, name, now)
        artifact = GeneratedArtifact(
            id=uuid.uuid4(),
            template_id=template.id,
            name=name,
            format=target,
            file_path=path,
            content=content,
            placeholder_data=summarize_values(values),
        )

        await self._storage.upload(path, content)
        try:
            await self._repository.insert_artifact(artifact, owner_id)
        except Exception as e:
            self._log.error(f"Failed to save artifact record for {name}: {e}", exc_info=True)
            await self._discard(path)
            raise

        use_count = await self._repository.increment_use_count(template.id)
        self._log.info(
            f"Generated {name} ({artifact.size_bytes} bytes); template used {use_count} times"
        )
        return artifact

    async def delete_template(self, owner_id: uuid.UUID, template_id: uuid.UUID) -> None:
        """Delete a template and its artifacts, records first, then stored files.

        Stored files are only removed once the records are gone, so a failed
        record deletion never leaves a record pointing at missing bytes.

        Raises:
            TemplateNotFoundError: If the template does not exist for the owner.
        """
        template = await self._repository.get_template(template_id, owner_id)
        if template is None:
            raise TemplateNotFoundError(template_id)

        artifact_paths = await self._repository.delete_template(template_id, owner_id)
        if artifact_paths is None:
            raise TemplateNotFoundError(template_id)

        for path in (template.file_path, *artifact_paths):
            await self._discard(path)
        self._log.info(
            f"Deleted template {template_id} with {len(artifact_paths)} generated artifacts"
        )

    def _detect_kind(self, filename: str, content_type: str | None) -> TemplateKind:
        kind = TemplateKind.detect(filename, content_type)
        if kind is None:
            raise UnsupportedTemplateError(
                f"Unsupported template type: {filename}. Only .docx and .xlsx are accepted"
            )
        return kind

    async def _discard(self, path: str) -> None:
        try:
            await self._storage.delete(path)
        except Exception as e:
            self._log.warning(f"Failed to remove stored file {path}: {e}")
