"""Shared fixtures: in-memory documents and persistence fakes."""

import base64
import io
import uuid
from collections.abc import Callable

import pytest

from docfill.core.config import Settings
from docfill.core.factory import ComponentFactory
from docfill.interfaces.converter import BasePdfConverter, ConversionFailed
from docfill.interfaces.repository import BaseObjectStorage, BaseTemplateRepository
from docfill.interfaces.template import GeneratedArtifact, TemplateDocument

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


def build_docx(*paragraphs: str) -> bytes:
    """Build a .docx whose body holds one paragraph per string."""
    from docx import Document

    document = Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def build_xlsx(populate: Callable) -> bytes:
    """Build a .xlsx; ``populate`` receives the active worksheet."""
    from openpyxl import Workbook

    workbook = Workbook()
    populate(workbook.active)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def docx_text(data: bytes) -> str:
    """All paragraph text of a .docx, one paragraph per line."""
    from docx import Document

    return "\n".join(p.text for p in Document(io.BytesIO(data)).paragraphs)


class InMemoryRepository(BaseTemplateRepository):
    """Template repository kept in dictionaries."""

    def __init__(self) -> None:
        self.templates: dict[uuid.UUID, TemplateDocument] = {}
        self.artifacts: dict[uuid.UUID, tuple[GeneratedArtifact, uuid.UUID]] = {}
        self.fail_inserts = False
        self.fail_deletes = False

    async def insert_template(self, template: TemplateDocument) -> TemplateDocument:
        if self.fail_inserts:
            raise RuntimeError("database unavailable")
        self.templates[template.id] = template
        return template

    async def get_template(self, template_id, owner_id):
        template = self.templates.get(template_id)
        if template is None or template.owner_id != owner_id:
            return None
        return template

    async def increment_use_count(self, template_id) -> int:
        from dataclasses import replace

        template = self.templates[template_id]
        self.templates[template_id] = replace(template, use_count=template.use_count + 1)
        return template.use_count + 1

    async def insert_artifact(self, artifact, owner_id) -> None:
        if self.fail_inserts:
            raise RuntimeError("database unavailable")
        self.artifacts[artifact.id] = (artifact, owner_id)

    async def delete_template(self, template_id, owner_id) -> list[str] | None:
        if await self.get_template(template_id, owner_id) is None:
            return None
        if self.fail_deletes:
            raise RuntimeError("database unavailable")
        del self.templates[template_id]
        removed = [
            artifact.file_path
            for artifact, _ in self.artifacts.values()
            if artifact.template_id == template_id
        ]
        self.artifacts = {
            key: entry
            for key, entry in self.artifacts.items()
            if entry[0].template_id != template_id
        }
        return removed


class InMemoryStorage(BaseObjectStorage):
    """Object storage kept in a dictionary."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}

    async def upload(self, path: str, data: bytes) -> str:
        self.objects[path] = data
        return path

    async def download(self, path: str) -> bytes:
        if path not in self.objects:
            raise FileNotFoundError(path)
        return self.objects[path]

    async def delete(self, path: str) -> None:
        self.objects.pop(path, None)


class FakeConverter(BasePdfConverter):
    """Converter returning a canned PDF."""

    def __init__(self, available: bool = True, fail: bool = False) -> None:
        self.available = available
        self.fail = fail
        self.calls: list[tuple[bytes, str]] = []

    async def convert(self, data: bytes, original_file_name: str) -> bytes:
        self.calls.append((data, original_file_name))
        if self.fail:
            raise ConversionFailed(
                "LibreOffice conversion failed with code 1", stderr="source file could not be loaded"
            )
        return b"%PDF-1.4 fake"

    async def is_available(self) -> bool:
        return self.available


@pytest.fixture
def settings(tmp_path):
    """Settings rooted in a temporary directory."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'docfill.db'}",
        storage_dir=tmp_path / "storage",
        temp_dir=tmp_path / "conversions",
    )


@pytest.fixture
def converter():
    return FakeConverter()


@pytest.fixture
def factory(settings, converter):
    """Component factory whose PDF converter is a fake."""
    factory = ComponentFactory(settings)
    factory._converter_cache = converter
    return factory


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def storage():
    return InMemoryStorage()
