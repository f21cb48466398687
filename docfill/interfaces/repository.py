"""Persistence interfaces for templates and generated artifacts.

The pipeline only needs a handful of operations from the relational store
and the object store; these abstract classes pin them down so that the
SQL and filesystem adapters can be swapped for other backends.
"""

import uuid
from abc import ABC, abstractmethod

from docfill.interfaces.template import GeneratedArtifact, TemplateDocument


class BaseTemplateRepository(ABC):
    """Relational persistence of template and artifact records."""

    @abstractmethod
    async def insert_template(self, template: TemplateDocument) -> TemplateDocument:
        """Persist a new template record."""

    @abstractmethod
    async def get_template(
        self, template_id: uuid.UUID, owner_id: uuid.UUID
    ) -> TemplateDocument | None:
        """Fetch a template owned by ``owner_id``, or None."""

    @abstractmethod
    async def increment_use_count(self, template_id: uuid.UUID) -> int:
        """Increment and return the template's use count."""

    @abstractmethod
    async def insert_artifact(
        self, artifact: GeneratedArtifact, owner_id: uuid.UUID
    ) -> None:
        """Persist a generated artifact record (without its bytes)."""

    @abstractmethod
    async def delete_template(
        self, template_id: uuid.UUID, owner_id: uuid.UUID
    ) -> list[str] | None:
        """Delete a template and its artifact records.

        Returns:
            The storage paths of the deleted artifacts, or None if the
            template does not exist for the owner.
        """


class BaseObjectStorage(ABC):
    """Object storage for template and artifact bytes."""

    @abstractmethod
    async def upload(self, path: str, data: bytes) -> str:
        """Store bytes under ``path`` and return the stored path."""

    @abstractmethod
    async def download(self, path: str) -> bytes:
        """Return the bytes stored under ``path``.

        Raises:
            FileNotFoundError: If nothing is stored there.
        """

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Remove the object stored under ``path`` if it exists."""


class StorageError(Exception):
    """Exception raised when the object store rejects an operation."""
