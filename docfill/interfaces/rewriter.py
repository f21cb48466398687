"""Document rewriting interfaces.

Rewriters take the original template bytes and a normalized value map and
return a new document with the placeholders substituted.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping

from docfill.interfaces.values import PlaceholderValue


class BaseDocumentRewriter(ABC):
    """Abstract base class for document rewriting strategies."""

    @abstractmethod
    async def rewrite(
        self,
        template: bytes,
        values: Mapping[str, PlaceholderValue],
    ) -> bytes:
        """Substitute placeholder values into a copy of the template.

        Args:
            template: The original template bytes.
            values: Placeholder name to normalized value.

        Returns:
            The rewritten document bytes.

        Raises:
            DocumentProcessingError: If the document cannot be rewritten.
        """

    @property
    @abstractmethod
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""

    @property
    @abstractmethod
    def media_type(self) -> str:
        """MIME type of the documents this rewriter produces."""


class DocumentProcessingError(Exception):
    """Exception raised when a document cannot be rewritten."""

    category = "processing"


class ImageProcessingError(DocumentProcessingError):
    """An image value could not be embedded."""

    category = "image"


class TemplateStructureError(DocumentProcessingError):
    """The template markup itself is malformed."""

    category = "template"
