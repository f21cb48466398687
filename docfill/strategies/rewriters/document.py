"""Flow-document (Word) rewriter.

Renders a docxtpl template with the normalized values. Tags are looked up
by their trimmed name, so names may hold spaces or hyphens. Text values are
XML-escaped; image values become inline images placed where their tag
stood.
"""

import asyncio
import io
import logging
from collections.abc import Mapping
from typing import Any

from docfill.interfaces.rewriter import (
    BaseDocumentRewriter,
    DocumentProcessingError,
    ImageProcessingError,
    TemplateStructureError,
)
from docfill.interfaces.template import DOCX_MEDIA_TYPE
from docfill.interfaces.values import ImageValue, PlaceholderValue

logger = logging.getLogger(__name__)

EMU_PER_PIXEL = 9525  # 914400 EMU per inch / 96 dpi


def classify_error(error: Exception) -> DocumentProcessingError:
    """Wrap a tag engine failure in the matching error type."""
    from docx.image.exceptions import UnrecognizedImageError
    from jinja2 import TemplateError

    message = str(error) or type(error).__name__
    lowered = message.lower()

    if isinstance(error, UnrecognizedImageError):
        return ImageProcessingError(f"Image processing error: {message}")
    if isinstance(error, TemplateError):
        return TemplateStructureError(f"Template error: {message}")
    if "image" in lowered:
        return ImageProcessingError(f"Image processing error: {message}")
    if "template" in lowered:
        return TemplateStructureError(f"Template error: {message}")
    return DocumentProcessingError(message)


class DocxTagRewriter(BaseDocumentRewriter):
    """Rewrites .docx templates through docxtpl.

    Failures are always raised, classified as image, template or generic
    processing errors.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    async def rewrite(
        self,
        template: bytes,
        values: Mapping[str, PlaceholderValue],
    ) -> bytes:
        """Render the template with the given values.

        Args:
            template: The original .docx bytes.
            values: Placeholder name to normalized value.

        Returns:
            The rendered .docx bytes.

        Raises:
            ImageProcessingError: If an image cannot be embedded.
            TemplateStructureError: If the template markup is malformed.
            DocumentProcessingError: For any other failure, including an
                empty result.
        """
        return await asyncio.to_thread(self.rewrite_sync, template, values)

    def rewrite_sync(
        self,
        template: bytes,
        values: Mapping[str, PlaceholderValue],
    ) -> bytes:
        from docfill.strategies.placeholders.docx_tags import (
            PlaceholderDocxTemplate,
            lookup_context,
        )

        self._log.info(f"Starting Word document processing with {len(values)} values")

        try:
            document = PlaceholderDocxTemplate(io.BytesIO(template))
            context = self.build_context(document, values)
            # Text values are XML-escaped; inline images render as markup
            document.render(lookup_context(context), autoescape=True)

            buffer = io.BytesIO()
            document.save(buffer)
            output = buffer.getvalue()
        except DocumentProcessingError:
            raise
        except Exception as e:
            error = classify_error(e)
            self._log.error(f"Error processing Word template: {error}", exc_info=True)
            raise error from e

        if not output:
            raise DocumentProcessingError("Generated document is empty")

        self._log.info(f"Word document processed: {len(output)} bytes")
        return output

    def build_context(
        self,
        document: Any,
        values: Mapping[str, PlaceholderValue],
    ) -> dict[str, Any]:
        """Build the docxtpl context for a template.

        Args:
            document: The DocxTemplate the images will be embedded in.
            values: Placeholder name to normalized value.

        Returns:
            Tag name to string or ``InlineImage``.
        """
        context: dict[str, Any] = {}
        for key, value in values.items():
            if isinstance(value, ImageValue):
                context[key] = self._inline_image(document, key, value)
            else:
                context[key] = value.value
        return context

    def _inline_image(self, document: Any, key: str, image: ImageValue) -> Any:
        from docx.shared import Emu
        from docxtpl import InlineImage

        self._log.debug(
            f"Embedding {image.format.label} image for {key}: "
            f"{image.width}x{image.height}, {len(image.payload)} bytes"
        )
        return InlineImage(
            document,
            io.BytesIO(image.payload),
            width=Emu(image.width * EMU_PER_PIXEL),
            height=Emu(image.height * EMU_PER_PIXEL),
        )

    @property
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
        return {".docx"}

    @property
    def media_type(self) -> str:
        return DOCX_MEDIA_TYPE
