"""Placeholder extraction interfaces.

Extractors statically scan an uploaded office document and report the set
of placeholder names it contains. Extraction is fail-open: a broken
document yields fewer placeholders, never a failed upload.
"""

from abc import ABC, abstractmethod


class BasePlaceholderExtractor(ABC):
    """Abstract base class for placeholder extraction strategies.

    Example:
        ```python
        class CsvPlaceholderExtractor(BasePlaceholderExtractor):
            async def extract(self, data: bytes) -> set[str]:
                # Implementation here
                pass
        ```
    """

    @abstractmethod
    async def extract(self, data: bytes) -> set[str]:
        """Extract placeholder names from raw document bytes.

        Args:
            data: The document content.

        Returns:
            The set of trimmed, non-empty placeholder names.

        Raises:
            ExtractionDegraded: Only strategies meant to be composed with a
                fallback raise; top-level extractors return what they found.
        """

    @property
    @abstractmethod
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""


class ExtractionDegraded(Exception):
    """Extraction partially or fully failed.

    Logged, never surfaced to the uploader.
    """
