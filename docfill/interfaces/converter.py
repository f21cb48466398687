"""PDF conversion interfaces.

Conversion is delegated to an external headless office process, so two
failure modes are kept apart: the service being unavailable, and one
particular document failing to convert.
"""

from abc import ABC, abstractmethod


class BasePdfConverter(ABC):
    """Abstract base class for PDF conversion strategies."""

    @abstractmethod
    async def convert(self, data: bytes, original_file_name: str) -> bytes:
        """Convert an office document to PDF.

        Args:
            data: The document bytes.
            original_file_name: Name of the document; its stem names the PDF.

        Returns:
            The PDF bytes.

        Raises:
            ConversionUnavailable: If the converter cannot be invoked.
            ConversionFailed: If the conversion itself fails.
        """

    @abstractmethod
    async def is_available(self) -> bool:
        """Cheap check telling whether conversions can be attempted."""


class ConversionUnavailable(Exception):
    """The external converter binary cannot be located or invoked."""


class ConversionFailed(Exception):
    """The converter ran but did not produce a usable PDF.

    Attributes:
        stdout: Captured standard output of the converter process.
        stderr: Captured standard error of the converter process.
    """

    def __init__(self, message: str, stdout: str = "", stderr: str = "") -> None:
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr
