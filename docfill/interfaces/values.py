"""Placeholder value types and the value normalization interface.

A placeholder value is either plain text or an image that the document
rewriters embed (flow documents) or describe with a marker (spreadsheets).
"""

import enum
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ImageFormat(str, enum.Enum):
    """Image formats accepted as placeholder values."""

    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"
    BMP = "bmp"
    SVG = "svg"

    @property
    def mime_type(self) -> str:
        """MIME type of the format (``image/svg+xml`` for SVG)."""
        if self is ImageFormat.SVG:
            return "image/svg+xml"
        return f"image/{self.value}"

    @property
    def label(self) -> str:
        """Upper-case label used in human-readable markers."""
        return self.name


class TextValue(BaseModel):
    """A plain text placeholder value, substituted verbatim."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: str = Field(description="Text inserted in place of the placeholder")


class ImageValue(BaseModel):
    """An image placeholder value with its decoded payload."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    payload: bytes = Field(description="Raw image bytes")
    format: ImageFormat = Field(default=ImageFormat.PNG)
    width: int = Field(gt=0, description="Rendered width in pixels")
    height: int = Field(gt=0, description="Rendered height in pixels")
    alt_text: str = Field(default="", description="Alternative text for the image")

    @field_validator("payload")
    @classmethod
    def payload_not_empty(cls, v: bytes) -> bytes:
        """An image without bytes cannot be embedded."""
        if not v:
            raise ValueError("Image payload must not be empty")
        return v


class ImageInput(BaseModel):
    """A structured image object supplied by a caller.

    Missing format, dimensions and alt text are backfilled by the
    normalizer.
    """

    payload: bytes
    format: ImageFormat | None = None
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    alt_text: str | None = None


PlaceholderValue = TextValue | ImageValue

RawValue = str | ImageInput | ImageValue | Mapping[str, Any]


class ImageDecodeError(Exception):
    """Raised when inline image data for a placeholder cannot be decoded."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Image processing failed for {key}: {reason}")


class BaseValueNormalizer(ABC):
    """Abstract base class for value normalization strategies.

    Turns the loosely typed values a caller supplies into
    ``TextValue``/``ImageValue`` instances the rewriters understand.
    """

    @abstractmethod
    def normalize(self, raw: Mapping[str, RawValue]) -> dict[str, PlaceholderValue]:
        """Normalize a mapping of placeholder names to raw values.

        Args:
            raw: Placeholder name to string, inline image data or
                structured image object.

        Returns:
            Placeholder name to normalized value.

        Raises:
            ImageDecodeError: If inline image data is malformed.
        """
