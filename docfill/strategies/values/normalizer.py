"""Value normalizer.

Classifies each user-supplied placeholder value as plain text or image.
Inline image data (``data:image/<type>;base64,<payload>``) is decoded into
an :class:`ImageValue`; structured image objects get their missing format,
dimensions and alt text backfilled.
"""

import base64
import binascii
import logging
import re
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from docfill.interfaces.values import (
    BaseValueNormalizer,
    ImageDecodeError,
    ImageFormat,
    ImageInput,
    ImageValue,
    PlaceholderValue,
    RawValue,
    TextValue,
)

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:image/([\w.+-]+);base64,(.*)$", re.DOTALL)

_FORMAT_ALIASES: dict[str, ImageFormat] = {
    "jpeg": ImageFormat.JPEG,
    "jpg": ImageFormat.JPEG,
    "png": ImageFormat.PNG,
    "gif": ImageFormat.GIF,
    "bmp": ImageFormat.BMP,
    "svg": ImageFormat.SVG,
    "svg+xml": ImageFormat.SVG,
}

IMAGE_ERROR_POLICIES = {"abort", "marker"}


def looks_like_image_data(value: Any) -> bool:
    """True for strings that announce inline base64 image data."""
    return isinstance(value, str) and value.startswith("data:image/") and "base64," in value


def resolve_image_format(type_name: str | None, log: logging.Logger | None = None) -> ImageFormat:
    """Map an image type string to a format, defaulting to PNG."""
    if not type_name:
        return ImageFormat.PNG
    image_format = _FORMAT_ALIASES.get(type_name.strip().lower())
    if image_format is None:
        (log or logger).warning(f"Unrecognized image type '{type_name}', defaulting to PNG")
        return ImageFormat.PNG
    return image_format


class ValueNormalizer(BaseValueNormalizer):
    """Normalizes raw placeholder values into text and image values.

    Decode failures follow ``image_error_policy``: ``"abort"`` raises
    :class:`ImageDecodeError`, ``"marker"`` substitutes a visible
    ``[Image Error: ...]`` text for the affected field.
    """

    def __init__(
        self,
        default_width: int = 400,
        default_height: int = 300,
        image_error_policy: str = "abort",
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the normalizer.

        Args:
            default_width: Width in pixels for images that carry none.
            default_height: Height in pixels for images that carry none.
            image_error_policy: ``"abort"`` or ``"marker"``.
            log: Logger for diagnostics. Defaults to the module logger.

        Raises:
            ValueError: If the policy or a default dimension is invalid.
        """
        if image_error_policy not in IMAGE_ERROR_POLICIES:
            raise ValueError(
                f"Unknown image_error_policy '{image_error_policy}'. "
                f"Valid options: {sorted(IMAGE_ERROR_POLICIES)}"
            )
        if default_width <= 0 or default_height <= 0:
            raise ValueError("Default image dimensions must be positive")

        self._default_width = default_width
        self._default_height = default_height
        self._policy = image_error_policy
        self._log = log or logger

    def normalize(self, raw: Mapping[str, RawValue]) -> dict[str, PlaceholderValue]:
        """Normalize a mapping of placeholder names to raw values.

        Args:
            raw: Placeholder name to string, inline image data, structured
                image object (model or ``{"_type": "image", ...}`` dict).

        Returns:
            Placeholder name to normalized value, in input order.

        Raises:
            ImageDecodeError: If inline image data is malformed and the
                policy is ``"abort"``.
        """
        normalized: dict[str, PlaceholderValue] = {}

        for key, value in raw.items():
            try:
                normalized[key] = self.normalize_value(key, value)
            except ImageDecodeError as e:
                if self._policy == "abort":
                    self._log.error(str(e))
                    raise
                self._log.warning(f"{e}; substituting an error marker")
                normalized[key] = TextValue(value=f"[Image Error: {e.reason}]")

        images = sum(isinstance(v, ImageValue) for v in normalized.values())
        self._log.info(f"Normalized {len(normalized)} values ({images} images)")
        return normalized

    def normalize_value(self, key: str, value: RawValue) -> PlaceholderValue:
        """Normalize a single value.

        Raises:
            ImageDecodeError: If the value is malformed image data.
        """
        if isinstance(value, (TextValue, ImageValue)):
            return value
        if isinstance(value, ImageInput):
            return self._from_image_input(key, value)
        if isinstance(value, Mapping):
            if value.get("_type") == "image" or value.get("kind") == "image":
                return self._from_mapping(key, value)
            return TextValue(value=str(value.get("value", "")))
        if looks_like_image_data(value):
            return self.decode_data_url(key, value)
        if value is None:
            return TextValue(value="")
        return TextValue(value=str(value))

    def decode_data_url(self, key: str, data_url: str) -> ImageValue:
        """Decode ``data:image/<type>;base64,<payload>`` into an image value.

        Raises:
            ImageDecodeError: If the URL is malformed, the payload is not
                valid base64, or it decodes to zero bytes.
        """
        match = DATA_URL_PATTERN.match(data_url)
        if match is None:
            raise ImageDecodeError(
                key,
                "Invalid data URL format. Expected format: data:image/[type];base64,[data]",
            )

        type_name, encoded = match.groups()
        encoded = "".join(encoded.split())
        if not encoded:
            raise ImageDecodeError(key, "Empty base64 data provided")

        try:
            payload = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageDecodeError(key, f"Invalid base64 data: {e}") from e

        if not payload:
            raise ImageDecodeError(key, "Decoded image is empty")

        image_format = resolve_image_format(type_name, self._log)
        self._log.debug(f"Decoded {image_format.label} image for {key}: {len(payload)} bytes")
        return ImageValue(
            payload=payload,
            format=image_format,
            width=self._default_width,
            height=self._default_height,
            alt_text=key,
        )

    def _from_image_input(self, key: str, image: ImageInput) -> ImageValue:
        if not image.payload:
            raise ImageDecodeError(key, "Image payload is empty")
        return ImageValue(
            payload=image.payload,
            format=image.format or ImageFormat.PNG,
            width=image.width or self._default_width,
            height=image.height or self._default_height,
            alt_text=image.alt_text if image.alt_text is not None else key,
        )

    def _from_mapping(self, key: str, value: Mapping[str, Any]) -> ImageValue:
        source = value.get("payload", value.get("source"))
        if isinstance(source, str):
            if looks_like_image_data(source):
                source = self.decode_data_url(key, source).payload
            else:
                try:
                    source = base64.b64decode(source, validate=True)
                except (binascii.Error, ValueError) as e:
                    raise ImageDecodeError(key, f"Invalid base64 data: {e}") from e

        raw_format = value.get("format")
        if isinstance(raw_format, str):
            raw_format = resolve_image_format(raw_format.removeprefix("image/"), self._log)

        try:
            image = ImageInput(
                payload=source or b"",
                format=raw_format,
                width=value.get("width"),
                height=value.get("height"),
                alt_text=value.get("alt_text", value.get("altText")),
            )
        except ValidationError as e:
            raise ImageDecodeError(key, f"Invalid image object: {e}") from e
        return self._from_image_input(key, image)


def summarize_values(values: Mapping[str, PlaceholderValue]) -> dict[str, str]:
    """JSON-safe summary of normalized values, stored with generated artifacts.

    Images are replaced by a short description such as ``[PNG Image - 12KB]``.
    """
    summary: dict[str, str] = {}
    for key, value in values.items():
        if isinstance(value, ImageValue):
            size_kb = round(len(value.payload) / 1024)
            summary[key] = f"[{value.format.label} Image - {size_kb}KB]"
        else:
            summary[key] = value.value
    return summary
