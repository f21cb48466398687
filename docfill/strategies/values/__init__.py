"""Placeholder value normalization."""

from docfill.strategies.values.normalizer import (
    ValueNormalizer,
    looks_like_image_data,
    resolve_image_format,
    summarize_values,
)

__all__ = [
    "ValueNormalizer",
    "looks_like_image_data",
    "resolve_image_format",
    "summarize_values",
]
