"""Concrete strategy implementations."""

from docfill.strategies.converters import (
    LibreOfficeConverter,
)
from docfill.strategies.extractors import (
    ByteHeuristicExtractor,
    ChainedExtractor,
    DocxTagExtractor,
    SpreadsheetPlaceholderExtractor,
    try_in_order,
)
from docfill.strategies.rewriters import (
    DocxTagRewriter,
    SpreadsheetRewriter,
)
from docfill.strategies.storage import (
    LocalObjectStorage,
)
from docfill.strategies.values import (
    ValueNormalizer,
)

__all__ = [
    "LibreOfficeConverter",
    "ByteHeuristicExtractor",
    "ChainedExtractor",
    "DocxTagExtractor",
    "SpreadsheetPlaceholderExtractor",
    "try_in_order",
    "DocxTagRewriter",
    "SpreadsheetRewriter",
    "LocalObjectStorage",
    "ValueNormalizer",
]
