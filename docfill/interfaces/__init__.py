"""Abstract base classes for document processing strategies."""

from docfill.interfaces.converter import (
    BasePdfConverter,
    ConversionFailed,
    ConversionUnavailable,
)
from docfill.interfaces.extractor import BasePlaceholderExtractor, ExtractionDegraded
from docfill.interfaces.repository import BaseObjectStorage, BaseTemplateRepository
from docfill.interfaces.rewriter import (
    BaseDocumentRewriter,
    DocumentProcessingError,
    ImageProcessingError,
    TemplateStructureError,
)
from docfill.interfaces.template import (
    GeneratedArtifact,
    GenerationRequest,
    TargetFormat,
    TemplateDocument,
    TemplateKind,
)
from docfill.interfaces.values import (
    BaseValueNormalizer,
    ImageDecodeError,
    ImageFormat,
    ImageInput,
    ImageValue,
    PlaceholderValue,
    TextValue,
)

__all__ = [
    "BasePdfConverter",
    "ConversionFailed",
    "ConversionUnavailable",
    "BasePlaceholderExtractor",
    "ExtractionDegraded",
    "BaseObjectStorage",
    "BaseTemplateRepository",
    "BaseDocumentRewriter",
    "DocumentProcessingError",
    "ImageProcessingError",
    "TemplateStructureError",
    "GeneratedArtifact",
    "GenerationRequest",
    "TargetFormat",
    "TemplateDocument",
    "TemplateKind",
    "BaseValueNormalizer",
    "ImageDecodeError",
    "ImageFormat",
    "ImageInput",
    "ImageValue",
    "PlaceholderValue",
    "TextValue",
]
