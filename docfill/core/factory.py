"""Component Factory for strategy instantiation.

The Factory Pattern lets the pipeline pick the extractor, rewriter, value
normalizer, PDF converter and object storage at runtime from the template
kind and the configured settings.
"""

import logging

from docfill.core.config import Settings, get_settings
from docfill.interfaces.converter import BasePdfConverter
from docfill.interfaces.extractor import BasePlaceholderExtractor
from docfill.interfaces.repository import BaseObjectStorage
from docfill.interfaces.rewriter import BaseDocumentRewriter
from docfill.interfaces.template import TemplateKind
from docfill.interfaces.values import BaseValueNormalizer
from docfill.strategies.converters import LibreOfficeConverter
from docfill.strategies.extractors import (
    ByteHeuristicExtractor,
    DocxTagExtractor,
    SpreadsheetPlaceholderExtractor,
    try_in_order,
)
from docfill.strategies.rewriters import DocxTagRewriter, SpreadsheetRewriter
from docfill.strategies.storage import LocalObjectStorage
from docfill.strategies.values import ValueNormalizer

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    Example:
        ```python
        factory = ComponentFactory(get_settings())

        extractor = factory.get_extractor(TemplateKind.SPREADSHEET)
        rewriter = factory.get_rewriter(TemplateKind.FLOW_DOCUMENT)
        converter = factory.get_pdf_converter()
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._extractor_cache: dict[TemplateKind, BasePlaceholderExtractor] = {}
        self._rewriter_cache: dict[TemplateKind, BaseDocumentRewriter] = {}
        self._normalizer_cache: BaseValueNormalizer | None = None
        self._converter_cache: BasePdfConverter | None = None
        self._storage_cache: BaseObjectStorage | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_extractor(self, kind: TemplateKind) -> BasePlaceholderExtractor:
        """Get the placeholder extractor for a template kind.

        Args:
            kind: The template kind.

        Returns:
            A BasePlaceholderExtractor implementation instance.

        Raises:
            ValueError: If the kind is unknown.
        """
        if kind not in self._extractor_cache:
            logger.info(f"Instantiating extractor: {kind.value}")

            match kind:
                case TemplateKind.SPREADSHEET:
                    extractor = SpreadsheetPlaceholderExtractor()
                case TemplateKind.FLOW_DOCUMENT:
                    extractor = try_in_order(DocxTagExtractor(), ByteHeuristicExtractor())
                case _:
                    raise ValueError(
                        f"Unknown template kind: {kind}. "
                        f"Valid options: 'spreadsheet', 'flow_document'"
                    )
            self._extractor_cache[kind] = extractor

        return self._extractor_cache[kind]

    def get_rewriter(self, kind: TemplateKind) -> BaseDocumentRewriter:
        """Get the document rewriter for a template kind.

        Args:
            kind: The template kind.

        Returns:
            A BaseDocumentRewriter implementation instance.

        Raises:
            ValueError: If the kind is unknown.
        """
        if kind not in self._rewriter_cache:
            logger.info(f"Instantiating rewriter: {kind.value}")

            match kind:
                case TemplateKind.SPREADSHEET:
                    rewriter = SpreadsheetRewriter()
                case TemplateKind.FLOW_DOCUMENT:
                    rewriter = DocxTagRewriter()
                case _:
                    raise ValueError(
                        f"Unknown template kind: {kind}. "
                        f"Valid options: 'spreadsheet', 'flow_document'"
                    )
            self._rewriter_cache[kind] = rewriter

        return self._rewriter_cache[kind]

    def get_value_normalizer(self) -> BaseValueNormalizer:
        """Get the value normalizer configured from settings."""
        if self._normalizer_cache is None:
            logger.info(
                f"Instantiating value normalizer "
                f"(image_error_policy={self._settings.image_error_policy})"
            )

            self._normalizer_cache = ValueNormalizer(
                default_width=self._settings.default_image_width,
                default_height=self._settings.default_image_height,
                image_error_policy=self._settings.image_error_policy,
            )

        return self._normalizer_cache

    def get_pdf_converter(self) -> BasePdfConverter:
        """Get the PDF converter configured from settings."""
        if self._converter_cache is None:
            logger.info("Instantiating PDF converter: libreoffice")

            self._converter_cache = LibreOfficeConverter(
                command=self._settings.libreoffice_command,
                timeout=self._settings.conversion_timeout,
                availability_timeout=self._settings.availability_timeout,
                temp_dir=self._settings.temp_dir,
            )

        return self._converter_cache

    def get_object_storage(self) -> BaseObjectStorage:
        """Get the object storage rooted at the configured storage directory."""
        if self._storage_cache is None:
            logger.info(f"Instantiating object storage at {self._settings.storage_dir}")

            self._storage_cache = LocalObjectStorage(self._settings.storage_dir)

        return self._storage_cache

    def clear_cache(self) -> None:
        """Clear all cached component instances.

        This forces new instances to be created on next access.
        Useful for testing or when settings change.
        """
        self._extractor_cache.clear()
        self._rewriter_cache.clear()
        self._normalizer_cache = None
        self._converter_cache = None
        self._storage_cache = None
        logger.debug("Component factory cache cleared")


# Global factory instance
_factory: ComponentFactory | None = None


def get_factory() -> ComponentFactory:
    """Get or create the global ComponentFactory instance.

    Returns:
        The singleton ComponentFactory instance.
    """
    global _factory
    if _factory is None:
        _factory = ComponentFactory()
    return _factory
