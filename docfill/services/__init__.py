"""Application services."""

from docfill.services.templates import (
    TemplateNotFoundError,
    TemplateService,
    UnsupportedTemplateError,
)

__all__ = [
    "TemplateNotFoundError",
    "TemplateService",
    "UnsupportedTemplateError",
]
