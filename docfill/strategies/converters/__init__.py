"""Concrete PDF converter implementations."""

from docfill.strategies.converters.libreoffice import LibreOfficeConverter

__all__ = [
    "LibreOfficeConverter",
]
