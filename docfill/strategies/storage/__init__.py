"""Object storage implementations."""

from docfill.strategies.storage.local import LocalObjectStorage

__all__ = [
    "LocalObjectStorage",
]
