"""Filesystem object storage.

Stores template and artifact bytes under a root directory. Object paths are
relative, slash-separated and must stay inside the root.
"""

import asyncio
import logging
from pathlib import Path, PurePosixPath

from docfill.interfaces.repository import BaseObjectStorage, StorageError

logger = logging.getLogger(__name__)


class LocalObjectStorage(BaseObjectStorage):
    """Object storage backed by a local directory.

    Example:
        ```python
        storage = LocalObjectStorage(Path("./storage"))
        path = await storage.upload("owner/1700000000000-invoice.docx", data)
        data = await storage.download(path)
        ```
    """

    def __init__(self, root: Path, log: logging.Logger | None = None) -> None:
        self._root = Path(root).resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        self._log = log or logger

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, path: str) -> Path:
        """Map an object path to a file under the root.

        Raises:
            StorageError: If the path is empty, absolute or escapes the root.
        """
        relative = PurePosixPath(path.replace("\\", "/"))
        if not path or relative.is_absolute() or ".." in relative.parts:
            raise StorageError(f"Invalid storage path: {path!r}")

        target = (self._root / relative).resolve()
        if not target.is_relative_to(self._root):
            raise StorageError(f"Invalid storage path: {path!r}")
        return target

    async def upload(self, path: str, data: bytes) -> str:
        target = self.resolve(path)
        await asyncio.to_thread(self._write, target, data)
        self._log.info(f"Stored {len(data)} bytes at {path}")
        return path

    async def download(self, path: str) -> bytes:
        target = self.resolve(path)
        if not target.is_file():
            raise FileNotFoundError(f"No stored object at {path}")
        return await asyncio.to_thread(target.read_bytes)

    async def delete(self, path: str) -> None:
        target = self.resolve(path)
        try:
            target.unlink()
        except FileNotFoundError:
            self._log.debug(f"Nothing stored at {path}")
            return
        self._log.info(f"Deleted stored object {path}")

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
