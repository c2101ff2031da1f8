"""
Key/value media for the document-store adapter.

A medium maps a collection key to one serialized JSON text. Absent keys read
as ``None``. Media failures surface as :class:`StorageUnavailable`.
"""

import asyncio
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from ..exceptions import StorageUnavailable

logger = logging.getLogger(__name__)


class DocumentStore(ABC):
    """Async string store keyed by collection name."""

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """Return the stored text for ``key`` or ``None`` when absent."""

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Replace the stored text for ``key``."""

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Drop ``key``; absent keys are ignored."""

    async def close(self) -> None:
        """Release the medium."""


class MemoryDocumentStore(DocumentStore):
    """Process-memory store, used for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __repr__(self) -> str:
        return f"<MemoryDocumentStore(keys={sorted(self._items)})>"


class FileDocumentStore(DocumentStore):
    """
    One ``<key>.json`` file per collection inside ``directory``.

    Writes go to a temporary file in the same directory and are moved into
    place with :func:`os.replace`, so a reader never sees a half-written
    blob. Blocking file I/O runs in a worker thread.
    """

    def __init__(self, directory: Union[str, Path], encoding: str = "utf-8"):
        self.directory = Path(directory)
        self.encoding = encoding

    def path_for(self, key: str) -> Path:
        """Return the file backing ``key``."""
        return self.directory / f"{key}.json"

    def _read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding=self.encoding)

    def _write(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.directory, prefix=f".{key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding=self.encoding) as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path_for(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _unlink(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)

    async def get_item(self, key: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._read, key)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {self.path_for(key)}: {e}")
            raise StorageUnavailable(
                f"Could not read collection {key}",
                collection=key,
                operation="read",
                original_error=e,
            )

    async def set_item(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._write, key, value)
        except OSError as e:
            logger.error(f"Failed to write {self.path_for(key)}: {e}")
            raise StorageUnavailable(
                f"Could not write collection {key}",
                collection=key,
                operation="write",
                original_error=e,
            )

    async def remove_item(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._unlink, key)
        except OSError as e:
            logger.error(f"Failed to remove {self.path_for(key)}: {e}")
            raise StorageUnavailable(
                f"Could not remove collection {key}",
                collection=key,
                operation="remove",
                original_error=e,
            )

    def __repr__(self) -> str:
        return f"<FileDocumentStore(directory='{self.directory}')>"
