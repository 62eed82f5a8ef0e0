"""File-backed song index store implementing IIndexStore.

The whole index is serialized as one camelCase JSON document (the shape
the frontend consumes) and written to a temporary sibling file before
being moved into place, so readers never observe a half-written index.
File I/O runs in a worker thread via ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import structlog
from pydantic import ValidationError

from src.interfaces.index_store import IIndexStore
from src.models.song_index import SongIndex
from src.utils.errors import IndexStoreError

logger = structlog.get_logger(logger_name=__name__)


class JsonIndexStore(IIndexStore):
    """Persist a :class:`SongIndex` to a single JSON file.

    Parameters
    ----------
    path:
        Location of the index file.  Parent directories are created on
        first save.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    # -- Sync helpers (executed via asyncio.to_thread) -------------------------

    def _load_sync(self) -> SongIndex | None:
        if not self._path.exists():
            return None
        try:
            raw = self._path.read_text(encoding="utf-8")
            return SongIndex.model_validate_json(raw)
        except (OSError, UnicodeDecodeError, ValidationError) as exc:
            raise IndexStoreError(
                message=f"Could not read song index at {self._path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def _save_sync(self, index: SongIndex) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                index.model_dump_json(by_alias=True, indent=2),
                encoding="utf-8",
            )
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise IndexStoreError(
                message=f"Could not write song index to {self._path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    # -- IIndexStore implementation --------------------------------------------

    async def load(self) -> SongIndex | None:
        index = await asyncio.to_thread(self._load_sync)
        if index is None:
            logger.info("index_store_empty", path=str(self._path))
        else:
            logger.info(
                "index_store_loaded",
                path=str(self._path),
                songs=len(index.songs),
                last_updated=index.last_updated.isoformat(),
            )
        return index

    async def save(self, index: SongIndex) -> None:
        await asyncio.to_thread(self._save_sync, index)
        logger.info("index_store_saved", path=str(self._path), songs=len(index.songs))

    def get_provider_name(self) -> str:
        return "json_index_store"
