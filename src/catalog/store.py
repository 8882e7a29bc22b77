"""Persistence stores for the card catalog.

The resolver only needs two operations from its store: read the whole
catalog once at startup, and upsert one entry keyed by ``(name, series)``.
Both are blocking calls; the resolver runs them on an executor.
"""

import logging
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from src.utils.io import load_json, save_json

from .types import CatalogEntry

logger = logging.getLogger(__name__)

StoreKey = Tuple[str, str]


class CatalogStoreError(RuntimeError):
    """Raised when the catalog cannot be read from or written to its store."""


class CatalogStore:
    """Persistence contract for the catalog."""

    def load_all(self) -> List[CatalogEntry]:
        """Return every stored entry."""
        raise NotImplementedError

    def upsert(self, entry: CatalogEntry) -> None:
        """Insert ``entry`` or set the rank of the stored ``(name, series)``."""
        raise NotImplementedError


class InMemoryCatalogStore(CatalogStore):
    """Store kept in a dict; used for tests and dry runs.

    Example:
        >>> store = InMemoryCatalogStore([CatalogEntry("naruto", "naruto", 5)])
        >>> store.upsert(CatalogEntry("naruto", "naruto", 7))
        >>> store.get("naruto", "naruto").rank
        7
    """

    def __init__(self, entries: Optional[Iterable[CatalogEntry]] = None):
        self._lock = threading.Lock()
        self._documents: Dict[StoreKey, CatalogEntry] = {}
        for entry in entries or []:
            self._documents[(entry.name, entry.series)] = _copy(entry)
        self.write_count = 0

    def load_all(self) -> List[CatalogEntry]:
        with self._lock:
            return [_copy(entry) for entry in self._documents.values()]

    def upsert(self, entry: CatalogEntry) -> None:
        with self._lock:
            self._documents[(entry.name, entry.series)] = _copy(entry)
            self.write_count += 1

    def get(self, name: str, series: str) -> Optional[CatalogEntry]:
        with self._lock:
            entry = self._documents.get((name, series))
            return _copy(entry) if entry is not None else None


class JsonCatalogStore(CatalogStore):
    """Store backed by a JSON file holding a list of documents.

    Documents have the shape ``{"name": str, "series": str, "wl": int | null}``.
    A missing file is an empty catalog. Writes rewrite the file atomically
    under a lock, so concurrent upserts from executor threads are safe.

    Args:
        path: Location of the JSON file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def load_all(self) -> List[CatalogEntry]:
        with self._lock:
            documents = self._read_documents()
        entries = []
        for document in documents:
            try:
                entries.append(CatalogEntry.from_document(document))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed catalog document {document!r}: {e}")
        logger.info(f"Loaded {len(entries)} catalog entries from {self.path}")
        return entries

    def upsert(self, entry: CatalogEntry) -> None:
        with self._lock:
            documents = self._read_documents()
            for document in documents:
                if document.get("name") == entry.name and document.get("series") == entry.series:
                    document["wl"] = entry.rank
                    break
            else:
                documents.append(entry.to_document())
            try:
                save_json(documents, self.path)
            except OSError as e:
                raise CatalogStoreError(f"Cannot write catalog file {self.path}: {e}") from e

    def _read_documents(self) -> List[dict]:
        if not self.path.exists():
            return []
        try:
            documents = load_json(self.path)
        except (OSError, ValueError) as e:
            raise CatalogStoreError(f"Cannot read catalog file {self.path}: {e}") from e
        if not isinstance(documents, list):
            raise CatalogStoreError(
                f"Catalog file {self.path} must hold a JSON list, got {type(documents).__name__}"
            )
        return documents


def _copy(entry: CatalogEntry) -> CatalogEntry:
    return CatalogEntry(name=entry.name, series=entry.series, rank=entry.rank)
