"""Type definitions for the catalog module.

This module defines catalog entries, the transient normalized comparison key,
the resolver lifecycle states and the messages accepted by the resolver's
mailbox.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from src.common.types import CardRecord


@dataclass
class CatalogEntry:
    """Known card and its wishlist rank, mirrored to persistent storage.

    Attributes:
        name: Character name as stored
        series: Series name as stored
        rank: Wishlist rank, if known
    """

    name: str
    series: str
    rank: Optional[int] = None

    def to_document(self) -> dict:
        return {"name": self.name, "series": self.series, "wl": self.rank}

    @classmethod
    def from_document(cls, document: dict) -> "CatalogEntry":
        rank = document.get("wl")
        return cls(
            name=str(document["name"]),
            series=str(document["series"]),
            rank=int(rank) if rank is not None else None,
        )

    @classmethod
    def from_record(cls, record: CardRecord) -> "CatalogEntry":
        return cls(name=record.name, series=record.series, rank=record.rank)


@dataclass(frozen=True)
class NormalizedKey:
    """Comparable form of a text field.

    Attributes:
        text: Normalized text used for comparison
        truncated: Whether the field ended in an ellipsis (prefix match)
    """

    text: str
    truncated: bool = False


class ResolverState(Enum):
    """Lifecycle state of the entity resolver."""

    LOADING = "loading"  # Catalog being read from the store
    READY = "ready"  # Serving lookups and upserts
    STOPPED = "stopped"  # Closed, no longer accepting work


@dataclass
class LookupRequest:
    """Resolve ``records`` against the catalog and answer on ``reply``."""

    records: List[CardRecord]
    reply: "asyncio.Future[str]"


@dataclass
class UpsertRequest:
    """Merge ``record`` (with a known rank) into the catalog."""

    record: CardRecord
