"""
Common type definitions shared by the recognition and catalog modules.

A ``CardRecord`` is what the recognition pipelines produce from raw OCR text
and what the entity resolver consumes, enriches and serializes back to the
caller.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CardRecord:
    """
    One card as read from a claim screen (or from a wishlist message).

    Attributes:
        name: Character name as recognized (lowercased OCR text).
        series: Series name as recognized.
        generation: Print generation read from the numeric id field, if any.
        rank: Wishlist rank ("wl"). Absent until resolved against the catalog.

    Example:
        >>> record = CardRecord(name="naruto", series="naruto", generation="1234")
        >>> record.with_rank(5).to_reply_dict()
        {'name': 'naruto', 'series': 'naruto', 'wl': 5, 'gen': '1234'}
    """

    name: str
    series: str
    generation: Optional[str] = None
    rank: Optional[int] = None

    def with_rank(self, rank: Optional[int]) -> "CardRecord":
        """Return a copy of this record carrying ``rank``."""
        return replace(self, rank=rank)

    def to_reply_dict(self) -> Dict[str, Any]:
        """Serialize to the reply payload shape sent back to the host."""
        return {
            "name": self.name,
            "series": self.series,
            "wl": self.rank,
            "gen": self.generation if self.generation is not None else "",
        }
