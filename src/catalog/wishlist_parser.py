"""Parse game-bot wishlist messages into catalog updates.

The catalog ranks are harvested from four kinds of bot embeds:

1. A player's card listing sorted by wishlist
   (title contains ``(Sort By: Wishlist)``), one card per description line:
   ``... > `  452` • **Naruto Uzumaki** •  *Naruto*``
2. The character leaderboard (title ``WISHLIST LEADERBOARD - CHARACTERS``):
   ``... > `452` • **Naruto Uzumaki** • *Naruto*``
3. A series collection page (description contains ``Cards Collected:``),
   cards listed in the first field, the series in the title:
   ``**Naruto Uzumaki** ... ❤️ `452` ``
4. A card detail page (description contains ``Card ID:``), the name in the
   title and one ``**Label ➜** value`` line per attribute: series on the
   first non-blank line, wishlist count on the third.

Rows that do not follow the expected shape are skipped.

Example:
    >>> embed = WishlistEmbed(
    ...     title="WISHLIST LEADERBOARD - CHARACTERS",
    ...     description="1. <:wl:1> `452` • **Naruto Uzumaki** • *Naruto*",
    ... )
    >>> parse_wishlist_embed(embed)
    [CardRecord(name='Naruto Uzumaki', series='Naruto', generation=None, rank=452)]
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from src.common.types import CardRecord

logger = logging.getLogger(__name__)


class EmbedKind(Enum):
    """Kind of wishlist embed."""

    SORTED_BY_WISHLIST = "sorted_by_wishlist"
    CHARACTER_LEADERBOARD = "character_leaderboard"
    SERIES_COLLECTION = "series_collection"
    CARD_DETAIL = "card_detail"
    UNSUPPORTED = "unsupported"


@dataclass
class WishlistEmbed:
    """Text content of a bot embed.

    Attributes:
        title: Embed title
        description: Embed description
        field_values: Values of the embed fields, in order
    """

    title: Optional[str] = None
    description: Optional[str] = None
    field_values: List[str] = field(default_factory=list)


def classify_embed(embed: WishlistEmbed) -> EmbedKind:
    title = embed.title or ""
    description = embed.description or ""
    if "(Sort By: Wishlist)" in title:
        return EmbedKind.SORTED_BY_WISHLIST
    if title == "WISHLIST LEADERBOARD - CHARACTERS":
        return EmbedKind.CHARACTER_LEADERBOARD
    if "Cards Collected:" in description:
        return EmbedKind.SERIES_COLLECTION
    if "Card ID:" in description:
        return EmbedKind.CARD_DETAIL
    return EmbedKind.UNSUPPORTED


def _between(text: str, start: str, end: str) -> str:
    """Text after the first ``start`` up to the following ``end``."""
    _, found, rest = text.partition(start)
    if not found:
        raise ValueError(f"{start!r} not found")
    return rest.split(end, 1)[0]


def _parse_sorted_row(row: str) -> CardRecord:
    return CardRecord(
        name=_between(row, "**", "**").strip(),
        series=_between(row, "•  *", "*").strip(),
        rank=int(_between(row, "> `", "`").strip()),
    )


def _parse_leaderboard_row(row: str) -> CardRecord:
    return CardRecord(
        name=_between(row, "` • **", "** • *"),
        series=_between(row, "** • *", "*"),
        rank=int(_between(row, "> `", "`").strip()),
    )


def _parse_collection_row(row: str, series: str) -> CardRecord:
    return CardRecord(
        name=_between(row, "**", "**").strip(),
        series=series,
        rank=int(_between(row, "❤️ `", "`").strip()),
    )


def _parse_card_detail(title: str, description: str) -> CardRecord:
    rows = [row for row in description.split("\n") if row.strip()]
    if len(rows) < 3:
        raise ValueError(f"expected at least 3 lines, got {len(rows)}")
    series_parts = rows[0].split("**")
    if len(series_parts) < 3:
        raise ValueError("series line has no '**Label**' prefix")
    return CardRecord(
        name=title.strip(),
        series=series_parts[2].strip(),
        rank=int(_between(rows[2], "➜** `", "`").strip()),
    )


def parse_wishlist_embed(embed: WishlistEmbed) -> List[CardRecord]:
    """Extract rank-bearing card records from a wishlist embed.

    Args:
        embed: Title, description and field values of the message embed.

    Returns:
        One CardRecord per well-formed row; empty for unsupported embeds.
    """
    kind = classify_embed(embed)
    if kind == EmbedKind.SORTED_BY_WISHLIST:
        rows = (embed.description or "").split("\n")
        parse = _parse_sorted_row
    elif kind == EmbedKind.CHARACTER_LEADERBOARD:
        rows = (embed.description or "").split("\n")
        parse = _parse_leaderboard_row
    elif kind == EmbedKind.SERIES_COLLECTION:
        series = (embed.title or "").strip()
        if not series or not embed.field_values:
            return []
        rows = embed.field_values[0].split("\n")

        def parse(row: str) -> CardRecord:
            return _parse_collection_row(row, series)

    elif kind == EmbedKind.CARD_DETAIL:
        title = (embed.title or "").strip()
        if not title:
            return []
        try:
            return [_parse_card_detail(title, embed.description or "")]
        except ValueError as e:
            logger.debug(f"Skipping malformed card detail embed {title!r}: {e}")
            return []
    else:
        return []

    records = []
    for row in rows:
        if not row.strip():
            continue
        try:
            records.append(parse(row))
        except ValueError as e:
            logger.debug(f"Skipping malformed {kind.value} row {row!r}: {e}")

    logger.debug(f"Parsed {len(records)} record(s) from {kind.value} embed")
    return records
