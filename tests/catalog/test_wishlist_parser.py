"""Unit tests for wishlist message parsing."""

from src.catalog.wishlist_parser import (
    EmbedKind,
    WishlistEmbed,
    classify_embed,
    parse_wishlist_embed,
)
from src.common.types import CardRecord


SORTED_DESCRIPTION = "\n".join(
    [
        "Cards carried by <@123>",
        "",
        "`vb7k2` · ★★☆☆ · #431 · ◈2 > `  452` • **Naruto Uzumaki** •  *Naruto*",
        "`x91kd` · ★☆☆☆ · #12 · ◈1 > `   17` • **Levi** •  *Shingeki no Kyojin*",
    ]
)

LEADERBOARD_DESCRIPTION = "\n".join(
    [
        "1. <:wl:1> `9811` • **Rem** • *Re:Zero kara Hajimeru Isekai Seikatsu*",
        "2. <:wl:1> `452` • **Naruto Uzumaki** • *Naruto*",
    ]
)

CARD_DETAIL_DESCRIPTION = "\n".join(
    [
        "**Series ➜** Naruto",
        "**Category ➜** Anime",
        "",
        "**Wishlisted ➜** `452`",
        "**Generated ➜** `1204`",
        "**Burned ➜** `880`",
        "**3D ➜** `0`",
        "**Card ID:** `vb7k2`",
    ]
)


class TestClassifyEmbed:
    """Test embed classification."""

    def test_sorted_by_wishlist(self):
        """Test card listings sorted by wishlist are recognized."""
        embed = WishlistEmbed(title="Card Collection (Sort By: Wishlist)")
        assert classify_embed(embed) == EmbedKind.SORTED_BY_WISHLIST

    def test_character_leaderboard(self):
        """Test the leaderboard title must match exactly."""
        assert (
            classify_embed(WishlistEmbed(title="WISHLIST LEADERBOARD - CHARACTERS"))
            == EmbedKind.CHARACTER_LEADERBOARD
        )
        assert (
            classify_embed(WishlistEmbed(title="WISHLIST LEADERBOARD - SERIES"))
            == EmbedKind.UNSUPPORTED
        )

    def test_series_collection(self):
        """Test collection pages are found by their description."""
        embed = WishlistEmbed(title="Naruto", description="Cards Collected: 3/120")
        assert classify_embed(embed) == EmbedKind.SERIES_COLLECTION

    def test_empty_embed(self):
        """Test an embed without text is unsupported."""
        assert classify_embed(WishlistEmbed()) == EmbedKind.UNSUPPORTED


class TestParseWishlistEmbed:
    """Test record extraction."""

    def test_sorted_rows(self):
        """Test every well-formed listing row becomes a record."""
        embed = WishlistEmbed(
            title="Card Collection (Sort By: Wishlist)", description=SORTED_DESCRIPTION
        )
        assert parse_wishlist_embed(embed) == [
            CardRecord(name="Naruto Uzumaki", series="Naruto", rank=452),
            CardRecord(name="Levi", series="Shingeki no Kyojin", rank=17),
        ]

    def test_leaderboard_rows(self):
        """Test leaderboard rows are parsed."""
        embed = WishlistEmbed(
            title="WISHLIST LEADERBOARD - CHARACTERS", description=LEADERBOARD_DESCRIPTION
        )
        assert parse_wishlist_embed(embed) == [
            CardRecord(name="Rem", series="Re:Zero kara Hajimeru Isekai Seikatsu", rank=9811),
            CardRecord(name="Naruto Uzumaki", series="Naruto", rank=452),
        ]

    def test_collection_rows(self):
        """Test collection rows take the series from the title."""
        embed = WishlistEmbed(
            title="Naruto",
            description="Cards Collected: 2/120",
            field_values=[
                "**Naruto Uzumaki** · ❤️ `452`\n**Sakura Haruno** · ❤️ `1,203`\n**Kakashi Hatake** · ❤️ `98`"
            ],
        )
        assert parse_wishlist_embed(embed) == [
            CardRecord(name="Naruto Uzumaki", series="Naruto", rank=452),
            CardRecord(name="Kakashi Hatake", series="Naruto", rank=98),
        ]

    def test_collection_without_fields(self):
        """Test a collection page without card field yields nothing."""
        embed = WishlistEmbed(title="Naruto", description="Cards Collected: 0/120")
        assert parse_wishlist_embed(embed) == []

    def test_malformed_rows_skipped(self):
        """Test rows missing markers or with bad ranks are skipped."""
        embed = WishlistEmbed(
            title="WISHLIST LEADERBOARD - CHARACTERS",
            description="garbage row\n3. <:wl:1> `n/a` • **Levi** • *Shingeki no Kyojin*",
        )
        assert parse_wishlist_embed(embed) == []

    def test_card_detail(self):
        """Test a card detail page yields its name, series and wishlist count."""
        embed = WishlistEmbed(title="Naruto Uzumaki", description=CARD_DETAIL_DESCRIPTION)
        assert classify_embed(embed) == EmbedKind.CARD_DETAIL
        assert parse_wishlist_embed(embed) == [
            CardRecord(name="Naruto Uzumaki", series="Naruto", rank=452)
        ]

    def test_card_detail_malformed(self):
        """Test a card detail page without the wishlist line yields nothing."""
        embed = WishlistEmbed(
            title="Naruto Uzumaki",
            description="**Series ➜** Naruto\n\n**Card ID:** `vb7k2`",
        )
        assert parse_wishlist_embed(embed) == []

    def test_card_detail_without_title(self):
        """Test the name is required."""
        embed = WishlistEmbed(description=CARD_DETAIL_DESCRIPTION)
        assert parse_wishlist_embed(embed) == []

    def test_unsupported(self):
        """Test unsupported embeds produce no records."""
        embed = WishlistEmbed(title="Card Details", description="Owned by <@1>")
        assert parse_wishlist_embed(embed) == []
