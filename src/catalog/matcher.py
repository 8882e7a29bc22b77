"""Text normalization and OCR-tolerant matching of card fields.

OCR of the claim screen regularly confuses a handful of glyphs (``o``/``0``,
``l``/``i``, ``s``/``5`` ...) and the game cuts long names off with an
ellipsis. Matching therefore:

1. Normalizes both sides, turning a trailing ``...`` into a *truncated* flag
   that switches equality to prefix matching.
2. Tolerates exactly one differing character position, provided the two
   characters form a known confusable pair.

Example:
    >>> key = normalize("Sailor M...")
    >>> key
    NormalizedKey(text='sailorm', truncated=True)
    >>> check_match("sailormoon", key.text, key.truncated)
    True
    >>> check_match("naruto", "narut0", False)
    True
"""

import re
from typing import FrozenSet

from .types import NormalizedKey

ELLIPSIS = "..."

# Unordered pairs of characters commonly mis-recognized for one another
CONFUSABLE_PAIRS: FrozenSet[FrozenSet[str]] = frozenset(
    frozenset(pair)
    for pair in [
        ("o", "0"),
        ("l", "i"),
        ("1", "]"),
        ("y", "v"),
        ("$", "s"),
        ("i", "!"),
        ("s", "5"),
        ("©", "o"),
        ("1", "i"),
        ("a", "é"),
    ]
)

_NOT_ALNUM_OR_DOT = re.compile(r"[^a-z0-9.]")
_NOT_ALPHA_OR_DOT = re.compile(r"[^a-z.]")
_LONG_DOT_RUN = re.compile(r"\.{4,}")


def normalize(text: str) -> NormalizedKey:
    """Normalize an OCR or catalog field for fuzzy matching.

    Keeps ASCII letters, digits and periods (lowercased), collapses runs of
    four or more periods to three, completes a trailing ``..`` to ``...``
    and strips a trailing ``...`` into the ``truncated`` flag.

    Args:
        text: Raw field text.

    Returns:
        NormalizedKey with comparable text and truncation flag.
    """
    cleaned = _NOT_ALNUM_OR_DOT.sub("", text.lower())
    cleaned = _LONG_DOT_RUN.sub(ELLIPSIS, cleaned)
    if cleaned.endswith("..") and not cleaned.endswith(ELLIPSIS):
        cleaned += "."

    if cleaned.endswith(ELLIPSIS):
        return NormalizedKey(text=cleaned[: -len(ELLIPSIS)], truncated=True)
    return NormalizedKey(text=cleaned, truncated=False)


def normalize_lite(text: str) -> NormalizedKey:
    """Normalize a field arriving with a catalog update.

    Updates come from bot messages rather than OCR, so digits are dropped
    and an ellipsis is folded into a single period instead of being removed.
    """
    cleaned = _NOT_ALPHA_OR_DOT.sub("", text.lower())
    return NormalizedKey(
        text=cleaned.replace(ELLIPSIS, "."),
        truncated=text.endswith(ELLIPSIS),
    )


def identity_key(text: str) -> str:
    """Case- and spacing-insensitive form of a stored field.

    Unlike ``normalize_lite`` this keeps digits and non-ASCII characters, so
    two distinct cards ("Android 17", "Android 18") never share a key.
    """
    return " ".join(text.casefold().split())


def is_confusable(a: str, b: str) -> bool:
    """Whether ``a`` and ``b`` are a known OCR confusion pair."""
    return frozenset((a, b)) in CONFUSABLE_PAIRS


def check_equal(candidate: str, query: str, truncated: bool) -> bool:
    """Exact match, or prefix match when ``query`` was truncated."""
    if truncated:
        return candidate.startswith(query)
    return candidate == query


def check_match(candidate: str, query: str, truncated: bool) -> bool:
    """Match tolerating one confusable character substitution.

    Args:
        candidate: Normalized catalog text.
        query: Normalized OCR text.
        truncated: Whether ``query`` was truncated (prefix match).

    Returns:
        True if the texts are equal, or equal after removing the single
        position where they differ by a confusable pair.
    """
    if check_equal(candidate, query, truncated):
        return True

    diff_at = -1
    for i, (c1, c2) in enumerate(zip(candidate, query)):
        if c1 != c2:
            if diff_at >= 0:
                return False
            diff_at = i

    if diff_at < 0 or not is_confusable(candidate[diff_at], query[diff_at]):
        return False

    return check_equal(
        candidate[:diff_at] + candidate[diff_at + 1 :],
        query[:diff_at] + query[diff_at + 1 :],
        truncated,
    )
