"""Card catalog: fuzzy matching, persistence and the entity resolver.

Core Components:
    - matcher: Normalization and confusable-tolerant matching
    - store: Persistence stores (in-memory, JSON file)
    - resolver: Single-owner actor serving lookups and upserts
    - wishlist_parser: Catalog updates from bot wishlist messages
    - config_loader: Configuration loading with Pydantic validation
"""

from .config_loader import (
    CatalogModuleConfig,
    ResolverConfig,
    StoreConfig,
    build_store,
    get_default_config,
    load_config,
)
from .matcher import (
    CONFUSABLE_PAIRS,
    check_equal,
    check_match,
    identity_key,
    is_confusable,
    normalize,
    normalize_lite,
)
from .resolver import EntityResolver, ResolverClosedError
from .store import (
    CatalogStore,
    CatalogStoreError,
    InMemoryCatalogStore,
    JsonCatalogStore,
)
from .types import (
    CatalogEntry,
    LookupRequest,
    NormalizedKey,
    ResolverState,
    UpsertRequest,
)
from .wishlist_parser import EmbedKind, WishlistEmbed, classify_embed, parse_wishlist_embed

__all__ = [
    # Types
    "CatalogEntry",
    "NormalizedKey",
    "ResolverState",
    "LookupRequest",
    "UpsertRequest",
    # Configuration
    "CatalogModuleConfig",
    "StoreConfig",
    "ResolverConfig",
    "load_config",
    "get_default_config",
    "build_store",
    # Matching
    "CONFUSABLE_PAIRS",
    "normalize",
    "normalize_lite",
    "is_confusable",
    "check_equal",
    "check_match",
    "identity_key",
    # Stores
    "CatalogStore",
    "CatalogStoreError",
    "InMemoryCatalogStore",
    "JsonCatalogStore",
    # Resolver
    "EntityResolver",
    "ResolverClosedError",
    # Wishlist messages
    "EmbedKind",
    "WishlistEmbed",
    "classify_embed",
    "parse_wishlist_embed",
]
