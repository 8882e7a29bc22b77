"""Configuration loader with Pydantic validation for the catalog module.

Selects the persistence store and tunes the resolver.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from src.utils.io import load_yaml

from .store import CatalogStore, InMemoryCatalogStore, JsonCatalogStore


class StoreConfig(BaseModel):
    """Persistence store configuration.

    Attributes:
        type: "json" for a file-backed store, "memory" for a throwaway one
        path: JSON file location (type="json" only)
    """

    type: Literal["json", "memory"] = "json"
    path: Path = Path("data/catalog/analysis_characters.json")


class ResolverConfig(BaseModel):
    """Entity resolver configuration.

    Attributes:
        scan_workers: Threads used for the read-only catalog scan
        reply_limit: Maximum number of records serialized in a lookup reply
    """

    scan_workers: int = Field(default=4, gt=0)
    reply_limit: int = Field(default=3, gt=0)


class CatalogModuleConfig(BaseModel):
    """Complete catalog module configuration."""

    store: StoreConfig = StoreConfig()
    resolver: ResolverConfig = ResolverConfig()


def load_config(config_path: Path) -> CatalogModuleConfig:
    """Load and validate catalog configuration from YAML file.

    Raises:
        FileNotFoundError: If config file does not exist
        pydantic.ValidationError: If configuration validation fails
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    return CatalogModuleConfig(**load_yaml(config_path))


def get_default_config() -> CatalogModuleConfig:
    """Get default configuration from bundled config.yaml file."""
    default_config_path = Path(__file__).parent / "config.yaml"
    if default_config_path.exists():
        return load_config(default_config_path)
    return CatalogModuleConfig()


def build_store(config: StoreConfig) -> CatalogStore:
    """Instantiate the store described by ``config``."""
    if config.type == "memory":
        return InMemoryCatalogStore()
    return JsonCatalogStore(config.path)
