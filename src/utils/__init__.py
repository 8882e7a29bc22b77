"""
Shared Utilities

Common functions used across all modules.
"""

from src.utils.io import dump_compact_json, load_json, load_yaml, save_json
from src.utils.logging_config import setup_logging

__all__ = [
    "load_json",
    "save_json",
    "load_yaml",
    "dump_compact_json",
    "setup_logging",
]
