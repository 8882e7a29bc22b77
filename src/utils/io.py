"""
I/O Utilities

File input/output operations.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

import yaml


def load_json(file_path: Path) -> Any:
    """Load JSON file."""
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def save_json(data: Any, file_path: Path, indent: int = 2):
    """Save data to JSON file, replacing any existing file atomically."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        os.replace(tmp_name, file_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def load_yaml(file_path: Path) -> Dict[str, Any]:
    """Load YAML file."""
    with open(file_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def dump_compact_json(data: List[Dict[str, Any]]) -> str:
    """Serialize to compact JSON text (no whitespace, unicode kept)."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
