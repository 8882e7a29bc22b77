"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

from typing import List, Sequence

import pytest


class ScriptedOCRPool:
    """Stand-in for OCRWorkerPool that returns pre-scripted region texts.

    Every call to ``recognize`` pops the next script; when the script is an
    exception instance it is raised instead.
    """

    def __init__(self, size, config, scripts):
        self.size = size
        self.config = config
        self.scripts = scripts
        self.images = []
        self.closed = False

    def recognize(self, image, regions) -> List[str]:
        self.images.append(image)
        script = self.scripts.pop(0)
        if isinstance(script, Exception):
            raise script
        return list(script)

    def close(self):
        self.closed = True


class ScriptedPoolFactory:
    """Callable matching ``OCRWorkerPool(size, config)`` that builds scripted pools."""

    def __init__(self, *scripts: Sequence[str]):
        self.scripts = list(scripts)
        self.pools: List[ScriptedOCRPool] = []

    def __call__(self, size, config):
        pool = ScriptedOCRPool(size, config, self.scripts)
        self.pools.append(pool)
        return pool


@pytest.fixture
def scripted_pool_factory():
    """Fixture providing the ScriptedPoolFactory class."""
    return ScriptedPoolFactory


@pytest.fixture
def drop_screenshot():
    """Fixture providing a synthetic drop screenshot (BGR) with dark card bands."""
    import cv2
    import numpy as np

    image = np.full((540, 1050, 3), 40, dtype=np.uint8)
    for x in (12, 361, 704):
        cv2.rectangle(image, (x, 427), (x + 290, 513), (60, 50, 45), -1)
        cv2.putText(
            image, "NARUTO", (x + 10, 478), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (80, 80, 80), 1
        )
    return image


@pytest.fixture
def catalog_entries():
    """Fixture providing a small catalog."""
    from src.catalog.types import CatalogEntry

    return [
        CatalogEntry(name="Naruto", series="Naruto...", rank=5),
        CatalogEntry(name="Sailor Moon", series="Bishoujo Senshi Sailor Moon", rank=120),
        CatalogEntry(name="Lelouch Lamperouge", series="Code Geass", rank=88),
        CatalogEntry(name="Levi", series="Shingeki no Kyojin", rank=None),
    ]
