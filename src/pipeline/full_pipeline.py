"""
Full End-to-End Pipeline

Wires the entity resolver and both recognition pipelines together behind one
service object, gates traffic until every component is ready, and provides a
command line entry point that runs screenshots through a pipeline variant.
"""

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional

from src.catalog.config_loader import CatalogModuleConfig, build_store
from src.catalog.config_loader import get_default_config as get_default_catalog_config
from src.catalog.config_loader import load_config as load_catalog_config
from src.catalog.resolver import EntityResolver
from src.catalog.store import CatalogStore
from src.catalog.wishlist_parser import WishlistEmbed, parse_wishlist_embed
from src.common.bridge import QueueBridge
from src.common.types import CardRecord
from src.ocr.config_loader import Config
from src.ocr.config_loader import get_default_config as get_default_ocr_config
from src.ocr.config_loader import load_config as load_ocr_config
from src.ocr.pipeline import PoolFactory, RecognitionPipeline, create_pipeline
from src.ocr.preprocessor import ImageSource
from src.ocr.types import PipelineKind
from src.ocr.worker_pool import OCRWorkerPool
from src.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


class CardScanService:
    """Resolver plus captcha and drop pipelines, run as asyncio tasks.

    Example:
        >>> service = CardScanService()
        >>> await service.start()
        >>> payload = await service.recognize_drop(Path("drop.png"))
        >>> await service.close()
    """

    def __init__(
        self,
        ocr_config: Optional[Config] = None,
        catalog_config: Optional[CatalogModuleConfig] = None,
        store: Optional[CatalogStore] = None,
        bridge: Optional[QueueBridge] = None,
        pool_factory: PoolFactory = OCRWorkerPool,
    ):
        self.ocr_config = ocr_config or get_default_ocr_config()
        self.catalog_config = catalog_config or get_default_catalog_config()
        self.bridge = bridge or QueueBridge()
        self.resolver = EntityResolver(
            store or build_store(self.catalog_config.store),
            self.catalog_config.resolver,
            self.bridge,
        )
        self.pipelines: Dict[PipelineKind, RecognitionPipeline] = {
            kind: create_pipeline(
                kind, self.ocr_config.ocr, self.resolver, self.bridge, pool_factory
            )
            for kind in PipelineKind
        }
        self._tasks: List[asyncio.Task] = []

    @property
    def components(self) -> List[str]:
        return [EntityResolver.COMPONENT] + [p.component for p in self.pipelines.values()]

    async def start(self) -> None:
        """Launch every component and wait until all signalled ready.

        Raises:
            CatalogStoreError: If the catalog cannot be loaded.
            RuntimeError: If the OCR engines cannot be started.
        """
        self._tasks = [asyncio.create_task(self.resolver.run(), name="resolver")]
        self._tasks.extend(
            asyncio.create_task(pipeline.run(), name=pipeline.component)
            for pipeline in self.pipelines.values()
        )

        ready = asyncio.create_task(self.bridge.wait_until_ready(self.components))
        done, _ = await asyncio.wait(
            [ready, *self._tasks], return_when=asyncio.FIRST_COMPLETED
        )
        if ready not in done:
            # A component exited before the service came up: startup failure
            ready.cancel()
            failed = next(iter(done))
            await self._cancel_tasks()
            failed.result()
            raise RuntimeError(f"Component {failed.get_name()} exited during startup")
        logger.info("Card scan service ready")

    async def recognize_captcha(self, image: ImageSource) -> str:
        return await self.pipelines[PipelineKind.CAPTCHA].submit(image)

    async def recognize_drop(self, image: ImageSource) -> str:
        return await self.pipelines[PipelineKind.DROP].submit(image)

    def update_card(self, record: CardRecord) -> None:
        """Submit a rank-bearing record to the catalog; no reply."""
        self.resolver.submit_update(record)

    def update_from_embed(self, embed: WishlistEmbed) -> int:
        """Submit every card of a wishlist embed; returns how many were sent."""
        records = parse_wishlist_embed(embed)
        for record in records:
            self.update_card(record)
        return len(records)

    async def close(self) -> None:
        """Stop the pipelines, then the resolver, and wait for persistence."""
        for pipeline in self.pipelines.values():
            pipeline.close()
        await asyncio.gather(
            *(t for t in self._tasks if t.get_name() != "resolver"), return_exceptions=True
        )
        self.resolver.close()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        await self.resolver.flush()
        self.bridge.close()
        logger.info("Card scan service stopped")

    async def _cancel_tasks(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)


async def _run(args: argparse.Namespace) -> int:
    ocr_config = load_ocr_config(Path(args.ocr_config)) if args.ocr_config else None
    catalog_config = (
        load_catalog_config(Path(args.catalog_config)) if args.catalog_config else None
    )
    service = CardScanService(ocr_config=ocr_config, catalog_config=catalog_config)
    await service.start()

    kind = PipelineKind(args.variant)
    pipeline = service.pipelines[kind]
    failures = 0
    try:
        replies = await asyncio.gather(
            *(pipeline.submit(Path(path)) for path in args.images), return_exceptions=True
        )
        for path, reply in zip(args.images, replies):
            if isinstance(reply, Exception):
                failures += 1
                logger.error(f"{path}: {reply}")
            else:
                print(f"{path}\t{reply}")
    finally:
        await service.close()
    return 1 if failures else 0


def main():
    parser = argparse.ArgumentParser(
        description="Recognize cards on claim screenshots and resolve their wishlist rank"
    )
    parser.add_argument("images", nargs="+", help="Screenshot files")
    parser.add_argument(
        "--variant",
        choices=[kind.value for kind in PipelineKind],
        default=PipelineKind.DROP.value,
        help="Screen layout of the screenshots",
    )
    parser.add_argument("--ocr-config", type=str, default=None, help="OCR config YAML")
    parser.add_argument("--catalog-config", type=str, default=None, help="Catalog config YAML")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level")
    args = parser.parse_args()

    setup_logging(args.log_level.upper())
    raise SystemExit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
