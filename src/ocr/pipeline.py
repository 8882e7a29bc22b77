"""Recognition pipelines turning claim screenshots into card lookups.

Two variants share one loop and differ only in their region layout and in
how region texts are assembled into card records:

- ``CaptchaPipeline``: 3 regions -> 1 card (name, series, generation)
- ``DropPipeline``: 9 regions -> 3 cards; regions 0-5 are name/series pairs,
  regions 6-8 the generation of each card

Each loop takes one ``(image, reply)`` at a time, runs the OCR worker pool
over every region, and hands the assembled records plus the caller's reply
future to the entity resolver without waiting for the answer. The caller
awaits the reply; the pipeline moves on to the next image.

Example:
    >>> pipeline = DropPipeline(config.ocr.drop, resolver, config.ocr.engine)
    >>> asyncio.create_task(pipeline.run())
    >>> await pipeline.wait_ready()
    >>> payload = await pipeline.submit(Path("drop.png"))
"""

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from src.catalog.resolver import EntityResolver, ResolverClosedError
from src.common.bridge import HostBridge
from src.common.types import CardRecord

from .config_loader import OCREngineConfig, OCRModuleConfig, PipelineLayout
from .preprocessor import ImageSource, PreprocessingError, load_image
from .types import PipelineKind
from .worker_pool import OCRWorkerPool

logger = logging.getLogger(__name__)

_SHUTDOWN = object()

PoolFactory = Callable[[int, OCREngineConfig], OCRWorkerPool]


class PipelineClosedError(RuntimeError):
    """Raised when an image is submitted to a closed pipeline."""


class RecognitionPipeline:
    """Long-running recognition loop for one screen layout.

    Args:
        layout: Crop regions and pool size of this variant.
        resolver: Entity resolver receiving the assembled records.
        engine_config: Tesseract configuration for the pool.
        bridge: Optional host bridge notified once the pool is up.
        pool_factory: Builds the worker pool; ``OCRWorkerPool`` by default.

    Raises:
        ValueError: If the layout does not have the variant's region count.
    """

    kind: PipelineKind
    expected_regions: int

    def __init__(
        self,
        layout: PipelineLayout,
        resolver: EntityResolver,
        engine_config: Optional[OCREngineConfig] = None,
        bridge: Optional[HostBridge] = None,
        pool_factory: PoolFactory = OCRWorkerPool,
    ):
        if len(layout.regions) != self.expected_regions:
            raise ValueError(
                f"{self.kind.value} layout needs {self.expected_regions} regions, "
                f"got {len(layout.regions)}"
            )
        self.layout = layout
        self.resolver = resolver
        self.engine_config = engine_config or OCREngineConfig()
        self.bridge = bridge
        self.pool: Optional[OCRWorkerPool] = None
        self.processed = 0

        self._pool_factory = pool_factory
        self._inbox: "asyncio.Queue[object]" = asyncio.Queue()
        self._ready = asyncio.Event()
        self._closing = False

    @property
    def component(self) -> str:
        return f"{self.kind.value}_pipeline"

    def assemble(self, texts: Sequence[str]) -> List[CardRecord]:
        """Build card records from the region texts, in region order."""
        raise NotImplementedError

    def submit_nowait(self, image: ImageSource, reply: "asyncio.Future[str]") -> None:
        """Queue ``image``; the resolver's JSON answer arrives on ``reply``."""
        if self._closing:
            raise PipelineClosedError(f"{self.component} is closed")
        self._inbox.put_nowait((image, reply))

    async def submit(self, image: ImageSource) -> str:
        """Recognize ``image`` and wait for the resolved JSON payload."""
        reply: "asyncio.Future[str]" = asyncio.get_running_loop().create_future()
        self.submit_nowait(image, reply)
        return await reply

    def close(self) -> None:
        """Stop accepting images; queued images are still processed."""
        if self._closing:
            return
        self._closing = True
        self._inbox.put_nowait(_SHUTDOWN)
        logger.info(f"{self.component} closing")

    async def wait_ready(self) -> None:
        await self._ready.wait()

    async def run(self) -> None:
        """Start the worker pool, signal readiness, then serve the inbox.

        Raises:
            RuntimeError: If the OCR engines cannot be started.
        """
        loop = asyncio.get_running_loop()
        self.pool = await loop.run_in_executor(
            None, self._pool_factory, self.layout.pool_size, self.engine_config
        )
        self._ready.set()
        logger.info(
            f"{self.component} ready: {len(self.layout.regions)} regions, "
            f"{self.layout.pool_size} workers"
        )
        if self.bridge is not None:
            self.bridge.signal_ready(self.component)

        try:
            while True:
                item = await self._inbox.get()
                if item is _SHUTDOWN:
                    break
                image, reply = item
                await self._process(image, reply)
        finally:
            self._stop()

    def _stop(self) -> None:
        self._closing = True
        while not self._inbox.empty():
            item = self._inbox.get_nowait()
            if item is not _SHUTDOWN and not item[1].done():
                item[1].set_exception(PipelineClosedError(f"{self.component} stopped"))
        if self.pool is not None:
            self.pool.close()
        logger.info(f"{self.component} stopped after {self.processed} image(s)")

    async def _process(self, image: ImageSource, reply: "asyncio.Future[str]") -> None:
        if reply.done():
            logger.debug(f"{self.component}: caller went away, skipping image")
            return

        loop = asyncio.get_running_loop()
        try:
            texts = await loop.run_in_executor(None, self._recognize, image)
        except (PreprocessingError, TypeError, ValueError) as e:
            logger.warning(f"{self.component}: rejecting image: {e}")
            if not reply.done():
                reply.set_exception(e)
            return

        records = self.assemble(texts)
        self.processed += 1
        logger.debug(f"{self.component}: assembled {records}")

        try:
            self.resolver.submit_lookup(records, reply)
        except ResolverClosedError as e:
            if not reply.done():
                reply.set_exception(e)

    def _recognize(self, image: ImageSource) -> List[str]:
        return self.pool.recognize(load_image(image), self.layout.regions)


class CaptchaPipeline(RecognitionPipeline):
    """Single card claim screen: name, series, generation."""

    kind = PipelineKind.CAPTCHA
    expected_regions = 3

    def assemble(self, texts: Sequence[str]) -> List[CardRecord]:
        return [CardRecord(name=texts[0], series=texts[1], generation=texts[2])]


class DropPipeline(RecognitionPipeline):
    """Three-card drop screen: three name/series pairs, then three generations."""

    kind = PipelineKind.DROP
    expected_regions = 9

    def assemble(self, texts: Sequence[str]) -> List[CardRecord]:
        return [
            CardRecord(name=texts[i * 2], series=texts[i * 2 + 1], generation=texts[6 + i])
            for i in range(3)
        ]


def create_pipeline(
    kind: PipelineKind,
    config: OCRModuleConfig,
    resolver: EntityResolver,
    bridge: Optional[HostBridge] = None,
    pool_factory: PoolFactory = OCRWorkerPool,
) -> RecognitionPipeline:
    """Build the pipeline variant ``kind`` from the module configuration."""
    if kind == PipelineKind.CAPTCHA:
        return CaptchaPipeline(config.captcha, resolver, config.engine, bridge, pool_factory)
    return DropPipeline(config.drop, resolver, config.engine, bridge, pool_factory)
