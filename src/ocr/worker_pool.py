"""Fixed-size pool of Tesseract workers.

Region ``i`` of a batch is always handled by worker ``i``; the regions of one
batch are recognized in parallel on a thread pool with one thread per worker.
Tesseract runs out of process, so the threads give real parallelism.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

import numpy as np

from .config_loader import CropRegion, OCREngineConfig
from .engine_tesseract import TesseractWorker
from .preprocessor import preprocess_region

logger = logging.getLogger(__name__)


class OCRWorkerPool:
    """Pool of independently configured OCR engine instances.

    Args:
        size: Number of engine instances.
        config: Engine configuration shared by every instance.

    Raises:
        RuntimeError: If any engine instance cannot be created.

    Example:
        >>> pool = OCRWorkerPool(3, OCREngineConfig())
        >>> pool.recognize(image, CAPTCHA_LAYOUT.regions)
        ['naruto', 'naruto', '1234']
    """

    def __init__(self, size: int, config: OCREngineConfig):
        if size <= 0:
            raise ValueError(f"Pool size must be positive, got {size}")
        self.workers: List[TesseractWorker] = [
            TesseractWorker(config) for _ in range(size)
        ]
        self._executor = ThreadPoolExecutor(
            max_workers=size, thread_name_prefix="ocr-worker"
        )
        logger.info(f"OCR worker pool started with {size} Tesseract instances")

    @property
    def size(self) -> int:
        return len(self.workers)

    def recognize(self, image: np.ndarray, regions: Sequence[CropRegion]) -> List[str]:
        """Recognize every region of ``image``.

        Args:
            image: Full captured screenshot.
            regions: Crop regions; those beyond the pool size are skipped.

        Returns:
            One text per region, "" for skipped or unreadable regions.

        Raises:
            PreprocessingError: If a region does not fit inside the image.
        """
        if len(regions) > self.size:
            logger.warning(
                f"{len(regions) - self.size} region(s) exceed pool size {self.size} "
                f"and will be skipped"
            )

        futures = [
            self._executor.submit(self._recognize_one, worker, image, region)
            for worker, region in zip(self.workers, regions)
        ]
        texts = [future.result() for future in futures]
        texts.extend("" for _ in range(len(regions) - len(texts)))

        logger.debug(f"Recognized regions: {texts}")
        return texts

    @staticmethod
    def _recognize_one(
        worker: TesseractWorker, image: np.ndarray, region: CropRegion
    ) -> str:
        png = preprocess_region(image, region)
        worker.configure(region.field_kind)
        return worker.recognize(png)

    def close(self) -> None:
        """Stop the worker threads."""
        self._executor.shutdown(wait=True)
        logger.info("OCR worker pool stopped")
