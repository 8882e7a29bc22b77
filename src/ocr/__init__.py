"""OCR of game-card claim screens.

This module crops the known text fields out of a claim screenshot, enhances
them for Tesseract, recognizes them on a pool of engine instances and
assembles the texts into card records for catalog resolution.

Core Components:
    - types: Field kinds and pipeline variants
    - config_loader: Configuration loading with Pydantic validation
    - preprocessor: Crop, luminance, contrast boost, padding, PNG encoding
    - engine_tesseract: One Tesseract engine instance
    - worker_pool: Data-parallel pool of engine instances
    - pipeline: Captcha and drop recognition loops

Example:
    >>> from src.ocr import DropPipeline, get_default_config
    >>> config = get_default_config()
    >>> pipeline = DropPipeline(config.ocr.drop, resolver, config.ocr.engine)
"""

from .config_loader import (
    CAPTCHA_LAYOUT,
    DROP_LAYOUT,
    Config,
    CropRegion,
    OCREngineConfig,
    OCRModuleConfig,
    PipelineLayout,
    get_default_config,
    load_config,
)
from .engine_tesseract import TesseractWorker
from .pipeline import (
    CaptchaPipeline,
    DropPipeline,
    PipelineClosedError,
    RecognitionPipeline,
    create_pipeline,
)
from .preprocessor import (
    PreprocessingError,
    boost_contrast,
    crop_region,
    encode_png,
    enhance_region,
    load_image,
    pad_region,
    preprocess_region,
    to_luminance,
)
from .types import FieldKind, PipelineKind
from .worker_pool import OCRWorkerPool

__all__ = [
    # Types
    "FieldKind",
    "PipelineKind",
    # Configuration
    "Config",
    "OCRModuleConfig",
    "OCREngineConfig",
    "CropRegion",
    "PipelineLayout",
    "CAPTCHA_LAYOUT",
    "DROP_LAYOUT",
    "load_config",
    "get_default_config",
    # Preprocessing
    "PreprocessingError",
    "load_image",
    "crop_region",
    "to_luminance",
    "boost_contrast",
    "pad_region",
    "enhance_region",
    "encode_png",
    "preprocess_region",
    # Recognition
    "TesseractWorker",
    "OCRWorkerPool",
    "RecognitionPipeline",
    "CaptchaPipeline",
    "DropPipeline",
    "PipelineClosedError",
    "create_pipeline",
]
