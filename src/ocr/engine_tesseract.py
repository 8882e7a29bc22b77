"""Tesseract OCR engine wrapper for claim screen text fields.

Each ``TesseractWorker`` is one engine instance of the worker pool. It keeps
its own character whitelist/blacklist, which is reconfigured before every
region according to the region's field kind, and is only ever used by one
pool slot at a time.

Example:
    >>> from src.ocr import OCREngineConfig, TesseractWorker
    >>> worker = TesseractWorker(OCREngineConfig())
    >>> worker.configure(FieldKind.NUMERIC_ID)
    >>> worker.recognize(png_bytes)
    '1234'
"""

import io
import logging

import pytesseract
from PIL import Image

from .config_loader import OCREngineConfig
from .types import FieldKind

logger = logging.getLogger(__name__)


class TesseractWorker:
    """Wrapper for one Tesseract engine instance.

    Args:
        config: OCR engine configuration.

    Attributes:
        config: Engine configuration instance.
        whitelist: Characters Tesseract may emit ("" for no restriction).
        blacklist: Characters Tesseract must never emit.

    Raises:
        RuntimeError: If the Tesseract binary cannot be found.
    """

    def __init__(self, config: OCREngineConfig):
        self.config = config
        self.whitelist = ""
        self.blacklist = config.text_blacklist

        if config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = config.tesseract_cmd

        # Verify Tesseract is available
        try:
            version = pytesseract.get_tesseract_version()
            logger.debug(f"Tesseract worker initialized: version {version}")
        except Exception as e:
            logger.error(f"Tesseract not found or not properly configured: {e}")
            raise RuntimeError(
                "Tesseract not available. Please install Tesseract OCR.\n"
                "Windows: choco install tesseract\n"
                "Linux: sudo apt-get install tesseract-ocr\n"
                "MacOS: brew install tesseract"
            ) from e

    def configure(self, field_kind: FieldKind) -> None:
        """Restrict recognized characters for the next region."""
        if field_kind == FieldKind.NUMERIC_ID:
            self.whitelist = self.config.numeric_whitelist
            self.blacklist = ""
        else:
            self.whitelist = ""
            self.blacklist = self.config.text_blacklist

    def build_config(self) -> str:
        """Build the tesseract command line options for the current state."""
        parts = [f"--psm {self.config.psm}", f"--dpi {self.config.dpi}"]
        if self.whitelist:
            parts.append(f"-c tessedit_char_whitelist={self.whitelist}")
        if self.blacklist:
            parts.append(f"-c tessedit_char_blacklist={self.blacklist}")
        return " ".join(parts)

    def recognize(self, png: bytes) -> str:
        """Recognize one line of text in an encoded region image.

        Args:
            png: Encoded (PNG) padded region image.

        Returns:
            Lowercased, whitespace-trimmed text; "" if recognition fails.
        """
        try:
            with Image.open(io.BytesIO(png)) as image:
                text = pytesseract.image_to_string(
                    image, lang=self.config.lang, config=self.build_config()
                )
        except Exception as e:
            logger.error(f"Tesseract extraction failed: {e}", exc_info=True)
            return ""

        return text.lower().strip()
