"""Region preprocessing for OCR.

Each crop region of a captured claim screen goes through the same fixed
sequence before it reaches Tesseract:

1. Crop the region rectangle out of the full screenshot
2. Convert to single-channel luminance
3. Contrast boost: ``out = clamp(3 * in, 0, 255)``
4. Pad with a 7 pixel white border on every side
5. Encode as PNG

The multiplier is tuned for the game's dark card palette; it is not a
general contrast algorithm. Every step is pure and deterministic.

Example:
    >>> image = load_image(Path("drop.png"))
    >>> png = preprocess_region(image, DROP_LAYOUT.regions[0])
"""

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from .config_loader import CropRegion

logger = logging.getLogger(__name__)

CONTRAST_MULTIPLIER = 3
PADDING_PX = 7
PADDING_VALUE = 255

ImageSource = Union[np.ndarray, bytes, bytearray, str, Path]


class PreprocessingError(ValueError):
    """Raised when an image cannot be decoded or a region falls outside it."""


def load_image(source: ImageSource) -> np.ndarray:
    """Load a captured screenshot as a numpy array.

    Args:
        source: BGR/grayscale array, encoded image bytes, or a file path.

    Returns:
        Image as numpy array (H, W, 3) BGR or (H, W) grayscale.

    Raises:
        PreprocessingError: If the source cannot be decoded.
        TypeError: If the source type is not supported.
    """
    if isinstance(source, np.ndarray):
        image = source
    elif isinstance(source, (bytes, bytearray)):
        buffer = np.frombuffer(bytes(source), dtype=np.uint8)
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None
    elif isinstance(source, (str, Path)):
        image = cv2.imread(str(source), cv2.IMREAD_COLOR)
    else:
        raise TypeError(f"Unsupported image source: {type(source)}")

    if image is None or image.size == 0:
        raise PreprocessingError("Could not decode image")
    if image.ndim not in (2, 3):
        raise PreprocessingError(f"Expected a 2D or 3D image array, got shape {image.shape}")
    return image


def crop_region(image: np.ndarray, region: CropRegion) -> np.ndarray:
    """Crop ``region`` out of ``image``.

    Raises:
        PreprocessingError: If the rectangle does not lie within the image.
    """
    if image.ndim not in (2, 3):
        raise PreprocessingError(f"Cannot crop array of shape {image.shape}")
    h, w = image.shape[:2]
    x2 = region.x + region.width
    y2 = region.y + region.height
    if x2 > w or y2 > h:
        raise PreprocessingError(
            f"Region ({region.x}, {region.y}, {region.width}x{region.height}) "
            f"exceeds image bounds {w}x{h}"
        )
    return image[region.y : y2, region.x : x2]


def to_luminance(image: np.ndarray) -> np.ndarray:
    """Convert a BGR, BGRA or grayscale array to a 2D uint8 luminance array."""
    if image.ndim == 2:
        return image.astype(np.uint8, copy=False)
    if image.shape[2] == 1:
        return image[:, :, 0].astype(np.uint8, copy=False)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def boost_contrast(gray: np.ndarray, multiplier: int = CONTRAST_MULTIPLIER) -> np.ndarray:
    """Multiply every pixel by ``multiplier``, saturating at 255."""
    boosted = gray.astype(np.uint16) * multiplier
    return np.clip(boosted, 0, 255).astype(np.uint8)


def pad_region(gray: np.ndarray, padding: int = PADDING_PX) -> np.ndarray:
    """Surround ``gray`` with a solid white border of ``padding`` pixels."""
    return cv2.copyMakeBorder(
        gray,
        padding,
        padding,
        padding,
        padding,
        cv2.BORDER_CONSTANT,
        value=PADDING_VALUE,
    )


def enhance_region(image: np.ndarray, region: CropRegion) -> np.ndarray:
    """Run crop, luminance, contrast and padding; return the padded array."""
    cropped = crop_region(image, region)
    gray = to_luminance(cropped)
    return pad_region(boost_contrast(gray))


def encode_png(gray: np.ndarray) -> bytes:
    """Encode a grayscale array as lossless PNG bytes."""
    ok, buffer = cv2.imencode(".png", gray)
    if not ok:
        raise PreprocessingError("PNG encoding failed")
    return buffer.tobytes()


def preprocess_region(image: np.ndarray, region: CropRegion) -> bytes:
    """Produce the PNG buffer Tesseract reads for one crop region.

    Args:
        image: Full captured screenshot.
        region: Rectangle to extract.

    Returns:
        PNG bytes of a ``(width + 14) x (height + 14)`` grayscale canvas.
    """
    padded = enhance_region(image, region)
    logger.debug(
        f"Preprocessed region at ({region.x}, {region.y}) -> {padded.shape[1]}x{padded.shape[0]}"
    )
    return encode_png(padded)
