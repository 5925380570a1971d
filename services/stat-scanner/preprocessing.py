"""Image preparation for the local recognition engine.

Profile screenshots are clean renders, so the pipeline is short:
1. Decode image bytes
2. Convert to grayscale
3. Upscale narrow screenshots so small stat text survives recognition
4. CLAHE contrast normalization

Each step degrades gracefully: if it fails, the previous image continues.
"""

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)

# Screenshots narrower than this are upscaled before recognition
MIN_OCR_WIDTH = 1080
MAX_UPSCALE = 3.0


def prepare_for_ocr(image_bytes: bytes) -> np.ndarray | None:
    """Run the preparation pipeline. Returns a grayscale array, or None if undecodable."""
    img = _decode(image_bytes)
    if img is None:
        logger.warning("preprocessing: could not decode image")
        return None

    gray = _to_grayscale(img)
    gray = _upscale(gray)
    return _clahe_normalize(gray)


def _decode(image_bytes: bytes) -> np.ndarray | None:
    """Decode raw bytes into an OpenCV BGR array."""
    if not image_bytes:
        return None
    arr = np.frombuffer(image_bytes, dtype=np.uint8)
    return cv2.imdecode(arr, cv2.IMREAD_COLOR)


def _to_grayscale(img: np.ndarray) -> np.ndarray:
    try:
        return cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    except cv2.error as e:
        logger.warning("preprocessing: grayscale conversion failed: %s", e)
        return img


def _upscale(img: np.ndarray) -> np.ndarray:
    """Upscale with cubic interpolation when the image is narrower than MIN_OCR_WIDTH."""
    try:
        h, w = img.shape[:2]
        if w >= MIN_OCR_WIDTH:
            return img

        factor = min(MIN_OCR_WIDTH / w, MAX_UPSCALE)
        logger.debug("preprocessing: upscaling %dx%d by %.2f", w, h, factor)
        return cv2.resize(img, (int(w * factor), int(h * factor)), interpolation=cv2.INTER_CUBIC)

    except cv2.error as e:
        logger.warning("preprocessing: upscale failed: %s", e)
        return img


def _clahe_normalize(img: np.ndarray) -> np.ndarray:
    """Apply CLAHE to a single-channel image."""
    if img.ndim != 2:
        return img
    try:
        clahe = cv2.createCLAHE(clipLimit=2.0, tileGridSize=(8, 8))
        return clahe.apply(img)

    except cv2.error as e:
        logger.warning("preprocessing: CLAHE failed: %s", e)
        return img
