"""Local fallback recognition engine backed by Tesseract.

Slower and less accurate on stylized game fonts than the remote service,
but needs no network. Runs CPU-bound; callers keep it off the event loop.
"""

import logging

import pytesseract
from PIL import Image
from pytesseract import Output

from config import settings
from errors import RecognitionBackendError
from models import RecognitionResult
from preprocessing import prepare_for_ocr
from progress import ProgressReporter

logger = logging.getLogger(__name__)


class LocalOCRError(RecognitionBackendError):
    """Tesseract is missing, failed, or recognized nothing."""


class TesseractEngine:
    """Secondary recognition backend."""

    name = "tesseract"

    def __init__(self, cmd: str | None = None, lang: str | None = None, config: str | None = None):
        self._lang = lang or settings.TESSERACT_LANG
        self._config = config if config is not None else settings.TESSERACT_CONFIG
        tesseract_cmd = cmd if cmd is not None else settings.TESSERACT_CMD
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def recognize(
        self,
        image_bytes: bytes,
        content_type: str,
        progress: ProgressReporter,
    ) -> RecognitionResult:
        progress.update(50)

        gray = prepare_for_ocr(image_bytes)
        if gray is None:
            raise LocalOCRError(f"Could not decode image ({content_type})")
        progress.update(60)

        try:
            data = pytesseract.image_to_data(
                Image.fromarray(gray),
                lang=self._lang,
                config=self._config,
                output_type=Output.DICT,
            )
        except pytesseract.TesseractNotFoundError as e:
            logger.error("Tesseract binary not found")
            raise LocalOCRError("Tesseract is not installed") from e
        except pytesseract.TesseractError as e:
            logger.warning("Tesseract failed: %s", e)
            raise LocalOCRError(f"Tesseract failed: {e}") from e
        progress.update(90)

        text, confidence = words_to_text(data)
        if not text.strip():
            raise LocalOCRError("Tesseract recognized no text")

        logger.info("Tesseract recognized %d chars (confidence=%.1f)", len(text), confidence)
        return RecognitionResult(text=text, confidence=confidence, source="tesseract")


def words_to_text(data: dict) -> tuple[str, float]:
    """Rebuild line-ordered text from image_to_data output.

    Returns (text, mean word confidence). Words with a negative confidence
    are layout entries, not recognized text, and are skipped.
    """
    words = data.get("text", [])
    n = len(words)
    blocks = data.get("block_num") or [0] * n
    pars = data.get("par_num") or [0] * n
    line_nums = data.get("line_num") or [0] * n

    lines: dict[tuple[int, int, int], list[str]] = {}
    confidences: list[float] = []

    for i, word in enumerate(words):
        word = (word or "").strip()
        if not word:
            continue
        try:
            conf = float(data["conf"][i])
        except (KeyError, IndexError, TypeError, ValueError):
            conf = -1.0
        if conf < 0:
            continue

        key = (int(blocks[i]), int(pars[i]), int(line_nums[i]))
        lines.setdefault(key, []).append(word)
        confidences.append(conf)

    text = "\n".join(" ".join(line) for _, line in sorted(lines.items()))
    confidence = round(sum(confidences) / len(confidences), 1) if confidences else 0.0
    return text, min(confidence, 100.0)
