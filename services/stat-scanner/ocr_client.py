"""HTTP client for the remote text-recognition service (OCR.space parse API).

Uses httpx with configurable timeouts. Any transport failure, non-200
response, processing error or empty parse result raises OCRServiceError so
the gateway can fall back to the local engine.
"""

import base64
import logging

import httpx

from config import settings
from errors import RecognitionBackendError
from models import RecognitionResult
from progress import ProgressReporter

logger = logging.getLogger(__name__)


class OCRServiceError(RecognitionBackendError):
    """Remote recognition failed or returned no usable text."""


class OCRSpaceClient:
    """Primary recognition backend."""

    name = "ocr_space"

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        language: str | None = None,
        engine: int | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
    ):
        self._url = url or settings.OCR_SPACE_URL
        self._api_key = api_key if api_key is not None else settings.OCR_SPACE_API_KEY
        self._language = language or settings.OCR_SPACE_LANGUAGE
        self._engine = engine if engine is not None else settings.OCR_SPACE_ENGINE

        read_timeout = timeout if timeout is not None else settings.OCR_SPACE_TIMEOUT_SECONDS
        conn_timeout = connect_timeout if connect_timeout is not None else settings.OCR_SPACE_CONNECT_TIMEOUT

        self._client = httpx.Client(
            timeout=httpx.Timeout(
                connect=float(conn_timeout),
                read=float(read_timeout),
                write=30.0,
                pool=30.0,
            ),
        )

    def close(self):
        self._client.close()

    def recognize(
        self,
        image_bytes: bytes,
        content_type: str,
        progress: ProgressReporter,
    ) -> RecognitionResult:
        """Send the image to the remote service and return its text.

        Raises OCRServiceError on any failure.
        """
        data_url = f"data:{content_type};base64,{base64.b64encode(image_bytes).decode()}"
        progress.update(10)

        form = {
            "base64Image": data_url,
            "apikey": self._api_key,
            "language": self._language,
            "isOverlayRequired": "false",
            "detectOrientation": "true",
            "scale": "true",
            "OCREngine": str(self._engine),
        }
        progress.update(30)

        logger.info("Sending image to OCR service (%d bytes)", len(image_bytes))
        try:
            resp = self._client.post(self._url, data=form)
        except httpx.HTTPError as e:
            logger.warning("OCR service request failed: %s", e)
            raise OCRServiceError(f"OCR service request failed: {e}") from e
        progress.update(60)

        if resp.status_code != 200:
            logger.warning("OCR service returned %d", resp.status_code)
            raise OCRServiceError(f"OCR service error: HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as e:
            raise OCRServiceError("OCR service returned a non-JSON body") from e
        progress.update(80)

        return self._parse_body(body)

    def _parse_body(self, body: object) -> RecognitionResult:
        # Rate-limit and quota messages arrive as a bare JSON string
        if not isinstance(body, dict):
            raise OCRServiceError(f"OCR service returned an unexpected body: {str(body)[:200]}")

        if body.get("IsErroredOnProcessing"):
            message = body.get("ErrorMessage") or "unknown error"
            if isinstance(message, list):
                message = "; ".join(str(m) for m in message)
            raise OCRServiceError(f"OCR service processing error: {message}")

        results = body.get("ParsedResults") or []
        if not isinstance(results, list) or not results:
            raise OCRServiceError("No text detected in image")

        first = results[0]
        if not isinstance(first, dict):
            raise OCRServiceError("OCR service returned a malformed parse result")

        text = first.get("ParsedText") or ""
        if not isinstance(text, str) or not text.strip():
            raise OCRServiceError("No text detected in image")

        # No native confidence: upright text is trusted more than rotated text
        if str(first.get("TextOrientation", "0")) == "0":
            confidence = settings.ORIENTATION_CONFIDENCE
        else:
            confidence = settings.ROTATED_CONFIDENCE

        logger.info("OCR service recognized %d chars (confidence=%.0f)", len(text), confidence)
        return RecognitionResult(text=text, confidence=confidence, source="ocr_space")
