"""Extraction orchestrator: recognize text, extract labeled fields, resolve the rest.

image -> gateway -> raw text -> label rules -> fallback resolver -> response.
"""

import logging
import time

from fields import extract_fields
from gateway import RecognitionGateway
from models import ExtractedFields, ExtractionResponse, RecognitionResult
from progress import ProgressCallback
from resolver import resolve_missing

logger = logging.getLogger(__name__)

NO_FIELDS_WARNING = (
    "Could not extract any stats from the image. "
    "The screenshot may be unclear or not a profile screen; please enter values manually."
)


def extract_all_fields(raw_text: str, max_collection_entries: int | None = None) -> ExtractedFields:
    """Label rules first, then the fallback resolver for whatever is still unset."""
    labeled = extract_fields(raw_text, max_collection_entries)
    return resolve_missing(raw_text, labeled)


def extract_stats_from_image(
    image_bytes: bytes,
    gateway: RecognitionGateway,
    content_type: str = "image/png",
    on_progress: ProgressCallback | None = None,
    max_collection_entries: int | None = None,
) -> ExtractionResponse:
    """Run the full pipeline on one screenshot.

    Raises RecognitionFailure when no backend could read the image.
    """
    start = time.monotonic()

    recognition = gateway.recognize(image_bytes, content_type, on_progress)
    logger.info(
        "Recognized %d chars via %s (confidence=%.1f)",
        len(recognition.text), recognition.source, recognition.confidence,
    )

    return _build_response(recognition, max_collection_entries, start)


def extract_stats_from_text(text: str, max_collection_entries: int | None = None) -> ExtractionResponse:
    """Run field extraction on text the caller already has."""
    start = time.monotonic()
    recognition = RecognitionResult(text=text, confidence=100.0, source="text")
    return _build_response(recognition, max_collection_entries, start)


def _build_response(
    recognition: RecognitionResult,
    max_collection_entries: int | None,
    start: float,
) -> ExtractionResponse:
    fields = extract_all_fields(recognition.text, max_collection_entries)
    present = fields.present()
    warnings: list[str] = []

    if not present:
        warnings.append(NO_FIELDS_WARNING)
        logger.info("No fields recovered from recognized text")
    else:
        logger.info("Extracted fields: %s", ", ".join(sorted(present)))

    return ExtractionResponse(
        fields=fields,
        confidence=recognition.confidence,
        raw_text=recognition.text,
        source=recognition.source,
        warnings=warnings,
        no_fields_recovered=not present,
        processing_time_ms=int((time.monotonic() - start) * 1000),
    )
