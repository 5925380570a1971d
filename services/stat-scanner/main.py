"""FastAPI stat scanner service: profile screenshot to structured stats.

Handles upload limits and HTTP mapping. Recognition runs in the threadpool
since both backends block. No image logging, no disk writes. Images are
processed in-memory only.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from config import settings
from errors import RecognitionFailure
from extraction import extract_stats_from_image, extract_stats_from_text
from gateway import RecognitionGateway, RecognitionProvider
from local_ocr import TesseractEngine
from models import ExtractionResponse, TextExtractionRequest, ValidationOutcome, ValidationRequest
from ocr_client import OCRSpaceClient
from validation import validate

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

MANUAL_ENTRY_DETAIL = "Could not read text from the image. Please enter values manually."

_gateway: RecognitionGateway | None = None


def build_gateway() -> RecognitionGateway:
    """Primary remote backend when configured, local engine always last."""
    providers: list[RecognitionProvider] = []
    if settings.OCR_SPACE_API_KEY:
        logger.info("Primary OCR service configured at %s", settings.OCR_SPACE_URL)
        providers.append(OCRSpaceClient())
    else:
        logger.info("OCR service not configured (OCR_SPACE_API_KEY is empty), local engine only")
    providers.append(TesseractEngine())
    return RecognitionGateway(providers)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the recognition gateway on startup."""
    global _gateway

    _gateway = build_gateway()
    yield

    _gateway.close()
    _gateway = None


app = FastAPI(title="Stat Scanner", version="1.0.0", lifespan=lifespan)


@app.post("/api/v1/extract", response_model=ExtractionResponse)
async def extract(
    file: UploadFile = File(...),
    max_collection_entries: int | None = Form(None, gt=0),
):
    """Extract profile stats from a screenshot."""
    if _gateway is None:
        return JSONResponse(
            status_code=503,
            content={"detail": "Text recognition is not available"},
        )

    image_bytes = await file.read()

    if not image_bytes:
        return JSONResponse(
            status_code=400,
            content={"detail": "Empty file uploaded"},
        )

    if len(image_bytes) > settings.MAX_UPLOAD_BYTES:
        return JSONResponse(
            status_code=413,
            content={"detail": f"File exceeds {settings.MAX_UPLOAD_BYTES} bytes"},
        )

    # Log byte count only, never image content
    logger.info(
        "Processing extraction: content_type=%s size=%d bytes",
        file.content_type,
        len(image_bytes),
    )

    try:
        return await run_in_threadpool(
            extract_stats_from_image,
            image_bytes,
            _gateway,
            content_type=file.content_type or "image/png",
            max_collection_entries=max_collection_entries or settings.DEFAULT_MAX_COLLECTION_ENTRIES,
        )
    except RecognitionFailure as e:
        logger.error("Recognition failed: %s", e)
        return JSONResponse(
            status_code=422,
            content={"detail": MANUAL_ENTRY_DETAIL},
        )


@app.post("/api/v1/extract-text", response_model=ExtractionResponse)
async def extract_text(request: TextExtractionRequest):
    """Extract profile stats from already recognized or hand-corrected text."""
    return extract_stats_from_text(
        request.text,
        request.max_collection_entries or settings.DEFAULT_MAX_COLLECTION_ENTRIES,
    )


@app.post("/api/v1/validate", response_model=ValidationOutcome)
async def validate_stats(request: ValidationRequest):
    """Flag stats that decreased compared to the caller's baseline."""
    return validate(request.extracted, request.baseline)


@app.get("/health")
async def health():
    """Return service status and configured recognition backends."""
    return {
        "status": "healthy",
        "providers": _gateway.provider_names if _gateway is not None else [],
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
