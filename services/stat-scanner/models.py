"""Pydantic models for recognition results, extracted stats and validation."""

from typing import Literal

from pydantic import BaseModel, Field

RecognitionSource = Literal["ocr_space", "tesseract", "text"]


class RecognitionResult(BaseModel):
    text: str
    confidence: float = Field(ge=0, le=100)
    source: RecognitionSource


class ExtractedFields(BaseModel):
    """Sparse stat set. None means the value could not be recovered, never zero."""

    distance_walked: float | None = Field(default=None, ge=0)
    entities_caught: int | None = Field(default=None, ge=0)
    checkpoints_visited: int | None = Field(default=None, ge=0)
    experience_total: int | None = Field(default=None, ge=0)
    collection_entries: int | None = Field(default=None, ge=0)
    display_name: str | None = None
    start_date: str | None = None

    def present(self) -> dict:
        return self.model_dump(exclude_none=True)


class FieldCandidate(BaseModel):
    original: str
    value: int | float
    is_fractional: bool
    position: int


class ValidationOutcome(BaseModel):
    valid: bool
    warnings: list[str] = []


class ExtractionResponse(BaseModel):
    fields: ExtractedFields
    confidence: float
    raw_text: str
    source: RecognitionSource
    warnings: list[str] = []
    no_fields_recovered: bool = False
    processing_time_ms: int


class ValidationRequest(BaseModel):
    extracted: ExtractedFields
    baseline: ExtractedFields


class TextExtractionRequest(BaseModel):
    text: str
    max_collection_entries: int | None = Field(default=None, gt=0)
