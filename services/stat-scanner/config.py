"""Environment-based configuration for the stat scanner service."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Stat scanner settings, loaded from environment variables."""

    # Server
    PORT: int = 8092
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Primary recognition backend (empty API key = primary disabled, local engine only)
    OCR_SPACE_URL: str = "https://api.ocr.space/parse/image"
    OCR_SPACE_API_KEY: str = ""
    OCR_SPACE_LANGUAGE: str = "eng"
    OCR_SPACE_ENGINE: int = 2  # engine 2 is the more accurate one
    OCR_SPACE_TIMEOUT_SECONDS: int = 30
    OCR_SPACE_CONNECT_TIMEOUT: int = 10

    # The primary backend reports no confidence; these coarse scores stand in for it
    ORIENTATION_CONFIDENCE: float = 95.0
    ROTATED_CONFIDENCE: float = 85.0

    # Local fallback engine (empty cmd = tesseract on PATH)
    TESSERACT_CMD: str = ""
    TESSERACT_LANG: str = "eng"
    TESSERACT_CONFIG: str = "--oem 1 --psm 6"

    # Upper bound for collection entries when the caller supplies none
    DEFAULT_MAX_COLLECTION_ENTRIES: int = 1000

    model_config = {"env_prefix": "", "case_sensitive": True}


settings = Settings()
