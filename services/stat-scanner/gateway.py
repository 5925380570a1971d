"""Text recognition gateway: ordered provider chain with failover.

Providers are tried in order; a RecognitionBackendError moves on to the
next one. The first success wins and progress is completed at 100. When
every provider fails, RecognitionFailure is raised and no partial result
is returned.
"""

import logging
from typing import Protocol

from errors import RecognitionBackendError, RecognitionFailure
from models import RecognitionResult
from progress import ProgressCallback, ProgressReporter

logger = logging.getLogger(__name__)


class RecognitionProvider(Protocol):
    name: str

    def recognize(
        self,
        image_bytes: bytes,
        content_type: str,
        progress: ProgressReporter,
    ) -> RecognitionResult: ...


class RecognitionGateway:
    """Tries each recognition provider in order until one produces text."""

    def __init__(self, providers: list[RecognitionProvider]):
        if not providers:
            raise ValueError("RecognitionGateway needs at least one provider")
        self._providers = list(providers)

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self._providers]

    def recognize(
        self,
        image_bytes: bytes,
        content_type: str = "image/png",
        on_progress: ProgressCallback | None = None,
    ) -> RecognitionResult:
        progress = ProgressReporter(on_progress)
        errors: list[str] = []

        for provider in self._providers:
            try:
                result = provider.recognize(image_bytes, content_type, progress)
            except RecognitionBackendError as e:
                logger.warning("Recognition provider %s failed: %s", provider.name, e)
                errors.append(f"{provider.name}: {e}")
                continue

            progress.complete()
            if errors:
                logger.info("Recognized via fallback provider %s", provider.name)
            return result

        logger.error("All recognition providers failed: %s", "; ".join(errors))
        raise RecognitionFailure("; ".join(errors))

    def close(self):
        for provider in self._providers:
            close = getattr(provider, "close", None)
            if close is not None:
                close()
