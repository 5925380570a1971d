"""Exceptions shared by the recognition backends and the gateway."""


class RecognitionBackendError(Exception):
    """A single recognition backend could not produce usable text."""


class RecognitionFailure(Exception):
    """Every configured recognition backend failed for this image."""
