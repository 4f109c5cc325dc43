"""Custom exceptions for the WebP variants pipeline."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional


class WebpVariantsError(Exception):
    """Base exception for all pipeline errors."""

    retryable = False

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class SourceUnavailable(WebpVariantsError):
    """The source object is missing or could not be fetched."""

    retryable = True


class UnsupportedFormat(WebpVariantsError):
    """The payload is not one of the supported raster formats."""


class CorruptInput(WebpVariantsError):
    """The payload claims a supported format but cannot be decoded."""


class EncodeFailure(WebpVariantsError):
    """A variant could not be encoded to WebP."""


class WriteFailure(WebpVariantsError):
    """A variant could not be written to storage."""

    retryable = True


class ConfigurationError(WebpVariantsError):
    """Error raised for invalid configuration options."""


@contextmanager
def variant_error_handler(key: str) -> Iterator[None]:
    """Attribute any error raised in the block to a variant key."""
    try:
        yield
    except WebpVariantsError as exc:
        if exc.key is None:
            exc.key = key
        raise
    except Exception as exc:  # noqa: BLE001
        raise EncodeFailure(str(exc), key=key) from exc
