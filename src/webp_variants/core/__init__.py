"""Core utilities and shared components for the WebP variants pipeline."""

from .logging_config import (
    get_logger,
    quiet_third_party_loggers,
    setup_logger,
)
from .exceptions import (
    WebpVariantsError,
    SourceUnavailable,
    UnsupportedFormat,
    CorruptInput,
    EncodeFailure,
    WriteFailure,
    ConfigurationError,
    variant_error_handler,
)
from .models import (
    DEFAULT_BREAKPOINTS,
    WEBP_CONTENT_TYPE,
    DecodedImage,
    ImageFormat,
    IngestEvent,
    OutputObject,
    ProcessingResult,
    ProcessingStatus,
    SourceObject,
    VariantConfig,
    VariantResult,
    VariantSpec,
)
from ..keys import is_output_key, parse_output_key, resolve, resolve_all
from .planner import plan
from .formats import decode, sniff_format
from .resize import encode, resize

__all__ = [
    "DEFAULT_BREAKPOINTS",
    "WEBP_CONTENT_TYPE",
    "VariantConfig",
    "ImageFormat",
    "IngestEvent",
    "SourceObject",
    "DecodedImage",
    "VariantSpec",
    "OutputObject",
    "VariantResult",
    "ProcessingResult",
    "ProcessingStatus",
    "resolve",
    "resolve_all",
    "is_output_key",
    "parse_output_key",
    "plan",
    "decode",
    "sniff_format",
    "resize",
    "encode",
    "setup_logger",
    "get_logger",
    "quiet_third_party_loggers",
    "WebpVariantsError",
    "SourceUnavailable",
    "UnsupportedFormat",
    "CorruptInput",
    "EncodeFailure",
    "WriteFailure",
    "ConfigurationError",
    "variant_error_handler",
]
