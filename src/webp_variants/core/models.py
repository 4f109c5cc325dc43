"""Shared data models for the WebP variants pipeline."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..keys import DEFAULT_BREAKPOINTS, WEBP_CONTENT_TYPE
from .exceptions import ConfigurationError

DEFAULT_WEBP_QUALITY = 80
DEFAULT_WEBP_METHOD = 4
DEFAULT_CACHE_CONTROL = "public, max-age=31536000, immutable"


class ImageFormat(str, Enum):
    """Raster formats accepted as conversion input."""

    JPEG = "JPEG"
    PNG = "PNG"
    GIF = "GIF"
    TIFF = "TIFF"
    BMP = "BMP"

    @classmethod
    def from_extension(cls, key: str) -> Optional["ImageFormat"]:
        """Guess the format from a key's extension; None when unknown."""
        basename = key.rsplit("/", 1)[-1]
        if "." not in basename:
            return None
        return EXTENSION_FORMATS.get(basename.rsplit(".", 1)[-1].lower())


EXTENSION_FORMATS: Dict[str, ImageFormat] = {
    "jpg": ImageFormat.JPEG,
    "jpeg": ImageFormat.JPEG,
    "png": ImageFormat.PNG,
    "gif": ImageFormat.GIF,
    "tif": ImageFormat.TIFF,
    "tiff": ImageFormat.TIFF,
    "bmp": ImageFormat.BMP,
}


class ProcessingStatus(str, Enum):
    """Aggregate outcome of one conversion."""

    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    PARTIAL = "partial"
    FAILED = "failed"


class VariantConfig(BaseModel):
    """Configuration for the conversion worker.

    The breakpoint ladder and the encoder settings are fixed per deployment:
    changing them changes what previously generated keys contain.
    """

    breakpoints: List[int] = Field(default_factory=lambda: list(DEFAULT_BREAKPOINTS))
    webp_quality: int = Field(default=DEFAULT_WEBP_QUALITY, ge=1, le=100)
    webp_method: int = Field(default=DEFAULT_WEBP_METHOD, ge=0, le=6)
    output_bucket: Optional[str] = None
    cache_control: str = DEFAULT_CACHE_CONTROL
    processor: str = "multithread"
    max_workers: int = Field(default=4, ge=1)
    debug: bool = False

    @field_validator("breakpoints")
    @classmethod
    def _normalize_breakpoints(cls, value: List[int]) -> List[int]:
        if any(width <= 0 for width in value):
            raise ValueError("breakpoints must be positive widths")
        return sorted(set(value))

    @field_validator("processor")
    @classmethod
    def _check_processor(cls, value: str) -> str:
        if value not in ("serial", "multithread"):
            raise ValueError(f"Unknown processor: {value}")
        return value

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "VariantConfig":
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        try:
            if env.get("BREAKPOINTS"):
                values["breakpoints"] = parse_breakpoints(env["BREAKPOINTS"])
            if env.get("WEBP_QUALITY"):
                values["webp_quality"] = int(env["WEBP_QUALITY"])
            if env.get("WEBP_METHOD"):
                values["webp_method"] = int(env["WEBP_METHOD"])
            if env.get("MAX_WORKERS"):
                values["max_workers"] = int(env["MAX_WORKERS"])
        except ValueError as exc:
            raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc

        if env.get("OUTPUT_BUCKET"):
            values["output_bucket"] = env["OUTPUT_BUCKET"]
        if env.get("CACHE_CONTROL"):
            values["cache_control"] = env["CACHE_CONTROL"]
        if env.get("PROCESSOR"):
            values["processor"] = env["PROCESSOR"]

        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc


def parse_breakpoints(value: str) -> List[int]:
    """Parse a comma-separated width list such as "480,960,1440"."""
    return [int(part) for part in value.split(",") if part.strip()]


class IngestEvent(BaseModel):
    """A storage notification naming one object to convert."""

    bucket: str
    key: str
    event_type: str = "ObjectCreated"


class SourceObject(BaseModel):
    """An input object fetched from storage."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    body: bytes
    format_hint: Optional[ImageFormat] = None


@dataclass
class DecodedImage:
    """Decoded pixels in RGB, or RGBA when the source has transparency."""

    image: Image.Image
    format: Optional[ImageFormat] = None

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def mode(self) -> str:
        return self.image.mode


class VariantSpec(BaseModel):
    """One rendition to produce; breakpoint None means original width."""

    model_config = ConfigDict(frozen=True)

    breakpoint: Optional[int] = None
    width: int
    height: int

    @property
    def is_original(self) -> bool:
        return self.breakpoint is None

    @property
    def suffix(self) -> str:
        return "" if self.breakpoint is None else f"-{self.breakpoint}"


class OutputObject(BaseModel):
    """An encoded variant ready to be written."""

    key: str
    body: bytes
    content_type: str = WEBP_CONTENT_TYPE
    cache_control: str = DEFAULT_CACHE_CONTROL


class VariantResult(BaseModel):
    """Result of producing a single variant."""

    key: str
    breakpoint: Optional[int] = None
    width: int = 0
    height: int = 0
    success: bool = False
    size: int = 0
    error_type: str = ""
    error: str = ""
    processing_time: float = 0.0


class ProcessingResult(BaseModel):
    """Result of converting one source object."""

    bucket: str
    source_key: str
    status: ProcessingStatus = ProcessingStatus.FAILED
    source_format: Optional[ImageFormat] = None
    width: int = 0
    height: int = 0
    variants: List[VariantResult] = Field(default_factory=list)
    error_type: str = ""
    error: str = ""
    skip_reason: str = ""
    processing_time: float = 0.0

    @property
    def success(self) -> bool:
        return self.status in (ProcessingStatus.SUCCEEDED, ProcessingStatus.SKIPPED)

    @property
    def written_keys(self) -> List[str]:
        return [variant.key for variant in self.variants if variant.success]

    @property
    def failed_keys(self) -> List[str]:
        return [variant.key for variant in self.variants if not variant.success]
