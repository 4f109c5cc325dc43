"""Format sniffing and decoding for the supported input rasters."""

import io
import struct
from typing import Callable, Dict, Optional

from PIL import Image, UnidentifiedImageError

from .exceptions import CorruptInput, UnsupportedFormat
from .logging_config import get_logger
from .models import DecodedImage, ImageFormat

logger = get_logger("decoder")

# Signature prefixes; the first match wins.
SIGNATURES = (
    (b"\xff\xd8\xff", ImageFormat.JPEG),
    (b"\x89PNG\r\n\x1a\n", ImageFormat.PNG),
    (b"GIF87a", ImageFormat.GIF),
    (b"GIF89a", ImageFormat.GIF),
    (b"II*\x00", ImageFormat.TIFF),
    (b"MM\x00*", ImageFormat.TIFF),
    (b"BM", ImageFormat.BMP),
)

DECODE_ERRORS = (
    OSError,
    SyntaxError,
    ValueError,
    EOFError,
    IndexError,
    struct.error,
    Image.DecompressionBombError,
)

_ALPHA_MODES = ("RGBA", "LA", "PA", "RGBa", "La")


def sniff_format(data: bytes) -> Optional[ImageFormat]:
    """Identify the format from the leading bytes; None if unrecognised."""
    for signature, image_format in SIGNATURES:
        if data.startswith(signature):
            return image_format
    return None


def _open(data: bytes, image_format: ImageFormat) -> Image.Image:
    # Restrict Pillow to the sniffed plugin so a mislabelled file cannot
    # be picked up by a different decoder.
    return Image.open(io.BytesIO(data), formats=[image_format.value])


def _to_8bit(image: Image.Image) -> Image.Image:
    """Scale high bit-depth grayscale (16-bit PNG and TIFF, float TIFF) to L."""
    if image.mode.startswith("I;16"):
        image = image.convert("I")
    if image.mode == "I":
        # 16-bit samples; a plain convert would clip everything above 255.
        return image.point(lambda value: value / 256).convert("L")
    if image.mode == "F":
        # Float samples span 0..1; convert clamps values outside that range.
        return image.point(lambda value: value * 255).convert("L")
    return image


def _normalize(image: Image.Image) -> Image.Image:
    """Convert to RGB, or RGBA when the image carries transparency."""
    image = _to_8bit(image)
    has_alpha = image.mode in _ALPHA_MODES or "transparency" in image.info
    target = "RGBA" if has_alpha else "RGB"
    if image.mode == target:
        return image
    return image.convert(target)


def _decode_jpeg(data: bytes) -> Image.Image:
    image = _open(data, ImageFormat.JPEG)
    image.load()
    # WebP has no CMYK mode; JPEG has no alpha, so RGB is always the target.
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def _decode_png(data: bytes) -> Image.Image:
    image = _open(data, ImageFormat.PNG)
    image.load()
    return _normalize(image)


def _decode_gif(data: bytes) -> Image.Image:
    image = _open(data, ImageFormat.GIF)
    image.seek(0)
    image.load()
    return _normalize(image)


def _decode_tiff(data: bytes) -> Image.Image:
    image = _open(data, ImageFormat.TIFF)
    image.seek(0)
    image.load()
    return _normalize(image)


def _decode_bmp(data: bytes) -> Image.Image:
    image = _open(data, ImageFormat.BMP)
    image.load()
    return _normalize(image)


DECODERS: Dict[ImageFormat, Callable[[bytes], Image.Image]] = {
    ImageFormat.JPEG: _decode_jpeg,
    ImageFormat.PNG: _decode_png,
    ImageFormat.GIF: _decode_gif,
    ImageFormat.TIFF: _decode_tiff,
    ImageFormat.BMP: _decode_bmp,
}


def decode(data: bytes, format_hint: Optional[ImageFormat] = None) -> DecodedImage:
    """
    Decode raw bytes into an image with a fixed channel layout.

    The format is taken from the file signature. The hint (usually derived
    from the key's extension) is only compared against it, since uploaders
    mislabel files.

    Args:
        data: Raw object payload
        format_hint: Format suggested by the key, if any

    Returns:
        Decoded image (first frame for GIF and multi-page TIFF)

    Raises:
        UnsupportedFormat: If the signature is not a supported format
        CorruptInput: If the sniffed format fails to decode
    """
    image_format = sniff_format(data)
    if image_format is None:
        raise UnsupportedFormat(
            f"Unrecognised image signature (hint: {format_hint.value if format_hint else 'none'})"
        )

    if format_hint is not None and format_hint != image_format:
        logger.warning(
            f"Declared format {format_hint.value} does not match content; "
            f"decoding as {image_format.value}"
        )

    try:
        image = DECODERS[image_format](data)
    except UnidentifiedImageError as exc:
        raise CorruptInput(f"Cannot identify {image_format.value} data: {exc}") from exc
    except DECODE_ERRORS as exc:
        raise CorruptInput(f"Failed to decode {image_format.value}: {exc}") from exc

    if image.width <= 0 or image.height <= 0:
        raise CorruptInput(f"Invalid image dimensions: {image.width}x{image.height}")

    return DecodedImage(image=image, format=image_format)
