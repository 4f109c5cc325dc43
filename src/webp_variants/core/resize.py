"""Aspect-preserving downscale and WebP encoding."""

import io

from PIL import Image

from .exceptions import CorruptInput, EncodeFailure
from .models import DEFAULT_WEBP_METHOD, DEFAULT_WEBP_QUALITY, DecodedImage
from .planner import scaled_height

RESAMPLING_FILTER = Image.Resampling.LANCZOS


def resize(image: DecodedImage, target_width: int) -> DecodedImage:
    """
    Downscale an image to target_width, keeping its aspect ratio.

    Args:
        image: Decoded source image
        target_width: Width of the rendition

    Returns:
        The resized image, or the same image when target_width equals its width

    Raises:
        CorruptInput: If the image has a zero dimension
        ValueError: If target_width is not positive or would upscale
    """
    if image.width <= 0 or image.height <= 0:
        raise CorruptInput(f"Invalid image dimensions: {image.width}x{image.height}")

    if target_width == image.width:
        return image

    if target_width <= 0 or target_width > image.width:
        raise ValueError(
            f"Target width {target_width} outside 1..{image.width}; upscaling is not supported"
        )

    target_height = scaled_height(image.width, image.height, target_width)
    resized = image.image.resize((target_width, target_height), RESAMPLING_FILTER)
    return DecodedImage(image=resized, format=image.format)


def encode(
    image: DecodedImage,
    quality: int = DEFAULT_WEBP_QUALITY,
    method: int = DEFAULT_WEBP_METHOD,
) -> bytes:
    """
    Encode an image as lossy WebP.

    Args:
        image: Image to encode
        quality: WebP quality (1-100)
        method: Encoder effort (0 fastest, 6 smallest)

    Returns:
        WebP file bytes

    Raises:
        EncodeFailure: If the encoder rejects the image
    """
    params = {"quality": quality, "method": method}
    # Keep the source's colour profile so wide-gamut images do not shift.
    icc_profile = image.image.info.get("icc_profile")
    if icc_profile:
        params["icc_profile"] = icc_profile

    output_stream = io.BytesIO()
    try:
        image.image.save(output_stream, format="WEBP", **params)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeFailure(f"WebP encoding failed: {exc}") from exc
    return output_stream.getvalue()
