"""Variant planning: which widths to generate for a source image."""

from typing import Iterable, List

from .exceptions import CorruptInput
from .models import VariantSpec


def scaled_height(width: int, height: int, target_width: int) -> int:
    """Height that keeps the aspect ratio at target_width (half rounds up, min 1)."""
    # Integer arithmetic keeps the result exact for any dimensions.
    return max(1, (2 * height * target_width + width) // (2 * width))


def plan(width: int, height: int, breakpoints: Iterable[int]) -> List[VariantSpec]:
    """
    Compute the variants to produce for a source image.

    Every breakpoint strictly narrower than the source becomes a variant;
    the original-width variant is always included. Nothing is upscaled.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        breakpoints: Configured ladder of target widths

    Returns:
        Variant specs ordered by ascending width

    Raises:
        CorruptInput: If either dimension is not positive
    """
    if width <= 0 or height <= 0:
        raise CorruptInput(f"Invalid image dimensions: {width}x{height}")

    specs = [
        VariantSpec(
            breakpoint=target,
            width=target,
            height=scaled_height(width, height, target),
        )
        for target in sorted(set(breakpoints))
        if 0 < target < width
    ]
    specs.append(VariantSpec(breakpoint=None, width=width, height=height))
    return specs
