"""Output key naming shared by the conversion worker and the edge negotiator.

Every key the pipeline writes is derived here and nowhere else:

    photos/cat.jpg  ->  photos/cat.webp        (original width)
    photos/cat.jpg  ->  photos/cat-480.webp    (480px breakpoint)

Keys contain nothing but the source key and the breakpoint, so reprocessing
a source overwrites the same objects.
"""

import re
from typing import Iterable, List, Optional, Tuple
from urllib.parse import unquote_plus

# Widths generated for every source. Changing the ladder changes which keys
# exist, so it is fixed for the lifetime of a deployment.
DEFAULT_BREAKPOINTS = (480, 960, 1440)

WEBP_EXTENSION = ".webp"
WEBP_CONTENT_TYPE = "image/webp"

# Extensions of objects the worker converts (and the edge may rewrite).
SOURCE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".tif", ".tiff", ".bmp")

_SIZED_STEM_RE = re.compile(r"^(?P<stem>.*)-(?P<width>[1-9]\d*)$")


def split_extension(key: str) -> Tuple[str, str]:
    """
    Split a key into stem and extension.

    Only a dot inside the last path segment starts an extension, so
    "a.b/photo" has no extension. A leading dot ("dir/.hidden") is part
    of the name.

    Args:
        key: Object key or URL path

    Returns:
        (stem, extension) where extension includes the dot or is ""
    """
    slash = key.rfind("/")
    dot = key.rfind(".")
    if dot <= slash + 1:
        return key, ""
    return key[:dot], key[dot:]


def resolve(source_key: str, breakpoint: Optional[int] = None) -> str:
    """
    Map a source key to the key of one of its WebP variants.

    Args:
        source_key: Key of the source object (or a request path)
        breakpoint: Variant width, or None for the original-width WebP

    Returns:
        Output key
    """
    stem, _ = split_extension(source_key)
    if breakpoint is None:
        return f"{stem}{WEBP_EXTENSION}"
    return f"{stem}-{breakpoint}{WEBP_EXTENSION}"


def resolve_all(source_key: str, breakpoints: Iterable[Optional[int]]) -> List[str]:
    """Resolve every breakpoint for a source key, preserving order."""
    return [resolve(source_key, breakpoint) for breakpoint in breakpoints]


def has_source_extension(key: str) -> bool:
    """True when the key ends in one of the convertible raster extensions."""
    _, extension = split_extension(key)
    return extension.lower() in SOURCE_EXTENSIONS


def is_output_key(key: str) -> bool:
    """
    Return True when a key follows the output naming pattern.

    Every output, sized or not, ends in ".webp" and WebP is never accepted
    as input, so checking the extension rejects all of the worker's own
    writes.
    """
    _, extension = split_extension(key)
    return extension.lower() == WEBP_EXTENSION


def parse_output_key(
    key: str, breakpoints: Optional[Iterable[int]] = None
) -> Optional[Tuple[str, Optional[int]]]:
    """
    Split an output key into the stem and the breakpoint it was written for.

    "photo-480.webp" is both the 480px variant of "photo.jpg" and the
    original-width WebP of "photo-480.jpg". Passing the configured
    breakpoints treats "-W" as a size only when W is one of them.

    Args:
        key: Candidate output key
        breakpoints: Configured ladder, or None to accept any width

    Returns:
        (stem, breakpoint) or None if the key is not an output key. The
        breakpoint is None for the original-width WebP.
    """
    if not is_output_key(key):
        return None
    stem, _ = split_extension(key)
    width = _stem_width(stem, breakpoints)
    if width is None:
        return stem, None
    return stem[: -len(f"-{width}")], width


def sized_stem_width(
    key: str, breakpoints: Optional[Iterable[int]] = None
) -> Optional[int]:
    """Return W when the key's stem ends in "-W" (and W is a breakpoint), else None."""
    stem, _ = split_extension(key)
    return _stem_width(stem, breakpoints)


def _stem_width(
    stem: str, breakpoints: Optional[Iterable[int]] = None
) -> Optional[int]:
    match = _SIZED_STEM_RE.match(stem)
    if not match:
        return None
    width = int(match.group("width"))
    if breakpoints is not None and width not in set(breakpoints):
        return None
    return width


def decode_event_key(key: str) -> str:
    """Decode an S3 notification key (URL-encoded, "+" for spaces)."""
    if not key:
        return ""
    try:
        return unquote_plus(key, errors="strict")
    except UnicodeDecodeError:
        return key
