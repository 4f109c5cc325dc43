"""Viewer-request content negotiation for precomputed WebP variants.

Runs on every request at the edge, so it does no I/O: whether a variant
exists is inferred from the naming convention, and a missing object falls
through to the distribution's error handling. Only the standard library and
the key resolver are imported to keep the edge bundle small.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional
from urllib.parse import parse_qs

from ..keys import (
    DEFAULT_BREAKPOINTS,
    has_source_extension,
    is_output_key,
    resolve,
    sized_stem_width,
)

logger = logging.getLogger(__name__)

WEBP_MEDIA_TYPE = "image/webp"
WIDTH_PARAMETERS = ("w", "width")


@dataclass(frozen=True)
class EdgeRequest:
    """The parts of a viewer request the negotiator looks at."""

    path: str
    accept: str = ""
    querystring: str = ""


def accepts_webp(accept: str) -> bool:
    """
    True when the Accept header lists image/webp with a non-zero quality.

    Wildcards such as "*/*" or "image/*" do not count: browsers send them
    even when they cannot render WebP. A malformed quality value counts as
    no support.
    """
    for media_range in accept.split(","):
        parts = [part.strip() for part in media_range.split(";")]
        if parts[0].lower() != WEBP_MEDIA_TYPE:
            continue
        quality = 1.0
        for parameter in parts[1:]:
            name, _, value = parameter.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        return quality > 0
    return False


def requested_width(querystring: str) -> Optional[int]:
    """Width from the "w" or "width" query parameter; None if absent or invalid."""
    if not querystring:
        return None
    params = parse_qs(querystring.lstrip("?"))
    for name in WIDTH_PARAMETERS:
        values = params.get(name)
        if not values:
            continue
        value = values[0].strip()
        # isdigit alone also accepts superscript digits, which int() rejects.
        if value.isascii() and value.isdigit() and int(value) > 0:
            return int(value)
        return None
    return None


def select_breakpoint(width: Optional[int], breakpoints: Iterable[int]) -> Optional[int]:
    """
    Smallest breakpoint at least as wide as the requested width.

    Returns None (the original-width WebP) when no width was requested or the
    request is wider than every breakpoint.
    """
    if width is None:
        return None
    for candidate in sorted(breakpoints):
        if candidate >= width:
            return candidate
    return None


def negotiate(request: EdgeRequest, breakpoints: Iterable[int] = DEFAULT_BREAKPOINTS) -> str:
    """
    Decide which object serves a request.

    Args:
        request: Path, Accept header and query string of the viewer request
        breakpoints: Ladder the worker generates

    Returns:
        The rewritten path, or the original path when nothing applies
    """
    path = request.path
    if not path or is_output_key(path) or not has_source_extension(path):
        return path
    if not accepts_webp(request.accept):
        return path

    breakpoints = tuple(breakpoints)
    # "photo-480.jpg" already names a size; only the format changes.
    if sized_stem_width(path, breakpoints) is not None:
        return resolve(path)

    return resolve(path, select_breakpoint(requested_width(request.querystring), breakpoints))


def _accept_header(headers: Dict[str, Any]) -> str:
    return ",".join(entry.get("value", "") for entry in headers.get("accept", []))


def viewer_request_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """
    CloudFront viewer-request entry point.

    Rewrites ``request["uri"]`` in place and returns the request. An error
    while negotiating leaves the request untouched, so the worst case is an
    unoptimized response. An event without a CloudFront request raises
    KeyError or IndexError, since there is nothing to pass through.
    """
    request = event["Records"][0]["cf"]["request"]
    try:
        edge_request = EdgeRequest(
            path=request.get("uri", ""),
            accept=_accept_header(request.get("headers", {})),
            querystring=request.get("querystring", ""),
        )
        uri = negotiate(edge_request)
        if uri != edge_request.path:
            logger.info("Rewriting %s to %s", edge_request.path, uri)
            request["uri"] = uri
    except Exception:  # noqa: BLE001
        logger.exception("Content negotiation failed; passing request through")
    return request
