"""Edge request handling for serving WebP variants."""

from .negotiator import (
    EdgeRequest,
    accepts_webp,
    negotiate,
    requested_width,
    select_breakpoint,
    viewer_request_handler,
)

__all__ = [
    "EdgeRequest",
    "accepts_webp",
    "negotiate",
    "requested_width",
    "select_breakpoint",
    "viewer_request_handler",
]
