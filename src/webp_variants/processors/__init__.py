"""Variant processors with different concurrency strategies."""

from .serial import process_variants as serial_process_variants
from .multithread import process_variants as multithread_process_variants

PROCESSORS = {
    "serial": serial_process_variants,
    "multithread": multithread_process_variants,
}


def get_processor(name: str):
    """Return the variant runner registered under name."""
    try:
        return PROCESSORS[name]
    except KeyError:
        raise ValueError(f"Unknown processor: {name}") from None


__all__ = [
    "serial_process_variants",
    "multithread_process_variants",
    "PROCESSORS",
    "get_processor",
]
