"""Protocol definitions for dependency injection and testability."""

from typing import Any, Callable, Dict, List, Protocol

from .models import VariantResult, VariantSpec

# Runs one task per variant and returns their results in the order of the planned variants.
VariantRunner = Callable[
    [str, List[VariantSpec], Callable[[VariantSpec], VariantResult], int],
    List[VariantResult],
]


class S3ClientProtocol(Protocol):
    """Protocol for the S3 operations the worker performs."""

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    def put_object(
        self,
        Bucket: str,
        Key: str,
        Body: bytes,
        ContentType: str,
        CacheControl: str = ...,
    ) -> Dict[str, Any]:
        """Put object to S3."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...
