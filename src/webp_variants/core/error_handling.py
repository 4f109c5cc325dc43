# src/webp_variants/core/error_handling.py

import functools
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Type

from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import WebpVariantsError, WriteFailure
from .logging_config import get_logger

RETRYABLE_S3_ERROR_CODES = (
    "SlowDown",
    "ThrottlingException",
    "RequestTimeout",
    "InternalError",
    "ServiceUnavailable",
)


def with_error_handling(error_cls: Type[WebpVariantsError]):
    """
    Decorator translating storage errors into a pipeline error.

    The wrapped function must take the object key as its ``key`` argument
    (positional third or keyword) so the error can be attributed.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(func.__module__ + "." + func.__name__)
            key = kwargs.get("key", args[2] if len(args) > 2 else None)
            try:
                return func(*args, **kwargs)
            except WebpVariantsError:
                raise
            except ClientError as e:
                code = e.response.get("Error", {}).get("Code", "Unknown")
                logger.error(f"S3 error in '{func.__name__}' for {key}: {code}")
                raise error_cls(f"S3 operation failed ({code}): {e}", key=key) from e
            except (BotoCoreError, OSError) as e:
                logger.error(f"Transport error in '{func.__name__}' for {key}: {e}")
                raise error_cls(f"S3 request failed: {e}", key=key) from e
            except Exception as e:  # noqa: BLE001
                logger.error(f"Error in '{func.__name__}' for {key}: {e}", exc_info=True)
                raise error_cls(str(e), key=key) from e

        return wrapper

    return decorator


def is_retryable_write(error: WriteFailure) -> bool:
    """True when the failure came from a throttling or server-side S3 response."""
    cause = error.__cause__
    if isinstance(cause, ClientError):
        code = cause.response.get("Error", {}).get("Code")
        status = cause.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
        return code in RETRYABLE_S3_ERROR_CODES or status >= 500
    return isinstance(cause, BotoCoreError)


def retry_s3_operation(
    max_attempts: int = 3,
    initial_delay: float = 0.2,
    backoff_factor: float = 2,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorator to retry S3 writes with exponential backoff.

    Only WriteFailures caused by throttling or server errors are retried;
    every retried call is an overwrite of the same key.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(func.__module__ + "." + func.__name__)
            delay = initial_delay
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except WriteFailure as e:
                    if not is_retryable_write(e) or attempt >= max_attempts:
                        raise
                    logger.info(
                        f"S3 operation '{func.__name__}' failed. Attempt {attempt}/{max_attempts}. "
                        f"Retrying in {delay:.2f}s. Error: {e}"
                    )
                    sleep(delay)
                    delay *= backoff_factor

        return wrapper

    return decorator


class VariantBatchContext:
    """
    Context manager collecting per-variant errors for one source object.
    """

    def __init__(self, source_key: str, logger: Optional[logging.Logger] = None):
        self.source_key = source_key
        self.errors: List[Dict[str, Any]] = []
        self.logger = logger or get_logger("variants")

    def __enter__(self):
        self.logger.debug(f"Starting variants for {self.source_key}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.errors:
            self.logger.warning(
                f"Variants for {self.source_key} completed with {len(self.errors)} error(s)."
            )
            for i, error_detail in enumerate(self.errors):
                self.logger.error(
                    f"  Error {i + 1}/{len(self.errors)} for variant "
                    f"'{error_detail['item']}' ({error_detail['type']}): {error_detail['error']}"
                )
        elif exc_type:
            self.logger.error(
                f"Variants for {self.source_key} failed due to an unhandled exception: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb),
            )
        else:
            self.logger.debug(f"Variants for {self.source_key} completed successfully.")

        return False

    def add_error(self, error_message: str, item_identifier: str, error_type: str = "") -> None:
        """Report a failed variant."""
        self.errors.append(
            {"item": item_identifier, "error": str(error_message), "type": error_type}
        )
