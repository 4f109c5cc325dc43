"""Storage helpers and the per-variant task shared by all processors."""

import time
from typing import Any

# Conditional import for type checking S3 client
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mypy_boto3_s3.client import S3Client
else:
    S3Client = Any

from ..core import (
    DecodedImage,
    OutputObject,
    VariantConfig,
    VariantResult,
    VariantSpec,
    WEBP_CONTENT_TYPE,
    get_logger,
)
from ..core.error_handling import retry_s3_operation, with_error_handling
from ..core.exceptions import (
    SourceUnavailable,
    WebpVariantsError,
    WriteFailure,
    variant_error_handler,
)
from ..keys import resolve
from ..core.resize import encode, resize


@with_error_handling(SourceUnavailable)
def download_source(s3_client: S3Client, bucket: str, key: str) -> bytes:
    """Fetch the full payload of a source object."""
    logger = get_logger("processor")
    logger.debug(f"[{key}] Downloading from s3://{bucket}/{key}")
    response = s3_client.get_object(Bucket=bucket, Key=key)
    return response["Body"].read()


@retry_s3_operation()
@with_error_handling(WriteFailure)
def upload_output(
    s3_client: S3Client,
    bucket: str,
    key: str,
    body: bytes,
    content_type: str = WEBP_CONTENT_TYPE,
    cache_control: str = "",
) -> None:
    """Write (overwrite) one output object."""
    logger = get_logger("processor")
    logger.debug(f"[{key}] Uploading {len(body)} bytes to s3://{bucket}/{key}")
    params = {"Bucket": bucket, "Key": key, "Body": body, "ContentType": content_type}
    if cache_control:
        params["CacheControl"] = cache_control
    s3_client.put_object(**params)


def process_variant(
    s3_client: S3Client,
    image: DecodedImage,
    source_key: str,
    spec: VariantSpec,
    config: VariantConfig,
    bucket: str,
) -> VariantResult:
    """Resize → Encode → Upload one variant. Failures are reported, never raised."""
    key = resolve(source_key, spec.breakpoint)
    result = VariantResult(
        key=key, breakpoint=spec.breakpoint, width=spec.width, height=spec.height
    )
    start_time = time.time()

    try:
        with variant_error_handler(key):
            rendered = resize(image, spec.width)
            output = OutputObject(
                key=key,
                body=encode(rendered, config.webp_quality, config.webp_method),
                cache_control=config.cache_control,
            )
            upload_output(
                s3_client,
                bucket,
                output.key,
                output.body,
                output.content_type,
                output.cache_control,
            )
        result.success = True
        result.size = len(output.body)
    except WebpVariantsError as e:
        result.error_type = type(e).__name__
        result.error = str(e)

    result.processing_time = time.time() - start_time
    return result
