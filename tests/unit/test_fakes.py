"""Tests for fake implementations to ensure they work correctly."""

import io

import pytest
from botocore.exceptions import ClientError
from PIL import Image

from webp_variants.core.observability import LogContext
from webp_variants.testing.fakes import (
    FakeS3Client,
    FakeLogger,
    S3Object,
    create_test_image,
    setup_test_s3_environment,
)


class TestFakeS3Client:
    """Tests for FakeS3Client to ensure it behaves correctly."""

    def test_create_bucket(self):
        """Test bucket creation."""
        client = FakeS3Client()

        bucket = client.create_bucket("test-bucket")

        assert bucket.name == "test-bucket"
        assert len(bucket.objects) == 0
        assert client.get_bucket("test-bucket") is bucket

    def test_get_object_success(self):
        """Test successful object retrieval."""
        client = FakeS3Client()
        bucket = client.create_bucket("test-bucket")
        bucket.add_object("test.jpg", b"test image data")

        response = client.get_object(Bucket="test-bucket", Key="test.jpg")

        assert response["Body"].read() == b"test image data"
        assert response["ContentType"] == "image/jpeg"
        assert response["ContentLength"] == len(b"test image data")

    def test_get_object_not_found(self):
        """Test missing objects raise a NoSuchKey ClientError."""
        client = FakeS3Client()
        client.create_bucket("test-bucket")

        with pytest.raises(ClientError) as excinfo:
            client.get_object(Bucket="test-bucket", Key="nonexistent.jpg")

        assert excinfo.value.response["Error"]["Code"] == "NoSuchKey"

    def test_get_object_bucket_not_found(self):
        """Test missing buckets raise a NoSuchBucket ClientError."""
        client = FakeS3Client()

        with pytest.raises(ClientError) as excinfo:
            client.get_object(Bucket="nonexistent", Key="test.jpg")

        assert excinfo.value.response["Error"]["Code"] == "NoSuchBucket"

    def test_put_object_records_headers(self):
        """Test put_object stores the body and headers."""
        client = FakeS3Client()
        bucket = client.create_bucket("test-bucket")

        response = client.put_object(
            Bucket="test-bucket",
            Key="a.webp",
            Body=b"webp",
            ContentType="image/webp",
            CacheControl="max-age=60",
        )

        stored = bucket.get_object("a.webp")
        assert stored.body == b"webp"
        assert stored.content_type == "image/webp"
        assert stored.cache_control == "max-age=60"
        assert response["ResponseMetadata"]["HTTPStatusCode"] == 200
        assert client.put_calls == ["a.webp"]

    def test_put_object_overwrites(self):
        """Test writing the same key twice keeps one object."""
        client = FakeS3Client()
        bucket = client.create_bucket("test-bucket")

        client.put_object(Bucket="test-bucket", Key="a.webp", Body=b"1", ContentType="image/webp")
        client.put_object(Bucket="test-bucket", Key="a.webp", Body=b"2", ContentType="image/webp")

        assert bucket.keys() == {"a.webp"}
        assert bucket.get_object("a.webp").body == b"2"

    def test_failure_mode(self):
        """Test failure mode raises server errors for the chosen operations."""
        client = FakeS3Client()
        client.create_bucket("test-bucket").add_object("a.jpg", b"x")
        client.set_failure_mode(True, "Simulated outage", operations=["get_object"])

        with pytest.raises(ClientError) as excinfo:
            client.get_object(Bucket="test-bucket", Key="a.jpg")

        assert excinfo.value.response["ResponseMetadata"]["HTTPStatusCode"] == 500
        client.put_object(Bucket="test-bucket", Key="a.webp", Body=b"x", ContentType="image/webp")

    def test_fail_puts_for_specific_keys(self):
        """Test per-key write failures."""
        client = FakeS3Client()
        client.create_bucket("test-bucket")
        client.fail_puts_for("bad.webp")

        client.put_object(Bucket="test-bucket", Key="good.webp", Body=b"x", ContentType="image/webp")
        with pytest.raises(ClientError) as excinfo:
            client.put_object(Bucket="test-bucket", Key="bad.webp", Body=b"x", ContentType="image/webp")

        assert excinfo.value.response["Error"]["Code"] == "AccessDenied"
        assert client.put_calls == ["good.webp", "bad.webp"]

    def test_operation_count_tracking(self):
        """Test operation count tracking."""
        client = FakeS3Client()
        client.create_bucket("test-bucket").add_object("a.jpg", b"x")

        client.get_object(Bucket="test-bucket", Key="a.jpg")
        client.put_object(Bucket="test-bucket", Key="a.webp", Body=b"x", ContentType="image/webp")

        assert client.operation_count == 2


class TestFakeLogger:
    """Tests for FakeLogger."""

    def test_logging_methods(self):
        """Test each level is recorded."""
        logger = FakeLogger()

        logger.debug("d")
        logger.info("i")
        logger.warning("w")
        logger.error("e")

        assert [log["level"] for log in logger.get_logs()] == ["DEBUG", "INFO", "WARNING", "ERROR"]
        assert len(logger.get_logs("ERROR")) == 1

    def test_log_with_context(self):
        """Test context fields and metadata are flattened into the entry."""
        logger = FakeLogger()
        context = LogContext(correlation_id="abc", operation="fetch").with_metadata(key="a.jpg")

        logger.info("Fetching", context, size=10)

        entry = logger.get_logs()[0]
        assert entry["correlation_id"] == "abc"
        assert entry["operation"] == "fetch"
        assert entry["key"] == "a.jpg"
        assert entry["size"] == 10

    def test_log_clearing(self):
        """Test log clearing."""
        logger = FakeLogger()
        logger.info("message")
        logger.clear_logs()
        assert logger.get_logs() == []


class TestTestHelpers:
    """Tests for image and environment helpers."""

    def test_s3_object_size_calculation(self):
        """Test S3Object computes its size from the body."""
        assert S3Object(key="a", body=b"12345").size == 5

    @pytest.mark.parametrize("image_format", ["JPEG", "PNG", "GIF", "TIFF", "BMP"])
    def test_create_test_image_formats(self, image_format):
        """Test test images are encoded in the requested format."""
        data = create_test_image(40, 30, image_format)
        with Image.open(io.BytesIO(data)) as image:
            assert image.format == image_format
            assert image.size == (40, 30)

    def test_setup_test_s3_environment(self):
        """Test the sample environment."""
        client = setup_test_s3_environment()

        uploads = client.get_bucket("test-images")
        assert "uploads/photo.jpg" in uploads.keys()
        assert "uploads/readme.jpg" in uploads.keys()
        assert client.get_bucket("test-output").keys() == set()
