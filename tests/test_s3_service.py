"""Tests for S3 storage helpers with a mocked boto3 client."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from app.core.errors import StorageError
from app.services import s3_service


def _client_error(code: str, operation: str = "HeadObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "x"}}, operation)


@pytest.fixture
def s3_client():
    client = MagicMock()
    with patch("app.services.s3_service.get_s3_client", return_value=client):
        yield client


class TestKeys:

    def test_build_s3_key_sanitizes_parts(self):
        key = s3_service.build_s3_key("ada+test@example.com", "my paper (v2).pdf", timestamp_ms=1700000000000)

        assert key == "ada_test@example.com/1700000000000_my_paper__v2_.pdf"

    def test_build_s3_key_defaults_to_current_time(self):
        with patch("app.services.s3_service.time.time", return_value=1234.5):
            key = s3_service.build_s3_key("a@b.c", "x.pdf")

        assert key == "a@b.c/1234500_x.pdf"

    def test_key_from_presigned_url(self):
        url = "https://bucket.s3.amazonaws.com/ada%40example.com/1_paper.pdf?X-Amz-Signature=abc"

        assert s3_service.key_from_url(url) == "ada@example.com/1_paper.pdf"

    def test_key_from_bare_key(self):
        assert s3_service.key_from_url("ada@example.com/1_paper.pdf") == "ada@example.com/1_paper.pdf"


class TestPresign:

    def test_put_url(self, s3_client):
        s3_client.generate_presigned_url.return_value = "https://signed"

        url, key = s3_service.generate_presigned_url("ada@example.com", "paper.pdf", "application/pdf")

        assert url == "https://signed"
        assert key.startswith("ada@example.com/")
        assert key.endswith("_paper.pdf")
        args, kwargs = s3_client.generate_presigned_url.call_args
        assert args[0] == "put_object"
        assert kwargs["Params"]["Bucket"] == "test-bucket"
        assert kwargs["Params"]["Key"] == key
        assert kwargs["Params"]["ContentType"] == "application/pdf"
        assert kwargs["ExpiresIn"] == 3600

    @pytest.mark.parametrize(
        "email,filename,file_type",
        [("", "a.pdf", "application/pdf"), ("a@b.c", "", "application/pdf"), ("a@b.c", "a.pdf", "")],
    )
    def test_put_url_requires_all_params(self, s3_client, email, filename, file_type):
        with pytest.raises(ValueError, match="Missing required parameters"):
            s3_service.generate_presigned_url(email, filename, file_type)

        s3_client.generate_presigned_url.assert_not_called()

    def test_put_url_signing_failure(self, s3_client):
        s3_client.generate_presigned_url.side_effect = _client_error("AccessDenied", "PutObject")

        with pytest.raises(StorageError):
            s3_service.generate_presigned_url("a@b.c", "a.pdf", "application/pdf")

    def test_get_url_is_short_lived(self, s3_client):
        s3_client.generate_presigned_url.return_value = "https://signed-get"

        assert s3_service.generate_presigned_get_url("k") == "https://signed-get"
        args, kwargs = s3_client.generate_presigned_url.call_args
        assert args[0] == "get_object"
        assert kwargs["ExpiresIn"] == 300


class TestVerify:

    def test_exists(self, s3_client):
        assert s3_service.verify_file_upload("k") is True
        s3_client.head_object.assert_called_once_with(Bucket="test-bucket", Key="k")

    @pytest.mark.parametrize("code", ["404", "NoSuchKey", "NotFound"])
    def test_missing(self, s3_client, code):
        s3_client.head_object.side_effect = _client_error(code)

        assert s3_service.verify_file_upload("k") is False

    def test_other_errors_raise(self, s3_client):
        s3_client.head_object.side_effect = _client_error("403")

        with pytest.raises(StorageError):
            s3_service.verify_file_upload("k")


class TestObjects:

    def test_delete(self, s3_client):
        s3_service.delete_file("k")

        s3_client.delete_object.assert_called_once_with(Bucket="test-bucket", Key="k")

    def test_delete_failure(self, s3_client):
        s3_client.delete_object.side_effect = _client_error("AccessDenied", "DeleteObject")

        with pytest.raises(StorageError):
            s3_service.delete_file("k")

    def test_get_object_content(self, s3_client):
        body = MagicMock()
        body.read.return_value = b"%PDF-1.7"
        s3_client.get_object.return_value = {"Body": body}

        assert s3_service.get_object_content("k") == b"%PDF-1.7"

    def test_get_object_content_empty(self, s3_client):
        body = MagicMock()
        body.read.return_value = b""
        s3_client.get_object.return_value = {"Body": body}

        with pytest.raises(StorageError, match="Empty response body"):
            s3_service.get_object_content("k")

    def test_get_object_content_missing(self, s3_client):
        s3_client.get_object.side_effect = _client_error("NoSuchKey", "GetObject")

        with pytest.raises(StorageError):
            s3_service.get_object_content("k")
