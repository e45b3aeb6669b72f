from unittest.mock import Mock

import pytest

from goldapi.config import Settings
from goldapi.core.exceptions import AuthorizationError, ConfigurationError, ValidationError
from goldapi.schemas.file import PresignedUploadRequest
from goldapi.schemas.user import Actor
from goldapi.services.file_service import FileService, build_object_key
from goldapi.services.notification_service import NotificationService

USER = Actor(id=7, role="user")
ADMIN = Actor(id=1, role="admin")


@pytest.fixture
def aws_service():
    aws = Mock()
    aws.generate_presigned_post.return_value = {
        "url": "https://bucket.s3.amazonaws.com/",
        "fields": {"key": "k", "policy": "p"},
    }
    aws.generate_presigned_get.return_value = "https://bucket.s3.amazonaws.com/k?sig"
    return aws


@pytest.fixture
def file_service(aws_service):
    return FileService(Settings(S3_BUCKET_NAME="gold-bucket"), aws_service)


class TestObjectKey:
    def test_user_key(self):
        key = build_object_key("kyc_docs", "Passport.PDF", user_id=7)

        assert key.startswith("users/7/kyc-docs/")
        assert key.endswith(".pdf")

    def test_shared_key(self):
        assert build_object_key("general", "logo.png").startswith("uploads/general/")


class TestFileService:
    def test_upload_url_for_user(self, file_service, aws_service):
        result = file_service.create_upload_url(
            USER, PresignedUploadRequest(filename="id.jpg", content_type="image/jpeg")
        )

        assert result.key.startswith("users/7/general/")
        assert result.max_size_bytes == 10 * 1024 * 1024
        assert result.expires_in == 300
        kwargs = aws_service.generate_presigned_post.call_args.kwargs
        assert kwargs["bucket_name"] == "gold-bucket"
        assert kwargs["content_type"] == "image/jpeg"

    def test_user_cannot_download_other_users_file(self, file_service, aws_service):
        with pytest.raises(AuthorizationError):
            file_service.create_download_url(USER, "users/8/general/a.jpg")

        aws_service.generate_presigned_get.assert_not_called()

    def test_admin_can_download_any_file(self, file_service):
        result = file_service.create_download_url(ADMIN, "users/8/general/a.jpg")

        assert result.filename == "a.jpg"
        assert result.expires_in == 3600

    def test_rejects_path_traversal(self, file_service):
        with pytest.raises(ValidationError):
            file_service.delete_file(ADMIN, "users/7/../8/a.jpg")

    def test_delete_own_file(self, file_service, aws_service):
        assert file_service.delete_file(USER, "users/7/general/a.jpg") is True
        aws_service.delete_object.assert_called_once_with("gold-bucket", "users/7/general/a.jpg")

    def test_bucket_must_be_configured(self, aws_service):
        service = FileService(Settings(S3_BUCKET_NAME=""), aws_service)

        with pytest.raises(ConfigurationError):
            service.create_download_url(ADMIN, "uploads/general/a.jpg")


class TestNotificationService:
    def test_welcome_email(self):
        aws = Mock()
        aws.send_email.return_value = "message-1"
        service = NotificationService(Settings(), aws)

        assert service.send_welcome_email("a@example.com", "Asha <b>", "Pw123") is True

        kwargs = aws.send_email.call_args.kwargs
        assert kwargs["to_addresses"] == ["a@example.com"]
        assert "Pw123" in kwargs["text_body"]
        assert "Asha &lt;b&gt;" in kwargs["html_body"]

    def test_send_failure_returns_false(self):
        aws = Mock()
        aws.send_email.side_effect = RuntimeError("ses down")
        service = NotificationService(Settings(), aws)

        assert service.send_welcome_email("a@example.com", "Asha", "Pw123") is False
