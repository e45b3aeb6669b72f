import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from goldapi.config import Settings
from goldapi.core.exceptions import InternalServerError

logger = logging.getLogger(__name__)


class AwsService:
    """S3 / SES 클라이언트 래퍼"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.aws_access_key_id = settings.AWS_ACCESS_KEY_ID
        self.aws_secret_access_key = settings.AWS_SECRET_ACCESS_KEY
        self.region_name = settings.AWS_REGION

    def _client(self, service: str):
        if self.aws_access_key_id and self.aws_secret_access_key:
            return boto3.client(
                service,
                region_name=self.region_name,
                aws_access_key_id=self.aws_access_key_id,
                aws_secret_access_key=self.aws_secret_access_key,
            )

        return boto3.client(service, region_name=self.region_name)

    # ------------------------------------------------------------------
    # S3
    # ------------------------------------------------------------------
    def generate_presigned_post(
        self,
        bucket_name: str,
        object_key: str,
        content_type: str,
        max_size_bytes: int,
        expires_in: int,
    ) -> Dict[str, Any]:
        s3 = self._client("s3")
        try:
            return s3.generate_presigned_post(
                Bucket=bucket_name,
                Key=object_key,
                Fields={"Content-Type": content_type},
                Conditions=[
                    {"Content-Type": content_type},
                    ["content-length-range", 1, max_size_bytes],
                ],
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to generate presigned upload for {object_key}: {str(e)}")
            raise InternalServerError(f"Error generating upload URL: {str(e)}")

    def generate_presigned_get(
        self, bucket_name: str, object_key: str, expires_in: int
    ) -> str:
        s3 = self._client("s3")
        try:
            return s3.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket_name, "Key": object_key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to generate presigned download for {object_key}: {str(e)}")
            raise InternalServerError(f"Error generating download URL: {str(e)}")

    def delete_object(self, bucket_name: str, object_key: str) -> None:
        s3 = self._client("s3")
        try:
            s3.delete_object(Bucket=bucket_name, Key=object_key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete s3://{bucket_name}/{object_key}: {str(e)}")
            raise InternalServerError(f"Error deleting object: {str(e)}")

    # ------------------------------------------------------------------
    # SES
    # ------------------------------------------------------------------
    def send_email(
        self,
        to_addresses: List[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> str:
        """SES 메일 발송 - MessageId 반환"""
        ses = self._client("ses")
        body: Dict[str, Any] = {"Html": {"Charset": "UTF-8", "Data": html_body}}
        if text_body:
            body["Text"] = {"Charset": "UTF-8", "Data": text_body}

        try:
            response = ses.send_email(
                Source=self.settings.SES_FROM_EMAIL,
                Destination={"ToAddresses": to_addresses},
                Message={
                    "Subject": {"Charset": "UTF-8", "Data": subject},
                    "Body": body,
                },
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to send email to {to_addresses}: {str(e)}")
            raise InternalServerError(f"Error sending email: {str(e)}")

        return response.get("MessageId", "")
