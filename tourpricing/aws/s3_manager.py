"""AWS S3 Manager for fetching uploaded workbooks and storing import reports."""

import json
from datetime import datetime
from typing import Any

import boto3
from botocore.exceptions import ClientError
from pydantic import BaseModel
from structlog import get_logger

from tourpricing.aws.client_factory import get_boto3_client_kwargs
from tourpricing.config import settings

logger = get_logger(__name__)


class S3TransferError(Exception):
    """Raised when an S3 download or upload fails."""

    pass


def parse_s3_uri(uri: str) -> tuple[str, str]:
    """Split s3://bucket/key into (bucket, key).

    Raises:
        ValueError: If uri is not an s3:// URI with both bucket and key
    """
    if not uri.startswith("s3://"):
        raise ValueError(f"Not an S3 URI: {uri}")
    bucket, _, key = uri[len("s3://"):].partition("/")
    if not bucket or not key:
        raise ValueError(f"S3 URI must include bucket and key: {uri}")
    return bucket, key


class S3Manager:
    """Reads workbooks from and writes import reports to S3."""

    def __init__(self):
        """Initialize S3 Manager with AWS settings.

        Uses AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY if set; otherwise
        boto3 default credential provider (SSO, role, etc.).
        """
        self.region = settings.aws.region
        self.s3_client = boto3.client("s3", **get_boto3_client_kwargs("s3"))
        self.report_bucket = settings.aws.report_bucket
        self.report_prefix = settings.aws_report_prefix

    def _serialize_data(self, data: Any) -> str:
        """Serialize a Pydantic model, dict or list to a JSON string."""
        if isinstance(data, BaseModel):
            return data.model_dump_json(by_alias=True, indent=2)
        elif isinstance(data, (dict, list)):
            return json.dumps(data, indent=2, default=str)
        else:
            return json.dumps({"data": str(data)}, indent=2)

    def get_object_bytes(self, bucket_name: str, key: str) -> bytes:
        """Retrieve an object's raw bytes from S3.

        Args:
            bucket_name: S3 bucket name
            key: Object key

        Returns:
            Object content

        Raises:
            S3TransferError: If retrieval fails
        """
        logger.info(
            "Retrieving object from S3",
            bucket_name=bucket_name,
            key=key,
        )

        try:
            response = self.s3_client.get_object(Bucket=bucket_name, Key=key)
            content = response["Body"].read()

            logger.info(
                "Successfully retrieved object from S3",
                bucket_name=bucket_name,
                key=key,
                size=len(content),
            )

            return content

        except ClientError as e:
            logger.error(
                "Failed to retrieve object from S3",
                bucket_name=bucket_name,
                key=key,
                error=str(e),
            )
            raise S3TransferError(
                f"Failed to retrieve s3://{bucket_name}/{key}: {str(e)}"
            ) from e

    def upload_report(self, job_id: str, data: Any, bucket: str | None = None) -> dict[str, str]:
        """Upload an import report.

        Path: {report_prefix}/{job_id}-{timestamp}.json

        Args:
            job_id: Import job identifier
            data: Report (dict or Pydantic model)
            bucket: Override bucket; defaults to settings.aws.report_bucket

        Returns:
            Dictionary with 'key' and 'url' of uploaded file

        Raises:
            S3TransferError: If upload fails
        """
        bucket_name = bucket or self.report_bucket
        timestamp = datetime.utcnow().strftime("%Y-%m-%dT%H:%M:%SZ")
        key = f"{self.report_prefix}/{job_id}-{timestamp}.json"

        logger.info("Uploading import report to S3", job_id=job_id, key=key)

        try:
            self.s3_client.put_object(
                Bucket=bucket_name,
                Key=key,
                Body=self._serialize_data(data).encode("utf-8"),
                ContentType="application/json",
                Metadata={
                    "job-id": job_id,
                    "upload-timestamp": datetime.utcnow().isoformat(),
                },
            )
        except ClientError as e:
            logger.error("Failed to upload import report", job_id=job_id, key=key, error=str(e))
            raise S3TransferError(f"Upload import report failed: {str(e)}") from e

        url = f"s3://{bucket_name}/{key}"
        logger.info("Uploaded import report", job_id=job_id, key=key, url=url)
        return {"key": key, "url": url}
