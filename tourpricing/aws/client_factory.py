"""Keyword arguments for boto3 clients built from AWSSettings."""

from typing import Any

from botocore.config import Config

from tourpricing.config import settings


def get_boto3_client_kwargs(service: str = "s3") -> dict[str, Any]:
    """Build boto3.client() kwargs for a service.

    Credentials are passed through only when both halves are configured, so
    Lambda roles and SSO profiles keep working when they are not.
    """
    aws = settings.aws
    kwargs: dict[str, Any] = {
        "region_name": aws.region,
        "config": Config(
            retries={"max_attempts": aws.max_retries, "mode": "standard"},
            connect_timeout=aws.request_timeout,
            read_timeout=aws.request_timeout,
            # Custom endpoints (MinIO, LocalStack) serve path-style URLs
            s3={"addressing_style": "path"} if service == "s3" and aws.endpoint_url else None,
        ),
    }
    if aws.endpoint_url:
        kwargs["endpoint_url"] = aws.endpoint_url
    if aws.access_key_id.strip() and aws.secret_access_key.strip():
        kwargs["aws_access_key_id"] = aws.access_key_id.strip()
        kwargs["aws_secret_access_key"] = aws.secret_access_key.strip()
    return kwargs
