"""AWS integration package."""

from tourpricing.aws.s3_manager import S3Manager, S3TransferError, parse_s3_uri

__all__ = ["S3Manager", "S3TransferError", "parse_s3_uri"]
