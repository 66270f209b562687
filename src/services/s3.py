"""
Raw email retrieval from Amazon S3.

SES receipt rules store each inbound message as a single S3 object; this
module reads it back as text for body extraction.
"""

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

# Configure S3 client with timeouts to prevent infinite hangs
s3_config = Config(
    retries={
        'max_attempts': 1,  # 1 attempt total (no retries)
        'mode': 'standard'
    },
    connect_timeout=10,
    read_timeout=60
)

# Module-level client (reused across warm invocations)
s3_client = boto3.client('s3', config=s3_config)


def fetch_raw_email(bucket: str, key: str) -> str:
    """
    Fetch a raw email stored by SES and return it as text.

    Bytes that are not valid UTF-8 are replaced rather than rejected; the
    body extractor only needs a best-effort view of the message.

    Args:
        bucket: S3 bucket name from the SES receipt action
        key: S3 object key from the SES receipt action

    Returns:
        str: Full raw message (headers + body)

    Raises:
        ValueError: If bucket/key is empty or the object does not exist
        ClientError: For other S3 failures
    """
    if not bucket or not key:
        raise ValueError("S3 bucket and key are required to fetch an email")

    try:
        response = s3_client.get_object(Bucket=bucket, Key=key)
        raw_bytes = response['Body'].read()
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', '')
        if error_code == 'NoSuchKey':
            logger.error(f"Email object not found: s3://{bucket}/{key}")
            raise ValueError(f"Email file not found in S3: {key}")
        if error_code == 'NoSuchBucket':
            logger.error(f"S3 bucket not found: {bucket}")
            raise ValueError(f"S3 bucket not found: {bucket}")
        logger.error(f"Failed to fetch email s3://{bucket}/{key}: {error_code} {e}")
        raise

    logger.info(f"Fetched {len(raw_bytes):,} bytes from s3://{bucket}/{key}")
    return raw_bytes.decode('utf-8', errors='replace')
