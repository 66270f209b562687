"""
Email forwarding pipeline - core business logic.

This module handles the end-to-end processing of SES email notifications:
1. Parse SES notification from SQS record
2. Fetch raw email from S3
3. Extract a readable body snippet
4. Post subject, sender, recipients and snippet to Discord
5. Return result (success or failure)

All errors are caught and returned as ForwardResult with success=False.
No exceptions propagate out of the public methods.
"""

import asyncio
import json
import logging
import time
from typing import Dict, Any

from .models import EmailMetadata, ForwardResult
from services import email as email_service
from services import s3 as s3_service
from integrations import discord_channel

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "No Subject"
UNKNOWN_SENDER = "Unknown Sender"
NOT_CONFIGURED_MESSAGE = "Discord delivery is not configured"


class EmailForwarder:
    """
    Forwards inbound SES emails to a Discord channel.

    Returns ForwardResult for explicit success/failure handling.
    """

    def process_ses_record(self, record: Dict[str, Any]) -> ForwardResult:
        """
        Process a single SQS record containing SES notification.

        Args:
            record: SQS record dict containing SES notification

        Returns:
            ForwardResult with success=True or success=False (errors logged)
        """
        message_id = record.get('messageId', 'UNKNOWN')
        logger.info(f"Processing SQS message: {message_id}")

        metadata = None
        try:
            metadata = self._parse_ses_notification(record)
            logger.info(f"Parsed: from={metadata.from_address}, subject={metadata.subject}")

            if not discord_channel.is_configured():
                logger.error(
                    "Missing DISCORD_BOT_TOKEN or DISCORD_CHANNEL_ID environment variables. "
                    "Set them in the Lambda configuration."
                )
                return ForwardResult(
                    success=False,
                    message_id=message_id,
                    metadata=metadata,
                    error_message=NOT_CONFIGURED_MESSAGE
                )

            snippet = self._fetch_snippet(metadata)

            start_time = time.time()
            discord_channel.send_message(
                subject=metadata.subject,
                from_address=metadata.from_address,
                to_address=metadata.to_display,
                snippet=snippet
            )
            logger.info(f"Discord delivery completed: {time.time() - start_time:.3f}s")

            return ForwardResult(
                success=True,
                message_id=message_id,
                metadata=metadata,
                snippet=snippet
            )

        except Exception as e:
            logger.error(f"Failed to forward {message_id}: {e}", exc_info=True)

            return ForwardResult(
                success=False,
                message_id=message_id,
                metadata=metadata,
                error_message=str(e)
            )

    def _parse_ses_notification(self, record: Dict[str, Any]) -> EmailMetadata:
        """
        Parse SQS record and extract SES notification metadata.

        Handles both direct SES->SQS and SNS-wrapped notifications.

        Raises:
            ValueError: If notification structure is invalid
            json.JSONDecodeError: If JSON parsing fails
        """
        message_id = record.get('messageId', 'UNKNOWN')

        sqs_body = json.loads(record['body'])

        # SES -> SNS -> SQS wraps the notification in an SNS envelope
        if sqs_body.get('Type') == 'Notification' and 'Message' in sqs_body:
            logger.info("Unwrapping SNS message (SES -> SNS -> SQS)")
            ses_notification = json.loads(sqs_body['Message'])
        else:
            ses_notification = sqs_body

        if 'mail' not in ses_notification or 'receipt' not in ses_notification:
            raise ValueError("SES notification missing 'mail' or 'receipt' fields")

        mail = ses_notification['mail']
        receipt = ses_notification['receipt']
        common_headers = mail.get('commonHeaders', {})

        # 'from' is usually a list, occasionally a plain string
        from_field = common_headers.get('from', [])
        if isinstance(from_field, list) and from_field:
            from_address = from_field[0]
        elif isinstance(from_field, str) and from_field:
            from_address = from_field
        else:
            from_address = mail.get('returnPath') or UNKNOWN_SENDER

        to_field = common_headers.get('to', [])
        if isinstance(to_field, list):
            to_addresses = to_field
        elif isinstance(to_field, str) and to_field:
            to_addresses = [to_field]
        else:
            to_addresses = []

        action = receipt.get('action', {})
        bucket_name = action.get('bucketName')
        object_key = action.get('objectKey')

        if not bucket_name or not object_key:
            raise ValueError("Missing S3 location in SES notification")

        return EmailMetadata(
            message_id=message_id,
            from_address=from_address,
            to_addresses=to_addresses,
            subject=common_headers.get('subject') or DEFAULT_SUBJECT,
            timestamp=mail.get('timestamp', ''),
            bucket_name=bucket_name,
            object_key=object_key
        )

    def _fetch_snippet(self, metadata: EmailMetadata) -> str:
        """
        Fetch the raw email and build its snippet.

        A fetch failure still yields an error snippet so the channel learns
        that a mail arrived.
        """
        try:
            raw_email = s3_service.fetch_raw_email(metadata.bucket_name, metadata.object_key)
        except Exception as e:
            logger.error(f"Could not retrieve email body: {e}", exc_info=True)
            return email_service.build_error_snippet("", e)

        return self._build_snippet(raw_email)

    def _build_snippet(self, raw_email: str) -> str:
        """
        Extract and format the body snippet.

        Extraction failures never fail the record; an error snippet with the
        start of the raw message is sent instead.
        """
        try:
            extracted = asyncio.run(email_service.extract_email_body(raw_email))
        except Exception as e:
            logger.error(f"Error during email body extraction: {e}", exc_info=True)
            return email_service.build_error_snippet(raw_email, e)

        logger.info(f"Extracted body: {len(extracted)} chars")
        return email_service.build_body_snippet(raw_email, extracted)
