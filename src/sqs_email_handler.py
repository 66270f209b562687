"""
AWS Lambda handler for forwarding SES emails from SQS to Discord.

Thin orchestration layer that delegates to EmailForwarder.
Policy: Always delete messages (no retries). Errors logged to CloudWatch.
"""

import logging
import os
from typing import Dict, Any, List

from domain.email_processor import EmailForwarder, NOT_CONFIGURED_MESSAGE
from domain.models import ForwardResult

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Add console handler for local testing (AWS Lambda provides handlers automatically)
if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    formatter = logging.Formatter('%(levelname)s - %(message)s')
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

ENVIRONMENT = os.environ.get('ENVIRONMENT', 'dev')

# Initialize forwarder once at module level (reused across invocations)
email_forwarder = EmailForwarder()


def summarize_results(results: List[ForwardResult]) -> Dict[str, int]:
    """
    Count forwarding outcomes for the batch summary.

    Records skipped because Discord is not configured are counted apart
    from delivery/parsing failures.
    """
    forwarded = sum(1 for r in results if r.success)
    not_configured = sum(
        1 for r in results
        if not r.success and r.error_message == NOT_CONFIGURED_MESSAGE
    )
    return {
        'forwarded': forwarded,
        'not_configured': not_configured,
        'failed': len(results) - forwarded - not_configured,
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Forward SES email notifications from SQS to Discord.

    Args:
        event: Lambda event with SQS records
        context: Lambda context

    Returns:
        Dict with batchItemFailures (always empty - no retries)
    """
    records = event.get('Records', [])
    logger.info(
        f"Discord forwarder ({ENVIRONMENT}): received {len(records)} SES notification(s)"
    )

    results = []
    for record in records:
        result = email_forwarder.process_ses_record(record)
        results.append(result)

        if result.success:
            subject = result.metadata.subject if result.metadata else ''
            logger.info(f"Posted {result.message_id} to Discord (subject={subject!r})")
        else:
            logger.warning(
                f"Did not post {result.message_id} to Discord: {result.error_message}"
            )

    summary = summarize_results(results)
    logger.info(
        f"Forwarding summary: forwarded={summary['forwarded']}, "
        f"failed={summary['failed']}, not_configured={summary['not_configured']}"
    )
    if summary['not_configured']:
        logger.error(
            "Set DISCORD_BOT_TOKEN and DISCORD_CHANNEL_ID; "
            f"{summary['not_configured']} email(s) were dropped"
        )

    return {"batchItemFailures": []}
