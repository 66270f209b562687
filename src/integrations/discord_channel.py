"""
Discord channel delivery.

Posts a forwarded email to a Discord channel with the bot HTTP API. The
message uses Discord's components layout: a container holding the header
summary, a divider and the body snippet.

Usage:
    from integrations import discord_channel

    discord_channel.send_message(
        subject="Invoice",
        from_address="billing@example.com",
        to_address="team@example.com",
        snippet="Your invoice is attached."
    )
"""

import logging
import os
from typing import Any, Dict

import requests

logger = logging.getLogger(__name__)


# ============================================================================
# Custom Exception Classes
# ============================================================================

class ConfigurationError(Exception):
    """Raised when the bot token or channel ID is missing."""
    pass


class DiscordApiError(Exception):
    """Raised when Discord rejects a message."""

    def __init__(self, status_code: int, reason: str, details: str):
        self.status_code = status_code
        self.reason = reason
        self.details = details
        super().__init__(f"Discord API failed: {status_code} {reason} - {details}")


# ============================================================================
# Configuration
# ============================================================================

DISCORD_BOT_TOKEN = os.environ.get('DISCORD_BOT_TOKEN', '')
DISCORD_CHANNEL_ID = os.environ.get('DISCORD_CHANNEL_ID', '')
DISCORD_API_BASE = os.environ.get('DISCORD_API_BASE', 'https://discord.com/api/v10')
DISCORD_TIMEOUT_SECONDS = float(os.environ.get('DISCORD_TIMEOUT_SECONDS', '15'))

# Component type identifiers
CONTAINER = 17
TEXT_DISPLAY = 10
SEPARATOR = 14

# Message flag enabling the components layout (1 << 15)
IS_COMPONENTS_V2 = 32768


def is_configured() -> bool:
    """
    Check if Discord delivery is configured.

    Returns:
        True if both bot token and channel ID are set
    """
    return bool(DISCORD_BOT_TOKEN and DISCORD_CHANNEL_ID)


def build_message_payload(
    subject: str,
    from_address: str,
    to_address: str,
    snippet: str
) -> Dict[str, Any]:
    """
    Build the JSON body for a channel message.

    Args:
        subject: Email subject line
        from_address: Sender shown in the summary
        to_address: Recipient(s) shown in the summary
        snippet: Body text, already truncated

    Returns:
        dict: Payload for POST /channels/{channel_id}/messages
    """
    return {
        'components': [{
            'type': CONTAINER,
            'components': [
                {
                    'type': TEXT_DISPLAY,
                    'content': f"Subject: {subject}\nFrom: {from_address}\nTo: {to_address}"
                },
                {
                    'type': SEPARATOR,
                    'spacing': 1,
                    'divider': True
                },
                {
                    'type': TEXT_DISPLAY,
                    'content': snippet
                }
            ]
        }],
        'flags': IS_COMPONENTS_V2,
    }


def send_message(
    subject: str,
    from_address: str,
    to_address: str,
    snippet: str
) -> None:
    """
    Send a forwarded email to the configured Discord channel.

    Makes exactly one request; retries are left to the caller.

    Raises:
        ConfigurationError: If DISCORD_BOT_TOKEN or DISCORD_CHANNEL_ID is unset
        DiscordApiError: If Discord responds with a non-2xx status
        requests.RequestException: For connection errors and timeouts
    """
    if not is_configured():
        raise ConfigurationError(
            "DISCORD_BOT_TOKEN and DISCORD_CHANNEL_ID environment variables are required"
        )

    url = f"{DISCORD_API_BASE}/channels/{DISCORD_CHANNEL_ID}/messages"
    payload = build_message_payload(subject, from_address, to_address, snippet)

    try:
        response = requests.post(
            url,
            json=payload,
            headers={'Authorization': f"Bot {DISCORD_BOT_TOKEN}"},
            timeout=DISCORD_TIMEOUT_SECONDS
        )
    except requests.RequestException as e:
        logger.error(f"Error sending message to Discord: {e}")
        raise

    if not response.ok:
        logger.error(
            f"Failed to send Discord message: "
            f"{response.status_code} {response.reason} - {response.text}"
        )
        raise DiscordApiError(response.status_code, response.reason, response.text)

    logger.info(f"Email forwarded to Discord channel {DISCORD_CHANNEL_ID}")
