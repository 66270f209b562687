"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

# Set up test environment variables before importing any modules
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-west-2')
os.environ.setdefault('DISCORD_BOT_TOKEN', 'test-bot-token')
os.environ.setdefault('DISCORD_CHANNEL_ID', '123456789012345678')
os.environ.setdefault('ENVIRONMENT', 'test')


@pytest.fixture
def multipart_email():
    """Multipart/alternative email with plain text first, CRLF framed."""
    return (
        "From: sender@example.com\r\n"
        "To: inbox@yourdomain.com\r\n"
        "Subject: Test Email Subject\r\n"
        "MIME-Version: 1.0\r\n"
        "Content-Type: multipart/alternative; boundary=\"boundary123\"\r\n"
        "\r\n"
        "--boundary123\r\n"
        "Content-Type: text/plain; charset=\"UTF-8\"\r\n"
        "\r\n"
        "This is a test email body in plain text.\r\n"
        "--boundary123\r\n"
        "Content-Type: text/html; charset=\"UTF-8\"\r\n"
        "\r\n"
        "<html><body><p>This is a test email body in <strong>HTML</strong>.</p></body></html>\r\n"
        "--boundary123--\r\n"
    )
