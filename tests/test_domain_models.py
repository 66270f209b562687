"""
Tests for domain models (data structures).
"""

import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from domain.models import EmailMetadata, ForwardResult


def make_metadata(to_addresses):
    return EmailMetadata(
        message_id="msg-123",
        from_address="sender@example.com",
        to_addresses=to_addresses,
        subject="Test Subject",
        timestamp="2025-01-01T00:00:00Z",
        bucket_name="test-bucket",
        object_key="test-key"
    )


class TestEmailMetadata:
    """Test EmailMetadata dataclass."""

    def test_email_metadata_creation(self):
        metadata = make_metadata(["recipient@example.com"])

        assert metadata.message_id == "msg-123"
        assert metadata.from_address == "sender@example.com"
        assert metadata.to_addresses == ["recipient@example.com"]
        assert metadata.subject == "Test Subject"
        assert metadata.bucket_name == "test-bucket"
        assert metadata.object_key == "test-key"

    def test_to_display_joins_recipients(self):
        metadata = make_metadata(["a@example.com", "b@example.com"])

        assert metadata.to_display == "a@example.com, b@example.com"

    def test_to_display_without_recipients(self):
        assert make_metadata([]).to_display == "Unknown Recipient"


class TestForwardResult:
    """Test ForwardResult dataclass."""

    def test_success_result(self):
        result = ForwardResult(success=True, message_id="msg-1", snippet="Hello")

        assert result.success is True
        assert result.error_message is None
        assert result.should_delete_message is True
        assert repr(result) == "ForwardResult(success=True, message_id=msg-1)"

    def test_failure_result(self):
        """Failed results are still deleted from the queue."""
        result = ForwardResult(success=False, message_id="msg-2", error_message="boom")

        assert result.should_delete_message is True
        assert repr(result) == "ForwardResult(success=False, message_id=msg-2, error=boom)"


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
