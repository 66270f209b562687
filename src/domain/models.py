"""
Data models for the email forwarding domain.

These type-safe data structures define clear contracts between components.
"""

from dataclasses import dataclass
from typing import List, Optional

UNKNOWN_RECIPIENT = "Unknown Recipient"


@dataclass
class EmailMetadata:
    """
    Structured email metadata extracted from SES notification.

    Attributes:
        message_id: Unique SQS message identifier
        from_address: Email sender address
        to_addresses: List of recipient addresses
        subject: Email subject line
        timestamp: ISO 8601 timestamp when email was received
        bucket_name: S3 bucket containing the raw email
        object_key: S3 object key for the raw email
    """
    message_id: str
    from_address: str
    to_addresses: List[str]
    subject: str
    timestamp: str
    bucket_name: str
    object_key: str

    @property
    def to_display(self) -> str:
        """Recipients joined for display."""
        return ", ".join(self.to_addresses) if self.to_addresses else UNKNOWN_RECIPIENT


@dataclass
class ForwardResult:
    """
    Result of forwarding one email to the chat channel.

    Attributes:
        success: Whether the message was delivered
        message_id: SQS message identifier
        metadata: Email metadata (if parsing succeeded)
        snippet: Body snippet that was (or would have been) sent
        error_message: Error description (if forwarding failed)
    """
    success: bool
    message_id: str
    metadata: Optional[EmailMetadata] = None
    snippet: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def should_delete_message(self) -> bool:
        """Always True - delete all messages to prevent infinite retries."""
        return True

    def __repr__(self) -> str:
        if self.success:
            return f"ForwardResult(success=True, message_id={self.message_id})"
        return f"ForwardResult(success=False, message_id={self.message_id}, error={self.error_message})"
