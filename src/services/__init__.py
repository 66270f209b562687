"""
Service functions used by the email forwarder.

This package contains the raw email retrieval (S3) and the MIME body
extraction used to build chat snippets.
"""

__all__ = ['email', 's3']
