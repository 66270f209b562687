"""
Email body extraction utilities for Lambda handlers.

This module turns a raw MIME message into a short, human-readable text
snippet suitable for posting to a chat channel. Parsing is intentionally
lightweight: only Content-Type and Content-Transfer-Encoding are consulted,
multipart bodies are walked one level deep, and every failure degrades to
a best-effort string instead of raising.
"""

import base64
import binascii
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

logger = logging.getLogger(__name__)

# Header/body separator (RFC 5322 framing)
HEADER_SEPARATOR = "\r\n\r\n"

# Snippet limits (default: 500 chars for the body, 200 for raw fallbacks)
SNIPPET_MAX_CHARS = int(os.environ.get('SNIPPET_MAX_CHARS', '500'))
RAW_FALLBACK_CHARS = 200

TRUNCATION_SUFFIX = "...\n\n(Full message truncated)"
NO_CONTENT_MESSAGE = "Could not parse email body (no content after headers)."

_SOFT_LINE_BREAK = re.compile(r'=\r?\n')
_QP_ESCAPE = re.compile(r'=([0-9A-Fa-f]{2})')
_WHITESPACE = re.compile(r'\s')
_HTML_TAG = re.compile(r'<[^>]*>?', re.MULTILINE)
_HORIZONTAL_SPACE_RUN = re.compile(r'[ \t]+')
_BOUNDARY_PARAM = re.compile(r';\s*boundary="?([^"\s;]+)"?', re.IGNORECASE)
_CHARSET_PARAM = re.compile(r';\s*charset="?([^"\s;]+)"?', re.IGNORECASE)


def _bytes_to_text(raw: bytes) -> str:
    """Read decoded bytes as UTF-8, falling back to one code point per byte."""
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError:
        return raw.decode('latin-1')


def decode_content(text: str, transfer_encoding: Optional[str] = None) -> str:
    """
    Reverse a Content-Transfer-Encoding.

    Only base64 and quoted-printable are understood; any other encoding
    (7bit, 8bit, binary, missing) returns the text unchanged. Declared
    charsets are never applied.

    Args:
        text: Encoded body or part text
        transfer_encoding: Encoding name, compared case-insensitively

    Returns:
        str: Decoded text, or the original text if base64 decoding fails

    Example:
        >>> decode_content("Caf=C3=A9", "quoted-printable")
        'Café'
        >>> decode_content("aGVsbG8=", "BASE64")
        'hello'
    """
    if not text:
        return ""

    encoding = transfer_encoding.strip().lower() if transfer_encoding else ""

    if encoding == 'base64':
        try:
            cleaned = _WHITESPACE.sub('', text)
            if len(cleaned) % 4 in (2, 3):
                # Tolerate missing padding
                cleaned += '=' * (4 - len(cleaned) % 4)
            decoded = base64.b64decode(cleaned, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.warning(f"Base64 decoding failed: {e}")
            return text
        return _bytes_to_text(decoded)

    if encoding == 'quoted-printable':
        unfolded = _SOFT_LINE_BREAK.sub('', text)
        decoded = _QP_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), unfolded)
        try:
            return decoded.encode('latin-1').decode('utf-8')
        except (UnicodeEncodeError, UnicodeDecodeError):
            # Mixed or non-UTF-8 content: keep the 1:1 escape mapping
            return decoded

    return text


def parse_headers(header_block: str) -> Dict[str, str]:
    """
    Parse a header block into a mapping of lower-cased name to value.

    Folded continuation lines are joined onto the previous field with a
    single space. The first occurrence of a field wins.

    Args:
        header_block: Text preceding the blank-line separator

    Returns:
        dict: {'content-type': 'text/plain; charset=utf-8', ...}
    """
    fields = []
    for line in re.split(r'\r?\n', header_block):
        if line[:1] in (' ', '\t') and fields:
            name, value = fields[-1]
            fields[-1] = (name, f"{value} {line.strip()}")
        elif ':' in line:
            name, value = line.split(':', 1)
            fields.append((name.strip().lower(), value.strip()))

    headers: Dict[str, str] = {}
    for name, value in fields:
        headers.setdefault(name, value)
    return headers


def get_boundary(content_type: str) -> Optional[str]:
    """Return the boundary of a multipart/* Content-Type value, if any."""
    if not content_type.lower().startswith('multipart/'):
        return None
    match = _BOUNDARY_PARAM.search(content_type)
    return match.group(1) if match else None


@dataclass
class BodyPart:
    """
    One boundary-delimited segment of a multipart body.

    Attributes:
        headers: Part headers keyed by lower-cased name
        body: Raw (still encoded) part body
    """
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    @property
    def content_type(self) -> str:
        return self.headers.get('content-type', '').split(';', 1)[0].strip().lower()

    @property
    def charset(self) -> Optional[str]:
        match = _CHARSET_PARAM.search(self.headers.get('content-type', ''))
        return match.group(1) if match else None

    @property
    def transfer_encoding(self) -> str:
        return self.headers.get('content-transfer-encoding', '').strip().lower()

    def decoded_body(self) -> str:
        return decode_content(self.body, self.transfer_encoding)


def split_parts(body: str, boundary: str):
    """
    Yield the BodyParts of a multipart body.

    Blank segments (preamble gaps, text after the closing delimiter) and
    segments without their own header separator are skipped.
    """
    delimiter = re.compile(rf'(?:\r\n)?--{re.escape(boundary)}(?:--)?(?:\r\n)?')
    for segment in delimiter.split(body):
        if not segment.strip():
            continue
        headers_end = segment.find(HEADER_SEPARATOR)
        if headers_end == -1:
            logger.debug("Skipping multipart segment without header separator")
            continue
        yield BodyPart(
            headers=parse_headers(segment[:headers_end]),
            body=segment[headers_end + len(HEADER_SEPARATOR):]
        )


def strip_html_tags(html: str) -> str:
    """Replace tags with spaces, collapse space runs and trim."""
    text = _HTML_TAG.sub(' ', html)
    return _HORIZONTAL_SPACE_RUN.sub(' ', text).strip()


async def extract_email_body(raw_email: str) -> str:
    """
    Extract the best plain-text body from a raw MIME message.

    Priority: first text/plain part > first text/html part (tags stripped)
    > empty string. Messages without a header separator are treated as a
    bare body. This coroutine performs no I/O; it is awaitable so callers
    can chain it after an asynchronous read of the raw message.

    Args:
        raw_email: Full message text (headers + body, CRLF framed)

    Returns:
        str: Trimmed body text, or "" if nothing usable was found

    Example:
        >>> raw = "Content-Type: text/plain\\r\\n\\r\\n  Hello World  "
        >>> asyncio.run(extract_email_body(raw))
        'Hello World'
    """
    separator_index = raw_email.find(HEADER_SEPARATOR)
    if separator_index == -1:
        return raw_email.strip()

    headers = parse_headers(raw_email[:separator_index])
    body = raw_email[separator_index + len(HEADER_SEPARATOR):]

    plain_text = ""
    html = ""

    boundary = get_boundary(headers.get('content-type', ''))
    if boundary and body:
        for part in split_parts(body, boundary):
            if part.charset:
                logger.debug(f"Part {part.content_type} declares charset {part.charset}")
            if 'text/plain' in part.content_type:
                plain_text = part.decoded_body()
                break
            elif 'text/html' in part.content_type and not html.strip():
                html = part.decoded_body()
    else:
        plain_text = decode_content(body, headers.get('content-transfer-encoding', ''))

    if plain_text.strip():
        return plain_text.strip()
    if html.strip():
        return strip_html_tags(html)
    return ""


def build_body_snippet(raw_email: str, extracted_body: str) -> str:
    """
    Format an extracted body for display, truncating long bodies.

    Args:
        raw_email: Full raw message (used for the fallback snippet)
        extracted_body: Result of extract_email_body()

    Returns:
        str: Snippet text, never empty
    """
    if extracted_body:
        snippet = extracted_body[:SNIPPET_MAX_CHARS]
        if len(extracted_body) > SNIPPET_MAX_CHARS:
            snippet += TRUNCATION_SUFFIX
        return snippet

    separator_index = raw_email.find(HEADER_SEPARATOR)
    if separator_index == -1:
        return NO_CONTENT_MESSAGE

    raw_body = raw_email[separator_index + len(HEADER_SEPARATOR):].strip()
    return (
        "(Could not parse main body, showing raw snippet):\n\n"
        f"{raw_body[:RAW_FALLBACK_CHARS]}...\n"
    )


def build_error_snippet(raw_email: str, error: Exception) -> str:
    """Snippet used when body extraction fails unexpectedly."""
    return (
        f"Error processing email body: {error}\n\n"
        f"Raw Email Start:\n{raw_email[:RAW_FALLBACK_CHARS]}...\n"
    )
