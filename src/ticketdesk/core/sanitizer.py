"""
HTML sanitization for ticket thread messages.

Uses nh3 to strip scripts, attributes and anything beyond basic text
formatting before a message is stored.
"""

from typing import Optional

import nh3

from .exceptions import ValidationError

# Maximum allowed message content length (100KB)
MAX_MESSAGE_LENGTH = 100_000

# Basic text formatting only
ALLOWED_TAGS = {"b", "i", "strong", "em", "u", "s", "br", "p", "code", "pre"}


def sanitize_html(content: str) -> str:
    """
    Strip everything except basic formatting tags.

    Example:
        >>> sanitize_html('<b>Hello</b><script>alert("XSS")</script>')
        '<b>Hello</b>'
    """
    if not content:
        return ""

    return nh3.clean(
        content,
        tags=ALLOWED_TAGS,
        attributes={},
        link_rel=None,
        strip_comments=True,
    )


def sanitize_message_content(content: Optional[str]) -> str:
    """
    Sanitize message content for storage.

    Returns the stripped, sanitized text, which is empty when nothing
    displayable survives.

    Raises:
        ValidationError: If content exceeds MAX_MESSAGE_LENGTH
    """
    if content is None:
        return ""

    content = content.strip()
    if not content:
        return ""

    if len(content) > MAX_MESSAGE_LENGTH:
        raise ValidationError(
            f"Message content exceeds maximum length of {MAX_MESSAGE_LENGTH} characters"
        )

    return sanitize_html(content).strip()
