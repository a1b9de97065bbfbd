"""Input cleanup for free-text fields accepted from clients."""
from typing import Optional


def sanitize_user_input(text: Optional[str], max_length: int = 10000) -> str:
    """
    Strip null bytes and control characters and cap the length.

    Args:
        text: Input text to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    if len(text) > max_length:
        text = text[:max_length]

    text = text.replace('\x00', '')
    text = ''.join(char for char in text if ord(char) >= 32 or char in '\n\r\t')

    return text
