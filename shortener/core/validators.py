"""
Input Validators and Sanitizers

This module provides validation and sanitization functions for user inputs.
These functions help prevent security issues and ensure data integrity.

Security Considerations:
- Input validation prevents injection attacks
- Length limits prevent DoS attacks
- Only http/https targets can be shortened
"""

from typing import Optional
from urllib.parse import urlparse

from shortener.core.setting import BASE62_ALPHABET, MAX_SHORT_CODE_LENGTH

MAX_URL_LENGTH = 2048

ALLOWED_SCHEMES = {"http", "https"}

MALICIOUS_PATTERNS = ("javascript:", "data:", "file:", "vbscript:")


def is_valid_url(url: str) -> bool:
    """
    Validate URL format and security.

    Checks that URL uses http/https, has valid domain, and doesn't contain
    malicious patterns. Prevents javascript:, file:, and other dangerous schemes.

    Args:
        url: The URL string to validate

    Returns:
        True if valid and safe, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    if not validate_url_length(url):
        return False

    try:
        result = urlparse(url)
    except ValueError:
        return False

    if not result.scheme or not result.netloc:
        return False

    if result.scheme.lower() not in ALLOWED_SCHEMES:
        return False

    domain = result.hostname or ""
    if domain != "localhost" and "." not in domain:
        return False

    url_lower = url.lower()
    if any(pattern in url_lower for pattern in MALICIOUS_PATTERNS):
        return False

    return True


def sanitize_short_code(
    short_code: str,
    alphabet: str = BASE62_ALPHABET,
    max_length: int = MAX_SHORT_CODE_LENGTH,
) -> Optional[str]:
    """
    Sanitize and validate short code format.

    Short codes may only contain symbols of the configured alphabet.
    This prevents injection attacks and ensures consistency.

    Args:
        short_code: The short code to sanitize
        alphabet: Symbols a valid code is drawn from
        max_length: Longest code accepted

    Returns:
        Sanitized short code if valid, None otherwise
    """
    if not short_code or not isinstance(short_code, str):
        return None

    short_code = short_code.strip()

    if not short_code or len(short_code) > max_length:
        return None

    allowed = set(alphabet)
    if any(char not in allowed for char in short_code):
        return None

    return short_code


def validate_url_length(url: str, max_length: int = MAX_URL_LENGTH) -> bool:
    """
    Validate URL length to prevent DoS attacks.

    Args:
        url: The URL to validate
        max_length: Maximum allowed length (default: 2048 per RFC 7230)

    Returns:
        True if URL length is valid, False otherwise
    """
    return bool(url) and len(url) <= max_length
