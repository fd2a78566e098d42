import json
import random
import re
import string
from typing import Optional

from .http_utils import ValidationError

# Constants to replace magic numbers
CODE_LENGTH = 6
CODE_ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
MAX_URL_LENGTH = 2048

_CODE_PATTERN = re.compile(r'^[a-zA-Z0-9]{%d}$' % CODE_LENGTH)

_URL_PATTERN = re.compile(
    r'^https?://'  # http:// or https://
    r'(?:'
    r'(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,63}\.?|'  # domain
    r'localhost|'
    r'(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}'  # IP validation
    r'(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)'  # Last IP octet
    r')'
    r'(?::[0-9]+)?'  # optional port
    r'(?:/?|[/?#]\S+)$', re.IGNORECASE)


def generate_code() -> str:
    """
    Generate a random short code.

    Each character is drawn independently and uniformly from CODE_ALPHABET.
    Codes are not checked against existing mappings.

    Returns:
        str: A CODE_LENGTH character code
    """
    return ''.join(random.choices(CODE_ALPHABET, k=CODE_LENGTH))


def is_valid_code(code: str) -> bool:
    """Check whether a string has the shape of a generated code."""
    return isinstance(code, str) and bool(_CODE_PATTERN.match(code))


def is_valid_url(url: str) -> bool:
    """
    Validate if a URL is a well-formed absolute http(s) URL.

    Args:
        url (str): URL to validate

    Returns:
        bool: True if URL is valid, False otherwise
    """
    if not url or not isinstance(url, str) or len(url) > MAX_URL_LENGTH:
        return False

    return bool(_URL_PATTERN.match(url))


def extract_target_url(body: Optional[str]) -> str:
    """
    Extract the URL to shorten from a POST body.

    The body is either a JSON object with a ``url`` field or the URL itself
    as plain text.

    Args:
        body: Raw request body

    Returns:
        str: The validated target URL

    Raises:
        ValidationError: If the body is missing or does not carry a valid URL
    """
    if body is None or not body.strip():
        raise ValidationError("Request body is required")

    text = body.strip()
    if text.startswith('{') or text.startswith('['):
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, RecursionError):
            raise ValidationError("Invalid JSON format")

        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        url = data.get('url')
        if not isinstance(url, str) or not url.strip():
            raise ValidationError("Missing required field: url")
        text = url.strip()

    if not is_valid_url(text):
        raise ValidationError("Invalid URL format")

    return text
