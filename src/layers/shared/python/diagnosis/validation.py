"""URL and email validation for the diagnosis form.

All functions here are pure and cheap enough to run on every keystroke.
The URL normalization is only used to decide validity; the value shown to
the user and sent to the intake endpoint is the trimmed raw input.
"""

import re
from urllib.parse import urlsplit

from diagnosis.models.form import FormInput, ValidationResult

URL_REQUIRED_MESSAGE = "URLを入力してください"
URL_INVALID_MESSAGE = "URLの形式が正しくありません"
EMAIL_REQUIRED_MESSAGE = "メールアドレスを入力してください"
EMAIL_INVALID_MESSAGE = "メールアドレスの形式が正しくありません"

SCHEME_REGEX = re.compile(r"^https?://", re.IGNORECASE)

# Syntactic check only: local@domain.tld without spaces
EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Characters a browser URL parser refuses in a host name
FORBIDDEN_HOST_CHARS = frozenset("<>^|%\\")


def normalize_url(raw: str) -> str:
    """Trim the input and add an https:// scheme when none is present.

    Args:
        raw: URL as typed by the user.

    Returns:
        Empty string for blank input, otherwise a URL with an http(s) scheme.
    """
    trimmed = raw.strip()
    if not trimmed:
        return ""
    if SCHEME_REGEX.match(trimmed):
        return trimmed
    return f"https://{trimmed}"


def _parse_url(value: str) -> bool:
    """Check that an already-normalized URL parses with a usable host."""
    try:
        parts = urlsplit(value)
        # Accessing port raises ValueError for out-of-range or non-numeric ports
        parts.port
    except ValueError:
        return False

    if parts.scheme.lower() not in ("http", "https"):
        return False

    host = parts.hostname
    if not host:
        return False

    if any(ch.isspace() for ch in parts.netloc):
        return False

    return not any(ch in FORBIDDEN_HOST_CHARS or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in host)


def is_valid_url(raw: str) -> bool:
    """Check whether the input is a URL once normalized."""
    if not raw.strip():
        return False
    return _parse_url(normalize_url(raw))


def is_valid_email(raw: str) -> bool:
    """Check whether the input looks like an email address."""
    trimmed = raw.strip()
    if not trimmed:
        return False
    return bool(EMAIL_REGEX.match(trimmed))


def validate_url(raw: str) -> str:
    """Return the user-facing URL error, or an empty string."""
    if not raw.strip():
        return URL_REQUIRED_MESSAGE
    if not is_valid_url(raw):
        return URL_INVALID_MESSAGE
    return ""


def validate_email(raw: str) -> str:
    """Return the user-facing email error, or an empty string."""
    if not raw.strip():
        return EMAIL_REQUIRED_MESSAGE
    if not is_valid_email(raw):
        return EMAIL_INVALID_MESSAGE
    return ""


def validate_form(form_input: FormInput) -> ValidationResult:
    """Derive the validation result for the current form input.

    Args:
        form_input: Raw field values.

    Returns:
        A new ValidationResult; callers recompute it instead of editing it.
    """
    return ValidationResult(
        url_error=validate_url(form_input.url),
        email_error=validate_email(form_input.email),
    )
