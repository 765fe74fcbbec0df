"""Validation utilities for application forms, profiles and uploads."""

import os
import re
from typing import Any, Optional

# Accepted resume formats: PDF, DOC, DOCX
RESUME_CONTENT_TYPES: dict[str, str] = {
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
}


def clean_text(value: Any) -> Optional[str]:
    """Strip a string; blank or non-string values become None."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def is_blank(value: Any) -> bool:
    """True for None, whitespace-only strings and lists with no non-blank entry."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return all(is_blank(v) for v in value)
    return False


def validate_phone(phone: str) -> tuple[bool, Optional[str]]:
    """
    Validate phone number format (basic validation).

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not phone:
        return False, "Phone number is required"

    cleaned = re.sub(r'[\s\-\(\)\.]', '', phone)
    digits = re.findall(r'\d', cleaned)
    if not digits:
        return False, "Phone number must contain digits"
    if len(digits) < 7 or len(digits) > 15:
        return False, "Phone number must be between 7 and 15 digits"

    return True, None


URL_PATTERN = re.compile(
    r'^https?://'
    r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,63}\.?|'
    r'localhost|'
    r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'
    r'(?::\d+)?'
    r'(?:/?|[/?]\S+)$', re.IGNORECASE
)


def validate_url(url: str) -> tuple[bool, Optional[str]]:
    if not url:
        return False, "URL is required"
    if not URL_PATTERN.match(url):
        return False, "Invalid URL format"
    return True, None


def sanitize_filename(filename: str) -> str:
    """
    Sanitize an uploaded filename for use in a storage key.

    Path components are dropped, unsafe characters removed, spaces become
    underscores, and the result is capped at 255 characters.
    """
    sanitized = os.path.basename(filename.replace('\\', '/'))
    sanitized = re.sub(r'[<>:"/\\|?*\x00-\x1f]', '', sanitized)
    sanitized = sanitized.replace(' ', '_')

    if len(sanitized) > 255:
        name, ext = sanitized.rsplit('.', 1) if '.' in sanitized else (sanitized, '')
        sanitized = name[:250] + ('.' + ext if ext else '')

    return sanitized or "resume"


def validate_resume_file(
    content_type: Optional[str],
    size: int,
    max_bytes: int,
) -> tuple[bool, Optional[str]]:
    """
    Check an uploaded resume's MIME type and size.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if size <= 0:
        return False, "No file provided"
    if content_type not in RESUME_CONTENT_TYPES:
        return False, "Invalid file type. Only PDF, DOC, and DOCX files are allowed."
    if size > max_bytes:
        return False, f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
    return True, None
