"""
Input validation utilities.

Each validator returns a ``(is_valid, error_message)`` tuple; routers
turn a failure into a 400 response before anything is written.
"""

import re
from typing import Optional, Tuple

NOTE_TITLE_MAX_LENGTH = 500
NOTE_CONTENT_MAX_LENGTH = 500_000
NOTEBOOK_NAME_MAX_LENGTH = 200
TAG_NAME_MAX_LENGTH = 100
TASK_TITLE_MAX_LENGTH = 500
SCRATCH_PAD_MAX_LENGTH = 50_000
SEARCH_QUERY_MAX_LENGTH = 200

HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def validate_password(password: str) -> Tuple[bool, str]:
    """
    Validate password strength.

    Requirements:
    - At least 8 characters
    - Contains at least one letter
    - Contains at least one number

    Args:
        password: Password to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not password:
        return False, "Password is required"

    if len(password) < 8:
        return False, "Password must be at least 8 characters"

    if not re.search(r'[a-zA-Z]', password):
        return False, "Password must contain at least one letter"

    if not re.search(r'\d', password):
        return False, "Password must contain at least one number"

    return True, ""


def validate_note_fields(
    title: Optional[str] = None,
    content: Optional[str] = None,
    plain_text: Optional[str] = None,
) -> Tuple[bool, str]:
    """
    Validate the length limits on note fields.

    Fields passed as None are not being written and are skipped.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if title is not None and len(title) > NOTE_TITLE_MAX_LENGTH:
        return False, f"Title must be {NOTE_TITLE_MAX_LENGTH} characters or less"

    if content is not None and len(content) > NOTE_CONTENT_MAX_LENGTH:
        return False, "Content is too long"

    if plain_text is not None and len(plain_text) > NOTE_CONTENT_MAX_LENGTH:
        return False, "Plain text is too long"

    return True, ""


def validate_name(name: Optional[str], max_length: int) -> Tuple[bool, str]:
    """
    Validate a notebook or tag name (checked after trimming).

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not name or not name.strip():
        return False, "Name is required"

    if len(name.strip()) > max_length:
        return False, "Name is too long"

    return True, ""


def validate_task_title(title: Optional[str]) -> Tuple[bool, str]:
    """Validate a task title."""
    if not title or not title.strip():
        return False, "Title is required"

    if len(title) > TASK_TITLE_MAX_LENGTH:
        return False, f"Title must be {TASK_TITLE_MAX_LENGTH} characters or less"

    return True, ""


def is_hex_color(color: Optional[str]) -> bool:
    """True for colors of the form #RRGGBB."""
    return bool(color) and HEX_COLOR_RE.match(color) is not None
