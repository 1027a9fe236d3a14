"""
Utility modules package.
"""

from noteflow.utils.validators import (
    validate_password,
    validate_note_fields,
    validate_name,
    validate_task_title,
    is_hex_color,
)

__all__ = [
    "validate_password",
    "validate_note_fields",
    "validate_name",
    "validate_task_title",
    "is_hex_color",
]
