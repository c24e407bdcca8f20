"""
Sanitizers for user-supplied board text.

Item lines and column headers are each a single physical line in the board
file. A newline or control character in either would fabricate extra
structural lines (header/list-item injection) or break rendering, so both are
rejected here before any mutation sees the text.
"""
from .errors import InputFormatError

MAX_ITEM_TEXT_LENGTH = 10240
MAX_COLUMN_NAME_LENGTH = 200


def _has_control_chars(text: str, allow_newlines: bool = False) -> bool:
    """True if text holds ASCII control characters other than tab."""
    for ch in text:
        code = ord(ch)
        if code == 9:
            continue
        if allow_newlines and code in (10, 13):
            continue
        if code < 32:
            return True
    return False


def validate_item_text(text) -> str:
    """
    Validate item text and return it trimmed.

    Markdown inside the text (bold, links, code spans) is left alone.
    Newlines are only rejected after trimming, so surrounding whitespace
    such as a trailing "\\n" is stripped rather than refused.

    Raises:
        InputFormatError on any violation.
    """
    if not isinstance(text, str):
        raise InputFormatError("Item text must be a string", field="text")

    if "\0" in text:
        raise InputFormatError("Item text contains null byte", field="text")

    if _has_control_chars(text, allow_newlines=True):
        raise InputFormatError(
            "Item text contains forbidden control characters (ASCII < 32)",
            field="text",
        )

    trimmed = text.strip()

    if "\n" in trimmed or "\r" in trimmed:
        raise InputFormatError(
            "Item text cannot contain newlines (breaks markdown list items)",
            field="text",
        )

    if not trimmed:
        raise InputFormatError("Item text cannot be empty", field="text")

    if len(trimmed) > MAX_ITEM_TEXT_LENGTH:
        raise InputFormatError(
            f"Item text exceeds maximum length ({MAX_ITEM_TEXT_LENGTH} characters): "
            f"{len(trimmed)} characters",
            field="text",
        )

    return trimmed


def validate_column_name(name) -> str:
    """
    Validate a column name and return it trimmed.

    Newlines are rejected before trimming: the name becomes a "## " header.
    """
    if not isinstance(name, str):
        raise InputFormatError("Column name must be a string", field="column")

    if "\0" in name:
        raise InputFormatError("Column name contains null byte", field="column")

    if "\n" in name or "\r" in name:
        raise InputFormatError(
            "Column name cannot contain newlines (corrupts markdown headers)",
            field="column",
        )

    if _has_control_chars(name):
        raise InputFormatError(
            "Column name contains forbidden control characters (ASCII < 32)",
            field="column",
        )

    trimmed = name.strip()

    if not trimmed:
        raise InputFormatError("Column name cannot be empty", field="column")

    if len(trimmed) > MAX_COLUMN_NAME_LENGTH:
        raise InputFormatError(
            f"Column name exceeds maximum length ({MAX_COLUMN_NAME_LENGTH} characters): "
            f"{len(trimmed)} characters",
            field="column",
        )

    return trimmed
