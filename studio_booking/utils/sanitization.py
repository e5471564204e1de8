import html
from typing import Any, Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string by escaping HTML special characters to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(str(value), quote=True)


def sanitize_dict(data: dict[str, Any], fields: Optional[list[str]] = None) -> dict[str, Any]:
    """
    Sanitize string values in a dictionary by escaping HTML special characters.
    If fields is None, sanitizes all top-level string values.
    """
    if not data:
        return data

    return {
        key: (
            sanitize_string(value)
            if isinstance(value, str) and (fields is None or key in fields)
            else value
        )
        for key, value in data.items()
    }
