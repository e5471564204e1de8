"""Shared validation utilities"""

import re
from datetime import date, datetime, time
from typing import Optional, Union

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number to E.164.

    Numbers written with a leading "+" keep their country code (8-15 digits).
    Anything else is read as a US number: 10 digits, or 11 starting with 1.

    Raises:
        ValueError: If the number cannot be normalized
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    if phone.strip().startswith("+") and not digits.startswith("1"):
        if not 8 <= len(digits) <= 15:
            raise ValueError("International numbers must have 8 to 15 digits")
        return f"+{digits}"

    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) != 10:
        raise ValueError("Phone number must have 10 digits (or start with + and a country code)")

    return f"+1{digits}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """Strip and lower-case an e-mail address; ValueError when malformed"""
    if not email:
        return email

    email = email.strip().lower()
    if not re.match(EMAIL_PATTERN, email):
        raise ValueError("Invalid email format")
    return email


def parse_date(value: Union[str, date]) -> date:
    """Parse a YYYY-MM-DD string (datetimes are truncated to their date)"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except (TypeError, ValueError):
        raise ValueError(f"Invalid date '{value}'. Expected YYYY-MM-DD") from None


def parse_time(value: Union[str, time]) -> time:
    """Parse a 24h HH:MM string"""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    try:
        return datetime.strptime(str(value).strip(), "%H:%M").time()
    except (TypeError, ValueError):
        raise ValueError(f"Invalid time '{value}'. Expected HH:MM") from None
