"""Shared validation utilities"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_uk_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a UK phone number to E.164 format.

    Accepts 07700 900123, +44 7700 900123 and similar spellings.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    if digits.startswith("44"):
        digits = digits[2:]
    elif digits.startswith("0"):
        digits = digits[1:]

    # National significant number is 9 or 10 digits
    if len(digits) not in (9, 10):
        raise ValueError("Phone number must be a valid UK number")

    return f"+44{digits}"


def validate_time_hhmm(value: Optional[str]) -> Optional[str]:
    """
    Validate a 24h wall-clock time string.

    Returns:
        Zero-padded HH:MM string

    Raises:
        ValueError: If the value is not a valid HH:MM time
    """
    if value is None:
        return value

    match = re.match(r"^(\d{1,2}):(\d{2})$", value.strip())
    if not match:
        raise ValueError("Time must be in HH:MM format")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError("Time must be in HH:MM format")

    return f"{hours:02d}:{minutes:02d}"


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC; convert aware input before it reaches the database"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def time_to_minutes(value: str) -> int:
    """Minutes since midnight for an HH:MM string"""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def add_minutes_to_time(value: str, minutes: int) -> str:
    """HH:MM plus a duration, wrapping past midnight"""
    start = datetime.strptime(value, "%H:%M")
    return (start + timedelta(minutes=minutes)).strftime("%H:%M")


def utc_now() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
