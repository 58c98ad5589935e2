"""Parsing and validation of user input.

Input is rejected with ``InvalidInputError`` before it reaches the store
or the calculation engine; nothing is silently coerced.
"""

from datetime import datetime
from typing import Optional, Sequence

from .dates import parse_timestamp
from .errors import InvalidInputError
from .settings import HEX_COLOR


def _parse_whole_number(text: Optional[str], message: str) -> int:
    cleaned = (text or "").strip().replace(",", "")
    if not cleaned.isdecimal():
        raise InvalidInputError(message)
    return int(cleaned)


def parse_kilometers(text: Optional[str]) -> int:
    """Parse an odometer reading: a non-negative whole number of km."""
    return _parse_whole_number(text, "Please enter a valid total distance")


def parse_yearly_limit(text: Optional[str]) -> int:
    """Parse the annual limit: a positive whole number of km."""
    limit = _parse_whole_number(text, "Please enter a valid yearly limit")
    if limit <= 0:
        raise InvalidInputError("Please enter a valid yearly limit")
    return limit


def parse_accent_color(text: Optional[str]) -> str:
    color = (text or "").strip()
    if not HEX_COLOR.match(color):
        raise InvalidInputError(f"Accent color must look like #RRGGBB, got {text!r}")
    return color.upper()


def parse_date(text: Optional[str]) -> datetime:
    """Parse an ISO date (YYYY-MM-DD) or timestamp."""
    try:
        return parse_timestamp((text or "").strip())
    except ValueError as e:
        raise InvalidInputError(f"Invalid date {text!r}, expected YYYY-MM-DD") from e


def parse_choice(text: Optional[str], choices: Sequence[str], name: str) -> str:
    value = (text or "").strip().lower()
    if value not in choices:
        raise InvalidInputError(f"{name} must be one of {', '.join(choices)}")
    return value


def needs_confirmation(new_km: int, latest_km: int) -> bool:
    """A reading lower than the last one must be confirmed by the user."""
    return new_km < latest_km
