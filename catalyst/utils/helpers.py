"""Shared request-parsing helpers used by the workshop blueprints.

parse_date:   returns None on bad input (workshopDate is optional)
parse_score:  raises ValidationError for matrix overrides outside 0-10
"""
import logging
from datetime import date, datetime

from catalyst.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def parse_date(value):
    """Parse a date string (ISO or DD.MM.YYYY) to a date object.

    Returns None for empty/invalid input. Supports:
    - YYYY-MM-DD (ISO format)
    - YYYY-MM-DDTHH:MM:SS (datetime ISO → .date())
    - DD.MM.YYYY (European format)
    """
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (ValueError, TypeError):
        pass
    try:
        return datetime.fromisoformat(str(value)).date()
    except (ValueError, TypeError):
        pass
    try:
        return datetime.strptime(str(value), "%d.%m.%Y").date()
    except (ValueError, TypeError):
        logger.debug("Unparseable date value: %r", value)
        return None


def parse_score(value, field: str, *, low: float = 0.0, high: float = 10.0) -> float:
    """Coerce a numeric score and check it lies within [low, high]."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required", details={field: "required"})
    try:
        score = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number", details={field: "not a number"})
    if not low <= score <= high:
        raise ValidationError(
            f"{field} must be between {low:g} and {high:g}",
            details={field: f"out of range [{low:g}, {high:g}]"},
        )
    return score
