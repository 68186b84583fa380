"""
Time-Period Resolution

Maps what a user (or the AI) says about time onto a concrete DateRange.

This is DETERMINISTIC - no LLM involvement. The reference day is passed
in so results are reproducible in tests.

Precedence:
1. Explicit start AND end dates win over everything else
2. A symbolic expression ("last week", "this year", "2024-01-01 to 2024-03-31")
3. Nothing → no date filter

DESIGN DECISION: An unrecognized expression disables the date filter
instead of failing. It is logged as a warning so the permissive
fallback stays visible.
"""

import calendar
import re
from datetime import date, timedelta
from typing import Optional

import structlog

from fin_assistant.errors import InvalidInputError
from fin_assistant.models.transaction import DateRange


logger = structlog.get_logger(__name__)

EXPLICIT_RANGE_PATTERN = re.compile(r"(\d{4}-\d{2}-\d{2})\s+to\s+(\d{4}-\d{2}-\d{2})", re.IGNORECASE)


def _parse_iso(value: str, label: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        raise InvalidInputError(
            f"Invalid {label} '{value}'. Expected YYYY-MM-DD.",
        )


def _build_range(start: date, end: date) -> DateRange:
    if start > end:
        raise InvalidInputError(
            f"Start date {start.isoformat()} is after end date {end.isoformat()}."
        )
    return DateRange(start=start, end=end)


def shift_months(day: date, months: int) -> date:
    """Move `day` by whole months, clamping to the last day of the target month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def month_bounds(day: date) -> tuple[date, date]:
    """First and last day of the month containing `day`."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def resolve_period(
    time_period: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    today: Optional[date] = None,
) -> Optional[DateRange]:
    """
    Resolve a period expression or explicit dates into a DateRange.
    
    Args:
        time_period: Symbolic expression, matched case-insensitively
        start_date: Explicit ISO start date (used only together with end_date)
        end_date: Explicit ISO end date (used only together with start_date)
        today: Reference day; defaults to date.today()
        
    Returns:
        The inclusive range, or None when no date filter applies
        
    Raises:
        InvalidInputError: for unparseable dates or a reversed range
    """
    today = today or date.today()
    
    if start_date and end_date:
        return _build_range(
            _parse_iso(start_date, "start date"),
            _parse_iso(end_date, "end date"),
        )
    
    if start_date or end_date:
        logger.warning(
            "incomplete_explicit_range_ignored",
            start_date=start_date,
            end_date=end_date,
        )
    
    if not time_period or not time_period.strip():
        return None
    
    expression = time_period.strip().lower()
    
    if expression == "last week":
        return DateRange(start=today - timedelta(days=7), end=today)
    
    if expression == "last month":
        return DateRange(start=shift_months(today, -1), end=today)
    
    if expression == "this month":
        start, end = month_bounds(today)
        return DateRange(start=start, end=end)
    
    if expression == "this year":
        return DateRange(start=date(today.year, 1, 1), end=date(today.year, 12, 31))
    
    match = EXPLICIT_RANGE_PATTERN.search(expression)
    if match:
        return _build_range(
            _parse_iso(match.group(1), "start date"),
            _parse_iso(match.group(2), "end date"),
        )
    
    logger.warning("unrecognized_time_period", time_period=time_period)
    return None
