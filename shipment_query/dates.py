"""
dates.py

Free-text temporal phrases -> inclusive DateRange at local-day granularity.
"""

import calendar
import re
from typing import Dict, Optional

import pandas as pd

from .models import DateRange

_MONTHS: Dict[str, int] = {}
for _i in range(1, 13):
    _MONTHS[calendar.month_name[_i].lower()] = _i
    _MONTHS[calendar.month_abbr[_i].lower()] = _i
_MONTHS["sept"] = 9

_MDY_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_YMD_RE = re.compile(r"^(\d{4})([/-])(\d{1,2})\2(\d{1,2})$")
_MD_RE = re.compile(r"^(\d{1,2})/(\d{1,2})$")
_MONTH_RE = re.compile(r"^([a-z]+)\.?(?:,?\s+(\d{4}))?$")
_WS_RE = re.compile(r"\s+")


def _today(today: Optional[pd.Timestamp]) -> pd.Timestamp:
    if today is None:
        return pd.Timestamp("today").normalize()
    return pd.Timestamp(today).normalize()


def day_range(start: pd.Timestamp, end: Optional[pd.Timestamp] = None, label: Optional[str] = None) -> DateRange:
    """Whole-day range from the start of ``start`` to the end of ``end`` (or ``start``)."""
    end = start if end is None else end
    return DateRange(
        start=pd.Period(start, freq="D").start_time,
        end=pd.Period(end, freq="D").end_time,
        label=label,
    )


def month_range(year: int, month: int, label: Optional[str] = None) -> DateRange:
    period = pd.Period(year=year, month=month, freq="M")
    return DateRange(start=period.start_time, end=period.end_time, label=label)


def _calendar_day(year: int, month: int, day: int) -> Optional[pd.Timestamp]:
    try:
        return pd.Timestamp(year=year, month=month, day=day)
    except ValueError:
        return None


def _relative(phrase: str, today: pd.Timestamp) -> Optional[DateRange]:
    if phrase == "today":
        return day_range(today, label="Today")
    if phrase == "yesterday":
        return day_range(today - pd.Timedelta(days=1), label="Yesterday")
    if phrase in ("last week", "past week"):
        return day_range(today - pd.Timedelta(days=6), today, label="Last Week")
    if phrase in ("last month", "past month"):
        return day_range(today - pd.DateOffset(months=1), today, label="Last Month")
    if phrase == "this week":
        # weeks start on Sunday
        start = today - pd.Timedelta(days=(today.dayofweek + 1) % 7)
        return day_range(start, start + pd.Timedelta(days=6), label="This Week")
    if phrase == "this month":
        return month_range(today.year, today.month, label="This Month")
    return None


def resolve_date_phrase(text: Optional[str], today: Optional[pd.Timestamp] = None) -> Optional[DateRange]:
    """
    Resolve a whole query to a date range, or None when it is not a date.

    Recognised:
    - today, yesterday, last/past week, last/past month, this week, this month
    - MM/DD/YYYY, YYYY/MM/DD (or ISO YYYY-MM-DD), MM/DD (current year)
    - month names or abbreviations, optionally followed by a 4-digit year

    None never means "match everything"; impossible dates (02/30/2024) are None.
    """
    if not text:
        return None
    phrase = _WS_RE.sub(" ", text.strip().lower())
    if not phrase:
        return None
    now = _today(today)

    rel = _relative(phrase, now)
    if rel is not None:
        return rel

    m = _MDY_RE.match(phrase)
    if m:
        day = _calendar_day(int(m.group(3)), int(m.group(1)), int(m.group(2)))
        return day_range(day, label=phrase) if day is not None else None

    m = _YMD_RE.match(phrase)
    if m:
        day = _calendar_day(int(m.group(1)), int(m.group(3)), int(m.group(4)))
        return day_range(day, label=phrase) if day is not None else None

    m = _MD_RE.match(phrase)
    if m:
        day = _calendar_day(now.year, int(m.group(1)), int(m.group(2)))
        return day_range(day, label=phrase) if day is not None else None

    m = _MONTH_RE.match(phrase)
    if m and m.group(1) in _MONTHS:
        year = int(m.group(2)) if m.group(2) else now.year
        return month_range(year, _MONTHS[m.group(1)], label=phrase)

    return None
