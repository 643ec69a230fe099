"""
Derived figures for dashboards and reports.

Pure functions, no I/O. Entries may be TimeEntry models or plain mappings
with `duration` (seconds) and `billable` keys. Durations are integer seconds
in and float hours out; rounding only happens in the format_* helpers.
"""

import datetime
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Mapping, Optional

from timekeeper.domain.models import as_utc

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def _field(entry: Any, name: str, default: Any = None) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name, default)
    return getattr(entry, name, default)


def _duration(entry: Any) -> int:
    return _field(entry, "duration") or 0


def format_duration(seconds: int) -> str:
    """Format seconds as HH:MM:SS (hours are not wrapped at 24)"""
    hours, remainder = divmod(int(seconds), 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_duration_short(seconds: int) -> str:
    """Format seconds as '<H>h <M>m', dropping partial minutes"""
    hours, remainder = divmod(int(seconds), 3600)
    return f"{hours}h {remainder // 60}m"


def total_hours(entries: Iterable[Any]) -> float:
    """Sum of all durations in hours, billable or not"""
    return sum(_duration(e) for e in entries) / 3600


def billable_amount(entries: Iterable[Any], hourly_rate: float) -> float:
    """Hours of billable entries times the hourly rate"""
    return sum(
        _duration(e) / 3600 * hourly_rate
        for e in entries
        if _field(e, "billable", False)
    )


def format_hours(hours: float) -> str:
    return f"{hours:.1f}h"


def format_currency(amount: float, currency: str = "USD") -> str:
    symbols = {"USD": "$", "EUR": "€", "GBP": "£"}
    symbol = symbols.get(currency.upper())
    if symbol:
        return f"{symbol}{amount:,.2f}"
    return f"{amount:,.2f} {currency.upper()}"


def entries_between(entries: Iterable[Any], start: datetime.datetime,
                    end: datetime.datetime) -> List[Any]:
    """Entries whose start_time falls in [start, end); naive values count as UTC"""
    start, end = as_utc(start), as_utc(end)
    return [e for e in entries if start <= as_utc(_field(e, "start_time")) < end]


def hours_by_project(entries: Iterable[Any],
                     project_names: Optional[Mapping[str, str]] = None) -> "OrderedDict[str, float]":
    """
    Hours per project, in first-seen order.

    Keys are project names when `project_names` knows the id, otherwise the id.
    """
    seconds: Dict[str, int] = OrderedDict()
    for e in entries:
        project_id = _field(e, "project_id")
        key = (project_names or {}).get(project_id, project_id)
        seconds[key] = seconds.get(key, 0) + _duration(e)
    return OrderedDict((k, v / 3600) for k, v in seconds.items())


def hours_by_weekday(entries: Iterable[Any]) -> "OrderedDict[str, float]":
    """Hours per weekday (Mon..Sun) keyed by start_time"""
    seconds = [0] * 7
    for e in entries:
        seconds[_field(e, "start_time").weekday()] += _duration(e)
    return OrderedDict((name, s / 3600) for name, s in zip(WEEKDAY_NAMES, seconds))
