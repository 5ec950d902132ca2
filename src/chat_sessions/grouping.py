"""
Date grouping for the history list.

Buckets, most recent first: Today, Yesterday, Last 7 Days, Last 30 Days, then
one bucket per calendar month ("August 2026"), newest month first. Empty
buckets never appear. Inside a bucket sessions are ordered by created_at,
newest first; ties keep their input order.
"""

import calendar
from datetime import date, datetime, timezone
from typing import Iterable

from chat_sessions.models.session import SessionRecord

TODAY = "Today"
YESTERDAY = "Yesterday"
LAST_7_DAYS = "Last 7 Days"
LAST_30_DAYS = "Last 30 Days"

ordered_groups = [TODAY, YESTERDAY, LAST_7_DAYS, LAST_30_DAYS]


def _aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _bucket(created: date, today: date) -> tuple[str, tuple[int, int]]:
    days = (today - created).days
    if days <= 0:
        return TODAY, (0, 0)
    if days == 1:
        return YESTERDAY, (0, 0)
    if days < 7:
        return LAST_7_DAYS, (0, 0)
    if days < 30:
        return LAST_30_DAYS, (0, 0)
    return f"{calendar.month_name[created.month]} {created.year}", (created.year, created.month)


def group_sessions(sessions: Iterable[SessionRecord], now: datetime) -> dict[str, list[SessionRecord]]:
    """Partition sessions into ordered date buckets relative to `now`.

    Calendar days are taken in the timezone of `now` (UTC when `now` is naive).
    """
    now = _aware(now)
    today = now.date()
    groups: dict[str, list[SessionRecord]] = {}
    months: dict[str, tuple[int, int]] = {}

    for session in sorted(sessions, key=lambda s: s.created_at, reverse=True):
        created = _aware(session.created_at).astimezone(now.tzinfo).date()
        key, month = _bucket(created, today)
        groups.setdefault(key, []).append(session)
        if key not in ordered_groups:
            months[key] = month

    ordered = [key for key in ordered_groups if key in groups]
    ordered += sorted(months, key=months.__getitem__, reverse=True)
    return {key: groups[key] for key in ordered}


# (unit, seconds per unit, first amount that rolls over to the next unit)
_UNITS = (
    ("second", 1, 60),
    ("minute", 60, 60),
    ("hour", 3600, 24),
    ("day", 86400, 30),
    ("month", 86400 * 30, 12),
)


def format_time_difference(now: datetime, then: datetime) -> str:
    """Relative age such as "5 minutes", using the largest unit that fits."""
    seconds = max(0.0, (_aware(now) - _aware(then)).total_seconds())
    for unit, size, limit in _UNITS:
        amount = int(seconds // size)
        if amount < limit:
            return f"{amount} {unit}{'' if amount == 1 else 's'}"
    years = max(1, int(seconds // (86400 * 365)))
    return f"{years} year{'' if years == 1 else 's'}"
