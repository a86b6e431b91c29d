"""Presence and schedule rules for gym sessions.

Everything here is a pure function of ``now`` and a collection of session
records. A session is anything with ``start_time`` and ``end_time``
attributes holding naive local datetimes.
"""
import math

MISSING_TIMES = 'Please select both start and end times'
END_BEFORE_START = 'End time must be after start time'


def is_active(now, session):
    return session.start_time <= now <= session.end_time


def is_today(now, session):
    return session.start_time.date() == now.date()


def is_present(now, sessions):
    """True if ``now`` falls inside at least one session (ends inclusive)."""
    return any(is_active(now, s) for s in sessions)


def current_session(now, sessions):
    """Return the active session with the latest start, or None.

    Overlapping sessions are allowed. When several active sessions share the
    same start the pick is whichever comes first in ``sessions``; that order
    is not guaranteed by the store, so callers should not depend on it.
    """
    active = [s for s in sessions if is_active(now, s)]
    if not active:
        return None
    return max(active, key=lambda s: s.start_time)


def all_sessions(sessions):
    return sorted(sessions, key=lambda s: s.start_time, reverse=True)


def end_of_day(now):
    # 23:59:59.999 local
    return now.replace(hour=23, minute=59, second=59, microsecond=999000)


def future_sessions_today(now, sessions):
    """Sessions starting after ``now`` but still on now's calendar day, soonest first."""
    limit = end_of_day(now)
    upcoming = [s for s in sessions if now < s.start_time <= limit]
    return sorted(upcoming, key=lambda s: s.start_time)


def remaining_minutes(now, session):
    if session is None:
        return None
    seconds = (session.end_time - now).total_seconds()
    # half-up, so 59.5 minutes reads as 60
    return int(math.floor(seconds / 60 + 0.5))


def validate_window(start, end):
    """Return an error message for an unusable start/end pair, else None."""
    if start is None or end is None:
        return MISSING_TIMES
    if start >= end:
        return END_BEFORE_START
    return None
