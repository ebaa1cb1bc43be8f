"""
Start and end of a calendar component.

An event is expected to have DTSTART and DTEND, a task DUE and/or
DURATION, but in practice any combination (including none of them)
shows up.  start_time and end_time always give an aware datetime,
falling back through the available properties:

start_time:
    DTSTART, else DUE minus DURATION, else the epoch

end_time:
    DUE, else DTEND, else DTSTART plus DURATION, else the epoch plus
    DURATION

The two are computed independently of each other.

Note that RFC 5545 gives a VEVENT with a date-only DTSTART and neither
DTEND nor DURATION a duration of one day.  This is not applied here,
such an event ends at its start.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, tzinfo
from typing import Any

import icalendar
from dateutil.relativedelta import relativedelta

from schedulable.lib import error
from schedulable.lib.ical_logic import get_property
from schedulable.tz import (
    EPOCH,
    NULL_TIME,
    resolve_component_timezone,
    to_canonical_time,
)

log = logging.getLogger("schedulable")

## the number of seconds in a minute
SEC_MIN = 60
## the number of seconds in an hour
SEC_HOUR = 60 * SEC_MIN
## the number of seconds in a day
SEC_DAY = 24 * SEC_HOUR
## the number of seconds in a week
SEC_WEEK = 7 * SEC_DAY

_DURATION_FIELDS = (
    ("seconds", 1),
    ("minutes", SEC_MIN),
    ("hours", SEC_HOUR),
    ("days", SEC_DAY),
    ("weeks", SEC_WEEK),
)


def epoch_seconds(
    value: Any, timezone: tzinfo | None = None, component: Any = None
) -> int:
    """Whole seconds since the Unix epoch for a time value.

    The value is canonicalized first, so naive datetimes and dates are
    taken as wall clock time in ``timezone``.
    """
    dt = to_canonical_time(value, timezone, component)
    return (dt - EPOCH) // timedelta(seconds=1)


def _duration_to_seconds(duration: Any) -> int | None:
    if isinstance(duration, bytes):
        duration = duration.decode("utf-8")
    if isinstance(duration, str):
        duration = icalendar.vDuration.from_ical(duration.strip())
    elif not isinstance(duration, timedelta):
        ## vDuration exposes .td, vDDDTypes exposes .dt
        inner = getattr(duration, "td", None)
        if inner is None:
            inner = getattr(duration, "dt", None)
        if inner is not None:
            duration = inner

    fields = _DURATION_FIELDS
    if isinstance(duration, relativedelta):
        if duration.years or duration.months:
            ## no fixed length in seconds
            return None
        ## relativedelta.weeks is derived from .days
        fields = tuple(f for f in fields if f[0] != "weeks")

    present = [f for f in fields if hasattr(duration, f[0])]
    if not present:
        return None
    return sum(int(getattr(duration, name) or 0) * factor for name, factor in present)


def duration_seconds(component: Any) -> int:
    """
    The number of seconds the DURATION property of the component
    amounts to, or 0 if there is no (usable) DURATION.
    """
    duration = get_property(component, "DURATION")
    if duration is None:
        return 0
    try:
        seconds = _duration_to_seconds(duration)
    except Exception as e:
        log.debug(f"Could not interpret DURATION of type {type(duration).__name__}: {e}")
        seconds = None
    if seconds is None:
        error.weirdness(f"ignoring unusable DURATION of type {type(duration).__name__}")
        return 0
    return seconds


def start_time(component: Any) -> datetime:
    """The time when the event or task shall start."""
    tz = resolve_component_timezone(component)
    dtstart = get_property(component, "DTSTART")
    if dtstart is not None:
        return to_canonical_time(dtstart, tz)
    due = get_property(component, "DUE")
    if due is not None:
        return to_canonical_time(
            epoch_seconds(due, tz) - duration_seconds(component), tz
        )
    return to_canonical_time(NULL_TIME, tz)


def end_time(component: Any) -> datetime:
    """The time when the event or task shall end."""
    tz = resolve_component_timezone(component)
    due = get_property(component, "DUE")
    if due is not None:
        return to_canonical_time(due, tz)
    dtend = get_property(component, "DTEND")
    if dtend is not None:
        return to_canonical_time(dtend, tz)
    dtstart = get_property(component, "DTSTART")
    if dtstart is not None:
        return to_canonical_time(
            epoch_seconds(dtstart, tz) + duration_seconds(component), tz
        )
    return to_canonical_time(NULL_TIME + duration_seconds(component), tz)
