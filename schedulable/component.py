"""
Attribute style access to the time handling of one calendar component.

Usage::

    import icalendar
    from schedulable import Schedulable

    todo = icalendar.Todo()
    todo.add("due", datetime(2018, 3, 20, 14, 0, 30, tzinfo=ZoneInfo("America/New_York")))
    todo.add("duration", timedelta(days=15, hours=5, seconds=20))

    s = Schedulable(todo)
    s.start_time  # 2018-03-05 08:00:10-05:00
    s.end_time    # 2018-03-20 14:00:30-04:00

The wrapped component is never modified, and nothing is cached: every
attribute is computed from the component as it is at the time of
access.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any

from schedulable.lib.ical_logic import (
    exception_dates,
    recurrence_dates,
    recurrence_rules,
)
from schedulable.schedule import ScheduleSpec
from schedulable.times import duration_seconds, end_time, start_time
from schedulable.tz import resolve_component_timezone, to_canonical_time


class Schedulable:
    """Wraps an icalendar component (or any record with the same fields)."""

    def __init__(self, component: Any) -> None:
        self.component = component

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.component!r})"

    @property
    def component_timezone(self) -> tzinfo:
        return resolve_component_timezone(self.component)

    @property
    def start_time(self) -> datetime:
        return start_time(self.component)

    @property
    def end_time(self) -> datetime:
        return end_time(self.component)

    @property
    def duration_seconds(self) -> int:
        return duration_seconds(self.component)

    @property
    def rrules(self) -> list[str]:
        return recurrence_rules(self.component)

    @property
    def exdates(self) -> list[datetime]:
        """EXDATE values in the component timezone"""
        tz = self.component_timezone
        return [to_canonical_time(x, tz) for x in exception_dates(self.component)]

    @property
    def rdates(self) -> list[datetime]:
        """RDATE values in the component timezone"""
        tz = self.component_timezone
        return [to_canonical_time(x, tz) for x in recurrence_dates(self.component)]

    @property
    def schedule(self) -> ScheduleSpec:
        return ScheduleSpec.from_component(self.component)

    def to_canonical_time(self, value: Any, timezone: tzinfo | None = None) -> datetime:
        """
        Express value as an aware datetime, by default in the
        component timezone.
        """
        return to_canonical_time(value, timezone, self.component)
