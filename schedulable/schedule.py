"""
Recurrence schedules of calendar components.

build_schedule collects what a recurrence engine needs to expand a
component: the resolved start and end, the RRULE text, and the EXDATE
and RDATE instants, all expressed in the component timezone.  The
resulting ScheduleSpec can be expanded through dateutil.rrule.

The RRULE text is kept as found on the component.  On expansion, a
date or floating UNTIL is read in the schedule timezone and handed to
dateutil in UTC, as dateutil requires with an aware DTSTART.  Broken
rules are only detected when the schedule is expanded, and then
reported as a
:class:`schedulable.lib.error.RecurrenceRuleError`.
"""

from __future__ import annotations

import itertools
import re
import sys
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

import icalendar
from dateutil.rrule import rrule, rruleset, rrulestr

from schedulable.lib import error
from schedulable.lib.ical_logic import (
    exception_dates,
    recurrence_dates,
    recurrence_rules,
)
from schedulable.times import end_time, start_time
from schedulable.tz import UTC, resolve_component_timezone, to_canonical_time

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

## UNTIL values without a trailing Z
_FLOATING_UNTIL = re.compile(r"(UNTIL=)([0-9T]+)(?=;|$)", re.IGNORECASE)


@dataclass(frozen=True)
class ScheduleSpec:
    """
    Everything needed to expand the occurrences of one component.

    Attributes:
        start: start of the first occurrence
        end: end of the first occurrence
        rules: RRULE values as RFC 5545 text, like "FREQ=DAILY;COUNT=3"
        exceptions: instants excluded from the recurrence set (EXDATE)
        extra_dates: instants added to the recurrence set (RDATE)
    """

    start: datetime
    end: datetime
    rules: list[str] = field(default_factory=list)
    exceptions: list[datetime] = field(default_factory=list)
    extra_dates: list[datetime] = field(default_factory=list)

    @classmethod
    def from_component(cls, component: Any) -> Self:
        """Same as :func:`build_schedule`."""
        tz = resolve_component_timezone(component)
        return cls(
            start=start_time(component),
            end=end_time(component),
            rules=recurrence_rules(component),
            exceptions=[to_canonical_time(x, tz) for x in exception_dates(component)],
            extra_dates=[
                to_canonical_time(x, tz) for x in recurrence_dates(component)
            ],
        )

    @property
    def duration(self) -> timedelta:
        """How long each occurrence lasts, in elapsed time."""
        return self.end.astimezone(UTC) - self.start.astimezone(UTC)

    @property
    def is_recurring(self) -> bool:
        return bool(self.rules or self.extra_dates)

    def _utc_until(self, match: re.Match) -> str:
        ## a date or floating UNTIL is wall clock time in the schedule timezone
        try:
            until = icalendar.vDDDTypes.from_ical(match.group(2))
        except ValueError:
            return match.group(0)
        until = to_canonical_time(until, self.start.tzinfo).astimezone(UTC)
        return match.group(1) + until.strftime("%Y%m%dT%H%M%SZ")

    def _parse_rule(self, rule: str) -> rrule:
        try:
            text = _FLOATING_UNTIL.sub(self._utc_until, rule)
            parsed = rrulestr(text, dtstart=self.start)
        except (ValueError, TypeError, KeyError) as e:
            raise error.RecurrenceRuleError(rule=rule, reason=str(e)) from e
        error.assert_(isinstance(parsed, rrule))
        return parsed

    def rruleset(self) -> rruleset:
        """
        The recurrence set as a dateutil rruleset.  A schedule
        without rules has its start as the one and only occurrence
        (plus any RDATEs).
        """
        rset = rruleset()
        for rule in self.rules:
            rset.rrule(self._parse_rule(rule))
        if not self.rules:
            rset.rdate(self.start)
        for exdate in self.exceptions:
            rset.exdate(exdate)
        for rdate in self.extra_dates:
            rset.rdate(rdate)
        return rset

    def _bound(self, value: datetime | date) -> datetime:
        ## naive bounds are read as wall clock time in the schedule timezone
        return to_canonical_time(value, self.start.tzinfo)

    def occurrences(
        self, start: datetime | date, end: datetime | date, inc: bool = True
    ) -> list[datetime]:
        """
        Start times of all occurrences between start and end.

        :param start: datetime or date
        :param end: datetime or date
        :param inc: if True, occurrences exactly on a bound are included
        """
        return self.rruleset().between(self._bound(start), self._bound(end), inc=inc)

    def first(self, count: int = 1) -> list[datetime]:
        """Start times of the first ``count`` occurrences."""
        return list(itertools.islice(self.rruleset(), count))


def build_schedule(component: Any) -> ScheduleSpec:
    """Assemble the recurrence schedule of a calendar component.

    Never raises.  Missing RRULE, EXDATE or RDATE properties give
    empty lists.
    """
    return ScheduleSpec.from_component(component)
