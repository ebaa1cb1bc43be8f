from datetime import date
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from zoneinfo import ZoneInfo

import icalendar
import pytest
import recurring_ical_events

from schedulable.lib.error import RecurrenceRuleError
from schedulable.lib.error import ScheduleError
from schedulable.schedule import build_schedule
from schedulable.schedule import ScheduleSpec
from schedulable.times import end_time
from schedulable.times import start_time

NEW_YORK = ZoneInfo("America/New_York")

STANDUP = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Example Corp.//CalDAV Client//EN
BEGIN:VEVENT
UID:standup@example.com
DTSTAMP:20171201T000000Z
DTSTART;TZID=America/New_York:20180101T100000
DTEND;TZID=America/New_York:20180101T101500
RRULE:FREQ=DAILY;COUNT=5
EXDATE;TZID=America/New_York:20180103T100000
RDATE;TZID=America/New_York:20180110T100000
SUMMARY:Standup
END:VEVENT
END:VCALENDAR"""

## crosses the daylight saving time change on march 11. 2018
WEEKLY = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Example Corp.//CalDAV Client//EN
BEGIN:VEVENT
UID:weekly@example.com
DTSTAMP:20180101T000000Z
DTSTART;TZID=America/New_York:20180304T100000
DURATION:PT1H
RRULE:FREQ=WEEKLY;COUNT=3
SUMMARY:Weekly
END:VEVENT
END:VCALENDAR"""


def _calendar(ical):
    return icalendar.Calendar.from_ical(ical)


def _event(ical):
    return _calendar(ical).walk("VEVENT")[0]


class TestBuildSchedule:
    def test_empty_component(self):
        component = icalendar.Todo()
        spec = build_schedule(component)
        assert spec.rules == []
        assert spec.exceptions == []
        assert spec.extra_dates == []
        assert spec.start == start_time(component)
        assert spec.end == end_time(component)

    def test_no_component(self):
        spec = build_schedule(None)
        assert spec.start == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert spec.rules == []

    def test_parsed_event(self):
        spec = build_schedule(_event(STANDUP))
        assert spec.start == datetime(2018, 1, 1, 10, tzinfo=NEW_YORK)
        assert spec.end == datetime(2018, 1, 1, 10, 15, tzinfo=NEW_YORK)
        assert spec.rules == ["FREQ=DAILY;COUNT=5"]
        assert spec.exceptions == [datetime(2018, 1, 3, 10, tzinfo=NEW_YORK)]
        assert spec.extra_dates == [datetime(2018, 1, 10, 10, tzinfo=NEW_YORK)]
        assert spec.duration == timedelta(minutes=15)

    def test_dates_in_component_timezone(self):
        event = icalendar.Event()
        event.add("dtstart", datetime(2018, 1, 1, 10, tzinfo=NEW_YORK))
        event.add("rrule", {"FREQ": "DAILY"})
        event.add("exdate", datetime(2018, 1, 2, 15, tzinfo=timezone.utc))
        event.add("rdate", date(2018, 2, 1))
        spec = build_schedule(event)
        assert spec.exceptions[0].tzinfo is NEW_YORK
        assert spec.exceptions[0].hour == 10
        assert spec.extra_dates == [datetime(2018, 2, 1, tzinfo=NEW_YORK)]

    def test_rules_are_not_validated(self):
        spec = build_schedule({"RRULE": "FREQ=SOMETIMES"})
        assert spec.rules == ["FREQ=SOMETIMES"]

    def test_is_immutable(self):
        spec = build_schedule(icalendar.Event())
        with pytest.raises(AttributeError):
            spec.start = datetime(2018, 1, 1, tzinfo=timezone.utc)

    def test_fresh_per_call(self):
        event = _event(STANDUP)
        assert build_schedule(event) is not build_schedule(event)
        assert build_schedule(event) == build_schedule(event)

    def test_from_component(self):
        event = _event(STANDUP)
        assert ScheduleSpec.from_component(event) == build_schedule(event)


class TestExpansion:
    def test_standup(self):
        spec = build_schedule(_event(STANDUP))
        assert spec.occurrences(date(2018, 1, 1), date(2018, 2, 1)) == [
            datetime(2018, 1, day, 10, tzinfo=NEW_YORK) for day in (1, 2, 4, 5, 10)
        ]

    def test_same_as_recurring_ical_events(self):
        for ical in (STANDUP, WEEKLY):
            spec = build_schedule(_event(ical))
            expected = sorted(
                e["DTSTART"].dt
                for e in recurring_ical_events.of(_calendar(ical)).between(
                    (2018, 1, 1), (2018, 6, 1)
                )
            )
            assert spec.occurrences(date(2018, 1, 1), date(2018, 6, 1)) == expected

    def test_wall_clock_kept_over_dst(self):
        spec = build_schedule(_event(WEEKLY))
        occurrences = spec.first(10)
        assert len(occurrences) == 3
        assert [x.hour for x in occurrences] == [10, 10, 10]
        assert [x.utcoffset() for x in occurrences] == [
            timedelta(hours=-5),
            timedelta(hours=-4),
            timedelta(hours=-4),
        ]

    def test_no_rules(self):
        start = datetime(2018, 1, 1, 10, tzinfo=NEW_YORK)
        spec = ScheduleSpec(start=start, end=start + timedelta(hours=1))
        assert spec.first(5) == [start]
        assert not spec.is_recurring

    def test_no_rules_with_rdate(self):
        start = datetime(2018, 1, 1, 10, tzinfo=NEW_YORK)
        extra = datetime(2018, 1, 8, 10, tzinfo=NEW_YORK)
        spec = ScheduleSpec(start=start, end=start, extra_dates=[extra])
        assert spec.first(5) == [start, extra]
        assert spec.is_recurring

    def test_exclusive_bounds(self):
        spec = build_schedule(_event(STANDUP))
        bound = datetime(2018, 1, 2, 10)
        assert spec.occurrences(bound, date(2018, 1, 5), inc=False) == [
            datetime(2018, 1, 4, 10, tzinfo=NEW_YORK)
        ]

    def test_broken_rule(self):
        start = datetime(2018, 1, 1, 10, tzinfo=NEW_YORK)
        spec = ScheduleSpec(start=start, end=start, rules=["FREQ=SOMETIMES"])
        with pytest.raises(RecurrenceRuleError) as excinfo:
            spec.rruleset()
        assert excinfo.value.rule == "FREQ=SOMETIMES"
        assert "FREQ=SOMETIMES" in str(excinfo.value)
        assert isinstance(excinfo.value, ScheduleError)

    def test_broken_rule_found_on_expansion_only(self):
        spec = build_schedule({"DTSTART": datetime(2018, 1, 1), "RRULE": "garbage"})
        with pytest.raises(RecurrenceRuleError):
            spec.first()


## an all-day event with a date-only UNTIL
NEW_YEAR_DAYS = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Example Corp.//CalDAV Client//EN
BEGIN:VEVENT
UID:new-year-days@example.com
DTSTAMP:20171201T000000Z
DTSTART;VALUE=DATE:20180101
DTEND;VALUE=DATE:20180102
RRULE:FREQ=DAILY;UNTIL=20180103
SUMMARY:Holidays
END:VEVENT
END:VCALENDAR"""

# example from http://www.rfc-editor.org/rfc/rfc5545.txt, with an UNTIL
ANNIVERSARY_UNTIL = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Example Corp.//CalDAV Client//EN
BEGIN:VEVENT
UID:19970901T130000Z-123403@example.com
DTSTAMP:19970901T130000Z
DTSTART;VALUE=DATE:19971102
SUMMARY:Our Blissful Anniversary
RRULE:FREQ=YEARLY;UNTIL=19991102
END:VEVENT
END:VCALENDAR"""

STANDUP_UNTIL = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Example Corp.//CalDAV Client//EN
BEGIN:VEVENT
UID:standup-until@example.com
DTSTAMP:20171201T000000Z
DTSTART;TZID=America/New_York:20180101T100000
DURATION:PT15M
RRULE:FREQ=DAILY;UNTIL=20180103T100000
SUMMARY:Standup
END:VEVENT
END:VCALENDAR"""


class TestUntil:
    def test_date_until(self):
        spec = build_schedule(_event(NEW_YEAR_DAYS))
        assert spec.rules == ["FREQ=DAILY;UNTIL=20180103"]
        assert spec.first(10) == [
            datetime(2018, 1, day, tzinfo=timezone.utc) for day in (1, 2, 3)
        ]

    def test_date_until_yearly(self):
        spec = build_schedule(_event(ANNIVERSARY_UNTIL))
        assert [x.year for x in spec.first(10)] == [1997, 1998, 1999]

    def test_floating_until_is_wall_clock_time(self):
        spec = build_schedule(_event(STANDUP_UNTIL))
        assert spec.first(10) == [
            datetime(2018, 1, day, 10, tzinfo=NEW_YORK) for day in (1, 2, 3)
        ]

    def test_utc_until(self):
        start = datetime(2018, 1, 1, 10, tzinfo=NEW_YORK)
        spec = ScheduleSpec(
            start=start, end=start, rules=["FREQ=DAILY;UNTIL=20180103T150000Z"]
        )
        assert len(spec.first(10)) == 3

    def test_until_as_first_part(self):
        start = datetime(2018, 1, 1, 10, tzinfo=NEW_YORK)
        spec = ScheduleSpec(
            start=start, end=start, rules=["UNTIL=20180102T100000;FREQ=DAILY"]
        )
        assert len(spec.first(10)) == 2

    def test_same_as_recurring_ical_events(self):
        for ical in (NEW_YEAR_DAYS, STANDUP_UNTIL):
            spec = build_schedule(_event(ical))
            expected = [
                e["DTSTART"].dt
                for e in recurring_ical_events.of(_calendar(ical)).between(
                    (2018, 1, 1), (2018, 2, 1)
                )
            ]
            assert len(spec.occurrences(date(2018, 1, 1), date(2018, 2, 1))) == len(
                expected
            )

    def test_bad_until(self):
        start = datetime(2018, 1, 1, 10, tzinfo=NEW_YORK)
        spec = ScheduleSpec(start=start, end=start, rules=["FREQ=DAILY;UNTIL=2018T"])
        with pytest.raises(RecurrenceRuleError) as excinfo:
            spec.first()
        assert excinfo.value.rule == "FREQ=DAILY;UNTIL=2018T"
