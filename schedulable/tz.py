"""
Timezone resolution and coercion of time values into aware datetimes.

Calendar data in the wild carries its timezone information in
different places.  It may come as a TZID parameter on the property,
as an already aware datetime inside the property, or not at all.  The
functions here settle on one timezone per component and express every
time value of that component in it.

Public API:
    lookup_timezone(identifier) -> tzinfo | None
    extract_timezone(value) -> tzinfo | None
    resolve_component_timezone(component) -> tzinfo
    to_canonical_time(value, timezone=None, component=None) -> datetime

None of them raise.  A value that can't be understood ends up as the
start of the Unix epoch, a component without any timezone hints ends
up in UTC.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from schedulable.lib.ical_logic import get_property

log = logging.getLogger("schedulable")

UTC = ZoneInfo("UTC")

## The start of the Unix Epoch (January 1, 1970 00:00 UTC)
NULL_TIME = 0
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_QUOTES = "\"'"


def lookup_timezone(identifier: Any) -> tzinfo | None:
    """Look up a timezone in the system timezone database.

    TZID parameters sometimes come quoted, and icalendar may hand over
    a list of values rather than a string.  Both are tolerated.

    Examples:
        "America/New_York"    → ZoneInfo("America/New_York")
        '"Europe/Oslo"'       → ZoneInfo("Europe/Oslo")
        ["Asia/Tokyo"]        → ZoneInfo("Asia/Tokyo")
        "Mars/Olympus_Mons"   → None

    Args:
        identifier: An IANA timezone name.

    Returns:
        The timezone, or None if the identifier is empty or unknown.
    """
    if isinstance(identifier, (list, tuple)):
        identifier = identifier[0] if identifier else None
    if identifier is None:
        return None
    key = str(identifier).strip()
    if key[:1] in _QUOTES:
        key = key[1:]
    if key[-1:] in _QUOTES:
        key = key[:-1]
    if not key:
        return None
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        log.debug(f"Unknown timezone identifier {key!r}: {e}")
        return None


def _is_ical_value(value: Any) -> bool:
    ## icalendar wraps property values (vDDDTypes, vDatetime, vDate, ...)
    ## and exposes the python object through .dt
    return not isinstance(value, date) and hasattr(value, "dt")


def _is_aware(value: Any) -> bool:
    return (
        isinstance(value, datetime)
        and value.tzinfo is not None
        and value.utcoffset() is not None
    )


def _tzid_timezone(value: Any) -> tzinfo | None:
    if not _is_ical_value(value):
        return None
    params = getattr(value, "params", None)
    if not params:
        return None
    tzid = params.get("TZID")
    if tzid is None:
        tzid = params.get("tzid")
    return lookup_timezone(tzid)


def _zoned_timezone(value: Any) -> tzinfo | None:
    if not _is_aware(value):
        return None
    return value.tzinfo


def _inner_timezone(value: Any) -> tzinfo | None:
    if not _is_ical_value(value):
        return None
    return _zoned_timezone(value.dt)


## Order matters: an explicit TZID parameter wins over the tzinfo of
## an already parsed value.
_EXTRACTORS: tuple[Callable[[Any], tzinfo | None], ...] = (
    _tzid_timezone,
    _zoned_timezone,
    _inner_timezone,
)


def extract_timezone(value: Any) -> tzinfo | None:
    """Find the timezone a single time value is expressed in.

    Tries, in order, the TZID parameter of an icalendar value, the
    tzinfo of an aware datetime, and the tzinfo of the datetime
    wrapped inside an icalendar value.

    Returns:
        The timezone, or None for naive values, dates and anything
        that isn't a time value at all.
    """
    for extractor in _EXTRACTORS:
        try:
            tz = extractor(value)
        except Exception as e:
            log.debug(f"{extractor.__name__} failed on {type(value).__name__} value: {e}")
            tz = None
        if tz is not None:
            return tz
    return None


def resolve_component_timezone(component: Any) -> tzinfo:
    """Heuristic to determine the timezone of a calendar component.

    DTEND is consulted first, then DTSTART, then DUE.  The first one
    giving a timezone wins.  As a last resort UTC is used.
    """
    for name in ("DTEND", "DTSTART", "DUE"):
        tz = extract_timezone(get_property(component, name))
        if tz is not None:
            return tz
    return UTC


def _zone_name(tz: tzinfo) -> str | None:
    ## ZoneInfo has .key, pytz has .zone
    return getattr(tz, "key", None) or getattr(tz, "zone", None)


def _same_zone(a: tzinfo, b: tzinfo) -> bool:
    if a is b or a == b:
        return True
    name = _zone_name(a)
    return name is not None and name == _zone_name(b)


def _attach(naive: datetime, tz: tzinfo) -> datetime:
    """Read a naive datetime as wall clock time in the given timezone."""
    localize = getattr(tz, "localize", None)
    if localize is not None:
        ## pytz picks the wrong offset unless asked to localize
        return localize(naive)
    return naive.replace(tzinfo=tz)


def _from_epoch(seconds: int, tz: tzinfo) -> datetime:
    return (EPOCH + timedelta(seconds=seconds)).astimezone(tz)


def _time_converter(value: Any) -> Callable[[], Any] | None:
    for name in ("to_pydatetime", "to_datetime"):
        converter = getattr(value, name, None)
        if callable(converter):
            return converter
    return None


def _coerce(value: Any, tz: tzinfo) -> datetime | None:
    if _is_ical_value(value):
        payload = value.dt
        if isinstance(payload, datetime) and not _is_aware(payload):
            ## a TZID parameter on a naive value is the zone of the wall clock time
            own_tz = _tzid_timezone(value)
            if own_tz is not None:
                payload = _attach(payload, own_tz)
    else:
        payload = value

    if isinstance(payload, datetime):
        if _is_aware(payload):
            if _same_zone(payload.tzinfo, tz):
                return payload
            return payload.astimezone(tz)
        return _attach(payload, tz)

    if isinstance(payload, date):
        return _attach(datetime(payload.year, payload.month, payload.day), tz)

    converter = _time_converter(payload)
    if converter is not None:
        converted = converter()
        if isinstance(converted, datetime):
            return _coerce(converted, tz)

    if hasattr(payload, "__int__"):
        ## seconds since the epoch
        return _from_epoch(int(payload), tz)

    return None


def to_canonical_time(
    value: Any, timezone: tzinfo | str | None = None, component: Any = None
) -> datetime:
    """Transform the given object into an aware datetime.

    An aware datetime already in the requested timezone is returned
    unchanged.  Other aware datetimes are converted, naive datetimes
    are taken as wall clock time in the timezone, dates become
    midnight, and numbers are taken as seconds since the epoch.
    Anything else gives the epoch.

    Args:
        value: Something that represents a point in time.
        timezone: The timezone to express the result in.  Defaults to
            the resolved timezone of ``component`` (UTC without one).
        component: The component the value belongs to.

    Returns:
        An aware datetime in the requested timezone.
    """
    if timezone is not None and not isinstance(timezone, tzinfo):
        timezone = lookup_timezone(timezone)
    if timezone is None:
        timezone = resolve_component_timezone(component)

    try:
        ret = _coerce(value, timezone)
    except Exception as e:
        log.debug(f"Could not interpret {type(value).__name__} value as a time: {e}")
        ret = None

    if ret is None:
        log.debug(f"Falling back to the epoch for {type(value).__name__} value")
        ret = _from_epoch(NULL_TIME, timezone)
    return ret
