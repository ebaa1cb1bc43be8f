"""
Total accessors for the properties of a calendar component.

Components coming out of a parser are sparse: any property may be
missing, and some parsers raise rather than return None when asked for
one.  Everything in this module reads a component without ever
raising; a property that can't be read is reported as absent.

Two shapes of components are supported:

* mapping-like objects, such as :class:`icalendar.cal.Component`,
  which are looked up by upper-case property name
* plain records, which are looked up by lower-case attribute name
"""
import logging
from collections.abc import Mapping
from typing import Any
from typing import List
from typing import Optional

import icalendar

from schedulable.lib import error

log = logging.getLogger("schedulable")


def get_property(component: Any, name: str) -> Optional[Any]:
    """
    Fetch a property from a component.

    Args:
        component: an icalendar component, a mapping or a plain record
        name: the property name, like "DTSTART"

    Returns:
        The property value, or None if it's missing or unreadable
    """
    if component is None:
        return None
    try:
        if isinstance(component, Mapping) or hasattr(component, "keys"):
            return component.get(name.upper())
        return getattr(component, name.lower(), None)
    except Exception as e:
        log.debug(f"Could not read {name} from {type(component).__name__}: {e}")
        return None


def _as_list(value: Any) -> list:
    ## icalendar gives a single object when a property occurs once and
    ## a list when it occurs several times
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


## Malformed property values give one of these.  Anything else is a bug
## and is reported through error.weirdness.
_EXPECTED_ERRORS = (AttributeError, TypeError, ValueError, KeyError, IndexError)


def _unreadable(name: str, e: Exception) -> list:
    if isinstance(e, _EXPECTED_ERRORS):
        log.debug(f"Ignoring unreadable {name}: {e}")
    else:
        error.weirdness(f"unexpected {type(e).__name__} reading {name}", e)
    return []


def recurrence_rules(component: Any) -> List[str]:
    """
    The RRULE properties of the component as RFC 5545 text,
    i.e. "FREQ=WEEKLY;BYDAY=MO,WE".  An empty list if there are none.
    """
    try:
        ret = []
        for rrule in _as_list(get_property(component, "RRULE")):
            if hasattr(rrule, "to_ical"):
                rrule = rrule.to_ical()
            if isinstance(rrule, bytes):
                rrule = rrule.decode("utf-8")
            ret.append(str(rrule))
        return ret
    except Exception as e:
        return _unreadable("RRULE", e)


def _date_value(item: Any) -> Any:
    if isinstance(item, tuple):
        ## a PERIOD, (start, end) or (start, duration)
        return item[0]
    if isinstance(getattr(item, "dt", None), tuple):
        return item.dt[0]
    return item


def _flatten_dates(value: Any) -> list:
    ret = []
    for item in _as_list(value):
        if isinstance(item, icalendar.vDDDLists):
            ## one EXDATE/RDATE line with possibly several values
            ret.extend(_date_value(x) for x in item.dts)
        else:
            ret.append(_date_value(item))
    return ret


def exception_dates(component: Any) -> list:
    """
    All EXDATE values of the component, flattened across multiple
    EXDATE lines.  Values are returned as found, not canonicalized.
    """
    try:
        return _flatten_dates(get_property(component, "EXDATE"))
    except Exception as e:
        return _unreadable("EXDATE", e)


def recurrence_dates(component: Any) -> list:
    """
    All RDATE values of the component, flattened across multiple
    RDATE lines.  For a PERIOD, the start of the period is used.
    """
    try:
        return _flatten_dates(get_property(component, "RDATE"))
    except Exception as e:
        return _unreadable("RDATE", e)
