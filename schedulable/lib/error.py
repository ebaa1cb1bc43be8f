#!/usr/bin/env python
import logging
from typing import Optional

from schedulable import __version__

try:
    import os

    ## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
    debugmode = os.environ["PYTHON_SCHEDULABLE_DEBUGMODE"]
except KeyError:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("schedulable")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def weirdness(*reasons):
    reason = " : ".join([str(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


def assert_(condition: object) -> None:
    try:
        assert condition
    except AssertionError:
        if debugmode == "PRODUCTION":
            log.error(
                "Deviation from expectations found.  %s" % ERR_FRAGMENT, exc_info=True
            )
        elif debugmode == "DEBUG_PDB":
            log.error("Deviation from expectations found.  Dropping into debugger")
            import pdb

            pdb.set_trace()
        else:
            raise


ERR_FRAGMENT: str = "Please consider raising an issue on the schedulable issue tracker, include this error, the traceback (if any) and the calendar data that triggered it"


class ScheduleError(Exception):
    reason: str = "no reason"

    def __init__(self, reason: Optional[str] = None) -> None:
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return "%s, reason %s" % (
            self.__class__.__name__,
            self.reason,
        )


class RecurrenceRuleError(ScheduleError):
    """
    The recurrence engine refused a rule.  The rule property holds
    the offending RRULE text exactly as it was taken from the
    component, the reason property holds the engine's complaint.
    """

    rule: Optional[str] = None

    def __init__(self, rule: Optional[str] = None, reason: Optional[str] = None) -> None:
        super().__init__(reason=reason)
        if rule is not None:
            self.rule = rule

    def __str__(self) -> str:
        return "%s in rule '%s', reason %s" % (
            self.__class__.__name__,
            self.rule,
            self.reason,
        )
