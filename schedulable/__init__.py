#!/usr/bin/env python
import logging

__version__ = "0.9.0"

from .component import Schedulable
from .schedule import build_schedule
from .schedule import ScheduleSpec
from .times import duration_seconds
from .times import end_time
from .times import epoch_seconds
from .times import start_time
from .tz import extract_timezone
from .tz import lookup_timezone
from .tz import resolve_component_timezone
from .tz import to_canonical_time

# Silence notification of no default logging handler
log = logging.getLogger("schedulable")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = [
    "__version__",
    "Schedulable",
    "ScheduleSpec",
    "build_schedule",
    "duration_seconds",
    "end_time",
    "epoch_seconds",
    "extract_timezone",
    "lookup_timezone",
    "resolve_component_timezone",
    "start_time",
    "to_canonical_time",
]
