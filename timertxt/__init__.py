"""Read, query, and write timer.txt time logs."""

from __future__ import annotations

from .config import RFC3339, DateLayout, default_layout, set_default_layout
from .errors import ParseError, TimerNotFoundError, TimerTxtError, UnsupportedSortModeError
from .models import Timer, format_timer, parse_timer
from .sorting import SortMode, date_before, sort_timers
from .storage import (
    archive_to_filename,
    load_from_file,
    load_from_filename,
    read_lines,
    write_to_file,
    write_to_filename,
)
from .timerlist import TimerList

__all__ = [
    "RFC3339",
    "DateLayout",
    "default_layout",
    "set_default_layout",
    "ParseError",
    "TimerNotFoundError",
    "TimerTxtError",
    "UnsupportedSortModeError",
    "Timer",
    "format_timer",
    "parse_timer",
    "SortMode",
    "date_before",
    "sort_timers",
    "archive_to_filename",
    "load_from_file",
    "load_from_filename",
    "read_lines",
    "write_to_file",
    "write_to_filename",
    "TimerList",
]
