from __future__ import annotations

import datetime as dt
import enum
from functools import cmp_to_key
from typing import Callable, List, Optional, Union

from .errors import UnsupportedSortModeError
from .models import Timer
from .utils import align


class SortMode(enum.IntEnum):
    UNFINISHED_START = 0
    START_DATE_ASC = 1
    START_DATE_DESC = 2
    FINISH_DATE_ASC = 3
    FINISH_DATE_DESC = 4


Before = Callable[[Timer, Timer], bool]


def date_before(first: Optional[dt.datetime], second: Optional[dt.datetime], ascending: bool) -> bool:
    """Ordering predicate for possibly unset dates.

    Set dates compare chronologically. Unset dates go after set ones when
    ascending and before them when descending.
    """
    if first is not None and second is not None:
        second = align(second, first)
        return first < second if ascending else first > second
    if ascending:
        return first is not None and second is None
    return first is None and second is not None


def _by_start_date(ascending: bool) -> Before:
    return lambda t1, t2: date_before(t1.start_date, t2.start_date, ascending)


def _by_finish_date(ascending: bool) -> Before:
    return lambda t1, t2: date_before(t1.finish_date, t2.finish_date, ascending)


def _unfinished_then_start(t1: Timer, t2: Timer) -> bool:
    running1 = t1.finish_date is None
    running2 = t2.finish_date is None
    if running1 != running2:
        return running1
    return date_before(t1.start_date, t2.start_date, False)


_STRATEGIES: dict[SortMode, Before] = {
    SortMode.UNFINISHED_START: _unfinished_then_start,
    SortMode.START_DATE_ASC: _by_start_date(True),
    SortMode.START_DATE_DESC: _by_start_date(False),
    SortMode.FINISH_DATE_ASC: _by_finish_date(True),
    SortMode.FINISH_DATE_DESC: _by_finish_date(False),
}


def resolve_sort_mode(mode: Union[SortMode, int, str]) -> SortMode:
    """Accept a ``SortMode``, its integer value, or its name in any case."""
    if isinstance(mode, SortMode):
        return mode
    try:
        if isinstance(mode, str):
            return SortMode[mode.strip().upper()]
        if isinstance(mode, int) and not isinstance(mode, bool):
            return SortMode(mode)
    except (KeyError, ValueError) as exc:
        raise UnsupportedSortModeError(mode) from exc
    raise UnsupportedSortModeError(mode)


def sort_timers(timers: List[Timer], mode: Union[SortMode, int, str]) -> List[Timer]:
    """Sort ``timers`` in place with a stable sort and return the same list."""
    before = _STRATEGIES[resolve_sort_mode(mode)]

    def compare(t1: Timer, t2: Timer) -> int:
        if before(t1, t2):
            return -1
        if before(t2, t1):
            return 1
        return 0

    timers.sort(key=cmp_to_key(compare))
    return timers


__all__ = ["SortMode", "date_before", "resolve_sort_mode", "sort_timers"]
