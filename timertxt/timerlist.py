from __future__ import annotations

import datetime as dt
from typing import Callable, Iterable, Iterator, List, Optional, TextIO, Union

from .config import DateLayout, resolve_layout
from .errors import ParseError, TimerNotFoundError
from .models import Timer, format_timer, parse_timer
from .sorting import SortMode, resolve_sort_mode, sort_timers
from .utils import is_before

Predicate = Callable[[Timer], bool]


class TimerList:
    """An ordered collection of timers, usually a whole timer.txt file.

    The order is the file order; it only changes through ``add``, the remove
    operations and ``sort``. Query methods (``filter`` and the helpers built
    on it) return new lists holding detached copies. ``get``, indexing and
    iteration hand out the stored timers themselves so they can be edited in
    place.
    """

    def __init__(self, timers: Optional[Iterable[Timer]] = None, *, layout: Union[DateLayout, str, None] = None):
        self.layout = resolve_layout(layout)
        self._timers: List[Timer] = list(timers or [])

    def __len__(self) -> int:
        return len(self._timers)

    def __iter__(self) -> Iterator[Timer]:
        return iter(self._timers)

    def __getitem__(self, index: int) -> Timer:
        return self._timers[index]

    def __repr__(self) -> str:
        return f"TimerList({self._timers!r})"

    def __str__(self) -> str:
        return self.to_text()

    @property
    def ids(self) -> List[int]:
        return [timer.id for timer in self._timers]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def format(self, timer: Timer) -> str:
        return format_timer(timer, self.layout)

    def to_text(self) -> str:
        """The whole list in timer.txt format, one newline-terminated line per timer."""
        return "".join(f"{self.format(timer)}\n" for timer in self._timers)

    def load(self, lines: Iterable[str]) -> "TimerList":
        """Replace the contents with the timers parsed from ``lines``.

        Blank lines are skipped and ids are assigned from 1 in line order.
        On a ``ParseError`` the list keeps its previous contents.
        """
        loaded: List[Timer] = []
        for number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                timer = parse_timer(line, self.layout)
            except ParseError as exc:
                exc.line = number
                raise
            timer.id = len(loaded) + 1
            loaded.append(timer)
        self._timers = loaded
        return self

    def dump(self, stream: TextIO) -> None:
        stream.write(self.to_text())

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def add(self, timer: Timer) -> Timer:
        """Append a copy of ``timer`` with the next free id and return the stored timer.

        The id is one more than the highest id in the list, or 1 when empty,
        and is also written back to ``timer``.
        """
        timer.id = max((t.id for t in self._timers), default=0) + 1
        stored = timer.copy()
        self._timers.append(stored)
        return stored

    def get(self, timer_id: int) -> Timer:
        """Return the stored timer with ``timer_id``; changes to it change the list."""
        for timer in self._timers:
            if timer.id == timer_id:
                return timer
        raise TimerNotFoundError(f"timer {timer_id} not found", timer_id=timer_id)

    def remove_by_id(self, timer_id: int) -> None:
        for index, timer in enumerate(self._timers):
            if timer.id == timer_id:
                del self._timers[index]
                return
        raise TimerNotFoundError(f"timer {timer_id} not found", timer_id=timer_id)

    def remove(self, timer: Timer) -> None:
        """Remove every timer whose formatted line equals that of ``timer``.

        Matching is by content, not id, so identical duplicates all go.
        """
        if timer.start_date is None:
            raise TimerNotFoundError("timer without a start date is never listed", timer_id=timer.id or None)
        target = self.format(timer)
        kept = [t for t in self._timers if t.start_date is None or self.format(t) != target]
        if len(kept) == len(self._timers):
            raise TimerNotFoundError(f"timer not found: {target!r}", timer_id=timer.id or None)
        self._timers = kept

    def archive_to(self, timer: Timer, destination: TextIO) -> None:
        """Remove ``timer`` and append its line to ``destination``.

        Nothing is written when the timer is not in the list. A failing write
        leaves the timer removed; re-adding it is up to the caller.
        """
        self.remove(timer)
        destination.write(f"{self.format(timer)}\n")

    def sort(self, mode: Union[SortMode, int, str] = SortMode.UNFINISHED_START) -> "TimerList":
        sort_timers(self._timers, resolve_sort_mode(mode))
        return self

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def filter(self, predicate: Predicate) -> "TimerList":
        """Return a new list of copies of the matching timers, order preserved."""
        return TimerList((t.copy() for t in self._timers if predicate(t)), layout=self.layout)

    def active(self) -> "TimerList":
        return self.filter(lambda t: t.finish_date is None)

    def with_context(self, context: str) -> "TimerList":
        return self.filter(lambda t: t.has_context(context))

    def with_project(self, project: str) -> "TimerList":
        return self.filter(lambda t: t.has_project(project))

    def active_on_day(self, day: Union[dt.date, dt.datetime]) -> "TimerList":
        return self.filter(lambda t: t.active_on_day(day))

    def in_range(self, start: dt.datetime, end: dt.datetime) -> "TimerList":
        """Timers whose start or finish date lies strictly between ``start`` and ``end``."""

        def within(value: Optional[dt.datetime]) -> bool:
            return value is not None and is_before(start, value) and is_before(value, end)

        return self.filter(lambda t: within(t.start_date) or within(t.finish_date))


__all__ = ["TimerList"]
