"""The timer.txt entry model.

A line in a timer.txt file looks like::

    [x <finish> ]<start> <notes> [@context]* [+project]* [key:value]*

For example::

    2019-02-15T11:43:00-06:00 Working on Go Library @home @personal +timertxt due:Today
    x 2019-02-15T10:00:00-06:00 2019-02-15T06:00:00-06:00 Creating Go Library Repo @home +timertxt

Contexts, projects and additional tags may appear anywhere after the start
date. They are written back after the notes, each group sorted.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .config import DateLayout, resolve_layout
from .errors import ParseError
from .utils import align, is_before, now_like

COMPLETION_MARKER = "x"
CONTEXT_PREFIX = "@"
PROJECT_PREFIX = "+"
TAG_SEPARATOR = ":"

LayoutArg = Union[DateLayout, str, None]


@dataclass(slots=True)
class Timer:
    """A single timer.txt entry. ``None`` dates are unset."""

    id: int = 0
    original: str = ""
    start_date: Optional[dt.datetime] = None
    finish_date: Optional[dt.datetime] = None
    finished: bool = False
    notes: str = ""
    projects: List[str] = field(default_factory=list)
    contexts: List[str] = field(default_factory=list)
    additional_tags: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def new(
        cls,
        notes: str = "",
        *,
        contexts: Iterable[str] = (),
        projects: Iterable[str] = (),
        tags: Optional[Mapping[str, str]] = None,
        start_date: Optional[dt.datetime] = None,
    ) -> "Timer":
        """Create a running timer that starts now unless ``start_date`` is given."""
        return cls(
            start_date=start_date or now_like(),
            notes=notes,
            contexts=_unique(contexts),
            projects=_unique(projects),
            additional_tags=dict(tags or {}),
        )

    @classmethod
    def parse(cls, text: str, layout: LayoutArg = None) -> "Timer":
        return parse_timer(text, layout)

    def __str__(self) -> str:
        return format_timer(self)

    def to_text(self, layout: LayoutArg = None) -> str:
        return format_timer(self, layout)

    def copy(self) -> "Timer":
        """Return a detached copy; list and dict fields are not shared."""
        return Timer(
            id=self.id,
            original=self.original,
            start_date=self.start_date,
            finish_date=self.finish_date,
            finished=self.finished,
            notes=self.notes,
            projects=list(self.projects),
            contexts=list(self.contexts),
            additional_tags=dict(self.additional_tags),
        )

    def finish(self, now: Optional[dt.datetime] = None) -> None:
        if self.finished:
            return
        self.finished = True
        self.finish_date = now or now_like(self.start_date)

    def reopen(self) -> None:
        if not self.finished:
            return
        self.finished = False
        self.finish_date = None

    def duration(self, now: Optional[dt.datetime] = None) -> dt.timedelta:
        """Time between start and finish, or between start and now while running."""
        if self.start_date is None:
            return dt.timedelta(0)
        end = self.finish_date or now or now_like(self.start_date)
        return align(end, self.start_date) - self.start_date

    def active_on_day(self, day: Union[dt.date, dt.datetime]) -> bool:
        """True if the timer starts or finishes on ``day`` or spans it.

        Start and finish dates are matched by calendar day. Spanning is an
        open interval on the full timestamp: ``start < day < finish``.
        """
        calendar_day = day.date() if isinstance(day, dt.datetime) else day
        for value in (self.start_date, self.finish_date):
            if value is not None and value.date() == calendar_day:
                return True
        if self.start_date is None or self.finish_date is None:
            return False
        if not isinstance(day, dt.datetime):
            return self.start_date.date() < calendar_day < self.finish_date.date()
        return is_before(self.start_date, day) and is_before(day, self.finish_date)

    def active_today(self) -> bool:
        return self.active_on_day(now_like(self.start_date))

    def has_context(self, context: str) -> bool:
        return context in self.contexts

    def has_project(self, project: str) -> bool:
        return project in self.projects


def _unique(values: Iterable[str]) -> List[str]:
    result: List[str] = []
    for value in values:
        if value not in result:
            result.append(value)
    return result


def parse_timer(text: str, layout: LayoutArg = None) -> Timer:
    """Parse one line of timer.txt text.

    Raises ``ParseError`` for blank lines and for missing or malformed dates.
    Duplicate ``key:value`` keys keep the last value.
    """
    date_layout = resolve_layout(layout)
    timer = Timer(original=text.strip())
    parts = timer.original.split()
    if not parts:
        raise ParseError("empty timer line", text=text)

    if parts[0] == COMPLETION_MARKER:
        timer.finished = True
        if len(parts) < 2:
            raise ParseError("missing/invalid finish date", text=timer.original)
        try:
            timer.finish_date = date_layout.parse(parts[1])
        except ValueError as exc:
            raise ParseError(f"missing/invalid finish date: {exc}", text=timer.original) from exc
        parts = parts[2:]

    if not parts:
        raise ParseError("missing/invalid start date", text=timer.original)
    try:
        timer.start_date = date_layout.parse(parts[0])
    except ValueError as exc:
        raise ParseError(f"missing/invalid start date: {exc}", text=timer.original) from exc

    notes: List[str] = []
    for part in parts[1:]:
        if part.startswith(CONTEXT_PREFIX) and len(part) > 1:
            context = part[1:]
            if context not in timer.contexts:
                timer.contexts.append(context)
        elif part.startswith(PROJECT_PREFIX) and len(part) > 1:
            project = part[1:]
            if project not in timer.projects:
                timer.projects.append(project)
        elif TAG_SEPARATOR in part:
            key, _, value = part.partition(TAG_SEPARATOR)
            if key and value:
                timer.additional_tags[key] = value
            else:
                notes.append(part)
        else:
            notes.append(part)
    timer.notes = " ".join(notes)
    return timer


def format_timer(timer: Timer, layout: LayoutArg = None) -> str:
    """Render ``timer`` as one timer.txt line, without a line terminator."""
    date_layout = resolve_layout(layout)
    if timer.start_date is None:
        raise ValueError("timer has no start date")
    parts: List[str] = []
    if timer.finished:
        parts.append(COMPLETION_MARKER)
        if timer.finish_date is not None:
            parts.append(date_layout.format(timer.finish_date))
    parts.append(date_layout.format(timer.start_date))
    if timer.notes:
        parts.append(timer.notes)
    parts.extend(f"{CONTEXT_PREFIX}{context}" for context in sorted(set(timer.contexts)))
    parts.extend(f"{PROJECT_PREFIX}{project}" for project in sorted(set(timer.projects)))
    parts.extend(
        f"{key}{TAG_SEPARATOR}{timer.additional_tags[key]}" for key in sorted(timer.additional_tags)
    )
    return " ".join(parts)


__all__ = ["Timer", "parse_timer", "format_timer"]
