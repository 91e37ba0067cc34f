from __future__ import annotations

import datetime as dt
import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterable, List, Optional

from fastapi import HTTPException, status

from .errors import ParseError, TimerNotFoundError, UnsupportedSortModeError
from .models import Timer
from .state import TimerStore
from .timerlist import TimerList
from .utils import align, is_before

logger = logging.getLogger(__name__)


def _ensure_aware(store: TimerStore, value: Optional[dt.datetime]) -> Optional[dt.datetime]:
    if value is None or value.tzinfo is not None or not store.layout.is_rfc3339:
        return value
    return value.astimezone()


@contextmanager
def _open(store: TimerStore, *, commit: bool = True) -> Generator[TimerList, None, None]:
    try:
        with store.session(commit=commit) as timerlist:
            yield timerlist
    except ParseError as exc:
        logger.error("Cannot read %s: %s", store.timer_file, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"{store.timer_file.name} is malformed: {exc}",
        ) from exc


def _get_or_404(timerlist: TimerList, timer_id: int) -> Timer:
    try:
        return timerlist.get(timer_id)
    except TimerNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Timer not found") from exc


def list_timers(
    store: TimerStore,
    *,
    context: Optional[str] = None,
    project: Optional[str] = None,
    active: Optional[bool] = None,
    start: Optional[dt.datetime] = None,
    end: Optional[dt.datetime] = None,
    sort: Optional[str] = None,
) -> List[Timer]:
    with _open(store, commit=False) as timerlist:
        result = timerlist
        if context:
            result = result.with_context(context)
        if project:
            result = result.with_project(project)
        if active is True:
            result = result.active()
        elif active is False:
            result = result.filter(lambda t: t.finish_date is not None)
        if (start is None) != (end is None):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="start and end must be given together",
            )
        if start is not None and end is not None:
            result = result.in_range(_ensure_aware(store, start), _ensure_aware(store, end))
        if sort:
            try:
                result.sort(sort)
            except UnsupportedSortModeError as exc:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return [timer.copy() for timer in result]


def list_timers_for_day(store: TimerStore, day: dt.date) -> List[Timer]:
    with _open(store, commit=False) as timerlist:
        return list(timerlist.active_on_day(day))


def get_timer(store: TimerStore, timer_id: int) -> Timer:
    with _open(store, commit=False) as timerlist:
        return _get_or_404(timerlist, timer_id).copy()


def start_timer(
    store: TimerStore,
    notes: str,
    contexts: Iterable[str],
    projects: Iterable[str],
    tags: Dict[str, str],
    start_time: Optional[dt.datetime] = None,
) -> Timer:
    timer = Timer.new(
        notes,
        contexts=contexts,
        projects=projects,
        tags=tags,
        start_date=_ensure_aware(store, start_time),
    )
    with _open(store) as timerlist:
        stored = timerlist.add(timer)
        logger.info("Started timer %d", stored.id)
        return stored.copy()


def update_timer(store: TimerStore, timer_id: int, changes: Dict[str, Any]) -> Timer:
    with _open(store) as timerlist:
        timer = _get_or_404(timerlist, timer_id)
        if changes.get("notes") is not None:
            timer.notes = changes["notes"]
        if changes.get("contexts") is not None:
            timer.contexts = list(changes["contexts"])
        if changes.get("projects") is not None:
            timer.projects = list(changes["projects"])
        if changes.get("tags") is not None:
            timer.additional_tags = dict(changes["tags"])
        return timer.copy()


def finish_timer(store: TimerStore, timer_id: int, finish_time: Optional[dt.datetime] = None) -> Timer:
    with _open(store) as timerlist:
        timer = _get_or_404(timerlist, timer_id)
        if timer.finished:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Timer already finished")
        finish_time = _ensure_aware(store, finish_time)
        if finish_time is not None and timer.start_date is not None:
            # stored in the same naive or aware form as the start date
            finish_time = align(finish_time, timer.start_date)
            if is_before(finish_time, timer.start_date):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Finish must be after start")
        timer.finish(finish_time)
        logger.info("Finished timer %d", timer.id)
        return timer.copy()


def reopen_timer(store: TimerStore, timer_id: int) -> Timer:
    with _open(store) as timerlist:
        timer = _get_or_404(timerlist, timer_id)
        if not timer.finished:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Timer is not finished")
        timer.reopen()
        return timer.copy()


def delete_timer(store: TimerStore, timer_id: int) -> None:
    with _open(store) as timerlist:
        try:
            timerlist.remove_by_id(timer_id)
        except TimerNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Timer not found") from exc
        logger.info("Deleted timer %d", timer_id)


def archive_timer(store: TimerStore, timer_id: int) -> Timer:
    with _open(store) as timerlist:
        timer = _get_or_404(timerlist, timer_id).copy()
        if not timer.finished:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only finished timers can be archived")
        store.archive(timerlist, timer)
        logger.info("Archived timer %d to %s", timer_id, store.archive_file)
        return timer


def render_timers(store: TimerStore) -> str:
    with _open(store, commit=False) as timerlist:
        return timerlist.to_text()
