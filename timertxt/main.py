from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import Depends, FastAPI, Response, status
from fastapi.responses import PlainTextResponse

from .config import settings
from .schemas import TimerCreateRequest, TimerFinishRequest, TimerResponse, TimerUpdateRequest
from .services import (
    archive_timer,
    delete_timer,
    finish_timer,
    get_timer,
    list_timers,
    list_timers_for_day,
    render_timers,
    reopen_timer,
    start_timer,
    update_timer,
)
from .state import TimerStore

default_store = TimerStore.from_settings(settings)


def get_store() -> TimerStore:
    return default_store


app = FastAPI(title=settings.app_name)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/timers", response_model=list[TimerResponse])
def timers_list(
    context: Optional[str] = None,
    project: Optional[str] = None,
    active: Optional[bool] = None,
    start: Optional[dt.datetime] = None,
    end: Optional[dt.datetime] = None,
    sort: Optional[str] = None,
    store: TimerStore = Depends(get_store),
) -> list[TimerResponse]:
    timers = list_timers(
        store,
        context=context,
        project=project,
        active=active,
        start=start,
        end=end,
        sort=sort,
    )
    return [TimerResponse.from_timer(timer, store.layout) for timer in timers]


@app.get("/timers.txt", response_class=PlainTextResponse)
def timers_text(store: TimerStore = Depends(get_store)) -> str:
    return render_timers(store)


@app.post("/timers", response_model=TimerResponse, status_code=status.HTTP_201_CREATED)
def timers_start(payload: TimerCreateRequest, store: TimerStore = Depends(get_store)) -> TimerResponse:
    timer = start_timer(
        store,
        payload.notes,
        payload.contexts,
        payload.projects,
        payload.tags,
        payload.start_time,
    )
    return TimerResponse.from_timer(timer, store.layout)


@app.get("/timers/{timer_id}", response_model=TimerResponse)
def timers_get(timer_id: int, store: TimerStore = Depends(get_store)) -> TimerResponse:
    return TimerResponse.from_timer(get_timer(store, timer_id), store.layout)


@app.patch("/timers/{timer_id}", response_model=TimerResponse)
def timers_update(
    timer_id: int,
    payload: TimerUpdateRequest,
    store: TimerStore = Depends(get_store),
) -> TimerResponse:
    changes = payload.model_dump(exclude_unset=True)
    timer = update_timer(store, timer_id, changes)
    return TimerResponse.from_timer(timer, store.layout)


@app.post("/timers/{timer_id}/finish", response_model=TimerResponse)
def timers_finish(
    timer_id: int,
    payload: TimerFinishRequest | None = None,
    store: TimerStore = Depends(get_store),
) -> TimerResponse:
    timer = finish_timer(store, timer_id, payload.finish_time if payload else None)
    return TimerResponse.from_timer(timer, store.layout)


@app.post("/timers/{timer_id}/reopen", response_model=TimerResponse)
def timers_reopen(timer_id: int, store: TimerStore = Depends(get_store)) -> TimerResponse:
    return TimerResponse.from_timer(reopen_timer(store, timer_id), store.layout)


@app.post("/timers/{timer_id}/archive", response_model=TimerResponse)
def timers_archive(timer_id: int, store: TimerStore = Depends(get_store)) -> TimerResponse:
    return TimerResponse.from_timer(archive_timer(store, timer_id), store.layout)


@app.delete("/timers/{timer_id}", status_code=status.HTTP_204_NO_CONTENT)
def timers_delete(timer_id: int, store: TimerStore = Depends(get_store)) -> Response:
    delete_timer(store, timer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/days/{day}", response_model=list[TimerResponse])
def timers_for_day(day: dt.date, store: TimerStore = Depends(get_store)) -> list[TimerResponse]:
    return [TimerResponse.from_timer(timer, store.layout) for timer in list_timers_for_day(store, day)]
