from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from timertxt.main import app, get_store
from timertxt.state import TimerStore

CST = dt.timezone(dt.timedelta(hours=-6))

SAMPLE_LINES = [
    "2019-02-15T11:43:00-06:00 Working on Go Library @home @personal +timertxt due:Today",
    "x 2019-02-15T10:00:00-06:00 2019-02-15T06:00:00-06:00 Creating Go Library Repo @home @personal +timertxt customTag1:Important! due:Today",
    "2019-02-16T09:00:00-06:00 Reviewing pull requests @work +review",
]


@pytest.fixture()
def timer_file(tmp_path: Path) -> Path:
    path = tmp_path / "timer.txt"
    path.write_text("\n".join(SAMPLE_LINES) + "\n", encoding="utf-8")
    return path


@pytest.fixture()
def store(tmp_path: Path, timer_file: Path) -> TimerStore:
    return TimerStore(timer_file, tmp_path / "done.txt")


@pytest.fixture()
def client(store: TimerStore) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def sample_day() -> dt.date:
    return dt.date(2019, 2, 15)


@pytest.fixture()
def sample_lines() -> list[str]:
    return list(SAMPLE_LINES)
