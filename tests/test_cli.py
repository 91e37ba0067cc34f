from __future__ import annotations

from pathlib import Path

import pytest

from timertxt import __main__ as cli
from timertxt.config import RFC3339, Settings, settings


def test_arguments_override_settings(tmp_path: Path):
    target = Settings()
    args = cli.build_parser().parse_args(
        ["--port", "9001", "--timer-file", str(tmp_path / "work.txt"), "--date-layout", " %Y-%m-%d %H:%M "]
    )
    cli.apply_arguments(args, target)
    assert target.port == 9001
    assert target.timer_file == tmp_path / "work.txt"
    assert target.archive_file == tmp_path / "done.txt"
    assert target.date_layout == "%Y-%m-%d %H:%M"
    assert target.host == Settings().host


def test_unset_arguments_keep_defaults():
    target = Settings()
    cli.apply_arguments(cli.build_parser().parse_args([]), target)
    assert target.date_layout == RFC3339
    assert target.archive_file == Settings().archive_file


def test_main_runs_uvicorn_with_settings(monkeypatch: pytest.MonkeyPatch):
    calls = []
    monkeypatch.setattr(settings, "host", settings.host)
    monkeypatch.setattr(settings, "port", settings.port)
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    cli.main(["--host", "0.0.0.0", "--port", "8123"])

    assert calls == [("timertxt.main:app", {"host": "0.0.0.0", "port": 8123, "reload": False})]


def test_settings_document_their_environment_prefix():
    assert "TIMERTXT_" in Settings.__doc__
