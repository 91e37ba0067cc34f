from __future__ import annotations

import datetime as dt

import pytest

from timertxt.config import DateLayout, default_layout, set_default_layout
from timertxt.errors import ParseError
from timertxt.models import Timer, format_timer, parse_timer

CST = dt.timezone(dt.timedelta(hours=-6))


def test_format_running_timer_matches_reference_line():
    timer = Timer(
        start_date=dt.datetime(2019, 2, 15, 11, 43, tzinfo=CST),
        notes="Working on Go Library",
        contexts=["personal", "home"],
        projects=["timertxt"],
        additional_tags={"due": "Today"},
    )
    assert format_timer(timer) == (
        "2019-02-15T11:43:00-06:00 Working on Go Library @home @personal +timertxt due:Today"
    )
    assert str(timer) == format_timer(timer)


def test_parse_finished_timer(sample_lines):
    timer = parse_timer(sample_lines[1])
    assert timer.finished is True
    assert timer.finish_date == dt.datetime(2019, 2, 15, 10, 0, tzinfo=CST)
    assert timer.start_date == dt.datetime(2019, 2, 15, 6, 0, tzinfo=CST)
    assert timer.notes == "Creating Go Library Repo"
    assert set(timer.contexts) == {"home", "personal"}
    assert set(timer.projects) == {"timertxt"}
    assert timer.additional_tags == {"customTag1": "Important!", "due": "Today"}
    assert timer.original == sample_lines[1]


def test_parse_collects_annotations_from_anywhere_after_start():
    timer = parse_timer("  2019-02-15T11:43:00Z +alpha fix @desk the bug prio:high  \n")
    assert timer.notes == "fix the bug"
    assert timer.contexts == ["desk"]
    assert timer.projects == ["alpha"]
    assert timer.additional_tags == {"prio": "high"}
    assert timer.start_date == dt.datetime(2019, 2, 15, 11, 43, tzinfo=dt.timezone.utc)


def test_parse_tag_splits_on_first_colon_and_keeps_last_duplicate():
    timer = parse_timer("2019-02-15T11:43:00Z see url:http://example.com url:https://example.org")
    assert timer.additional_tags == {"url": "https://example.org"}


def test_parse_half_empty_tags_stay_in_notes():
    timer = parse_timer("2019-02-15T11:43:00Z note: :colon and @ alone")
    assert timer.notes == "note: :colon and @ alone"
    assert timer.additional_tags == {}
    assert timer.contexts == []


@pytest.mark.parametrize(
    "text, reason",
    [
        ("", "empty"),
        ("   \t ", "empty"),
        ("x", "finish date"),
        ("x not-a-date 2019-02-15T06:00:00Z", "finish date"),
        ("x 2019-02-15T10:00:00Z", "start date"),
        ("Working without a date", "start date"),
        ("2019-02-15 10:00 missing offset", "start date"),
    ],
)
def test_parse_rejects_malformed_lines(text: str, reason: str):
    with pytest.raises(ParseError) as excinfo:
        parse_timer(text)
    assert reason in excinfo.value.reason


def test_parse_format_round_trip_preserves_fields():
    original = Timer(
        start_date=dt.datetime(2020, 5, 1, 8, 30, tzinfo=CST),
        finish_date=dt.datetime(2020, 5, 1, 9, 45, tzinfo=CST),
        finished=True,
        notes="Quarterly report",
        contexts=["office"],
        projects=["reports", "acme"],
        additional_tags={"client": "ACME", "billable": "yes"},
    )
    parsed = parse_timer(format_timer(original))
    assert parsed.start_date == original.start_date
    assert parsed.finish_date == original.finish_date
    assert parsed.finished is True
    assert parsed.notes == original.notes
    assert set(parsed.contexts) == set(original.contexts)
    assert set(parsed.projects) == set(original.projects)
    assert parsed.additional_tags == original.additional_tags


def test_format_finished_without_finish_date_and_without_notes():
    timer = Timer(start_date=dt.datetime(2020, 5, 1, 8, 30, tzinfo=dt.timezone.utc), finished=True, contexts=["a"])
    assert format_timer(timer) == "x 2020-05-01T08:30:00Z @a"


def test_format_requires_start_date():
    with pytest.raises(ValueError):
        format_timer(Timer(notes="no start"))


def test_custom_layout_is_used_for_both_directions():
    layout = DateLayout("%Y-%m-%d_%H:%M")
    timer = parse_timer("x 2021-03-04_17:00 2021-03-04_09:15 Deep work @home", layout)
    assert timer.start_date == dt.datetime(2021, 3, 4, 9, 15)
    assert format_timer(timer, layout) == "x 2021-03-04_17:00 2021-03-04_09:15 Deep work @home"


def test_default_layout_can_be_changed_process_wide():
    previous = default_layout()
    try:
        set_default_layout("%d.%m.%Y-%H:%M")
        timer = parse_timer("01.02.2022-08:00 Standup")
        assert timer.start_date == dt.datetime(2022, 2, 1, 8, 0)
        assert format_timer(timer) == "01.02.2022-08:00 Standup"
    finally:
        set_default_layout(previous)
    assert default_layout() == previous


def test_finish_and_reopen():
    start = dt.datetime(2019, 2, 15, 6, 0, tzinfo=CST)
    timer = Timer(start_date=start)
    timer.finish(dt.datetime(2019, 2, 15, 7, 0, tzinfo=CST))
    assert timer.finished is True
    assert timer.finish_date == dt.datetime(2019, 2, 15, 7, 0, tzinfo=CST)

    timer.finish(dt.datetime(2019, 2, 15, 8, 0, tzinfo=CST))
    assert timer.finish_date == dt.datetime(2019, 2, 15, 7, 0, tzinfo=CST)

    timer.reopen()
    assert timer.finished is False
    assert timer.finish_date is None
    timer.reopen()
    assert timer.finished is False


def test_finish_defaults_to_now():
    timer = Timer.new("Running")
    timer.finish()
    assert timer.finish_date is not None
    assert timer.finish_date >= timer.start_date


def test_duration_uses_finish_date_or_now():
    start = dt.datetime(2019, 2, 15, 6, 0, tzinfo=CST)
    finished = Timer(start_date=start, finish_date=start + dt.timedelta(hours=4), finished=True)
    assert finished.duration() == dt.timedelta(hours=4)

    running = Timer(start_date=start)
    assert running.duration(now=start + dt.timedelta(minutes=30)) == dt.timedelta(minutes=30)
    assert Timer.new("now").duration() >= dt.timedelta(0)


def test_active_on_day():
    timer = Timer(
        start_date=dt.datetime(2019, 2, 15, 22, 0, tzinfo=CST),
        finish_date=dt.datetime(2019, 2, 18, 2, 0, tzinfo=CST),
        finished=True,
    )
    assert timer.active_on_day(dt.datetime(2019, 2, 15, 1, 0, tzinfo=CST))
    assert timer.active_on_day(dt.datetime(2019, 2, 18, 23, 0, tzinfo=CST))
    assert timer.active_on_day(dt.datetime(2019, 2, 16, 12, 0, tzinfo=CST))
    assert timer.active_on_day(dt.date(2019, 2, 17))
    assert not timer.active_on_day(dt.datetime(2019, 2, 19, 12, 0, tzinfo=CST))
    assert not timer.active_on_day(dt.date(2019, 2, 14))


def test_running_timer_is_only_active_on_its_start_day():
    timer = Timer(start_date=dt.datetime(2019, 2, 15, 22, 0, tzinfo=CST))
    assert timer.active_on_day(dt.date(2019, 2, 15))
    assert not timer.active_on_day(dt.datetime(2019, 2, 16, 12, 0, tzinfo=CST))
    assert Timer.new("today").active_today()


def test_has_context_and_project_are_exact(sample_lines):
    timer = parse_timer(sample_lines[0])
    assert timer.has_context("home")
    assert not timer.has_context("Home")
    assert timer.has_project("timertxt")
    assert not timer.has_project("timer")


def test_copy_is_detached(sample_lines):
    timer = parse_timer(sample_lines[0])
    clone = timer.copy()
    clone.contexts.append("office")
    clone.additional_tags["due"] = "Tomorrow"
    assert "office" not in timer.contexts
    assert timer.additional_tags["due"] == "Today"


def test_round_trip_of_freshly_created_timer():
    timer = Timer.new("Pairing", contexts=["office"], projects=["timertxt"])
    timer.finish()
    parsed = parse_timer(format_timer(timer))
    assert parsed.start_date == timer.start_date
    assert parsed.finish_date == timer.finish_date
    assert format_timer(parsed) == format_timer(timer)


@pytest.mark.parametrize(
    "line, microsecond",
    [
        ("2019-02-15T11:43:00.5Z work", 500000),
        ("2019-02-15T11:43:00.123456789-06:00 work", 123456),
    ],
)
def test_fractional_seconds_survive_round_trip(line: str, microsecond: int):
    timer = parse_timer(line)
    assert timer.start_date.microsecond == microsecond
    assert parse_timer(format_timer(timer)).start_date == timer.start_date


def test_whole_seconds_are_formatted_without_fraction():
    timer = parse_timer("2019-02-15T11:43:00.000Z work")
    assert format_timer(timer) == "2019-02-15T11:43:00Z work"
