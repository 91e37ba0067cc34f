"""File helpers around ``TimerList``.

``TimerList`` itself only consumes lines and produces text; the functions
here connect it to streams and paths.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Iterator, TextIO, Union

from .config import DateLayout
from .models import Timer
from .timerlist import TimerList

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]
LayoutArg = Union[DateLayout, str, None]


def read_lines(stream: Union[TextIO, Iterable[str]]) -> Iterator[str]:
    """Yield lines without their terminators."""
    for line in stream:
        yield line.rstrip("\r\n")


def load_from_file(stream: Union[TextIO, Iterable[str]], layout: LayoutArg = None) -> TimerList:
    timerlist = TimerList(layout=layout)
    timerlist.load(read_lines(stream))
    return timerlist


def write_to_file(timerlist: TimerList, stream: TextIO) -> None:
    timerlist.dump(stream)
    stream.flush()


def load_from_filename(path: PathLike, layout: LayoutArg = None) -> TimerList:
    with open(path, "r", encoding="utf-8") as handle:
        timerlist = load_from_file(handle, layout)
    logger.debug("Loaded %d timers from %s", len(timerlist), path)
    return timerlist


def write_to_filename(timerlist: TimerList, path: PathLike) -> None:
    """Write ``timerlist`` to ``path`` via a temporary file and an atomic rename."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            write_to_file(timerlist, handle)
        os.replace(temp_path, target)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
    logger.debug("Wrote %d timers to %s", len(timerlist), target)


def archive_to_filename(timerlist: TimerList, timer: Timer, path: PathLike) -> None:
    """Move ``timer`` out of ``timerlist`` and append it to the file at ``path``."""
    target = Path(path)
    timerlist.remove(timer)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "a", encoding="utf-8") as handle:
        handle.write(f"{timerlist.format(timer)}\n")
    logger.debug("Archived timer %s to %s", timer.id, target)


__all__ = [
    "read_lines",
    "load_from_file",
    "write_to_file",
    "load_from_filename",
    "write_to_filename",
    "archive_to_filename",
]
