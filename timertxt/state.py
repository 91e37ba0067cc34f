from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Generator, Optional, Union

from .config import DateLayout, Settings, resolve_layout
from .models import Timer
from .storage import archive_to_filename, load_from_filename, write_to_filename
from .timerlist import TimerList

logger = logging.getLogger(__name__)


class TimerStore:
    """A timer.txt file and its archive, with load/mutate/save cycles serialized by a lock."""

    def __init__(
        self,
        timer_file: Union[str, Path],
        archive_file: Optional[Union[str, Path]] = None,
        layout: Union[DateLayout, str, None] = None,
    ):
        self._lock = RLock()
        self.timer_file = Path(timer_file)
        self.archive_file = Path(archive_file) if archive_file else self.timer_file.with_name("done.txt")
        self.layout = resolve_layout(layout)

    @classmethod
    def from_settings(cls, base_settings: Settings) -> "TimerStore":
        return cls(base_settings.timer_file, base_settings.archive_file, base_settings.date_layout)

    def load(self) -> TimerList:
        with self._lock:
            if not self.timer_file.exists():
                logger.debug("%s does not exist yet, starting empty", self.timer_file)
                return TimerList(layout=self.layout)
            return load_from_filename(self.timer_file, self.layout)

    def save(self, timerlist: TimerList) -> None:
        with self._lock:
            write_to_filename(timerlist, self.timer_file)

    def archive(self, timerlist: TimerList, timer: Timer) -> None:
        with self._lock:
            archive_to_filename(timerlist, timer, self.archive_file)

    def load_archive(self) -> TimerList:
        with self._lock:
            if not self.archive_file.exists():
                return TimerList(layout=self.layout)
            return load_from_filename(self.archive_file, self.layout)

    @contextmanager
    def session(self, *, commit: bool = True) -> Generator[TimerList, None, None]:
        """Hold the lock for a load/mutate/save cycle.

        The list is written back only when the block exits without an error
        and ``commit`` is true.
        """
        with self._lock:
            timerlist = self.load()
            yield timerlist
            if commit:
                self.save(timerlist)
