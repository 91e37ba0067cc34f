from __future__ import annotations

from typing import Optional


class TimerTxtError(Exception):
    """Base class for errors raised by the timertxt library."""


class ParseError(TimerTxtError, ValueError):
    """A line could not be turned into a timer."""

    def __init__(self, reason: str, *, text: Optional[str] = None, line: Optional[int] = None) -> None:
        self.reason = reason
        self.text = text
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        pieces = ["Parse error"]
        if self.line is not None:
            pieces.append(f" at line {self.line}")
        pieces.append(f": {self.reason}")
        if self.text is not None:
            pieces.append(f": {self.text!r}")
        return "".join(pieces)


class TimerNotFoundError(TimerTxtError, LookupError):
    """No timer matched an id or content lookup."""

    def __init__(self, message: str = "timer not found", *, timer_id: Optional[int] = None) -> None:
        super().__init__(message)
        self.timer_id = timer_id


class UnsupportedSortModeError(TimerTxtError, ValueError):
    def __init__(self, mode: object) -> None:
        super().__init__(f"unsupported sort mode: {mode!r}")
        self.mode = mode


__all__ = ["TimerTxtError", "ParseError", "TimerNotFoundError", "UnsupportedSortModeError"]
