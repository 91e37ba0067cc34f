from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

RFC3339 = "rfc3339"

_RFC3339_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{1,9})?(?:Z|[+-]\d{2}:\d{2})$"
)
_FRACTION_PATTERN = re.compile(r"\.(\d{1,9})")


@dataclass(frozen=True, slots=True)
class DateLayout:
    """Timestamp layout used identically for parsing and formatting.

    ``rfc3339`` renders ``2019-02-15T11:43:00-06:00`` (``Z`` for UTC) and only
    accepts timestamps carrying an offset. Any other pattern is handed to
    ``strftime``/``strptime``.
    """

    pattern: str = RFC3339

    @property
    def is_rfc3339(self) -> bool:
        return self.pattern.lower() == RFC3339

    def format(self, value: dt.datetime) -> str:
        if not self.is_rfc3339:
            return value.strftime(self.pattern)
        if value.tzinfo is None:
            value = value.astimezone()
        text = value.isoformat(timespec="microseconds" if value.microsecond else "seconds")
        if text.endswith("+00:00"):
            text = text[:-6] + "Z"
        return text

    def parse(self, text: str) -> dt.datetime:
        """Parse ``text``; raises ``ValueError`` when it does not match the layout."""
        if not self.is_rfc3339:
            return dt.datetime.strptime(text, self.pattern)
        if not _RFC3339_PATTERN.match(text):
            raise ValueError(f"{text!r} is not an RFC 3339 timestamp")
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        # datetime keeps microseconds; longer fractions are truncated
        text = _FRACTION_PATTERN.sub(lambda m: "." + m.group(1).ljust(6, "0")[:6], text)
        return dt.datetime.fromisoformat(text)


def _normalize_pattern(value: str | None) -> str:
    if value is None or not str(value).strip():
        return RFC3339
    return str(value).strip()


class Settings(BaseSettings):
    """Runtime configuration, read from ``TIMERTXT_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="TIMERTXT_", env_file=".env", case_sensitive=False)

    app_name: str = "timer.txt"
    host: str = "127.0.0.1"
    port: int = 8080

    timer_file: Path = Path("./timer.txt")
    archive_file: Path = Path("./done.txt")

    date_layout: str = RFC3339

    @field_validator("date_layout", mode="before")
    @classmethod
    def _normalize_layout(cls, value: str | None) -> str:
        return _normalize_pattern(value)


settings = Settings()


def default_layout() -> DateLayout:
    """Return the process-wide layout used when no explicit layout is given."""
    return DateLayout(settings.date_layout)


def set_default_layout(layout: Union[DateLayout, str]) -> None:
    pattern = layout.pattern if isinstance(layout, DateLayout) else layout
    settings.date_layout = _normalize_pattern(pattern)


def resolve_layout(layout: Union[DateLayout, str, None]) -> DateLayout:
    if layout is None:
        return default_layout()
    if isinstance(layout, DateLayout):
        return layout
    return DateLayout(layout)


__all__ = [
    "RFC3339",
    "DateLayout",
    "Settings",
    "settings",
    "default_layout",
    "set_default_layout",
    "resolve_layout",
]
