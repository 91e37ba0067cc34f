from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional


def now_like(reference: Optional[dt.datetime] = None) -> dt.datetime:
    """Current time to the second, offset-aware unless ``reference`` is a naive timestamp."""
    now = dt.datetime.now().replace(microsecond=0)
    if reference is not None and reference.tzinfo is None:
        return now
    return now.astimezone()


def align(value: dt.datetime, reference: dt.datetime) -> dt.datetime:
    """Return ``value`` in a form comparable with ``reference``.

    Naive timestamps are taken as local time.
    """
    if (value.tzinfo is None) == (reference.tzinfo is None):
        return value
    if value.tzinfo is None:
        return value.astimezone()
    return value.astimezone().replace(tzinfo=None)


def is_before(first: dt.datetime, second: dt.datetime) -> bool:
    return first < align(second, first)


def normalize_labels(values: Iterable[str], prefix: str = "") -> List[str]:
    """Strip an optional marker prefix and drop blanks and duplicates, keeping order."""
    seen: set[str] = set()
    normalized: List[str] = []
    for value in values:
        text = str(value).strip()
        if prefix and text.startswith(prefix):
            text = text[len(prefix):]
        if not text or text in seen or any(char.isspace() for char in text):
            continue
        normalized.append(text)
        seen.add(text)
    return normalized
