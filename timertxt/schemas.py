from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer

from .config import DateLayout
from .models import CONTEXT_PREFIX, PROJECT_PREFIX, TAG_SEPARATOR, Timer, format_timer
from .utils import normalize_labels


def _serialize_datetime(value: Optional[dt.datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def _check_note_words(value: str) -> str:
    words = value.split()
    for word in words:
        key, sep, rest = word.partition(TAG_SEPARATOR)
        if (
            (word.startswith(CONTEXT_PREFIX) and len(word) > 1)
            or (word.startswith(PROJECT_PREFIX) and len(word) > 1)
            or (sep and key and rest)
        ):
            raise ValueError(f"Notes must not contain annotations: {word!r}")
    return " ".join(words)


def _check_tags(value: Dict[str, str]) -> Dict[str, str]:
    checked: Dict[str, str] = {}
    for key, tag_value in value.items():
        key = key.strip()
        tag_value = tag_value.strip()
        if not key or not tag_value:
            raise ValueError("Tag keys and values must not be empty")
        if TAG_SEPARATOR in key or any(char.isspace() for char in key + tag_value):
            raise ValueError(f"Invalid tag {key!r}")
        checked[key] = tag_value
    return checked


class TimerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    start_date: Optional[dt.datetime]
    finish_date: Optional[dt.datetime]
    finished: bool
    notes: str
    contexts: List[str]
    projects: List[str]
    additional_tags: Dict[str, str]
    duration_seconds: int
    text: str

    @classmethod
    def from_timer(cls, timer: Timer, layout: DateLayout) -> "TimerResponse":
        return cls(
            id=timer.id,
            start_date=timer.start_date,
            finish_date=timer.finish_date,
            finished=timer.finished,
            notes=timer.notes,
            contexts=sorted(timer.contexts),
            projects=sorted(timer.projects),
            additional_tags=dict(sorted(timer.additional_tags.items())),
            duration_seconds=int(timer.duration().total_seconds()),
            text=format_timer(timer, layout),
        )

    @model_serializer(mode="plain", when_used="json")
    def _serialize(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "start_date": _serialize_datetime(self.start_date),
            "finish_date": _serialize_datetime(self.finish_date),
            "finished": self.finished,
            "notes": self.notes,
            "contexts": self.contexts,
            "projects": self.projects,
            "additional_tags": self.additional_tags,
            "duration_seconds": self.duration_seconds,
            "text": self.text,
        }


class TimerCreateRequest(BaseModel):
    notes: str = ""
    contexts: List[str] = Field(default_factory=list)
    projects: List[str] = Field(default_factory=list)
    tags: Dict[str, str] = Field(default_factory=dict)
    start_time: Optional[dt.datetime] = None

    @field_validator("notes")
    @classmethod
    def _validate_notes(cls, value: str) -> str:
        return _check_note_words(value)

    @field_validator("contexts")
    @classmethod
    def _validate_contexts(cls, value: List[str]) -> List[str]:
        return normalize_labels(value, CONTEXT_PREFIX)

    @field_validator("projects")
    @classmethod
    def _validate_projects(cls, value: List[str]) -> List[str]:
        return normalize_labels(value, PROJECT_PREFIX)

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, value: Dict[str, str]) -> Dict[str, str]:
        return _check_tags(value)


class TimerUpdateRequest(BaseModel):
    notes: Optional[str] = None
    contexts: Optional[List[str]] = None
    projects: Optional[List[str]] = None
    tags: Optional[Dict[str, str]] = None

    @field_validator("notes")
    @classmethod
    def _validate_notes(cls, value: Optional[str]) -> Optional[str]:
        return _check_note_words(value) if value is not None else None

    @field_validator("contexts")
    @classmethod
    def _validate_contexts(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return normalize_labels(value, CONTEXT_PREFIX) if value is not None else None

    @field_validator("projects")
    @classmethod
    def _validate_projects(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return normalize_labels(value, PROJECT_PREFIX) if value is not None else None

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, value: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        return _check_tags(value) if value is not None else None


class TimerFinishRequest(BaseModel):
    finish_time: Optional[dt.datetime] = None
