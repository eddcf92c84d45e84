from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, fields
from typing import Any, Dict, List

from .weekday import Weekday


class Unset:
    """Marks a patch field as absent. ``None`` is never used for that."""

    _instance: "Unset | None" = None

    def __new__(cls) -> "Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET = Unset()


class _Patch:
    def present(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not UNSET}

    def is_empty(self) -> bool:
        return not self.present()

    def apply_to(self, target: object) -> None:
        for name, value in self.present().items():
            setattr(target, name, list(value) if isinstance(value, list) else value)


@dataclass(frozen=True)
class LessonPatch(_Patch):
    name: str | Unset = UNSET
    teacher: str | Unset = UNSET
    homework: str | Unset = UNSET


@dataclass(frozen=True)
class SpecificLessonPatch(_Patch):
    day: Weekday | Unset = UNSET
    lesson_number: int | Unset = UNSET
    lesson_id: int | Unset = UNSET
    cabinet: str | Unset = UNSET
    additional_info: str | Unset = UNSET


@dataclass(frozen=True)
class TimeSchemePatch(_Patch):
    start: dt.time | Unset = UNSET
    lesson_length: int | Unset = UNSET
    breaks: List[int] | Unset = UNSET
    default_break: int | Unset = UNSET
    couple_middle_break_length: int | Unset = UNSET
    is_pair_mode: bool | Unset = UNSET
