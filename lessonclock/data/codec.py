from __future__ import annotations

import datetime as dt
import json
from dataclasses import asdict
from typing import Any, Dict, List

from ..errors import PersistenceError
from ..models.lesson import Lesson
from ..models.specific_lesson import SpecificLesson
from ..models.time_scheme import TimeScheme
from ..models.weekday import Weekday

LESSONS_KEY = "lessons"
SPECIFIC_LESSONS_KEY = "specific_lessons"
TIME_SCHEME_KEY = "time_scheme"


def _dump(data: Any) -> bytes:
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


def _load(key: str, blob: bytes) -> Any:
    try:
        return json.loads(blob.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise PersistenceError(key, f"corrupt blob: {e}") from e


def encode_lessons(lessons: List[Lesson]) -> bytes:
    return _dump([asdict(l) for l in lessons])


def decode_lessons(blob: bytes) -> List[Lesson]:
    rows = _load(LESSONS_KEY, blob)
    try:
        return [
            Lesson(id=int(r["id"]), name=r["name"], teacher=r["teacher"], homework=r.get("homework", ""))
            for r in rows
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise PersistenceError(LESSONS_KEY, f"bad record: {e!r}") from e


def encode_specific_lessons(entries: List[SpecificLesson]) -> bytes:
    rows: List[Dict[str, Any]] = []
    for e in entries:
        row = asdict(e)
        row["day"] = e.day.name
        rows.append(row)
    return _dump(rows)


def decode_specific_lessons(blob: bytes) -> List[SpecificLesson]:
    rows = _load(SPECIFIC_LESSONS_KEY, blob)
    try:
        entries = [
            SpecificLesson(
                id=int(r["id"]),
                day=Weekday[r["day"]],
                lesson_number=int(r["lesson_number"]),
                lesson_id=int(r["lesson_id"]),
                cabinet=r.get("cabinet", ""),
                additional_info=r.get("additional_info", ""),
            )
            for r in rows
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise PersistenceError(SPECIFIC_LESSONS_KEY, f"bad record: {e!r}") from e
    bad = [e.id for e in entries if e.lesson_number < 1]
    if bad:
        raise PersistenceError(SPECIFIC_LESSONS_KEY, f"lesson number below 1 in entries {bad}")
    return entries


def encode_time_scheme(scheme: TimeScheme) -> bytes:
    data = asdict(scheme)
    data["start"] = scheme.start.isoformat()
    return _dump(data)


def decode_time_scheme(blob: bytes) -> TimeScheme:
    data = _load(TIME_SCHEME_KEY, blob)
    try:
        scheme = TimeScheme(
            start=dt.time.fromisoformat(data["start"]),
            lesson_length=int(data["lesson_length"]),
            breaks=[int(b) for b in data["breaks"]],
            default_break=int(data["default_break"]),
            couple_middle_break_length=int(data["couple_middle_break_length"]),
            is_pair_mode=bool(data["is_pair_mode"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise PersistenceError(TIME_SCHEME_KEY, f"bad record: {e!r}") from e
    if scheme.start.tzinfo is not None:
        raise PersistenceError(TIME_SCHEME_KEY, f"start must be a local time, got {data['start']!r}")
    return scheme
