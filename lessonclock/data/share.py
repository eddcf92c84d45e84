"""JSON export and import of lessons, timetable and time scheme.

Homework is not exported. Imports are parsed and checked completely before
anything in the session is replaced.
"""
from __future__ import annotations

import datetime as dt
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from ..errors import ImportFormatError
from ..models.lesson import Lesson
from ..models.specific_lesson import SpecificLesson
from ..models.time_scheme import TimeScheme
from ..models.weekday import Weekday
from .session import ScheduleSession
from .store import ScheduleStore

logger = logging.getLogger(__name__)

FILE_SUFFIX = ".schoe"


@dataclass
class ImportedData:
    lessons: List[Lesson]
    specific_lessons: List[SpecificLesson]
    time_scheme: TimeScheme


def export_document(store: ScheduleStore, scheme: TimeScheme) -> Dict[str, Any]:
    return {
        "lessons": [{"id": l.id, "name": l.name, "teacher": l.teacher} for l in store.all_lessons()],
        "specificLessons": [
            {
                "id": e.id,
                "day": e.day.name,
                "lessonNumber": e.lesson_number,
                "lessonId": e.lesson_id,
                "cabinet": e.cabinet,
                "additionalInfo": e.additional_info,
            }
            for e in store.all_specific_lessons()
        ],
        "timeScheme": {
            "start": scheme.start.strftime("%H:%M:%S"),
            "lessonLength": scheme.lesson_length,
            "breaks": list(scheme.breaks),
            "defaultBreak": scheme.default_break,
            "coupleMiddleBreakLength": scheme.couple_middle_break_length,
            "isPairMode": scheme.is_pair_mode,
        },
    }


def export_json(store: ScheduleStore, scheme: TimeScheme) -> str:
    return json.dumps(export_document(store, scheme), indent=2, ensure_ascii=False)


def _field(obj: Any, key: str, path: str) -> Any:
    if not isinstance(obj, dict):
        raise ImportFormatError(path, "expected an object")
    if key not in obj:
        raise ImportFormatError(f"{path}.{key}" if path else key, "missing field")
    return obj[key]


def _int(obj: Any, key: str, path: str) -> int:
    value = _field(obj, key, path)
    # bool is an int subclass; reject it here
    if isinstance(value, bool) or not isinstance(value, int):
        raise ImportFormatError(f"{path}.{key}", f"expected an integer, got {value!r}")
    return value


def _positive(obj: Any, key: str, path: str) -> int:
    value = _int(obj, key, path)
    if value < 1:
        raise ImportFormatError(f"{path}.{key}", f"expected a positive integer, got {value}")
    return value


def _str(obj: Any, key: str, path: str) -> str:
    value = _field(obj, key, path)
    if not isinstance(value, str):
        raise ImportFormatError(f"{path}.{key}", f"expected a string, got {value!r}")
    return value


def _list(obj: Any, key: str, path: str) -> List[Any]:
    value = _field(obj, key, path)
    if not isinstance(value, list):
        raise ImportFormatError(f"{path}.{key}" if path else key, "expected an array")
    return value


def _parse_time_scheme(obj: Any) -> TimeScheme:
    path = "timeScheme"
    start_text = _str(obj, "start", path)
    try:
        start = dt.time.fromisoformat(start_text)
    except ValueError as e:
        raise ImportFormatError(f"{path}.start", f"bad time {start_text!r}") from e
    if start.tzinfo is not None:
        raise ImportFormatError(f"{path}.start", f"expected a local time without offset, got {start_text!r}")
    breaks: List[int] = []
    for i, b in enumerate(_list(obj, "breaks", path)):
        if isinstance(b, bool) or not isinstance(b, int):
            raise ImportFormatError(f"{path}.breaks[{i}]", f"expected an integer, got {b!r}")
        breaks.append(b)
    pair_mode = _field(obj, "isPairMode", path)
    if not isinstance(pair_mode, bool):
        raise ImportFormatError(f"{path}.isPairMode", f"expected a boolean, got {pair_mode!r}")
    return TimeScheme(
        start=start.replace(microsecond=0),
        lesson_length=_int(obj, "lessonLength", path),
        breaks=breaks,
        default_break=_int(obj, "defaultBreak", path),
        couple_middle_break_length=_int(obj, "coupleMiddleBreakLength", path),
        is_pair_mode=pair_mode,
    )


def parse_document(text: str) -> ImportedData:
    try:
        root = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportFormatError("", f"not valid JSON: {e}") from e
    if not isinstance(root, dict):
        raise ImportFormatError("", "expected a JSON object at the top level")

    lessons: List[Lesson] = []
    for i, obj in enumerate(_list(root, "lessons", "")):
        path = f"lessons[{i}]"
        lessons.append(Lesson(id=_int(obj, "id", path), name=_str(obj, "name", path), teacher=_str(obj, "teacher", path)))

    entries: List[SpecificLesson] = []
    for i, obj in enumerate(_list(root, "specificLessons", "")):
        path = f"specificLessons[{i}]"
        day_name = _str(obj, "day", path)
        try:
            day = Weekday[day_name.upper()]
        except KeyError as e:
            raise ImportFormatError(f"{path}.day", f"unknown weekday {day_name!r}") from e
        entries.append(
            SpecificLesson(
                id=_int(obj, "id", path),
                day=day,
                lesson_number=_positive(obj, "lessonNumber", path),
                lesson_id=_int(obj, "lessonId", path),
                cabinet=_str(obj, "cabinet", path),
                additional_info=_str(obj, "additionalInfo", path),
            )
        )

    scheme = _parse_time_scheme(_field(root, "timeScheme", ""))
    return ImportedData(lessons, entries, scheme)


def apply_import(session: ScheduleSession, data: ImportedData) -> int:
    """Replace the session contents with ``data`` and save everything.

    Returns how many orphaned timetable entries were dropped.
    """
    removed = session.replace_all(data.lessons, data.specific_lessons, data.time_scheme)
    logger.info(
        f"Imported {len(data.lessons)} lessons, {len(data.specific_lessons) - removed} entries"
        + (f" ({removed} orphaned entries dropped)" if removed else "")
    )
    return removed


def import_json(session: ScheduleSession, text: str) -> int:
    return apply_import(session, parse_document(text))


def export_path(directory: Path, name: str) -> Path:
    return directory / f"{name}{FILE_SUFFIX}"


def is_valid_file(path: Path) -> bool:
    return path.suffix.lower() == FILE_SUFFIX


def export_to_file(session: ScheduleSession, path: Path) -> Path:
    if not is_valid_file(path):
        path = path.with_name(path.name + FILE_SUFFIX)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(export_json(session.store, session.time_scheme))
    logger.info(f"Exported schedule to {path}")
    return path


def import_from_file(session: ScheduleSession, path: Path) -> int:
    if not is_valid_file(path):
        raise ImportFormatError("", f"{path.name} is not a {FILE_SUFFIX} file")
    with path.open("rb") as f:
        raw = f.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ImportFormatError("", f"not valid UTF-8: {e}") from e
    return import_json(session, text)
