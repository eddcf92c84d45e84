from __future__ import annotations

import datetime as dt
import json
from pathlib import Path

import pytest

from lessonclock.data.gateway import MemoryGateway
from lessonclock.data.session import ScheduleSession
from lessonclock.data.share import (
    FILE_SUFFIX,
    export_document,
    export_json,
    export_to_file,
    import_from_file,
    import_json,
    is_valid_file,
    parse_document,
)
from lessonclock.errors import ImportFormatError
from lessonclock.models import TimeScheme, TimeSchemePatch, Weekday


def _session() -> ScheduleSession:
    session = ScheduleSession(MemoryGateway())
    session.add_lesson("Maths", "Mr. Sum")
    session.add_lesson("Physics", "Ms. Volt")
    session.set_homework(0, "Exercises 1-5")
    session.add_specific_lesson(Weekday.MONDAY, 1, 0, "101")
    session.add_specific_lesson(Weekday.THURSDAY, 3, 1, "202", "lab")
    session.update_time_scheme(TimeSchemePatch(start=dt.time(8, 30), breaks=[10, 20], is_pair_mode=True))
    return session


def _document() -> dict:
    return {
        "lessons": [{"id": 0, "name": "Art", "teacher": "Mr. Brush"}],
        "specificLessons": [
            {"id": 0, "day": "FRIDAY", "lessonNumber": 2, "lessonId": 0, "cabinet": "5", "additionalInfo": ""}
        ],
        "timeScheme": {
            "start": "09:00",
            "lessonLength": 40,
            "breaks": [5],
            "defaultBreak": 10,
            "coupleMiddleBreakLength": 0,
            "isPairMode": False,
        },
    }


def test_export_layout() -> None:
    session = _session()
    doc = export_document(session.store, session.time_scheme)
    assert sorted(doc) == ["lessons", "specificLessons", "timeScheme"]
    assert doc["lessons"][0] == {"id": 0, "name": "Maths", "teacher": "Mr. Sum"}
    assert doc["specificLessons"][1] == {
        "id": 1,
        "day": "THURSDAY",
        "lessonNumber": 3,
        "lessonId": 1,
        "cabinet": "202",
        "additionalInfo": "lab",
    }
    assert doc["timeScheme"]["start"] == "08:30:00"
    assert doc["timeScheme"]["isPairMode"] is True


def test_round_trip_drops_homework_only() -> None:
    source = _session()
    target = ScheduleSession(MemoryGateway())
    assert import_json(target, export_json(source.store, source.time_scheme)) == 0
    assert [(l.id, l.name, l.teacher) for l in target.store.all_lessons()] == [
        (l.id, l.name, l.teacher) for l in source.store.all_lessons()
    ]
    assert all(l.homework == "" for l in target.store.all_lessons())
    assert target.store.all_specific_lessons() == source.store.all_specific_lessons()
    assert target.time_scheme == source.time_scheme


def test_import_replaces_and_saves() -> None:
    session = _session()
    import_json(session, json.dumps(_document()))
    assert [l.name for l in session.store.all_lessons()] == ["Art"]
    assert session.store.specific_lesson_at(Weekday.FRIDAY, 2) is not None
    assert session.time_scheme == TimeScheme(
        start=dt.time(9, 0), lesson_length=40, breaks=[5], default_break=10, couple_middle_break_length=0
    )
    assert b"Art" in session.gateway.blobs["lessons"]


def test_import_drops_orphaned_entries() -> None:
    doc = _document()
    doc["specificLessons"].append(
        {"id": 1, "day": "MONDAY", "lessonNumber": 1, "lessonId": 9, "cabinet": "", "additionalInfo": ""}
    )
    session = ScheduleSession(MemoryGateway())
    assert import_json(session, json.dumps(doc)) == 1
    assert [e.id for e in session.store.all_specific_lessons()] == [0]


@pytest.mark.parametrize(
    "mutate,path",
    [
        (lambda d: d["specificLessons"][0].update(day="FUNDAY"), "specificLessons[0].day"),
        (lambda d: d["lessons"][0].pop("teacher"), "lessons[0].teacher"),
        (lambda d: d["lessons"][0].update(id="zero"), "lessons[0].id"),
        (lambda d: d["timeScheme"].update(start="25:99"), "timeScheme.start"),
        (lambda d: d["timeScheme"].update(isPairMode=1), "timeScheme.isPairMode"),
        (lambda d: d["timeScheme"]["breaks"].append(True), "timeScheme.breaks[1]"),
        (lambda d: d.pop("specificLessons"), "specificLessons"),
        (lambda d: d["specificLessons"][0].update(lessonNumber=0), "specificLessons[0].lessonNumber"),
        (lambda d: d["timeScheme"].update(start="09:00+03:00"), "timeScheme.start"),
    ],
)
def test_malformed_document_reports_path(mutate, path: str) -> None:
    doc = _document()
    mutate(doc)
    with pytest.raises(ImportFormatError) as info:
        parse_document(json.dumps(doc))
    assert info.value.path == path


def test_malformed_import_leaves_session_untouched() -> None:
    session = _session()
    lessons = session.store.all_lessons()
    entries = session.store.all_specific_lessons()
    blobs = dict(session.gateway.blobs)
    doc = _document()
    doc["specificLessons"][0]["lessonNumber"] = "two"
    with pytest.raises(ImportFormatError):
        import_json(session, json.dumps(doc))
    with pytest.raises(ImportFormatError):
        import_json(session, "{broken")
    assert session.store.all_lessons() == lessons
    assert session.store.all_specific_lessons() == entries
    assert session.gateway.blobs == blobs


def test_weekday_names_are_case_insensitive() -> None:
    doc = _document()
    doc["specificLessons"][0]["day"] = "friday"
    assert parse_document(json.dumps(doc)).specific_lessons[0].day is Weekday.FRIDAY


def test_file_suffix() -> None:
    assert is_valid_file(Path("week.schoe"))
    assert is_valid_file(Path("WEEK.SCHOE"))
    assert not is_valid_file(Path("week.json"))


def test_export_and_import_files(tmp_path: Path) -> None:
    source = _session()
    written = export_to_file(source, tmp_path / "out" / "week")
    assert written.name == "week" + FILE_SUFFIX
    target = ScheduleSession(MemoryGateway())
    import_from_file(target, written)
    assert target.store.all_specific_lessons() == source.store.all_specific_lessons()


def test_import_rejects_other_extensions(tmp_path: Path) -> None:
    path = tmp_path / "week.json"
    path.write_text(json.dumps(_document()), encoding="utf-8")
    with pytest.raises(ImportFormatError):
        import_from_file(ScheduleSession(MemoryGateway()), path)


def test_import_rejects_non_utf8_file(tmp_path: Path) -> None:
    path = tmp_path / "bad.schoe"
    path.write_bytes(b'{"lessons": "\xff\xfe"}')
    session = _session()
    lessons = session.store.all_lessons()
    with pytest.raises(ImportFormatError) as info:
        import_from_file(session, path)
    assert "UTF-8" in str(info.value)
    assert session.store.all_lessons() == lessons
