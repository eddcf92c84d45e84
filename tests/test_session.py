from __future__ import annotations

import datetime as dt
from pathlib import Path

import pytest

from lessonclock.data import codec
from lessonclock.data.gateway import FileGateway, MemoryGateway
from lessonclock.data.session import ScheduleSession
from lessonclock.errors import NotFoundError, PersistenceError, ValidationError
from lessonclock.models import InBreak, LessonPatch, SpecificLessonPatch, TimeScheme, TimeSchemePatch, Weekday


class FailingGateway(MemoryGateway):
    def __init__(self, failing: set[str], blobs=None):
        super().__init__(blobs)
        self.failing = failing

    def load(self, key: str):
        if key in self.failing:
            raise PersistenceError(key, "disk on fire")
        return super().load(key)


def _session() -> ScheduleSession:
    session = ScheduleSession(MemoryGateway())
    session.add_lesson("Maths", "Mr. Sum")
    session.add_lesson("Physics", "Ms. Volt")
    session.add_specific_lesson(Weekday.MONDAY, 1, 0, "101")
    session.add_specific_lesson(Weekday.MONDAY, 2, 1, "202", "lab coat")
    return session


def test_every_mutation_is_saved() -> None:
    session = _session()
    blobs = session.gateway.blobs
    assert [l.name for l in codec.decode_lessons(blobs["lessons"])] == ["Maths", "Physics"]
    assert len(codec.decode_specific_lessons(blobs["specific_lessons"])) == 2
    session.set_homework(1, "Read ch. 3")
    assert codec.decode_lessons(blobs["lessons"])[1].homework == "Read ch. 3"
    session.update_time_scheme(TimeSchemePatch(lesson_length=40))
    assert codec.decode_time_scheme(blobs["time_scheme"]).lesson_length == 40


def test_duplicate_slot_is_rejected_and_store_unchanged() -> None:
    session = _session()
    before = session.store.all_specific_lessons()
    with pytest.raises(ValidationError):
        session.add_specific_lesson(Weekday.MONDAY, 1, 1)
    assert session.store.all_specific_lessons() == before


def test_invalid_targets_are_rejected() -> None:
    session = _session()
    with pytest.raises(ValidationError):
        session.add_specific_lesson(Weekday.TUESDAY, 0, 0)
    with pytest.raises(ValidationError):
        session.add_specific_lesson(Weekday.TUESDAY, 1, 42)
    with pytest.raises(ValidationError):
        session.add_lesson("  ", "nobody")


def test_moving_entry_onto_taken_slot_is_rejected() -> None:
    session = _session()
    with pytest.raises(ValidationError):
        session.update_specific_lesson(1, SpecificLessonPatch(lesson_number=1))
    # Re-saving an entry onto its own slot is fine
    entry = session.update_specific_lesson(1, SpecificLessonPatch(day=Weekday.MONDAY, lesson_number=2, cabinet="203"))
    assert entry.cabinet == "203"
    moved = session.update_specific_lesson(1, SpecificLessonPatch(day=Weekday.FRIDAY))
    assert moved.slot == (Weekday.FRIDAY, 2)


def test_update_unknown_ids_raise_not_found() -> None:
    session = _session()
    with pytest.raises(NotFoundError):
        session.update_lesson(9, LessonPatch(name="X"))
    with pytest.raises(NotFoundError):
        session.set_homework(9, "nothing")
    with pytest.raises(NotFoundError):
        session.update_specific_lesson(9, SpecificLessonPatch(cabinet="1"))


def test_delete_is_idempotent() -> None:
    session = _session()
    assert session.delete_specific_lesson(0) is True
    assert session.delete_specific_lesson(0) is False
    assert session.delete_lesson(7) is False


def test_deleting_lesson_reconciles_timetable() -> None:
    session = _session()
    session.delete_lesson(0)
    assert [e.lesson_id for e in session.store.all_specific_lessons()] == [1]
    saved = codec.decode_specific_lessons(session.gateway.blobs["specific_lessons"])
    assert [e.lesson_id for e in saved] == [1]


def test_time_scheme_validation() -> None:
    session = _session()
    for patch in (
        TimeSchemePatch(lesson_length=0),
        TimeSchemePatch(breaks=[15, -5]),
        TimeSchemePatch(default_break=0),
        TimeSchemePatch(couple_middle_break_length=-1),
    ):
        with pytest.raises(ValidationError):
            session.update_time_scheme(patch)
    assert session.time_scheme == TimeScheme()


def test_break_list_editing() -> None:
    session = _session()
    session.update_time_scheme(TimeSchemePatch(breaks=[10, 20]))
    session.add_break(5)
    assert session.time_scheme.breaks == [10, 20, 5]
    session.set_break(2, 25)
    assert session.time_scheme.breaks == [10, 25, 5]
    session.remove_break(1)
    assert session.time_scheme.breaks == [25, 5]
    with pytest.raises(ValidationError):
        session.set_break(3, 10)
    with pytest.raises(ValidationError):
        session.add_break(0)


def test_reset_time_scheme() -> None:
    session = _session()
    session.update_time_scheme(TimeSchemePatch(start=dt.time(8, 0), is_pair_mode=True))
    assert session.reset_time_scheme() == TimeScheme()


def test_load_round_trip_through_files(tmp_path: Path) -> None:
    session = ScheduleSession(FileGateway(tmp_path / "data"))
    session.add_lesson("Maths", "Mr. Sum")
    session.set_homework(0, "Exercises")
    session.add_specific_lesson(Weekday.WEDNESDAY, 3, 0, "12", "bring ruler")
    session.update_time_scheme(TimeSchemePatch(start=dt.time(8, 15), breaks=[10, 20]))

    reloaded = ScheduleSession(FileGateway(tmp_path / "data"))
    reloaded.load()
    assert reloaded.store.all_lessons() == session.store.all_lessons()
    assert reloaded.store.all_specific_lessons() == session.store.all_specific_lessons()
    assert reloaded.time_scheme == session.time_scheme
    assert sorted(p.name for p in (tmp_path / "data").iterdir()) == [
        "lessons.json",
        "specific_lessons.json",
        "time_scheme.json",
    ]


def test_load_with_nothing_saved_gives_defaults(tmp_path: Path) -> None:
    session = ScheduleSession(FileGateway(tmp_path))
    session.load()
    assert session.store.all_lessons() == []
    assert session.time_scheme == TimeScheme()


def test_load_drops_orphans() -> None:
    source = _session()
    blobs = dict(source.gateway.blobs)
    blobs["lessons"] = codec.encode_lessons(source.store.all_lessons()[1:])
    session = ScheduleSession(MemoryGateway(blobs))
    session.load()
    assert [e.lesson_id for e in session.store.all_specific_lessons()] == [1]
    assert len(codec.decode_specific_lessons(session.gateway.blobs["specific_lessons"])) == 1


def test_failed_collection_is_left_empty_and_reported() -> None:
    blobs = dict(_session().gateway.blobs)
    session = ScheduleSession(FailingGateway({"specific_lessons"}, blobs))
    with pytest.raises(PersistenceError) as info:
        session.load()
    assert "specific_lessons" in str(info.value)
    assert session.store.all_specific_lessons() == []
    assert len(session.store.all_lessons()) == 2


def test_corrupt_blob_is_a_persistence_error() -> None:
    session = ScheduleSession(MemoryGateway({"lessons": b"{not json"}))
    with pytest.raises(PersistenceError):
        session.load()
    assert session.store.all_lessons() == []


def test_failed_lessons_do_not_wipe_saved_timetable() -> None:
    blobs = dict(_session().gateway.blobs)
    gateway = FailingGateway({"lessons"}, blobs)
    session = ScheduleSession(gateway)
    with pytest.raises(PersistenceError):
        session.load()
    assert session.store.all_specific_lessons() == []
    assert len(codec.decode_specific_lessons(gateway.blobs["specific_lessons"])) == 2


def test_status_query_uses_weekday_of_moment() -> None:
    session = _session()
    monday = dt.datetime(2026, 10, 19, 9, 30)
    status = session.status(monday)
    assert isinstance(status, InBreak)
    assert status.entry.lesson_id == 0
    assert session.status(monday + dt.timedelta(days=1)).kind.value == "resting"


def test_saved_entry_below_lesson_one_is_rejected_on_load() -> None:
    blobs = dict(_session().gateway.blobs)
    blobs["specific_lessons"] = (
        b'[{"id": 0, "day": "MONDAY", "lesson_number": 0, "lesson_id": 0, "cabinet": "", "additional_info": ""}]'
    )
    session = ScheduleSession(MemoryGateway(blobs))
    with pytest.raises(PersistenceError) as info:
        session.load()
    assert info.value.key == "specific_lessons"
    assert session.store.all_specific_lessons() == []
    monday = dt.datetime(2026, 10, 19, 8, 0)
    assert session.status(monday).kind.value == "resting"
    assert session.homework_due(monday) == []


def test_start_time_with_offset_is_rejected() -> None:
    session = _session()
    aware = dt.time(9, 0, tzinfo=dt.timezone(dt.timedelta(hours=3)))
    with pytest.raises(ValidationError):
        session.update_time_scheme(TimeSchemePatch(start=aware))
    blob = codec.encode_time_scheme(TimeScheme(start=aware))
    with pytest.raises(PersistenceError):
        codec.decode_time_scheme(blob)
