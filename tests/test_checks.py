from __future__ import annotations

import json
from pathlib import Path

from lessonclock.data.store import ScheduleStore
from lessonclock.models import Lesson, SpecificLesson, TimeScheme, Weekday
from lessonclock.validate.checks import check_store
from lessonclock.validate.report import format_check_report, report_is_clean, write_check_report


def test_clean_timetable() -> None:
    store = ScheduleStore()
    store.add_lesson("Maths", "Mr. Sum")
    store.add_lesson("Art", "Mr. Brush")
    store.add_specific_lesson(Weekday.MONDAY, 1, 0)
    report = check_store(store, TimeScheme())
    assert report_is_clean(report)
    assert report["unscheduled_lessons"] == ["Art"]
    assert report["lessons_per_day"]["Monday"] == 1


def test_problems_are_reported(tmp_path: Path) -> None:
    # Collections replaced wholesale skip the session checks
    store = ScheduleStore(
        lessons=[Lesson(0, "Maths", "Mr. Sum")],
        specific_lessons=[
            SpecificLesson(0, Weekday.TUESDAY, 2, 0),
            SpecificLesson(1, Weekday.TUESDAY, 2, 0),
            SpecificLesson(2, Weekday.TUESDAY, 0, 0),
            SpecificLesson(3, Weekday.FRIDAY, 1, 5),
        ],
    )
    scheme = TimeScheme(lesson_length=0, breaks=[-10], default_break=15)
    report = check_store(store, scheme)
    assert not report_is_clean(report)
    assert report["duplicate_slots"] == ["Tuesday:2"]
    assert report["bad_lesson_numbers"] == [2]
    assert report["orphaned_entries"] == [3]
    assert len(report["scheme_problems"]) == 2

    path = write_check_report(report, tmp_path)
    assert json.loads(path.read_text(encoding="utf-8"))["orphaned_entries"] == [3]
    text = format_check_report(report)
    assert "  - Tuesday:2" in text
    assert "scheme_problems:" in text


def test_negative_breaks_make_periods_overlap() -> None:
    store = ScheduleStore(
        lessons=[Lesson(0, "Maths", "Mr. Sum")],
        specific_lessons=[SpecificLesson(0, Weekday.MONDAY, 1, 0), SpecificLesson(1, Weekday.MONDAY, 2, 0)],
    )
    report = check_store(store, TimeScheme(breaks=[-30]))
    assert report["overlapping_periods"] == {"Monday": ["1-2"]}
