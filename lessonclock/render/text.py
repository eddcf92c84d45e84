from __future__ import annotations

import datetime as dt
from typing import Dict, List, Sequence, Tuple

from ..models.lesson import Lesson
from ..models.specific_lesson import SpecificLesson
from ..models.status import LiveStatus, StatusKind
from ..models.time_scheme import TimeScheme
from ..scheduler.homework import HomeworkDue
from ..scheduler.periods import PeriodTimes, break_after

REST = "Rest"


def hhmm(t: dt.time) -> str:
    return t.strftime("%H:%M")


def times_text(times: PeriodTimes, scheme: TimeScheme) -> str:
    if scheme.is_pair_mode:
        return (
            f"{hhmm(times.start)} - {hhmm(times.first_half_end)}, "
            f"{hhmm(times.middle_break_end)} - {hhmm(times.second_half_end)}"
        )
    return f"{hhmm(times.start)} - {hhmm(times.first_half_end)}"


def status_lines(status: LiveStatus, lessons: Dict[int, Lesson]) -> List[str]:
    if status.kind is StatusKind.RESTING:
        return [REST]
    lines = [f"{status.label.capitalize()}: {status.countdown}"]
    entry = status.relevant_entry
    lesson = lessons.get(entry.lesson_id)
    if lesson is not None:
        lines.append(lesson.name)
        if entry.cabinet:
            lines.append(entry.cabinet)
        if entry.additional_info:
            lines.append(entry.additional_info)
    return lines


def day_lines(
    grid: Sequence[Tuple[SpecificLesson, PeriodTimes]], lessons: Dict[int, Lesson], scheme: TimeScheme
) -> List[str]:
    lines: List[str] = []
    for entry, times in grid:
        lesson = lessons.get(entry.lesson_id)
        if lesson is None:
            continue
        place = " ".join(p for p in (entry.cabinet, entry.additional_info) if p)
        lines.append(f"{entry.lesson_number}. {lesson.name} ({lesson.teacher}) - {place} ({times_text(times, scheme)})")
    return lines


def homework_lines(due: Sequence[HomeworkDue]) -> List[str]:
    return [f"{h.lesson.name}: {h.lesson.homework} (in {h.days} days)" for h in due]


def scheme_lines(scheme: TimeScheme) -> List[str]:
    lines = [
        f"start: {hhmm(scheme.start)}",
        f"lesson length: {scheme.lesson_length} min",
        f"default break: {scheme.default_break} min",
        f"middle break: {scheme.couple_middle_break_length} min",
        f"pair mode: {'on' if scheme.is_pair_mode else 'off'}",
        "breaks:",
    ]
    for i in range(len(scheme.breaks)):
        lines.append(f"  {i + 1}: {break_after(i + 1, scheme)} min")
    return lines


def lesson_rows(lessons: Sequence[Lesson]) -> List[str]:
    lines = [f"{'#':<4} {'Name':<24} {'Teacher':<24} {'Homework':<30}"]
    for l in sorted(lessons, key=lambda x: x.id):
        hw = l.homework[:29] if l.homework else "-"
        lines.append(f"{l.id:<4} {l.name[:23]:<24} {l.teacher[:23]:<24} {hw:<30}")
    return lines


def entry_rows(entries: Sequence[SpecificLesson], lessons: Dict[int, Lesson]) -> List[str]:
    lines = [f"{'#':<4} {'Day':<10} {'No':<3} {'Lesson':<24} {'Cabinet':<10} {'Info':<20}"]
    for e in sorted(entries, key=lambda x: (x.day.value, x.lesson_number)):
        lesson = lessons.get(e.lesson_id)
        name = lesson.name[:23] if lesson else f"? ({e.lesson_id})"
        lines.append(f"{e.id:<4} {e.day.title:<10} {e.lesson_number:<3} {name:<24} {e.cabinet[:9]:<10} {e.additional_info[:19]:<20}")
    return lines
