from __future__ import annotations

from collections import Counter, defaultdict
from typing import Dict, List

from ..data.store import ScheduleStore
from ..errors import ValidationError
from ..models.time_scheme import TimeScheme
from ..models.weekday import Weekday
from ..scheduler.periods import day_grid


def scheme_problems(scheme: TimeScheme) -> List[str]:
    problems: List[str] = []
    if scheme.lesson_length <= 0:
        problems.append(f"lesson length must be positive, got {scheme.lesson_length}")
    for i, b in enumerate(scheme.breaks):
        if b <= 0:
            problems.append(f"break {i + 1} must be positive, got {b}")
    if scheme.default_break <= 0:
        problems.append(f"default break must be positive, got {scheme.default_break}")
    if scheme.couple_middle_break_length < 0:
        problems.append(f"middle break must not be negative, got {scheme.couple_middle_break_length}")
    if scheme.start.tzinfo is not None:
        problems.append("start must be a local time without offset")
    return problems


def validate_time_scheme(scheme: TimeScheme) -> None:
    problems = scheme_problems(scheme)
    if problems:
        raise ValidationError("; ".join(problems))


def validate_minutes(minutes: int, what: str = "break") -> None:
    if minutes <= 0:
        raise ValidationError(f"{what} must be positive, got {minutes}")


def validate_lesson_number(lesson_number: int) -> None:
    if lesson_number < 1:
        raise ValidationError(f"lesson number must be >= 1, got {lesson_number}")


def validate_lesson_ref(store: ScheduleStore, lesson_id: int) -> None:
    if store.lesson_by_id(lesson_id) is None:
        raise ValidationError(f"no lesson with id {lesson_id}")


def validate_free_slot(store: ScheduleStore, day: Weekday, lesson_number: int, exclude_id: int | None = None) -> None:
    validate_lesson_number(lesson_number)
    existing = store.specific_lesson_at(day, lesson_number)
    if existing is not None and existing.id != exclude_id:
        raise ValidationError(f"{day.title} already has lesson number {lesson_number}")


def check_store(store: ScheduleStore, scheme: TimeScheme) -> Dict[str, object]:
    report: Dict[str, object] = {}

    slots = Counter(e.slot for e in store.all_specific_lessons())
    report["duplicate_slots"] = [
        f"{d.title}:{n}" for (d, n), c in sorted(slots.items(), key=lambda x: (x[0][0].value, x[0][1])) if c > 1
    ]
    report["bad_lesson_numbers"] = [e.id for e in store.all_specific_lessons() if e.lesson_number < 1]

    known = {l.id for l in store.all_lessons()}
    report["orphaned_entries"] = [e.id for e in store.all_specific_lessons() if e.lesson_id not in known]

    used = {e.lesson_id for e in store.all_specific_lessons()}
    report["unscheduled_lessons"] = [l.name for l in store.all_lessons() if l.id not in used]

    report["scheme_problems"] = scheme_problems(scheme)

    # Windows that overlap or run backwards when lengths are not positive
    overlaps: Dict[str, List[str]] = defaultdict(list)
    for day in Weekday:
        entries = [e for e in store.specific_lessons_for_day(day) if e.lesson_number >= 1]
        grid = day_grid(entries, scheme)
        for (a, ta), (b, tb) in zip(grid, grid[1:]):
            if tb.start_minutes < ta.end_minutes:
                overlaps[day.title].append(f"{a.lesson_number}-{b.lesson_number}")
    report["overlapping_periods"] = dict(overlaps)

    report["lessons_per_day"] = {
        day.title: len(store.specific_lessons_for_day(day)) for day in Weekday
    }
    return report
