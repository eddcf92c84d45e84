from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from ..errors import ValidationError
from ..models.specific_lesson import SpecificLesson
from ..models.time_scheme import TimeScheme

MINUTES_PER_DAY = 24 * 60


def _minutes(t: dt.time) -> int:
    return t.hour * 60 + t.minute


def to_time(minutes: int) -> dt.time:
    # Wraps past midnight the way a wall clock does
    m = minutes % MINUTES_PER_DAY
    return dt.time(m // 60, m % 60)


def _check_number(lesson_number: int) -> None:
    if lesson_number < 1:
        raise ValidationError(f"lesson number must be >= 1, got {lesson_number}")


def full_lesson_duration(scheme: TimeScheme) -> int:
    if scheme.is_pair_mode:
        return scheme.lesson_length * 2 + scheme.couple_middle_break_length
    return scheme.lesson_length


def break_after(lesson_number: int, scheme: TimeScheme) -> int:
    _check_number(lesson_number)
    i = lesson_number - 1
    if i < len(scheme.breaks):
        return scheme.breaks[i]
    return scheme.default_break


def start_offset(lesson_number: int, scheme: TimeScheme) -> int:
    """Minutes after midnight at which ``lesson_number`` starts, not wrapped."""
    _check_number(lesson_number)
    current = _minutes(scheme.start)
    duration = full_lesson_duration(scheme)
    for n in range(1, lesson_number):
        current += duration + break_after(n, scheme)
    return current


def start_of(lesson_number: int, scheme: TimeScheme) -> dt.time:
    return to_time(start_offset(lesson_number, scheme))


def end_of(lesson_number: int, scheme: TimeScheme) -> dt.time:
    return to_time(start_offset(lesson_number, scheme) + scheme.lesson_length)


@dataclass(frozen=True)
class PeriodTimes:
    """Boundaries of one period.

    Outside pair mode ``middle_break_end`` and ``second_half_end`` equal
    ``first_half_end``. ``end`` is the end of the whole occupied slot.
    """

    lesson_number: int
    start_minutes: int
    end_minutes: int
    start: dt.time
    first_half_end: dt.time
    middle_break_end: dt.time
    second_half_end: dt.time

    @property
    def end(self) -> dt.time:
        return self.second_half_end


def period_times(lesson_number: int, scheme: TimeScheme) -> PeriodTimes:
    start = start_offset(lesson_number, scheme)
    first_end = start + scheme.lesson_length
    if scheme.is_pair_mode:
        middle_end = first_end + scheme.couple_middle_break_length
        second_end = middle_end + scheme.lesson_length
    else:
        middle_end = second_end = first_end
    return PeriodTimes(
        lesson_number=lesson_number,
        start_minutes=start,
        end_minutes=second_end,
        start=to_time(start),
        first_half_end=to_time(first_end),
        middle_break_end=to_time(middle_end),
        second_half_end=to_time(second_end),
    )


def day_grid(
    entries: Iterable[SpecificLesson], scheme: TimeScheme
) -> List[Tuple[SpecificLesson, PeriodTimes]]:
    ordered = sorted(entries, key=lambda e: e.lesson_number)
    return [(e, period_times(e.lesson_number, scheme)) for e in ordered]
