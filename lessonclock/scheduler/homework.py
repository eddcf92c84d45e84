from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import List

from ..data.store import ScheduleStore
from ..models.lesson import Lesson
from ..models.time_scheme import TimeScheme
from ..models.weekday import Weekday
from .periods import start_offset
from .status import seconds_of

NOT_FOUND = -1


@dataclass(frozen=True)
class HomeworkDue:
    lesson: Lesson
    days: int


def days_until_next_lesson(
    lesson_id: int, store: ScheduleStore, today: Weekday, now: dt.time, scheme: TimeScheme
) -> int:
    t = seconds_of(now)
    for entry in store.specific_lessons_for_day(today):
        if entry.lesson_id == lesson_id and t < start_offset(entry.lesson_number, scheme) * 60:
            return 0
    # Other weekdays only; today's weekday a week later is not counted
    for d in range(1, 7):
        day = today.plus(d)
        if any(e.lesson_id == lesson_id for e in store.specific_lessons_for_day(day)):
            return d
    return NOT_FOUND


def homework_due(store: ScheduleStore, today: Weekday, now: dt.time, scheme: TimeScheme) -> List[HomeworkDue]:
    due: List[HomeworkDue] = []
    for lesson in store.all_lessons():
        if not lesson.has_homework():
            continue
        days = days_until_next_lesson(lesson.id, store, today, now, scheme)
        if days != NOT_FOUND:
            due.append(HomeworkDue(lesson, days))
    return sorted(due, key=lambda h: h.days)
