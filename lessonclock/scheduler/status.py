from __future__ import annotations

import datetime as dt
from typing import List, Sequence, Tuple

from ..data.store import ScheduleStore
from ..models.specific_lesson import SpecificLesson
from ..models.status import InBreak, InPeriod, LiveStatus, Resting
from ..models.time_scheme import TimeScheme
from ..models.weekday import Weekday
from .periods import period_times

Window = Tuple[int, int]  # [start, end) in seconds after midnight


def seconds_of(now: dt.time) -> int:
    # Whole seconds; microseconds are dropped
    return now.hour * 3600 + now.minute * 60 + now.second


def window(entry: SpecificLesson, scheme: TimeScheme) -> Window:
    times = period_times(entry.lesson_number, scheme)
    return times.start_minutes * 60, times.end_minutes * 60


def _ordered(entries: Sequence[SpecificLesson]) -> List[SpecificLesson]:
    return sorted(entries, key=lambda e: e.lesson_number)


def lessons_have_ended(now: dt.time, entries: Sequence[SpecificLesson], scheme: TimeScheme) -> bool:
    if not entries:
        return True
    last = max(entries, key=lambda e: e.lesson_number)
    _, end = window(last, scheme)
    return seconds_of(now) >= end


def live_status(now: dt.time, todays_entries: Sequence[SpecificLesson], scheme: TimeScheme) -> LiveStatus:
    """Where ``now`` falls among today's lessons.

    InBreak: a lesson is running, countdown to its end.
    InPeriod: waiting for a lesson, countdown to its start.
    Resting: nothing today, or everything has ended.
    """
    entries = _ordered(todays_entries)
    if not entries or lessons_have_ended(now, entries, scheme):
        return Resting()
    t = seconds_of(now)
    windows = [window(e, scheme) for e in entries]
    for i, entry in enumerate(entries):
        start, end = windows[i]
        if start <= t < end:
            return InBreak(entry, end - t)
        if t < start:
            return InPeriod(entry, start - t)
        if i < len(entries) - 1:
            next_start = windows[i + 1][0]
            if t < next_start:
                return InPeriod(entries[i + 1], next_start - t)
    return Resting()


def day_to_show(today: Weekday, now: dt.time, store: ScheduleStore, scheme: TimeScheme) -> Weekday:
    """Today, or tomorrow once today is empty or over."""
    todays = store.specific_lessons_for_day(today)
    if not todays or lessons_have_ended(now, todays, scheme):
        return today.plus(1)
    return today
