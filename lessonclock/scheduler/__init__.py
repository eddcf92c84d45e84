from .homework import NOT_FOUND, HomeworkDue, days_until_next_lesson, homework_due
from .periods import (
    PeriodTimes,
    break_after,
    day_grid,
    end_of,
    full_lesson_duration,
    period_times,
    start_of,
    start_offset,
)
from .status import day_to_show, lessons_have_ended, live_status

__all__ = [
    "PeriodTimes",
    "break_after",
    "day_grid",
    "end_of",
    "full_lesson_duration",
    "period_times",
    "start_of",
    "start_offset",
    "live_status",
    "lessons_have_ended",
    "day_to_show",
    "homework_due",
    "days_until_next_lesson",
    "HomeworkDue",
    "NOT_FOUND",
]
