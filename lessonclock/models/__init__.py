# Re-export common types
from .lesson import Lesson
from .patch import UNSET, LessonPatch, SpecificLessonPatch, TimeSchemePatch, Unset
from .specific_lesson import SpecificLesson
from .status import InBreak, InPeriod, LiveStatus, Resting, StatusKind, format_countdown
from .time_scheme import TimeScheme
from .weekday import Weekday

__all__ = [
    "Lesson",
    "SpecificLesson",
    "TimeScheme",
    "Weekday",
    "UNSET",
    "Unset",
    "LessonPatch",
    "SpecificLessonPatch",
    "TimeSchemePatch",
    "LiveStatus",
    "Resting",
    "InPeriod",
    "InBreak",
    "StatusKind",
    "format_countdown",
]
