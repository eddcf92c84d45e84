from __future__ import annotations

import datetime as dt
import logging
import threading
from typing import Callable, List, Tuple, TypeVar

from ..errors import NotFoundError, PersistenceError, ValidationError
from ..models.lesson import Lesson
from ..models.patch import UNSET, LessonPatch, SpecificLessonPatch, TimeSchemePatch
from ..models.specific_lesson import SpecificLesson
from ..models.status import LiveStatus
from ..models.time_scheme import TimeScheme
from ..models.weekday import Weekday
from ..scheduler.homework import HomeworkDue, homework_due
from ..scheduler.periods import PeriodTimes, day_grid
from ..scheduler.status import day_to_show, live_status
from ..validate.checks import (
    validate_free_slot,
    validate_lesson_ref,
    validate_minutes,
    validate_time_scheme,
)
from . import codec
from .gateway import PersistenceGateway
from .store import ScheduleStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _require_name(name: str) -> None:
    if not name.strip():
        raise ValidationError("lesson name must not be empty")


class ScheduleSession:
    """Owns the store and time scheme of one running session.

    Every command validates first, mutates in memory, then saves the
    collections it touched. Updates on an unknown id raise NotFoundError;
    deletes on an unknown id return False and change nothing.
    """

    def __init__(self, gateway: PersistenceGateway, store: ScheduleStore | None = None, scheme: TimeScheme | None = None):
        self.gateway = gateway
        self.store = store if store is not None else ScheduleStore()
        self.time_scheme = scheme if scheme is not None else TimeScheme()
        self._lock = threading.RLock()

    # Persistence

    def _load_one(self, key: str, decode: Callable[[bytes], T], errors: List[PersistenceError]) -> T | None:
        try:
            blob = self.gateway.load(key)
            return None if blob is None else decode(blob)
        except PersistenceError as e:
            logger.error(f"Loading {key} failed, starting empty: {e}")
            errors.append(e)
            return None

    def load(self) -> None:
        errors: List[PersistenceError] = []
        with self._lock:
            scheme = self._load_one(codec.TIME_SCHEME_KEY, codec.decode_time_scheme, errors)
            self.time_scheme = scheme if scheme is not None else TimeScheme()
            lessons = self._load_one(codec.LESSONS_KEY, codec.decode_lessons, errors)
            self.store.replace_lessons(lessons or [])
            entries = self._load_one(codec.SPECIFIC_LESSONS_KEY, codec.decode_specific_lessons, errors)
            self.store.replace_specific_lessons(entries or [])
            lessons_ok = not any(e.key == codec.LESSONS_KEY for e in errors)
            if self.store.clean_invalid() and lessons_ok:
                self.save_specific_lessons()
        if errors:
            raise PersistenceError(",".join(e.key for e in errors), "; ".join(e.message for e in errors))

    def save_lessons(self) -> None:
        self.gateway.save(codec.LESSONS_KEY, codec.encode_lessons(self.store.all_lessons()))

    def save_specific_lessons(self) -> None:
        self.gateway.save(codec.SPECIFIC_LESSONS_KEY, codec.encode_specific_lessons(self.store.all_specific_lessons()))

    def save_time_scheme(self) -> None:
        self.gateway.save(codec.TIME_SCHEME_KEY, codec.encode_time_scheme(self.time_scheme))

    def save(self) -> None:
        self.save_lessons()
        self.save_specific_lessons()
        self.save_time_scheme()

    def replace_all(self, lessons: List[Lesson], entries: List[SpecificLesson], scheme: TimeScheme) -> int:
        """Swap in all three collections at once, reconcile, then save.

        Returns how many orphaned timetable entries were dropped.
        """
        with self._lock:
            self.store.replace_lessons(lessons)
            self.store.replace_specific_lessons(entries)
            self.time_scheme = scheme
            removed = self.store.clean_invalid()
            self.save()
        return removed

    # Lessons

    def _lesson(self, lesson_id: int) -> Lesson:
        lesson = self.store.lesson_by_id(lesson_id)
        if lesson is None:
            raise NotFoundError("lesson", lesson_id)
        return lesson

    def add_lesson(self, name: str, teacher: str) -> Lesson:
        _require_name(name)
        with self._lock:
            lesson = self.store.add_lesson(name, teacher)
            self.save_lessons()
        logger.info(f"Added lesson {lesson.id} {lesson.name!r}")
        return lesson

    def update_lesson(self, lesson_id: int, patch: LessonPatch) -> Lesson:
        if patch.name is not UNSET:
            _require_name(patch.name)
        with self._lock:
            self._lesson(lesson_id)
            lesson = self.store.update_lesson(lesson_id, patch)
            self.save_lessons()
        logger.info(f"Updated lesson {lesson_id}: {sorted(patch.present())}")
        return lesson

    def set_homework(self, lesson_id: int, homework: str) -> Lesson:
        return self.update_lesson(lesson_id, LessonPatch(homework=homework))

    def clear_homework(self, lesson_id: int) -> Lesson:
        return self.set_homework(lesson_id, "")

    def delete_lesson(self, lesson_id: int) -> bool:
        with self._lock:
            if not self.store.delete_lesson(lesson_id):
                logger.debug(f"Delete of unknown lesson {lesson_id} ignored")
                return False
            self.save_lessons()
            if self.store.clean_invalid():
                self.save_specific_lessons()
        logger.info(f"Deleted lesson {lesson_id}")
        return True

    # Timetable entries

    def _entry(self, entry_id: int) -> SpecificLesson:
        entry = self.store.specific_lesson_by_id(entry_id)
        if entry is None:
            raise NotFoundError("timetable entry", entry_id)
        return entry

    def add_specific_lesson(
        self, day: Weekday, lesson_number: int, lesson_id: int, cabinet: str = "", additional_info: str = ""
    ) -> SpecificLesson:
        with self._lock:
            validate_free_slot(self.store, day, lesson_number)
            validate_lesson_ref(self.store, lesson_id)
            entry = self.store.add_specific_lesson(day, lesson_number, lesson_id, cabinet, additional_info)
            self.save_specific_lessons()
        logger.info(f"Added entry {entry.id}: {day.title} #{lesson_number} -> lesson {lesson_id}")
        return entry

    def update_specific_lesson(self, entry_id: int, patch: SpecificLessonPatch) -> SpecificLesson:
        with self._lock:
            current = self._entry(entry_id)
            day = current.day if patch.day is UNSET else patch.day
            number = current.lesson_number if patch.lesson_number is UNSET else patch.lesson_number
            if (day, number) != current.slot:
                validate_free_slot(self.store, day, number, exclude_id=entry_id)
            if patch.lesson_id is not UNSET:
                validate_lesson_ref(self.store, patch.lesson_id)
            entry = self.store.update_specific_lesson(entry_id, patch)
            self.save_specific_lessons()
        logger.info(f"Updated entry {entry_id}: {sorted(patch.present())}")
        return entry

    def delete_specific_lesson(self, entry_id: int) -> bool:
        with self._lock:
            if not self.store.delete_specific_lesson(entry_id):
                logger.debug(f"Delete of unknown entry {entry_id} ignored")
                return False
            self.save_specific_lessons()
        logger.info(f"Deleted entry {entry_id}")
        return True

    # Time scheme

    def update_time_scheme(self, patch: TimeSchemePatch) -> TimeScheme:
        with self._lock:
            candidate = self.time_scheme.copy()
            patch.apply_to(candidate)
            validate_time_scheme(candidate)
            self.time_scheme = candidate
            self.save_time_scheme()
        logger.info(f"Updated time scheme: {sorted(patch.present())}")
        return self.time_scheme

    def reset_time_scheme(self) -> TimeScheme:
        with self._lock:
            self.time_scheme = TimeScheme()
            self.save_time_scheme()
        logger.info("Time scheme reset to defaults")
        return self.time_scheme

    def _check_break_number(self, number: int) -> None:
        if not 1 <= number <= len(self.time_scheme.breaks):
            raise ValidationError(f"no break {number}; scheme has {len(self.time_scheme.breaks)}")

    def add_break(self, minutes: int) -> TimeScheme:
        validate_minutes(minutes)
        return self.update_time_scheme(TimeSchemePatch(breaks=self.time_scheme.breaks + [minutes]))

    def set_break(self, number: int, minutes: int) -> TimeScheme:
        """Set the break after lesson ``number`` (1-based)."""
        validate_minutes(minutes)
        self._check_break_number(number)
        breaks = list(self.time_scheme.breaks)
        breaks[number - 1] = minutes
        return self.update_time_scheme(TimeSchemePatch(breaks=breaks))

    def remove_break(self, number: int) -> TimeScheme:
        self._check_break_number(number)
        breaks = list(self.time_scheme.breaks)
        del breaks[number - 1]
        return self.update_time_scheme(TimeSchemePatch(breaks=breaks))

    # Queries

    def status(self, at: dt.datetime) -> LiveStatus:
        today = Weekday.of(at.date())
        return live_status(at.time(), self.store.specific_lessons_for_day(today), self.time_scheme)

    def homework_due(self, at: dt.datetime) -> List[HomeworkDue]:
        return homework_due(self.store, Weekday.of(at.date()), at.time(), self.time_scheme)

    def day_to_show(self, at: dt.datetime) -> Weekday:
        return day_to_show(Weekday.of(at.date()), at.time(), self.store, self.time_scheme)

    def day_grid(self, day: Weekday) -> List[Tuple[SpecificLesson, PeriodTimes]]:
        return day_grid(self.store.specific_lessons_for_day(day), self.time_scheme)

    def week(self) -> List[Tuple[Weekday, List[Tuple[SpecificLesson, PeriodTimes]]]]:
        return [(day, self.day_grid(day)) for day in Weekday]
