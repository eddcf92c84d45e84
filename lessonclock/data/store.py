from __future__ import annotations

import logging
from typing import Iterable, List, Protocol

from ..models.lesson import Lesson
from ..models.patch import LessonPatch, SpecificLessonPatch
from ..models.specific_lesson import SpecificLesson
from ..models.weekday import Weekday

logger = logging.getLogger(__name__)


class _HasId(Protocol):
    id: int


def minimal_free_id(items: Iterable[_HasId]) -> int:
    used = {item.id for item in items}
    ident = 0
    while ident in used:
        ident += 1
    return ident


class ScheduleStore:
    """Lessons and the weekly timetable, held in memory.

    Updates and deletes on an unknown id do nothing. Deleting a lesson does
    not touch the timetable; call ``clean_invalid`` afterwards.
    """

    def __init__(self, lessons: Iterable[Lesson] = (), specific_lessons: Iterable[SpecificLesson] = ()):
        self.lessons: List[Lesson] = list(lessons)
        self.specific_lessons: List[SpecificLesson] = list(specific_lessons)

    # Lessons

    def add_lesson(self, name: str, teacher: str) -> Lesson:
        lesson = Lesson(minimal_free_id(self.lessons), name, teacher)
        self.lessons.append(lesson)
        return lesson

    def update_lesson(self, lesson_id: int, patch: LessonPatch) -> Lesson | None:
        lesson = self.lesson_by_id(lesson_id)
        if lesson is not None:
            patch.apply_to(lesson)
        return lesson

    def set_homework(self, lesson_id: int, homework: str) -> Lesson | None:
        return self.update_lesson(lesson_id, LessonPatch(homework=homework))

    def delete_lesson(self, lesson_id: int) -> bool:
        before = len(self.lessons)
        self.lessons = [l for l in self.lessons if l.id != lesson_id]
        return len(self.lessons) != before

    def replace_lessons(self, lessons: Iterable[Lesson]) -> None:
        self.lessons = list(lessons)

    def all_lessons(self) -> List[Lesson]:
        return list(self.lessons)

    def lesson_by_id(self, lesson_id: int) -> Lesson | None:
        for lesson in self.lessons:
            if lesson.id == lesson_id:
                return lesson
        return None

    # Timetable entries

    def add_specific_lesson(
        self, day: Weekday, lesson_number: int, lesson_id: int, cabinet: str = "", additional_info: str = ""
    ) -> SpecificLesson:
        entry = SpecificLesson(
            minimal_free_id(self.specific_lessons), day, lesson_number, lesson_id, cabinet, additional_info
        )
        self.specific_lessons.append(entry)
        return entry

    def update_specific_lesson(self, entry_id: int, patch: SpecificLessonPatch) -> SpecificLesson | None:
        entry = self.specific_lesson_by_id(entry_id)
        if entry is not None:
            patch.apply_to(entry)
        return entry

    def delete_specific_lesson(self, entry_id: int) -> bool:
        before = len(self.specific_lessons)
        self.specific_lessons = [e for e in self.specific_lessons if e.id != entry_id]
        return len(self.specific_lessons) != before

    def replace_specific_lessons(self, entries: Iterable[SpecificLesson]) -> None:
        self.specific_lessons = list(entries)

    def all_specific_lessons(self) -> List[SpecificLesson]:
        return list(self.specific_lessons)

    def specific_lesson_by_id(self, entry_id: int) -> SpecificLesson | None:
        for entry in self.specific_lessons:
            if entry.id == entry_id:
                return entry
        return None

    def specific_lessons_for_day(self, day: Weekday) -> List[SpecificLesson]:
        return sorted((e for e in self.specific_lessons if e.day == day), key=lambda e: e.lesson_number)

    def specific_lesson_at(self, day: Weekday, lesson_number: int) -> SpecificLesson | None:
        for entry in self.specific_lessons:
            if entry.day == day and entry.lesson_number == lesson_number:
                return entry
        return None

    def clean_invalid(self) -> int:
        known = {l.id for l in self.lessons}
        kept = [e for e in self.specific_lessons if e.lesson_id in known]
        removed = len(self.specific_lessons) - len(kept)
        if removed:
            logger.info(f"Removed {removed} timetable entries with no lesson")
        self.specific_lessons = kept
        return removed
