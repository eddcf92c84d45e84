from dataclasses import dataclass

from .weekday import Weekday


@dataclass
class SpecificLesson:
    id: int
    day: Weekday
    lesson_number: int
    lesson_id: int
    cabinet: str = ""
    additional_info: str = ""

    @property
    def slot(self) -> tuple[Weekday, int]:
        return (self.day, self.lesson_number)
