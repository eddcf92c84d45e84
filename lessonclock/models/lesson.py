from dataclasses import dataclass


@dataclass
class Lesson:
    id: int
    name: str
    teacher: str
    homework: str = ""

    def has_homework(self) -> bool:
        return bool(self.homework.strip())
