from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import List

DEFAULT_START = dt.time(9, 0)
DEFAULT_LESSON_LENGTH = 45
DEFAULT_BREAKS = [15, 15, 15, 15, 15, 15, 15]
DEFAULT_BREAK = 15
DEFAULT_COUPLE_MIDDLE_BREAK = 10


@dataclass
class TimeScheme:
    start: dt.time = DEFAULT_START
    lesson_length: int = DEFAULT_LESSON_LENGTH
    breaks: List[int] = field(default_factory=lambda: list(DEFAULT_BREAKS))
    default_break: int = DEFAULT_BREAK
    couple_middle_break_length: int = DEFAULT_COUPLE_MIDDLE_BREAK
    is_pair_mode: bool = False

    def copy(self) -> "TimeScheme":
        return TimeScheme(
            start=self.start,
            lesson_length=self.lesson_length,
            breaks=list(self.breaks),
            default_break=self.default_break,
            couple_middle_break_length=self.couple_middle_break_length,
            is_pair_mode=self.is_pair_mode,
        )
