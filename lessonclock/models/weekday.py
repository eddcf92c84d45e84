from __future__ import annotations

import datetime as dt
from enum import Enum


class Weekday(Enum):
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7

    @classmethod
    def of(cls, day: dt.date) -> "Weekday":
        return cls(day.isoweekday())

    @classmethod
    def parse(cls, text: str) -> "Weekday":
        # Accepts "MONDAY", "Monday", "mon" and ISO numbers "1".."7"
        key = text.strip().upper()
        if key.isdigit():
            return cls(int(key))
        for day in cls:
            if day.name == key or (len(key) >= 3 and day.name.startswith(key)):
                return day
        raise ValueError(f"unknown weekday: {text!r}")

    def plus(self, days: int) -> "Weekday":
        return Weekday((self.value - 1 + days) % 7 + 1)

    @property
    def title(self) -> str:
        return self.name.title()
