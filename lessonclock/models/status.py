from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .specific_lesson import SpecificLesson


class StatusKind(Enum):
    RESTING = "resting"
    IN_PERIOD = "in_period"  # counting down to a lesson start
    IN_BREAK = "in_break"  # a lesson is running, counting down to its end


def format_countdown(seconds: int) -> str:
    if seconds < 0:
        raise ValueError(f"negative countdown: {seconds}")
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


@dataclass(frozen=True)
class Resting:
    kind = StatusKind.RESTING
    label = "rest"
    relevant_entry = None
    countdown_seconds = 0

    @property
    def countdown(self) -> str:
        return ""


@dataclass(frozen=True)
class InPeriod:
    entry: SpecificLesson
    countdown_seconds: int
    kind = StatusKind.IN_PERIOD
    label = "until lesson"

    @property
    def relevant_entry(self) -> SpecificLesson:
        return self.entry

    @property
    def countdown(self) -> str:
        return format_countdown(self.countdown_seconds)


@dataclass(frozen=True)
class InBreak:
    entry: SpecificLesson
    countdown_seconds: int
    kind = StatusKind.IN_BREAK
    label = "until break"

    @property
    def relevant_entry(self) -> SpecificLesson:
        return self.entry

    @property
    def countdown(self) -> str:
        return format_countdown(self.countdown_seconds)


LiveStatus = Union[Resting, InPeriod, InBreak]
