from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import List

from ..data.store import ScheduleStore
from ..models.time_scheme import TimeScheme
from ..models.weekday import Weekday
from ..scheduler.periods import day_grid
from .text import hhmm

HEADER = ["Day", "Period", "Start", "End", "Subject", "Teacher", "Cabinet", "Info"]


def csv_rows(store: ScheduleStore, scheme: TimeScheme) -> List[List[str]]:
    rows: List[List[str]] = []
    for day in Weekday:
        entries = [e for e in store.specific_lessons_for_day(day) if e.lesson_number >= 1]
        for entry, times in day_grid(entries, scheme):
            lesson = store.lesson_by_id(entry.lesson_id)
            rows.append(
                [
                    day.title,
                    str(entry.lesson_number),
                    hhmm(times.start),
                    hhmm(times.end),
                    lesson.name if lesson else "",
                    lesson.teacher if lesson else "",
                    entry.cabinet,
                    entry.additional_info,
                ]
            )
    return rows


def csv_week(store: ScheduleStore, scheme: TimeScheme) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(HEADER)
    writer.writerows(csv_rows(store, scheme))
    return buf.getvalue()


def write_csv_week(text: str, outputs_dir: Path) -> Path:
    outputs_dir.mkdir(parents=True, exist_ok=True)
    path = outputs_dir / "timetable.csv"
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(text)
    return path
