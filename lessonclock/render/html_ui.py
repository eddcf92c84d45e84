from __future__ import annotations

from html import escape
from pathlib import Path
from typing import Dict, List, Tuple

from ..data.store import ScheduleStore
from ..models.time_scheme import TimeScheme
from ..models.weekday import Weekday
from ..scheduler.periods import day_grid, period_times
from .text import hhmm

# Cycled per lesson id so one subject keeps one colour across the week
PALETTE = [
    "#e6f7ff",
    "#f0e6ff",
    "#fff4e6",
    "#e6f2ff",
    "#ffe6f0",
    "#fff7e6",
    "#e6ffe6",
    "#fffbe6",
]


def _times_html(times, scheme: TimeScheme) -> str:
    if scheme.is_pair_mode:
        return (
            f"{hhmm(times.start)}–{hhmm(times.first_half_end)}<br/>"
            f"{hhmm(times.middle_break_end)}–{hhmm(times.second_half_end)}"
        )
    return f"{hhmm(times.start)}–{hhmm(times.first_half_end)}"


def build_html(store: ScheduleStore, scheme: TimeScheme, title: str = "Timetable") -> str:
    lessons = {l.id: l for l in store.all_lessons()}
    days = [d for d in Weekday if store.specific_lessons_for_day(d)]
    numbers = sorted({e.lesson_number for e in store.all_specific_lessons() if e.lesson_number >= 1})

    def cell_html(day: Weekday, number: int) -> str:
        entry = store.specific_lesson_at(day, number)
        lesson = lessons.get(entry.lesson_id) if entry else None
        if entry is None or lesson is None:
            return "<td class='empty'></td>"
        bg = PALETTE[lesson.id % len(PALETTE)]
        info = f"<br/><span class='info'>{escape(entry.additional_info)}</span>" if entry.additional_info.strip() else ""
        hw = f"<br/><span class='hw'>HW: {escape(lesson.homework)}</span>" if lesson.has_homework() else ""
        return (
            f"<td style=\"background:{bg}\">"
            f"<div class='cell'><span class='subj'>{escape(lesson.name)}</span><br/>"
            f"<span class='teacher'>{escape(lesson.teacher)}</span><br/>"
            f"<span class='cabinet'>{escape(entry.cabinet)}</span>{info}{hw}</div>"
            f"</td>"
        )

    head_cells = "".join(
        f"<th>{n}<br/><span class='time'>{_times_html(period_times(n, scheme), scheme)}</span></th>" for n in numbers
    )
    rows_html: List[str] = []
    for d in days:
        row_cells = "".join(cell_html(d, n) for n in numbers)
        rows_html.append(f"<tr><th class='day'>{d.title}</th>{row_cells}</tr>")

    # Per-day summary
    summary: Dict[str, Tuple[str, str]] = {}
    for d in days:
        grid = day_grid([e for e in store.specific_lessons_for_day(d) if e.lesson_number >= 1], scheme)
        if not grid:
            continue
        first, last = grid[0][1], grid[-1][1]
        summary[d.title] = (hhmm(first.start), hhmm(last.end))
    summary_items = "".join(f"<li><strong>{day}</strong>: {a}–{b}</li>" for day, (a, b) in summary.items())

    style = """
    <style>
    body { font-family: system-ui, Arial, sans-serif; margin: 20px; color: #222; }
    h1 { margin-bottom: 4px; }
    .tt { border-collapse: collapse; width: 100%; table-layout: fixed; }
    .tt th, .tt td { border: 1px solid #ddd; padding: 6px; vertical-align: middle; text-align: center; }
    .tt thead th { background:#f7f7f7; font-weight:600; }
    .tt .day { background:#fafafa; width: 110px; text-align:left; padding-left:8px; }
    .tt .corner { background:#fff; width:110px; }
    .time { font-size: 11px; color:#666; }
    .cell { line-height: 1.2; }
    .subj { font-weight: 600; }
    .teacher, .cabinet { font-size: 12px; color:#444; }
    .info, .hw { font-size: 11px; color:#666; }
    .empty { background:#fbfbfb; }
    .notes { margin-top: 16px; font-size: 13px; color:#333; }
    </style>
    """

    mode = "pair mode" if scheme.is_pair_mode else f"{scheme.lesson_length} min lessons"
    return (
        f"<html><head><meta charset='utf-8'><title>{escape(title)}</title>" + style + "</head><body>"
        f"<h1>{escape(title)}</h1>"
        f"<p>Day starts {hhmm(scheme.start)}, {mode}</p>"
        "<table class='tt'>"
        f"<thead><tr><th class='corner'></th>{head_cells}</tr></thead>"
        f"<tbody>{''.join(rows_html)}</tbody>"
        "</table>"
        f"<div class='notes'><h3>Days</h3><ul>{summary_items}</ul></div>"
        "</body></html>"
    )


def write_html_ui(store: ScheduleStore, scheme: TimeScheme, outputs_dir: Path) -> Path:
    outputs_dir.mkdir(parents=True, exist_ok=True)
    out_path = outputs_dir / "timetable.html"
    out_path.write_text(build_html(store, scheme), encoding="utf-8")
    return out_path
