from __future__ import annotations

import json
from pathlib import Path
from typing import Dict


def write_check_report(report: Dict[str, object], outputs_dir: Path) -> Path:
    outputs_dir.mkdir(parents=True, exist_ok=True)
    path = outputs_dir / "check.json"
    with path.open("w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)
    return path


def report_is_clean(report: Dict[str, object]) -> bool:
    keys = ("duplicate_slots", "bad_lesson_numbers", "orphaned_entries", "scheme_problems", "overlapping_periods")
    return not any(report.get(k) for k in keys)


def format_check_report(report: Dict[str, object]) -> str:
    lines: list[str] = []
    for key in ("duplicate_slots", "bad_lesson_numbers", "orphaned_entries", "unscheduled_lessons"):
        items = report.get(key, [])
        lines.append(f"{key}: {len(items) if isinstance(items, list) else items}")
        if isinstance(items, list):
            for item in items:
                lines.append(f"  - {item}")
    lines.append("scheme_problems:")
    for p in report.get("scheme_problems", []) or []:
        lines.append(f"  - {p}")
    overlaps = report.get("overlapping_periods", {})
    lines.append("overlapping_periods:")
    if isinstance(overlaps, dict):
        for day, pairs in overlaps.items():
            lines.append(f"  - {day}: {', '.join(pairs)}")
    lines.append("lessons_per_day:")
    per_day = report.get("lessons_per_day", {})
    if isinstance(per_day, dict):
        for day, n in per_day.items():
            lines.append(f"  - {day}: {n}")
    return "\n".join(lines)
