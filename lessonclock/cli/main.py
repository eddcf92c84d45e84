from __future__ import annotations

import datetime as dt
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, TypeVar

import typer

from ..config import Settings, load_settings, project_root, resolve
from ..data import share
from ..data.gateway import FileGateway
from ..data.session import ScheduleSession
from ..errors import LessonClockError, PersistenceError
from ..models.patch import UNSET, LessonPatch, SpecificLessonPatch, TimeSchemePatch, Unset
from ..models.weekday import Weekday
from ..render import text
from ..render.csv_out import csv_week, write_csv_week
from ..render.html_ui import write_html_ui
from ..validate.checks import check_store
from ..validate.report import format_check_report, report_is_clean, write_check_report

T = TypeVar("T")

app = typer.Typer(add_completion=False, help="School timetable and bell tracker")
lessons_app = typer.Typer(add_completion=False, help="Manage lessons (subjects)")
homework_app = typer.Typer(add_completion=False, help="Homework notes")
entries_app = typer.Typer(add_completion=False, help="Manage the weekly timetable")
scheme_app = typer.Typer(add_completion=False, help="Bell / time scheme")
breaks_app = typer.Typer(add_completion=False, help="Breaks between lessons")
render_app = typer.Typer(add_completion=False, help="Write the week to outputs/")
app.add_typer(lessons_app, name="lessons")
app.add_typer(homework_app, name="homework")
app.add_typer(entries_app, name="entries")
app.add_typer(scheme_app, name="scheme")
scheme_app.add_typer(breaks_app, name="breaks")
app.add_typer(render_app, name="render")


@dataclass
class AppContext:
    root: Path
    settings: Settings
    session: ScheduleSession
    load_error: PersistenceError | None = None

    @property
    def outputs_dir(self) -> Path:
        return resolve(self.root, self.settings.outputs_dir)

    def writable(self) -> ScheduleSession:
        # Saving over a collection that failed to load would erase it
        if self.load_error is not None:
            raise self.load_error
        return self.session


def _setup_logging(logs_dir: Path, level: str) -> None:
    logs_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.FileHandler(logs_dir / "lessonclock.log", encoding="utf-8"),
            logging.StreamHandler(),
        ],
        force=True,
    )


@contextmanager
def _errors() -> Iterator[None]:
    try:
        yield
    except LessonClockError as e:
        typer.secho(f"error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


def _ctx(ctx: typer.Context) -> AppContext:
    return ctx.obj


def _day(value: Optional[str]) -> Optional[Weekday]:
    if value is None:
        return None
    try:
        return Weekday.parse(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def _time(value: Optional[str]) -> Optional[dt.time]:
    if value is None:
        return None
    try:
        parsed = dt.time.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"expected HH:MM or HH:MM:SS, got {value!r}")
    if parsed.tzinfo is not None:
        raise typer.BadParameter(f"expected a local time without offset, got {value!r}")
    return parsed


def _minutes_list(value: Optional[str]) -> Optional[List[int]]:
    if value is None:
        return None
    try:
        return [int(p) for p in value.split(",") if p.strip()]
    except ValueError:
        raise typer.BadParameter(f"expected comma separated minutes, got {value!r}")


def _opt(value: T | None) -> T | Unset:
    return UNSET if value is None else value


def _moment(at: Optional[str], day: Optional[str]) -> dt.datetime:
    now = dt.datetime.now().replace(microsecond=0)
    target_day = _day(day)
    if target_day is not None:
        now += dt.timedelta(days=target_day.value - now.isoweekday())
    t = _time(at)
    if t is not None:
        now = dt.datetime.combine(now.date(), t)
    return now


def _lessons(session: ScheduleSession):
    return {l.id: l for l in session.store.all_lessons()}


@app.callback()
def main(
    ctx: typer.Context,
    root: Optional[Path] = typer.Option(None, help="Project root (configs/, data/, logs/, outputs/)"),
    log_level: Optional[str] = typer.Option(None, help="Log level"),
) -> None:
    project = project_root(root)
    settings = load_settings(project)
    _setup_logging(resolve(project, settings.logs_dir), log_level or settings.log_level)
    session = ScheduleSession(FileGateway(resolve(project, settings.data_dir)))
    load_error = None
    try:
        session.load()
    except PersistenceError as e:
        typer.secho(f"warning: {e}", fg=typer.colors.YELLOW, err=True)
        load_error = e
    ctx.obj = AppContext(project, settings, session, load_error)


# Lessons


@lessons_app.command("list")
def cli_lessons_list(ctx: typer.Context) -> None:
    typer.echo("\n".join(text.lesson_rows(_ctx(ctx).session.store.all_lessons())))


@lessons_app.command("add")
def cli_lessons_add(ctx: typer.Context, name: str, teacher: str = typer.Argument("")) -> None:
    with _errors():
        lesson = _ctx(ctx).writable().add_lesson(name, teacher)
    typer.echo(f"added lesson {lesson.id}: {lesson.name}")


@lessons_app.command("update")
def cli_lessons_update(
    ctx: typer.Context,
    lesson_id: int,
    name: Optional[str] = typer.Option(None, help="New name"),
    teacher: Optional[str] = typer.Option(None, help="New teacher"),
) -> None:
    with _errors():
        lesson = _ctx(ctx).writable().update_lesson(lesson_id, LessonPatch(name=_opt(name), teacher=_opt(teacher)))
    typer.echo(f"updated lesson {lesson.id}: {lesson.name} ({lesson.teacher})")


@lessons_app.command("delete")
def cli_lessons_delete(ctx: typer.Context, lesson_id: int) -> None:
    with _errors():
        removed = _ctx(ctx).writable().delete_lesson(lesson_id)
    typer.echo(f"deleted lesson {lesson_id}" if removed else f"no lesson {lesson_id}")


# Homework


@homework_app.command("set")
def cli_homework_set(ctx: typer.Context, lesson_id: int, homework: str) -> None:
    with _errors():
        lesson = _ctx(ctx).writable().set_homework(lesson_id, homework)
    typer.echo(f"{lesson.name}: {lesson.homework}")


@homework_app.command("clear")
def cli_homework_clear(ctx: typer.Context, lesson_id: int) -> None:
    with _errors():
        lesson = _ctx(ctx).writable().clear_homework(lesson_id)
    typer.echo(f"cleared homework for {lesson.name}")


@homework_app.command("due")
def cli_homework_due(
    ctx: typer.Context,
    at: Optional[str] = typer.Option(None, help="Time of day HH:MM[:SS]"),
    day: Optional[str] = typer.Option(None, help="Weekday of the current week"),
) -> None:
    with _errors():
        due = _ctx(ctx).session.homework_due(_moment(at, day))
    typer.echo("\n".join(text.homework_lines(due)) if due else "No homework")


# Timetable entries


@entries_app.command("list")
def cli_entries_list(ctx: typer.Context, day: Optional[str] = typer.Option(None, help="Only this weekday")) -> None:
    session = _ctx(ctx).session
    target = _day(day)
    entries = session.store.specific_lessons_for_day(target) if target else session.store.all_specific_lessons()
    typer.echo("\n".join(text.entry_rows(entries, _lessons(session))))


@entries_app.command("add")
def cli_entries_add(
    ctx: typer.Context,
    day: str,
    lesson_number: int,
    lesson_id: int,
    cabinet: str = typer.Option("", help="Room"),
    info: str = typer.Option("", help="Additional info"),
) -> None:
    with _errors():
        entry = _ctx(ctx).writable().add_specific_lesson(_day(day), lesson_number, lesson_id, cabinet, info)
    typer.echo(f"added entry {entry.id}: {entry.day.title} #{entry.lesson_number}")


@entries_app.command("update")
def cli_entries_update(
    ctx: typer.Context,
    entry_id: int,
    day: Optional[str] = typer.Option(None, help="Move to weekday"),
    number: Optional[int] = typer.Option(None, help="Move to lesson number"),
    lesson: Optional[int] = typer.Option(None, help="Lesson id"),
    cabinet: Optional[str] = typer.Option(None, help="Room"),
    info: Optional[str] = typer.Option(None, help="Additional info"),
) -> None:
    patch = SpecificLessonPatch(
        day=_opt(_day(day)),
        lesson_number=_opt(number),
        lesson_id=_opt(lesson),
        cabinet=_opt(cabinet),
        additional_info=_opt(info),
    )
    with _errors():
        entry = _ctx(ctx).writable().update_specific_lesson(entry_id, patch)
    typer.echo(f"updated entry {entry.id}: {entry.day.title} #{entry.lesson_number}")


@entries_app.command("delete")
def cli_entries_delete(ctx: typer.Context, entry_id: int) -> None:
    with _errors():
        removed = _ctx(ctx).writable().delete_specific_lesson(entry_id)
    typer.echo(f"deleted entry {entry_id}" if removed else f"no entry {entry_id}")


# Time scheme


@scheme_app.command("show")
def cli_scheme_show(ctx: typer.Context) -> None:
    typer.echo("\n".join(text.scheme_lines(_ctx(ctx).session.time_scheme)))


@scheme_app.command("set")
def cli_scheme_set(
    ctx: typer.Context,
    start: Optional[str] = typer.Option(None, help="Day start HH:MM"),
    length: Optional[int] = typer.Option(None, help="Lesson length in minutes"),
    breaks: Optional[str] = typer.Option(None, help="Breaks, e.g. 15,10,20"),
    default_break: Optional[int] = typer.Option(None, help="Break used once the list runs out"),
    middle_break: Optional[int] = typer.Option(None, help="Break inside a pair"),
    pair: Optional[bool] = typer.Option(None, "--pair/--no-pair", help="Pair mode"),
) -> None:
    patch = TimeSchemePatch(
        start=_opt(_time(start)),
        lesson_length=_opt(length),
        breaks=_opt(_minutes_list(breaks)),
        default_break=_opt(default_break),
        couple_middle_break_length=_opt(middle_break),
        is_pair_mode=_opt(pair),
    )
    with _errors():
        scheme = _ctx(ctx).writable().update_time_scheme(patch)
    typer.echo("\n".join(text.scheme_lines(scheme)))


@scheme_app.command("reset")
def cli_scheme_reset(ctx: typer.Context) -> None:
    with _errors():
        scheme = _ctx(ctx).writable().reset_time_scheme()
    typer.echo("\n".join(text.scheme_lines(scheme)))


@breaks_app.command("add")
def cli_breaks_add(ctx: typer.Context, minutes: int) -> None:
    with _errors():
        scheme = _ctx(ctx).writable().add_break(minutes)
    typer.echo(f"{len(scheme.breaks)} breaks")


@breaks_app.command("set")
def cli_breaks_set(ctx: typer.Context, number: int, minutes: int) -> None:
    with _errors():
        _ctx(ctx).writable().set_break(number, minutes)
    typer.echo(f"break {number}: {minutes} min")


@breaks_app.command("remove")
def cli_breaks_remove(ctx: typer.Context, number: int) -> None:
    with _errors():
        scheme = _ctx(ctx).writable().remove_break(number)
    typer.echo(f"{len(scheme.breaks)} breaks")


# Live views


@app.command("status")
def cli_status(
    ctx: typer.Context,
    at: Optional[str] = typer.Option(None, help="Time of day HH:MM[:SS]"),
    day: Optional[str] = typer.Option(None, help="Weekday of the current week"),
) -> None:
    session = _ctx(ctx).session
    with _errors():
        status = session.status(_moment(at, day))
    typer.echo("\n".join(text.status_lines(status, _lessons(session))))


@app.command("watch")
def cli_watch(ctx: typer.Context, count: int = typer.Option(0, help="Stop after this many ticks (0 = forever)")) -> None:
    app_ctx = _ctx(ctx)
    session = app_ctx.session
    ticks = 0
    with _errors():
        while count <= 0 or ticks < count:
            status = session.status(dt.datetime.now())
            line = text.status_lines(status, _lessons(session))
            typer.echo("\r" + " | ".join(line).ljust(60), nl=False)
            ticks += 1
            if count <= 0 or ticks < count:
                time.sleep(app_ctx.settings.tick_seconds)
    typer.echo("")


@app.command("today")
def cli_today(
    ctx: typer.Context,
    at: Optional[str] = typer.Option(None, help="Time of day HH:MM[:SS]"),
    day: Optional[str] = typer.Option(None, help="Weekday of the current week"),
) -> None:
    session = _ctx(ctx).session
    moment = _moment(at, day)
    with _errors():
        shown = session.day_to_show(moment)
        lines = text.day_lines(session.day_grid(shown), _lessons(session), session.time_scheme)
    title = "Today" if shown == Weekday.of(moment.date()) else "Tomorrow"
    typer.echo(f"{title} ({shown.title})")
    typer.echo("\n".join(lines) if lines else "No lessons")


@app.command("week")
def cli_week(ctx: typer.Context) -> None:
    session = _ctx(ctx).session
    lessons = _lessons(session)
    with _errors():
        for day, grid in session.week():
            if not grid:
                continue
            typer.echo(day.title)
            for line in text.day_lines(grid, lessons, session.time_scheme):
                typer.echo(f"  {line}")


# Export / import / outputs


@app.command("export")
def cli_export(ctx: typer.Context, path: Optional[Path] = typer.Argument(None)) -> None:
    app_ctx = _ctx(ctx)
    target = path or share.export_path(app_ctx.outputs_dir, app_ctx.settings.export_name)
    with _errors():
        written = share.export_to_file(app_ctx.session, target)
    typer.echo(f"exported to {written}")


@app.command("import")
def cli_import(ctx: typer.Context, path: Path) -> None:
    app_ctx = _ctx(ctx)
    with _errors():
        try:
            removed = share.import_from_file(app_ctx.session, path)
        except OSError as e:
            raise PersistenceError(str(path), str(e)) from e
    store = app_ctx.session.store
    typer.echo(f"imported {len(store.all_lessons())} lessons, {len(store.all_specific_lessons())} entries")
    if removed:
        typer.echo(f"dropped {removed} entries without a lesson")


@render_app.command("csv")
def cli_render_csv(ctx: typer.Context) -> None:
    app_ctx = _ctx(ctx)
    session = app_ctx.session
    out = write_csv_week(csv_week(session.store, session.time_scheme), app_ctx.outputs_dir)
    typer.echo(f"wrote {out}")


@render_app.command("html")
def cli_render_html(ctx: typer.Context) -> None:
    app_ctx = _ctx(ctx)
    out = write_html_ui(app_ctx.session.store, app_ctx.session.time_scheme, app_ctx.outputs_dir)
    typer.echo(f"wrote {out}")


@app.command("check")
def cli_check(ctx: typer.Context) -> None:
    app_ctx = _ctx(ctx)
    report = check_store(app_ctx.session.store, app_ctx.session.time_scheme)
    write_check_report(report, app_ctx.outputs_dir)
    typer.echo(format_check_report(report))
    if not report_is_clean(report):
        raise typer.Exit(1)


def run() -> None:
    app()
