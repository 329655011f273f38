"""Command line interface for WinterArc."""

from __future__ import annotations

from datetime import date, datetime

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .logging_config import setup_logging
from .services.calendar import FixedClock, Period, month_start, weekday_headers


def _context(ctx: click.Context) -> AppContext:
    """Build the app context once per invocation and backfill history."""

    app_ctx = ctx.obj.get("app")
    if app_ctx is None:
        config = BaseConfig()
        setup_logging(config)
        today = ctx.obj.get("today")
        clock = FixedClock(today) if today else None
        app_ctx = create_app_context(config, clock=clock)
        ctx.obj["synced"] = app_ctx.tracker.sync()
        ctx.obj["app"] = app_ctx
    return app_ctx


def _parse_day(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}") from exc


def _parse_month(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError as exc:
        raise click.BadParameter(f"expected YYYY-MM, got {value!r}") from exc


def _percent(value: float) -> str:
    return f"{int(value * 100)}%"


@click.group()
@click.option("--today", "today", default=None, help="Treat this YYYY-MM-DD as today.")
@click.pass_context
def cli(ctx: click.Context, today: str | None) -> None:
    """Track daily habits and inspect streaks."""

    ctx.ensure_object(dict)
    ctx.obj["today"] = _parse_day(today)


@cli.group()
def habits() -> None:
    """Manage tracked habits."""


@habits.command("add")
@click.argument("name")
@click.pass_context
def habits_add(ctx: click.Context, name: str) -> None:
    """Start tracking a habit from today."""

    tracker = _context(ctx).tracker
    try:
        habit = tracker.add_habit(name)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    tracker.open_day()
    click.echo(f"Added {habit.name} ({habit.id})")


@habits.command("list")
@click.pass_context
def habits_list(ctx: click.Context) -> None:
    """List habits with their creation day."""

    app_ctx = _context(ctx)
    rows = app_ctx.habit_repo.list_habits()
    if not rows:
        click.echo("No habits being tracked currently.")
        return
    for habit in rows:
        click.echo(f"{habit.id}  {habit.creation_day.isoformat()}  {habit.name}")


@habits.command("delete")
@click.argument("habit_id")
@click.pass_context
def habits_delete(ctx: click.Context, habit_id: str) -> None:
    """Delete a habit and its status from every day."""

    try:
        _context(ctx).tracker.delete_habit(habit_id)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Deleted {habit_id}")


@cli.command()
@click.pass_context
def sync(ctx: click.Context) -> None:
    """Backfill missing days up to today."""

    _context(ctx)
    added = ctx.obj["synced"]
    click.echo(f"History complete ({added} entries added)")


@cli.command()
@click.option("--day", default=None, help="Show this YYYY-MM-DD instead of today.")
@click.pass_context
def today(ctx: click.Context, day: str | None) -> None:
    """Show the checklist for a day."""

    sheet = _context(ctx).tracker.open_day(_parse_day(day))
    if sheet is None:
        click.echo("No habits being tracked currently.")
        return
    click.echo(f"{sheet.entry.entry_date.strftime('%B %d, %Y')}  {sheet.completed}/{sheet.total}")
    for row in sheet.rows:
        mark = "x" if row.completed else " "
        click.echo(f"[{mark}] {row.name}  ({row.habit_id})")
    if sheet.all_done:
        click.echo("All habits done today!")


@cli.command()
@click.argument("habit_id")
@click.option("--day", default=None, help="Toggle on this YYYY-MM-DD instead of today.")
@click.pass_context
def toggle(ctx: click.Context, habit_id: str, day: str | None) -> None:
    """Flip a habit between done and not done."""

    try:
        sheet = _context(ctx).tracker.toggle(habit_id, _parse_day(day))
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    row = next(r for r in sheet.rows if r.habit_id == habit_id)
    click.echo(f"{row.name}: {'done' if row.completed else 'not done'}")


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Streaks and completion for every habit."""

    tracker = _context(ctx).tracker
    summaries = tracker.summaries()
    if not summaries:
        click.echo("No habits being tracked currently.")
        return
    for summary in summaries:
        current = summary.current_streak.count
        best = summary.best_streak
        line = (
            f"{summary.name}: streak {current} {'day' if current == 1 else 'days'}, "
            f"best {best.count}, completion {summary.completion_percent}%"
        )
        if best.count:
            line += f" (best {best.start.strftime('%b %d')} - {best.end.strftime('%b %d')})"
        click.echo(line)
    click.echo(f"Overall: {_percent(tracker.overall_completion())}")


@cli.command()
@click.argument("habit_id")
@click.option(
    "--period",
    type=click.Choice([p.value for p in Period]),
    default=Period.WEEK.value,
    show_default=True,
)
@click.option("--offset", type=int, default=0, show_default=True, help="Periods back from the current one.")
@click.pass_context
def series(ctx: click.Context, habit_id: str, period: str, offset: int) -> None:
    """Print a habit's day-by-day completion for a period."""

    try:
        view = _context(ctx).tracker.period(habit_id, period, offset)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{view.label}  completion {_percent(view.completion)}")
    click.echo("".join("#" if p.completed else ("." if p.tracked else " ") for p in view.points))
    click.echo("".join(label[:1] if label.strip() else " " for label in view.axis_labels))


@cli.command()
@click.option("--month", "month", default=None, help="Month to show as YYYY-MM.")
@click.pass_context
def calendar(ctx: click.Context, month: str | None) -> None:
    """Show a month grid with each day's completion percentage."""

    app_ctx = _context(ctx)
    target = _parse_month(month) if month else month_start(app_ctx.tracker.today())
    cells = app_ctx.tracker.calendar_month(target)
    click.echo(target.strftime("%B %Y"))
    click.echo(" ".join(f"{h:>7}" for h in weekday_headers(app_ctx.calendar_config)))
    for row_start in range(0, len(cells), 7):
        parts = []
        for cell in cells[row_start:row_start + 7]:
            if cell is None:
                parts.append(" " * 7)
            elif cell.progress is None:
                parts.append(f"{cell.day.day:>2}     ")
            else:
                parts.append(f"{cell.day.day:>2} {int(cell.progress * 100):>3}%")
        click.echo(" ".join(parts))


@cli.group()
def entries() -> None:
    """Manage daily entries."""


@entries.command("list")
@click.pass_context
def entries_list(ctx: click.Context) -> None:
    """List every daily entry with its score."""

    rows = _context(ctx).tracker.list_entries()
    if not rows:
        click.echo("No entries yet.")
        return
    for row in rows:
        line = f"{row.entry.entry_date.isoformat()}  {row.entry.id}  Score: {row.completed}/{row.active}"
        if row.complete:
            line += "  all done"
        click.echo(line)


@entries.command("delete")
@click.argument("entry_id")
@click.pass_context
def entries_delete(ctx: click.Context, entry_id: str) -> None:
    """Delete one daily entry."""

    _context(ctx).tracker.delete_entry(entry_id)
    click.echo(f"Deleted entry {entry_id}")


def main() -> None:  # pragma: no cover - console entry point
    cli(obj={})
