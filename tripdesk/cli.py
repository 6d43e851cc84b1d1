#!/usr/bin/env python3
"""
tripdesk CLI - command-line front end for the travel calendar engine

Usage:
    tripdesk calendar [--date D] [--view month]   - Show a calendar window
    tripdesk alerts [--now DT]                    - Show current advisories
    tripdesk dashboard [--now DT]                 - Show the dashboard summary
    tripdesk watch [--interval S] [--cycles N]    - Re-evaluate alerts on a timer
    tripdesk version                              - Show version

Options:
    --json                           - Output in JSON format for scripting
    --config PATH                    - YAML config file (default: ./tripdesk.yaml)
    --log-level LEVEL                - Override the configured log level
"""

from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
import json

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import __version__
from .config import TripDeskConfig, load_config, setup_logging
from .core.dashboard import CalendarStats, build_calendar, build_dashboard
from .core.poller import AlertPoller
from .core.state import DisplayState
from .engine.aggregator import EventFilter, hour_slots, preview
from .engine.alerts import AlertEngine
from .engine.normalizer import normalize
from .errors import TripDeskError
from .integrations.sources import SnapshotFileSource
from .models import Alert, CalendarEvent, Granularity, Severity, SourceKind


console = Console()

SEVERITY_COLORS = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
}

KIND_COLORS = {
    SourceKind.ITINERARY: "cyan",
    SourceKind.APPOINTMENT: "green",
    SourceKind.TASK: "magenta",
}

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

KIND_CHOICES = {
    "all": None,
    "itinerary": SourceKind.ITINERARY,
    "appointments": SourceKind.APPOINTMENT,
    "tasks": SourceKind.TASK,
}

NOW_FORMATS = ["%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M:%S"]


# =============================================================================
# HELPERS
# =============================================================================

def output_json(data: Any) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=2, default=str))


def get_config(ctx: click.Context) -> TripDeskConfig:
    return ctx.obj["config"]


def open_source(ctx: click.Context, snapshot: Optional[Path]) -> SnapshotFileSource:
    """Resolve the snapshot file from the option or the config."""
    path = snapshot or get_config(ctx).snapshot_path
    if path is None:
        raise click.UsageError("No snapshot given: pass --snapshot or set sources.snapshot in the config")
    return SnapshotFileSource(path)


def fetch_all(source: SnapshotFileSource) -> Dict[str, List[Any]]:
    try:
        return {
            "itinerary": source.fetch_itinerary(),
            "appointments": source.fetch_appointments(),
            "tasks": source.fetch_tasks(),
        }
    except TripDeskError as e:
        raise click.ClickException(str(e)) from e


def format_event(event: CalendarEvent) -> Text:
    text = Text()
    if event.time_of_day:
        text.append(f"{event.time_of_day} ", style="dim")
    text.append(event.title or "(untitled)", style=KIND_COLORS.get(event.source_kind, "white"))
    if event.is_multi_day:
        nights = event.nights
        unit = "night" if nights == 1 else "nights"
        text.append(f" ({event.date:%b %d}-{event.end_date:%b %d}, {nights} {unit})", style="dim")
    return text


def format_cell(day: date, events: List[CalendarEvent], limit: int, dim: bool = False) -> Text:
    """Day number plus the first ``limit`` events and a "+K more" line."""
    cell = Text(str(day.day), style="dim" if dim else "bold")
    shown, hidden = preview(events, limit)
    for event in shown:
        cell.append("\n")
        cell.append_text(format_event(event))
    if hidden:
        cell.append(f"\n+{hidden} more", style="italic")
    return cell


def format_day_slots(events: List[CalendarEvent]) -> Text:
    """Hour rows of a day view; empty hours are skipped."""
    lines = Text()
    for hour, slot in hour_slots(events).items():
        if not slot:
            continue
        if lines:
            lines.append("\n")
        lines.append(f"{hour:02d}:00", style="bold")
        for event in slot:
            lines.append("\n  ")
            lines.append_text(format_event(event))
    return lines


def format_stats(stats: CalendarStats) -> Text:
    text = Text()
    for label, count in [
        ("Travel Items", stats.itinerary),
        ("Appointments", stats.appointments),
        ("Tasks", stats.tasks),
        ("Unconfirmed", stats.pending),
    ]:
        if text:
            text.append("   ")
        text.append(f"{label}: ", style="dim")
        text.append(str(count), style="bold")
    return text


def create_alerts_table(alerts: List[Alert]) -> Table:
    """Create an alerts table."""
    table = Table(
        title="Alerts",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Time", style="dim", width=6)
    table.add_column("Severity", width=8)
    table.add_column("Kind", style="cyan", width=22)
    table.add_column("Message", style="white")

    for alert in alerts:
        table.add_row(
            alert.anchor_time,
            Text(alert.severity.value.upper(), style=SEVERITY_COLORS.get(alert.severity, "white")),
            alert.kind.value,
            alert.message,
        )
    return table


def print_alerts(alerts: List[Alert]) -> None:
    if alerts:
        console.print(create_alerts_table(alerts))
    else:
        console.print("[dim]No alerts.[/dim]")


# =============================================================================
# CLI GROUP
# =============================================================================

@click.group()
@click.option('--json', 'json_output', is_flag=True, help='Output in JSON format')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path),
              envvar='TRIPDESK_CONFIG', help='YAML config file')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Override the configured log level')
@click.pass_context
def cli(ctx: click.Context, json_output: bool, config_path: Optional[Path], log_level: Optional[str]) -> None:
    """tripdesk - travel calendar and scheduling alerts."""
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except TripDeskError as e:
        raise click.ClickException(str(e)) from e
    setup_logging(log_level or config.log_level)
    ctx.obj['json'] = json_output
    ctx.obj['config'] = config


# =============================================================================
# CALENDAR COMMAND
# =============================================================================

@cli.command()
@click.option('--date', 'reference', type=click.DateTime(formats=["%Y-%m-%d"]),
              help='Reference date (default: today)')
@click.option('--view', type=click.Choice([g.value for g in Granularity]), default='month',
              show_default=True, help='Calendar granularity')
@click.option('--kind', type=click.Choice(list(KIND_CHOICES)), default='all', show_default=True,
              help='Only show one source collection')
@click.option('--assignee', default=None, help='Only show events assigned to this traveler')
@click.option('--snapshot', type=click.Path(dir_okay=False, path_type=Path), help='JSON snapshot file')
@click.pass_context
def calendar(
    ctx: click.Context,
    reference: Optional[datetime],
    view: str,
    kind: str,
    assignee: Optional[str],
    snapshot: Optional[Path]
) -> None:
    """Show a calendar window."""
    config = get_config(ctx)
    collections = fetch_all(open_source(ctx, snapshot))
    state = DisplayState(
        reference_date=reference.date() if reference else date.today(),
        granularity=Granularity(view),
        event_filter=EventFilter(kind=KIND_CHOICES[kind], assignee=assignee),
    )
    result = build_calendar(
        collections["itinerary"],
        collections["appointments"],
        collections["tasks"],
        state,
        config.calendar.week_start,
    )

    if ctx.obj.get('json'):
        output_json(result.to_dict())
        return

    week_start = config.calendar.week_start
    labels = [WEEKDAY_LABELS[(week_start + i) % 7] for i in range(7)]
    limit = config.calendar.compact_limit

    console.print()
    if state.granularity == Granularity.DAY:
        day = state.reference_date
        events = result.events_for(day)
        console.print(Panel(
            format_day_slots(events) if events else Text("No events.", style="dim"),
            title=f"[bold blue]{day:%A, %B %d, %Y}[/bold blue]",
            border_style="blue",
            box=box.ROUNDED,
        ))
    elif state.granularity == Granularity.YEAR:
        for grid in result.grids:
            table = Table(title=f"{grid.first_day:%B %Y}", box=box.MINIMAL, show_header=True)
            for label in labels:
                table.add_column(label[:2], justify="right")
            for week in grid.weeks:
                cells = []
                for day in week:
                    if not grid.in_month(day):
                        cells.append("")
                        continue
                    style = "bold cyan" if result.events_for(day) else ""
                    cells.append(Text(str(day.day), style=style))
                table.add_row(*cells)
            console.print(table)
    else:
        title = (
            f"{state.reference_date:%B %Y}" if state.granularity == Granularity.MONTH
            else f"{result.days[0]:%b %d} - {result.days[-1]:%b %d, %Y}"
        )
        table = Table(title=title, box=box.SQUARE, show_header=True, header_style="bold magenta")
        for label in labels:
            table.add_column(label, vertical="top", ratio=1)
        cell_limit = limit if state.granularity == Granularity.MONTH else len(result.days)
        for i in range(0, len(result.days), 7):
            week = result.days[i:i + 7]
            table.add_row(*[
                format_cell(day, result.events_for(day), cell_limit, dim=not result.in_focus(day))
                for day in week
            ])
        console.print(table)
    console.print(format_stats(result.stats))
    console.print()


# =============================================================================
# ALERTS COMMAND
# =============================================================================

@cli.command()
@click.option('--now', 'now', type=click.DateTime(formats=NOW_FORMATS), help='Evaluation time (default: now)')
@click.option('--snapshot', type=click.Path(dir_okay=False, path_type=Path), help='JSON snapshot file')
@click.pass_context
def alerts(ctx: click.Context, now: Optional[datetime], snapshot: Optional[Path]) -> None:
    """Show current advisories."""
    config = get_config(ctx)
    collections = fetch_all(open_source(ctx, snapshot))
    now = now or datetime.now()
    events = normalize(collections["itinerary"], collections["appointments"], collections["tasks"])
    result = AlertEngine(config.alerts).evaluate(events, now)

    if ctx.obj.get('json'):
        output_json({"now": now.isoformat(), "alerts": [a.to_dict() for a in result]})
        return

    console.print()
    print_alerts(result)
    console.print()


# =============================================================================
# DASHBOARD COMMAND
# =============================================================================

@cli.command()
@click.option('--now', 'now', type=click.DateTime(formats=NOW_FORMATS), help='Evaluation time (default: now)')
@click.option('--snapshot', type=click.Path(dir_okay=False, path_type=Path), help='JSON snapshot file')
@click.pass_context
def dashboard(ctx: click.Context, now: Optional[datetime], snapshot: Optional[Path]) -> None:
    """Show the dashboard summary."""
    config = get_config(ctx)
    collections = fetch_all(open_source(ctx, snapshot))
    now = now or datetime.now()
    summary = build_dashboard(
        collections["itinerary"],
        collections["appointments"],
        collections["tasks"],
        now,
        alert_config=config.alerts,
        upcoming_days=config.dashboard.upcoming_days,
        upcoming_limit=config.dashboard.upcoming_limit,
    )

    if ctx.obj.get('json'):
        output_json(summary.to_dict())
        return

    console.print()
    console.print(Panel(
        f"[bold]Date:[/bold] {now:%A, %B %d, %Y %H:%M}\n"
        f"[bold]Today's Tasks:[/bold] {len(summary.todays_tasks)}\n"
        f"[bold]Today's Meetings:[/bold] {len(summary.todays_appointments)}\n"
        f"[bold]Today's Travel:[/bold] {len(summary.todays_itinerary)}",
        title="[bold magenta]Travel Dashboard[/bold magenta]",
        border_style="magenta",
        box=box.ROUNDED,
    ))

    console.print("\n[bold cyan]Upcoming Travel:[/bold cyan]")
    if summary.upcoming_itinerary:
        for event in summary.upcoming_itinerary:
            console.print(f"  {event.date:%b %d} ", format_event(event))
    else:
        console.print("  [dim]Nothing in the next few days.[/dim]")

    console.print("\n[bold cyan]Flights:[/bold cyan]")
    if summary.countdowns:
        for countdown in summary.countdowns:
            style = {"imminent": "bold red", "departed": "dim"}.get(countdown.status, "white")
            console.print(
                f"  {countdown.departure:%b %d %H:%M}  {countdown.event.title}  ",
                Text(countdown.countdown, style=style),
            )
    else:
        console.print("  [dim]No upcoming flights.[/dim]")

    console.print()
    print_alerts(summary.alerts)
    console.print()


# =============================================================================
# WATCH COMMAND
# =============================================================================

@cli.command()
@click.option('--interval', type=click.FloatRange(min=0), default=None,
              help='Seconds between evaluations (default: alerts.poll_interval_seconds)')
@click.option('--cycles', type=click.IntRange(min=1), default=None, help='Stop after N cycles')
@click.option('--snapshot', type=click.Path(dir_okay=False, path_type=Path), help='JSON snapshot file')
@click.pass_context
def watch(ctx: click.Context, interval: Optional[float], cycles: Optional[int], snapshot: Optional[Path]) -> None:
    """Re-evaluate alerts on a timer until interrupted."""
    config = get_config(ctx)
    json_output = ctx.obj.get('json', False)

    def report(now: datetime, current: List[Alert]) -> None:
        if json_output:
            click.echo(json.dumps({"now": now.isoformat(), "alerts": [a.to_dict() for a in current]}, default=str))
            return
        console.print(f"[dim]{now:%Y-%m-%d %H:%M:%S}[/dim]")
        print_alerts(current)

    poller = AlertPoller(
        open_source(ctx, snapshot),
        on_alerts=report,
        engine=AlertEngine(config.alerts),
        interval=interval,
    )
    try:
        poller.run(max_cycles=cycles)
    except KeyboardInterrupt:
        poller.stop()
        if not json_output:
            console.print("\n[dim]Stopped.[/dim]")


# =============================================================================
# VERSION COMMAND
# =============================================================================

@cli.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show tripdesk version."""
    version_info = {
        "name": "tripdesk",
        "version": __version__,
        "description": "Travel calendar and scheduling alerts",
    }

    if ctx.obj.get('json'):
        output_json(version_info)
        return

    console.print(Panel(
        f"[bold]Name:[/bold] {version_info['name']}\n"
        f"[bold]Version:[/bold] {version_info['version']}\n"
        f"[bold]Description:[/bold] {version_info['description']}",
        title="[bold blue]tripdesk[/bold blue]",
        border_style="blue",
        box=box.DOUBLE,
    ))


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def main():
    """Main entry point for tripdesk CLI."""
    cli(obj={})


if __name__ == '__main__':
    main()
