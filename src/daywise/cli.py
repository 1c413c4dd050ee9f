"""Command-line interface for Daywise."""

from __future__ import annotations

import json
from datetime import date, timedelta
from pathlib import Path
from typing import Annotated, Any

import typer

from .cache import SchedulerMetrics
from .clock import FixedClock, SystemClock
from .config import DaywiseConfig, discover_config
from .exceptions import ValidationError
from .logger import get_logger, setup_logger
from .models import Preferences
from .scheduler import Interval, find_free_windows, parse_reference
from .scheduler.protocols import Clock
from .scheduler.timeutils import at_clock, parse_clock, parse_iso_datetime
from .service import SchedulingService

logger = get_logger()

app = typer.Typer(
    name="daywise",
    help="Place tasks into working hours around existing calendar events",
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help=(
                "Verbosity level: 0=warnings only (default), 1=placements, "
                "2=per-day checks, 3=debug"
            ),
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: daywise_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for daywise commands."""
    setup_logger(verbose)
    ctx.obj = {"config_path": config}


def _load_config(ctx: typer.Context) -> DaywiseConfig:
    config_path = ctx.obj.get("config_path") if ctx.obj else None
    try:
        return discover_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        typer.echo(f"Error: File not found: {path}", err=True)
        raise typer.Exit(1) from None
    except json.JSONDecodeError as e:
        typer.echo(f"Error: Invalid JSON in {path}: {e}", err=True)
        raise typer.Exit(1) from None


def _emit(text: str, output_path: Path | None, label: str) -> None:
    if output_path:
        output_path.write_text(text + "\n", encoding="utf-8")
        typer.echo(f"{label} written to {output_path}")
    else:
        typer.echo(text)


@app.command()
def schedule(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Path to the JSON schedule request")],
    *,
    reference_date: Annotated[
        str | None,
        typer.Option(
            "--reference-date",
            "-r",
            help="ISO date/datetime used as 'now' when the request has no startDate",
        ),
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
    pretty: Annotated[
        bool, typer.Option("--pretty/--compact", help="Indent the JSON output")
    ] = True,
) -> None:
    """Schedule the tasks of a JSON request and print the JSON response."""
    config = _load_config(ctx)
    payload = _read_json(file)
    if not isinstance(payload, dict):
        typer.echo("Error: Request must be a JSON object", err=True)
        raise typer.Exit(1)

    clock: Clock = SystemClock()
    if reference_date:
        try:
            clock = FixedClock(parse_reference(reference_date))
        except ValidationError as e:
            typer.echo(f"Error: {e.message}. Use an ISO date or datetime.", err=True)
            raise typer.Exit(1) from None

    metrics = SchedulerMetrics()
    service = SchedulingService(
        config.scheduler,
        clock,
        metrics=metrics,
        default_preferences=config.preferences,
    )

    try:
        body = service.handle(payload)
    except ValidationError as e:
        typer.echo(json.dumps(e.to_payload(), indent=2), err=True)
        raise typer.Exit(1) from None

    _emit(json.dumps(body, indent=2 if pretty else None), output, "Schedule")
    logger.debug(f"metrics: {metrics.snapshot()}")

    unscheduled = body["summary"]["unscheduledTasks"]
    if unscheduled:
        typer.echo("\nUnscheduled:", err=True)
        for item in unscheduled:
            typer.echo(f"  - {item['title']} ({item['taskId']}): {item['reason']}", err=True)


def _parse_events(path: Path) -> list[Interval]:
    raw = _read_json(path)
    if not isinstance(raw, list):
        typer.echo("Error: Events file must contain a JSON array", err=True)
        raise typer.Exit(1)

    intervals: list[Interval] = []
    for index, event in enumerate(raw):
        try:
            intervals.append(
                Interval(
                    start=parse_iso_datetime(event["startTime"]),
                    end=parse_iso_datetime(event["endTime"]),
                    title=event.get("title", ""),
                )
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            typer.echo(f"Error: Invalid event at index {index}: {e}", err=True)
            raise typer.Exit(1) from None
    return intervals


@app.command(name="free-windows")
def free_windows(  # noqa: PLR0913 - CLI command needs multiple options
    ctx: typer.Context,
    day: Annotated[str, typer.Argument(help="Day to inspect (YYYY-MM-DD)")],
    *,
    events: Annotated[
        Path | None,
        typer.Option("--events", "-e", help="JSON array of events with startTime/endTime"),
    ] = None,
    start: Annotated[
        str | None, typer.Option("--start", help="Working-hours start (HH:MM)")
    ] = None,
    end: Annotated[str | None, typer.Option("--end", help="Working-hours end (HH:MM)")] = None,
    buffer: Annotated[
        int | None, typer.Option("--buffer", "-b", help="Buffer minutes around events", min=0)
    ] = None,
) -> None:
    """List the free windows of one working day."""
    config = _load_config(ctx)
    preferences = config.preferences or Preferences()

    try:
        parsed_day = date.fromisoformat(day)
        day_start = parse_clock(start or preferences.working_hours.start)
        day_end = parse_clock(end or preferences.working_hours.end)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    buffer_minutes = preferences.break_duration if buffer is None else buffer
    intervals = _parse_events(events) if events else []

    windows = find_free_windows(
        at_clock(parsed_day, day_start),
        at_clock(parsed_day, day_end),
        timedelta(minutes=buffer_minutes),
        intervals,
        min_minutes=config.scheduler.min_free_window_minutes,
    )
    typer.echo(json.dumps([window.to_payload() for window in windows], indent=2))


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
