"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.json_slot_repository import JsonSlotRepository
from ..adapters.records import parse_datetime, parse_time_of_day
from ..adapters.shelter_api_client import ShelterApiClient
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import ScheduleError
from ..domain.models import AnimalWeeklySchedule, activity_slot
from ..domain.slot_normalizer import SlotNormalizer
from ..domain.time_range_calculator import TimeRangeCalculator
from ..serialization import weekly_schedule_to_dict
from ..services.weekly_schedule import SlotRepositoryProtocol, WeeklyScheduleService

app = typer.Typer(
    name="shelterschedule",
    help="Weekly availability schedules for shelter animals",
    add_completion=False
)

console = Console()


def _configure_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> tuple[AppConfig, Path]:
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)
    _configure_logging(config.get_log_level())
    return config, config_path


def _determine_start_date(
    *,
    tz: str,
    this_week: bool,
    next_week: bool,
    start_option: Optional[str],
):
    """
    Resolve the Monday the requested week starts on.
    """
    if this_week and next_week:
        raise typer.BadParameter("--this-week and --next-week cannot be used together.")

    now = pendulum.now(tz)

    if this_week:
        return now.start_of("week").date()

    if next_week:
        return now.next(pendulum.MONDAY).date()

    if start_option:
        try:
            return pendulum.from_format(start_option, "YYYY-MM-DD", tz=tz).date()
        except ValueError as e:
            raise typer.BadParameter(f"Could not parse start date: {e}") from e

    return now.start_of("week").date()


def _build_repository(config: AppConfig, config_path: Path, use_api: bool) -> SlotRepositoryProtocol:
    if use_api:
        return ShelterApiClient(
            base_url=config.api.base_url,
            token=config.api.token,
            timeout_seconds=config.api.timeout_seconds,
            timezone=config.timezone,
        )

    data_file = config.resolve_data_file(config_path)
    if data_file is None:
        raise ValueError("No data_file configured. Set data_file in config.yaml or use --api.")
    return JsonSlotRepository.from_file(data_file, timezone=config.timezone)


def _render_schedule(schedule: AnimalWeeklySchedule) -> None:
    shelter = schedule.shelter
    hours = f"{shelter.opening_time.strftime('%H:%M')} - {shelter.closing_time.strftime('%H:%M')}" if shelter else "-"

    console.print(Panel.fit(
        f"[bold]Animal:[/bold] {schedule.animal.name} ({schedule.animal.id})\n"
        f"[bold]Shelter:[/bold] {shelter.name if shelter else '-'}  [dim]{hours}[/dim]\n"
        f"[bold]Week:[/bold] {schedule.start_date.isoformat()} - {schedule.end_date.isoformat()}",
        title="Weekly schedule"
    ))

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold yellow")
    table.add_column("Available", style="green")
    table.add_column("Reserved", style="magenta")
    table.add_column("Unavailable", style="red")

    for daily in schedule.week_schedule:
        table.add_row(
            daily.date.strftime("%a %d.%m.%Y"),
            "[dim]fully booked[/dim]" if daily.is_fully_booked else "\n".join(
                f"{b.start.strftime('%H:%M')}-{b.end.strftime('%H:%M')}" for b in daily.available_slots
            ),
            "\n".join(
                f"{s.start.format('HH:mm')}-{s.end.format('HH:mm')} {s.reserved_by or ''}".rstrip()
                for s in daily.reserved_slots
            ) or "-",
            "\n".join(
                f"{s.start.format('HH:mm')}-{s.end.format('HH:mm')} {s.reason or ''}".rstrip()
                for s in daily.unavailable_slots
            ) or "-",
        )

    console.print(table)


@app.command()
def week(
    animal_id: Annotated[str, typer.Argument(help="Id of the animal")],
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Monday the week starts on (YYYY-MM-DD)")] = None,
    this_week: Annotated[bool, typer.Option("--this-week", help="Show the current week.")] = False,
    next_week: Annotated[bool, typer.Option("--next-week", help="Show next week.")] = False,
    use_api: Annotated[bool, typer.Option("--api", help="Load slots from the shelter API instead of the data file.")] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the schedule as JSON.")] = False,
):
    """
    Show the weekly availability schedule of an animal.

    Examples:

        shelterschedule week 3f1c... --next-week
        shelterschedule week 3f1c... --start 2025-01-06 --json
        shelterschedule week 3f1c... --api
    """
    try:
        config, config_path = _load_config(config_file)

        start_date = _determine_start_date(
            tz=config.timezone,
            this_week=this_week,
            next_week=next_week,
            start_option=start,
        )

        service = WeeklyScheduleService(
            _build_repository(config, config_path, use_api),
            settings=config.scheduling,
            timezone=config.timezone,
        )

        schedule = asyncio.run(service.get_animal_weekly_schedule(animal_id, start_date))

        if as_json:
            console.print_json(json.dumps(weekly_schedule_to_dict(schedule)))
        else:
            _render_schedule(schedule)

    except (ScheduleError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def free(
    opening: Annotated[str, typer.Option("--opening", help="Opening time (HH:MM)")] = "09:00",
    closing: Annotated[str, typer.Option("--closing", help="Closing time (HH:MM)")] = "17:00",
    start: Annotated[Optional[str], typer.Option("--start", help="First day (YYYY-MM-DD). Defaults to this Monday.")] = None,
    busy: Annotated[Optional[List[str]], typer.Option("--busy", "-b", help="Busy interval START/END as ISO timestamps. Repeatable.")] = None,
    timezone: Annotated[str, typer.Option("--tz", help="Timezone for naive timestamps")] = "UTC",
):
    """
    Compute free blocks for a week from ad-hoc busy intervals.

    Example:

        shelterschedule free --opening 08:00 --closing 18:00 --start 2025-01-06 \\
            -b 2025-01-06T09:00/2025-01-06T11:00 -b 2025-01-06T10:00/2025-01-06T12:00
    """
    try:
        opening_time = parse_time_of_day(opening)
        closing_time = parse_time_of_day(closing)
        if opening_time >= closing_time:
            raise ValueError("Opening time must be before closing time.")

        start_date = _determine_start_date(tz=timezone, this_week=False, next_week=False, start_option=start)

        slots = []
        for index, interval in enumerate(busy or []):
            begin, sep, end = interval.partition("/")
            if not sep:
                raise ValueError(f"Busy interval must look like START/END, got '{interval}'")
            slots.append(
                activity_slot(
                    parse_datetime(begin, timezone),
                    parse_datetime(end, timezone),
                    activity_id=f"busy-{index + 1}",
                )
            )

        normalized = SlotNormalizer().normalize(slots, opening_time, closing_time)
        blocks = TimeRangeCalculator().calculate_weekly_available_ranges(
            normalized.slots, opening_time, closing_time, start_date
        )

    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not blocks:
        console.print("[yellow]No free time in this week.[/yellow]")
        return

    total_minutes = sum(block.duration_minutes() for block in blocks)
    console.print(f"[bold green]{len(blocks)} free block(s)[/bold green] ({total_minutes} min in total):")
    for block in blocks:
        console.print(f"  {block}")


@app.command()
def test_api(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    )
):
    """
    Test the connection to the shelter backend API.
    """
    try:
        config, _ = _load_config(config_file)

        client = ShelterApiClient(
            base_url=config.api.base_url,
            token=config.api.token,
            timeout_seconds=config.api.timeout_seconds,
        )
        status = client.test_connection()
        health = status.get("status", "N/A") if isinstance(status, dict) else status

        console.print(Panel.fit(
            f"[bold green]Connected to {config.api.base_url}[/bold green]\n\n"
            f"[bold]Status:[/bold] {health}",
            title="Connection test"
        ))

    except (ScheduleError, FileNotFoundError, ValueError) as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}\n")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]shelterschedule[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
