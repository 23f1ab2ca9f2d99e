"""
Main CLI application using Typer.
"""

import asyncio
import logging
import re
from datetime import date, datetime, time
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.catalog import ConfigCatalog
from ..adapters.memory_store import InMemoryBookingStore
from ..config import AppConfig, get_default_config_path
from ..domain.conflict_checker import find_conflicts
from ..domain.exceptions import ConflictError, GroomslotError
from ..domain.models import BookingStatus, CandidateSlot, ExistingBooking
from ..domain.policies import can_reschedule
from ..domain.slot_generator import EmptyReason, explain_empty
from ..services.scheduling import SchedulingService

app = typer.Typer(
    name="groomslot",
    help="Find and book grooming appointments",
    add_completion=False
)

console = Console()

TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")

EMPTY_REASON_MESSAGES = {
    EmptyReason.CLOSED_DAY: "The salon is closed on this day. Next working day: {next_day}.",
    EmptyReason.PAST_DAY: "This day is in the past.",
    EmptyReason.NO_MORE_SLOTS_TODAY: "No more slots today. Next working day: {next_day}.",
    EmptyReason.SERVICE_TOO_LONG: "This service does not fit in the opening hours.",
}

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
NowOption = Annotated[
    Optional[str],
    typer.Option("--now", help="Pretend the current time is this ISO timestamp."),
]


class Context:
    """Everything a command needs, built from the config file."""

    def __init__(self, config_file: Optional[Path]):
        config_path = config_file or get_default_config_path()
        self.config = AppConfig.load_from_yaml(config_path)
        self.calendar = self.config.to_business_calendar()
        self.catalog = ConfigCatalog(self.config.service_specs())

        bookings_file = self.config.bookings_file
        if bookings_file is not None and bookings_file.exists():
            self.store = InMemoryBookingStore.load_from_json(bookings_file, self.config.timezone)
        else:
            self.store = InMemoryBookingStore()

        self.service = SchedulingService(
            self.calendar,
            self.store,
            self.catalog,
            reschedule_notice=self.config.reschedule_notice(),
        )

    def save(self) -> None:
        if self.config.bookings_file is None:
            console.print("[yellow]⚠ No bookings_file configured, changes are not saved.[/yellow]")
            return
        self.store.dump_to_json(self.config.bookings_file)

    def now(self, value: Optional[str]) -> datetime:
        if value is None:
            return pendulum.now(self.config.timezone)
        try:
            return pendulum.parse(value, tz=self.config.timezone)
        except ValueError as e:
            raise typer.BadParameter(f"Invalid --now timestamp '{value}': {e}") from e

    def parse_date(self, value: str) -> date:
        try:
            return pendulum.from_format(value, "YYYY-MM-DD", tz=self.config.timezone).date()
        except ValueError as e:
            raise typer.BadParameter(f"Invalid date '{value}', expected YYYY-MM-DD") from e

    def parse_timestamp(self, value: str) -> datetime:
        try:
            return pendulum.parse(value, tz=self.config.timezone)
        except ValueError as e:
            raise typer.BadParameter(f"Invalid timestamp '{value}': {e}") from e


def _parse_time(value: str) -> time:
    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise typer.BadParameter(f"Invalid time '{value}', expected HH:MM")
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


def _print_slots(slots: List[CandidateSlot], title: str) -> None:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Start", style="bold yellow")
    table.add_column("End")
    for slot in slots:
        table.add_row(slot.label, f"{slot.end:%H:%M}")
    console.print(table)


def _print_booking(booking: ExistingBooking) -> None:
    console.print(
        f"  [bold]{booking.id}[/bold]  {booking.start_time:%d.%m.%Y %H:%M} - "
        f"{booking.end_time:%H:%M}  ({booking.status.value})"
    )


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Appointment availability for the grooming salon.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def slots(
    day: Annotated[str, typer.Argument(help="Day to search (YYYY-MM-DD)")],
    service_id: Annotated[int, typer.Option("--service", "-s", help="Service id")],
    config_file: ConfigOption = None,
    now: NowOption = None,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", help="Maximum number of slots to show")] = None,
):
    """
    List the bookable start times of a service on one day.
    """
    try:
        ctx = Context(config_file)
        target = ctx.parse_date(day)
        current = ctx.now(now)
        max_slots = limit if limit is not None else ctx.config.max_offered_slots

        offered = asyncio.run(ctx.service.offer_slots(target, service_id, current, limit=max_slots))

        if not offered:
            service = asyncio.run(ctx.catalog.get_service(service_id))
            reason = explain_empty(ctx.calendar, target, service, current)
            message = EMPTY_REASON_MESSAGES.get(reason, "All slots on this day are taken.")
            console.print(
                "[yellow]⚠ No available slots.[/yellow] "
                + message.format(next_day=ctx.calendar.next_working_day(target))
            )
            return

        console.print()
        _print_slots(offered, title=f"Available slots on {target:%d.%m.%Y}")
        console.print()

    except (FileNotFoundError, ValueError, GroomslotError) as e:
        _fail(str(e))


@app.command()
def book(
    day: Annotated[str, typer.Argument(help="Day (YYYY-MM-DD)")],
    start: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    service_id: Annotated[int, typer.Option("--service", "-s", help="Service id")],
    client: Annotated[Optional[str], typer.Option("--client", help="Client id")] = None,
    pet: Annotated[Optional[str], typer.Option("--pet", help="Pet id")] = None,
    config_file: ConfigOption = None,
    now: NowOption = None,
):
    """
    Book a service at a given slot.
    """
    try:
        ctx = Context(config_file)
        target = ctx.parse_date(day)
        current = ctx.now(now)

        try:
            booking = asyncio.run(
                ctx.service.book(
                    target, _parse_time(start), service_id, current, client_id=client, pet_id=pet
                )
            )
        except ConflictError:
            console.print("[yellow]⚠ This slot was just taken, please pick another time.[/yellow]")
            offered = asyncio.run(
                ctx.service.offer_slots(
                    target, service_id, current, limit=ctx.config.max_offered_slots
                )
            )
            if offered:
                _print_slots(offered, title=f"Available slots on {target:%d.%m.%Y}")
            raise typer.Exit(1)

        ctx.save()
        console.print("[green]✓ Booking confirmed[/green]")
        _print_booking(booking)

    except (FileNotFoundError, ValueError, GroomslotError) as e:
        _fail(str(e))


@app.command()
def check(
    start: Annotated[str, typer.Argument(help="Interval start (ISO timestamp)")],
    end: Annotated[str, typer.Argument(help="Interval end (ISO timestamp)")],
    config_file: ConfigOption = None,
):
    """
    Check whether an interval is free.
    """
    try:
        ctx = Context(config_file)
        start_dt = ctx.parse_timestamp(start)
        end_dt = ctx.parse_timestamp(end)

        bookings = asyncio.run(ctx.store.fetch_bookings_overlapping(start_dt, end_dt))
        conflicts = find_conflicts(start_dt, end_dt, bookings)

        if not conflicts:
            console.print("[green]✓ Available[/green]")
            return

        console.print(f"[red]✗ Not available, {len(conflicts)} conflicting booking(s):[/red]")
        for booking in conflicts:
            _print_booking(booking)

    except (FileNotFoundError, ValueError, GroomslotError) as e:
        _fail(str(e))


@app.command("can-reschedule")
def can_reschedule_command(
    booking_id: Annotated[str, typer.Argument(help="Booking id")],
    config_file: ConfigOption = None,
    now: NowOption = None,
):
    """
    Tell whether a booking may still be moved.
    """
    try:
        ctx = Context(config_file)
        booking = asyncio.run(ctx.store.get_booking(booking_id))
        allowed = can_reschedule(
            booking,
            ctx.now(now),
            minimum_notice=ctx.config.reschedule_notice(),
            timezone=ctx.calendar.timezone,
        )

        if allowed:
            console.print(f"[green]✓ Booking {booking_id} can be rescheduled[/green]")
        else:
            console.print(
                f"[yellow]✗ Booking {booking_id} can no longer be rescheduled "
                f"(needs {ctx.config.reschedule_notice_hours}h notice)[/yellow]"
            )

    except (FileNotFoundError, ValueError, GroomslotError) as e:
        _fail(str(e))


@app.command()
def reschedule(
    booking_id: Annotated[str, typer.Argument(help="Booking id")],
    day: Annotated[str, typer.Argument(help="New day (YYYY-MM-DD)")],
    start: Annotated[Optional[str], typer.Argument(help="New start time (HH:MM). Omit to list options.")] = None,
    config_file: ConfigOption = None,
    now: NowOption = None,
):
    """
    Move a booking to another slot, or list the slots it could move to.
    """
    try:
        ctx = Context(config_file)
        target = ctx.parse_date(day)
        current = ctx.now(now)

        if start is None:
            options = asyncio.run(ctx.service.reschedule_options(booking_id, target, current))
            if not options:
                console.print("[yellow]⚠ No slots available for this booking on that day.[/yellow]")
                return
            _print_slots(options, title=f"Reschedule options on {target:%d.%m.%Y}")
            return

        moved = asyncio.run(ctx.service.reschedule(booking_id, target, _parse_time(start), current))
        ctx.save()
        console.print("[green]✓ Booking rescheduled[/green]")
        _print_booking(moved)

    except ConflictError:
        _fail("This slot was just taken, please pick another time.")
    except (FileNotFoundError, ValueError, GroomslotError) as e:
        _fail(str(e))


@app.command()
def cancel(
    booking_id: Annotated[str, typer.Argument(help="Booking id")],
    config_file: ConfigOption = None,
):
    """
    Cancel a booking, freeing its slot.
    """
    try:
        ctx = Context(config_file)
        booking = asyncio.run(ctx.store.set_status(booking_id, BookingStatus.CANCELLED))
        ctx.save()
        console.print("[green]✓ Booking cancelled[/green]")
        _print_booking(booking)

    except (FileNotFoundError, ValueError, GroomslotError) as e:
        _fail(str(e))


@app.command()
def services(
    config_file: ConfigOption = None,
):
    """
    List all configured services.
    """
    try:
        ctx = Context(config_file)
        catalog = ctx.catalog.list_services()

        if not catalog:
            console.print("[yellow]No services defined in the config file.[/yellow]")
            return

        table = Table(
            title="Services",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Id", style="bold yellow")
        table.add_column("Name")
        table.add_column("Duration", justify="right")
        table.add_column("Price", justify="right", style="dim")

        for service in catalog:
            table.add_row(
                str(service.id),
                service.name,
                f"{service.duration_minutes} min",
                f"{service.price:.2f}",
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]groomslot[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
