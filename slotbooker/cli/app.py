"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..adapters.google_calendar_client import GoogleCalendarClient
from ..adapters.mock_calendar_client import MockCalendarClient
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import BookingValidationError, SlotBookerError
from ..domain.models import BookingRequest, TimeRange
from ..services.availability import AvailabilityService
from ..services.booking import BookingService
from ..services.cancellation import CancellationService
from ..services.gateway import CalendarGateway

app = typer.Typer(
    name="slotbooker",
    help="Find and book free meeting slots in a Google Calendar",
    add_completion=False
)

console = Console()


ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]
MockOption = Annotated[
    bool,
    typer.Option("--mock", help="Use an in-memory calendar and skip authentication.")
]
MockDataOption = Annotated[
    Optional[Path],
    typer.Option("--mock-data", help="JSON file with events to seed the mock calendar.")
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Find and book free meeting slots in a Google Calendar."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(1)


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _build_gateway(config: AppConfig, mock: bool, mock_data: Optional[Path] = None) -> CalendarGateway:
    """Create the mock client or an authenticated Google Calendar client."""
    schedule = config.schedule

    if mock:
        console.print("[yellow]⚠  MOCK MODE: using an in-memory calendar[/yellow]\n")
        return MockCalendarClient(timezone=schedule.timezone, data_file=mock_data)

    credentials = config.resolve_credentials()
    return GoogleCalendarClient.from_service_account(
        client_email=credentials.client_email,
        private_key=credentials.private_key,
        calendar_id=schedule.calendar_id,
        timezone=schedule.timezone,
        timeout_seconds=config.request_timeout_seconds,
        delegated_user=credentials.delegated_user
    )


def _parse_booking_request(
    *,
    tz: str,
    name: str,
    email: str,
    start: str,
    end: str,
    company: Optional[str],
    phone: Optional[str],
    message: Optional[str]
) -> BookingRequest:
    """
    Turn raw CLI input into a booking request.

    Raises:
        BookingValidationError: If a timestamp or field is invalid
    """
    try:
        start_dt = pendulum.parse(start, tz=tz)
        end_dt = pendulum.parse(end, tz=tz)
    except ValueError as exc:
        raise BookingValidationError(f"Could not parse start/end time: {exc}") from exc

    if not isinstance(start_dt, pendulum.DateTime) or not isinstance(end_dt, pendulum.DateTime):
        raise BookingValidationError("Start and end must be date-times, e.g. 2024-11-25T10:00")

    try:
        return BookingRequest(
            name=name,
            email=email,
            time_range=TimeRange(start=start_dt, end=end_dt),
            company=company,
            phone=phone,
            message=message
        )
    except ValueError as exc:
        raise BookingValidationError(str(exc)) from exc


@app.command()
def dates(
    config_file: ConfigOption = None,
):
    """
    List the dates that can be booked.

    Only the schedule is consulted, so no calendar access is needed.
    """
    try:
        config = _load_config(config_file)
        schedule = config.schedule

        today = pendulum.today(schedule.timezone).date()
        available_dates = schedule.slot_calculator().available_dates(today)
    except (FileNotFoundError, ValueError, SlotBookerError) as e:
        _fail(str(e))

    console.print(f"[bold cyan]🗓️  Bookable dates (next {config.schedule.booking_window_days} days)[/bold cyan]\n")
    for day in available_dates:
        console.print(f"  {day.format('dddd', locale='en')}, {day.to_date_string()}")
    console.print()


@app.command()
def slots(
    day: Annotated[str, typer.Argument(help="Date to inspect (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    mock_data: MockDataOption = None,
    free_only: Annotated[bool, typer.Option("--free-only", help="Hide slots that cannot be booked.")] = False,
):
    """
    Show the slots of a day and whether they can be booked.

    Examples:

        slotbooker slots 2024-11-25
        slotbooker slots 2024-11-25 --mock --mock-data events.json
    """
    try:
        config = _load_config(config_file)
        tz = config.schedule.timezone

        try:
            requested = pendulum.from_format(day, "YYYY-MM-DD", tz=tz)
        except ValueError as e:
            raise BookingValidationError(f"Could not parse date {day!r}: {e}") from e

        gateway = _build_gateway(config, mock, mock_data)
        service = AvailabilityService(gateway, config.schedule)

        day_slots = service.get_available_slots(requested)
    except (FileNotFoundError, ValueError, SlotBookerError) as e:
        _fail(str(e))

    if free_only:
        day_slots = [slot for slot in day_slots if slot.available]

    if not day_slots:
        console.print(f"[yellow]⚠ No slots on {requested.to_date_string()}.[/yellow]\n")
        return

    table = Table(
        title=f"Slots on {requested.format('dddd', locale='en')}, {requested.to_date_string()}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Start", style="bold")
    table.add_column("End")
    table.add_column("Status")
    table.add_column("Slot ID", style="dim")

    for slot in day_slots:
        status = "[green]free[/green]" if slot.available else "[red]unavailable[/red]"
        table.add_row(slot.start.format("HH:mm"), slot.end.format("HH:mm"), status, slot.id)

    console.print()
    console.print(table)
    console.print()


@app.command()
def book(
    name: Annotated[str, typer.Option("--name", help="Name of the person booking")],
    email: Annotated[str, typer.Option("--email", help="Email address that receives the invite")],
    start: Annotated[str, typer.Option("--start", help="Start time (ISO 8601, local timezone if no offset)")],
    end: Annotated[str, typer.Option("--end", help="End time (ISO 8601, local timezone if no offset)")],
    company: Annotated[Optional[str], typer.Option("--company", help="Company name")] = None,
    phone: Annotated[Optional[str], typer.Option("--phone", help="Phone number")] = None,
    message: Annotated[Optional[str], typer.Option("--message", help="Message for the host")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    mock_data: MockDataOption = None,
):
    """
    Book a slot and send the invite to the attendee.
    """
    try:
        config = _load_config(config_file)
        request = _parse_booking_request(
            tz=config.schedule.timezone,
            name=name,
            email=email,
            start=start,
            end=end,
            company=company,
            phone=phone,
            message=message
        )

        gateway = _build_gateway(config, mock, mock_data)
        service = BookingService(gateway, config.schedule, config.booking)

        result = service.create_booking(request)
    except (FileNotFoundError, ValueError, SlotBookerError) as e:
        _fail(str(e))

    if not result.success:
        _fail(result.error or "Booking failed.")

    console.print(Panel.fit(
        f"[bold green]✓ Booking confirmed![/bold green]\n\n"
        f"[bold]Time:[/bold] {request.time_range}\n"
        f"[bold]Event ID:[/bold] {result.event_id or 'N/A'}\n"
        f"[bold]Link:[/bold] {result.html_link or 'N/A'}",
        title="✓ Booked"
    ))
    console.print()


@app.command()
def cancel(
    event_id: Annotated[str, typer.Argument(help="ID of the event to cancel")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    mock_data: MockDataOption = None,
):
    """
    Cancel a booking and notify its attendees.
    """
    try:
        config = _load_config(config_file)
        gateway = _build_gateway(config, mock, mock_data)
    except (FileNotFoundError, ValueError, SlotBookerError) as e:
        _fail(str(e))

    if not CancellationService(gateway).cancel_booking(event_id):
        _fail(f"Could not cancel booking {event_id}.")

    console.print(f"\n[green]✓ Booking {event_id} cancelled.[/green]\n")


@app.command()
def test_auth(
    config_file: ConfigOption = None,
):
    """
    Test Google Calendar authentication.
    """
    try:
        config = _load_config(config_file)

        console.print("\n[bold]Testing Google Calendar authentication...[/bold]\n")

        gateway = _build_gateway(config, mock=False)
        calendar = gateway.test_connection()
    except (FileNotFoundError, ValueError, SlotBookerError) as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {escape(str(e))}\n")
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold green]✓ Authentication successful![/bold green]\n\n"
        f"[bold]Calendar:[/bold] {calendar.get('summary', 'N/A')}\n"
        f"[bold]Timezone:[/bold] {calendar.get('timeZone', 'N/A')}",
        title="✓ Connection test"
    ))
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotbooker[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
