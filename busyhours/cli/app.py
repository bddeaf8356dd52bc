"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional, Annotated, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.holiday_provider import PublicHolidayProvider
from ..adapters.json_store import JsonEmployeeStore
from ..config import AppConfig, get_default_config_path
from ..domain.aggregator import BusyHoursAggregator
from ..domain.cyclic import CyclicNormalizer
from ..domain.exceptions import BusyHoursError
from ..domain.holidays import HolidayCalendar
from ..domain.models import BusyHoursReport, Frequency
from ..domain.workload import WorkloadCalculator
from ..services.busy_hours import BusyHoursQuery, BusyHoursService

app = typer.Typer(
    name="busyhours",
    help="Calculate busy hours of cleaning staff for recurring reservations",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
PeriodOption = Annotated[Optional[str], typer.Option("--period", "-p", help="Queried month (YYYY-MM)")]
FrequencyOption = Annotated[Optional[Frequency], typer.Option("--frequency", "-f", help="Recurrence of the reservation")]
ExcludeFromOption = Annotated[Optional[str], typer.Option("--exclude-from", help="Ignore visit parts overlapping this window (ISO-8601 start)")]
ExcludeToOption = Annotated[Optional[str], typer.Option("--exclude-to", help="Ignore visit parts overlapping this window (ISO-8601 end)")]
JsonOption = Annotated[bool, typer.Option("--json", help="Print the report as JSON.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> Tuple[AppConfig, Path]:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path), config_path


def _build_holiday_calendar(config: AppConfig) -> HolidayCalendar:
    provider = PublicHolidayProvider(excluded_easter_offsets=config.excluded_easter_offsets)
    return HolidayCalendar(provider=provider, locale=config.holiday_locale, timezone=config.timezone)


def _build_service(config: AppConfig, config_path: Path) -> BusyHoursService:
    data_file = config.resolve_data_file(config_path)
    if data_file is None:
        raise BusyHoursError("No data_file configured; add it to the config file.")

    holiday_calendar = _build_holiday_calendar(config)
    aggregator = BusyHoursAggregator(
        calculator=WorkloadCalculator(config.build_policy(), holiday_calendar),
        normalizer=CyclicNormalizer(holiday_calendar, config.timezone),
    )

    return BusyHoursService(
        employee_store=JsonEmployeeStore(data_file, timezone=config.timezone),
        aggregator=aggregator,
        timezone=config.timezone,
        lookahead_years=config.workload.lookahead_years,
    )


def _print_report(report: BusyHoursReport, title: str, as_json: bool) -> None:
    if as_json:
        console.print_json(json.dumps(report.to_dict()))
        return

    table = Table(
        title=title,
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Employee", style="bold yellow")
    table.add_column("Services", style="dim")
    table.add_column("Busy hours (normalized)")
    table.add_column("Working hours", justify="right")

    for employee in report.employees:
        table.add_row(
            str(employee.employee_id),
            ", ".join(str(service_id) for service_id in employee.service_ids),
            "\n".join(str(slot) for slot in employee.working_hours) or "-",
            f"{employee.number_of_working_hours:.1f} h",
        )

    console.print()
    console.print(table)
    console.print()

    if not report.busy_hours:
        console.print("[yellow]⚠ No busy hours found.[/yellow]\n")
        return

    console.print(f"[bold green]✓ {len(report.busy_hours)} busy slot(s):[/bold green]\n")
    for slot in report.busy_hours:
        console.print(f"  {slot}")
    console.print()


def _run_report(
    *,
    merged: bool,
    config_file: Optional[Path],
    query_data: dict,
    as_json: bool,
    verbose: bool,
) -> None:
    _configure_logging(verbose)

    try:
        config, config_path = _load_config(config_file)
        query = BusyHoursQuery(**query_data)
        service = _build_service(config, config_path)

        if merged:
            report = asyncio.run(service.get_merged_busy_hours(query))
            title = "Merged busy hours"
        else:
            report = asyncio.run(service.get_global_busy_hours(query))
            title = "Global busy hours"

        _print_report(report, title, as_json)

    except (BusyHoursError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def conflicts(
    service_ids: Annotated[Optional[List[int]], typer.Option("--service", "-s", help="Only employees assigned to these services")] = None,
    config_file: ConfigOption = None,
    period: PeriodOption = None,
    frequency: FrequencyOption = None,
    exclude_from: ExcludeFromOption = None,
    exclude_to: ExcludeToOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """
    Find slots in which all selected employees are busy.

    Examples:

        busyhours conflicts --period 2024-01 --frequency ONCE_A_MONTH

        busyhours conflicts -s 1 -s 2 --period 2024-01 --json
    """
    _run_report(
        merged=False,
        config_file=config_file,
        query_data={
            "period": period,
            "frequency": frequency,
            "service_ids": service_ids or None,
            "exclude_from": exclude_from,
            "exclude_to": exclude_to,
        },
        as_json=as_json,
        verbose=verbose,
    )


@app.command()
def merged(
    employee_ids: Annotated[Optional[List[int]], typer.Option("--employee", "-e", help="Employees to merge")] = None,
    visit_ids: Annotated[Optional[List[int]], typer.Option("--visit", help="Employees working on these visits")] = None,
    config_file: ConfigOption = None,
    period: PeriodOption = None,
    frequency: FrequencyOption = None,
    exclude_from: ExcludeFromOption = None,
    exclude_to: ExcludeToOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """
    Merge the busy hours of the selected employees into one calendar.
    """
    _run_report(
        merged=True,
        config_file=config_file,
        query_data={
            "period": period,
            "frequency": frequency,
            "employee_ids": employee_ids or None,
            "visit_ids": visit_ids or None,
            "exclude_from": exclude_from,
            "exclude_to": exclude_to,
        },
        as_json=as_json,
        verbose=verbose,
    )


@app.command()
def holidays(
    year: Annotated[int, typer.Argument(help="Calendar year")],
    config_file: ConfigOption = None,
):
    """
    List the public holidays treated as full busy days.
    """
    try:
        config, _ = _load_config(config_file)
        provider = PublicHolidayProvider(excluded_easter_offsets=config.excluded_easter_offsets)
        days = provider.get_holidays(year, config.holiday_locale)
    except (BusyHoursError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    table = Table(
        title=f"Public holidays {year} ({config.holiday_locale})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Date", style="bold yellow")
    table.add_column("Weekday", style="dim")

    for day in days:
        table.add_row(day.isoformat(), day.strftime("%A"))

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]busyhours[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
