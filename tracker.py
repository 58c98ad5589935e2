#!/usr/bin/env python3
"""
Unified CLI for yearly mileage tracking.

Commands:
  status    - Show progress, pace and projection against the yearly limit
  log       - Record a new odometer reading
  history   - List readings for a year
  edit      - Change an existing reading
  delete    - Remove a reading
  progress  - Actual vs target distance across the period
  settings  - Show or change settings
  setup     - Set the period start date and initial odometer reading
  reset     - Restore default settings
"""

import argparse
import sys
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from loguru import logger

from mileage import (
    EntryStore,
    InvalidInputError,
    MileageEntry,
    SettingsService,
    Severity,
    YamlFileStore,
    build_dashboard,
    build_progress_chart,
    get_current_year_data,
)
from mileage.dates import parse_timestamp, utc_now
from mileage.settings import LANGUAGES, THEMES
from mileage.validation import (
    needs_confirmation,
    parse_accent_color,
    parse_choice,
    parse_date,
    parse_kilometers,
    parse_yearly_limit,
)

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format a distance for display."""
    return f"{km:,.0f}" if km is not None else "-"


def format_signed_km(km: float) -> str:
    """Format a variance with an explicit sign (e.g. '+1,000' or '-250')."""
    if round(km) == 0:
        return "0"
    return f"{km:+,.0f}"


def format_pace(km_per_day: float) -> str:
    return f"{km_per_day:,.1f} km/day"


def format_date(timestamp: str) -> str:
    """Format an ISO timestamp as 'YYYY-MM-DD HH:MM'."""
    return parse_timestamp(timestamp).strftime("%Y-%m-%d %H:%M")


def format_severity(severity: Severity) -> str:
    if severity == Severity.NO_DATA:
        return "-"
    return severity.name.replace("_", " ")


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def print_save_error(action: str, store_file) -> None:
    """Report a failed write along with how to check the store file."""
    print(f"Error: Could not {action}.")
    print(f"Check {store_file} with: validate-mileage-store {store_file}")


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr; debug level with --verbose."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<level>{level: <8}</level> | {message}",
        level="DEBUG" if verbose else "INFO",
    )


def open_store(args) -> EntryStore:
    return EntryStore(YamlFileStore(args.store_file))


# =============================================================================
# Status command
# =============================================================================


def make_status_table(dashboard) -> List[List[str]]:
    """Convert dashboard metrics to table rows."""
    return [
        ["Driven", format_km(dashboard.total_km), format_severity(dashboard.total_severity)],
        ["Target today", format_km(dashboard.target_km), "-"],
        [
            "Variance",
            format_signed_km(dashboard.variance),
            format_severity(dashboard.variance_severity),
        ],
        [
            "Remaining",
            format_km(dashboard.remaining_km),
            format_severity(dashboard.remaining_severity),
        ],
        [
            "Projected",
            format_km(dashboard.projected_total),
            format_severity(dashboard.projected_severity),
        ],
        [
            "Daily average",
            format_pace(dashboard.daily_average),
            format_severity(dashboard.daily_average_severity),
        ],
        ["Required pace", format_pace(dashboard.required_daily_average), "-"],
        ["Days left", str(dashboard.remaining_days), "-"],
    ]


def cmd_status(args):
    """Show progress, pace and projection against the yearly limit."""
    store = open_store(args)
    settings = store.load_settings()
    dashboard = build_dashboard(store.load_data(), settings)

    print(f"Yearly limit: {format_km(settings.yearly_limit)} km")
    print(
        f"Period: {format_date(settings.start_date)} to "
        f"{settings.period_end.strftime('%Y-%m-%d %H:%M')}"
    )
    print(f"Readings this year: {dashboard.entry_count}")
    print(f"Progress: {dashboard.progress_percent:.1f}%")
    if dashboard.is_over_limit:
        print(f"OVER LIMIT by {format_km(-dashboard.remaining_km)} km")
    print()

    headers = ["Metric", "Value", "Severity"]
    print(tabulate(make_status_table(dashboard), headers=headers, tablefmt="simple"))

    return 0


# =============================================================================
# Log command
# =============================================================================


def cmd_log(args):
    """Record a new odometer reading."""
    store = open_store(args)
    km = parse_kilometers(args.kilometers)
    entry_date = parse_date(args.date) if args.date else utc_now()

    latest = store.get_latest_reading()
    if needs_confirmation(km, latest) and not args.force:
        print(
            f"Error: New reading ({format_km(km)} km) is lower than the last one "
            f"({format_km(latest)} km). Use --force to save it anyway."
        )
        return 1

    entry = MileageEntry.create(km, note=args.note, date=entry_date)

    print(f"Adding reading to {args.store_file}:")
    print(f"  Date:     {format_date(entry.date)}")
    print(f"  Odometer: {format_km(entry.total_kilometers)} km")
    if entry.note:
        print(f"  Note:     {entry.note}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    if not store.add_entry(entry):
        print_save_error("save the reading", args.store_file)
        return 1
    print("Entry saved.")

    return 0


# =============================================================================
# History command
# =============================================================================


def make_history_table(entries: List[MileageEntry]) -> List[List[str]]:
    """Convert entries (ascending by date) to rows with the distance since the previous one."""
    rows = []
    previous = None
    for entry in entries:
        driven = "-"
        if previous is not None:
            driven = format_km(entry.total_kilometers - previous.total_kilometers)
        rows.append(
            [
                entry.id,
                format_date(entry.date),
                format_km(entry.total_kilometers),
                driven,
                truncate(entry.note),
            ]
        )
        previous = entry
    return rows


def cmd_history(args):
    """List readings for a year."""
    store = open_store(args)
    data = store.load_data()
    year = args.year or utc_now().year

    year_data = None
    for bucket in data:
        if bucket.year == year:
            year_data = bucket
            break

    print(f"Year: {year}")
    if year_data is None or not year_data.entries:
        print("No readings found.")
        return 0

    print(f"Readings: {len(year_data.entries)}")
    print()

    rows = make_history_table(year_data.get_entries_sorted())
    if not args.asc:
        rows.reverse()

    headers = ["ID", "Date", "Odometer", "Driven", "Note"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))

    return 0


# =============================================================================
# Edit / Delete commands
# =============================================================================


def cmd_edit(args):
    """Change an existing reading."""
    store = open_store(args)

    changes = {}
    if args.km is not None:
        changes["total_kilometers"] = parse_kilometers(args.km)
    if args.date is not None:
        changes["date"] = parse_date(args.date)
    if args.note is not None:
        changes["note"] = args.note

    if not changes:
        print("Error: Nothing to change (use --km, --date or --note)")
        return 1

    if store.find_entry(args.entry_id) is None:
        print(f"Error: No reading with id '{args.entry_id}'")
        return 1

    if not store.update_entry(args.entry_id, changes):
        print_save_error("save the change", args.store_file)
        return 1
    print("Entry updated.")

    return 0


def cmd_delete(args):
    """Remove a reading."""
    store = open_store(args)

    if store.find_entry(args.entry_id) is None:
        print(f"Error: No reading with id '{args.entry_id}'")
        return 1

    if not store.delete_entry(args.entry_id):
        print_save_error("delete the reading", args.store_file)
        return 1
    print("Entry deleted.")

    return 0


# =============================================================================
# Progress command
# =============================================================================


def cmd_progress(args):
    """Actual vs target distance across the period."""
    store = open_store(args)
    settings = store.load_settings()
    year_data = get_current_year_data(store.load_data())
    entries = year_data.entries if year_data else []

    points = build_progress_chart(entries, settings, point_count=args.points)

    rows = [
        [
            p.label,
            format_km(p.actual_km),
            format_km(p.target_km),
            format_signed_km(p.actual_km - p.target_km),
        ]
        for p in points
    ]
    headers = ["Date", "Actual", "Target", "Difference"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))

    return 0


# =============================================================================
# Settings / Setup / Reset commands
# =============================================================================


def make_settings_table(settings) -> List[List[str]]:
    return [
        ["Yearly limit", f"{format_km(settings.yearly_limit)} km"],
        ["Start date", format_date(settings.start_date)],
        ["Initial odometer", format_km(settings.initial_kilometers)],
        ["Accent color", settings.accent_color],
        ["Theme", settings.theme or "-"],
        ["Language", settings.language or "-"],
    ]


def cmd_settings(args):
    """Show or change settings."""
    service = SettingsService(open_store(args))

    changes = {}
    if args.limit is not None:
        changes["yearly_limit"] = parse_yearly_limit(args.limit)
    if args.color is not None:
        changes["accent_color"] = parse_accent_color(args.color)
    if args.start_date is not None:
        changes["start_date"] = parse_date(args.start_date)
    if args.initial_km is not None:
        changes["initial_kilometers"] = parse_kilometers(args.initial_km)
    if args.theme is not None:
        changes["theme"] = parse_choice(args.theme, THEMES, "Theme")
    if args.language is not None:
        changes["language"] = parse_choice(args.language, LANGUAGES, "Language")

    settings = service.update(**changes) if changes else service.settings
    if not service.saved:
        print_save_error("save the settings", args.store_file)
        return 1

    if changes:
        print("Settings updated.")
        print()
    print(tabulate(make_settings_table(settings), tablefmt="simple"))

    return 0


def cmd_setup(args):
    """Set the period start date and initial odometer reading."""
    service = SettingsService(open_store(args))
    start = parse_date(args.start_date)
    initial_km = parse_kilometers(args.initial_km) if args.initial_km else None

    settings = service.complete_setup(start, initial_km)
    if not service.saved:
        print_save_error("save the setup", args.store_file)
        return 1
    print("Setup complete.")
    print()
    print(tabulate(make_settings_table(settings), tablefmt="simple"))

    return 0


def cmd_reset(args):
    """Restore default settings."""
    if not args.yes:
        print("This restores every setting to its default. Use --yes to confirm.")
        return 1

    service = SettingsService(open_store(args))
    service.reset()
    if not service.saved:
        print_save_error("reset the settings", args.store_file)
        return 1
    print("Settings reset to defaults.")

    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Yearly mileage tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s mileage.yaml setup 2025-03-01 --initial-km 42000
  %(prog)s mileage.yaml log 43250 --note "after road trip"
  %(prog)s mileage.yaml status
  %(prog)s mileage.yaml history --year 2025
  %(prog)s mileage.yaml edit 1740823200000000000 --km 43200
  %(prog)s mileage.yaml settings --limit 12000 --language en
  %(prog)s mileage.yaml progress --points 6
""",
    )
    parser.add_argument(
        "store_file",
        type=Path,
        help="Path to the mileage store YAML file (created on first write)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Status subcommand
    subparsers.add_parser(
        "status", help="Show progress, pace and projection against the yearly limit"
    )

    # Log subcommand
    log_parser = subparsers.add_parser("log", help="Record a new odometer reading")
    log_parser.add_argument(
        "kilometers",
        type=str,
        help="Total odometer reading in km",
    )
    log_parser.add_argument(
        "--date",
        type=str,
        help="Reading date in YYYY-MM-DD format (default: now)",
    )
    log_parser.add_argument(
        "--note",
        type=str,
        help="Note about the reading",
    )
    log_parser.add_argument(
        "--force",
        action="store_true",
        help="Save even if the reading is lower than the last one",
    )
    log_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be added without saving",
    )

    # History subcommand
    history_parser = subparsers.add_parser("history", help="List readings for a year")
    history_parser.add_argument(
        "--year",
        type=int,
        help="Calendar year to show (default: current year)",
    )
    history_parser.add_argument(
        "--asc",
        action="store_true",
        help="Oldest first instead of newest first",
    )

    # Edit subcommand
    edit_parser = subparsers.add_parser("edit", help="Change an existing reading")
    edit_parser.add_argument("entry_id", type=str, help="Reading id (see history)")
    edit_parser.add_argument("--km", type=str, help="New odometer reading in km")
    edit_parser.add_argument("--date", type=str, help="New date (YYYY-MM-DD)")
    edit_parser.add_argument("--note", type=str, help="New note (empty to clear)")

    # Delete subcommand
    delete_parser = subparsers.add_parser("delete", help="Remove a reading")
    delete_parser.add_argument("entry_id", type=str, help="Reading id (see history)")

    # Progress subcommand
    progress_parser = subparsers.add_parser(
        "progress", help="Actual vs target distance across the period"
    )
    progress_parser.add_argument(
        "--points",
        type=int,
        default=10,
        help="Number of evenly spaced points (default: 10)",
    )

    # Settings subcommand
    settings_parser = subparsers.add_parser("settings", help="Show or change settings")
    settings_parser.add_argument("--limit", type=str, help="Yearly limit in km")
    settings_parser.add_argument("--color", type=str, help="Accent color (#RRGGBB)")
    settings_parser.add_argument(
        "--start-date", type=str, help="Start of the yearly period (YYYY-MM-DD)"
    )
    settings_parser.add_argument(
        "--initial-km", type=str, help="Odometer reading at the period start"
    )
    settings_parser.add_argument("--theme", type=str, help=f"One of {', '.join(THEMES)}")
    settings_parser.add_argument(
        "--language", type=str, help=f"One of {', '.join(LANGUAGES)}"
    )

    # Setup subcommand
    setup_parser = subparsers.add_parser(
        "setup", help="Set the period start date and initial odometer reading"
    )
    setup_parser.add_argument(
        "start_date", type=str, help="Start of the yearly period (YYYY-MM-DD)"
    )
    setup_parser.add_argument(
        "--initial-km", type=str, help="Odometer reading at the period start"
    )

    # Reset subcommand
    reset_parser = subparsers.add_parser("reset", help="Restore default settings")
    reset_parser.add_argument("--yes", action="store_true", help="Confirm the reset")

    return parser


COMMANDS = {
    "status": cmd_status,
    "log": cmd_log,
    "history": cmd_history,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "progress": cmd_progress,
    "settings": cmd_settings,
    "setup": cmd_setup,
    "reset": cmd_reset,
}


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        return COMMANDS[args.command](args)
    except InvalidInputError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
