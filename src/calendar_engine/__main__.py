"""CLI entry point for the calendar engine."""

import argparse
import sys
from pathlib import Path

from .commands import CommandDispatcher, load_requests
from .config import config
from .formats.csv_codec import CsvCalendarExporter
from .manager import CalendarManager
from .utils.exceptions import CalendarEngineError
from .utils.logging import setup_logging


def _print_calendars(manager: CalendarManager) -> None:
    if not manager.calendars:
        print("No calendars.")
        return
    print(f"\n📅 {len(manager.calendars)} calendar(s):")
    for name, calendar in manager.calendars.items():
        marker = "*" if calendar is manager.active else " "
        print(f" {marker} {name} ({calendar.timezone}) - {len(calendar.storage)} event(s)")


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Calendar Engine - Run structured calendar requests in memory"
    )
    parser.add_argument(
        "--requests",
        type=Path,
        help="YAML file with a 'requests:' list to execute in order",
    )
    parser.add_argument(
        "--export",
        type=str,
        default=None,
        help="Calendar name to export to CSV after the requests ran",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="CSV output path for --export (default: <export_dir>/<name>.csv)",
    )
    parser.add_argument(
        "--list-calendars",
        action="store_true",
        help="List calendars after the requests ran",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args()

    log_level = "DEBUG" if args.verbose else config.log_level
    logger = setup_logging(level=log_level, log_file=config.log_file)

    manager = CalendarManager(
        auto_decline=config.auto_decline,
        reject_conflicting_edits=config.reject_conflicting_edits,
    )
    dispatcher = CommandDispatcher(manager, config)

    try:
        failures = 0
        if args.requests:
            requests = load_requests(args.requests)
            logger.info(f"Loaded {len(requests)} requests from {args.requests}")
            results = dispatcher.run(requests)
            failures = sum(1 for result in results if not result)
            logger.info(f"Executed {len(results)} requests, {failures} failed")

        if args.export:
            calendar = manager.get_calendar(args.export)
            if calendar is None:
                logger.error(f"Calendar '{args.export}' does not exist")
                return 1
            output = args.output or config.export_dir / f"{args.export}.csv"
            CsvCalendarExporter(calendar.storage).export(output)

        if args.list_calendars:
            _print_calendars(manager)

        return 1 if failures else 0

    except CalendarEngineError as e:
        logger.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
