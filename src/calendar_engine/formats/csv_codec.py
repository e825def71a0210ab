"""CSV import/export in the Google Calendar column layout."""

import csv
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from ..models.event import CalendarEvent, Visibility
from ..storage.event_storage import EventStorage
from ..utils.exceptions import CalendarCodecError

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Subject",
    "Start Date",
    "Start Time",
    "End Date",
    "End Time",
    "All Day Event",
    "Description",
    "Location",
    "Private",
]
CSV_DATE_FORMAT = "%m/%d/%Y"
CSV_TIME_FORMAT = "%I:%M %p"

_WHITESPACE_BREAKS = re.compile(r"[\r\n\t]")


def _clean_text(value: str) -> str:
    return _WHITESPACE_BREAKS.sub(" ", value or "")


class CsvCalendarExporter:
    """Writes every event of a storage, one row per event."""

    def __init__(self, storage: EventStorage):
        self.storage = storage

    def rows(self) -> list[list[Union[str, bool]]]:
        """Row values; the two flag columns stay booleans so they are written unquoted."""
        rows = []
        for bucket in self.storage.get_all_events().values():
            for event in bucket:
                rows.append(
                    [
                        _clean_text(event.subject),
                        event.start.strftime(CSV_DATE_FORMAT),
                        event.start.strftime(CSV_TIME_FORMAT),
                        event.end.strftime(CSV_DATE_FORMAT),
                        event.end.strftime(CSV_TIME_FORMAT),
                        event.is_all_day,
                        _clean_text(event.description),
                        _clean_text(event.location),
                        event.visibility is Visibility.PRIVATE,
                    ]
                )
        return rows

    def export(self, path: Union[str, Path]) -> Path:
        """
        Write the CSV file.

        Returns:
            Absolute path of the written file

        Raises:
            CalendarCodecError: If the file cannot be written
        """
        target = Path(path)
        rows = self.rows()
        try:
            with open(target, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f, quoting=csv.QUOTE_NONNUMERIC)
                writer.writerow(CSV_HEADER)
                writer.writerows(rows)
        except OSError as e:
            raise CalendarCodecError(f"Failed to write {target}: {e}") from e
        logger.info(f"CSV generated successfully at: {target.resolve()} ({len(rows)} events)")
        return target.resolve()


@dataclass
class ImportResult:
    """Result of a CSV import."""

    imported: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


class CsvCalendarImporter:
    """Reads the exporter's layout back into a storage via ``add_event``."""

    def __init__(self, storage: EventStorage, auto_decline: bool = False):
        self.storage = storage
        self.auto_decline = auto_decline

    def import_file(self, path: Union[str, Path]) -> ImportResult:
        """
        Import every valid row; invalid rows are skipped and reported.

        Raises:
            CalendarCodecError: If the file cannot be read
        """
        source = Path(path)
        result = ImportResult()
        try:
            with open(source, newline="", encoding="utf-8") as f:
                reader = csv.reader(f)
                next(reader, None)  # header
                for line_number, row in enumerate(reader, start=2):
                    if not any(cell.strip() for cell in row):
                        continue
                    try:
                        event = self.parse_row(row)
                    except (ValueError, IndexError, ValidationError) as e:
                        message = f"Skipping invalid line {line_number}: {e}"
                        logger.warning(message)
                        result.skipped += 1
                        result.errors.append(message)
                        continue
                    if self.storage.add_event(event, self.auto_decline):
                        result.imported += 1
                    else:
                        result.skipped += 1
                        result.errors.append(
                            f"Line {line_number}: '{event.subject}' declined due to conflict"
                        )
        except OSError as e:
            raise CalendarCodecError(f"Failed to read {source}: {e}") from e

        logger.info(f"Imported {result.imported} events from {source} ({result.skipped} skipped)")
        return result

    @staticmethod
    def parse_row(row: list[str]) -> CalendarEvent:
        start = datetime.strptime(f"{row[1].strip()} {row[2].strip()}", f"{CSV_DATE_FORMAT} {CSV_TIME_FORMAT}")
        end = datetime.strptime(f"{row[3].strip()} {row[4].strip()}", f"{CSV_DATE_FORMAT} {CSV_TIME_FORMAT}")
        private = len(row) > 8 and row[8].strip().lower() == "true"
        return CalendarEvent(
            subject=row[0],
            start=start,
            end=end,
            description=row[6] if len(row) > 6 else "",
            location=row[7] if len(row) > 7 else "",
            visibility=Visibility.PRIVATE if private else Visibility.UNSET,
        )
