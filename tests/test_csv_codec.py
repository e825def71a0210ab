"""Tests for CSV export and import."""

from datetime import date, datetime

import pytest

from calendar_engine.formats.csv_codec import CsvCalendarExporter, CsvCalendarImporter
from calendar_engine.models.event import CalendarEvent, Visibility
from calendar_engine.storage.event_storage import EventStorage
from calendar_engine.utils.exceptions import CalendarCodecError

from conftest import make_event

HEADER = "Subject,Start Date,Start Time,End Date,End Time,All Day Event,Description,Location,Private"
EXPORTED_HEADER = ",".join(f'"{column}"' for column in HEADER.split(","))


class TestExporter:
    def test_rows_in_chronological_order(self, storage, meeting):
        storage.add_event(make_event("Breakfast", "2025-03-01T08:00", "2025-03-01T08:30"))
        storage.add_event(meeting)

        rows = CsvCalendarExporter(storage).rows()

        assert [row[0] for row in rows] == ["Breakfast", "Meeting"]
        assert rows[1][1:5] == ["03/01/2025", "10:00 AM", "03/01/2025", "11:00 AM"]

    def test_export_layout(self, storage, tmp_path):
        storage.add_event(
            make_event(
                "Meeting",
                "2025-03-01T10:00",
                "2025-03-01T11:00",
                location="Room 1\nB",
                visibility="private",
            )
        )
        storage.add_event(CalendarEvent.all_day("Holiday", date(2025, 3, 2)))

        written = CsvCalendarExporter(storage).export(tmp_path / "out.csv")

        lines = written.read_text(encoding="utf-8").splitlines()
        assert lines == [
            EXPORTED_HEADER,
            '"Meeting","03/01/2025","10:00 AM","03/01/2025","11:00 AM",False,"","Room 1 B",True',
            '"Holiday","03/02/2025","12:00 AM","03/02/2025","11:59 PM",True,"","",False',
        ]
        assert written.is_absolute()

    def test_empty_storage_writes_header_only(self, storage, tmp_path):
        written = CsvCalendarExporter(storage).export(tmp_path / "empty.csv")

        assert written.read_text(encoding="utf-8").splitlines() == [EXPORTED_HEADER]

    def test_embedded_quotes_are_escaped(self, storage, tmp_path):
        storage.add_event(
            make_event("Say \"hi\"", "2025-03-01T10:00", "2025-03-01T11:00", description="a, b")
        )

        written = CsvCalendarExporter(storage).export(tmp_path / "quotes.csv")

        line = written.read_text(encoding="utf-8").splitlines()[1]
        assert line.startswith('"Say ""hi""",')
        assert ',"a, b",' in line
        imported = EventStorage()
        assert CsvCalendarImporter(imported).import_file(written).imported == 1
        assert imported.find_event('Say "hi"', datetime(2025, 3, 1, 10, 0)) is not None

    def test_unwritable_path_raises(self, storage, tmp_path):
        with pytest.raises(CalendarCodecError):
            CsvCalendarExporter(storage).export(tmp_path / "missing" / "out.csv")


class TestImporter:
    def test_reads_exported_file(self, storage, meeting, tmp_path):
        meeting.description = "Weekly, with notes"
        storage.add_event(meeting)
        path = CsvCalendarExporter(storage).export(tmp_path / "cal.csv")

        target = EventStorage()
        result = CsvCalendarImporter(target).import_file(path)

        assert result.imported == 1
        imported = target.find_event("Meeting", datetime(2025, 3, 1, 10, 0))
        assert imported.end == datetime(2025, 3, 1, 11, 0)
        assert imported.description == "Weekly, with notes"

    def test_invalid_rows_are_skipped(self, storage, tmp_path):
        path = tmp_path / "mixed.csv"
        path.write_text(
            "\n".join(
                [
                    HEADER,
                    '"Gym",03/03/2025,07:00 AM,03/03/2025,08:00 AM,False,,,True',
                    '"Broken",not a date,07:00 AM,03/03/2025,08:00 AM,False,,,False',
                    '"Backwards",03/03/2025,09:00 AM,03/03/2025,08:00 AM,False,,,False',
                ]
            ),
            encoding="utf-8",
        )

        result = CsvCalendarImporter(storage).import_file(path)

        assert result.imported == 1
        assert result.skipped == 2
        assert len(result.errors) == 2
        gym = storage.find_event("Gym", datetime(2025, 3, 3, 7, 0))
        assert gym.visibility is Visibility.PRIVATE

    def test_auto_decline_skips_conflicts(self, storage, meeting, tmp_path):
        path = tmp_path / "clash.csv"
        path.write_text(
            HEADER + '\n"Call",03/01/2025,10:30 AM,03/01/2025,11:30 AM,False,,,False\n',
            encoding="utf-8",
        )
        storage.add_event(meeting)

        result = CsvCalendarImporter(storage, auto_decline=True).import_file(path)

        assert result.imported == 0
        assert result.skipped == 1
        assert len(storage) == 1

    def test_missing_file_raises(self, storage, tmp_path):
        with pytest.raises(CalendarCodecError):
            CsvCalendarImporter(storage).import_file(tmp_path / "nope.csv")
