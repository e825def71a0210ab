"""Tests for structured requests and their dispatch."""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from calendar_engine.commands import (
    CommandDispatcher,
    CopyEventsRequest,
    CreateCalendarRequest,
    CreateEventRequest,
    EditEventRequest,
    ExportCalendarRequest,
    ImportCalendarRequest,
    ShowStatusRequest,
    UseCalendarRequest,
    load_requests,
)
from calendar_engine.config import AppConfig
from calendar_engine.utils.exceptions import InvalidRequestError

SCRIPT = """
requests:
  - kind: create_calendar
    name: Work
    timezone: America/New_York
  - kind: create_calendar
    name: Personal
  - kind: use_calendar
    name: Work
  - kind: create_event
    subject: Standup
    start: 2025-03-10T10:00
    end: 2025-03-10T10:30
    repeat:
      weekdays: MWF
      count: 6
  - kind: edit_event
    subject: Standup
    start: 2025-03-12T10:00
    property: location
    value: Zoom
    scope: from
  - kind: show_status
    at: 2025-03-12T10:15
"""


@pytest.fixture
def app_config(tmp_path):
    return AppConfig(EXPORT_DIR=str(tmp_path), DEFAULT_TIMEZONE="UTC")


@pytest.fixture
def dispatcher(manager, app_config):
    return CommandDispatcher(manager, app_config)


@pytest.fixture
def script(tmp_path):
    path = tmp_path / "requests.yaml"
    path.write_text(SCRIPT, encoding="utf-8")
    return path


class TestLoadRequests:
    def test_parses_each_kind(self, script):
        requests = load_requests(script)

        assert [type(request) for request in requests] == [
            CreateCalendarRequest,
            CreateCalendarRequest,
            UseCalendarRequest,
            CreateEventRequest,
            EditEventRequest,
            ShowStatusRequest,
        ]
        assert requests[3].start == datetime(2025, 3, 10, 10, 0)
        assert requests[3].repeat.count == 6

    def test_unknown_kind(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("requests:\n  - kind: delete_everything\n", encoding="utf-8")

        with pytest.raises(InvalidRequestError):
            load_requests(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidRequestError):
            load_requests(tmp_path / "missing.yaml")

    def test_scope_needs_start(self):
        with pytest.raises(ValidationError):
            EditEventRequest(subject="Standup", property="location", value="Zoom", scope="from")

    def test_repeat_needs_one_bound(self):
        with pytest.raises(ValidationError):
            CreateEventRequest(
                subject="Standup",
                start=datetime(2025, 3, 10, 10, 0),
                repeat={"weekdays": "MWF"},
            )


class TestDispatch:
    def test_runs_script(self, dispatcher, manager, script):
        results = dispatcher.run(load_requests(script))

        assert all(results)
        assert manager.get_calendar("Personal").timezone == "UTC"
        standups = manager.get_calendar("Work").storage.find_by_subject("Standup")
        assert len(standups) == 6
        assert [event.location for event in standups] == ["", "Zoom", "Zoom", "Zoom", "Zoom", "Zoom"]
        assert results[-1].data == "busy"

    def test_event_without_end_is_all_day(self, dispatcher, work_manager):
        result = dispatcher.dispatch(
            CreateEventRequest(subject="Holiday", start=datetime(2025, 3, 14, 9, 0))
        )

        assert result.success
        holiday = work_manager.get_current_calendar().find_event(
            "Holiday", datetime(2025, 3, 14, 0, 0)
        )
        assert holiday.is_all_day

    def test_edit_single_missing_event(self, dispatcher, work_manager):
        result = dispatcher.dispatch(
            EditEventRequest(
                subject="Nothing",
                start=datetime(2025, 3, 1, 10, 0),
                property="location",
                value="Room",
            )
        )

        assert not result.success

    def test_edit_series_scope(self, dispatcher, work_manager):
        dispatcher.dispatch(
            CreateEventRequest(
                subject="Gym",
                start=datetime(2025, 3, 10, 7, 0),
                end=datetime(2025, 3, 10, 8, 0),
                repeat={"weekdays": "MR", "until": date(2025, 3, 20)},
            )
        )

        result = dispatcher.dispatch(
            EditEventRequest(subject="Gym", property="description", value="Legs", scope="series")
        )

        assert result.success
        assert result.message == "Successfully edited 4 events."

    def test_copy_day(self, dispatcher, work_manager, meeting):
        work_manager.add_event(meeting)
        work_manager.create_calendar("Home", "America/New_York")

        result = dispatcher.dispatch(
            CopyEventsRequest(
                start_date=date(2025, 3, 1), target_calendar="Home", target_date=date(2025, 3, 8)
            )
        )

        assert result.success
        home = work_manager.get_calendar("Home")
        assert home.find_event("Meeting", datetime(2025, 3, 8, 10, 0)) is not None

    def test_export_then_import(self, dispatcher, work_manager, meeting, tmp_path):
        work_manager.add_event(meeting)
        work_manager.create_calendar("Backup", "America/New_York")

        exported = dispatcher.dispatch(ExportCalendarRequest(path="work.csv"))
        imported = dispatcher.dispatch(
            ImportCalendarRequest(path=tmp_path / "work.csv", calendar="Backup")
        )

        assert exported.success
        assert exported.data == (tmp_path / "work.csv").resolve()
        assert imported.success
        assert imported.data.imported == 1
        assert len(work_manager.get_calendar("Backup").storage) == 1

    def test_export_without_calendar(self, dispatcher):
        result = dispatcher.dispatch(ExportCalendarRequest(path="none.csv"))

        assert not result.success
