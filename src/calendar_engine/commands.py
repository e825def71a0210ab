"""Structured requests and their dispatch onto the core operations.

Each request kind is one pydantic model tagged by ``kind``; a grammar or GUI
front end builds these, and ``CommandDispatcher.dispatch`` maps each kind
to exactly one core operation.
"""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator, model_validator

from .config import AppConfig
from .copier import EventCopier
from .formats.csv_codec import CsvCalendarExporter, CsvCalendarImporter
from .manager import CalendarManager
from .models.event import CalendarEvent, Visibility
from .models.result import OperationResult
from .scheduling.recurrence import RecurringSeries, Weekday
from .utils.exceptions import CalendarCodecError, InvalidRequestError

logger = logging.getLogger(__name__)


class CreateCalendarRequest(BaseModel):
    kind: Literal["create_calendar"] = "create_calendar"
    name: str = Field(min_length=1)
    timezone: Optional[str] = None


class UseCalendarRequest(BaseModel):
    kind: Literal["use_calendar"] = "use_calendar"
    name: str = Field(min_length=1)


class EditCalendarRequest(BaseModel):
    kind: Literal["edit_calendar"] = "edit_calendar"
    name: str = Field(min_length=1)
    property: str = Field(min_length=1)
    value: str = Field(min_length=1)


class RepeatPattern(BaseModel):
    """Weekday set plus exactly one bound."""

    weekdays: Union[str, list[Union[Weekday, str, int]]]
    count: Optional[int] = None
    until: Optional[Union[datetime, date]] = None

    @model_validator(mode="after")
    def _one_bound(self) -> "RepeatPattern":
        if (self.count is None) == (self.until is None):
            raise ValueError("repeat needs exactly one of 'count' or 'until'")
        return self


class CreateEventRequest(BaseModel):
    kind: Literal["create_event"] = "create_event"
    subject: str = Field(min_length=1)
    start: datetime
    end: Optional[datetime] = None
    all_day: bool = False
    description: str = ""
    location: str = ""
    visibility: Visibility = Visibility.UNSET
    repeat: Optional[RepeatPattern] = None
    calendar: Optional[str] = None

    def to_event(self) -> CalendarEvent:
        if self.all_day or self.end is None:
            return CalendarEvent.all_day(
                self.subject,
                self.start.date(),
                description=self.description,
                location=self.location,
                visibility=self.visibility,
            )
        return CalendarEvent(
            subject=self.subject,
            start=self.start,
            end=self.end,
            description=self.description,
            location=self.location,
            visibility=self.visibility,
        )


class EditEventRequest(BaseModel):
    """
    Edit one event (``single``), the occurrences of its series from its
    start onwards (``from``), or every occurrence sharing its subject
    (``series``).
    """

    kind: Literal["edit_event"] = "edit_event"
    subject: str = Field(min_length=1)
    start: Optional[datetime] = None
    property: str = Field(min_length=1)
    value: Union[datetime, str]
    scope: Literal["single", "from", "series"] = "single"
    calendar: Optional[str] = None

    @field_validator("value")
    @classmethod
    def _non_empty(cls, value: Union[datetime, str]) -> Union[datetime, str]:
        if isinstance(value, str) and not value.strip():
            raise ValueError("value cannot be empty")
        return value

    @model_validator(mode="after")
    def _start_for_scope(self) -> "EditEventRequest":
        if self.scope in ("single", "from") and self.start is None:
            raise ValueError(f"'start' is required for scope '{self.scope}'")
        return self


class CopyEventRequest(BaseModel):
    kind: Literal["copy_event"] = "copy_event"
    subject: str = Field(min_length=1)
    start: datetime
    target_calendar: str = Field(min_length=1)
    target_start: datetime


class CopyEventsRequest(BaseModel):
    """Copy one day (``end_date`` omitted) or an inclusive range of days."""

    kind: Literal["copy_events"] = "copy_events"
    start_date: date
    end_date: Optional[date] = None
    target_calendar: str = Field(min_length=1)
    target_date: date


class ShowStatusRequest(BaseModel):
    kind: Literal["show_status"] = "show_status"
    at: datetime
    calendar: Optional[str] = None


class ExportCalendarRequest(BaseModel):
    kind: Literal["export_calendar"] = "export_calendar"
    path: Path
    calendar: Optional[str] = None


class ImportCalendarRequest(BaseModel):
    kind: Literal["import_calendar"] = "import_calendar"
    path: Path
    calendar: Optional[str] = None


Request = Annotated[
    Union[
        CreateCalendarRequest,
        UseCalendarRequest,
        EditCalendarRequest,
        CreateEventRequest,
        EditEventRequest,
        CopyEventRequest,
        CopyEventsRequest,
        ShowStatusRequest,
        ExportCalendarRequest,
        ImportCalendarRequest,
    ],
    Field(discriminator="kind"),
]

_REQUEST_LIST = TypeAdapter(list[Request])


def load_requests(path: Path) -> list:
    """
    Load a YAML request script (a ``requests:`` list).

    Raises:
        InvalidRequestError: If the document is not a valid request list
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise InvalidRequestError(f"Cannot read request script {path}: {e}") from e
    items = data.get("requests", []) if isinstance(data, dict) else data
    try:
        return _REQUEST_LIST.validate_python(items)
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid request script {path}: {e}") from e


class CommandDispatcher:
    """Runs structured requests against a ``CalendarManager``."""

    def __init__(self, manager: CalendarManager, config: Optional[AppConfig] = None):
        self.manager = manager
        self.config = config or AppConfig()
        self.copier = EventCopier(manager)

    def dispatch(self, request: BaseModel) -> OperationResult:
        if isinstance(request, CreateCalendarRequest):
            return self.manager.create_calendar(
                request.name, request.timezone or self.config.default_timezone
            )
        if isinstance(request, UseCalendarRequest):
            return self.manager.use_calendar(request.name)
        if isinstance(request, EditCalendarRequest):
            return self.manager.edit_calendar(request.name, request.property, request.value)
        if isinstance(request, CreateEventRequest):
            return self._create_event(request)
        if isinstance(request, EditEventRequest):
            return self._edit_event(request)
        if isinstance(request, CopyEventRequest):
            return self.copier.copy_event(
                request.subject, request.start, request.target_calendar, request.target_start
            )
        if isinstance(request, CopyEventsRequest):
            if request.end_date is None:
                return self.copier.copy_events_on_date(
                    request.start_date, request.target_calendar, request.target_date
                )
            return self.copier.copy_events_between(
                request.start_date, request.end_date, request.target_calendar, request.target_date
            )
        if isinstance(request, ShowStatusRequest):
            return self.manager.show_status(request.at, request.calendar)
        if isinstance(request, ExportCalendarRequest):
            return self._export(request)
        if isinstance(request, ImportCalendarRequest):
            return self._import(request)
        raise InvalidRequestError(f"Unsupported request: {type(request).__name__}")

    def run(self, requests: list) -> list[OperationResult]:
        results = []
        for request in requests:
            result = self.dispatch(request)
            if not result:
                logger.error(f"{request.kind} failed: {result.message}")
            elif result.message:
                logger.info(result.message)
            results.append(result)
        return results

    def _create_event(self, request: CreateEventRequest) -> OperationResult:
        event = request.to_event()
        if request.repeat is None:
            return self.manager.add_event(event, request.calendar)
        series = RecurringSeries(
            base=event,
            weekdays=request.repeat.weekdays,
            occurrences=request.repeat.count,
            until=request.repeat.until,
        )
        return self.manager.add_recurring(series, request.calendar)

    def _edit_event(self, request: EditEventRequest) -> OperationResult:
        calendar = self.manager.resolve(request.calendar)
        if calendar is None:
            return OperationResult.fail(
                f"Calendar '{request.calendar}' does not exist."
                if request.calendar
                else "No calendar in use."
            )
        editor = self.manager.editor_for(calendar.name)
        storage = calendar.storage

        if request.scope == "series":
            events = storage.find_by_subject(request.subject)
            if not events:
                return OperationResult.fail(f"No events named '{request.subject}' found.")
            return editor.execute_multiple_edits(events, request.property, request.value)

        event = storage.find_event(request.subject, request.start)
        if event is None:
            return OperationResult.fail(
                f"Event '{request.subject}' at {request.start.isoformat()} not found."
            )
        if request.scope == "single":
            return editor.execute_edit(event, request.property, request.value)

        if event.series_id:
            members = storage.find_series(event.series_id)
        else:
            members = storage.find_by_subject(request.subject)
        events = [other for other in members if other.start >= event.start]
        return editor.execute_multiple_edits(events, request.property, request.value)

    def _export(self, request: ExportCalendarRequest) -> OperationResult:
        calendar = self.manager.resolve(request.calendar)
        if calendar is None:
            return OperationResult.fail("No calendar to export.")
        path = request.path if request.path.is_absolute() else self.config.export_dir / request.path
        try:
            written = CsvCalendarExporter(calendar.storage).export(path)
        except CalendarCodecError as e:
            return OperationResult.fail(str(e))
        return OperationResult.ok(f"CSV generated successfully at: {written}", data=written)

    def _import(self, request: ImportCalendarRequest) -> OperationResult:
        calendar = self.manager.resolve(request.calendar)
        if calendar is None:
            return OperationResult.fail("No calendar to import into.")
        importer = CsvCalendarImporter(calendar.storage, self.manager.auto_decline)
        try:
            result = importer.import_file(request.path)
        except CalendarCodecError as e:
            return OperationResult.fail(str(e))
        return OperationResult.ok(
            f"Imported {result.imported} events ({result.skipped} skipped).", data=result
        )
