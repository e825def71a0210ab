"""File codecs that read and write calendars through the storage API."""

from .csv_codec import CsvCalendarExporter, CsvCalendarImporter, ImportResult

__all__ = ["CsvCalendarExporter", "CsvCalendarImporter", "ImportResult"]
