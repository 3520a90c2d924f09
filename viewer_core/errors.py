# viewer_core/errors.py
from __future__ import annotations

# user-facing texts
MSG_READ_ONLY = "Only SELECT queries are allowed."
MSG_QUERY_FAILED = "Query failed or returned no results."
MSG_NO_EXPORT_DATA = "No displayed table data to export."
MSG_OPEN_FAILED = "Failed to open selected database."
MSG_INVALID_X = "Invalid X column selection."
MSG_NO_NUMERIC = "No numeric data to plot."
MSG_NO_DATABASE = "No database is open."
MSG_RANGE_TOO_WIDE = "Data range is too wide to plot."


class ViewerError(Exception):
    """Base class for failures that are reported to the user and then ignored."""


class ReadOnlyViolation(ViewerError):
    def __init__(self, message: str = MSG_READ_ONLY):
        super().__init__(message)


class QueryFailed(ViewerError):
    def __init__(self, message: str = MSG_QUERY_FAILED):
        super().__init__(message)


class DatabaseOpenError(ViewerError):
    def __init__(self, message: str = MSG_OPEN_FAILED):
        super().__init__(message)


class ExportFailed(ViewerError):
    pass


class PlotError(ViewerError):
    pass
