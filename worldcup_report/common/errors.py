"""Error taxonomy of the report pipeline.

Fatal errors derive from `ReportError` and carry the pipeline stage that
raised them so the entry point can say where the run stopped. Partial chart
data is not an error: the renderer warns with `RenderDegraded` and keeps
going.
"""

from __future__ import annotations


class ReportError(Exception):
    stage = "report"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DataLoadError(ReportError):
    """Input file missing, unreadable or not tabular."""
    stage = "load"


class AggregationError(ReportError):
    """A summary was asked for columns the cleaned table does not have."""
    stage = "aggregate"


class RenderDegraded(UserWarning):
    """A chart was drawn with "no data" markers in place of missing values."""


class ReportWriteError(ReportError):
    """The finished document could not be written."""
    stage = "write"
