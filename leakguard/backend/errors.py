"""
backend/errors.py

Domain exceptions raised by ingestion and the analysis session.
The API layer maps each one to an HTTP status; the CLI prints the message.
"""

from __future__ import annotations


class LeakGuardError(Exception):
    """Base class for every recoverable analysis error."""


class UnsupportedFileType(LeakGuardError):
    """Upload rejected before reading: extension is not an accepted one."""


class DatasetReadError(LeakGuardError):
    """The uploaded file could not be read or decoded."""


class AnalysisFailed(LeakGuardError):
    """Parsing or classification raised; the previous metrics are kept."""


class AnalysisInProgress(LeakGuardError):
    """Another upload is still being analysed."""


class NoDataAvailable(LeakGuardError):
    """A report or metrics were requested before any dataset was analysed."""
