"""
Error types raised at the analysis seams, plus message extraction.

Most failures in the analysis core are reported as tagged results
(``success=False`` plus an error string).  The exceptions below are
the few conditions that are raised and caught explicitly.
"""

from __future__ import annotations


class DataGuardianError(Exception):
    """Base class for all analysis-core errors."""


class BrowserLaunchError(DataGuardianError):
    """The automated browser session could not be created at all."""


class StorageError(DataGuardianError):
    """The persisted-site store could not be read or written."""


class SummaryParseError(DataGuardianError):
    """The AI response text did not contain a usable JSON object."""


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.
    """
    if isinstance(error, Exception):
        return str(error) or type(error).__name__
    return "Unknown error"
