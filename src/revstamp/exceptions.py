"""Exceptions and process exit codes for revstamp."""

from enum import IntEnum
from typing import Optional


class ExitCode(IntEnum):
    """Process exit codes reported by the command line interface."""

    NO_ERROR = 0
    CMDLINE_ERROR = 1
    REQUIRED_VCS = 2
    INVALID_FORMAT = 3
    INVALID_REVISION_ID = 4
    REJECT_MODIFIED = 5
    FILE_NOT_FOUND = 7
    REJECT_MIXED = 12
    UNHANDLED = 100


class RevstampError(Exception):
    """Base exception for revstamp errors."""

    exit_code: ExitCode = ExitCode.CMDLINE_ERROR

    def __init__(self, message: str, exit_code: Optional[ExitCode] = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class FormatError(RevstampError):
    """Exception raised when a placeholder in a format string is malformed."""

    exit_code = ExitCode.INVALID_FORMAT


class RevisionRangeError(RevstampError):
    """Exception raised when a placeholder asks for more of the revision than exists."""

    exit_code = ExitCode.INVALID_REVISION_ID


class RejectModifiedError(RevstampError):
    """Exception raised when a modified working directory was rejected."""

    exit_code = ExitCode.REJECT_MODIFIED


class RejectMixedError(RevstampError):
    """Exception raised when a working directory with mixed revisions was rejected."""

    exit_code = ExitCode.REJECT_MIXED


class ConfigError(RevstampError):
    """Exception raised when the configuration file cannot be loaded."""

    pass
