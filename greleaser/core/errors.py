"""Exit codes for the CLI.

The release tool reports every failure with the same exit status; the
stage that failed is named in the printed message instead.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes. Values are part of the CLI contract."""

    OK = 0
    ERROR = 1

