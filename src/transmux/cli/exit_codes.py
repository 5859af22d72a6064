"""Process exit codes for the transmux CLI."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes returned by transmux commands."""

    SUCCESS = 0
    CONVERSION_FAILED = 1  # Usage, engine or output errors
    INVALID_ARGUMENTS = 2  # Bad preference file or options (same as click)
