"""Environment variable reader with dependency injection support.

This module provides the EnvReader class for reading and parsing environment
variables with type conversion and validation. It supports dependency injection
for testing by accepting an optional env mapping.
"""

from __future__ import annotations

import logging
import os
import shlex
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)


class EnvReader:
    """Environment variable reader with type conversion and validation.

    Example:
        # Production usage (reads from os.environ)
        reader = EnvReader()
        timeout = reader.get_float("TRANSMUX_TIMEOUT")

        # Testing usage (inject custom env)
        reader = EnvReader(env={"TRANSMUX_TIMEOUT": "90"})
        timeout = reader.get_float("TRANSMUX_TIMEOUT")  # Returns 90.0
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the environment reader.

        Args:
            env: Optional mapping to use instead of os.environ.
                 If None, reads from os.environ. Useful for testing.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Get a string from environment variable.

        Args:
            var: Environment variable name.
            default: Default value if not set. Defaults to None.

        Returns:
            The environment variable value, or default if not set.
        """
        value = self._env.get(var)
        if value is None:
            return default
        return value

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Get an integer from environment variable.

        Logs a warning and returns default if the value cannot be parsed.
        """
        value = self._env.get(var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s", var, value)
            return default

    def get_float(self, var: str, default: float | None = None) -> float | None:
        """Get a float from environment variable.

        Logs a warning and returns default if the value cannot be parsed.
        """
        value = self._env.get(var)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid float value for %s: %s", var, value)
            return default

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Get a boolean from environment variable.

        Recognizes "true", "1", "yes", "on" (case-insensitive) as true.
        All other values are treated as false.
        """
        value = self._env.get(var)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def get_path(
        self, var: str, must_exist: bool = True, default: Path | None = None
    ) -> Path | None:
        """Get a path from environment variable.

        Args:
            var: Environment variable name.
            must_exist: If True, log a warning and return default when the
                path does not exist.
            default: Default value if not set or path doesn't exist.

        Returns:
            Expanded Path, or default.
        """
        value = self._env.get(var)
        if value is None:
            return default

        path = Path(value).expanduser()
        if must_exist and not path.exists():
            logger.warning(
                "Environment variable %s points to non-existent path: %s",
                var,
                value,
            )
            return default
        return path

    def get_args(self, var: str) -> tuple[str, ...] | None:
        """Get a shell-quoted argument list from environment variable.

        Returns:
            Tuple of arguments, or None if not set or unparseable.
        """
        value = self._env.get(var)
        if value is None:
            return None
        try:
            return tuple(shlex.split(value))
        except ValueError:
            logger.warning("Invalid argument list for %s: %s", var, value)
            return None
