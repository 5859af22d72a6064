"""CLI module for transmux."""

import logging
from pathlib import Path

import click

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from CLI options.

    Args:
        config_path: Config file to read the base logging settings from.
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
    """
    global _logging_configured
    if _logging_configured:
        return

    from transmux.config import get_config
    from transmux.logging import configure_logging

    # Flags win over the config file
    settings = get_config(config_path).logging.with_overrides(
        level=log_level,
        file=log_file,
        format="json" if log_json else None,
    )
    configure_logging(settings)
    _logging_configured = True


@click.group()
@click.version_option(package_name="transmux")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.transmux/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """transmux - Build and run ffmpeg conversions from preference files."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    _configure_logging(config_path, log_level, log_file, log_json)


# Defer import to avoid circular dependency
def _register_commands():
    from transmux.cli.convert import build_command, convert_command

    main.add_command(build_command)
    main.add_command(convert_command)


_register_commands()
