"""CLI build and convert commands."""

import json
import logging
import shlex
import shutil
from pathlib import Path

import click

from transmux.cli.exit_codes import ExitCode
from transmux.cli.output import error_exit
from transmux.config import AppConfig, get_config
from transmux.config.preferences import ConversionPreferences
from transmux.config.preferences_loader import (
    PreferencesValidationError,
    load_preferences,
)
from transmux.core.file_utils import output_file_name
from transmux.exceptions import ConversionError
from transmux.executor.engine import FFmpegEngine
from transmux.executor.handler import ConversionHandler
from transmux.executor.types import InputFile, OperationFlags, OutputDescriptor

logger = logging.getLogger(__name__)


def _load_preferences_or_exit(path: Path, json_output: bool = False):
    try:
        return load_preferences(path)
    except FileNotFoundError as e:
        error_exit(str(e), ExitCode.INVALID_ARGUMENTS, json_output)
    except PreferencesValidationError as e:
        error_exit(
            f"Invalid preferences in {path}: {e}",
            ExitCode.INVALID_ARGUMENTS,
            json_output,
        )


def _make_engine(config: AppConfig) -> FFmpegEngine:
    return FFmpegEngine(
        ffmpeg_path=config.engine.ffmpeg_path,
        work_directory=config.engine.work_directory,
        timeout=config.engine.timeout,
    )


def _make_handler(
    engine: FFmpegEngine,
    preferences: ConversionPreferences,
    config: AppConfig,
    flags: OperationFlags | None = None,
) -> ConversionHandler:
    return ConversionHandler(
        engine,
        preferences,
        flags=flags,
        hardware=config.hardware,
        exit_after_segment=config.engine.exit_after_segment,
    )


def save_output(descriptor: OutputDescriptor, output_dir: Path) -> Path:
    """Move or write one conversion output into a directory.

    The file is named after the suggested name with the output extension
    swapped in.

    Args:
        descriptor: The finished output.
        output_dir: Destination directory (created if missing).

    Returns:
        Path of the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    name = output_file_name(Path(descriptor.suggested_name).name, descriptor.extension)
    target = output_dir / name
    if isinstance(descriptor.output, bytes):
        target.write_bytes(descriptor.output)
    else:
        shutil.move(str(descriptor.output), target)
    return target


@click.command("build")
@click.argument(
    "preferences_file",
    metavar="PREFERENCES",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "inputs",
    metavar="INPUT...",
    nargs=-1,
    required=True,
    type=click.Path(path_type=Path),
)
@click.option("--image", is_flag=True, help="Build an image conversion.")
@click.option(
    "--json", "json_output", is_flag=True, help="Print the arguments as JSON."
)
@click.pass_context
def build_command(
    ctx: click.Context,
    preferences_file: Path,
    inputs: tuple[Path, ...],
    image: bool,
    json_output: bool,
) -> None:
    """Print the ffmpeg arguments for a conversion without running it.

    PREFERENCES is a YAML preference file; INPUT is one or more media files.
    """
    config = get_config(ctx.obj.get("config_path"))
    preferences = _load_preferences_or_exit(preferences_file, json_output)

    handler = _make_handler(_make_engine(config), preferences, config)
    handler.add_inputs(inputs)
    try:
        args = handler.build(is_image=image)
    except ConversionError as e:
        error_exit(str(e), ExitCode.CONVERSION_FAILED, json_output)

    if json_output:
        click.echo(json.dumps(args))
    else:
        click.echo(shlex.join(args))


@click.command("convert")
@click.argument(
    "preferences_file",
    metavar="PREFERENCES",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "inputs",
    metavar="INPUT...",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--image", is_flag=True, help="Convert to a still image.")
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory for the converted files.",
)
@click.option(
    "--album-art",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Image to attach as cover art.",
)
@click.option(
    "--extension",
    default=None,
    help="Output extension (default: from the selected codec).",
)
@click.pass_context
def convert_command(
    ctx: click.Context,
    preferences_file: Path,
    inputs: tuple[Path, ...],
    image: bool,
    output_dir: Path,
    album_art: Path | None,
    extension: str | None,
) -> None:
    """Convert INPUT files using a preference file.

    Every output (one per segment with multi-segment trimming) is saved in
    the output directory under its suggested name.
    """
    config = get_config(ctx.obj.get("config_path"))
    preferences = _load_preferences_or_exit(preferences_file)

    flags = OperationFlags(
        suggested_extension=extension.lstrip(".") if extension else None
    )

    engine = _make_engine(config)
    handler = _make_handler(engine, preferences, config, flags)
    handler.add_inputs(inputs)

    try:
        command = handler.build(is_image=image)
        if album_art is not None:
            art = InputFile.of(album_art)
            engine.load()
            engine.stage([art])
            flags.album_art_name = art.name
        outputs = handler.start(command)
        for descriptor in outputs:
            saved = save_output(descriptor, output_dir)
            click.echo(f"Saved {saved}")
        handler.complete_operation()
    except (ConversionError, OSError) as e:
        logger.error("Conversion failed: %s", e)
        error_exit(str(e), ExitCode.CONVERSION_FAILED)
    finally:
        engine.cleanup()
