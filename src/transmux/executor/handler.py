"""Conversion orchestration.

ConversionHandler turns a preference snapshot into engine commands and runs
the steps of one logical conversion: the main encode, optional artwork
re-embedding, optional metadata propagation, and (for multi-segment
trimming) one full pass per segment. Every finished output is collected in
the handler's batch until complete_operation() is called.

Intermediate files follow the revision chain in .types:

    0  main encode
    1  artwork frame extracted from the first input (always .jpg)
    2  main encode with the artwork attached
    3  current best output with metadata copied from the first input

Only the main encode is fatal. Steps 1 to 3 are best effort: on failure a
warning is logged and the revision pointer stays where it was.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
import uuid
from collections.abc import Iterable, Sequence
from pathlib import Path

from transmux.config.models import HardwareSettings
from transmux.config.preferences import ConversionPreferences, TrimMode
from transmux.core.file_utils import file_extension, output_file_name
from transmux.core.timestamps import segment_at
from transmux.exceptions import (
    EngineInvocationError,
    OptionalStepError,
    UsageError,
)
from transmux.logging.context import operation_context
from transmux.tools.capabilities import (
    COPY_EXTENSION,
    DEFAULT_CAPABILITIES,
    EncoderCapabilities,
    MediaKind,
)

from .command import build_command
from .engine import Engine, EngineResult
from .hardware import HardwareArgs, resolve_hardware_args
from .types import (
    OPERATION_ID_TOKEN,
    ArtifactChain,
    InputFile,
    OperationFlags,
    OutputDescriptor,
    Revision,
    is_placeholder_output,
)

logger = logging.getLogger(__name__)

# Containers that cannot carry an attached picture stream
NO_ATTACHED_PICTURE_CONTAINERS = frozenset({"ogg"})


class ConversionHandler:
    """Builds and runs the engine commands of a conversion request.

    The handler works on a private copy of the preferences taken at
    construction, so later edits to the caller's objects never reach an
    operation in flight.

    Example:
        handler = ConversionHandler(engine, preferences)
        handler.add_inputs([Path("movie.mkv")])
        outputs = handler.start(handler.build())
        ...  # save outputs
        handler.complete_operation()
    """

    def __init__(
        self,
        engine: Engine,
        preferences: ConversionPreferences,
        *,
        flags: OperationFlags | None = None,
        hardware: HardwareSettings | None = None,
        capabilities: EncoderCapabilities = DEFAULT_CAPABILITIES,
        exit_after_segment: bool = False,
    ) -> None:
        """Initialize the handler.

        Args:
            engine: Engine that runs the commands.
            preferences: Conversion preferences (copied).
            flags: Per-operation options.
            hardware: Active hardware settings, None for no acceleration.
            capabilities: Encoder capability tables.
            exit_after_segment: Call engine.exit() after every segment.
        """
        self.flags = flags if flags is not None else OperationFlags()

        snapshot = copy.deepcopy(preferences)
        if self.flags.disable_trim:
            snapshot = dataclasses.replace(
                snapshot, trim=dataclasses.replace(snapshot.trim, mode=TrimMode.NONE)
            )
        self._preferences = snapshot

        self._engine = engine
        self._hardware = hardware if hardware is not None else HardwareSettings()
        self._capabilities = capabilities
        self._exit_after_segment = exit_after_segment

        self._inputs: list[InputFile] = []
        self._batch: list[OutputDescriptor] = []
        self._segments_done = 0
        self._track = snapshot.trim.multiple.start_from
        self._is_image = False
        self._is_primary_pass = False

    @property
    def preferences(self) -> ConversionPreferences:
        """The handler's preference snapshot."""
        return self._preferences

    @property
    def inputs(self) -> list[InputFile]:
        return list(self._inputs)

    @property
    def batch(self) -> list[OutputDescriptor]:
        """Outputs collected since the last complete_operation()."""
        return list(self._batch)

    @property
    def segments_done(self) -> int:
        return self._segments_done

    @property
    def is_image(self) -> bool:
        return self._is_image

    @property
    def is_primary_pass(self) -> bool:
        """True if the last build() was the main video/audio encode."""
        return self._is_primary_pass

    def add_inputs(self, files: Iterable[InputFile | Path | str]) -> None:
        """Register the inputs of the conversion, replacing earlier ones."""
        self._inputs = [InputFile.of(f) for f in files]

    def hardware_acceleration(
        self, is_image: bool = False, bitrate: str | None = None
    ) -> HardwareArgs:
        """Resolve hardware acceleration arguments for this handler.

        Args:
            is_image: True if the target is a still image.
            bitrate: Bitrate override for secondary invocations.
        """
        return resolve_hardware_args(
            self._preferences,
            self._hardware,
            self._capabilities,
            native=self._engine.native,
            is_image=is_image,
            bitrate=bitrate,
        )

    def build(self, is_image: bool = False) -> list[str]:
        """Build the base argument sequence from the preference snapshot.

        Args:
            is_image: True to build an image conversion.

        Returns:
            Engine arguments without output path or trimming.

        Raises:
            UsageError: If no inputs are registered.
        """
        self._is_image = is_image
        self._is_primary_pass = not is_image

        hardware_args = self.hardware_acceleration(is_image)
        if not self._inputs:
            raise UsageError("No inputs registered; call add_inputs() first")

        args = build_command(
            self._preferences,
            self._inputs,
            hardware_args,
            self._hardware,
            self._capabilities,
            native=self._engine.native,
            is_image=is_image,
        )
        if self._preferences.audio_selected and not is_image:
            self.flags.album_art_reencode = self._preferences.audio.keep_album_art
        return args

    def start(
        self,
        command: Sequence[str],
        suggested_name: str | None = None,
        skip_segmentation: bool = False,
    ) -> list[OutputDescriptor]:
        """Run a conversion request.

        Args:
            command: Engine arguments, usually from build(). With
                flags.added_from_input the last argument is the output.
            suggested_name: Name offered for the output, None to derive it.
            skip_segmentation: Ignore trimming preferences for this request.

        Returns:
            Copy of the batch, including outputs of earlier requests not yet
            cleared by complete_operation().

        Raises:
            UsageError: If no inputs are registered, or a raw command is
                empty.
            EngineInvocationError: If the main encode fails.
            EngineUnavailableError: If the engine cannot be loaded.
        """
        if not self._inputs:
            raise UsageError("No inputs registered; call add_inputs() first")
        if self.flags.added_from_input and not command:
            raise UsageError("A command added from input must end with its output")

        base = list(command)
        if suggested_name is None:
            suggested_name = self._default_suggested_name(base)

        while True:
            descriptor, has_next = self._run_pass(
                base, suggested_name, skip_segmentation
            )
            self._batch.append(descriptor)
            if not has_next:
                break
            self._segments_done += 1
            if self._exit_after_segment:
                self._engine.exit()

        return list(self._batch)

    def complete_operation(self) -> None:
        """Clear the batch and the segment counter.

        The metadata track counter keeps counting across operations.
        """
        self._batch.clear()
        self._segments_done = 0

    def _default_suggested_name(self, command: Sequence[str]) -> str:
        if self.flags.added_from_input and not self.flags.name_from_input_file:
            return command[-1]
        container = self._preferences.output_container
        return output_file_name(
            self._inputs[0].path,
            container if self._is_primary_pass and container else None,
        )

    def _output_extension(self, command: Sequence[str]) -> str:
        """Pick the output extension for a request."""
        first_input_extension = file_extension(self._inputs[0].name)
        prefs = self._preferences

        if self.flags.suggested_extension:
            extension = self.flags.suggested_extension
        elif self.flags.added_from_input:
            extension = file_extension(command[-1])
        else:
            if self._is_image:
                kind, codec = MediaKind.IMAGE, prefs.image_codec
            elif prefs.video_selected:
                kind, codec = MediaKind.VIDEO, prefs.video_codec
            else:
                kind, codec = MediaKind.AUDIO, prefs.audio_codec
            capability = self._capabilities.get(kind, codec)
            extension = capability.extension if capability else first_input_extension

        if extension == COPY_EXTENSION:
            extension = first_input_extension
        if self._is_primary_pass and prefs.output_container:
            extension = prefs.output_container
        return extension

    def _insert_trim(self, args: list[str], trim_args: list[str]) -> None:
        # After the last "-i <name>" pair, so the cut applies to the output
        position = 0
        if "-i" in args:
            position = len(args) - 1 - args[::-1].index("-i") + 2
        args[position:position] = trim_args

    def _apply_trim(
        self, args: list[str], extension: str, suggested_name: str
    ) -> tuple[str, bool]:
        """Insert trimming arguments.

        Returns:
            The (possibly segment-specific) suggested name, and True if
            another segment follows.
        """
        trim = self._preferences.trim

        if trim.mode is TrimMode.SINGLE:
            trim_args = []
            if trim.start:
                trim_args.extend(["-ss", trim.start])
            if trim.end:
                trim_args.extend(["-to", trim.end])
            self._insert_trim(args, trim_args)
            return suggested_name, False

        if trim.mode is TrimMode.MULTIPLE:
            multiple = trim.multiple
            segment = segment_at(
                multiple.text,
                self._segments_done,
                multiple.divider,
                multiple.timestamp_at_left,
            )
            trim_args = ["-ss", segment.start]
            if segment.end:
                trim_args.extend(["-to", segment.end])
            if multiple.smart_metadata:
                trim_args.extend(
                    [
                        "-metadata", f"title={segment.label}",
                        "-metadata", f"track={self._track}",
                    ]
                )  # fmt: skip
                self._track += 1
            self._insert_trim(args, trim_args)
            logger.debug(
                "Segment %d: %s from %s to %s",
                self._segments_done,
                segment.label,
                segment.start,
                segment.end or "end",
            )
            return f"{segment.label}.{extension}", not segment.is_last

        return suggested_name, False

    def _run_pass(
        self,
        base: Sequence[str],
        suggested_name: str,
        skip_segmentation: bool,
    ) -> tuple[OutputDescriptor, bool]:
        """Run one full pass (one segment) of a request."""
        operation_id = str(uuid.uuid4())
        segmented = (
            not skip_segmentation
            and self._preferences.trim.mode is TrimMode.MULTIPLE
        )
        segment = self._segments_done if segmented else None

        with operation_context(operation_id, segment):
            self._engine.load()
            self._engine.stage(self._inputs)

            args = list(base)
            extension = self._output_extension(args)
            has_next = False
            if not skip_segmentation:
                suggested_name, has_next = self._apply_trim(
                    args, extension, suggested_name
                )

            chain = ArtifactChain(operation_id, extension)
            placeholder = bool(args) and is_placeholder_output(args[-1])
            if placeholder:
                args[-1] = args[-1].replace(OPERATION_ID_TOKEN, operation_id)
            if not self.flags.added_from_input:
                args.append(chain.name(Revision.PRIMARY))

            logger.info("Starting conversion to %s", suggested_name)
            result = self._engine.execute(args)
            if not result.success:
                raise EngineInvocationError(
                    f"Engine failed with exit code {result.return_code}", result
                )

            attempted = Revision.PRIMARY
            flags = self.flags
            if (
                not flags.added_from_input and flags.album_art_reencode
            ) or flags.album_art_name:
                if extension in NO_ATTACHED_PICTURE_CONTAINERS:
                    logger.info(
                        "Skipping artwork: %s cannot hold an attached picture",
                        extension,
                    )
                else:
                    attempted = Revision.MUXED
                    self._attach_artwork(chain, args[-1])

            if not flags.added_from_input and self._preferences.force_copy_metadata:
                attempted = Revision.METADATA
                self._copy_metadata(chain)

            if (
                flags.added_from_input
                and not placeholder
                and chain.current is Revision.PRIMARY
            ):
                read_name = args[-1]
            else:
                read_name = chain.name()
            output = self._engine.read_output(read_name)

            self._cleanup(chain, attempted, output)
            logger.info("Conversion finished: %s", suggested_name)

        descriptor = OutputDescriptor(
            output=output, extension=extension, suggested_name=suggested_name
        )
        return descriptor, has_next

    def _execute_optional(self, step: str, args: list[str]) -> EngineResult:
        result = self._engine.execute(args)
        if not result.success:
            raise OptionalStepError(
                f"{step} failed with exit code {result.return_code}"
            )
        return result

    def _attach_artwork(self, chain: ArtifactChain, primary_output: str) -> None:
        """Extract a cover frame and attach it to the main output."""
        source = self.flags.album_art_name or self._inputs[0].name
        try:
            self._execute_optional(
                "Artwork extraction",
                ["-i", source, "-frames:v", "1", chain.name(Revision.ARTWORK)],
            )
            self._execute_optional(
                "Artwork attachment",
                [
                    "-i", primary_output,
                    "-i", chain.name(Revision.ARTWORK),
                    "-map", "0",
                    "-map", "1",
                    "-c", "copy",
                    "-disposition:v:0", "attached_pic",
                    chain.name(Revision.MUXED),
                ],
            )  # fmt: skip
        except (OptionalStepError, EngineInvocationError, OSError) as e:
            logger.warning("Failed to attach artwork: %s", e)
            return
        chain.advance(Revision.MUXED)

    def _copy_metadata(self, chain: ArtifactChain) -> None:
        """Copy metadata from the first input onto the current output."""
        try:
            self._execute_optional(
                "Metadata copy",
                [
                    "-i", chain.name(),
                    "-i", self._inputs[0].name,
                    "-map", "0",
                    "-map_metadata", "1",
                    "-c", "copy",
                    chain.name(Revision.METADATA),
                ],
            )  # fmt: skip
        except (OptionalStepError, EngineInvocationError, OSError) as e:
            logger.warning("Failed to copy metadata: %s", e)
            return
        chain.advance(Revision.METADATA)

    def _cleanup(
        self, chain: ArtifactChain, attempted: Revision, output: Path | bytes
    ) -> None:
        """Remove intermediate artifacts except the returned output."""
        keep = output.name if isinstance(output, Path) else None
        last = max(attempted, chain.current)
        for revision in range(int(last) + 1):
            name = chain.name(Revision(revision))
            if name == keep:
                continue
            try:
                self._engine.remove_artifact(name)
            except OSError as e:
                logger.warning("Failed to remove artifact %s: %s", name, e)
