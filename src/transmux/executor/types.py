"""Conversion data types.

This module defines the data structures passed between the command builder,
the handler and the engine: per-operation flags, input files, output
descriptors and the revision chain of intermediate artifacts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

from transmux.core.file_utils import sanitize_file_name

ARTIFACT_PREFIX = "__TransmuxArtifact__"
"""Marker starting every intermediate artifact name."""

OPERATION_ID_TOKEN = "$OperationId"
"""Token replaced by the operation id in a placeholder output argument."""

ARTWORK_EXTENSION = "jpg"
"""The extracted artwork frame always uses this extension."""


class Revision(IntEnum):
    """Intermediate artifacts of one operation, in pipeline order."""

    PRIMARY = 0  # Main encode
    ARTWORK = 1  # Single frame extracted as cover art
    MUXED = 2  # Primary output with the cover attached
    METADATA = 3  # Output with metadata copied from the first input


def artifact_name(revision: Revision, operation_id: str, extension: str) -> str:
    """Name of an intermediate artifact in the engine's working storage."""
    if revision is Revision.ARTWORK:
        extension = ARTWORK_EXTENSION
    return f"{ARTIFACT_PREFIX}{int(revision)}__{operation_id}.{extension}"


def placeholder_output(extension: str) -> str:
    """Unresolved primary output argument for hand-written commands.

    The handler substitutes the operation id when the command runs, so the
    output lands where the artifact chain expects it.
    """
    return artifact_name(Revision.PRIMARY, OPERATION_ID_TOKEN, extension)


def is_placeholder_output(arg: str) -> bool:
    """True if an argument is an unresolved placeholder output."""
    prefix = f"{ARTIFACT_PREFIX}{int(Revision.PRIMARY)}__{OPERATION_ID_TOKEN}"
    return arg.startswith(prefix)


@dataclass
class ArtifactChain:
    """Tracks which intermediate artifact is the current best output.

    The pointer only moves forward, and only after the step producing the
    artifact has succeeded.
    """

    operation_id: str
    extension: str
    current: Revision = Revision.PRIMARY

    def name(self, revision: Revision | None = None) -> str:
        """Artifact name for a revision (default: the current one)."""
        if revision is None:
            revision = self.current
        return artifact_name(revision, self.operation_id, self.extension)

    def advance(self, revision: Revision) -> None:
        """Mark a later revision as the current best output."""
        if revision <= self.current:
            raise ValueError(
                f"Cannot move revision pointer from {self.current.name} "
                f"back to {revision.name}"
            )
        self.current = revision


@dataclass(frozen=True)
class InputFile:
    """An input registered with the handler."""

    path: Path

    @property
    def name(self) -> str:
        """Sanitized name used in engine arguments and working storage."""
        return sanitize_file_name(self.path.name)

    @classmethod
    def of(cls, value: InputFile | Path | str) -> InputFile:
        """Coerce a path-like value into an InputFile."""
        if isinstance(value, InputFile):
            return value
        return cls(Path(value))


@dataclass
class OperationFlags:
    """Per-operation options for a ConversionHandler."""

    added_from_input: bool = False
    """The command is a raw argument list whose last item is the output path."""

    album_art_reencode: bool = False
    """Extract artwork from the first input and attach it to the output.
    Set by ConversionHandler.build() from the audio preferences."""

    album_art_name: str | None = None
    """Explicit artwork source to attach (forces the artwork step)."""

    suggested_extension: str | None = None
    """Output extension override."""

    name_from_input_file: bool = False
    """Derive the suggested name from the first input even for raw commands."""

    disable_trim: bool = False
    """Ignore trimming preferences for this handler."""


@dataclass(frozen=True)
class OutputDescriptor:
    """One finished output of a conversion."""

    output: Path | bytes
    """Output path (native engine) or file contents (in-memory engine)."""

    extension: str
    suggested_name: str
