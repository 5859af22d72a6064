"""Shared test fixtures for transmux."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from transmux.config.preferences import ConversionPreferences
from transmux.executor.engine import EngineResult
from transmux.executor.types import InputFile


class FakeEngine:
    """Engine double that records every call instead of running ffmpeg.

    ``fail_when`` decides which invocations fail: it receives the argument
    list and returns True to report a failure for it.
    """

    def __init__(
        self,
        native: bool = True,
        in_memory: bool = False,
        work_directory: Path = Path("/work"),
        fail_when: Callable[[list[str]], bool] | None = None,
    ) -> None:
        self.native = native
        self.in_memory = in_memory
        self.work_directory = work_directory
        self.fail_when = fail_when
        self.calls: list[tuple[str, object]] = []
        self.executed: list[list[str]] = []
        self.staged: list[str] = []
        self.removed: list[str] = []
        self.loads = 0
        self.exits = 0

    def load(self) -> None:
        self.loads += 1
        self.calls.append(("load", None))

    def stage(self, inputs: Sequence[InputFile]) -> None:
        names = [i.name for i in inputs]
        self.staged.extend(names)
        self.calls.append(("stage", names))

    def execute(self, args: Sequence[str]) -> EngineResult:
        args = list(args)
        self.executed.append(args)
        self.calls.append(("execute", args))
        if self.fail_when is not None and self.fail_when(args):
            return EngineResult(success=False, return_code=1, stderr=["boom\n"])
        return EngineResult(success=True, return_code=0)

    def read_output(self, name: str) -> Path | bytes:
        self.calls.append(("read", name))
        if self.in_memory:
            return name.encode()
        return self.work_directory / name

    def remove_artifact(self, name: str) -> None:
        self.removed.append(name)
        self.calls.append(("remove", name))

    def exit(self) -> None:
        self.exits += 1
        self.calls.append(("exit", None))

    @property
    def outputs(self) -> list[str]:
        """Last argument (the output) of every invocation."""
        return [args[-1] for args in self.executed]


@pytest.fixture
def fake_engine() -> FakeEngine:
    """A native recording engine where every invocation succeeds."""
    return FakeEngine()


@pytest.fixture
def make_engine() -> Callable[..., FakeEngine]:
    """Factory for recording engines with custom behaviour."""
    return FakeEngine


@pytest.fixture
def default_preferences() -> ConversionPreferences:
    """Preferences with every option at its default (libx264 + aac)."""
    return ConversionPreferences()


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    """An empty stand-in media file."""
    path = tmp_path / "movie.mkv"
    path.write_bytes(b"\x00" * 16)
    return path


@pytest.fixture
def preferences_file(tmp_path: Path) -> Callable[[str], Path]:
    """Write a YAML preferences file and return its path."""

    def _write(content: str, name: str = "prefs.yaml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
