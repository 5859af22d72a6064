"""Engine protocol and the ffmpeg subprocess engine.

The handler drives an engine through a small contract: load it, stage the
inputs into its working storage, run argument lists, read an output back,
and remove intermediate artifacts. FFmpegEngine implements the contract by
running the ffmpeg executable inside a working directory.
"""

from __future__ import annotations

import logging
import os
import queue
import shutil
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import tempfile
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from transmux.exceptions import EngineUnavailableError
from transmux.tools.ffmpeg_progress import FFmpegProgress, parse_stderr_progress

from .types import InputFile

logger = logging.getLogger(__name__)


def _is_staged_from(target: Path, source: Path) -> bool:
    """True if ``target`` is a link to ``source`` or a current copy of it."""
    if target.resolve() == source:
        return True
    if target.is_symlink():
        return False
    # copy2 keeps size and mtime, so a copy still matching both is current
    target_stat, source_stat = target.stat(), source.stat()
    return (
        target_stat.st_size == source_stat.st_size
        and target_stat.st_mtime_ns == source_stat.st_mtime_ns
    )


@dataclass(frozen=True)
class EngineResult:
    """Result of one engine invocation."""

    success: bool
    """True if the engine exited cleanly."""

    return_code: int
    """Process return code, -1 when the invocation timed out."""

    stderr: list[str] = field(default_factory=list)
    """Captured diagnostic output."""


class Engine(Protocol):
    """Protocol for transcoding engines.

    Engines own a working storage area where inputs are staged and outputs
    are written. Names passed to the engine are relative to that storage.
    """

    native: bool
    """True if the engine runs natively and can reach hardware encoders."""

    def load(self) -> None:
        """Prepare the engine. Called before every operation; idempotent."""
        ...

    def stage(self, inputs: Sequence[InputFile]) -> None:
        """Make the inputs available in working storage under their names."""
        ...

    def execute(self, args: Sequence[str]) -> EngineResult:
        """Run the engine with an argument list."""
        ...

    def read_output(self, name: str) -> Path | bytes:
        """Get an output by name, as a path or as its contents."""
        ...

    def remove_artifact(self, name: str) -> None:
        """Delete an intermediate artifact from working storage."""
        ...

    def exit(self) -> None:
        """Release the engine. The next load() starts it again."""
        ...


class FFmpegEngine:
    """Engine that runs the ffmpeg executable as a subprocess.

    Each invocation runs ``ffmpeg -y -hide_banner <args>`` with the working
    directory as cwd, so staged inputs and artifacts are addressed by bare
    file names.
    """

    native = True
    STDERR_DRAIN_TIMEOUT: float = 5.0  # Timeout for draining stderr after exit
    TEMP_DIR_PREFIX = "transmux-"

    def __init__(
        self,
        ffmpeg_path: Path | None = None,
        work_directory: Path | None = None,
        timeout: float | None = None,
        *,
        in_memory: bool = False,
        progress_callback: Callable[[FFmpegProgress], None] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            ffmpeg_path: Explicit ffmpeg executable, None to search PATH.
            work_directory: Working storage, None for a fresh temp directory.
            timeout: Per-invocation timeout in seconds. None = no limit.
            in_memory: Return output contents from read_output() instead of
                paths.
            progress_callback: Optional callback for progress updates.
        """
        self._configured_path = ffmpeg_path
        self._configured_work_directory = work_directory
        self._timeout = timeout
        self._in_memory = in_memory
        self._progress_callback = progress_callback
        self._tool_path: Path | None = None
        self._work_directory: Path | None = None
        self._owns_work_directory = False

    @property
    def loaded(self) -> bool:
        """True between load() and exit()."""
        return self._tool_path is not None

    @property
    def tool_path(self) -> Path:
        """Resolved ffmpeg executable (loads the engine if needed)."""
        if not self.loaded:
            self.load()
        assert self._tool_path is not None
        return self._tool_path

    @property
    def work_directory(self) -> Path:
        """Working storage directory (loads the engine if needed)."""
        if self._work_directory is None:
            self.load()
        assert self._work_directory is not None
        return self._work_directory

    def _resolve_tool(self) -> Path:
        if self._configured_path is not None:
            path = Path(self._configured_path).expanduser()
            if path.is_file() and os.access(path, os.X_OK):
                return path
            raise EngineUnavailableError(
                f"Configured ffmpeg is not an executable file: {path}"
            )
        found = shutil.which("ffmpeg")
        if found is None:
            raise EngineUnavailableError(
                "ffmpeg not found in PATH. Install ffmpeg or set engine.ffmpeg_path."
            )
        return Path(found)

    def load(self) -> None:
        """Resolve the executable and create the working directory.

        Raises:
            EngineUnavailableError: If ffmpeg cannot be found.
        """
        if self._tool_path is None:
            self._tool_path = self._resolve_tool()
            logger.debug("Using ffmpeg at %s", self._tool_path)

        if self._work_directory is None:
            if self._configured_work_directory is not None:
                work_directory = Path(self._configured_work_directory).expanduser()
                work_directory.mkdir(parents=True, exist_ok=True)
            else:
                work_directory = Path(tempfile.mkdtemp(prefix=self.TEMP_DIR_PREFIX))
                self._owns_work_directory = True
            self._work_directory = work_directory
            logger.debug("Engine working directory: %s", work_directory)

    def stage(self, inputs: Sequence[InputFile]) -> None:
        """Link each input into the working directory under its sanitized name.

        Falls back to copying when the filesystem does not support links.
        A name already staged from the same source (an earlier segment) is
        left alone. A name staged from a different source, e.g. by an
        earlier request sharing the working directory, is replaced.
        """
        for input_file in inputs:
            target = self.work_directory / input_file.name
            source = input_file.path.resolve()
            if target.is_symlink() or target.exists():
                if _is_staged_from(target, source):
                    continue
                logger.debug("Replacing stale staged input %s", target)
                target.unlink()
            try:
                target.symlink_to(source)
            except OSError as e:
                logger.debug("Cannot link %s (%s), copying instead", source, e)
                shutil.copy2(source, target)

    def execute(self, args: Sequence[str]) -> EngineResult:
        """Run ffmpeg with an argument list.

        Args:
            args: Arguments following ``-y -hide_banner``.

        Returns:
            EngineResult. A timed-out invocation is killed and reported as a
            failure with return code -1.
        """
        cmd = [str(self.tool_path), "-y", "-hide_banner", *args]
        logger.debug("Running: %s", " ".join(cmd))
        return self._run_with_timeout(cmd)

    def _run_with_timeout(self, cmd: list[str]) -> EngineResult:
        """Run a command with timeout and threaded stderr reading."""
        process = subprocess.Popen(  # nosec B603
            cmd,
            cwd=self.work_directory,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
        )

        stderr_output: list[str] = []
        stderr_queue: queue.Queue[str | None] = queue.Queue()
        stop_event = threading.Event()

        def read_stderr() -> None:
            """Read stderr lines and put them in the queue."""
            try:
                assert process.stderr is not None
                for line in process.stderr:
                    if stop_event.is_set():
                        break
                    stderr_queue.put(line)
            except (ValueError, OSError) as e:
                # Pipe closed or process terminated
                logger.debug("Stderr reader stopped: %s", e)
            finally:
                stderr_queue.put(None)

        reader_thread = threading.Thread(target=read_stderr, daemon=True)
        reader_thread.start()

        timeout_expired = False
        start_time = time.monotonic()

        while True:
            if self._timeout is not None:
                if time.monotonic() - start_time >= self._timeout:
                    timeout_expired = True
                    break

            if process.poll() is not None:
                break

            try:
                line = stderr_queue.get(timeout=1.0)
            except queue.Empty:
                continue
            if line is None:
                break
            stderr_output.append(line)
            self._report_progress(line)

        if timeout_expired:
            logger.warning("ffmpeg timed out after %s seconds", self._timeout)
            stop_event.set()
            process.kill()
            if process.stderr:
                try:
                    process.stderr.close()
                except OSError as e:
                    logger.debug("Error closing stderr after kill: %s", e)
            process.wait()
            reader_thread.join(timeout=2.0)
            return EngineResult(success=False, return_code=-1, stderr=stderr_output)

        stop_event.set()

        # Drain any remaining stderr output
        reader_thread.join(timeout=self.STDERR_DRAIN_TIMEOUT)
        while True:
            try:
                line = stderr_queue.get_nowait()
            except queue.Empty:
                break
            if line is None:
                break
            stderr_output.append(line)

        process.wait()
        return EngineResult(
            success=process.returncode == 0,
            return_code=process.returncode,
            stderr=stderr_output,
        )

    def _report_progress(self, line: str) -> None:
        if self._progress_callback is None:
            return
        progress = parse_stderr_progress(line)
        if progress is None:
            return
        try:
            self._progress_callback(progress)
        except Exception as e:
            logger.warning("Progress callback error: %s", e)

    def read_output(self, name: str) -> Path | bytes:
        """Get an output from the working directory.

        Raises:
            FileNotFoundError: If the engine did not produce the file.
        """
        path = self.work_directory / name
        if not path.exists():
            raise FileNotFoundError(f"Engine output not found: {path}")
        if self._in_memory:
            return path.read_bytes()
        return path

    def remove_artifact(self, name: str) -> None:
        """Delete a file from the working directory (missing files are fine)."""
        (self.work_directory / name).unlink(missing_ok=True)

    def exit(self) -> None:
        """Forget the resolved executable so the next load() resolves it again.

        The working directory and its contents are kept; outputs returned
        as paths stay valid until cleanup().
        """
        self._tool_path = None

    def cleanup(self) -> None:
        """Remove the working directory if the engine created it."""
        if self._owns_work_directory and self._work_directory is not None:
            shutil.rmtree(self._work_directory, ignore_errors=True)
            self._work_directory = None
            self._owns_work_directory = False
