"""Persistent ExifTool process driven in -stay_open mode.

The process owns the child and its three pipes. stdin stays with the
caller; stdout and stderr are handed to reader threads which report back
over a single channel. The child is always shut down when the owning scope
exits, either politely (``-stay_open False``) or by killing it.
"""
from __future__ import annotations

import logging
import subprocess
from typing import Callable, Iterable, Optional

from ..core.channel import Receiver, open_channel
from ..core.errors import (
    CommandWriteError,
    ProcessStateError,
    SpawnError,
    StreamUnavailableError,
)
from ..core.models import EXECUTE_DIRECTIVE, Message
from .readers import ErrorReader, OutputReader

logger = logging.getLogger(__name__)


def _log_output(line: str) -> None:
    logger.info("->%s", line)


def encode_batch(args: Iterable[str]) -> bytes:
    """Encode command arguments as one stay-open batch.

    Each argument goes on its own line and the batch ends with ``-execute``.
    ExifTool reads raw bytes, so the result is UTF-8 encoded.
    """
    lines = []
    for arg in args:
        arg = str(arg)
        if "\n" in arg or "\r" in arg:
            raise ValueError(f"Argument may not contain a newline: {arg!r}")
        lines.append(arg)
    lines.append(EXECUTE_DIRECTIVE)
    return ("\n".join(lines) + "\n").encode("utf-8")


class ExifToolProcess:
    """A single ExifTool child process in stay-open mode.

    NOT thread-safe - only the owning thread may send batches and wait.

    Usage:
        with ExifToolProcess(on_output=print) as exiftool:
            exiftool.send_batch(["-ver"])
            message = exiftool.wait_message(timeout=10)
    """

    def __init__(
        self,
        executable: str = "exiftool",
        common_args: Optional[list[str]] = None,
        on_output: Optional[Callable[[str], None]] = None,
        shutdown_timeout: float = 5.0,
    ):
        """Prepare the process. Nothing is spawned until start().

        Args:
            executable: ExifTool executable name or path.
            common_args: Arguments applied to every command via -common_args.
            on_output: Called with each non-sentinel stdout line (reader thread).
            shutdown_timeout: Seconds to wait for a clean exit before killing.
        """
        self.executable = executable
        self.common_args = list(common_args or [])
        self._on_output = on_output or _log_output
        self._shutdown_timeout = shutdown_timeout
        self._process: Optional[subprocess.Popen] = None
        self._receiver: Optional[Receiver] = None
        self._leftover: list[Message] = []
        self._stdout_reader: Optional[OutputReader] = None
        self._stderr_reader: Optional[ErrorReader] = None
        self._closed = False

    @property
    def argv(self) -> list[str]:
        argv = [self.executable, "-stay_open", "True", "-@", "-"]
        if self.common_args:
            argv += ["-common_args", *self.common_args]
        return argv

    def start(self) -> "ExifToolProcess":
        """Spawn the child and start both reader threads.

        Raises:
            SpawnError: If the executable could not be started.
            StreamUnavailableError: If stdout or stderr is not piped.
            ProcessStateError: If already started.
        """
        if self._process is not None or self._closed:
            raise ProcessStateError("ExifTool process was already started")

        try:
            self._process = subprocess.Popen(
                self.argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise SpawnError(self.executable, e) from e
        logger.debug("Spawned %s (pid=%s)", self.executable, self._process.pid)

        for name in ("stdin", "stdout", "stderr"):
            if getattr(self._process, name) is None:
                self._kill()
                raise StreamUnavailableError(name)

        stdout_sender, receiver = open_channel()
        stderr_sender = stdout_sender.clone()
        self._receiver = receiver
        self._stdout_reader = OutputReader(self._process.stdout, stdout_sender, self._on_output)
        self._stderr_reader = ErrorReader(self._process.stderr, stderr_sender)
        self._stdout_reader.start()
        self._stderr_reader.start()
        return self

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process else None

    @property
    def returncode(self) -> Optional[int]:
        return self._process.poll() if self._process else None

    @property
    def is_alive(self) -> bool:
        """Check if the child process is running."""
        return self._process is not None and self._process.poll() is None

    @property
    def readers(self) -> tuple[Optional[OutputReader], Optional[ErrorReader]]:
        return self._stdout_reader, self._stderr_reader

    def _require_running(self) -> None:
        if self._process is None or self._receiver is None:
            raise ProcessStateError("ExifTool process has not been started")
        if self._closed:
            raise ProcessStateError("ExifTool process is closed")

    def send_batch(self, args: Iterable[str]) -> None:
        """Write one command batch, terminated by -execute, to stdin.

        Raises:
            CommandWriteError: If the pipe is broken.
        """
        self._require_running()
        payload = encode_batch(args)
        try:
            self._process.stdin.write(payload)
            self._process.stdin.flush()
        except (BrokenPipeError, OSError, ValueError) as e:
            raise CommandWriteError(f"Could not write to ExifTool stdin: {e}") from e
        logger.debug("Sent batch of %d bytes", len(payload))

    def wait_message(self, timeout: Optional[float] = None) -> Message:
        """Block until a reader reports something.

        Raises:
            ReceiveTimeout: If nothing arrived within ``timeout`` seconds.
            ChannelDisconnected: If both readers have finished.
        """
        self._require_running()
        return self._receiver.receive(timeout)

    def drain_messages(self) -> list[Message]:
        """Return messages already queued without waiting.

        After close() this returns what the readers delivered while the
        child was shutting down, once.
        """
        if self._receiver is None:
            return []
        if self._receiver.closed:
            leftover, self._leftover = self._leftover, []
            return leftover
        return self._receiver.drain()

    def _kill(self) -> None:
        if self._process is None or self._process.poll() is not None:
            return
        self._process.kill()
        self._process.wait()

    def close(self) -> None:
        """Shut the child down and stop the readers. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        if self._process is None:
            return

        process = self._process
        if process.poll() is None:
            try:
                process.stdin.write(b"-stay_open\nFalse\n")
                process.stdin.flush()
            except (BrokenPipeError, OSError, ValueError) as e:
                logger.debug("Could not ask ExifTool to exit: %s", e)
        try:
            process.stdin.close()
        except (BrokenPipeError, OSError) as e:
            logger.debug("Closing stdin failed: %s", e)

        try:
            process.wait(timeout=self._shutdown_timeout)
        except subprocess.TimeoutExpired:
            logger.warning("ExifTool (pid=%s) did not exit, killing it", process.pid)
            self._kill()

        for reader, stream in (
            (self._stdout_reader, process.stdout),
            (self._stderr_reader, process.stderr),
        ):
            if reader is None:
                continue
            if reader.join(self._shutdown_timeout):
                stream.close()
            else:
                logger.warning("%s reader did not finish", reader.stream_name)

        # Readers were joined above; keep their last messages for drain_messages()
        if self._receiver is not None:
            self._leftover = self._receiver.close()
            if self._leftover:
                logger.debug("%d messages arrived during shutdown", len(self._leftover))
        logger.debug("ExifTool (pid=%s) closed with code %s", process.pid, process.returncode)

    def __enter__(self) -> "ExifToolProcess":
        if self._process is None:
            self.start()
        return self

    def __exit__(self, *args) -> None:
        self.close()
