"""Reader threads for the child's output and error streams.

Each reader owns exactly one stream and one channel sender. Readers are
supervised: a read or decode failure is captured on the reader and sent to
the coordinator as a ``ReaderFailed`` message instead of dying silently.
The sender is always closed when the thread ends, so the receiver sees a
disconnect once both readers are gone.
"""
from __future__ import annotations

import logging
import threading
from typing import BinaryIO, Callable, Iterator, Optional

from ..core.channel import Sender
from ..core.errors import ChannelClosed, StreamReadError
from ..core.models import SENTINEL, BatchComplete, ErrorLine, ReaderFailed

logger = logging.getLogger(__name__)


def iter_lines(stream: BinaryIO, name: str) -> Iterator[str]:
    """Yield decoded lines from a binary stream with the line ending removed.

    Raises:
        StreamReadError: On any read error or invalid UTF-8.
    """
    while True:
        try:
            raw = stream.readline()
        except (OSError, ValueError) as e:
            raise StreamReadError(name, e) from e
        if not raw:
            return
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StreamReadError(name, e) from e
        if text.endswith("\n"):
            text = text[:-1]
        if text.endswith("\r"):
            text = text[:-1]
        yield text


class StreamReader:
    """Base class: read one stream line by line on a daemon thread."""

    stream_name = "stream"

    def __init__(self, stream: BinaryIO, sender: Sender):
        self._stream = stream
        self._sender = sender
        self._thread: Optional[threading.Thread] = None
        self.error: Optional[BaseException] = None
        self.lines_read = 0

    def start(self) -> "StreamReader":
        if self._thread is not None:
            raise RuntimeError(f"{self.stream_name} reader already started")
        self._thread = threading.Thread(
            target=self._run,
            name=f"stayopen-{self.stream_name}",
            daemon=True,
        )
        self._thread.start()
        return self

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the thread to finish. Returns True if it has."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def handle_line(self, line: str) -> None:
        raise NotImplementedError

    def _run(self) -> None:
        try:
            for line in iter_lines(self._stream, self.stream_name):
                self.lines_read += 1
                self.handle_line(line)
            logger.debug("%s reached end of stream after %d lines", self.stream_name, self.lines_read)
        except ChannelClosed:
            logger.debug("%s reader stopping: receiver closed", self.stream_name)
        except Exception as e:
            self.error = e
            logger.warning("%s reader failed: %s", self.stream_name, e)
            self._report_failure(e)
        finally:
            self._sender.close()

    def _report_failure(self, error: BaseException) -> None:
        try:
            self._sender.send(ReaderFailed(self.stream_name, error))
        except ChannelClosed:
            logger.debug("%s failure not delivered: receiver closed", self.stream_name)


class OutputReader(StreamReader):
    """Reads stdout: the sentinel goes to the channel, everything else is passed through."""

    stream_name = "stdout"

    def __init__(
        self,
        stream: BinaryIO,
        sender: Sender,
        on_output: Callable[[str], None],
    ):
        super().__init__(stream, sender)
        self._on_output = on_output

    def handle_line(self, line: str) -> None:
        if line == SENTINEL:
            self._sender.send(BatchComplete())
        else:
            self._on_output(line)


class ErrorReader(StreamReader):
    """Reads stderr: every line is forwarded to the channel."""

    stream_name = "stderr"

    def handle_line(self, line: str) -> None:
        self._sender.send(ErrorLine(line))
