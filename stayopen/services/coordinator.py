"""Batch coordinator - send one command batch and classify the answer.

Ordering between the two reader threads is decided by arrival on the
channel: the first message wins. stderr lines that arrive after the answer,
up to the point ExifTool has shut down, are kept as late errors and
reported as warnings, but they never change the outcome.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..core.config import StayOpenConfig
from ..core.errors import ChannelDisconnected, ReceiveTimeout
from ..core.models import BatchResult, ErrorLine, Outcome, ReaderFailed, classify, describe
from ..core.protocols import Reporter
from ..engines.process import ExifToolProcess

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Command seemed to run successfully, ExifTool is ready for another batch."
UNEXPECTED_MESSAGE = "Well, that was not expected!"
DISCONNECTED_MESSAGE = "ExifTool closed its output before finishing the batch."


def timeout_message(timeout: Optional[float]) -> str:
    return f"Timed out after {timeout}s waiting for ExifTool."


class BatchCoordinator:
    """Runs the spawn, send, wait, classify sequence.

    Usage:
        coordinator = BatchCoordinator(config, reporter)
        result = coordinator.run()
        sys.exit(0 if result.is_success else 1)
    """

    def __init__(
        self,
        config: StayOpenConfig,
        reporter: Reporter,
        process_factory: Optional[Callable[..., ExifToolProcess]] = None,
    ):
        """Initialize the coordinator.

        Args:
            config: Session configuration.
            reporter: Where output lines and the outcome are reported.
            process_factory: Builds the process (defaults to ExifToolProcess).
        """
        self._config = config
        self._reporter = reporter
        self._process_factory = process_factory or ExifToolProcess

    def _new_process(self) -> ExifToolProcess:
        return self._process_factory(
            executable=self._config.executable,
            common_args=self._config.common_args,
            on_output=self._reporter.output,
            shutdown_timeout=self._config.shutdown_timeout,
        )

    def run(self, args: Optional[list[str]] = None) -> BatchResult:
        """Send one batch and wait for the first answer.

        Args:
            args: Command arguments (default: the configured command).

        Returns:
            BatchResult describing the outcome.

        Raises:
            SpawnError: If ExifTool could not be started.
            CommandWriteError: If the batch could not be written.
        """
        command = list(args) if args is not None else list(self._config.command)

        with self._new_process() as exiftool:
            logger.debug("ExifTool running (pid=%s)", exiftool.pid)
            started = time.monotonic()
            exiftool.send_batch(command)
            result = self._await_result(exiftool)
            result.elapsed_seconds = time.monotonic() - started

        # Readers have finished, so every late stderr line is queued by now
        for late in exiftool.drain_messages():
            if isinstance(late, (ErrorLine, ReaderFailed)):
                result.late_errors.append(late.text)

        self._report(result)
        return result

    def _await_result(self, exiftool: ExifToolProcess) -> BatchResult:
        try:
            message = exiftool.wait_message(self._config.timeout)
        except ReceiveTimeout:
            return BatchResult(outcome=Outcome.TIMED_OUT)
        except ChannelDisconnected:
            return BatchResult(outcome=Outcome.DISCONNECTED)
        return BatchResult(outcome=classify(message), message=message)

    def _report(self, result: BatchResult) -> None:
        for line in result.late_errors:
            self._reporter.warning(f"ExifTool: {line}")

        if result.outcome == Outcome.READY:
            self._reporter.success(SUCCESS_MESSAGE)
            return

        if result.outcome == Outcome.TIMED_OUT:
            self._reporter.failure(timeout_message(self._config.timeout))
        elif result.outcome == Outcome.DISCONNECTED:
            self._reporter.failure(DISCONNECTED_MESSAGE)
        else:
            self._reporter.failure(UNEXPECTED_MESSAGE)
            self._reporter.error(describe(result.message))
