"""Tests for the stay-open ExifTool process, driven by a fake ExifTool."""
from pathlib import Path

import pytest

from stayopen.core.errors import (
    ChannelDisconnected,
    CommandWriteError,
    ProcessStateError,
    ReceiveTimeout,
    SpawnError,
)
from stayopen.core.models import BatchComplete, ErrorLine, ReaderFailed
from stayopen.engines.process import ExifToolProcess, encode_batch

from .fixtures import RecordingReporter, write_fake_exiftool


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def make_process(tmp_path: Path, reporter):
    """Build processes around fake executables and close them afterwards."""
    created = []

    def factory(mode: str, **kwargs) -> ExifToolProcess:
        exe = write_fake_exiftool(tmp_path, mode)
        process = ExifToolProcess(
            executable=str(exe),
            on_output=reporter.output,
            shutdown_timeout=2.0,
            **kwargs,
        )
        created.append(process)
        return process

    yield factory
    for process in created:
        process.close()


class TestEncodeBatch:
    """Tests for batch encoding."""

    def test_single_command(self):
        assert encode_batch(["-ver"]) == b"-ver\n-execute\n"

    def test_multiple_args(self):
        payload = encode_batch(["-G1", "-s", "photo.jpg"])
        assert payload == b"-G1\n-s\nphoto.jpg\n-execute\n"

    def test_non_ascii_is_utf8(self):
        payload = encode_batch(["-Artist=Zoë"])
        assert payload == "-Artist=Zoë\n-execute\n".encode("utf-8")

    def test_empty_batch(self):
        assert encode_batch([]) == b"-execute\n"

    def test_newline_rejected(self):
        with pytest.raises(ValueError):
            encode_batch(["-ver\n-execute"])


class TestExifToolProcess:
    """Tests for process lifecycle and messaging."""

    def test_argv(self):
        process = ExifToolProcess(executable="exiftool")
        assert process.argv == ["exiftool", "-stay_open", "True", "-@", "-"]

    def test_argv_common_args(self):
        process = ExifToolProcess(executable="exiftool", common_args=["-G1", "-n"])
        assert process.argv[-3:] == ["-common_args", "-G1", "-n"]

    def test_ready(self, make_process, reporter):
        process = make_process("ready").start()
        assert process.is_alive

        process.send_batch(["-ver"])

        assert process.wait_message(timeout=10) == BatchComplete()
        assert reporter.outputs == []

    def test_output_passed_through(self, make_process, reporter):
        process = make_process("version").start()
        process.send_batch(["-ver"])

        assert process.wait_message(timeout=10) == BatchComplete()
        assert reporter.outputs == ["12.75"]

    def test_batch_arrives_line_by_line(self, make_process, reporter):
        process = make_process("echo").start()
        process.send_batch(["-G1", "-s", "photo one.jpg"])

        assert process.wait_message(timeout=10) == BatchComplete()
        assert reporter.outputs == ["-G1", "-s", "photo one.jpg"]

    def test_several_batches(self, make_process, reporter):
        """Test the process stays open between batches."""
        process = make_process("echo").start()

        for i in range(3):
            process.send_batch([f"-batch{i}"])
            assert process.wait_message(timeout=10) == BatchComplete()

        assert reporter.outputs == ["-batch0", "-batch1", "-batch2"]

    def test_stderr_forwarded(self, make_process):
        process = make_process("error").start()
        process.send_batch(["-bogus"])

        assert process.wait_message(timeout=10) == ErrorLine("Error: bad command")
        assert process.wait_message(timeout=10) == BatchComplete()

    def test_invalid_utf8(self, make_process):
        process = make_process("badutf8").start()
        process.send_batch(["-ver"])

        message = process.wait_message(timeout=10)
        assert isinstance(message, ReaderFailed)
        assert message.stream == "stdout"

    def test_timeout(self, make_process):
        process = make_process("silent").start()
        process.send_batch(["-ver"])

        with pytest.raises(ReceiveTimeout):
            process.wait_message(timeout=0.3)

    def test_child_exit_disconnects(self, make_process):
        process = make_process("exit").start()
        process.send_batch(["-ver"])

        with pytest.raises(ChannelDisconnected):
            process.wait_message(timeout=10)

    def test_write_after_child_exit(self, make_process):
        process = make_process("exit").start()
        process.send_batch(["-ver"])
        with pytest.raises(ChannelDisconnected):
            process.wait_message(timeout=10)

        with pytest.raises(CommandWriteError):
            for _ in range(100):
                process.send_batch(["x" * 65536])

    def test_spawn_failure(self, tmp_path):
        process = ExifToolProcess(executable=str(tmp_path / "no-such-exiftool"))

        with pytest.raises(SpawnError) as exc_info:
            process.start()

        assert "no-such-exiftool" in str(exc_info.value)
        assert process.readers == (None, None)
        assert process.pid is None

    def test_send_before_start(self):
        with pytest.raises(ProcessStateError):
            ExifToolProcess().send_batch(["-ver"])

    def test_start_twice(self, make_process):
        process = make_process("ready").start()
        with pytest.raises(ProcessStateError):
            process.start()

    def test_close_stops_child_and_readers(self, make_process):
        process = make_process("silent").start()

        process.close()

        assert process.is_alive is False
        assert process.returncode == 0
        assert all(not reader.is_alive for reader in process.readers)

    def test_messages_during_shutdown_kept(self, make_process):
        process = make_process("ready_then_warning").start()
        process.send_batch(["-ver"])
        assert process.wait_message(timeout=10) == BatchComplete()

        process.close()

        assert process.drain_messages() == [ErrorLine("Warning: concurrent problem")]
        assert process.drain_messages() == []

    def test_close_twice(self, make_process):
        process = make_process("ready").start()
        process.close()
        process.close()

    def test_send_after_close(self, make_process):
        process = make_process("ready").start()
        process.close()

        with pytest.raises(ProcessStateError):
            process.send_batch(["-ver"])

    def test_close_without_start(self):
        ExifToolProcess().close()

    def test_context_manager(self, tmp_path):
        exe = write_fake_exiftool(tmp_path, "ready")

        with ExifToolProcess(executable=str(exe)) as process:
            process.send_batch(["-ver"])
            assert process.wait_message(timeout=10) == BatchComplete()

        assert process.is_alive is False

    def test_context_manager_cleans_up_on_error(self, tmp_path):
        exe = write_fake_exiftool(tmp_path, "silent")

        with pytest.raises(RuntimeError):
            with ExifToolProcess(executable=str(exe)) as process:
                raise RuntimeError("caller failed")

        assert process.is_alive is False
