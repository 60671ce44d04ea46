"""Test fixtures for process tests.

Provides a fake ExifTool that speaks the stay-open protocol, and a
reporter that records everything it is given.
"""
from __future__ import annotations

import stat
import sys
import threading
from pathlib import Path


# Body of the fake executable. MODE is prepended when the script is written.
FAKE_EXIFTOOL_SOURCE = r'''
import sys
import time

out = sys.stdout.buffer
err = sys.stderr.buffer


def respond(args):
    if MODE == "ready":
        out.write(b"{ready}\n")
    elif MODE == "version":
        out.write(b"12.75\n{ready}\n")
    elif MODE == "crlf":
        out.write(b"12.75\r\n{ready}\r\n")
    elif MODE == "echo":
        for arg in args:
            out.write(arg + b"\n")
        out.write(b"{ready}\n")
    elif MODE == "error":
        err.write(b"Error: bad command\n")
        err.flush()
        time.sleep(0.3)
        out.write(b"{ready}\n")
    elif MODE == "ready_then_warning":
        out.write(b"{ready}\n")
        out.flush()
        time.sleep(0.05)
        err.write(b"Warning: concurrent problem\n")
        err.flush()
    elif MODE == "badutf8":
        out.write(b"\xff\xfe\n")
    elif MODE == "exit":
        sys.exit(3)
    elif MODE == "silent":
        pass
    out.flush()


def main():
    args = []
    stay_open = False
    for raw in sys.stdin.buffer:
        line = raw.rstrip(b"\r\n")
        if stay_open:
            if line.lower() in (b"false", b"0"):
                return
            stay_open = False
            continue
        if line == b"-stay_open":
            stay_open = True
        elif line == b"-execute":
            respond(args)
            args = []
        else:
            args.append(line)


main()
'''


def write_fake_exiftool(directory: Path, mode: str) -> Path:
    """Write an executable fake ExifTool script and return its path.

    Modes:
        ready: answer every batch with {ready}
        version: print 12.75 then {ready}
        crlf: like version, with Windows line endings
        echo: print every received argument then {ready}
        error: write to stderr, pause, then {ready}
        ready_then_warning: {ready} first, then a stderr line right after
        badutf8: write invalid UTF-8 to stdout
        exit: exit without output when a batch arrives
        silent: never answer
    """
    path = directory / f"fake-exiftool-{mode}"
    path.write_text(
        f"#!{sys.executable}\nMODE = {mode!r}\n{FAKE_EXIFTOOL_SOURCE}",
        encoding="utf-8",
    )
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


class RecordingReporter:
    """Reporter that keeps every call for assertions. Thread-safe."""

    def __init__(self):
        self._lock = threading.Lock()
        self.outputs: list[str] = []
        self.successes: list[str] = []
        self.failures: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.debugs: list[str] = []
        self.headers: list[str] = []
        self.configs: list[dict] = []

    def _add(self, target: list[str], message: str) -> None:
        with self._lock:
            target.append(message)

    def output(self, line: str) -> None:
        self._add(self.outputs, line)

    def success(self, message: str) -> None:
        self._add(self.successes, message)

    def failure(self, message: str) -> None:
        self._add(self.failures, message)

    def warning(self, message: str) -> None:
        self._add(self.warnings, message)

    def error(self, message: str) -> None:
        self._add(self.errors, message)

    def debug(self, message: str) -> None:
        self._add(self.debugs, message)

    def print_header(self, title: str) -> None:
        self._add(self.headers, title)

    def print_config(self, config_items: dict) -> None:
        with self._lock:
            self.configs.append(dict(config_items))
