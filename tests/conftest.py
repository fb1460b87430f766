"""Shared test fixtures."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import os
import subprocess

import pytest


def write(path: Path, text: str = "", *, mtime: float | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="ascii")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@dataclass
class PopenRecorder:
    returncode: int = 0
    calls: list[list[str]] = field(default_factory=list)
    cwds: list[str | None] = field(default_factory=list)
    response_files: list[list[str]] = field(default_factory=list)
    command_lines: list[str] = field(default_factory=list)


@pytest.fixture
def popen(monkeypatch: pytest.MonkeyPatch) -> PopenRecorder:
    """Replaces subprocess.Popen, recording commands and response file contents."""

    recorder = PopenRecorder()

    class FakePopen:
        def __init__(self, args, **kwargs) -> None:
            recorder.calls.append(list(args))
            recorder.command_lines.append(subprocess.list2cmdline(args))
            recorder.cwds.append(kwargs.get("cwd"))
            for arg in args:
                if arg.startswith("@"):
                    with open(arg[1:], encoding="utf-8") as f:
                        recorder.response_files.append(f.read().splitlines())
            self.returncode = recorder.returncode

        def wait(self, timeout=None) -> int:
            return self.returncode

        def communicate(self, timeout=None):
            return b"", None

    monkeypatch.setattr(subprocess, "Popen", FakePopen)
    return recorder


@pytest.fixture
def write_file():
    return write
