from __future__ import annotations
from typing import Any, Iterable, Iterator, Protocol

from dataclasses import dataclass
from dataclasses import field
from contextlib import contextmanager
from logging import getLogger
import subprocess
import tempfile
import shlex
import os
import sys

from hcontrib.errors import CommandFailed, FilesystemAccessError

__all__ = ("Context", "Config", "Result", "Buildable", "execute")

logger = getLogger("hcontrib")


@dataclass
class Config:
    dry_run: bool = field(default=False)
    echo: bool = field(default=True)


@dataclass
class Result:
    return_code: int
    output: str | None


@dataclass
class Context:
    root: str
    config: Config = field(default_factory=Config)

    def is_quoted(self, s: str) -> bool:
        return len(s) > 1 and s[0] == s[-1] == "\""

    def dequote(self, s: str) -> str:
        if self.is_quoted(s):
            return s[1:-1]
        return s

    def exists(self, p: str) -> bool:
        return os.path.exists(p)

    def join(self, *parts: str) -> str:
        return os.path.join(*parts)

    def run(
        self,
        command: str,
        timeout: float | None = None,
        encoding="utf-8",
        capture_output=False,
        env: dict[str, Any] | None = None,
    ) -> Result:
        parts = shlex.split(command, posix=sys.platform != "win32")
        parts = [self.dequote(part) for part in parts]

        return self.run_args(
            parts,
            timeout=timeout,
            encoding=encoding,
            capture_output=capture_output,
            env=env,
        )

    def run_args(
        self,
        parts: list[str],
        timeout: float | None = None,
        encoding="utf-8",
        capture_output=False,
        env: dict[str, Any] | None = None,
    ) -> Result:
        """Runs an already tokenized command, each part is passed to the program as is."""

        if env is None:
            env = {}

        env = {**os.environ, **env}

        if self.config.dry_run or self.config.echo:
            print(f"> {' '.join(parts)}", flush=True)

        output: str | None = None
        return_code = 0

        if not self.config.dry_run:
            if capture_output:
                process = subprocess.Popen(
                    parts,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    env=env,
                    cwd=self.root,
                )
                stdout, _ = process.communicate(timeout=timeout)
                output = (
                    stdout.decode(encoding) if stdout is not None else None
                )
            else:
                process = subprocess.Popen(
                    parts,
                    env=env,
                    cwd=self.root,
                )
                process.wait(timeout=timeout)

            return_code = process.returncode

        return Result(
            return_code=return_code,
            output=output,
        )

    def mkdir(self, dir: str) -> Result:
        if self.config.dry_run:
            return self.run_args(["mkdir", dir])
        try:
            os.makedirs(dir, exist_ok=True)
        except OSError as e:
            raise FilesystemAccessError(dir, "create directory", str(e)) from e
        return Result(0, None)

    @contextmanager
    def response_file(self, lines: Iterable[str]) -> Iterator[str]:
        """Writes one argument per line into a temporary file, removed on exit."""

        fd, path = tempfile.mkstemp(suffix=".rsp", text=True)
        try:
            try:
                with os.fdopen(fd, mode="w", encoding="utf-8", newline="\n") as f:
                    for line in lines:
                        f.write(f"{line}\n")
            except OSError as e:
                raise FilesystemAccessError(path, "write response file", str(e)) from e

            with open(path, mode="r", encoding="utf-8") as f:
                logger.debug(f"Contents of {path}:\n{f.read()}")

            yield path
        finally:
            os.remove(path)


class Buildable(Protocol):
    program: str
    use_response_file: bool

    def needs_rebuild(self) -> bool: ...

    def arguments(self) -> list[str]: ...


def execute(c: Context, buildable: Buildable, *, env: dict[str, Any] | None = None) -> Result | None:
    """Runs the program behind ``buildable`` unless its outputs are up to date.

    Returns ``None`` when nothing had to be done.

    """

    if not buildable.needs_rebuild():
        logger.info(f"{buildable.program}: outputs are up to date. Skipping...")
        return None

    arguments = buildable.arguments()

    # NOTE: Tokens go to Popen unchanged, it does the quoting for the platform.
    if buildable.use_response_file:
        with c.response_file(arguments) as rsp:
            parts = [buildable.program, f"@{rsp}"]
            result = c.run_args(parts, env=env)
    else:
        parts = [buildable.program, *arguments]
        result = c.run_args(parts, env=env)

    if result.return_code != 0:
        raise CommandFailed(subprocess.list2cmdline(parts), result.return_code)

    return result
