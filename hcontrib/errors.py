from __future__ import annotations

from dataclasses import dataclass

__all__ = (
    "TaskError",
    "MissingInputFile",
    "UnresolvedOutputName",
    "FilesystemAccessError",
    "CommandFailed",
)


class TaskError(Exception): ...


@dataclass
class MissingInputFile(TaskError):
    path: str
    kind: str = "input"

    def __post_init__(self):
        super().__init__(f"{self.kind} file {self.path!r} does not exist")


@dataclass
class UnresolvedOutputName(TaskError):
    project: str
    name: str | None
    project_type: str | None

    def __post_init__(self):
        super().__init__(
            f"Can't derive output file name for {self.project!r}: no ExeName32 entry and "
            f"name={self.name!r}, type={self.project_type!r}"
        )


@dataclass
class FilesystemAccessError(TaskError):
    path: str
    operation: str
    reason: str

    def __post_init__(self):
        super().__init__(f"Failed to {self.operation} {self.path!r}: {self.reason}")


@dataclass
class CommandFailed(TaskError):
    command: str
    returncode: int

    def __post_init__(self):
        super().__init__(
            f"{self.command!r} command failed and exited with {self.returncode} return code"
        )
