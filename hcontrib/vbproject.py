"""Reader for Visual Basic 6 project (.vbp) and group (.vbg) files.

Both formats are INI-like: one ``key=value`` entry per line. Only the
entries needed for an up-to-date check are extracted.

"""

from __future__ import annotations
from typing import Generic, Iterator, TypeVar

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
import os.path
import re

from hcontrib.errors import FilesystemAccessError, MissingInputFile, TaskError

__all__ = (
    "ProjectType",
    "ProjectDescriptor",
    "ParseResult",
    "parse_project",
    "parse_group",
    "is_group_file",
)

logger = getLogger("vbproject")

Ty = TypeVar("Ty")

KEY_VALUE_RE = re.compile(r"^\s*(?P<key>\w+)\s*=\s*(?P<value>.*?)\s*$")

# Class=ClassName; ClassFile.cls
CODE_RE = re.compile(r"^\w*;\s*(?P<filename>.*?)\s*$")

# Reference=*\G{GUID}#version#lcid#path#description
REFERENCE_RE = re.compile(r"^\*\\G\{[0-9\-A-Fa-f]*\}#[0-9A-Fa-f.]*#[0-9]+#(?P<tlbname>.*)#")

GROUP_FILE_EXT = ".vbg"


class ProjectType(StrEnum):
    EXE = "Exe"
    OLE_EXE = "OleExe"
    OLE_DLL = "OleDll"
    CONTROL = "Control"

    @property
    def output_ext(self) -> str:
        return _TYPE_TO_EXT[self]


_TYPE_TO_EXT = {
    ProjectType.EXE: ".exe",
    ProjectType.OLE_EXE: ".exe",
    ProjectType.OLE_DLL: ".dll",
    ProjectType.CONTROL: ".ocx",
}


@dataclass(frozen=True)
class ProjectDescriptor:
    path: str
    name: str | None = None
    project_type: str | None = None
    sources: tuple[str, ...] = field(default=())
    references: tuple[str, ...] = field(default=())

    # NOTE: Either ExeName32 or derived from name and type, None when neither is possible.
    output_file: str | None = None


@dataclass(frozen=True)
class ParseResult(Generic[Ty]):
    value: Ty | None = None
    error: TaskError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Ty:
        if self.error is not None:
            raise self.error
        if self.value is None:
            raise TaskError("Parse result carries neither a value nor an error")
        return self.value


def dequote(s: str) -> str:
    return s.strip("\"")


def is_group_file(path: str) -> bool:
    _, ext = os.path.splitext(path)
    return ext.lower() == GROUP_FILE_EXT


def derive_output_file(name: str | None, project_type: str | None) -> str | None:
    if name is None or project_type not in _TYPE_TO_EXT:
        return None
    return f"{name}{ProjectType(project_type).output_ext}"


def _read_entries(path: str) -> Iterator[tuple[str, str]]:
    # NOTE: Lines without `key=value` shape (section headers, blank lines) carry nothing we need.
    with open(path, mode="r", encoding="ascii", errors="replace") as f:
        for line in f:
            match = KEY_VALUE_RE.match(line)
            if match is None:
                continue
            yield match.group("key"), match.group("value")


def parse_project(path: str) -> ParseResult[ProjectDescriptor]:
    """Extracts source files, references and output file name of a VB project."""

    if not os.path.isfile(path):
        return ParseResult(error=MissingInputFile(path, kind="Visual Basic project"))

    sources: list[str] = []
    references: list[str] = []
    output_file: str | None = None
    name: str | None = None
    project_type: str | None = None

    try:
        for key, value in _read_entries(path):
            if key in ("Class", "Module"):
                match = CODE_RE.match(value)
                if match is None:
                    logger.warning(f"{path}: malformed {key} entry {value!r}, skipping")
                    continue
                sources.append(match.group("filename"))

            elif key in ("Form", "UserControl", "PropertyPage"):
                sources.append(dequote(value))

            elif key == "Reference":
                match = REFERENCE_RE.match(value)
                if match is None:
                    logger.warning(f"{path}: unsupported Reference entry {value!r}, skipping")
                    continue
                references.append(match.group("tlbname"))

            elif key == "ExeName32":
                output_file = dequote(value)

            elif key == "Type":
                project_type = value

            elif key == "Name":
                name = dequote(value)

    except OSError as e:
        return ParseResult(error=FilesystemAccessError(path, "read", str(e)))

    if output_file is None:
        output_file = derive_output_file(name, project_type)

    return ParseResult(
        value=ProjectDescriptor(
            path=path,
            name=name,
            project_type=project_type,
            sources=tuple(sources),
            references=tuple(references),
            output_file=output_file,
        )
    )


def parse_group(path: str) -> ParseResult[list[str]]:
    """Lists the sub-projects of a VB group file in file order."""

    if not os.path.isfile(path):
        return ParseResult(error=MissingInputFile(path, kind="Visual Basic group"))

    try:
        projects = [
            value
            for key, value in _read_entries(path)
            if key in ("StartupProject", "Project")
        ]
    except OSError as e:
        return ParseResult(error=FilesystemAccessError(path, "read", str(e)))

    return ParseResult(value=projects)
