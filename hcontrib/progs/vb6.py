from __future__ import annotations
from typing import Any

from dataclasses import dataclass, field
from logging import getLogger
import os
import os.path

from hcontrib import staleness
from hcontrib.errors import TaskError, UnresolvedOutputName
from hcontrib.task import Context, Result, execute
from hcontrib.vbproject import is_group_file, parse_group, parse_project

__all__ = ("Vb6Options", "Vb6Task", "make", "format_arguments")

logger = getLogger("vb6")

PROG_FILE_NAME = "vb6"


@dataclass(frozen=True)
class Vb6Options:
    """
    :param project: Visual Basic project (.vbp) or group (.vbg) file.
    :param outdir: Output directory, created if it doesn't exist.
    :param error_file: File VB6 writes its error messages to (/out).
    :param check_references: Compare project references in up-to-date check.
    :param skip_broken_projects: Ignore group members that can't be read instead of failing.
    """

    project: str
    outdir: str | None = None
    error_file: str | None = None
    check_references: bool = field(default=True)
    skip_broken_projects: bool = field(default=False)


def native_path(path: str) -> str:
    # NOTE: Project files are written on Windows.
    return path.replace("\\", os.sep)


def format_arguments(opts: Vb6Options, base_dir: str) -> list[str]:
    # NOTE: VB6.EXE doesn't accept response files, arguments go on the command line.
    arguments = ["/make", opts.project]
    arguments += ["/outdir", opts.outdir if opts.outdir is not None else base_dir]

    if opts.error_file is not None:
        arguments += ["/out", opts.error_file]

    return arguments


@dataclass(frozen=True)
class Vb6Task:
    opts: Vb6Options
    base_dir: str
    program: str = PROG_FILE_NAME
    use_response_file: bool = False

    def arguments(self) -> list[str]:
        return format_arguments(self.opts, self.base_dir)

    def output_path(self, output_file: str) -> str:
        if self.opts.outdir is not None:
            output_file = os.path.join(self.opts.outdir, output_file)
        return staleness.resolve(output_file, self.base_dir)

    def needs_rebuild(self) -> bool:
        path = staleness.resolve(self.opts.project, self.base_dir)

        if not is_group_file(path):
            return self.project_needs_rebuild(path)

        group_dir = os.path.dirname(path)

        for project in parse_group(path).unwrap():
            project = staleness.resolve(native_path(project), group_dir)

            try:
                if self.project_needs_rebuild(project):
                    return True
            except TaskError as e:
                if not self.opts.skip_broken_projects:
                    raise
                logger.warning(f"Skipping {project!r}: {e}")

        return False

    def project_needs_rebuild(self, project_file: str) -> bool:
        """Compares the project file, its sources and references against its compiled file."""

        logger.debug(f"Checking project {project_file!r}")
        project = parse_project(project_file).unwrap()

        if project.output_file is None:
            raise UnresolvedOutputName(project_file, project.name, project.project_type)

        output = self.output_path(project.output_file)
        project_dir = os.path.dirname(project_file)

        sources = [project_file]
        sources += [staleness.resolve(native_path(s), project_dir) for s in project.sources]
        if staleness.needs_rebuild([output], sources):
            return True

        if self.opts.check_references:
            references = [
                staleness.resolve(native_path(r), project_dir) for r in project.references
            ]
            if staleness.needs_rebuild([output], references, missing_ok=True):
                return True

        return False


def make(
    c: Context,
    project: str,
    *,
    outdir: str | None = None,
    error_file: str | None = None,
    check_references=True,
    skip_broken_projects=False,
    vb6_executable: str | None = None,
    env: dict[str, Any] | None = None,
) -> Result | None:
    """Builds a VB6 project or group with ``VB6 /make`` if it is out of date."""

    opts = Vb6Options(
        project=project,
        outdir=outdir,
        error_file=error_file,
        check_references=check_references,
        skip_broken_projects=skip_broken_projects,
    )

    task = Vb6Task(
        opts,
        base_dir=c.root,
        program=vb6_executable if vb6_executable is not None else PROG_FILE_NAME,
    )

    logger.info(f"Building project {project!r}")

    if outdir is not None and not c.exists(c.join(c.root, outdir)):
        c.mkdir(c.join(c.root, outdir))

    return execute(c, task, env=env)
