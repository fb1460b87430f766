from __future__ import annotations
from typing import Any, Iterable, Mapping

from dataclasses import dataclass, field
from logging import getLogger

from hcontrib import staleness
from hcontrib.task import Context, Result, execute

__all__ = ("Option", "MidlOptions", "MidlTask", "compile", "format_arguments")

logger = getLogger("midl")

PROG_FILE_NAME = "midl.exe"
DEFAULT_ENV = "win32"


@dataclass(frozen=True)
class Option:
    name: str
    value: str | None = None

    @classmethod
    def parse(cls, s: str) -> Option:
        """Parses ``NAME`` or ``NAME=VALUE``."""
        name, sep, value = s.partition("=")
        return cls(name, value if sep else None)


def to_options(items: Mapping[str, Any] | Iterable[Option] | None) -> tuple[Option, ...]:
    if items is None:
        return ()
    if isinstance(items, Mapping):
        return tuple(
            Option(k, str(v) if v is not None else None) for k, v in items.items()
        )
    return tuple(items)


@dataclass(frozen=True)
class MidlOptions:
    """Switches passed to MIDL.EXE.

    Only a subset of the compiler switches have a dedicated field, anything
    else goes to ``options``.

    :param tlb: File name of the generated type library (/tlb).
    :param filename: The .IDL file to process.
    :param env: Target environment, ``win32`` or ``win64`` (/env).
    :param acf: Explicit ACF file name (/acf).
    :param align: Structure alignment, 1, 2, 4 or 8 (/align).
    :param app_config: Application-configuration mode (/app_config).
    :param char: ``signed``, ``unsigned`` or ``ascii7`` (/char).
    :param client: ``stub`` or ``none`` (/client).
    :param cstub: Client stub file name (/cstub).
    :param dlldata: Name of the dlldata file of a proxy DLL (/dlldata).
    :param oi: Interpreted marshaling suffix: ``""``, ``"c"``, ``"f"`` or ``"cf"`` (/Oi).
    :param header: Header file name (/header).
    :param iid: Interface identifier file name (/iid).
    :param proxy: Interface proxy file name (/proxy).
    :param defines: Macro definitions, each one becomes ``/D``.
    :param options: Additional switches passed verbatim.

    """

    tlb: str
    filename: str
    env: str = DEFAULT_ENV
    acf: str | None = None
    align: str | None = None
    app_config: bool = False
    char: str | None = None
    client: str | None = None
    cstub: str | None = None
    dlldata: str | None = None
    oi: str | None = None
    header: str | None = None
    iid: str | None = None
    proxy: str | None = None
    defines: tuple[Option, ...] = field(default=())
    options: tuple[Option, ...] = field(default=())


def format_arguments(opts: MidlOptions) -> list[str]:
    """Returns response file lines, one switch per line, source file last."""

    lines = ["/nologo", f"/env {opts.env}"]

    if opts.acf is not None:
        lines.append(f"/acf {opts.acf}")
    if opts.align is not None:
        lines.append(f"/align {opts.align}")
    if opts.app_config:
        lines.append("/app_config")
    if opts.char is not None:
        lines.append(f"/char {opts.char}")
    if opts.client is not None:
        lines.append(f"/client {opts.client}")
    if opts.cstub is not None:
        lines.append(f"/cstub {opts.cstub}")
    if opts.dlldata is not None:
        lines.append(f"/dlldata {opts.dlldata}")

    if opts.oi is not None:
        lines.append(f"/Oi{opts.oi}")
    if opts.tlb is not None:
        lines.append(f"/tlb {opts.tlb}")
    if opts.header is not None:
        lines.append(f"/header {opts.header}")
    if opts.iid is not None:
        lines.append(f"/iid {opts.iid}")
    if opts.proxy is not None:
        lines.append(f"/proxy {opts.proxy}")

    for define in opts.defines:
        if define.value is None:
            lines.append(f"/D {define.name}")
        else:
            lines.append(f"/D {define.name}={define.value}")

    for option in opts.options:
        if option.value is None:
            lines.append(option.name)
        else:
            lines.append(f"{option.name} {option.value}")

    lines.append(opts.filename)
    return lines


@dataclass(frozen=True)
class MidlTask:
    opts: MidlOptions
    base_dir: str
    program: str = PROG_FILE_NAME
    use_response_file: bool = True

    def outputs(self) -> list[str]:
        candidates = (self.opts.tlb, self.opts.header, self.opts.iid, self.opts.proxy)
        return [o for o in candidates if o is not None]

    def inputs(self) -> list[str]:
        if self.opts.acf is not None:
            return [self.opts.filename, self.opts.acf]
        return [self.opts.filename]

    def needs_rebuild(self) -> bool:
        return staleness.needs_rebuild(
            self.outputs(), self.inputs(), base_dir=self.base_dir
        )

    def arguments(self) -> list[str]:
        return format_arguments(self.opts)


def compile(
    c: Context,
    filename: str,
    *,
    tlb: str,
    target_env: str = DEFAULT_ENV,
    defines: Mapping[str, Any] | Iterable[Option] | None = None,
    options: Mapping[str, Any] | Iterable[Option] | None = None,
    midl_executable: str | None = None,
    env: dict[str, Any] | None = None,
    **switches: Any,
) -> Result | None:
    """Runs MIDL.EXE on ``filename`` if any of the outputs is out of date.

    ``target_env`` is the /env switch, ``env`` the environment of the process.
    ``switches`` are the remaining fields of :class:`MidlOptions`.

    """

    opts = MidlOptions(
        tlb=tlb,
        filename=filename,
        env=target_env,
        defines=to_options(defines),
        options=to_options(options),
        **switches,
    )

    task = MidlTask(
        opts,
        base_dir=c.root,
        program=midl_executable if midl_executable is not None else PROG_FILE_NAME,
    )

    logger.debug(f"Compiling {filename!r}: {opts!r}")
    return execute(c, task, env=env)
