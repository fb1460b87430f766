from __future__ import annotations
from typing import Any

from argparse import ArgumentParser
import logging
import os
import os.path
import sys

from hcontrib import Config, Context, TaskError
from hcontrib.progs import midl, vb6


def _handler_help(parser: ArgumentParser, c: Context, args: Any) -> None:
    _ = c, args

    parser.print_help()


def _handler_midl(parser: ArgumentParser, c: Context, args: Any) -> None:
    _ = parser

    midl.compile(
        c,
        args.filename,
        tlb=args.tlb,
        header=args.header,
        iid=args.iid,
        proxy=args.proxy,
        acf=args.acf,
        align=args.align,
        app_config=args.app_config,
        char=args.char,
        client=args.client,
        cstub=args.cstub,
        dlldata=args.dlldata,
        target_env=args.target_env,
        oi=args.oi,
        defines=[midl.Option.parse(d) for d in args.defines],
        options=[midl.Option.parse(o) for o in args.options],
        midl_executable=args.executable,
    )


def _handler_vb6(parser: ArgumentParser, c: Context, args: Any) -> None:
    _ = parser

    vb6.make(
        c,
        args.project,
        outdir=args.outdir,
        error_file=args.error_file,
        check_references=args.check_references,
        skip_broken_projects=args.skip_broken_projects,
        vb6_executable=args.executable,
    )


def make_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="hcontrib")
    parser.set_defaults(handler=_handler_help)

    parser.add_argument("-C", "--directory", dest="working_dir", default=None)
    parser.add_argument("-v", "--verbose", dest="verbose", action="store_true")
    parser.add_argument(
        "-n", "--dry-run", dest="dry_run", default=False, action="store_true"
    )
    parser.add_argument(
        "-q", "--quiet", dest="echo", default=True, action="store_false"
    )

    subparsers = parser.add_subparsers()

    help_parser = subparsers.add_parser("help")
    help_parser.set_defaults(handler=_handler_help)

    midl_parser = subparsers.add_parser("midl", help="Compile an .IDL file with MIDL.EXE")
    midl_parser.set_defaults(handler=_handler_midl)
    midl_parser.add_argument("filename")
    midl_parser.add_argument("--tlb", dest="tlb", required=True)
    midl_parser.add_argument("--header", dest="header", default=None)
    midl_parser.add_argument("--iid", dest="iid", default=None)
    midl_parser.add_argument("--proxy", dest="proxy", default=None)
    midl_parser.add_argument("--acf", dest="acf", default=None)
    midl_parser.add_argument("--align", dest="align", default=None)
    midl_parser.add_argument(
        "--app-config", dest="app_config", default=False, action="store_true"
    )
    midl_parser.add_argument("--char", dest="char", default=None)
    midl_parser.add_argument("--client", dest="client", default=None)
    midl_parser.add_argument("--cstub", dest="cstub", default=None)
    midl_parser.add_argument("--dlldata", dest="dlldata", default=None)
    midl_parser.add_argument("--env", dest="target_env", default=midl.DEFAULT_ENV)
    midl_parser.add_argument("--Oi", dest="oi", default=None)
    midl_parser.add_argument(
        "-D", "--define", dest="defines", action="append", default=[],
        metavar="NAME[=VALUE]",
    )
    midl_parser.add_argument(
        "-O", "--option", dest="options", action="append", default=[],
        metavar="SWITCH[=VALUE]",
    )
    midl_parser.add_argument("--executable", dest="executable", default=None)

    vb6_parser = subparsers.add_parser("vb6", help="Build a Visual Basic 6 project or group")
    vb6_parser.set_defaults(handler=_handler_vb6)
    vb6_parser.add_argument("project")
    vb6_parser.add_argument("--outdir", dest="outdir", default=None)
    vb6_parser.add_argument("--errorfile", dest="error_file", default=None)
    vb6_parser.add_argument(
        "--no-check-references", dest="check_references", default=True,
        action="store_false",
    )
    vb6_parser.add_argument(
        "--skip-broken-projects", dest="skip_broken_projects", default=False,
        action="store_true",
    )
    vb6_parser.add_argument("--executable", dest="executable", default=None)

    return parser


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv
    argv = argv[1:]

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    logger = logging.getLogger("hcontrib")

    parser = make_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    working_dir = os.path.abspath(
        args.working_dir if args.working_dir is not None else os.getcwd()
    )

    c = Context(
        root=working_dir,
        config=Config(
            dry_run=args.dry_run,
            echo=args.echo,
        ),
    )

    try:
        args.handler(parser, c, args)
    except TaskError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
