from __future__ import annotations
from typing import Iterable, Sequence

from logging import getLogger
import os
import os.path

from hcontrib.errors import FilesystemAccessError, MissingInputFile

__all__ = ("resolve", "last_write_time", "find_more_recent", "needs_rebuild")

logger = getLogger("staleness")


def resolve(path: str, base_dir: str | None = None) -> str:
    if base_dir is not None and not os.path.isabs(path):
        path = os.path.join(base_dir, path)
    return os.path.abspath(path)


def last_write_time(path: str) -> float | None:
    try:
        return os.stat(path).st_mtime
    except FileNotFoundError:
        return None
    except OSError as e:
        raise FilesystemAccessError(path, "stat", str(e)) from e


def find_more_recent(
    paths: Iterable[str],
    timestamp: float,
    *,
    missing_ok=False,
) -> str | None:
    """Returns the first file that was written strictly after ``timestamp``.

    :param missing_ok: Skip files that don't exist instead of failing with
        :class:`MissingInputFile`.

    """

    for path in paths:
        mtime = last_write_time(path)

        if mtime is None:
            if missing_ok:
                logger.warning(f"Can't find {path!r}, ignoring it in up-to-date check")
                continue
            raise MissingInputFile(path)

        if mtime > timestamp:
            return path

    return None


def needs_rebuild(
    outputs: Sequence[str],
    inputs: Sequence[str],
    *,
    base_dir: str | None = None,
    missing_ok=False,
) -> bool:
    output_times: list[float] = []

    for output in outputs:
        output = resolve(output, base_dir)
        mtime = last_write_time(output)

        if mtime is None:
            logger.info(f"Output file {output!r} does not exist, recompiling.")
            return True

        output_times.append(mtime)

    if len(output_times) == 0:
        return True

    newer = find_more_recent(
        (resolve(i, base_dir) for i in inputs),
        min(output_times),
        missing_ok=missing_ok,
    )

    if newer is not None:
        logger.info(f"{newer!r} is out of date, recompiling.")
        return True

    return False
