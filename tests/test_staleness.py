from pathlib import Path
import logging
import os

import pytest

from hcontrib import staleness
from hcontrib.errors import FilesystemAccessError, MissingInputFile

T = 1_700_000_000


def test_missing_output_forces_rebuild_regardless_of_inputs(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "a.idl", mtime=T - 1000)

    assert staleness.needs_rebuild([str(tmp_path / "a.tlb")], [str(tmp_path / "a.idl")])


def test_any_missing_output_forces_rebuild(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "a.idl", mtime=T - 1000)
    write_file(tmp_path / "a.tlb", mtime=T)

    outputs = [str(tmp_path / "a.tlb"), str(tmp_path / "a.h")]
    assert staleness.needs_rebuild(outputs, [str(tmp_path / "a.idl")])


def test_older_inputs_are_up_to_date(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "out.exe", mtime=T)
    inputs = [
        str(write_file(tmp_path / "a.frm", mtime=T - 10)),
        str(write_file(tmp_path / "b.cls", mtime=T - 20)),
    ]

    assert not staleness.needs_rebuild([str(tmp_path / "out.exe")], inputs)

    inputs.append(str(write_file(tmp_path / "c.bas", mtime=T + 10)))
    assert staleness.needs_rebuild([str(tmp_path / "out.exe")], inputs)


def test_equal_timestamp_is_not_stale(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "out.exe", mtime=T)
    write_file(tmp_path / "a.frm", mtime=T)

    assert not staleness.needs_rebuild([str(tmp_path / "out.exe")], [str(tmp_path / "a.frm")])


def test_inputs_are_compared_against_oldest_output(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "a.tlb", mtime=T + 100)
    write_file(tmp_path / "a.h", mtime=T - 100)
    write_file(tmp_path / "a.idl", mtime=T)

    outputs = [str(tmp_path / "a.tlb"), str(tmp_path / "a.h")]
    assert staleness.needs_rebuild(outputs, [str(tmp_path / "a.idl")])


def test_empty_inputs_are_up_to_date(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "out.exe", mtime=T)

    assert not staleness.needs_rebuild([str(tmp_path / "out.exe")], [])


def test_relative_paths_are_resolved_against_base_dir(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "build" / "a.tlb", mtime=T)
    write_file(tmp_path / "a.idl", mtime=T - 1)

    assert not staleness.needs_rebuild(
        [os.path.join("build", "a.tlb")], ["a.idl"], base_dir=str(tmp_path)
    )


def test_missing_input_is_fatal(tmp_path: Path, write_file) -> None:
    write_file(tmp_path / "out.exe", mtime=T)

    with pytest.raises(MissingInputFile) as e:
        staleness.needs_rebuild([str(tmp_path / "out.exe")], [str(tmp_path / "gone.frm")])

    assert e.value.path == str(tmp_path / "gone.frm")


def test_missing_input_can_be_skipped(
    tmp_path: Path, write_file, caplog: pytest.LogCaptureFixture
) -> None:
    write_file(tmp_path / "out.exe", mtime=T)

    with caplog.at_level(logging.WARNING, logger="staleness"):
        assert not staleness.needs_rebuild(
            [str(tmp_path / "out.exe")], [str(tmp_path / "stdole2.tlb")], missing_ok=True
        )

    assert "stdole2.tlb" in caplog.text


def test_find_more_recent_returns_first_newer_file(tmp_path: Path, write_file) -> None:
    old = write_file(tmp_path / "old.cls", mtime=T - 1)
    new1 = write_file(tmp_path / "new1.cls", mtime=T + 1)
    new2 = write_file(tmp_path / "new2.cls", mtime=T + 2)

    assert staleness.find_more_recent([str(old), str(new1), str(new2)], T) == str(new1)
    assert staleness.find_more_recent([str(old)], T) is None


def test_stat_errors_are_reported(tmp_path: Path, write_file) -> None:
    not_a_dir = write_file(tmp_path / "file.txt")

    with pytest.raises(FilesystemAccessError) as e:
        staleness.last_write_time(str(not_a_dir / "out.exe"))

    assert e.value.operation == "stat"
