"""Tests for the append-only failure log."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from image_mirror.failures import FailureLog


def test_record_appends_lines(tmp_path: Path) -> None:
    log = FailureLog(tmp_path / "failed.log")

    log.record("Pull failed: a:1")
    log.record("Push failed: b:2")

    assert log.path.read_text() == "Pull failed: a:1\nPush failed: b:2\n"
    assert log.count() == 2


def test_existing_file_is_never_truncated(tmp_path: Path) -> None:
    """A second run appends to the records of the first."""
    path = tmp_path / "failed.log"
    FailureLog(path).record("Pull failed: first:1")

    second = FailureLog(path)
    second.record("Pull failed: second:1")

    assert path.read_text().splitlines() == ["Pull failed: first:1", "Pull failed: second:1"]
    assert second.count() == 1


def test_concurrent_records_are_whole_lines(tmp_path: Path) -> None:
    log = FailureLog(tmp_path / "failed.log")

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(lambda i: log.record(f"Push failed: repo:{i}"), range(200)))

    lines = log.path.read_text().splitlines()
    assert len(lines) == 200
    assert sorted(lines) == sorted(f"Push failed: repo:{i}" for i in range(200))
    assert log.count() == 200


def test_markup_like_text_is_written_verbatim(tmp_path: Path) -> None:
    log = FailureLog(tmp_path / "failed.log")

    log.record("Push failed: [bold]x:1")

    assert log.path.read_text() == "Push failed: [bold]x:1\n"
