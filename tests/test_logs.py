"""Tests for per-server log access"""

import pytest

from expose_cli.errors import NotFound
from expose_cli.logs import read_log


def test_read_whole_log(tmp_path):
    log = tmp_path / "demo.log"
    log.write_text("a\nb\n")
    assert read_log(log) == "a\nb\n"


def test_tail(tmp_path):
    log = tmp_path / "demo.log"
    log.write_text("".join(f"line {i}\n" for i in range(10)))
    assert read_log(log, lines=3) == "line 7\nline 8\nline 9\n"


def test_tail_longer_than_file(tmp_path):
    log = tmp_path / "demo.log"
    log.write_text("only\n")
    assert read_log(log, lines=50) == "only\n"


def test_missing_log(tmp_path):
    with pytest.raises(NotFound):
        read_log(tmp_path / "nope.log")
