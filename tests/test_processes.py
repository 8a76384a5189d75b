"""Tests for detached process handling"""

import os
import sys

import pytest

from expose_cli.processes import SENTINEL_PID, ProcessHandle, spawn_detached


def test_sentinel_is_never_signalled(signals):
    handle = ProcessHandle(SENTINEL_PID)

    assert not handle.is_owned
    assert handle.terminate() is False
    assert handle.is_alive() is False
    assert signals == []


def test_terminate_sends_sigterm(signals):
    assert ProcessHandle(4321).terminate() is True
    assert signals == [4321]


def test_terminate_dead_process_returns_false(signals):
    signals.dead.add(4321)
    assert ProcessHandle(4321).terminate() is False


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX process model")
def test_spawn_detached_writes_log(tmp_path):
    log_path = tmp_path / "logs" / "demo.log"

    handle = spawn_detached(
        [sys.executable, "-c", "import os; print('hello', os.environ['EXPOSE_TEST_VALUE'])"],
        cwd=tmp_path,
        log_path=log_path,
        env={"EXPOSE_TEST_VALUE": "42"},
    )
    os.waitpid(handle.pid, 0)

    assert handle.pid > SENTINEL_PID
    assert log_path.read_text().strip() == "hello 42"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX process model")
def test_spawn_detached_appends(tmp_path):
    log_path = tmp_path / "demo.log"
    log_path.write_text("previous run\n")

    handle = spawn_detached([sys.executable, "-c", "print('next run')"], log_path=log_path)
    os.waitpid(handle.pid, 0)

    assert log_path.read_text() == "previous run\nnext run\n"
