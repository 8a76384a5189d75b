import signal
from pathlib import Path

import pytest

from expose_cli.cloudflared import CommandResult
from expose_cli.config import ExposeConfig
from expose_cli.orchestrator import Orchestrator
from expose_cli.processes import ProcessHandle
from expose_cli.state import StateStore
from expose_cli.tunnels import TunnelController


class FakeCloudflared:
    """In-memory stand-in for the cloudflared binary."""

    def __init__(self):
        self.available = True
        self.tunnels: dict[str, str] = {}
        self.fail_create: set[str] = set()
        self.fail_route = False
        self.created: list[str] = []
        self.routes: list[tuple[str, str]] = []
        self.runs: list[tuple[str, Path, int]] = []
        self._next_pid = 5000

    def is_available(self):
        return self.available

    def list_tunnels(self):
        return [{"name": name, "id": tunnel_id} for name, tunnel_id in self.tunnels.items()]

    def get_tunnel_id(self, name):
        return self.tunnels.get(name)

    def create_tunnel(self, name):
        self.created.append(name)
        if name in self.fail_create:
            return CommandResult(1, "", "tunnel create failed")
        self.tunnels[name] = f"id-{name}"
        return CommandResult(0, f"Created tunnel {name} with id id-{name}", "")

    def route_dns(self, tunnel_name, hostname):
        self.routes.append((tunnel_name, hostname))
        if self.fail_route:
            return CommandResult(1, "", "record already exists")
        return CommandResult(0, "", "")

    def run_tunnel(self, tunnel_id, config_path):
        self._next_pid += 1
        self.runs.append((tunnel_id, config_path, self._next_pid))
        return ProcessHandle(self._next_pid)


class SignalRecorder(list):
    def __init__(self):
        super().__init__()
        self.dead: set[int] = set()


class FakeSpawner:
    def __init__(self, first_pid=1000):
        self.calls = []
        self._next_pid = first_pid

    def __call__(self, argv, cwd=None, log_path=None, env=None):
        self._next_pid += 1
        self.calls.append({"argv": argv, "cwd": cwd, "log_path": log_path, "env": env, "pid": self._next_pid})
        return ProcessHandle(self._next_pid)


@pytest.fixture
def signals(monkeypatch):
    """Record SIGTERMs instead of delivering them. PIDs in .dead raise ProcessLookupError."""

    sent = SignalRecorder()

    def fake_kill(pid, sig):
        if pid in sent.dead:
            raise ProcessLookupError(pid)
        if sig == signal.SIGTERM:
            sent.append(pid)

    monkeypatch.setattr("expose_cli.processes.os.kill", fake_kill)
    return sent


@pytest.fixture
def expose_config(tmp_path):
    return ExposeConfig(
        domain="example.dev",
        tunnel_name="expose-tunnel",
        base_port=3000,
        expose_dir=tmp_path / ".expose",
        credentials_dir=tmp_path / ".cloudflared",
    )


@pytest.fixture
def cloudflared():
    return FakeCloudflared()


@pytest.fixture
def spawner():
    return FakeSpawner()


@pytest.fixture
def orchestrator(expose_config, cloudflared, spawner, signals):
    return Orchestrator(
        expose_config,
        store=StateStore(expose_config.state_file),
        controller=TunnelController(expose_config, client=cloudflared),
        spawner=spawner,
        clock=lambda: "2026-01-01T00:00:00Z",
    )


@pytest.fixture
def project_dir(tmp_path):
    project = tmp_path / "site"
    project.mkdir()
    (project / "index.html").write_text("<h1>hi</h1>")
    return project
