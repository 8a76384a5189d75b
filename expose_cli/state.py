"""
State management for expose.

Manages ~/.expose/state.json with:
- Server records (one per exposed hostname, keyed by state key)
- Tunnel records (the shared managed tunnel plus dedicated tunnels)

The file is the single source of truth. Commands load a snapshot, mutate a
copy and hand it back to save(), which rewrites the whole document.
"""

import copy
import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from .errors import CorruptState, PersistenceError

try:
    import fcntl
except ImportError:  # Windows
    fcntl = None

logger = logging.getLogger("expose.state")

TunnelMode = Literal["managed", "dedicated"]
TunnelStatus = Literal["running", "stopped"]
ServerType = Literal[
    "static",
    "node",
    "bun",
    "python-http",
    "python-app",
    "rails",
    "sinatra",
    "react",
    "external",
]


@dataclass
class ServerRecord:
    """One exposed hostname and the local process serving it."""

    subdomain: str
    domain: str
    hostname: str
    path: str
    port: int
    pid: int
    server_type: ServerType
    tunnel_mode: TunnelMode
    tunnel_name: str
    url: str
    started: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "subdomain": self.subdomain,
            "domain": self.domain,
            "hostname": self.hostname,
            "path": self.path,
            "port": self.port,
            "pid": self.pid,
            "serverType": self.server_type,
            "tunnelMode": self.tunnel_mode,
            "tunnelName": self.tunnel_name,
            "url": self.url,
            "started": self.started,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerRecord":
        return cls(
            subdomain=data["subdomain"],
            domain=data["domain"],
            hostname=data["hostname"],
            path=data.get("path", ""),
            port=int(data["port"]),
            pid=int(data.get("pid") or 0),
            server_type=data["serverType"],
            tunnel_mode=data["tunnelMode"],
            tunnel_name=data["tunnelName"],
            url=data["url"],
            started=data["started"],
        )

    def descriptor(self) -> dict[str, Any]:
        """Public view emitted by start/list"""
        return {
            "hostname": self.hostname,
            "url": self.url,
            "port": self.port,
            "type": self.server_type,
            "tunnelMode": self.tunnel_mode,
        }


@dataclass
class TunnelRecord:
    """A tunnel known to the control plane and the local process running it."""

    id: str
    pid: int | None
    status: TunnelStatus
    config_path: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "pid": self.pid,
            "status": self.status,
            "configPath": self.config_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TunnelRecord":
        pid = data.get("pid")
        return cls(
            id=data["id"],
            pid=int(pid) if pid else None,
            status=data.get("status", "stopped"),
            config_path=data.get("configPath", ""),
        )


@dataclass
class Snapshot:
    """Working copy of the persisted {tunnels, servers} document."""

    tunnels: dict[str, TunnelRecord] = field(default_factory=dict)
    servers: dict[str, ServerRecord] = field(default_factory=dict)

    def copy(self) -> "Snapshot":
        return copy.deepcopy(self)

    def claimed_ports(self) -> list[int]:
        return [server.port for server in self.servers.values()]

    def to_dict(self) -> dict[str, Any]:
        return {
            "tunnels": {name: tunnel.to_dict() for name, tunnel in self.tunnels.items()},
            "servers": {key: server.to_dict() for key, server in self.servers.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Snapshot":
        tunnels = data.get("tunnels", {})
        servers = data.get("servers", {})
        if not isinstance(tunnels, dict) or not isinstance(servers, dict):
            raise ValueError("tunnels and servers must be objects")
        return cls(
            tunnels={name: TunnelRecord.from_dict(t) for name, t in tunnels.items()},
            servers={key: ServerRecord.from_dict(s) for key, s in servers.items()},
        )


def serialize_snapshot(snapshot: Snapshot) -> str:
    """Render the persisted document; stable for identical snapshots"""
    return json.dumps(snapshot.to_dict(), indent=2) + "\n"


class StateStore:
    """
    Reads and writes the state document.

    No merging and no partial writes: save() replaces the whole file. Callers
    that mutate state should hold lock() across load-mutate-save.
    """

    def __init__(self, state_file: Path):
        self.state_file = Path(state_file)
        self.lock_file = self.state_file.with_name(self.state_file.name + ".lock")

    def _ensure_dirs(self):
        self.state_file.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> Snapshot:
        """Return the persisted snapshot, or an empty one if no state exists yet"""
        self._ensure_dirs()
        if not self.state_file.exists():
            return Snapshot()

        try:
            with open(self.state_file, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("state document must be an object")
            return Snapshot.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise CorruptState(
                f"Failed to parse state file {self.state_file}: {e}",
                hint=f"Try deleting {self.state_file} and try again",
            ) from e

    def save(self, snapshot: Snapshot) -> None:
        """Overwrite the state file with snapshot"""
        try:
            self._ensure_dirs()
            tmp = self.state_file.with_suffix(".tmp")
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(serialize_snapshot(snapshot))

            if sys.platform != "win32":
                tmp.chmod(0o600)

            tmp.replace(self.state_file)
        except OSError as e:
            raise PersistenceError(f"Failed to save state file {self.state_file}: {e}") from e

    @contextmanager
    def lock(self) -> Iterator[None]:
        """Advisory exclusive lock around a load-mutate-save sequence.

        Blocks while another expose invocation holds the lock. No-op where
        fcntl is unavailable.
        """
        if fcntl is None:
            yield
            return

        self._ensure_dirs()
        fh = open(self.lock_file, "a+")
        try:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
        finally:
            fh.close()
