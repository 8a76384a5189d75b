"""
Start/stop sequencing for exposed hostnames.

Per state key a hostname moves absent -> starting -> active -> stopping -> absent.
Only absent and active are ever persisted: each command loads a snapshot,
works on a copy, and saves once at the very end, so a crash mid-sequence never
leaves a persisted server without its route.

start:  parse -> check cloudflared -> resolve port / spawn server
        -> dedicated: create tunnel (terminate server on failure) -> route DNS
        -> managed:   ensure tunnel -> add record -> regenerate + restart -> route DNS
        -> save
stop:   resolve key -> terminate server -> drop record
        -> dedicated: stop tunnel runner, drop tunnel record
        -> managed:   regenerate + restart without the hostname
        -> save
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import ExposeConfig
from .errors import AlreadyInUse, DependencyMissing, NotFound, TunnelProvisionError
from .hostname import parse_hostname
from .launch import LaunchPlan, detect_launch_plan
from .output import print_info, print_success, print_warning
from .platform import install_hint_cloudflared
from .ports import next_available_port, validate_port
from .processes import SENTINEL_PID, ProcessHandle, spawn_detached
from .state import ServerRecord, Snapshot, StateStore
from .tunnels import TunnelController, dedicated_tunnel_name

logger = logging.getLogger("expose.orchestrator")

LaunchPlanner = Callable[[Path, int], LaunchPlan]
Spawner = Callable[..., ProcessHandle]


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def find_server_key(snapshot: Snapshot, raw: str, default_domain: str) -> str | None:
    """Resolve user input to a state key: exact key, then hostname, then subdomain/key."""
    if not raw:
        return None
    parsed = parse_hostname(raw, default_domain)

    if parsed.key in snapshot.servers:
        return parsed.key

    for key, server in snapshot.servers.items():
        if server.hostname in (parsed.hostname, raw):
            return key

    for key, server in snapshot.servers.items():
        if raw in (server.subdomain, key):
            return key

    return None


class Orchestrator:
    """Runs the start/stop state machine against one state file."""

    def __init__(
        self,
        config: ExposeConfig,
        store: StateStore | None = None,
        controller: TunnelController | None = None,
        planner: LaunchPlanner = detect_launch_plan,
        spawner: Spawner = spawn_detached,
        clock: Callable[[], str] = utc_now,
    ):
        self.config = config
        self.store = store or StateStore(config.state_file)
        self.controller = controller or TunnelController(config)
        self.planner = planner
        self.spawner = spawner
        self.clock = clock

    # ─────────────────────────────────────────────────────────────
    # start
    # ─────────────────────────────────────────────────────────────

    def _launch(self, key: str, directory: Path, port: int) -> tuple[LaunchPlan, ProcessHandle]:
        print_info(f"Detecting server type in {directory}...")
        plan = self.planner(directory, port)
        print_info(f"Starting {plan.kind} server on port {port}...")
        try:
            handle = self.spawner(plan.argv, cwd=directory, log_path=self.config.log_path(key), env=plan.env)
        except OSError as e:
            raise DependencyMissing(f"Failed to start {plan.kind} server with '{plan.command}': {e}") from e
        logger.debug("Server for %s running as PID %s", key, handle.pid)
        return plan, handle

    def start(
        self,
        hostname_input: str,
        directory: Path | str,
        dedicated: bool = False,
        external_port: int | None = None,
    ) -> dict[str, Any]:
        """Expose a directory (or an already running service) under a hostname."""
        directory = Path(directory).resolve()
        parsed = parse_hostname(hostname_input, self.config.domain)

        with self.store.lock():
            snapshot = self.store.load()
            if parsed.key in snapshot.servers:
                raise AlreadyInUse(
                    f"'{parsed.hostname}' is already in use",
                    hint=f"Run 'expose stop {hostname_input}' first",
                )
            for key, server in snapshot.servers.items():
                if server.hostname == parsed.hostname:
                    raise AlreadyInUse(
                        f"'{parsed.hostname}' is already in use",
                        hint=f"Run 'expose stop {key}' first",
                    )

            if not self.controller.client.is_available():
                raise DependencyMissing("cloudflared is not installed", hint=install_hint_cloudflared())

            working = snapshot.copy()
            handle = ProcessHandle(SENTINEL_PID)
            if external_port is not None:
                port = validate_port(external_port)
                if port in working.claimed_ports():
                    raise AlreadyInUse(f"Port {port} is already claimed by another server")
                server_type = "external"
                print_info(f"Exposing existing service on port {port}...")
            else:
                port = next_available_port(working.claimed_ports(), self.config.base_port)
                plan, handle = self._launch(parsed.key, directory, port)
                server_type = plan.kind

            tunnel_mode = "dedicated" if dedicated else "managed"
            tunnel_name = dedicated_tunnel_name(parsed.key) if dedicated else self.controller.managed_name
            record = ServerRecord(
                subdomain=parsed.subdomain,
                domain=parsed.domain,
                hostname=parsed.hostname,
                path="" if server_type == "external" else str(directory),
                port=port,
                pid=handle.pid,
                server_type=server_type,
                tunnel_mode=tunnel_mode,
                tunnel_name=tunnel_name,
                url=f"https://{parsed.hostname}",
                started=self.clock(),
            )

            try:
                if dedicated:
                    tunnel = self.controller.create_dedicated(tunnel_name, parsed.hostname, port)
                    working.tunnels[tunnel_name] = tunnel
                    working.servers[parsed.key] = record
                else:
                    tunnel_id = self.controller.ensure_managed()
                    working.servers[parsed.key] = record
                    self.controller.restart_managed(working, tunnel_id)
            except TunnelProvisionError:
                if handle.is_owned:
                    print_warning(f"Stopping server PID {handle.pid} started for {parsed.hostname}")
                    handle.terminate()
                raise

            if not self.controller.route_dns(tunnel_name, parsed.hostname):
                print_warning(f"Failed to route DNS for {parsed.hostname} (might already exist)")

            self.store.save(working)

        print_success(f"Exposed {record.url} -> localhost:{port}")
        result = record.descriptor()
        if server_type != "external":
            result["logFile"] = str(self.config.log_path(parsed.key))
        return result

    # ─────────────────────────────────────────────────────────────
    # stop
    # ─────────────────────────────────────────────────────────────

    def stop(self, hostname_input: str) -> dict[str, Any]:
        """Stop a server, remove its record and withdraw its route."""
        with self.store.lock():
            snapshot = self.store.load()
            key = find_server_key(snapshot, hostname_input, self.config.domain)
            if key is None:
                raise NotFound(f"No server found for '{hostname_input}'", hint="Run 'expose list' to see servers")

            working = snapshot.copy()
            server = working.servers.pop(key)

            if server.pid > SENTINEL_PID:
                if ProcessHandle(server.pid).terminate():
                    print_info(f"Stopped server: {server.hostname} (PID {server.pid})")
                else:
                    print_warning(f"Failed to stop process {server.pid} (might already be dead)")
            else:
                print_info(f"Removing tunnel for external service: {server.hostname}")

            if server.tunnel_mode == "dedicated":
                self.controller.stop_dedicated(working, server.tunnel_name)
            else:
                managed = working.tunnels.get(self.controller.managed_name)
                if managed:
                    self.controller.restart_managed(working, managed.id)

            self.store.save(working)

        return {"hostname": server.hostname, "status": "stopped"}

    # ─────────────────────────────────────────────────────────────
    # read-only views
    # ─────────────────────────────────────────────────────────────

    def list_servers(self) -> list[dict[str, Any]]:
        snapshot = self.store.load()
        return [server.to_dict() for server in snapshot.servers.values()]

    def status(self) -> dict[str, Any]:
        snapshot = self.store.load()
        return {**snapshot.to_dict(), "stateFile": str(self.store.state_file)}

    def resolve(self, hostname_input: str) -> tuple[str, ServerRecord]:
        snapshot = self.store.load()
        key = find_server_key(snapshot, hostname_input, self.config.domain)
        if key is None:
            raise NotFound(f"No server found for '{hostname_input}'")
        return key, snapshot.servers[key]
