"""
Tunnel lifecycle: the shared managed tunnel and per-hostname dedicated tunnels.

The managed tunnel has no hot reload. Every managed start/stop regenerates
its config from the full server set and restarts the runner process.
"""

import logging

from .cloudflared import CloudflaredClient, parse_created_tunnel_id
from .config import ExposeConfig
from .errors import TunnelProvisionError
from .ingress import (
    build_dedicated_ingress,
    build_managed_ingress,
    build_tunnel_config,
    write_tunnel_config,
)
from .processes import ProcessHandle
from .state import Snapshot, TunnelRecord

logger = logging.getLogger("expose.tunnels")

DEDICATED_SUFFIX = "-tunnel"


def dedicated_tunnel_name(key: str) -> str:
    return f"{key}{DEDICATED_SUFFIX}"


class TunnelController:
    def __init__(self, config: ExposeConfig, client: CloudflaredClient | None = None):
        self.config = config
        self.client = client or CloudflaredClient()

    @property
    def managed_name(self) -> str:
        return self.config.tunnel_name

    def _create(self, name: str) -> str:
        """Create a tunnel and return its id. No retry: a retry could create duplicates."""
        logger.info("Creating Cloudflare Tunnel: %s", name)
        result = self.client.create_tunnel(name)
        if not result.ok:
            raise TunnelProvisionError(
                f"Failed to create tunnel '{name}': {result.stderr.strip() or 'cloudflared exited with an error'}",
                hint="Check that cloudflared is authenticated (cloudflared tunnel login)",
            )
        tunnel_id = self.client.get_tunnel_id(name) or parse_created_tunnel_id(result.stdout + result.stderr)
        if not tunnel_id:
            raise TunnelProvisionError(f"Tunnel '{name}' was created but its id could not be determined")
        return tunnel_id

    def _write_config(self, tunnel_config, path):
        try:
            return write_tunnel_config(tunnel_config, path)
        except OSError as e:
            raise TunnelProvisionError(f"Failed to write tunnel config {path}: {e}") from e

    def _run(self, tunnel_id: str, config_path) -> ProcessHandle:
        try:
            return self.client.run_tunnel(tunnel_id, config_path)
        except OSError as e:
            raise TunnelProvisionError(
                f"Failed to start cloudflared for tunnel {tunnel_id}: {e}",
                hint="Check that cloudflared is installed and executable",
            ) from e

    def ensure_managed(self) -> str:
        """Return the managed tunnel id, creating the tunnel on first use"""
        tunnel_id = self.client.get_tunnel_id(self.managed_name)
        if tunnel_id:
            logger.info("Using existing tunnel: %s (%s)", self.managed_name, tunnel_id)
            return tunnel_id
        return self._create(self.managed_name)

    def restart_managed(self, snapshot: Snapshot, tunnel_id: str) -> Snapshot:
        """Regenerate the managed config from snapshot and restart its runner.

        Updates the managed tunnel record in snapshot in place and returns it.
        """
        ingress = build_managed_ingress(snapshot, self.managed_name)
        tunnel_config = build_tunnel_config(tunnel_id, self.config.credentials_dir, ingress)
        config_path = self._write_config(tunnel_config, self.config.managed_config_path)

        previous = snapshot.tunnels.get(self.managed_name)
        if previous and previous.pid:
            ProcessHandle(previous.pid).terminate()

        logger.info("Starting managed tunnel with config: %s", config_path)
        handle = self._run(tunnel_id, config_path)

        snapshot.tunnels[self.managed_name] = TunnelRecord(
            id=tunnel_id,
            pid=handle.pid,
            status="running",
            config_path=str(config_path),
        )
        return snapshot

    def create_dedicated(self, name: str, hostname: str, port: int) -> TunnelRecord:
        """Create an isolated tunnel for one hostname and start its runner.

        Raises TunnelProvisionError if the tunnel cannot be created or started; the caller
        owns cleanup of any local server already started for it.
        """
        tunnel_id = self._create(name)
        tunnel_config = build_tunnel_config(
            tunnel_id,
            self.config.credentials_dir,
            build_dedicated_ingress(hostname, port),
        )
        key = name.removesuffix(DEDICATED_SUFFIX)
        config_path = self._write_config(tunnel_config, self.config.dedicated_config_path(key))

        logger.info("Starting dedicated tunnel %s with config: %s", name, config_path)
        handle = self._run(tunnel_id, config_path)
        return TunnelRecord(id=tunnel_id, pid=handle.pid, status="running", config_path=str(config_path))

    def stop_dedicated(self, snapshot: Snapshot, name: str) -> Snapshot:
        """Signal a dedicated tunnel runner and drop its record"""
        tunnel = snapshot.tunnels.pop(name, None)
        if tunnel and tunnel.pid:
            if ProcessHandle(tunnel.pid).terminate():
                logger.info("Stopped tunnel: %s (PID %s)", name, tunnel.pid)
        return snapshot

    def route_dns(self, tunnel_name: str, hostname: str) -> bool:
        """Point hostname at tunnel_name. Failure is a warning only, the record often already exists."""
        logger.info("Routing DNS: %s -> %s", hostname, tunnel_name)
        result = self.client.route_dns(tunnel_name, hostname)
        if not result.ok:
            logger.warning(
                "Failed to route DNS for %s (might already exist): %s", hostname, result.stderr.strip()
            )
            return False
        return True
