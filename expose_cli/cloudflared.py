"""
cloudflared control-plane commands.

Thin wrapper over the cloudflared binary:
    cloudflared tunnel list --output json
    cloudflared tunnel create <name>
    cloudflared tunnel route dns <tunnel> <hostname>
    cloudflared tunnel --config <path> run <id>   (detached)
"""

import json
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .processes import ProcessHandle, spawn_detached
from .subprocess_timeouts import get_timeout

logger = logging.getLogger("expose.cloudflared")


@dataclass
class CommandResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def find_cloudflared_executable() -> str | None:
    """Find the cloudflared executable on PATH or in common install locations."""
    candidates = ["cloudflared"]
    if os.name == "nt":
        candidates.extend(
            [
                r"C:\Program Files\cloudflared\cloudflared.exe",
                r"C:\Program Files (x86)\cloudflared\cloudflared.exe",
            ]
        )
    else:
        candidates.extend(
            [
                "/usr/local/bin/cloudflared",
                "/opt/homebrew/bin/cloudflared",
                "/usr/bin/cloudflared",
                str(Path.home() / ".local" / "bin" / "cloudflared"),
            ]
        )

    for cmd in candidates:
        if os.path.isabs(cmd):
            if Path(cmd).exists():
                return cmd
        else:
            found = shutil.which(cmd)
            if found:
                return found

    return None


class CloudflaredClient:
    """Runs cloudflared subcommands and reports exit status plus captured output."""

    def __init__(self, executable: str | None = None):
        self._executable = executable

    @property
    def executable(self) -> str | None:
        if self._executable is None:
            self._executable = find_cloudflared_executable()
        return self._executable

    def is_available(self) -> bool:
        return self.executable is not None

    def _run(self, args: list[str], operation: str) -> CommandResult:
        exe = self.executable or "cloudflared"
        cmd = [exe, *args]
        logger.debug("Running %s", cmd)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=get_timeout(operation),
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning("cloudflared %s timed out after %ss", " ".join(args), get_timeout(operation))
            return CommandResult(returncode=-1, stdout="", stderr=f"{operation} timed out")
        except FileNotFoundError as e:
            return CommandResult(returncode=127, stdout="", stderr=str(e))
        return CommandResult(result.returncode, result.stdout or "", result.stderr or "")

    def list_tunnels(self) -> list[dict]:
        """Return existing tunnels as dicts with at least 'id' and 'name' keys."""
        result = self._run(["tunnel", "list", "--output", "json"], "cloudflared_list")
        if not result.ok:
            logger.debug("tunnel list failed: %s", result.stderr.strip())
            return []
        try:
            data = json.loads(result.stdout or "[]")
        except json.JSONDecodeError:
            logger.warning("Could not parse cloudflared tunnel list output")
            return []
        return data if isinstance(data, list) else []

    def get_tunnel_id(self, name: str) -> str | None:
        for tunnel in self.list_tunnels():
            if tunnel.get("name") == name:
                return tunnel.get("id")
        return None

    def create_tunnel(self, name: str) -> CommandResult:
        return self._run(["tunnel", "create", name], "cloudflared_create")

    def route_dns(self, tunnel_name: str, hostname: str) -> CommandResult:
        return self._run(["tunnel", "route", "dns", tunnel_name, hostname], "cloudflared_route_dns")

    def run_tunnel(self, tunnel_id: str, config_path: Path) -> ProcessHandle:
        """Spawn the long-lived tunnel runner bound to config_path"""
        exe = self.executable or "cloudflared"
        return spawn_detached([exe, "tunnel", "--config", str(config_path), "run", tunnel_id])


def parse_created_tunnel_id(output: str) -> str | None:
    """Extract the id from 'Created tunnel <name> with id <uuid>'"""
    for line in output.splitlines():
        if "with id" in line.lower():
            return line.strip().split()[-1]
    return None
