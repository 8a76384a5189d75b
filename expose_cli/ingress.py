"""
Routing config generation for cloudflared.

cloudflared matches ingress rules top to bottom and rejects a config whose
last rule is not a hostname-less catch-all, so CATCH_ALL is always appended last.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .state import Snapshot

CATCH_ALL_SERVICE = "http_status:404"


@dataclass(frozen=True)
class IngressRule:
    service: str
    hostname: str | None = None

    def to_dict(self) -> dict[str, str]:
        if self.hostname is None:
            return {"service": self.service}
        return {"hostname": self.hostname, "service": self.service}


CATCH_ALL = IngressRule(service=CATCH_ALL_SERVICE)


def local_service(port: int) -> str:
    return f"http://localhost:{port}"


@dataclass
class TunnelConfig:
    """The document cloudflared reads with `tunnel --config <path> run`."""

    tunnel: str
    credentials_file: str
    ingress: list[IngressRule] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tunnel": self.tunnel,
            "credentials-file": self.credentials_file,
            "ingress": [rule.to_dict() for rule in self.ingress],
        }


def build_managed_ingress(snapshot: Snapshot, tunnel_name: str) -> list[IngressRule]:
    """One rule per managed-mode server on tunnel_name, in snapshot order, then the catch-all."""
    rules = [
        IngressRule(hostname=server.hostname, service=local_service(server.port))
        for server in snapshot.servers.values()
        if server.tunnel_mode == "managed" and server.tunnel_name == tunnel_name
    ]
    rules.append(CATCH_ALL)
    return rules


def build_dedicated_ingress(hostname: str, port: int) -> list[IngressRule]:
    return [IngressRule(hostname=hostname, service=local_service(port)), CATCH_ALL]


def credentials_path(credentials_dir: Path, tunnel_id: str) -> Path:
    return credentials_dir / f"{tunnel_id}.json"


def build_tunnel_config(tunnel_id: str, credentials_dir: Path, ingress: list[IngressRule]) -> TunnelConfig:
    return TunnelConfig(
        tunnel=tunnel_id,
        credentials_file=str(credentials_path(credentials_dir, tunnel_id)),
        ingress=ingress,
    )


def render_tunnel_config(config: TunnelConfig) -> str:
    return yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False)


def write_tunnel_config(config: TunnelConfig, path: Path) -> Path:
    """Write the routing config YAML, replacing any previous version"""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(render_tunnel_config(config), encoding="utf-8")
    tmp.replace(path)
    return path
