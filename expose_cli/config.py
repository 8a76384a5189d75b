"""Configuration for expose: default domain, managed tunnel name and base port.

Resolved once per invocation with precedence environment > config.json > defaults,
then passed explicitly to the components that need it.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path

logger = logging.getLogger("expose.config")

DEFAULT_DOMAIN = "example.com"
DEFAULT_TUNNEL_NAME = "expose-tunnel"
DEFAULT_BASE_PORT = 3000

ENV_VARS = ("EXPOSE_DOMAIN", "EXPOSE_TUNNEL_NAME", "EXPOSE_BASE_PORT")


def get_expose_dir() -> Path:
    """Get the ~/.expose directory path (EXPOSE_HOME overrides)"""
    env_home = os.getenv("EXPOSE_HOME", "").strip()
    if env_home:
        return Path(env_home).expanduser()
    return Path.home() / ".expose"


@dataclass(frozen=True)
class ExposeConfig:
    """Settings threaded through the orchestrator and tunnel controller."""

    domain: str = DEFAULT_DOMAIN
    tunnel_name: str = DEFAULT_TUNNEL_NAME
    base_port: int = DEFAULT_BASE_PORT
    expose_dir: Path = field(default_factory=get_expose_dir)
    credentials_dir: Path = field(default_factory=lambda: Path.home() / ".cloudflared")

    @property
    def state_file(self) -> Path:
        return self.expose_dir / "state.json"

    @property
    def config_file(self) -> Path:
        return self.expose_dir / "config.json"

    @property
    def logs_dir(self) -> Path:
        return self.expose_dir / "logs"

    @property
    def managed_config_path(self) -> Path:
        return self.expose_dir / "tunnel-config.yml"

    def dedicated_config_path(self, key: str) -> Path:
        return self.expose_dir / f"tunnel-{key}.yml"

    def log_path(self, key: str) -> Path:
        return self.logs_dir / f"{key}.log"

    @property
    def is_configured(self) -> bool:
        """False while the domain is still the placeholder default"""
        return self.domain != DEFAULT_DOMAIN

    def with_domain(self, domain: str) -> "ExposeConfig":
        return replace(self, domain=domain)

    def to_dict(self) -> dict:
        """Public, persisted part of the configuration"""
        data = asdict(self)
        return {
            "domain": data["domain"],
            "tunnelName": data["tunnel_name"],
            "basePort": data["base_port"],
        }


def _read_config_file(path: Path) -> dict:
    """Load config.json, ignoring a missing or malformed file"""
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: expected a JSON object", path)
        return {}
    return data


def load_config(expose_dir: Path | None = None) -> ExposeConfig:
    """Resolve configuration from environment, config file and defaults."""
    expose_dir = expose_dir or get_expose_dir()
    file_config = _read_config_file(expose_dir / "config.json")

    domain = os.getenv("EXPOSE_DOMAIN", "").strip() or file_config.get("domain") or DEFAULT_DOMAIN
    tunnel_name = (
        os.getenv("EXPOSE_TUNNEL_NAME", "").strip() or file_config.get("tunnelName") or DEFAULT_TUNNEL_NAME
    )

    base_port = file_config.get("basePort") or DEFAULT_BASE_PORT
    env_port = os.getenv("EXPOSE_BASE_PORT", "").strip()
    if env_port:
        if env_port.isdigit():
            base_port = int(env_port)
        else:
            logger.warning("Ignoring non-numeric EXPOSE_BASE_PORT=%r", env_port)

    return ExposeConfig(
        domain=domain,
        tunnel_name=tunnel_name,
        base_port=int(base_port),
        expose_dir=expose_dir,
    )


def save_config(config: ExposeConfig) -> Path:
    """Write config.json atomically and return its path"""
    path = config.config_file
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
        f.write("\n")
    tmp.replace(path)
    return path


def environment_overrides() -> dict[str, str | None]:
    """Current values of the configuration environment variables"""
    return {name: os.getenv(name) or None for name in ENV_VARS}
