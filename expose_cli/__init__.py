"""
expose - publish local directories and services on public hostnames
through Cloudflare Tunnel.
"""

__version__ = "1.0.0"

from .config import ExposeConfig, load_config
from .hostname import ParsedHostname, parse_hostname
from .orchestrator import Orchestrator
from .state import ServerRecord, Snapshot, StateStore, TunnelRecord
from .tunnels import TunnelController

__all__ = [
    "ExposeConfig",
    "load_config",
    "ParsedHostname",
    "parse_hostname",
    "Orchestrator",
    "ServerRecord",
    "Snapshot",
    "StateStore",
    "TunnelRecord",
    "TunnelController",
    "__version__",
]
