"""
Timeouts for synchronous subprocess calls.

Every blocking call into cloudflared or a platform helper uses one of these so
a hung binary fails the command instead of hanging the CLI forever. Long-lived
processes (tunnel runners, local servers) are spawned detached and never waited on.
"""

# Short operations (< 5 seconds)
TIMEOUT_QUICK = 5
"""Quick operations: process signalling."""

# Standard operations (< 30 seconds)
TIMEOUT_STANDARD = 30
"""Standard operations: listing tunnels, most control-plane commands."""

# Long operations (< 60 seconds)
TIMEOUT_LONG = 60
"""Long operations: tunnel creation, DNS record changes."""


TIMEOUTS = {
    # cloudflared control plane
    "cloudflared_list": TIMEOUT_STANDARD,
    "cloudflared_create": TIMEOUT_LONG,
    "cloudflared_route_dns": TIMEOUT_LONG,
    # Windows process helpers
    "taskkill": TIMEOUT_QUICK,
}


def get_timeout(operation: str, default: int = TIMEOUT_STANDARD) -> int:
    """
    Get the timeout for a specific operation.

    Examples:
        >>> get_timeout("taskkill")
        5
        >>> get_timeout("cloudflared_create")
        60
        >>> get_timeout("unknown_operation")
        30
    """
    return TIMEOUTS.get(operation, default)
