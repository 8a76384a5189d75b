"""Local port allocation"""

from collections.abc import Iterable

from .errors import InvalidPort


def next_available_port(claimed: Iterable[int], base_port: int) -> int:
    """Return the lowest port >= base_port not already claimed by a server record.

    Nothing is reserved here: the caller commits the port together with the
    server record it belongs to.
    """
    used = set(claimed)
    port = base_port
    while port in used:
        port += 1
    return port


def validate_port(port: int) -> int:
    """Validate a user supplied port number"""
    if port < 1 or port > 65535:
        raise InvalidPort(f"Invalid port number: {port}", hint="Port must be between 1 and 65535")
    return port
