"""Error taxonomy for expose commands.

Core components raise these; only the CLI front end turns them into exit codes.
"""


class ExposeError(Exception):
    """Base class for all expected, user-facing failures."""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class InvalidHostname(ExposeError):
    """Hostname input could not be parsed."""


class InvalidPort(ExposeError):
    """Port outside the valid TCP range."""


class AlreadyInUse(ExposeError):
    """A server record already exists under the requested key."""


class NotFound(ExposeError):
    """No server record matches the requested name."""


class NotConfigured(ExposeError):
    """The default domain has not been configured yet."""


class DependencyMissing(ExposeError):
    """A required external binary (cloudflared) is not installed."""


class CorruptState(ExposeError):
    """The persisted state file cannot be parsed."""


class PersistenceError(ExposeError):
    """Writing the state file failed."""


class TunnelProvisionError(ExposeError):
    """The control plane refused or failed to create a tunnel."""
