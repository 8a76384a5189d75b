"""Hostname parsing.

Turns user input into (subdomain, domain, hostname, key):

    "demo"                   -> demo.<default domain>, key "demo"
    "api.local"              -> api.local.<default domain>, key "api.local"
    "api.staging.example.io" -> subdomain "api.staging", domain "example.io",
                                key "api-staging-example-io"

Inputs with one or two labels are always treated as a subdomain of the default
domain. "foo.com" therefore becomes "foo.com.<default domain>", not the apex
"foo.com". Pass three or more labels to target another domain.
"""

from dataclasses import dataclass

from .errors import InvalidHostname


@dataclass(frozen=True)
class ParsedHostname:
    subdomain: str
    domain: str
    hostname: str
    key: str


def parse_hostname(raw: str, default_domain: str) -> ParsedHostname:
    """Parse a user supplied name against the configured default domain."""
    if not raw:
        raise InvalidHostname("Hostname cannot be empty", hint="Usage: expose start <name>")

    parts = raw.split(".")
    if len(parts) <= 2:
        return ParsedHostname(
            subdomain=raw,
            domain=default_domain,
            hostname=f"{raw}.{default_domain}",
            key=raw,
        )

    return ParsedHostname(
        subdomain=".".join(parts[:-2]),
        domain=".".join(parts[-2:]),
        hostname=raw,
        key=raw.replace(".", "-"),
    )
