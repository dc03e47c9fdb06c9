"""Target service settings for the integration suite."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

HOSTNAME_VARIABLES = ("IOTHUB_MANAGER_WS_HOSTNAME", "WS_HOSTNAME")
PULL_REQUEST_VARIABLES = ("TRAVIS_PULL_REQUEST", "CI_PULL_REQUEST")


def is_pull_request(environ: Mapping[str, str]) -> bool:
    """CI providers set these to ``false`` on branch builds, a PR number otherwise."""
    for name in PULL_REQUEST_VARIABLES:
        value = environ.get(name)
        if value and value.strip().lower() != "false":
            return True
    return False


@dataclass(frozen=True)
class IntegrationSettings:
    hostname: Optional[str]
    credentials_available: bool

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "IntegrationSettings":
        hostname = next(
            (environ[name] for name in HOSTNAME_VARIABLES if environ.get(name)), None
        )
        return cls(
            hostname=hostname.rstrip("/") if hostname else None,
            credentials_available=bool(hostname) and not is_pull_request(environ),
        )
