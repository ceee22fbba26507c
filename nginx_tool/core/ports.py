"""Ports (interfaces) between the setup pipeline and the host system.

The pipeline only talks to packages, services, the validator, the
credential file and the operator through these protocols, so tests can
swap every one of them for an in-memory double.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from models.deployment import NginxConfigTestResult


@runtime_checkable
class PackageInstaller(Protocol):
    """Query and install system packages."""

    def is_installed(self, package: str) -> bool:
        """Return True when the package manager reports the package installed."""

    def install(self, package: str) -> None:
        """Refresh the package index and install the package."""


@runtime_checkable
class ServiceController(Protocol):
    """Control system services."""

    def enable(self, service: str) -> None:
        """Enable the service at boot."""

    def start(self, service: str) -> None:
        """Start the service now."""

    def reload(self, service: str) -> None:
        """Gracefully reload the service configuration."""


@runtime_checkable
class ConfigValidator(Protocol):
    """Validate the NGINX configuration on disk."""

    def test_config(self) -> NginxConfigTestResult:
        """Run the validator and report the outcome."""


@runtime_checkable
class CredentialStore(Protocol):
    """Write basic-auth credential files."""

    def write_single_user(self, path: str, username: str, password: str) -> None:
        """Create or replace the file so it holds only this user."""


@runtime_checkable
class InputProvider(Protocol):
    """Operator input for domain names and credentials."""

    def ask_domain(self) -> str:
        """Return the virtual host domain, possibly empty."""

    def ask_username(self) -> str:
        """Return the basic-auth username."""

    def ask_password(self) -> str:
        """Return the basic-auth password without echoing it."""
