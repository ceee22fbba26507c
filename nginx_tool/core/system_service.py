"""
Host system adapters for package, service and NGINX management.

Thin synchronous wrappers around dpkg/apt, systemctl, ``nginx -t`` and
``htpasswd``. Every failure is raised as SystemCommandError so the run
stops at the first broken step.
"""

import logging
import subprocess

from config import settings
from core.errors import NginxSetupError
from models.deployment import NginxConfigTestResult

logger = logging.getLogger(__name__)


class SystemCommandError(NginxSetupError):
    """An external command failed or could not be started."""

    def __init__(
        self,
        message: str,
        error_type: str = "command_failed",
        suggestion: str | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ):
        super().__init__(message, error_type=error_type, suggestion=suggestion)
        self.returncode = returncode
        self.stderr = stderr


def run_command(command: list[str], check: bool = True, input_text: str | None = None) -> tuple[int, str, str]:
    """
    Run a command and capture its output.

    Args:
        command: Command and arguments as list
        check: Raise SystemCommandError on a non-zero exit code
        input_text: Text written to the command's stdin

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    logger.debug(f"Running command: {' '.join(command)}")
    try:
        result = subprocess.run(command, input=input_text, capture_output=True, text=True)
    except FileNotFoundError:
        raise SystemCommandError(
            f"Command not found: {command[0]}",
            error_type="command_not_found",
            suggestion=f"Install the package providing '{command[0]}' or fix the configured path",
        )

    if check and result.returncode != 0:
        stderr = result.stderr.strip()
        raise SystemCommandError(
            f"Command '{' '.join(command)}' failed with exit code {result.returncode}: {stderr}",
            returncode=result.returncode,
            stderr=stderr,
        )

    return result.returncode, result.stdout, result.stderr


class AptPackageInstaller:
    """Package management through dpkg and apt."""

    def is_installed(self, package: str) -> bool:
        exit_code, _, _ = run_command(["dpkg", "-s", package], check=False)
        return exit_code == 0

    def install(self, package: str) -> None:
        logger.info(f"Installing package {package}")
        run_command(["apt", "update"])
        run_command(["apt", "install", "-y", package])
        logger.info(f"Package {package} installed")


class SystemdServiceController:
    """Service management through systemctl."""

    def enable(self, service: str) -> None:
        logger.info(f"Enabling service {service}")
        run_command(["systemctl", "enable", service])

    def start(self, service: str) -> None:
        logger.info(f"Starting service {service}")
        run_command(["systemctl", "start", service])

    def reload(self, service: str) -> None:
        """Send a graceful reload to the service."""
        logger.info(f"Reloading service {service}")
        run_command(["systemctl", "reload", service])


class NginxConfigValidator:
    """Runs ``nginx -t`` against the main configuration file."""

    def __init__(self, nginx_binary: str | None = None, config_path: str | None = None):
        self.nginx_binary = nginx_binary or settings.nginx_binary
        self.config_path = config_path or settings.nginx_main_conf

    def test_config(self) -> NginxConfigTestResult:
        """
        Test NGINX configuration (nginx -t).

        Returns:
            NginxConfigTestResult with the validator output
        """
        logger.info("Testing NGINX configuration")
        exit_code, stdout, stderr = run_command([self.nginx_binary, "-t", "-c", self.config_path], check=False)
        success = exit_code == 0

        if success:
            logger.info("NGINX configuration test passed")
        else:
            logger.warning(f"NGINX configuration test failed: {stderr.strip()}")

        # nginx -t reports on stderr
        message = (stderr or stdout).strip() or ("configuration ok" if success else "configuration test failed")
        return NginxConfigTestResult(success=success, message=message, stdout=stdout, stderr=stderr)


class HtpasswdCredentialStore:
    """Writes basic-auth files with the ``htpasswd`` utility."""

    def __init__(self, htpasswd_binary: str | None = None):
        self.htpasswd_binary = htpasswd_binary or settings.htpasswd_binary

    def write_single_user(self, path: str, username: str, password: str) -> None:
        # -c recreates the file, -i reads the password from stdin so it
        # never shows up in the process list
        logger.info(f"Writing credentials for '{username}' to {path}")
        run_command([self.htpasswd_binary, "-c", "-i", path, username], input_text=password)


def ensure_package(installer, package: str) -> bool:
    """
    Install a package unless it is already present.

    Returns:
        True if the package was installed by this call
    """
    if installer.is_installed(package):
        logger.info(f"Package {package} is already installed")
        return False

    logger.info(f"Package {package} is not installed")
    installer.install(package)
    return True
