"""
Deployment of the rendered configuration.

Backs up the current nginx.conf, writes the new document, validates it
with ``nginx -t`` and reloads the service only when validation passes.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable

from config import get_nginx_conf_path, settings
from core.errors import NginxSetupError
from core.ports import ConfigValidator, ServiceController
from models.config import RenderedConfiguration
from models.deployment import BackupRecord, DeploymentResult

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


class DeploymentError(NginxSetupError):
    """Backing up or writing the configuration failed."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(message, error_type="deployment_failed", suggestion=suggestion)


def backup_path_for(config_path: Path, captured_at: datetime) -> Path:
    """Sibling path of the backup taken at ``captured_at`` (second resolution)."""
    return config_path.with_name(f"{config_path.name}.bak_{captured_at.strftime(BACKUP_TIMESTAMP_FORMAT)}")


class DeploymentWriter:
    """Writes nginx.conf and hands it to the validator and service manager."""

    def __init__(
        self,
        validator: ConfigValidator,
        services: ServiceController,
        config_path: str | None = None,
        service_name: str | None = None,
        restore_on_failure: bool | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.validator = validator
        self.services = services
        self.config_path = Path(config_path) if config_path else get_nginx_conf_path()
        self.service_name = service_name or settings.nginx_service_name
        self.restore_on_failure = (
            settings.auto_restore_on_failure if restore_on_failure is None else restore_on_failure
        )
        self.clock = clock

    def backup(self) -> BackupRecord | None:
        """
        Copy the current configuration next to itself.

        A backup taken in the same second as an earlier one replaces it.

        Returns:
            BackupRecord, or None when there is no configuration yet
        """
        if not self.config_path.is_file():
            logger.info(f"No existing configuration at {self.config_path}; skipping backup")
            return None

        captured_at = self.clock()
        backup_path = backup_path_for(self.config_path, captured_at)
        logger.info(f"Backing up existing NGINX configuration to {backup_path}")
        try:
            shutil.copy2(self.config_path, backup_path)
        except OSError as e:
            raise DeploymentError(
                f"Failed to back up {self.config_path}: {e}",
                suggestion="Check free space and permissions on the configuration directory",
            )

        return BackupRecord(
            source_path=str(self.config_path),
            backup_path=str(backup_path),
            size=backup_path.stat().st_size,
            created_at=captured_at,
        )

    def write(self, rendered: RenderedConfiguration) -> None:
        logger.info(f"Writing complete configuration to {self.config_path}")
        try:
            self.config_path.write_text(rendered.content)
        except OSError as e:
            raise DeploymentError(
                f"Failed to write {self.config_path}: {e}",
                suggestion="Make sure the tool runs as root and the directory exists",
            )

    def restore(self, backup: BackupRecord) -> None:
        """Copy a backup back over the configuration file."""
        logger.warning(f"Restoring {self.config_path} from {backup.backup_path}")
        try:
            shutil.copy2(backup.backup_path, self.config_path)
        except OSError as e:
            raise DeploymentError(f"Failed to restore {self.config_path} from {backup.backup_path}: {e}")

    def deploy(self, rendered: RenderedConfiguration) -> DeploymentResult:
        """
        Back up, write, validate and reload.

        When validation fails the service is not reloaded, so the running
        NGINX keeps its previous configuration. The broken file stays on
        disk unless restore-on-failure is enabled.

        Args:
            rendered: Document to deploy

        Returns:
            DeploymentResult describing what happened
        """
        backup = self.backup()
        self.write(rendered)

        validation = self.validator.test_config()
        if not validation.success:
            restored = False
            if self.restore_on_failure and backup is not None:
                self.restore(backup)
                restored = True
                message = f"NGINX configuration test failed; restored previous configuration from {backup.backup_path}"
            else:
                message = "NGINX configuration test failed. Please review the configuration."
            logger.error(message)
            return DeploymentResult(
                success=False,
                config_path=str(self.config_path),
                message=message,
                backup=backup,
                validation=validation,
                restored=restored,
            )

        logger.info("NGINX configuration test passed. Reloading NGINX...")
        self.services.reload(self.service_name)

        return DeploymentResult(
            success=True,
            config_path=str(self.config_path),
            message="Your NGINX configuration is now updated.",
            backup=backup,
            validation=validation,
            reloaded=True,
        )
