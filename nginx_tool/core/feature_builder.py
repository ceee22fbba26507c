"""
Feature block builder.

Turns enabled feature flags into location fragments, performing the
host-side work each feature needs first: credential files for basic
auth, the module-load file for PAM, and the fcgiwrap service for CGI.
"""

import logging
from pathlib import Path

from config import Settings, get_pam_module_conf_path, is_pam_module_available, settings
from core.config_generator import ConfigGenerator
from core.errors import NginxSetupError
from core.ports import CredentialStore, InputProvider, PackageInstaller, ServiceController
from core.system_service import ensure_package
from models.config import ConfigFragment
from models.options import FRAGMENT_ORDER, Feature, FeatureFlags

logger = logging.getLogger(__name__)


class FeatureSetupError(NginxSetupError):
    """Host-side work for a feature failed."""

    def __init__(self, message: str, feature: Feature, suggestion: str | None = None):
        self.feature = feature
        super().__init__(message, error_type="feature_setup_failed", suggestion=suggestion)


class FeatureBlockBuilder:
    """Produces one ConfigFragment per optional feature."""

    def __init__(
        self,
        generator: ConfigGenerator,
        installer: PackageInstaller,
        services: ServiceController,
        credentials: CredentialStore,
        prompter: InputProvider,
        config: Settings | None = None,
        dry_run: bool = False,
    ):
        self.generator = generator
        self.installer = installer
        self.services = services
        self.credentials = credentials
        self.prompter = prompter
        self.settings = config or settings
        self.dry_run = dry_run

    def build(self, flags: FeatureFlags) -> list[ConfigFragment]:
        """
        Build fragments for every feature, in template order.

        Disabled features yield empty fragments.
        """
        builders = {
            Feature.USER_DIR: self.build_user_dir,
            Feature.AUTH: self.build_auth,
            Feature.AUTH_PAM: self.build_auth_pam,
            Feature.CGI: self.build_cgi,
        }
        fragments = []
        for feature in FRAGMENT_ORDER:
            if flags.is_enabled(feature):
                fragments.append(builders[feature]())
            else:
                fragments.append(ConfigFragment.empty(feature))
        return fragments

    def build_user_dir(self) -> ConfigFragment:
        return self.generator.generate_user_dir()

    def build_auth(self) -> ConfigFragment:
        """Install htpasswd, collect credentials and write the single-user file."""
        if self.dry_run:
            logger.info(f"Dry run: not writing credentials to {self.settings.htpasswd_path}")
            return self.generator.generate_auth()

        ensure_package(self.installer, self.settings.htpasswd_package)
        username = self.prompter.ask_username()
        password = self.prompter.ask_password()
        self.credentials.write_single_user(self.settings.htpasswd_path, username, password)
        return self.generator.generate_auth()

    def build_auth_pam(self) -> ConfigFragment:
        """PAM location, or an empty fragment when the module is not installed."""
        module_path = self.settings.nginx_pam_module_path
        if not is_pam_module_available(self.settings):
            logger.warning(f"PAM module not found at {module_path}. Skipping PAM configuration.")
            return ConfigFragment.empty(Feature.AUTH_PAM)

        module_conf = get_pam_module_conf_path(self.settings)
        if self.dry_run:
            logger.info(f"Dry run: not writing {module_conf}")
        else:
            try:
                Path(module_conf).write_text(self.generator.generate_pam_module_load())
            except OSError as e:
                raise FeatureSetupError(
                    f"Failed to write PAM module configuration {module_conf}: {e}",
                    feature=Feature.AUTH_PAM,
                    suggestion=f"Create {self.settings.nginx_modules_enabled_dir} or set NGINX_MODULES_ENABLED_DIR",
                )
            logger.info(f"PAM module loaded via {module_conf}")
        return self.generator.generate_auth_pam()

    def build_cgi(self) -> ConfigFragment:
        """Install fcgiwrap and make sure its service is running."""
        if self.dry_run:
            logger.info(f"Dry run: not provisioning {self.settings.cgi_service_name}")
            return self.generator.generate_cgi()

        ensure_package(self.installer, self.settings.cgi_package)
        self.services.enable(self.settings.cgi_service_name)
        self.services.start(self.settings.cgi_service_name)
        return self.generator.generate_cgi()
