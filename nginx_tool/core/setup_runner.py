"""
Setup pipeline.

Runs the steps of a setup in order: ensure NGINX, resolve the site,
provision its document root, build feature fragments, assemble the
document and deploy it.
"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from config import Settings, settings
from core.config_generator import ConfigGenerator, get_config_generator
from core.config_manager import CrossplaneParser, nginx_parser
from core.deployer import DeploymentWriter
from core.docroot import DocumentRootProvisioner
from core.feature_builder import FeatureBlockBuilder
from core.ports import ConfigValidator, CredentialStore, InputProvider, PackageInstaller, ServiceController
from core.system_service import ensure_package
from models.config import RenderedConfiguration
from models.deployment import DeploymentResult
from models.options import FeatureFlags, SiteIdentity

logger = logging.getLogger(__name__)


class SetupRunner:
    """Drives one configuration run against the host."""

    def __init__(
        self,
        installer: PackageInstaller,
        services: ServiceController,
        validator: ConfigValidator,
        credentials: CredentialStore,
        prompter: InputProvider,
        provisioner: Optional[DocumentRootProvisioner] = None,
        generator: Optional[ConfigGenerator] = None,
        parser: Optional[CrossplaneParser] = None,
        config: Optional[Settings] = None,
    ):
        self.installer = installer
        self.services = services
        self.validator = validator
        self.credentials = credentials
        self.prompter = prompter
        self.provisioner = provisioner or DocumentRootProvisioner()
        self.generator = generator or get_config_generator()
        self.parser = parser or nginx_parser
        self.settings = config or settings

    def default_site(self) -> SiteIdentity:
        return SiteIdentity(domain=self.settings.default_domain, root_path=self.settings.default_doc_root)

    def resolve_site(self, flags: FeatureFlags) -> SiteIdentity:
        """
        Work out which domain and root the server block serves.

        With virtual-host enabled the operator is asked for a domain; an
        empty or invalid answer falls back to the default site.
        """
        if not flags.virtual_host:
            return self.default_site()

        domain = self.prompter.ask_domain().strip()
        if not domain:
            site = self.default_site()
            logger.warning(f"No domain provided. Using default domain: {site.domain}")
            return site

        try:
            return SiteIdentity.for_domain(domain, self.settings.web_root_base)
        except ValidationError:
            site = self.default_site()
            logger.warning(f"Invalid domain name {domain!r}. Using default domain: {site.domain}")
            return site

    def prepare(self, flags: FeatureFlags, dry_run: bool = False) -> RenderedConfiguration:
        """
        Run every step up to and including assembly.

        In dry-run mode nothing is installed or written.
        """
        if flags.check_nginx:
            if dry_run:
                logger.info(f"Dry run: not checking package {self.settings.nginx_package}")
            else:
                logger.info("Checking if NGINX is installed...")
                ensure_package(self.installer, self.settings.nginx_package)

        site = self.resolve_site(flags)
        if dry_run:
            logger.info(f"Dry run: not provisioning document root {site.root_path}")
        else:
            self.provisioner.provision(site)

        builder = FeatureBlockBuilder(
            generator=self.generator,
            installer=self.installer,
            services=self.services,
            credentials=self.credentials,
            prompter=self.prompter,
            config=self.settings,
            dry_run=dry_run,
        )
        fragments = builder.build(flags)
        return self.generator.assemble(site, fragments)

    def run(self, flags: FeatureFlags, restore_on_failure: Optional[bool] = None) -> DeploymentResult:
        """
        Prepare and deploy the configuration.

        Args:
            flags: Selected features
            restore_on_failure: Override of the AUTO_RESTORE_ON_FAILURE setting

        Returns:
            DeploymentResult of the deployment step
        """
        rendered = self.prepare(flags)

        if restore_on_failure is None:
            restore_on_failure = self.settings.auto_restore_on_failure
        writer = DeploymentWriter(
            validator=self.validator,
            services=self.services,
            config_path=self.settings.nginx_main_conf,
            service_name=self.settings.nginx_service_name,
            restore_on_failure=restore_on_failure,
        )
        result = writer.deploy(rendered)

        if result.success:
            self.report(Path(result.config_path))
        return result

    def report(self, config_path: Path) -> None:
        """Log a summary of the deployed configuration."""
        parsed = self.parser.parse_config_file(config_path)
        if parsed is None:
            return

        for server in parsed.server_blocks:
            locations = ", ".join(location.path for location in server.locations)
            logger.info(
                f"Serving {' '.join(server.server_names)} from {server.root} "
                f"with locations: {locations}"
            )


def get_setup_runner(prompter: Optional[InputProvider] = None, config: Optional[Settings] = None) -> SetupRunner:
    """
    Build a runner wired to the real host.

    The validator tests the same file the runner writes.

    Returns:
        SetupRunner using dpkg/apt, systemctl, nginx -t and htpasswd
    """
    from core.prompts import TerminalInputProvider
    from core.system_service import (
        AptPackageInstaller,
        HtpasswdCredentialStore,
        NginxConfigValidator,
        SystemdServiceController,
    )
    config = config or settings

    return SetupRunner(
        installer=AptPackageInstaller(),
        services=SystemdServiceController(),
        validator=NginxConfigValidator(nginx_binary=config.nginx_binary, config_path=config.nginx_main_conf),
        credentials=HtpasswdCredentialStore(htpasswd_binary=config.htpasswd_binary),
        prompter=prompter or TerminalInputProvider(),
        config=config,
    )
