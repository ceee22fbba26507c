"""
NGINX configuration generator using Jinja2 templates.

Renders each optional location block from its own template and assembles
them into a complete nginx.conf document.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from config import Settings, settings
from core.errors import NginxSetupError
from models.config import ConfigFragment, RenderedConfiguration
from models.options import FRAGMENT_ORDER, Feature, SiteIdentity

logger = logging.getLogger(__name__)

# Default template directory
DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

FRAGMENT_TEMPLATES = {
    Feature.USER_DIR: "user_dir.conf.j2",
    Feature.AUTH: "auth.conf.j2",
    Feature.AUTH_PAM: "auth_pam.conf.j2",
    Feature.CGI: "cgi.conf.j2",
}

AUTH_LOCATION = "/protected"
AUTH_REALM = "Restricted Area"
PAM_LOCATION = "/pam-protected"
PAM_REALM = "PAM Restricted"
PAM_SERVICE = "nginx"


class ConfigGeneratorError(NginxSetupError):
    """Base exception for config generator errors."""

    def __init__(self, message: str, feature: Optional[str] = None):
        super().__init__(message, error_type="generation_failed")
        self.feature = feature


class TemplateNotFoundError(ConfigGeneratorError):
    """Template file not found."""
    pass


class ConfigGenerator:
    """
    Generates the main NGINX configuration from structured data.

    Every feature fragment is rendered independently so it can be
    inspected on its own; ``assemble`` places them into the skeleton.
    """

    def __init__(self, template_dir: Optional[Path] = None, config: Optional[Settings] = None):
        """
        Initialize the config generator.

        Args:
            template_dir: Path to template directory. Uses default if not specified.
            config: Settings providing paths used inside fragments.
        """
        self.template_dir = template_dir or DEFAULT_TEMPLATE_DIR
        self.settings = config or settings

        if not self.template_dir.exists():
            raise ConfigGeneratorError(
                f"Template directory not found: {self.template_dir}"
            )

        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,  # NGINX configs don't need HTML escaping
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True
        )

        logger.debug(f"ConfigGenerator initialized with templates from {self.template_dir}")

    def _render(self, template_name: str, feature: Optional[Feature] = None, **context) -> str:
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound:
            raise TemplateNotFoundError(
                f"Template not found: {template_name}",
                feature=feature.value if feature else None
            )
        return template.render(**context)

    def generate_user_dir(self) -> ConfigFragment:
        """Location serving /~user/ from each user's public_html."""
        content = self._render(FRAGMENT_TEMPLATES[Feature.USER_DIR], Feature.USER_DIR)
        return ConfigFragment(feature=Feature.USER_DIR, content=content)

    def generate_auth(self) -> ConfigFragment:
        """Location gated by the basic-auth credential file."""
        content = self._render(
            FRAGMENT_TEMPLATES[Feature.AUTH],
            Feature.AUTH,
            location=AUTH_LOCATION,
            realm=AUTH_REALM,
            htpasswd_path=self.settings.htpasswd_path
        )
        return ConfigFragment(feature=Feature.AUTH, content=content)

    def generate_auth_pam(self) -> ConfigFragment:
        """Location gated by PAM authentication."""
        content = self._render(
            FRAGMENT_TEMPLATES[Feature.AUTH_PAM],
            Feature.AUTH_PAM,
            location=PAM_LOCATION,
            realm=PAM_REALM,
            pam_service=PAM_SERVICE
        )
        return ConfigFragment(feature=Feature.AUTH_PAM, content=content)

    def generate_cgi(self) -> ConfigFragment:
        """Location passing /cgi-bin/ requests to fcgiwrap."""
        content = self._render(
            FRAGMENT_TEMPLATES[Feature.CGI],
            Feature.CGI,
            cgi_socket=self.settings.cgi_socket,
            cgi_bin_dir=self.settings.cgi_bin_dir.rstrip("/")
        )
        return ConfigFragment(feature=Feature.CGI, content=content)

    def generate_pam_module_load(self) -> str:
        """Contents of the modules-enabled file that loads the PAM module."""
        return self._render("pam_module.conf.j2", Feature.AUTH_PAM, module_path=self.settings.nginx_pam_module_path)

    def assemble(
        self,
        site: SiteIdentity,
        fragments: Sequence[ConfigFragment],
        generated_at: Optional[datetime] = None
    ) -> RenderedConfiguration:
        """
        Build the complete nginx.conf document.

        Fragments are placed in the fixed feature order regardless of the
        order they are passed in; empty fragments are left out.

        Args:
            site: Domain and document root of the server block
            fragments: Feature fragments, at most one per feature
            generated_at: Time recorded in the header comment

        Returns:
            The rendered configuration
        """
        generated_at = generated_at or datetime.now()
        by_feature = {fragment.feature: fragment for fragment in fragments}
        if len(by_feature) != len(fragments):
            raise ConfigGeneratorError("More than one fragment supplied for the same feature")

        ordered = [
            by_feature[feature] for feature in FRAGMENT_ORDER
            if feature in by_feature and by_feature[feature].enabled
        ]

        content = self._render(
            "nginx.conf.j2",
            generated_at=generated_at.strftime("%Y-%m-%d %H:%M:%S"),
            modules_include=f"{self.settings.nginx_modules_enabled_dir.rstrip('/')}/*.conf",
            domain=site.domain,
            root_path=site.root_path,
            fragments=[fragment.content.rstrip("\n") for fragment in ordered]
        )

        features = tuple(fragment.feature for fragment in ordered)
        logger.debug(f"Assembled configuration for {site.domain} with features {[f.value for f in features]}")
        return RenderedConfiguration(content=content, generated_at=generated_at, site=site, features=features)

    def validate_template(self, template_name: str) -> bool:
        """
        Check if a template exists and is valid.

        Args:
            template_name: Name of the template file

        Returns:
            True if template exists and can be loaded
        """
        try:
            self.env.get_template(template_name)
            return True
        except TemplateNotFound:
            return False


# Singleton instance
_config_generator: Optional[ConfigGenerator] = None


def get_config_generator() -> ConfigGenerator:
    """
    Get the global config generator instance.

    Returns:
        ConfigGenerator singleton instance
    """
    global _config_generator
    if _config_generator is None:
        _config_generator = ConfigGenerator()
    return _config_generator
