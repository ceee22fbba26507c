"""
Pydantic models for command-line options and the site being configured.

Both models are frozen: they are built once per run and passed down the
pipeline unchanged.
"""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

SERVER_NAME_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9.-]*[a-z0-9])?$")


class Feature(str, Enum):
    """Optional location blocks, in the order they appear in the server block."""
    USER_DIR = "user-dir"
    AUTH = "auth"
    AUTH_PAM = "auth-pam"
    CGI = "cgi"


FRAGMENT_ORDER: tuple[Feature, ...] = (Feature.USER_DIR, Feature.AUTH, Feature.AUTH_PAM, Feature.CGI)


class FeatureFlags(BaseModel):
    """Feature toggles selected on the command line."""

    model_config = ConfigDict(frozen=True)

    check_nginx: bool = Field(default=False, description="Install NGINX if it is missing")
    virtual_host: bool = Field(default=False, description="Prompt for a domain and serve it from its own root")
    user_dir: bool = Field(default=False, description="Serve ~user/public_html directories")
    auth: bool = Field(default=False, description="Protect /protected with basic auth")
    auth_pam: bool = Field(default=False, description="Protect /pam-protected with PAM auth")
    cgi: bool = Field(default=False, description="Run /cgi-bin/ scripts through fcgiwrap")

    @classmethod
    def from_options(
        cls,
        *,
        check_nginx: bool = False,
        virtual_host: bool = False,
        user_dir: bool = False,
        auth: bool = False,
        auth_pam: bool = False,
        cgi: bool = False,
        all_features: bool = False,
    ) -> "FeatureFlags":
        """Build the flag set; ``all_features`` turns every toggle on."""
        if all_features:
            return cls.everything()
        return cls(
            check_nginx=check_nginx,
            virtual_host=virtual_host,
            user_dir=user_dir,
            auth=auth,
            auth_pam=auth_pam,
            cgi=cgi,
        )

    @classmethod
    def everything(cls) -> "FeatureFlags":
        return cls(**{name: True for name in cls.model_fields})

    def is_enabled(self, feature: Feature) -> bool:
        return getattr(self, feature.value.replace("-", "_"))

    @property
    def enabled_features(self) -> list[Feature]:
        """Enabled location features in template order."""
        return [feature for feature in FRAGMENT_ORDER if self.is_enabled(feature)]


class SiteIdentity(BaseModel):
    """Domain name and document root served by the generated server block."""

    model_config = ConfigDict(frozen=True)

    domain: str = Field(..., min_length=1, description="Value of the server_name directive")
    root_path: str = Field(..., min_length=1, description="Value of the root directive")

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, v: str) -> str:
        """Only plain host names reach server_name and the document root path."""
        name = v.strip().lower()
        if not SERVER_NAME_PATTERN.match(name) or ".." in name:
            raise ValueError(f"Invalid domain name: {v!r}")
        return name

    @field_validator("root_path")
    @classmethod
    def validate_root_path(cls, v: str) -> str:
        """Validate root path is absolute and safe to embed in nginx.conf."""
        if not v.startswith("/"):
            raise ValueError("Root path must be an absolute path")
        if ".." in v:
            raise ValueError("Root path cannot contain '..'")
        if ";" in v or any(ch.isspace() for ch in v):
            raise ValueError("Root path cannot contain ';' or whitespace")
        return v

    @classmethod
    def for_domain(cls, domain: str, web_root_base: str) -> "SiteIdentity":
        """Virtual host identity: the root is ``<web_root_base>/<domain>``."""
        domain = domain.strip().lower()
        return cls(domain=domain, root_path=f"{web_root_base.rstrip('/')}/{domain}")
