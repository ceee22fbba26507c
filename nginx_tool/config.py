"""
Configuration utilities and settings management.

Handles environment variables, path resolution, and tool settings.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Tool settings loaded from environment variables."""

    # NGINX Paths
    nginx_main_conf: str = Field(default="/etc/nginx/nginx.conf", alias="NGINX_MAIN_CONF")
    nginx_binary: str = Field(default="nginx", alias="NGINX_BINARY")
    nginx_service_name: str = Field(default="nginx", alias="NGINX_SERVICE_NAME")
    nginx_package: str = Field(default="nginx", alias="NGINX_PACKAGE")
    nginx_modules_enabled_dir: str = Field(
        default="/etc/nginx/modules-enabled",
        alias="NGINX_MODULES_ENABLED_DIR",
        description="Directory whose *.conf files are included at the top of nginx.conf",
    )

    # PAM Authentication
    nginx_pam_module_path: str = Field(
        default="/usr/lib/nginx/modules/ngx_http_auth_pam_module.so",
        alias="NGINX_PAM_MODULE_PATH",
        description="Module binary that must exist for the PAM location to be generated",
    )
    pam_module_conf_name: str = Field(default="50-mod-http-auth-pam.conf", alias="PAM_MODULE_CONF_NAME")

    # Basic Authentication
    htpasswd_path: str = Field(default="/etc/nginx/.htpasswd", alias="HTPASSWD_PATH")
    htpasswd_binary: str = Field(default="htpasswd", alias="HTPASSWD_BINARY")
    htpasswd_package: str = Field(default="apache2-utils", alias="HTPASSWD_PACKAGE")

    # CGI
    cgi_package: str = Field(default="fcgiwrap", alias="CGI_PACKAGE")
    cgi_service_name: str = Field(default="fcgiwrap", alias="CGI_SERVICE_NAME")
    cgi_socket: str = Field(default="/var/run/fcgiwrap.socket", alias="CGI_SOCKET")
    cgi_bin_dir: str = Field(default="/usr/lib/cgi-bin", alias="CGI_BIN_DIR")

    # Site defaults
    web_root_base: str = Field(
        default="/var/www", alias="WEB_ROOT_BASE", description="Parent directory of virtual host document roots"
    )
    default_domain: str = Field(default="localhost", alias="DEFAULT_DOMAIN")
    default_doc_root: str = Field(default="/var/www/default", alias="DEFAULT_DOC_ROOT")

    # Safety Settings
    auto_restore_on_failure: bool = Field(
        default=False,
        alias="AUTO_RESTORE_ON_FAILURE",
        description="Copy the backup back over nginx.conf when validation fails",
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields in .env file


# Global settings instance
settings = Settings()


def get_nginx_conf_path() -> Path:
    """Get the path of the main NGINX configuration file."""
    return Path(settings.nginx_main_conf)


def get_pam_module_conf_path(config: Settings | None = None) -> Path:
    """Get the module-load fragment path written when the PAM module is present."""
    config = config or settings
    return Path(config.nginx_modules_enabled_dir) / config.pam_module_conf_name


def is_pam_module_available(config: Settings | None = None) -> bool:
    """Check if the PAM auth module binary is installed."""
    config = config or settings
    return Path(config.nginx_pam_module_path).is_file()
