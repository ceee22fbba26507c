"""
Document root provisioning.

Makes sure the directory served by the generated server block exists and
has something to serve.
"""

import logging
from pathlib import Path

from core.errors import NginxSetupError
from models.options import SiteIdentity

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.html"


class ProvisioningError(NginxSetupError):
    """The document root or its index page could not be created."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(message, error_type="provisioning_failed", suggestion=suggestion)


def placeholder_page(domain: str) -> str:
    return f"<html><body><h1>Welcome to {domain}</h1></body></html>\n"


class DocumentRootProvisioner:
    """Creates document roots and their placeholder index page."""

    def provision(self, site: SiteIdentity) -> Path:
        """
        Ensure the site's root directory and index document exist.

        An existing index document is never overwritten.

        Args:
            site: Site whose root should be provisioned

        Returns:
            Path of the index document
        """
        root = Path(site.root_path)
        index = root / INDEX_FILENAME
        try:
            if not root.is_dir():
                logger.info(f"Creating document root at {root}")
            root.mkdir(parents=True, exist_ok=True)

            if index.exists():
                logger.debug(f"Keeping existing index document {index}")
            else:
                index.write_text(placeholder_page(site.domain))
                logger.info(f"Wrote placeholder index document {index}")
        except OSError as e:
            raise ProvisioningError(
                f"Failed to provision document root {root}: {e}",
                suggestion="Make sure the tool runs as root and WEB_ROOT_BASE is writable",
            )
        return index
