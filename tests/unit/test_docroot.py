"""
Unit tests for document root provisioning.
"""

import pytest

from core.docroot import DocumentRootProvisioner, ProvisioningError, placeholder_page
from core.errors import NginxSetupError
from models.options import SiteIdentity


class TestDocumentRootProvisioner:
    """Tests for DocumentRootProvisioner."""

    def test_creates_root_and_placeholder(self, tmp_path):
        site = SiteIdentity(domain="localhost", root_path=str(tmp_path / "www" / "default"))

        index = DocumentRootProvisioner().provision(site)

        assert index == tmp_path / "www" / "default" / "index.html"
        assert "localhost" in index.read_text()
        assert index.read_text() == placeholder_page("localhost")

    def test_existing_index_not_overwritten(self, tmp_path):
        root = tmp_path / "example.com"
        root.mkdir()
        (root / "index.html").write_text("<p>custom</p>")
        site = SiteIdentity(domain="example.com", root_path=str(root))

        DocumentRootProvisioner().provision(site)

        assert (root / "index.html").read_text() == "<p>custom</p>"

    def test_existing_root_gets_missing_index(self, tmp_path):
        root = tmp_path / "example.com"
        root.mkdir()
        site = SiteIdentity(domain="example.com", root_path=str(root))

        DocumentRootProvisioner().provision(site)

        assert "Welcome to example.com" in (root / "index.html").read_text()

    def test_unwritable_root_raises_setup_error(self, tmp_path):
        blocker = tmp_path / "www"
        blocker.write_text("not a directory")
        site = SiteIdentity(domain="example.com", root_path=str(blocker / "example.com"))

        with pytest.raises(ProvisioningError) as exc_info:
            DocumentRootProvisioner().provision(site)

        assert isinstance(exc_info.value, NginxSetupError)
        assert exc_info.value.suggestion
