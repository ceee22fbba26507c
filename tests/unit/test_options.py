"""
Unit tests for feature flags and site identity models.
"""

import itertools

import pytest
from pydantic import ValidationError

from models.options import FRAGMENT_ORDER, Feature, FeatureFlags, SiteIdentity

FLAG_NAMES = ["check_nginx", "virtual_host", "user_dir", "auth", "auth_pam", "cgi"]


class TestFeatureFlags:
    """Tests for FeatureFlags."""

    def test_defaults_are_all_off(self):
        flags = FeatureFlags()
        assert not any(getattr(flags, name) for name in FLAG_NAMES)
        assert flags.enabled_features == []

    def test_all_enables_every_flag(self):
        flags = FeatureFlags.from_options(all_features=True)
        assert all(getattr(flags, name) for name in FLAG_NAMES)

    def test_all_equals_every_individual_flag(self):
        individual = FeatureFlags.from_options(**{name: True for name in FLAG_NAMES})
        assert FeatureFlags.from_options(all_features=True) == individual

    def test_all_cannot_be_undone_by_individual_flags(self):
        flags = FeatureFlags.from_options(user_dir=True, all_features=True)
        assert flags == FeatureFlags.everything()

    def test_flags_are_frozen(self):
        flags = FeatureFlags()
        with pytest.raises(ValidationError):
            flags.auth = True

    @pytest.mark.parametrize("combo", list(itertools.combinations(FRAGMENT_ORDER, 2)))
    def test_enabled_features_follow_template_order(self, combo):
        """Enabled features come back in template order whatever the input order."""
        kwargs = {feature.value.replace("-", "_"): True for feature in reversed(combo)}
        flags = FeatureFlags.from_options(**kwargs)
        assert flags.enabled_features == list(combo)

    def test_is_enabled(self):
        flags = FeatureFlags(auth_pam=True)
        assert flags.is_enabled(Feature.AUTH_PAM)
        assert not flags.is_enabled(Feature.AUTH)


class TestSiteIdentity:
    """Tests for SiteIdentity."""

    def test_for_domain_derives_root(self):
        site = SiteIdentity.for_domain("example.com", "/var/www")
        assert site.domain == "example.com"
        assert site.root_path == "/var/www/example.com"

    def test_for_domain_tolerates_trailing_slash(self):
        site = SiteIdentity.for_domain("example.com", "/srv/www/")
        assert site.root_path == "/srv/www/example.com"

    def test_empty_domain_rejected(self):
        with pytest.raises(ValidationError):
            SiteIdentity(domain="", root_path="/var/www/default")

    def test_domain_is_normalized(self):
        site = SiteIdentity.for_domain(" Example.COM ", "/var/www")
        assert site.domain == "example.com"
        assert site.root_path == "/var/www/example.com"

    @pytest.mark.parametrize(
        "domain",
        ["evil.com; include /etc/passwd", "../../etc/x", "a..b", "has space.com", "sub/dir", "-leading.com"],
    )
    def test_hostile_domain_rejected(self, domain):
        with pytest.raises(ValidationError):
            SiteIdentity.for_domain(domain, "/var/www")

    @pytest.mark.parametrize("root_path", ["relative/root", "/var/www/../etc", "/var/www/a; include x"])
    def test_unsafe_root_path_rejected(self, root_path):
        with pytest.raises(ValidationError):
            SiteIdentity(domain="localhost", root_path=root_path)
