"""
Global test fixtures.

Provides in-memory doubles for every host-facing port and settings that
point all NGINX paths into a temporary directory, so unit tests never
touch the real system or spawn a subprocess.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "nginx_tool"))

from config import Settings  # noqa: E402
from core.config_generator import ConfigGenerator  # noqa: E402
from core.setup_runner import SetupRunner  # noqa: E402
from models.deployment import NginxConfigTestResult  # noqa: E402


class FakeInstaller:
    """PackageInstaller double recording installs."""

    def __init__(self, installed=()):
        self.installed = set(installed)
        self.installs = []

    def is_installed(self, package: str) -> bool:
        return package in self.installed

    def install(self, package: str) -> None:
        self.installs.append(package)
        self.installed.add(package)


class FakeServices:
    """ServiceController double recording (action, service) calls."""

    def __init__(self):
        self.calls = []

    def enable(self, service: str) -> None:
        self.calls.append(("enable", service))

    def start(self, service: str) -> None:
        self.calls.append(("start", service))

    def reload(self, service: str) -> None:
        self.calls.append(("reload", service))


class FakeValidator:
    """ConfigValidator double with a fixed outcome."""

    def __init__(self, success: bool = True):
        self.success = success
        self.calls = 0

    def test_config(self) -> NginxConfigTestResult:
        self.calls += 1
        if self.success:
            return NginxConfigTestResult(success=True, message="nginx: configuration file test is successful")
        return NginxConfigTestResult(
            success=False,
            message="nginx: [emerg] unknown directive",
            stderr="nginx: [emerg] unknown directive",
        )


class FakeCredentials:
    """CredentialStore double that writes plain ``user:password`` lines."""

    def __init__(self):
        self.writes = []

    def write_single_user(self, path: str, username: str, password: str) -> None:
        self.writes.append((path, username, password))
        Path(path).write_text(f"{username}:{password}\n")


class FakePrompter:
    """InputProvider double returning canned answers."""

    def __init__(self, domain: str = "", username: str = "admin", password: str = "s3cret"):
        self.domain = domain
        self.username = username
        self.password = password
        self.asked = []

    def ask_domain(self) -> str:
        self.asked.append("domain")
        return self.domain

    def ask_username(self) -> str:
        self.asked.append("username")
        return self.username

    def ask_password(self) -> str:
        self.asked.append("password")
        return self.password


@pytest.fixture
def tool_settings(tmp_path):
    """Settings with every path under tmp_path."""
    nginx_dir = tmp_path / "etc" / "nginx"
    (nginx_dir / "modules-enabled").mkdir(parents=True)
    (tmp_path / "modules").mkdir()
    return Settings(
        NGINX_MAIN_CONF=str(nginx_dir / "nginx.conf"),
        NGINX_MODULES_ENABLED_DIR=str(nginx_dir / "modules-enabled"),
        NGINX_PAM_MODULE_PATH=str(tmp_path / "modules" / "ngx_http_auth_pam_module.so"),
        HTPASSWD_PATH=str(nginx_dir / ".htpasswd"),
        WEB_ROOT_BASE=str(tmp_path / "www"),
        DEFAULT_DOC_ROOT=str(tmp_path / "www" / "default"),
    )


@pytest.fixture
def pam_module(tool_settings):
    """Install a fake PAM module binary."""
    path = Path(tool_settings.nginx_pam_module_path)
    path.write_bytes(b"\x7fELF")
    return path


@pytest.fixture
def generator(tool_settings):
    return ConfigGenerator(config=tool_settings)


@pytest.fixture
def installer():
    return FakeInstaller()


@pytest.fixture
def services():
    return FakeServices()


@pytest.fixture
def validator():
    return FakeValidator()


@pytest.fixture
def credentials():
    return FakeCredentials()


@pytest.fixture
def prompter():
    return FakePrompter()


@pytest.fixture
def runner(tool_settings, generator, installer, services, validator, credentials, prompter):
    """SetupRunner wired to the fakes and temporary paths."""
    return SetupRunner(
        installer=installer,
        services=services,
        validator=validator,
        credentials=credentials,
        prompter=prompter,
        generator=generator,
        config=tool_settings,
    )
