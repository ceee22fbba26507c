"""
Unit tests for the command line interface.

The runner factory is patched so no test touches the host.
"""

import pytest
from unittest.mock import MagicMock

import main
from core.system_service import SystemCommandError
from models.config import RenderedConfiguration
from models.deployment import DeploymentResult, NginxConfigTestResult
from models.options import FeatureFlags, SiteIdentity

INDIVIDUAL_FLAGS = ["--check-nginx", "--virtual-host", "--user-dir", "--auth", "--auth-pam", "--cgi"]


@pytest.fixture
def as_root(monkeypatch):
    monkeypatch.setattr(main.os, "geteuid", lambda: 0)


@pytest.fixture
def mock_runner(monkeypatch):
    """Replace the runner factory and return the runner mock."""
    runner = MagicMock()
    runner.run.return_value = DeploymentResult(
        success=True,
        config_path="/etc/nginx/nginx.conf",
        message="Your NGINX configuration is now updated.",
        reloaded=True,
    )
    factory = MagicMock(return_value=runner)
    monkeypatch.setattr(main, "get_setup_runner", factory)
    return runner


class TestUsage:
    """Argument handling before anything runs."""

    def test_no_arguments_is_an_error(self, mock_runner, capsys):
        assert main.main([]) == 1
        assert "Usage" in capsys.readouterr().out
        mock_runner.run.assert_not_called()

    def test_unknown_option(self, mock_runner, capsys):
        assert main.main(["--user-dir", "--bogus"]) == 1
        out = capsys.readouterr().out
        assert "Unknown option: --bogus" in out
        assert "Usage" in out
        mock_runner.run.assert_not_called()

    def test_positional_argument_is_unknown(self, mock_runner, capsys):
        assert main.main(["example.com"]) == 1
        assert "Unknown option: example.com" in capsys.readouterr().out

    @pytest.mark.parametrize("help_flag", ["-h", "--help"])
    def test_help_exits_zero(self, help_flag, mock_runner, capsys):
        assert main.main([help_flag]) == 0
        assert "Usage" in capsys.readouterr().out
        mock_runner.run.assert_not_called()

    def test_help_ignores_other_flags(self, mock_runner, as_root):
        assert main.main(["--all", "--cgi", "-h"]) == 0
        mock_runner.run.assert_not_called()
        mock_runner.prepare.assert_not_called()

    def test_known_options_cover_every_flag(self):
        known = main.known_options()
        for flag in INDIVIDUAL_FLAGS + ["--all", "--dry-run", "--restore-on-failure", "-h", "--help"]:
            assert flag in known


class TestRun:
    """Running the setup command."""

    def test_requires_root(self, mock_runner, monkeypatch, capsys):
        monkeypatch.setattr(main.os, "geteuid", lambda: 1000)
        assert main.main(["--user-dir"]) == 1
        assert "Please run as root" in capsys.readouterr().out
        mock_runner.run.assert_not_called()

    def test_success(self, mock_runner, as_root, capsys):
        assert main.main(["--user-dir", "--cgi"]) == 0
        flags = mock_runner.run.call_args.args[0]
        assert flags == FeatureFlags(user_dir=True, cgi=True)
        assert "Script execution complete" in capsys.readouterr().out

    def test_all_equals_individual_flags(self, mock_runner, as_root):
        main.main(["--all"])
        all_flags = mock_runner.run.call_args.args[0]

        main.main(list(reversed(INDIVIDUAL_FLAGS)))
        individual_flags = mock_runner.run.call_args.args[0]

        assert all_flags == individual_flags == FeatureFlags.everything()

    @pytest.mark.parametrize("args", [["--all", "--user-dir"], ["--user-dir", "--all"], ["--all", "--all"]])
    def test_all_is_order_insensitive(self, args, mock_runner, as_root):
        main.main(args)
        assert mock_runner.run.call_args.args[0] == FeatureFlags.everything()

    def test_restore_flag_forwarded(self, mock_runner, as_root):
        main.main(["--user-dir", "--restore-on-failure"])
        assert mock_runner.run.call_args.kwargs["restore_on_failure"] is True

    def test_restore_defaults_to_setting(self, mock_runner, as_root):
        main.main(["--user-dir"])
        assert mock_runner.run.call_args.kwargs["restore_on_failure"] is None

    def test_validation_failure_exits_one(self, mock_runner, as_root, capsys):
        mock_runner.run.return_value = DeploymentResult(
            success=False,
            config_path="/etc/nginx/nginx.conf",
            message="NGINX configuration test failed. Please review the configuration.",
            validation=NginxConfigTestResult(success=False, message="nginx: [emerg] bad"),
        )

        assert main.main(["--cgi"]) == 1
        captured = capsys.readouterr()
        assert "nginx: [emerg] bad" in captured.err
        assert "test failed" in captured.out

    def test_setup_error_exits_one(self, mock_runner, as_root, caplog):
        mock_runner.run.side_effect = SystemCommandError("apt failed", suggestion="Check network access")

        assert main.main(["--check-nginx"]) == 1
        assert "apt failed" in caplog.text
        assert "(command_failed)" in caplog.text
        assert "Check network access" in caplog.text

    def test_dry_run_prints_without_root(self, mock_runner, monkeypatch, capsys):
        monkeypatch.setattr(main.os, "geteuid", lambda: 1000)
        mock_runner.prepare.return_value = RenderedConfiguration(
            content="# Generated by nginx-setup\n",
            generated_at="2026-10-18T00:00:00",
            site=SiteIdentity(domain="localhost", root_path="/var/www/default"),
        )

        assert main.main(["--dry-run"]) == 0
        assert capsys.readouterr().out == "# Generated by nginx-setup\n"
        mock_runner.prepare.assert_called_once_with(FeatureFlags(), dry_run=True)
        mock_runner.run.assert_not_called()
