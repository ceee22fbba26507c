"""
nginx-setup

Writes a complete /etc/nginx/nginx.conf from command-line flags: virtual
host, user directories, basic auth, PAM auth and CGI support. The previous
configuration is backed up, the new one is validated with ``nginx -t`` and
NGINX is reloaded only when validation passes.

Must be run as root.
"""

import logging
import os
import sys

import click
import typer

from config import settings
from core.errors import NginxSetupError
from core.setup_runner import get_setup_runner
from models.options import FeatureFlags

# Configure logging
logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

PROG_NAME = "nginx-setup"
HELP_OPTIONS = ("-h", "--help")

app = typer.Typer(
    name=PROG_NAME,
    add_completion=False,
    context_settings={"help_option_names": list(HELP_OPTIONS)},
)


def require_root() -> None:
    if os.geteuid() != 0:
        typer.echo("Please run as root (e.g., using sudo).")
        raise typer.Exit(code=1)


@app.command()
def setup(
    check_nginx: bool = typer.Option(False, "--check-nginx", help="Check and install NGINX if not present."),
    virtual_host: bool = typer.Option(
        False, "--virtual-host", help="Configure a virtual host (requires domain name)."
    ),
    user_dir: bool = typer.Option(False, "--user-dir", help="Add user directory support."),
    auth: bool = typer.Option(False, "--auth", help="Add basic HTTP authentication."),
    auth_pam: bool = typer.Option(False, "--auth-pam", help="Add PAM authentication."),
    cgi: bool = typer.Option(False, "--cgi", help="Add CGI scripting support."),
    all_features: bool = typer.Option(False, "--all", help="Enable all options."),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print the configuration without installing or writing anything."
    ),
    restore_on_failure: bool = typer.Option(
        False, "--restore-on-failure", help="Restore the backup if the new configuration fails validation."
    ),
) -> None:
    """Set up a complete NGINX configuration file."""
    flags = FeatureFlags.from_options(
        check_nginx=check_nginx,
        virtual_host=virtual_host,
        user_dir=user_dir,
        auth=auth,
        auth_pam=auth_pam,
        cgi=cgi,
        all_features=all_features,
    )

    if not dry_run:
        require_root()

    runner = get_setup_runner()
    try:
        if dry_run:
            rendered = runner.prepare(flags, dry_run=True)
            typer.echo(rendered.content, nl=False)
            return
        result = runner.run(flags, restore_on_failure=restore_on_failure or None)
    except NginxSetupError as e:
        logger.error(f"{e.message} ({e.error_type})")
        if e.suggestion:
            logger.error(f"Suggestion: {e.suggestion}")
        raise typer.Exit(code=1)

    if not result.success:
        if result.validation is not None:
            typer.echo(result.validation.message, err=True)
        typer.echo(result.message)
        raise typer.Exit(code=1)

    typer.echo(f"Script execution complete. {result.message}")


def print_usage() -> None:
    command = typer.main.get_command(app)
    with command.make_context(PROG_NAME, [], resilient_parsing=True) as ctx:
        # rich-formatted help is printed directly and returns nothing
        help_text = command.get_help(ctx)
    if help_text:
        typer.echo(help_text)


def known_options() -> set[str]:
    command = typer.main.get_command(app)
    names = set(HELP_OPTIONS)
    for param in command.params:
        names.update(param.opts)
        names.update(param.secondary_opts)
    return names


def main(argv: list[str] | None = None) -> int:
    """
    Run the command line and return its exit code.

    Tokens are checked in order: the first help option wins, and the first
    unknown token is an error, whichever comes first.
    """
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print_usage()
        return 1

    known = known_options()
    for token in args:
        if token in HELP_OPTIONS:
            print_usage()
            return 0
        if token not in known:
            typer.echo(f"Unknown option: {token}")
            print_usage()
            return 1

    command = typer.main.get_command(app)
    try:
        exit_code = command.main(args=args, prog_name=PROG_NAME, standalone_mode=False)
    except click.UsageError as e:
        typer.echo(e.format_message())
        print_usage()
        return 1
    except click.exceptions.Abort:
        typer.echo("Aborted!", err=True)
        return 1
    return exit_code or 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
