"""
Interactive operator prompts.
"""

import typer


class TerminalInputProvider:
    """Reads domain and credentials from the controlling terminal."""

    def ask_domain(self) -> str:
        return typer.prompt(
            "Enter the virtual host domain name (e.g., example.com)", default="", show_default=False
        ).strip()

    def ask_username(self) -> str:
        return typer.prompt("Enter username for basic auth").strip()

    def ask_password(self) -> str:
        return typer.prompt("Enter password for basic auth", hide_input=True)
