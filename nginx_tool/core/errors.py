"""
Base exception shared by all nginx-setup components.
"""


class NginxSetupError(Exception):
    """Base exception for errors that abort a run."""

    def __init__(self, message: str, error_type: str = "setup_error", suggestion: str | None = None):
        self.message = message
        self.error_type = error_type
        self.suggestion = suggestion
        super().__init__(message)
