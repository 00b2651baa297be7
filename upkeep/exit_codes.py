"""
Standard exit codes for upkeep commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
NO_MATCHING_VERSION = 64  # No remote tag looked like a stable release
SYNC_FAILED = 65          # clone/fetch/checkout of a working copy failed
STEP_FAILED = 66          # A maintenance step that must succeed did not
CONFIG_ERROR = 67         # Configuration file error
PERMISSION_ERROR = 77     # Insufficient permissions (EX_NOPERM)
INTERRUPTED = 130         # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code

    def to_dict(self) -> dict:
        return {
            "error": str(self),
            "type": type(self).__name__,
            "exit_code": self.exit_code,
        }


class NoMatchingVersionError(CommandError):
    """Raised when no tag in a listing is a well-formed release version."""
    def __init__(self, message: str = "No tag matches a release version pattern",
                 candidates: int = 0):
        super().__init__(message, NO_MATCHING_VERSION)
        self.candidates = candidates


class SyncFailedError(CommandError):
    """
    Raised when a version-control sub-operation fails.

    Carries the failing operation (clone, fetch, checkout, ls-remote) and
    the diagnostic text the tool printed.
    """
    def __init__(self, operation: str, diagnostic: str = "", path: Optional[str] = None):
        message = f"git {operation} failed"
        if path:
            message += f" for {path}"
        if diagnostic:
            message += f": {diagnostic.strip()}"
        super().__init__(message, SYNC_FAILED)
        self.operation = operation
        self.diagnostic = diagnostic
        self.path = path

    def to_dict(self) -> dict:
        error = super().to_dict()
        error['operation'] = self.operation
        error['diagnostic'] = self.diagnostic
        return error


class StepFailedError(CommandError):
    """Raised when a maintenance step that must succeed fails."""
    def __init__(self, step: str, diagnostic: str = ""):
        message = f"{step} failed"
        if diagnostic:
            message += f": {diagnostic.strip()}"
        super().__init__(message, STEP_FAILED)
        self.step = step
        self.diagnostic = diagnostic


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)
