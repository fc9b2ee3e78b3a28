"""
Error hierarchy — every fatal condition the installer reports.

The CLI catches ``InstallQtError`` at the top level, reports it
through the CI platform and exits with status 1.
"""

from __future__ import annotations


class InstallQtError(Exception):
    """Base class for all fatal install errors."""


class ConfigError(InstallQtError):
    """Raised when an input is missing or malformed."""


class CommandError(InstallQtError):
    """Raised when an external command exits non-zero."""

    def __init__(self, command: str, return_code: int | None, message: str = ""):
        self.command = command
        self.return_code = return_code
        detail = f": {message}" if message else ""
        super().__init__(
            f"Command failed with exit code {return_code}: {command}{detail}"
        )


class QtNotFoundError(InstallQtError):
    """Raised when no Qt architecture directory can be located."""
