"""
CI platform protocol — how results leave this process.

Subsequent build steps find Qt through step outputs, exported
environment variables and PATH entries. Each CI host has its own
mechanism for these; services only see this interface.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod


class CIPlatform(ABC):
    """Abstract base class for CI hosts."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The platform identifier (e.g., 'github', 'memory')."""

    @abstractmethod
    def info(self, message: str) -> None:
        """Write an informational line to the job log."""

    @abstractmethod
    def warning(self, message: str) -> None:
        """Emit a warning annotation."""

    @abstractmethod
    def set_failed(self, message: str) -> None:
        """Emit an error annotation marking the step as failed."""

    @abstractmethod
    def set_output(self, name: str, value: str) -> None:
        """Publish a step output."""

    @abstractmethod
    def export_variable(self, name: str, value: str) -> None:
        """Set an environment variable for this and later steps."""

    @abstractmethod
    def add_path(self, path: str) -> None:
        """Prepend a directory to PATH for this and later steps."""

    def get_env(self, name: str) -> str | None:
        """Read an environment variable as later steps would see it."""
        return os.environ.get(name)

    def append_variable(self, name: str, value: str) -> None:
        """Export ``name``, colon-appending to any existing value."""
        old_value = self.get_env(name)
        self.export_variable(name, f"{old_value}:{value}" if old_value else value)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
