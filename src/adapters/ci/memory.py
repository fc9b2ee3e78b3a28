"""
In-memory CI platform — records everything, publishes nothing.

Used for ``--dry-run`` and local planning, where writing to the
runner's file commands would leak into later steps.
"""

from __future__ import annotations

import logging
import os

from src.adapters.ci.base import CIPlatform

logger = logging.getLogger(__name__)


class MemoryPlatform(CIPlatform):
    """CI platform that keeps outputs and exports in dictionaries."""

    def __init__(self, environ: dict[str, str] | None = None):
        self.environ: dict[str, str] = dict(os.environ if environ is None else environ)
        self.outputs: dict[str, str] = {}
        self.exported: dict[str, str] = {}
        self.paths: list[str] = []
        self.messages: list[str] = []
        self.warnings: list[str] = []
        self.failures: list[str] = []

    @property
    def name(self) -> str:
        return "memory"

    def get_env(self, name: str) -> str | None:
        return self.environ.get(name)

    def info(self, message: str) -> None:
        logger.info("%s", message)
        self.messages.append(message)

    def warning(self, message: str) -> None:
        logger.warning("%s", message)
        self.warnings.append(message)

    def set_failed(self, message: str) -> None:
        logger.error("%s", message)
        self.failures.append(message)

    def set_output(self, name: str, value: str) -> None:
        self.outputs[name] = value

    def export_variable(self, name: str, value: str) -> None:
        self.environ[name] = value
        self.exported[name] = value

    def add_path(self, path: str) -> None:
        self.paths.insert(0, path)
