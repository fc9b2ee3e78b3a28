"""
GitHub Actions platform — file commands and workflow commands.

Outputs, environment variables and PATH entries are appended to the
files named by ``GITHUB_OUTPUT``, ``GITHUB_ENV`` and ``GITHUB_PATH``.
When a file variable is unset (running outside a runner) the legacy
``::command::`` form is printed instead. Exported variables and PATH
entries also take effect in the current process.
"""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path

import click

from src.adapters.ci.base import CIPlatform

logger = logging.getLogger(__name__)


def escape_data(value: str) -> str:
    """Escape a workflow command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    """Escape a workflow command property value."""
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


class GitHubActions(CIPlatform):
    """CI platform backed by the GitHub Actions runner protocol."""

    def __init__(self, environ: dict[str, str] | None = None, err: bool = False):
        # ``environ`` is the mapping updated by export_variable/add_path;
        # tests pass their own dict. ``err`` sends workflow commands to
        # stderr, leaving stdout to a JSON report.
        self._environ = os.environ if environ is None else environ
        self._err = err

    @property
    def name(self) -> str:
        return "github"

    def get_env(self, name: str) -> str | None:
        return self._environ.get(name)

    def info(self, message: str) -> None:
        logger.info("%s", message)

    def warning(self, message: str) -> None:
        logger.debug("warning annotation: %s", message)
        click.echo(f"::warning::{escape_data(message)}", err=self._err)

    def set_failed(self, message: str) -> None:
        logger.debug("error annotation: %s", message)
        click.echo(f"::error::{escape_data(message)}", err=self._err)

    def set_output(self, name: str, value: str) -> None:
        if not self._file_command("GITHUB_OUTPUT", self._key_value(name, value)):
            click.echo(
                f"::set-output name={escape_property(name)}::{escape_data(value)}", err=self._err
            )

    def export_variable(self, name: str, value: str) -> None:
        self._environ[name] = value
        if not self._file_command("GITHUB_ENV", self._key_value(name, value)):
            click.echo(
                f"::set-env name={escape_property(name)}::{escape_data(value)}", err=self._err
            )

    def add_path(self, path: str) -> None:
        current = self._environ.get("PATH", "")
        self._environ["PATH"] = f"{path}{os.pathsep}{current}" if current else path
        if not self._file_command("GITHUB_PATH", f"{path}\n"):
            click.echo(f"::add-path::{escape_data(path)}", err=self._err)

    # ── File commands ───────────────────────────────────────────

    def _file_command(self, variable: str, payload: str) -> bool:
        """Append ``payload`` to the file named by ``variable``.

        Returns False when the variable is not set.

        Raises:
            OSError: If the file is named but missing or unwritable.
        """
        file_path = self._environ.get(variable)
        if not file_path:
            return False
        path = Path(file_path)
        if not path.is_file():
            raise OSError(f"Missing file at path: {file_path}")
        with path.open("a", encoding="utf-8") as fh:
            fh.write(payload)
        return True

    @staticmethod
    def _key_value(name: str, value: str) -> str:
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        if delimiter in name or delimiter in value:
            raise ValueError(f"Unexpected input: value should not contain the delimiter {delimiter!r}")
        return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
