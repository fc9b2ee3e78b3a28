"""
Configuration loader — collects raw string inputs and resolves them.

Raw inputs come from three places, later ones winning:
    1. ``INPUT_<NAME>`` environment variables (GitHub Actions inputs)
    2. an optional YAML mapping file (``--inputs-file``)
    3. ``NAME=VALUE`` overrides from the command line

Absent inputs take the action's documented defaults. The merged
mapping is handed to ``Inputs.from_raw`` for validation.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

import yaml

from src.core.errors import ConfigError
from src.core.models.inputs import Inputs

logger = logging.getLogger(__name__)

INPUT_NAMES: tuple[str, ...] = (
    "host",
    "target",
    "wasm",
    "version",
    "arch",
    "dir",
    "modules",
    "archives",
    "tools",
    "add-tools-to-path",
    "extra",
    "install-deps",
    "cache",
    "cache-key-prefix",
    "tools-only",
    "no-qt-binaries",
    "set-env",
    "aqtsource",
    "aqtversion",
    "py7zrversion",
    "source",
    "src-archives",
    "documentation",
    "doc-modules",
    "doc-archives",
    "examples",
    "example-modules",
    "example-archives",
)

# Defaults of the published action; everything else defaults to "".
INPUT_DEFAULTS: dict[str, str] = {
    "target": "desktop",
    "wasm": "none",
    "version": "6.8.3",
    "add-tools-to-path": "true",
    "install-deps": "true",
    "cache": "false",
    "cache-key-prefix": "install-qt-action",
    "tools-only": "false",
    "no-qt-binaries": "false",
    "set-env": "true",
    "aqtversion": "==3.1.*",
    "py7zrversion": "==0.22.*",
    "source": "false",
    "documentation": "false",
    "examples": "false",
}


def env_var_name(name: str) -> str:
    """``add-tools-to-path`` → ``INPUT_ADD-TOOLS-TO-PATH``."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


def inputs_from_env(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Read every known input that is set in the environment."""
    environ = os.environ if environ is None else environ
    found: dict[str, str] = {}
    for name in INPUT_NAMES:
        value = environ.get(env_var_name(name))
        if value is not None:
            found[name] = value.strip()
    return found


def _to_raw_string(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return " ".join(_to_raw_string(v) for v in value)
    return str(value).strip()


def inputs_from_file(path: Path) -> dict[str, str]:
    """Read inputs from a YAML mapping file.

    Values are coerced to the raw string form: booleans become
    ``"true"``/``"false"``, lists are space-joined.

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Inputs file not found: {path}")

    logger.debug("Loading inputs from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Accept a "with:" block copied from a workflow file
    if set(data) == {"with"} and isinstance(data["with"], dict):
        data = data["with"]

    unknown = sorted(str(k) for k in data if k not in INPUT_NAMES)
    if unknown:
        logger.warning("Ignoring unknown inputs in %s: %s", path, ", ".join(unknown))

    return {k: _to_raw_string(v) for k, v in data.items() if k in INPUT_NAMES}


def parse_overrides(pairs: Iterable[str]) -> dict[str, str]:
    """Parse ``NAME=VALUE`` strings.

    Raises:
        ConfigError: If a pair has no ``=`` or names an unknown input.
    """
    overrides: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        name = name.strip()
        if not sep:
            raise ConfigError(f"Expected NAME=VALUE, got {pair!r}")
        if name not in INPUT_NAMES:
            raise ConfigError(f"Unknown input {name!r}")
        overrides[name] = value.strip()
    return overrides


def load_raw_inputs(
    inputs_file: Path | None = None,
    overrides: Iterable[str] = (),
    environ: Mapping[str, str] | None = None,
    apply_defaults: bool = True,
) -> dict[str, str]:
    """Merge defaults, environment, file and overrides into one mapping."""
    raw: dict[str, str] = dict(INPUT_DEFAULTS) if apply_defaults else {}
    raw.update(inputs_from_env(environ))
    if inputs_file is not None:
        raw.update(inputs_from_file(inputs_file))
    raw.update(parse_overrides(overrides))
    return raw


def load_inputs(
    inputs_file: Path | None = None,
    overrides: Iterable[str] = (),
    environ: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> Inputs:
    """Load and validate the install configuration.

    Raises:
        ConfigError: If any input is invalid.
    """
    environ = os.environ if environ is None else environ
    raw = load_raw_inputs(inputs_file, overrides, environ)
    inputs = Inputs.from_raw(
        raw,
        platform=platform,
        workspace=environ.get("RUNNER_WORKSPACE", ""),
    )
    logger.info(
        "Resolved Qt %s for %s/%s (arch=%s) into %s",
        inputs.version, inputs.host, inputs.target, inputs.arch or "default", inputs.dir,
    )
    return inputs
