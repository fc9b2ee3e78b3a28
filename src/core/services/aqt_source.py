"""
aqtinstall source selection — which aqt gets pip-installed.

Three ways in, checked in order:
    - ``aqtsource``: any pip requirement (URL, path, name)
    - ``aqtversion`` with a ``*``: highest matching tag of Kidev's fork
    - ``aqtversion``: a version range for upstream aqtinstall

Parsing helpers are pure; ``resolve_fork_version`` is the only
function that talks to the network (through the command adapter).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from src.adapters.base import Adapter, ExecutionContext
from src.core.models.action import Action
from src.core.services.versions import compare_versions, highest_version

logger = logging.getLogger(__name__)

KIDEV_REPO_URL = "https://github.com/Kidev/aqtinstall.git"

# Seconds; a hung lookup falls back like any other failure
TAG_LOOKUP_TIMEOUT = 60

_TAG_RE = re.compile(r"refs/tags/v(\d+\.\d+\.\d+)$")
_AQT_VERSION_RE = re.compile(r"aqtinstall\(aqt\)\s+v(\d+\.\d+\.\d+)")


def constraint_base(constraint: str) -> str:
    """Strip the operator and wildcard: ``"==3.2.*"`` → ``"3.2"``."""
    return constraint.replace("=", "").replace("*", "").rstrip(".")


def fallback_version(constraint: str) -> str:
    """Version used when no tag can be resolved: ``"==3.2.*"`` → ``"3.2.0"``."""
    return f"{constraint_base(constraint)}.0"


def latest_compatible_version(constraint: str, ls_remote_output: str) -> str:
    """Pick the highest ``vX.Y.Z`` tag matching a wildcard constraint.

    Args:
        constraint: A pip-style wildcard such as ``"==3.2.*"``.
        ls_remote_output: Raw stdout of ``git ls-remote --tags``.

    Returns:
        The highest matching version, or ``fallback_version`` when no
        tag matches.
    """
    base = constraint_base(constraint)
    prefix = f"{base}." if base else ""
    candidates = []
    for line in ls_remote_output.splitlines():
        match = _TAG_RE.search(line.strip())
        if match and match.group(1).startswith(prefix):
            candidates.append(match.group(1))

    return highest_version(candidates) or fallback_version(constraint)


def resolve_fork_version(
    adapter: Adapter,
    constraint: str,
    warn: Callable[[str], None] = logger.warning,
    dry_run: bool = False,
) -> str:
    """Resolve a wildcard constraint against the fork's published tags.

    Never raises: any failure to list tags is reported through
    ``warn`` and the fallback version is returned. A dry run does not
    touch the network and plans with the fallback version.
    """
    action = Action(
        id="git-ls-remote",
        name="List aqtinstall fork tags",
        args=["git", "ls-remote", "--tags", "--sort=-v:refname", KIDEV_REPO_URL],
        capture=True,
        timeout=TAG_LOOKUP_TIMEOUT,
    )
    receipt = adapter.execute(ExecutionContext(action=action, dry_run=dry_run))
    if receipt.status == "skipped":
        return fallback_version(constraint)
    if not receipt.ok:
        warn(f"Failed to fetch version tags: {receipt.error}. Using fallback version.")
        return fallback_version(constraint)

    try:
        return latest_compatible_version(constraint, receipt.output)
    except ValueError as e:
        warn(f"Failed to parse version tags: {e}. Using fallback version.")
        return fallback_version(constraint)


def aqt_requirement(aqt_source: str, aqt_version: str, fork_version: str | None = None) -> str:
    """The pip requirement string that installs aqt."""
    if aqt_source:
        return aqt_source
    if "*" in aqt_version:
        if fork_version is None:
            fork_version = fallback_version(aqt_version)
        return f"git+{KIDEV_REPO_URL}@v{fork_version}"
    return f"aqtinstall{aqt_version}"


def parse_aqt_version(output: str) -> str | None:
    """Extract the version from ``aqt version`` output."""
    match = _AQT_VERSION_RE.search(output)
    return match.group(1) if match else None


def supports_autodesktop(aqt_version: str | None) -> bool:
    """Whether this aqt release understands ``--autodesktop``.

    Upstream aqtinstall gained it in 3.0.0; the fork's 3.2.x line
    carries it too.
    """
    if not aqt_version:
        return False
    return compare_versions(aqt_version, ">=", "3.0.0") or aqt_version.startswith("3.2.")
