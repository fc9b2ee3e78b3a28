"""
Install use case — the whole run, from resolved inputs to published paths.

    dependencies → cache restore → [miss] aqt installs → cache save → publish

Each step runs to completion before the next one starts. Fatal errors
propagate to the caller; the CLI turns them into a failed step.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field

from src.adapters.base import Adapter
from src.adapters.cache.store import CacheStore
from src.adapters.ci.base import CIPlatform
from src.core.models.action import Action
from src.core.models.inputs import Inputs
from src.core.services.cache_key import compute_cache_key, host_os_release
from src.core.services.installer import Installer
from src.core.services.qt_env import publish_environment

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Result of an install run."""

    cache_key: str = ""
    cache_hit: bool = False
    cache_id: str | None = None
    qt_path: str | None = None
    commands: list[Action] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "cache_key": self.cache_key,
            "cache_hit": self.cache_hit,
            "cache_id": self.cache_id,
            "qt_path": self.qt_path,
            "commands": [action.args for action in self.commands],
        }


def run_install(
    inputs: Inputs,
    adapter: Adapter,
    ci: CIPlatform,
    cache_store: CacheStore | None = None,
    os_release: str | None = None,
    platform: str | None = None,
    dry_run: bool = False,
) -> InstallResult:
    """Install Qt as described by ``inputs`` and publish its location.

    Args:
        inputs: Resolved install configuration.
        adapter: Runs external commands.
        ci: Receives messages, outputs and environment exports.
        cache_store: Blob cache; required when ``inputs.cache`` is set.
        os_release: Host OS release for the cache key (default: running host).
        platform: ``sys.platform``-style identifier of the runner.
        dry_run: Log commands instead of running them; skip cache and publish.

    Returns:
        InstallResult describing what happened.

    Raises:
        InstallQtError: On any fatal failure.
    """
    platform = platform or sys.platform
    if os_release is None:
        os_release = host_os_release()

    result = InstallResult(cache_key=compute_cache_key(inputs, os_release))
    installer = Installer(adapter, warn=ci.warning, platform=platform, dry_run=dry_run)
    use_cache = inputs.cache and not dry_run

    if use_cache and cache_store is None:
        raise ValueError("cache is enabled but no cache store was given")

    # ── Native dependencies (always, even on a cache hit) ───────
    installer.install_dependencies(inputs)

    # ── Cache restore ───────────────────────────────────────────
    if use_cache:
        assert cache_store is not None
        hit_key = cache_store.restore([inputs.dir], result.cache_key)
        if hit_key:
            ci.info(f'Automatic cache hit with key "{hit_key}"')
            result.cache_hit = True
        else:
            ci.info("Automatic cache miss, will cache this run")

    # ── Install ─────────────────────────────────────────────────
    if not result.cache_hit:
        installer.install(inputs)

    # ── Cache save ──────────────────────────────────────────────
    if use_cache and not result.cache_hit:
        assert cache_store is not None
        result.cache_id = cache_store.save([inputs.dir], result.cache_key)
        ci.info(f"Automatic cache saved with id {result.cache_id}")

    result.commands = list(installer.executed)

    if dry_run:
        logger.info("Dry run: skipping environment publishing")
        return result

    # ── Publish ─────────────────────────────────────────────────
    result.qt_path = publish_environment(inputs, ci, platform)
    return result
