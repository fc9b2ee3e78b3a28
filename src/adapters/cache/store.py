"""
Cache store — key-addressed snapshots of directory trees.

The installer asks the store for a key before downloading anything
and hands it the installed tree afterwards. ``LocalCacheStore``
keeps one gzip tarball per key on a directory that survives between
runs (a runner tool cache, a mounted volume).
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tarfile
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

CACHE_DIR_NAME = "install-qt"


def default_cache_root() -> Path:
    """``$IQTA_CACHE_DIR``, else ``<$RUNNER_TOOL_CACHE or ~/.cache>/install-qt``."""
    explicit = os.environ.get("IQTA_CACHE_DIR")
    if explicit:
        return Path(explicit)
    base = os.environ.get("RUNNER_TOOL_CACHE") or str(Path.home() / ".cache")
    return Path(base) / CACHE_DIR_NAME


class CacheStore(ABC):
    """Abstract blob cache."""

    @abstractmethod
    def restore(self, paths: Sequence[str], key: str) -> str | None:
        """Restore ``paths`` saved under ``key``.

        Returns:
            The matched key, or None on a cache miss.
        """

    @abstractmethod
    def save(self, paths: Sequence[str], key: str) -> str:
        """Save ``paths`` under ``key``.

        Returns:
            An identifier for the saved entry.
        """


class LocalCacheStore(CacheStore):
    """Cache entries as ``<root>/<sha256(key)>.tar.gz`` plus a JSON manifest."""

    def __init__(self, root: Path | str | None = None):
        self.root = Path(root) if root is not None else default_cache_root()

    @staticmethod
    def entry_id(key: str) -> str:
        return hashlib.sha256(key.encode("utf-8")).hexdigest()

    def archive_path(self, key: str) -> Path:
        return self.root / f"{self.entry_id(key)}.tar.gz"

    def manifest_path(self, key: str) -> Path:
        return self.root / f"{self.entry_id(key)}.json"

    def restore(self, paths: Sequence[str], key: str) -> str | None:
        archive = self.archive_path(key)
        manifest_file = self.manifest_path(key)
        if not archive.is_file() or not manifest_file.is_file():
            logger.debug("Cache miss for %s (no entry at %s)", key, archive)
            return None

        manifest = json.loads(manifest_file.read_text(encoding="utf-8"))
        if manifest.get("key") != key:
            # Digest collision or a hand-edited manifest
            logger.warning("Cache entry %s belongs to another key, ignoring", archive.name)
            return None

        with tarfile.open(archive, "r:gz") as tar:
            for index, path in enumerate(paths):
                dest = Path(path)
                dest.mkdir(parents=True, exist_ok=True)
                tar.extractall(dest, members=_members_under(tar, index), filter="data")

        logger.info("Restored %d path(s) from %s", len(paths), archive)
        return key

    def save(self, paths: Sequence[str], key: str) -> str:
        self.root.mkdir(parents=True, exist_ok=True)
        archive = self.archive_path(key)
        partial = archive.with_suffix(".partial")

        with tarfile.open(partial, "w:gz") as tar:
            for index, path in enumerate(paths):
                source = Path(path)
                if not source.exists():
                    logger.warning("Cache path does not exist, skipping: %s", source)
                    continue
                tar.add(str(source), arcname=str(index))
        partial.replace(archive)

        manifest = {
            "key": key,
            "paths": [str(p) for p in paths],
            "saved_at": datetime.now(UTC).isoformat(),
        }
        self.manifest_path(key).write_text(json.dumps(manifest, indent=2), encoding="utf-8")

        logger.info("Saved %d path(s) to %s", len(paths), archive)
        return self.entry_id(key)


def _members_under(tar: tarfile.TarFile, index: int) -> Iterator[tarfile.TarInfo]:
    """Members stored for path number ``index``, renamed relative to it."""
    prefix = f"{index}/"
    for member in tar.getmembers():
        if not member.name.startswith(prefix):
            continue
        changes: dict[str, str] = {"name": member.name[len(prefix):]}
        if member.islnk() and member.linkname.startswith(prefix):
            changes["linkname"] = member.linkname[len(prefix):]
        yield member.replace(**changes, deep=False)
