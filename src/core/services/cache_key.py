"""
Cache key derivation (pure).

The key identifies one installed Qt tree in the blob cache. It must
be byte-identical for identical inputs on the same OS release, and
never longer than ``MAX_KEY_LENGTH``.
"""

from __future__ import annotations

import hashlib
import platform
from collections.abc import Iterable

from src.core.models.inputs import MAX_CACHE_KEY_LENGTH, Inputs

MAX_KEY_LENGTH = MAX_CACHE_KEY_LENGTH


def host_os_release() -> str:
    """Release string of the running OS kernel, part of every key."""
    return platform.release()


def _key_parts(inputs: Inputs, os_release: str) -> Iterable[Iterable[str]]:
    # Field order is part of the key format; do not reorder.
    return (
        (
            inputs.host,
            os_release,
            inputs.target,
            inputs.wasm,
            inputs.arch,
            inputs.version,
            inputs.dir,
            inputs.py7zr_version,
            inputs.aqt_source,
            inputs.aqt_version,
        ),
        inputs.modules,
        inputs.archives,
        inputs.extra,
        inputs.tools,
        ("src" if inputs.src else "",),
        inputs.src_archives,
        ("doc" if inputs.doc else "",),
        inputs.doc_archives,
        inputs.doc_modules,
        ("example" if inputs.example else "",),
        inputs.example_archives,
        inputs.example_modules,
    )


def compute_cache_key(inputs: Inputs, os_release: str) -> str:
    """Derive the cache key for ``inputs`` on a host with ``os_release``.

    Keys longer than ``MAX_KEY_LENGTH`` are replaced with
    ``<prefix>-<sha256 hex of the full key>``.
    """
    cache_key = inputs.cache_key_prefix
    for group in _key_parts(inputs, os_release):
        for value in group:
            if value:
                cache_key += f"-{value}"

    cache_key = cache_key.replace(",", "-")
    if len(cache_key) > MAX_KEY_LENGTH:
        digest = hashlib.sha256(cache_key.encode("utf-8")).hexdigest()
        cache_key = f"{inputs.cache_key_prefix}-{digest}"
    return cache_key
