"""
Version comparison — dotted numeric ordering (pure).

Qt, aqtinstall and the fork tags all use ``MAJOR.MINOR.PATCH``.
Components compare numerically, missing components count as 0 and
a pre-release suffix ranks below the plain release.
No I/O, no subprocess.
"""

from __future__ import annotations

import re

_VERSION_RE = re.compile(r"^v?(\d+(?:\.\d+)*)(?:[-+]?([0-9A-Za-z.\-]+))?$")

_OPERATORS = (">", ">=", "=", "<=", "<")


def parse_version(version: str) -> tuple[tuple[int, ...], bool]:
    """Split a version into its numeric parts and a pre-release flag.

    Raises:
        ValueError: If the string is not a dotted numeric version.
    """
    match = _VERSION_RE.match(version.strip())
    if not match:
        raise ValueError(f"Invalid version: {version!r}")
    parts = tuple(int(x) for x in match.group(1).split("."))
    return parts, bool(match.group(2))


def _sort_key(version: str) -> tuple[tuple[int, ...], int]:
    parts, prerelease = parse_version(version)
    padded = parts + (0,) * max(0, 3 - len(parts))
    return padded, 0 if prerelease else 1


def compare_versions(v1: str, op: str, v2: str) -> bool:
    """Evaluate ``v1 <op> v2``.

    Example::

        compare_versions("6.8.0", ">=", "6.7.0")  # True
    """
    if op not in _OPERATORS:
        raise ValueError(f"Unsupported operator {op!r}, expected one of {_OPERATORS}")

    left, right = _sort_key(v1), _sort_key(v2)
    # Pad to equal length so "6.8" == "6.8.0.0"
    width = max(len(left[0]), len(right[0]))
    left = (left[0] + (0,) * (width - len(left[0])), left[1])
    right = (right[0] + (0,) * (width - len(right[0])), right[1])

    if op == ">":
        return left > right
    if op == ">=":
        return left >= right
    if op == "=":
        return left == right
    if op == "<=":
        return left <= right
    return left < right


def highest_version(versions: list[str]) -> str | None:
    """Return the highest of ``versions``, or None for an empty list."""
    if not versions:
        return None
    return max(versions, key=_sort_key)
