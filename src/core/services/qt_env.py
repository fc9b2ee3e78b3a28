"""
Qt environment — locate the installed kit and publish it to later steps.

After an install (or a cache hit) the kit lives somewhere under
``<dir>/<version>/<arch>``. This module finds it, then sets the
``qtPath`` output and the environment variables CMake, qmake and
pkg-config look at.
"""

from __future__ import annotations

import glob
import logging
import os
import re
import sys
from pathlib import Path

from src.adapters.ci.base import CIPlatform
from src.core.errors import QtNotFoundError
from src.core.models.inputs import Inputs

logger = logging.getLogger(__name__)

# Tools that ship their binaries in the tool directory itself
BINLESS_TOOL_DIRECTORIES: tuple[str, ...] = ("Conan", "Ninja")

TOOL_BIN_PATTERNS: tuple[str, ...] = (
    "Tools/**/bin",
    "*.app/Contents/MacOS",
    "*.app/**/bin",
    "Tools/*/*.app/Contents/MacOS",
    "Tools/*/*.app/**/bin",
)

# Kits that are cross-compiled and need a desktop Qt next to them.
# Matched as regular expressions, exactly as written.
_QT6_VERSION_DIR_RE = re.compile(r"^6\.\d+\.\d+$")
_PARALLEL_DESKTOP_ARCH_RE = re.compile(r"^(android*|ios|wasm*|msvc*_arm64)$")


def tools_paths(install_dir: str) -> list[str]:
    """Every tool directory that should go on PATH, resolved."""
    found: list[str] = []
    for pattern in TOOL_BIN_PATTERNS:
        found.extend(sorted(glob.glob(os.path.join(install_dir, pattern), recursive=True)))

    for name in BINLESS_TOOL_DIRECTORIES:
        candidate = Path(install_dir, "Tools", name)
        if candidate.is_dir():
            found.append(str(candidate))

    resolved: list[str] = []
    for path in found:
        absolute = str(Path(path).resolve())
        if absolute not in resolved:
            resolved.append(absolute)
    return resolved


def requires_parallel_desktop(arch_path: str) -> bool:
    """Whether ``<version>/<arch>`` is a Qt 6 mobile, wasm or arm64 kit."""
    arch_dir = os.path.basename(arch_path)
    version_dir = os.path.basename(os.path.dirname(arch_path))
    return bool(_QT6_VERSION_DIR_RE.match(version_dir) and _PARALLEL_DESKTOP_ARCH_RE.match(arch_dir))


def locate_qt_arch_dir(install_dir: str) -> str:
    """Find the ``<version>/<arch>`` directory that holds qmake.

    A kit that needs a parallel desktop install is preferred over the
    desktop kit aqt pulled in for it.

    Raises:
        QtNotFoundError: If no kit is found under ``install_dir``.
    """
    qmakes = sorted(glob.glob(os.path.join(install_dir, "[0-9]*", "*", "bin", "qmake*")))
    arch_dirs: list[str] = []
    for qmake in qmakes:
        arch_dir = str(Path(qmake).parent.parent.resolve())
        if arch_dir not in arch_dirs:
            arch_dirs.append(arch_dir)

    logger.debug("Qt kits under %s: %s", install_dir, arch_dirs)

    for arch_dir in arch_dirs:
        if requires_parallel_desktop(arch_dir):
            return arch_dir
    if not arch_dirs:
        raise QtNotFoundError(f"Failed to locate a Qt installation directory in {install_dir}")
    return arch_dirs[0]


def publish_environment(
    inputs: Inputs,
    ci: CIPlatform,
    platform: str | None = None,
) -> str | None:
    """Publish tool paths, ``qtPath`` and the Qt environment variables.

    Args:
        inputs: Resolved install configuration.
        ci: Where outputs, variables and PATH entries go.
        platform: ``sys.platform``-style identifier of the runner.

    Returns:
        The Qt kit directory, or None when Qt binaries were not requested.

    Raises:
        QtNotFoundError: If binaries were requested but no kit is found.
    """
    platform = platform or sys.platform

    if inputs.add_tools_to_path and inputs.tools:
        for path in tools_paths(inputs.dir):
            ci.add_path(path)

    if inputs.tools and inputs.set_env:
        ci.export_variable("IQTA_TOOLS", str(Path(inputs.dir, "Tools").resolve()))

    if not inputs.is_install_qt_binaries:
        return None

    qt_path = locate_qt_arch_dir(inputs.dir)
    ci.set_output("qtPath", qt_path)
    logger.info("Qt kit located at %s", qt_path)

    if inputs.set_env:
        if platform == "linux":
            ci.append_variable("LD_LIBRARY_PATH", os.path.join(qt_path, "lib"))
        if platform != "win32":
            ci.append_variable("PKG_CONFIG_PATH", os.path.join(qt_path, "lib", "pkgconfig"))
        if inputs.qt_major < 6:
            ci.export_variable("Qt5_DIR", os.path.join(qt_path, "lib", "cmake"))
        ci.export_variable("QT_ROOT_DIR", qt_path)
        ci.export_variable("QT_PLUGIN_PATH", os.path.join(qt_path, "plugins"))
        ci.export_variable("QML2_IMPORT_PATH", os.path.join(qt_path, "qml"))
        ci.add_path(os.path.join(qt_path, "bin"))

    return qt_path
