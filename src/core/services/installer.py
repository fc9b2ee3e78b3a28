"""
Installer — the ordered sequence of external commands.

Steps, each conditional on the inputs:
    1. apt-get the native libraries Qt needs (Linux hosts)
    2. pip install py7zr and aqtinstall
    3. ask ``aqt version`` whether ``--autodesktop`` is supported
    4. ``aqt install-qt``
    5. ``aqt install-src`` / ``install-doc`` / ``install-example``
    6. ``aqt install-tool`` for every requested tool

Any failed command raises ``CommandError`` and aborts the rest of
the sequence. Nothing already installed is rolled back.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Sequence

from src.adapters.base import Adapter, ExecutionContext
from src.core.errors import CommandError
from src.core.models.action import Action, Receipt
from src.core.models.inputs import Inputs
from src.core.services.aqt_source import (
    aqt_requirement,
    parse_aqt_version,
    resolve_fork_version,
    supports_autodesktop,
)
from src.core.services.versions import compare_versions

logger = logging.getLogger(__name__)

# Qt's xcb platform plugin and the installer assume these are present;
# stock Ubuntu runners do not ship all of them.
APT_DEPENDENCIES: tuple[str, ...] = (
    "build-essential",
    "libgl1-mesa-dev",
    "libgstreamer-gl1.0-0",
    "libpulse-dev",
    "libxcb-glx0",
    "libxcb-icccm4",
    "libxcb-image0",
    "libxcb-keysyms1",
    "libxcb-randr0",
    "libxcb-render-util0",
    "libxcb-render0",
    "libxcb-shape0",
    "libxcb-shm0",
    "libxcb-sync1",
    "libxcb-util1",
    "libxcb-xfixes0",
    "libxcb-xinerama0",
    "libxcb1",
    "libxkbcommon-dev",
    "libxkbcommon-x11-0",
    "libxcb-xkb-dev",
)

# Needed by the xcb plugin from Qt 6.5 on
APT_DEPENDENCIES_QT65: tuple[str, ...] = ("libxcb-cursor0",)

WASM_MIN_QT_VERSION = "6.7.0"


# ── Command construction (pure) ────────────────────────────────


def python_executable(platform: str | None = None) -> str:
    """Interpreter name used to run pip and aqt."""
    return "python" if (platform or sys.platform) == "win32" else "python3"


def python_command(module: str, args: Sequence[str], platform: str | None = None) -> list[str]:
    """``<python> -m <module> <args...>``; ``module`` may carry a subcommand."""
    return [python_executable(platform), "-m", *module.split(" "), *args]


def flagged_list(flag: str, items: Sequence[str]) -> list[str]:
    """``[flag, *items]``, or nothing when ``items`` is empty."""
    return [flag, *items] if items else []


def apt_dependencies(version: str) -> list[str]:
    """Native packages to install for a given Qt version."""
    packages = list(APT_DEPENDENCIES)
    if compare_versions(version, ">=", "6.5.0"):
        packages.extend(APT_DEPENDENCIES_QT65)
    return packages


def dependency_actions(inputs: Inputs) -> list[Action]:
    """``apt-get update`` and ``apt-get install``, with sudo unless ``nosudo``."""
    sudo = [] if inputs.install_deps == "nosudo" else ["sudo"]
    return [
        Action(
            id="apt-update",
            name="Update package lists",
            args=[*sudo, "apt-get", "update"],
        ),
        Action(
            id="apt-install",
            name="Install Qt dependencies",
            args=[*sudo, "apt-get", "install", *apt_dependencies(inputs.version), "-y"],
        ),
    ]


def wasm_args(
    inputs: Inputs,
    warn: Callable[[str], None] = logger.warning,
) -> list[str]:
    """The ``--wasm`` flag group, or nothing (with a warning) when unsupported."""
    if inputs.wasm == "none":
        return []

    if not inputs.uses_aqt_fork:
        warn("WASM support requires Kidev's fork of aqtinstall (version 3.2.* or higher)")
        return []
    if not compare_versions(inputs.version, ">=", WASM_MIN_QT_VERSION):
        warn(f"WASM support requires Qt {WASM_MIN_QT_VERSION} or higher")
        return []
    return ["--wasm", inputs.wasm]


def install_qt_args(
    inputs: Inputs,
    autodesktop: bool,
    warn: Callable[[str], None] = logger.warning,
) -> list[str]:
    """Positional arguments and flags for ``aqt install-qt``."""
    args = [inputs.host, inputs.target, inputs.version]
    if inputs.arch:
        args.append(inputs.arch)
    if autodesktop:
        args.append("--autodesktop")
    args.extend(["--outputdir", inputs.dir])
    args.extend(flagged_list("--modules", inputs.modules))
    args.extend(flagged_list("--archives", inputs.archives))
    args.extend(wasm_args(inputs, warn))
    args.extend(inputs.extra)
    return args


def flavor_args(
    inputs: Inputs,
    archives: Sequence[str],
    modules: Sequence[str],
) -> list[str]:
    """Arguments for ``aqt install-src|install-doc|install-example``."""
    return [
        inputs.host,
        inputs.version,
        "--outputdir",
        inputs.dir,
        *flagged_list("--archives", archives),
        *flagged_list("--modules", modules),
        *inputs.extra,
    ]


def tool_args(inputs: Inputs, tool: str) -> list[str]:
    """Arguments for ``aqt install-tool``.

    A tool entry written as ``tools_ifw,qt.tools.ifw.47`` was turned
    into space-separated words at resolution time; each word is its
    own argument.
    """
    return [
        inputs.host,
        inputs.target,
        *tool.split(" "),
        "--outputdir",
        inputs.dir,
        *inputs.extra,
    ]


def flavors(inputs: Inputs) -> list[tuple[str, tuple[str, ...], tuple[str, ...]]]:
    """Requested source/doc/example installs as (flavor, archives, modules)."""
    requested = []
    if inputs.src:
        requested.append(("src", inputs.src_archives, ()))
    if inputs.doc:
        requested.append(("doc", inputs.doc_archives, inputs.doc_modules))
    if inputs.example:
        requested.append(("example", inputs.example_archives, inputs.example_modules))
    return requested


def build_plan(
    inputs: Inputs,
    autodesktop: bool,
    platform: str | None = None,
    warn: Callable[[str], None] = logger.warning,
) -> list[Action]:
    """All ``aqt install-*`` actions for ``inputs``, in execution order."""
    plan: list[Action] = []

    if inputs.is_install_qt_binaries:
        plan.append(
            Action(
                id="aqt-install-qt",
                name=f"Install Qt {inputs.version}",
                args=python_command(
                    "aqt install-qt", install_qt_args(inputs, autodesktop, warn), platform
                ),
            )
        )

    for flavor, archives, modules in flavors(inputs):
        plan.append(
            Action(
                id=f"aqt-install-{flavor}",
                name=f"Install Qt {flavor}",
                args=python_command(
                    f"aqt install-{flavor}", flavor_args(inputs, archives, modules), platform
                ),
            )
        )

    for index, tool in enumerate(inputs.tools):
        plan.append(
            Action(
                id=f"aqt-install-tool-{index}",
                name=f"Install tool {tool}",
                args=python_command("aqt install-tool", tool_args(inputs, tool), platform),
            )
        )

    return plan


# ── Execution ──────────────────────────────────────────────────


class Installer:
    """Runs installer steps through a command adapter.

    Args:
        adapter: Executes commands (``ShellCommandAdapter`` in production).
        warn: Receives non-fatal warnings (CI annotations).
        platform: ``sys.platform``-style identifier of the runner.
        dry_run: Pass-through to the adapter; nothing is executed.
    """

    def __init__(
        self,
        adapter: Adapter,
        warn: Callable[[str], None] = logger.warning,
        platform: str | None = None,
        dry_run: bool = False,
    ):
        self.adapter = adapter
        self.warn = warn
        self.platform = platform or sys.platform
        self.dry_run = dry_run
        self.executed: list[Action] = []

    def run(self, action: Action) -> Receipt:
        """Execute one action, raising on failure.

        Raises:
            CommandError: If the command fails.
        """
        logger.debug("Running step %s: %s", action.id, action.command_line)
        self.executed.append(action)
        receipt = self.adapter.execute(ExecutionContext(action=action, dry_run=self.dry_run))
        if receipt.failed:
            raise CommandError(action.command_line, receipt.return_code, receipt.error or "")
        return receipt

    def install_dependencies(self, inputs: Inputs) -> None:
        """Install native libraries on Linux when ``install-deps`` asks for it."""
        if self.platform != "linux" or not inputs.install_deps:
            return
        for action in dependency_actions(inputs):
            self.run(action)

    def install_aqt(self, inputs: Inputs) -> None:
        """pip-install py7zr and the selected aqtinstall."""
        self.run(
            Action(
                id="pip-install-py7zr",
                name="Install py7zr",
                args=python_command(
                    "pip install",
                    ["setuptools", "wheel", f"py7zr{inputs.py7zr_version}"],
                    self.platform,
                ),
            )
        )

        fork_version = None
        if not inputs.aqt_source and "*" in inputs.aqt_version:
            fork_version = resolve_fork_version(
                self.adapter, inputs.aqt_version, self.warn, dry_run=self.dry_run
            )
            logger.info("Installing Kidev's aqtinstall version %s", fork_version)

        requirement = aqt_requirement(inputs.aqt_source, inputs.aqt_version, fork_version)
        self.run(
            Action(
                id="pip-install-aqt",
                name="Install aqtinstall",
                args=python_command("pip install", [requirement], self.platform),
            )
        )

    def is_autodesktop_supported(self) -> bool:
        """Ask the installed aqt for its version.

        A dry run has no aqt to ask and plans with ``--autodesktop``,
        like the ``plan`` command does.
        """
        receipt = self.run(
            Action(
                id="aqt-version",
                name="Query aqt version",
                args=python_command("aqt", ["version"], self.platform),
                capture=True,
            )
        )
        if receipt.status == "skipped":
            return True
        raw_output = receipt.output + str(receipt.metadata.get("stderr", ""))
        version = parse_aqt_version(raw_output)
        logger.debug("aqt reports version %s", version)
        return supports_autodesktop(version)

    def install(self, inputs: Inputs) -> list[Action]:
        """Install aqt and then every requested Qt component.

        Returns:
            The ``aqt install-*`` actions that ran.
        """
        self.install_aqt(inputs)
        autodesktop = self.is_autodesktop_supported()

        plan = build_plan(inputs, autodesktop, self.platform, self.warn)
        for action in plan:
            self.run(action)
        return plan
