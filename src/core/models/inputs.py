"""
Inputs model — the resolved, immutable install configuration.

Built once per run by ``Inputs.from_raw`` from the raw string inputs
(action inputs, YAML file, CLI overrides). Every derived field
(``arch``, ``dir``) is computed at construction time; the instance
is frozen afterwards.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from src.core.errors import ConfigError
from src.core.services.versions import compare_versions, parse_version

Host = Literal["windows", "mac", "linux"]
Target = Literal["desktop", "android", "ios"]
Wasm = Literal["none", "singlethread", "multithread"]

HOSTS: tuple[str, ...] = ("windows", "mac", "linux")
TARGETS: tuple[str, ...] = ("desktop", "android", "ios")
WASM_MODES: tuple[str, ...] = ("none", "singlethread", "multithread")

QT_DIR_NAME = "Qt"

MAX_CACHE_KEY_LENGTH = 512
# Room for "-" and a sha256 hex digest, so a hashed key still fits
MAX_CACHE_KEY_PREFIX_LENGTH = MAX_CACHE_KEY_LENGTH - 1 - 64


def _one_of(choices: tuple[str, ...]) -> str:
    return " | ".join(f'"{c}"' for c in choices)


def host_for_platform(platform: str) -> str:
    """Map a ``sys.platform`` identifier to an aqt host name."""
    if platform == "win32":
        return "windows"
    if platform == "darwin":
        return "mac"
    return "linux"


def default_arch(target: str, host: str, version: str) -> str:
    """Pick the architecture used when the ``arch`` input is empty.

    Android wins over the Windows MSVC ladder; any other combination
    leaves the arch empty and lets aqt choose.
    """
    if target == "android":
        if compare_versions(version, ">=", "5.14.0") and compare_versions(version, "<", "6.0.0"):
            return "android"
        return "android_armv7"
    if host == "windows":
        # Order matters: first match wins
        if compare_versions(version, ">=", "6.8.0"):
            return "win64_msvc2022_64"
        if compare_versions(version, ">=", "5.15.0"):
            return "win64_msvc2019_64"
        if compare_versions(version, "<", "5.6.0"):
            return "win64_msvc2013_64"
        if compare_versions(version, "<", "5.9.0"):
            return "win64_msvc2015_64"
        return "win64_msvc2017_64"
    return ""


class Inputs(BaseModel):
    """Validated install configuration.

    Use ``Inputs.from_raw`` rather than the constructor: it applies
    the defaulting rules and reports errors by input name.
    """

    model_config = ConfigDict(frozen=True)

    host: Host
    target: Target
    wasm: Wasm
    version: str
    arch: str = ""
    dir: str

    modules: tuple[str, ...] = ()
    archives: tuple[str, ...] = ()
    tools: tuple[str, ...] = ()
    add_tools_to_path: bool = False
    extra: tuple[str, ...] = ()

    src: bool = False
    src_archives: tuple[str, ...] = ()

    doc: bool = False
    doc_archives: tuple[str, ...] = ()
    doc_modules: tuple[str, ...] = ()

    example: bool = False
    example_archives: tuple[str, ...] = ()
    example_modules: tuple[str, ...] = ()

    install_deps: bool | Literal["nosudo"] = False
    cache: bool = False
    cache_key_prefix: str = ""
    is_install_qt_binaries: bool = True
    set_env: bool = False

    aqt_source: str = ""
    aqt_version: str = ""
    py7zr_version: str = ""

    @property
    def qt_major(self) -> int:
        """Major component of the Qt version."""
        return parse_version(self.version)[0][0]

    @property
    def uses_aqt_fork(self) -> bool:
        """Whether aqt comes from Kidev's fork (needed for ``--wasm``)."""
        return "Kidev/aqtinstall" in self.aqt_source or self.aqt_version == "==3.2.*"

    @classmethod
    def from_raw(
        cls,
        raw: Mapping[str, str],
        platform: str | None = None,
        workspace: str | None = None,
    ) -> Inputs:
        """Resolve raw string inputs into a validated configuration.

        Args:
            raw: Input name → raw value. Missing names read as "".
            platform: ``sys.platform``-style identifier used when
                ``host`` is empty (default: the running platform).
            workspace: Fallback base directory when ``dir`` is empty
                (default: ``$RUNNER_WORKSPACE``).

        Raises:
            ConfigError: If any input is missing or malformed.
        """
        def get(name: str) -> str:
            return raw.get(name) or ""

        def get_bool(name: str) -> bool:
            return get(name).lower() == "true"

        def get_list(name: str) -> tuple[str, ...]:
            content = get(name)
            return tuple(content.split(" ")) if content else ()

        host = get("host")
        if not host:
            host = host_for_platform(platform if platform is not None else sys.platform)
        elif host not in HOSTS:
            raise ConfigError(f'host: "{host}" is not one of {_one_of(HOSTS)}')

        target = get("target")
        if target not in TARGETS:
            raise ConfigError(f'target: "{target}" is not one of {_one_of(TARGETS)}')

        wasm = get("wasm")
        if wasm not in WASM_MODES:
            raise ConfigError(f'wasm: "{wasm}" is not one of {_one_of(WASM_MODES)}')

        version = get("version")
        if not version:
            raise ConfigError('"version" input may not be empty')
        try:
            parse_version(version)
        except ValueError as e:
            raise ConfigError(f'version: "{version}" is not a valid version') from e

        cache_key_prefix = get("cache-key-prefix")
        if len(cache_key_prefix) > MAX_CACHE_KEY_PREFIX_LENGTH:
            raise ConfigError(
                f"cache-key-prefix: must be at most {MAX_CACHE_KEY_PREFIX_LENGTH} characters, "
                f"got {len(cache_key_prefix)}"
            )

        arch = get("arch") or default_arch(target, host, version)

        if workspace is None:
            workspace = os.environ.get("RUNNER_WORKSPACE", "")
        base_dir = get("dir") or workspace
        if not base_dir:
            raise ConfigError('"dir" input may not be empty')

        install_deps_raw = get("install-deps").lower()
        install_deps: bool | str = (
            "nosudo" if install_deps_raw == "nosudo" else install_deps_raw == "true"
        )

        try:
            return cls(
                host=host,
                target=target,
                wasm=wasm,
                version=version,
                arch=arch,
                dir=os.path.abspath(os.path.join(base_dir, QT_DIR_NAME)),
                modules=get_list("modules"),
                archives=get_list("archives"),
                tools=tuple(tool.replace(",", " ") for tool in get_list("tools")),
                add_tools_to_path=get_bool("add-tools-to-path"),
                extra=get_list("extra"),
                src=get_bool("source"),
                src_archives=get_list("src-archives"),
                doc=get_bool("documentation"),
                doc_archives=get_list("doc-archives"),
                doc_modules=get_list("doc-modules"),
                example=get_bool("examples"),
                example_archives=get_list("example-archives"),
                example_modules=get_list("example-modules"),
                install_deps=install_deps,
                cache=get_bool("cache"),
                cache_key_prefix=cache_key_prefix,
                is_install_qt_binaries=(
                    not get_bool("tools-only") and not get_bool("no-qt-binaries")
                ),
                set_env=get_bool("set-env"),
                aqt_source=get("aqtsource"),
                aqt_version=get("aqtversion"),
                py7zr_version=get("py7zrversion"),
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid inputs: {e}") from e
