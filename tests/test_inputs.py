"""
Tests for input resolution — validation, defaulting, derived fields.
"""

import os

import pytest
from pydantic import ValidationError

from src.core.errors import ConfigError
from src.core.models.inputs import (
    MAX_CACHE_KEY_PREFIX_LENGTH,
    Inputs,
    default_arch,
    host_for_platform,
)


class TestHost:
    @pytest.mark.parametrize(
        "platform, expected",
        [("win32", "windows"), ("darwin", "mac"), ("linux", "linux"), ("freebsd13", "linux")],
    )
    def test_defaults_from_platform(self, make_raw, platform, expected):
        inputs = Inputs.from_raw(make_raw(host=""), platform=platform)
        assert inputs.host == expected

    def test_explicit_host_wins(self, make_raw):
        inputs = Inputs.from_raw(make_raw(host="mac"), platform="win32")
        assert inputs.host == "mac"

    def test_invalid_host(self, make_raw):
        with pytest.raises(ConfigError, match='host: "beos"'):
            Inputs.from_raw(make_raw(host="beos"))

    def test_host_for_platform(self):
        assert host_for_platform("cygwin") == "linux"


class TestRequiredEnums:
    @pytest.mark.parametrize("value", ["", "tvos"])
    def test_target_required(self, make_raw, value):
        with pytest.raises(ConfigError, match="target"):
            Inputs.from_raw(make_raw(target=value))

    @pytest.mark.parametrize("value", ["", "threads"])
    def test_wasm_required(self, make_raw, value):
        with pytest.raises(ConfigError, match="wasm"):
            Inputs.from_raw(make_raw(wasm=value))

    def test_version_required(self, make_raw):
        with pytest.raises(ConfigError, match="version"):
            Inputs.from_raw(make_raw(version=""))

    def test_version_must_parse(self, make_raw):
        with pytest.raises(ConfigError, match="not a valid version"):
            Inputs.from_raw(make_raw(version="six"))


class TestArchDefaults:
    @pytest.mark.parametrize(
        "version, expected",
        [
            ("5.13.9", "android_armv7"),
            ("5.14.0", "android"),
            ("5.15.2", "android"),
            ("6.0.0", "android_armv7"),
            ("6.8.0", "android_armv7"),
        ],
    )
    def test_android(self, make_raw, version, expected):
        inputs = Inputs.from_raw(make_raw(target="android", version=version))
        assert inputs.arch == expected

    def test_android_beats_windows_ladder(self, make_raw):
        inputs = Inputs.from_raw(make_raw(host="windows", target="android", version="5.15.2"))
        assert inputs.arch == "android"

    @pytest.mark.parametrize(
        "version, expected",
        [
            ("6.8.0", "win64_msvc2022_64"),
            ("6.7.3", "win64_msvc2019_64"),
            ("5.15.0", "win64_msvc2019_64"),
            ("5.14.2", "win64_msvc2017_64"),
            ("5.9.0", "win64_msvc2017_64"),
            ("5.8.0", "win64_msvc2015_64"),
            ("5.6.0", "win64_msvc2015_64"),
            ("5.5.0", "win64_msvc2013_64"),
        ],
    )
    def test_windows_ladder(self, make_raw, version, expected):
        inputs = Inputs.from_raw(make_raw(host="windows", version=version))
        assert inputs.arch == expected

    def test_other_hosts_leave_arch_empty(self, make_raw):
        assert Inputs.from_raw(make_raw(host="mac")).arch == ""
        assert Inputs.from_raw(make_raw(host="linux", target="ios")).arch == ""

    def test_explicit_arch_kept(self, make_raw):
        inputs = Inputs.from_raw(make_raw(host="windows", arch="win64_mingw"))
        assert inputs.arch == "win64_mingw"

    def test_default_arch_function(self):
        assert default_arch("desktop", "windows", "5.5.0") == "win64_msvc2013_64"


class TestDir:
    def test_appends_qt(self, make_raw):
        inputs = Inputs.from_raw(make_raw(dir="/opt/build"))
        assert inputs.dir == os.path.abspath("/opt/build/Qt")

    def test_relative_dir_is_resolved(self, make_raw, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        inputs = Inputs.from_raw(make_raw(dir="sub"))
        assert inputs.dir == str(tmp_path / "sub" / "Qt")

    def test_workspace_fallback(self, make_raw):
        inputs = Inputs.from_raw(make_raw(dir=""), workspace="/runner/ws")
        assert inputs.dir == os.path.abspath("/runner/ws/Qt")

    def test_runner_workspace_env(self, make_raw, monkeypatch):
        monkeypatch.setenv("RUNNER_WORKSPACE", "/env/ws")
        inputs = Inputs.from_raw(make_raw(dir=""))
        assert inputs.dir == os.path.abspath("/env/ws/Qt")

    def test_missing_dir(self, make_raw):
        with pytest.raises(ConfigError, match='"dir" input may not be empty'):
            Inputs.from_raw(make_raw(dir=""), workspace="")


class TestLists:
    def test_empty_is_empty(self, make_inputs):
        inputs = make_inputs()
        assert inputs.modules == ()
        assert inputs.tools == ()
        assert inputs.extra == ()

    def test_split_on_spaces(self, make_inputs):
        inputs = make_inputs(modules="qtcharts qtnetworkauth", extra="--base http://mirror")
        assert inputs.modules == ("qtcharts", "qtnetworkauth")
        assert inputs.extra == ("--base", "http://mirror")

    def test_tool_commas_become_spaces(self, make_inputs):
        inputs = make_inputs(tools="tools_ifw,qt.tools.ifw.47 tools_ninja")
        assert inputs.tools == ("tools_ifw qt.tools.ifw.47", "tools_ninja")

    def test_flavor_lists(self, make_inputs):
        inputs = make_inputs(
            source="true",
            src_archives="qtbase",
            documentation="TRUE",
            doc_modules="qtcharts",
            examples="false",
            example_archives="qtbase",
        )
        assert inputs.src is True
        assert inputs.src_archives == ("qtbase",)
        assert inputs.doc is True
        assert inputs.doc_modules == ("qtcharts",)
        assert inputs.example is False
        assert inputs.example_archives == ("qtbase",)


class TestFlags:
    @pytest.mark.parametrize(
        "raw, expected",
        [("true", True), ("True", True), ("false", False), ("", False), ("yes", False),
         ("nosudo", "nosudo"), ("NoSudo", "nosudo")],
    )
    def test_install_deps(self, make_inputs, raw, expected):
        assert make_inputs(install_deps=raw).install_deps == expected

    def test_binaries_by_default(self, make_inputs):
        assert make_inputs().is_install_qt_binaries is True

    @pytest.mark.parametrize("flag", ["tools_only", "no_qt_binaries"])
    def test_binaries_disabled(self, make_inputs, flag):
        assert make_inputs(**{flag: "true"}).is_install_qt_binaries is False

    def test_cache_key_prefix_length_limit(self, make_inputs):
        assert make_inputs(cache_key_prefix="p" * MAX_CACHE_KEY_PREFIX_LENGTH).cache_key_prefix
        with pytest.raises(ConfigError, match="cache-key-prefix: must be at most 447"):
            make_inputs(cache_key_prefix="p" * 500)

    def test_raw_strings_kept(self, make_inputs):
        inputs = make_inputs(aqtsource="git+https://x", aqtversion="==3.2.*", py7zrversion=">=0.20")
        assert inputs.aqt_source == "git+https://x"
        assert inputs.aqt_version == "==3.2.*"
        assert inputs.py7zr_version == ">=0.20"


class TestImmutability:
    def test_frozen(self, make_inputs):
        inputs = make_inputs()
        with pytest.raises(ValidationError):
            inputs.version = "5.15.2"

    def test_resolution_is_repeatable(self, make_raw):
        raw = make_raw(host="windows", modules="qtcharts", tools="tools_ninja")
        assert Inputs.from_raw(raw) == Inputs.from_raw(raw)

    def test_raw_mapping_not_mutated(self, make_raw):
        raw = make_raw(arch="")
        snapshot = dict(raw)
        Inputs.from_raw(raw)
        assert raw == snapshot


class TestDerivedProperties:
    def test_qt_major(self, make_inputs):
        assert make_inputs(version="5.15.2").qt_major == 5

    @pytest.mark.parametrize(
        "source, version, expected",
        [
            ("git+https://github.com/Kidev/aqtinstall.git@v3.2.0", "", True),
            ("", "==3.2.*", True),
            ("", "==3.1.*", False),
            ("", ">=3.2.0", False),
        ],
    )
    def test_uses_aqt_fork(self, make_inputs, source, version, expected):
        assert make_inputs(aqtsource=source, aqtversion=version).uses_aqt_fork is expected
