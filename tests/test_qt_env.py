"""
Tests for locating the installed kit and publishing the environment.
"""

from pathlib import Path

import pytest

from src.adapters.ci.memory import MemoryPlatform
from src.core.errors import QtNotFoundError
from src.core.services.qt_env import (
    locate_qt_arch_dir,
    publish_environment,
    requires_parallel_desktop,
    tools_paths,
)


class TestLocateQtArchDir:
    def test_single_kit(self, qt_tree):
        install_dir = qt_tree("6.8.0/gcc_64")
        assert locate_qt_arch_dir(str(install_dir)) == str((install_dir / "6.8.0" / "gcc_64").resolve())

    def test_prefers_kit_needing_desktop(self, qt_tree):
        install_dir = qt_tree("6.8.0/macos", "6.8.0/ios")
        assert locate_qt_arch_dir(str(install_dir)).endswith("ios")

    def test_qt5_mobile_not_preferred(self, qt_tree):
        install_dir = qt_tree("5.15.2/clang_64", "5.15.2/ios")
        assert locate_qt_arch_dir(str(install_dir)).endswith("clang_64")

    def test_qmake_suffix_matches(self, tmp_path: Path):
        bin_dir = tmp_path / "Qt" / "6.8.0" / "msvc2022_64" / "bin"
        bin_dir.mkdir(parents=True)
        (bin_dir / "qmake.exe").write_text("")
        assert locate_qt_arch_dir(str(tmp_path / "Qt")).endswith("msvc2022_64")

    def test_ignores_non_version_dirs(self, qt_tree):
        install_dir = qt_tree("Tools/QtCreator")
        with pytest.raises(QtNotFoundError, match="Failed to locate"):
            locate_qt_arch_dir(str(install_dir))

    def test_missing_dir(self, tmp_path: Path):
        with pytest.raises(QtNotFoundError):
            locate_qt_arch_dir(str(tmp_path / "nothing"))

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/Qt/6.8.0/android", True),
            ("/Qt/6.8.0/ios", True),
            ("/Qt/6.8.0/wasm", True),
            ("/Qt/6.8.0/gcc_64", False),
            ("/Qt/5.15.2/android", False),
            ("/Qt/6.8/ios", False),
        ],
    )
    def test_requires_parallel_desktop(self, path, expected):
        assert requires_parallel_desktop(path) is expected


class TestToolsPaths:
    def test_bin_and_binless(self, tmp_path: Path):
        (tmp_path / "Tools" / "CMake" / "bin").mkdir(parents=True)
        (tmp_path / "Tools" / "Ninja").mkdir(parents=True)
        (tmp_path / "Tools" / "Conan").mkdir(parents=True)

        paths = tools_paths(str(tmp_path))
        assert str((tmp_path / "Tools" / "CMake" / "bin").resolve()) in paths
        assert paths[-2:] == [
            str((tmp_path / "Tools" / "Conan").resolve()),
            str((tmp_path / "Tools" / "Ninja").resolve()),
        ]

    def test_app_bundles(self, tmp_path: Path):
        (tmp_path / "Qt Creator.app" / "Contents" / "MacOS").mkdir(parents=True)
        (tmp_path / "Tools" / "IFW" / "Installer.app" / "Contents" / "MacOS").mkdir(parents=True)
        paths = tools_paths(str(tmp_path))
        assert str((tmp_path / "Qt Creator.app" / "Contents" / "MacOS").resolve()) in paths
        assert str((tmp_path / "Tools" / "IFW" / "Installer.app" / "Contents" / "MacOS").resolve()) in paths

    def test_empty(self, tmp_path: Path):
        assert tools_paths(str(tmp_path)) == []


class TestPublishEnvironment:
    def _inputs(self, make_inputs, tmp_path: Path, **overrides: str):
        return make_inputs(dir=str(tmp_path), set_env="true", **overrides)

    def test_linux_exports(self, make_inputs, qt_tree, tmp_path: Path):
        qt_tree("6.8.0/gcc_64")
        inputs = self._inputs(make_inputs, tmp_path)
        ci = MemoryPlatform(environ={"LD_LIBRARY_PATH": "/usr/local/lib"})

        qt_path = publish_environment(inputs, ci, platform="linux")

        assert ci.outputs == {"qtPath": qt_path}
        assert ci.exported["LD_LIBRARY_PATH"] == f"/usr/local/lib:{qt_path}/lib"
        assert ci.exported["PKG_CONFIG_PATH"] == f"{qt_path}/lib/pkgconfig"
        assert ci.exported["QT_ROOT_DIR"] == qt_path
        assert ci.exported["QT_PLUGIN_PATH"] == f"{qt_path}/plugins"
        assert ci.exported["QML2_IMPORT_PATH"] == f"{qt_path}/qml"
        assert "Qt5_DIR" not in ci.exported
        assert "IQTA_TOOLS" not in ci.exported
        assert ci.paths == [f"{qt_path}/bin"]

    def test_qt5_dir(self, make_inputs, qt_tree, tmp_path: Path):
        qt_tree("5.15.2/clang_64")
        inputs = self._inputs(make_inputs, tmp_path, host="mac", version="5.15.2")
        ci = MemoryPlatform(environ={})

        qt_path = publish_environment(inputs, ci, platform="darwin")

        assert ci.exported["Qt5_DIR"] == f"{qt_path}/lib/cmake"
        assert "LD_LIBRARY_PATH" not in ci.exported
        assert "PKG_CONFIG_PATH" in ci.exported

    def test_windows_skips_pkg_config(self, make_inputs, qt_tree, tmp_path: Path):
        qt_tree("6.8.0/msvc2022_64")
        inputs = self._inputs(make_inputs, tmp_path, host="windows")
        ci = MemoryPlatform(environ={})

        publish_environment(inputs, ci, platform="win32")

        assert "PKG_CONFIG_PATH" not in ci.exported
        assert "LD_LIBRARY_PATH" not in ci.exported

    def test_set_env_false_only_output(self, make_inputs, qt_tree, tmp_path: Path):
        qt_tree("6.8.0/gcc_64")
        inputs = make_inputs(dir=str(tmp_path), set_env="false")
        ci = MemoryPlatform(environ={})

        publish_environment(inputs, ci, platform="linux")

        assert "qtPath" in ci.outputs
        assert ci.exported == {}
        assert ci.paths == []

    def test_tools(self, make_inputs, qt_tree, tmp_path: Path):
        qt_tree("6.8.0/gcc_64")
        (tmp_path / "Qt" / "Tools" / "Ninja").mkdir(parents=True)
        inputs = self._inputs(make_inputs, tmp_path, tools="tools_ninja", add_tools_to_path="true")
        ci = MemoryPlatform(environ={})

        publish_environment(inputs, ci, platform="linux")

        assert ci.exported["IQTA_TOOLS"] == str((tmp_path / "Qt" / "Tools").resolve())
        assert str((tmp_path / "Qt" / "Tools" / "Ninja").resolve()) in ci.paths

    def test_no_tools_no_tool_exports(self, make_inputs, qt_tree, tmp_path: Path):
        qt_tree("6.8.0/gcc_64")
        (tmp_path / "Qt" / "Tools" / "Ninja").mkdir(parents=True)
        inputs = self._inputs(make_inputs, tmp_path, tools="", add_tools_to_path="true")
        ci = MemoryPlatform(environ={})

        publish_environment(inputs, ci, platform="linux")

        assert "IQTA_TOOLS" not in ci.exported
        assert len(ci.paths) == 1

    def test_tools_only(self, make_inputs, tmp_path: Path):
        inputs = self._inputs(make_inputs, tmp_path, tools="tools_ninja", tools_only="true")
        ci = MemoryPlatform(environ={})

        assert publish_environment(inputs, ci, platform="linux") is None
        assert ci.outputs == {}
        assert "IQTA_TOOLS" in ci.exported

    def test_missing_kit_raises(self, make_inputs, tmp_path: Path):
        inputs = self._inputs(make_inputs, tmp_path)
        with pytest.raises(QtNotFoundError):
            publish_environment(inputs, MemoryPlatform(environ={}), platform="linux")
