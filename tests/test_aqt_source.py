"""
Tests for aqtinstall source selection and fork tag resolution.
"""

import textwrap

import pytest

from src.adapters.mock import MockAdapter
from src.core.services.aqt_source import (
    KIDEV_REPO_URL,
    TAG_LOOKUP_TIMEOUT,
    aqt_requirement,
    constraint_base,
    fallback_version,
    latest_compatible_version,
    parse_aqt_version,
    resolve_fork_version,
    supports_autodesktop,
)

LS_REMOTE = textwrap.dedent("""\
    a1b2c3\trefs/tags/v3.3.0
    d4e5f6\trefs/tags/v3.2.10
    0718aa\trefs/tags/v3.2.9
    0718ab\trefs/tags/v3.2.9^{}
    99ffee\trefs/tags/v3.20.1
    123456\trefs/tags/v3.1.21
    abcdef\trefs/tags/not-a-version
""")


class TestConstraintBase:
    def test_strips_operator_and_wildcard(self):
        assert constraint_base("==3.2.*") == "3.2"

    def test_fallback(self):
        assert fallback_version("==3.2.*") == "3.2.0"


class TestLatestCompatibleVersion:
    def test_picks_highest_match(self):
        assert latest_compatible_version("==3.2.*", LS_REMOTE) == "3.2.10"

    def test_does_not_match_longer_minor(self):
        assert latest_compatible_version("==3.2.*", "x\trefs/tags/v3.20.1\n") == "3.2.0"

    def test_fallback_when_no_tags(self):
        assert latest_compatible_version("==3.4.*", LS_REMOTE) == "3.4.0"


class TestResolveForkVersion:
    def test_uses_git_output(self):
        adapter = MockAdapter()
        adapter.set_output("git-ls-remote", LS_REMOTE)
        assert resolve_fork_version(adapter, "==3.2.*") == "3.2.10"

        action = adapter.actions[0]
        assert action.args == ["git", "ls-remote", "--tags", "--sort=-v:refname", KIDEV_REPO_URL]
        assert action.capture is True
        assert action.timeout == TAG_LOOKUP_TIMEOUT

    def test_failure_warns_and_falls_back(self):
        adapter = MockAdapter()
        adapter.set_failure("git-ls-remote", error="could not resolve host")
        warnings: list[str] = []

        assert resolve_fork_version(adapter, "==3.2.*", warnings.append) == "3.2.0"
        assert len(warnings) == 1
        assert "Failed to fetch version tags" in warnings[0]
        assert "could not resolve host" in warnings[0]


class TestAqtRequirement:
    def test_custom_source_wins(self):
        assert aqt_requirement("aqtinstall==3.1.18", "==3.2.*") == "aqtinstall==3.1.18"

    def test_fork_pin(self):
        assert aqt_requirement("", "==3.2.*", "3.2.1") == f"git+{KIDEV_REPO_URL}@v3.2.1"

    def test_fork_without_resolution(self):
        assert aqt_requirement("", "==3.2.*") == f"git+{KIDEV_REPO_URL}@v3.2.0"

    def test_upstream_range(self):
        assert aqt_requirement("", ">=3.1.0") == "aqtinstall>=3.1.0"


class TestAutodesktop:
    def test_parse_version_output(self):
        output = "aqtinstall(aqt) v3.1.18 on Python 3.12.3 [CPython GCC 13.2.0]"
        assert parse_aqt_version(output) == "3.1.18"

    def test_parse_unrecognised(self):
        assert parse_aqt_version("command not found") is None

    @pytest.mark.parametrize(
        "version, expected",
        [("3.0.0", True), ("3.1.18", True), ("3.2.1", True), ("2.2.3", False), (None, False)],
    )
    def test_supports_autodesktop(self, version, expected):
        assert supports_autodesktop(version) is expected
