"""Tests for credential plugin discovery via entry points."""

from __future__ import annotations

import pytest

from credkeep.config import PLUGIN_GROUP
from credkeep.core.registry import CredentialRegistry
from credkeep.errors import SpecValidationError
from credkeep.models.credentials import CredentialSpec
from credkeep.plugins import loader
from credkeep.plugins.loader import iter_specs, load_credential_plugins

GITHUB_SPECS = [
    {
        "key": "gitHubSSH",
        "name": "GitHub SSH key",
        "description": "Used to authenticate user for git operations such as clone, fetch, and push.",
        "type": "ssh",
        "verifyFunc": lambda files: True,
    },
    {
        "key": "gitHubAPI",
        "name": "GitHub API token",
        "description": "Used to authenticate REST/API actions.",
        "type": "token",
        "verifyFunc": lambda files: True,
        "getTokenFunc": lambda files: "tok",
    },
]


class FakeEntryPoint:
    def __init__(self, name: str, target=None, error: Exception | None = None) -> None:
        self.name = name
        self._target = target
        self._error = error

    def load(self):
        if self._error is not None:
            raise self._error
        return self._target


@pytest.fixture
def install_entry_points(monkeypatch):
    """Replace entry point discovery with the given fake entry points."""
    seen_groups: list[str] = []

    def _install(*entry_points: FakeEntryPoint) -> list[str]:
        def _entry_points(*, group: str):
            seen_groups.append(group)
            return list(entry_points)

        monkeypatch.setattr(loader.metadata, "entry_points", _entry_points)
        return seen_groups

    return _install


class TestIterSpecs:
    def test_single_spec(self, make_spec):
        spec = make_spec("one")
        assert iter_specs(spec) == [spec]

    def test_mapping(self):
        assert iter_specs(GITHUB_SPECS[0]) == [GITHUB_SPECS[0]]

    def test_iterable(self):
        assert iter_specs(GITHUB_SPECS) == GITHUB_SPECS

    def test_factory(self, make_spec):
        spec = make_spec("made")
        assert iter_specs(lambda: [spec]) == [spec]

    def test_rejects_other_values(self):
        with pytest.raises(SpecValidationError):
            iter_specs(42)
        with pytest.raises(SpecValidationError):
            iter_specs("gitHubAPI")
        with pytest.raises(SpecValidationError):
            iter_specs([GITHUB_SPECS[0], 3])


class TestLoadCredentialPlugins:
    def test_registers_specs(self, install_entry_points):
        groups = install_entry_points(FakeEntryPoint("github", GITHUB_SPECS))
        registry = CredentialRegistry()

        assert load_credential_plugins(registry) == ["gitHubSSH", "gitHubAPI"]
        assert groups == [PLUGIN_GROUP]
        assert isinstance(registry.get("gitHubAPI"), CredentialSpec)
        assert registry.get("gitHubAPI").get_token is not None

    def test_custom_group(self, install_entry_points):
        groups = install_entry_points()
        assert load_credential_plugins(CredentialRegistry(), group="other.group") == []
        assert groups == ["other.group"]

    def test_broken_plugin_skipped(self, install_entry_points, make_spec):
        good = make_spec("good")
        install_entry_points(
            FakeEntryPoint("broken", error=ImportError("no module named broken")),
            FakeEntryPoint("good", good),
        )
        registry = CredentialRegistry()
        assert load_credential_plugins(registry) == ["good"]

    def test_failing_factory_skipped(self, install_entry_points, make_spec):
        def misconfigured():
            raise RuntimeError("plugin misconfigured")

        install_entry_points(
            FakeEntryPoint("misconfigured", misconfigured),
            FakeEntryPoint("syntax", error=SyntaxError("invalid syntax")),
            FakeEntryPoint("good", make_spec("good")),
        )
        registry = CredentialRegistry()
        assert load_credential_plugins(registry) == ["good"]
        assert list(registry.keys()) == ["good"]

    def test_invalid_spec_skipped(self, install_entry_points):
        incomplete = {"key": "half", "name": "Half", "type": "token"}
        install_entry_points(FakeEntryPoint("mixed", [incomplete, GITHUB_SPECS[1]]))
        registry = CredentialRegistry()
        assert load_credential_plugins(registry) == ["gitHubAPI"]
        assert "half" not in registry
