"""Tests for depth.api module."""

from __future__ import annotations

import re
from pathlib import Path
from unittest import mock

import pytest
from rich.console import Console

import depth
from depth.api import (
    NOT_FOUND_MESSAGE,
    build_graph,
    manifest_dependencies,
    visualize_dependency_tree,
)
from depth.core.errors import ManifestError, RegistryError

from conftest import DEMO_CRATES, DEMO_GOLDEN, FakeRegistry


class TestModuleExports:
    """Tests for depth module-level exports."""

    def test_version_is_string(self) -> None:
        assert isinstance(depth.__version__, str)

    def test_version_format(self) -> None:
        pattern = r"^\d+\.\d+\.\d+(\+.+)?$"
        assert re.match(pattern, depth.__version__), f"Invalid version: {depth.__version__}"

    def test_public_names(self) -> None:
        for name in depth.__all__:
            assert hasattr(depth, name)


class TestBuildGraph:
    """Tests for build_graph."""

    def test_levels_are_hops_below_root(self, demo_registry: FakeRegistry) -> None:
        graph, root = build_graph("demo", 1, client=demo_registry.client())
        assert root is not None
        assert graph.successors("demo") == ["left", "right"]
        # left and right are leaves at one level
        assert graph.successors("left") == []

    def test_zero_levels(self, demo_registry: FakeRegistry) -> None:
        graph, root = build_graph("demo", 0, client=demo_registry.client())
        assert root is not None
        assert len(graph) == 1

    def test_optional_mode(self) -> None:
        registry = FakeRegistry(
            {
                "root": {
                    "deps": [
                        {"crate_id": "opt", "req": "1", "optional": True, "kind": "normal"},
                        {"crate_id": "req", "req": "1", "optional": False, "kind": "normal"},
                    ]
                },
                "opt": {},
                "req": {},
            }
        )
        graph, _root = build_graph("root", 1, optional=True, client=registry.client())
        assert graph.successors("root") == ["opt"]


class TestVisualizeDependencyTree:
    """Tests for visualize_dependency_tree."""

    def test_demo_golden(self, demo_registry: FakeRegistry, plain_console: Console) -> None:
        found = visualize_dependency_tree(
            "demo", 3, client=demo_registry.client(), console=plain_console
        )
        assert found is True
        lines = plain_console.file.getvalue().splitlines()
        assert lines == ["Dependencies for package 'demo':"] + DEMO_GOLDEN

    def test_leaf_prints_single_line(self, plain_console: Console) -> None:
        registry = FakeRegistry({"solo": {"homepage": "https://solo.example"}})
        visualize_dependency_tree("solo", 2, client=registry.client(), console=plain_console)
        lines = plain_console.file.getvalue().splitlines()
        assert lines[1:] == [" ├── solo - (https://solo.example)"]

    def test_depth_one_prints_root_only(
        self, demo_registry: FakeRegistry, plain_console: Console
    ) -> None:
        visualize_dependency_tree("demo", 1, client=demo_registry.client(), console=plain_console)
        lines = plain_console.file.getvalue().splitlines()
        assert lines[1:] == [DEMO_GOLDEN[0]]

    def test_not_found(self, plain_console: Console, capsys) -> None:
        found = visualize_dependency_tree(
            "ghost", 2, client=FakeRegistry({}).client(), console=plain_console
        )
        assert found is False
        assert plain_console.file.getvalue() == ""
        assert NOT_FOUND_MESSAGE in capsys.readouterr().err

    def test_failure_prints_nothing(self, plain_console: Console) -> None:
        registry = FakeRegistry(dict(DEMO_CRATES), failing={"right"})
        with pytest.raises(RegistryError):
            visualize_dependency_tree("demo", 3, client=registry.client(), console=plain_console)
        assert plain_console.file.getvalue() == ""

    def test_default_client_is_closed(self, demo_registry: FakeRegistry, plain_console: Console) -> None:
        client = demo_registry.client()
        with mock.patch("depth.core.fetcher.RegistryClient", return_value=client):
            visualize_dependency_tree("demo", 2, console=plain_console)
        assert client._client.is_closed


class TestManifestDependencies:
    """Tests for manifest_dependencies."""

    def test_reads_file(self, tmp_path: Path) -> None:
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text('[dependencies]\nserde = "1"\nlog = "0.4"\n')
        assert manifest_dependencies(manifest) == ["serde", "log"]

    def test_accepts_str_path(self, tmp_path: Path) -> None:
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text('[dependencies]\nserde = "1"\n')
        assert manifest_dependencies(str(manifest)) == ["serde"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestError, match="cannot read"):
            manifest_dependencies(tmp_path / "Cargo.toml")
