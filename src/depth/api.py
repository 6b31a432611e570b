"""Public API: use depth from Python or from other tools."""

from __future__ import annotations

import sys
from pathlib import Path

from rich.console import Console

from depth.core.errors import ManifestError
from depth.core.fetcher import fetch_dependency_tree
from depth.core.graph import DependencyGraph
from depth.core.package import Package, parse_manifest_dependencies
from depth.core.registry import RegistryClient

NOT_FOUND_MESSAGE = "Package not found or does not have a Cargo.toml file"


def build_graph(
    package_name: str,
    levels: int = 1,
    *,
    optional: bool = False,
    runtime_only: bool = False,
    client: RegistryClient | None = None,
) -> tuple[DependencyGraph, Package | None]:
    """
    Fetch a crate's dependency graph, `levels` hops below the root.

    Args:
        package_name: Name of the root crate.
        levels: Dependency levels below the root (0 = root only).
        optional: Follow only optional dependencies instead of only required ones.
        runtime_only: Skip dev-dependencies.
        client: Registry client; a default crates.io client if None.

    Returns:
        (graph, root package), the package being None if the crate does not exist.
    """
    return fetch_dependency_tree(
        package_name,
        levels + 1,
        optional,
        runtime_only=runtime_only,
        client=client,
    )


def visualize_dependency_tree(
    package_name: str,
    depth: int,
    optional: bool = False,
    *,
    runtime_only: bool = False,
    client: RegistryClient | None = None,
    console: Console | None = None,
) -> bool:
    """
    Fetch a crate's dependency tree and print it.

    The whole tree is fetched before anything is printed, so a registry
    failure raises without partial output.

    Returns:
        True if the tree was printed, False if the crate was not found.
    """
    graph, root = fetch_dependency_tree(
        package_name,
        depth,
        optional,
        runtime_only=runtime_only,
        client=client,
    )
    if root is None:
        print(NOT_FOUND_MESSAGE, file=sys.stderr)
        return False

    if console is None:
        console = Console(highlight=False, soft_wrap=True)
    console.print(
        f"Dependencies for package '{package_name}':", markup=False, emoji=False, highlight=False
    )
    graph.print_dependencies_at_level(root, 0, depth, console=console)
    return True


def manifest_dependencies(path: Path | str) -> list[str]:
    """Read a Cargo.toml and return the crate names under [dependencies]."""
    manifest = Path(path)
    try:
        content = manifest.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"cannot read {manifest}: {e}") from e
    return parse_manifest_dependencies(content)
