"""Recursive, depth-limited walk of the registry that fills a DependencyGraph."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from depth.core.errors import CrateNotFoundError
from depth.core.graph import DependencyGraph
from depth.core.package import Dependency, Package
from depth.core.registry import RegistryClient

logger = logging.getLogger(__name__)

# Upper bound on the expansion budget; registry graphs are never this deep.
MAX_FETCH_DEPTH = 64


@dataclass
class _CacheEntry:
    package: Package
    budget: int  # largest depth budget the package has been expanded with


class Fetcher:
    """
    Fetch crates and their dependencies, one registry lookup per crate name.

    `optional` picks which declared dependencies are followed: only optional
    ones when True, only required ones when False. `runtime_only` further
    drops dev-dependencies.
    """

    def __init__(
        self,
        client: RegistryClient,
        graph: DependencyGraph | None = None,
        *,
        optional: bool = False,
        runtime_only: bool = False,
    ) -> None:
        self.client = client
        self.graph = graph if graph is not None else DependencyGraph()
        self.optional = optional
        self.runtime_only = runtime_only
        self.visited: dict[str, _CacheEntry] = {}
        self.fetch_count = 0
        self._missing: set[str] = set()

    def fetch(self, name: str, depth: int) -> Package | None:
        """
        Fetch `name` and expand its dependencies for `depth - 1` more levels.

        Returns the Package, or None if the registry does not know the crate.
        Any other registry failure propagates and aborts the walk.
        Each call starts with an empty visited cache; the graph is kept.
        """
        if not name:
            raise ValueError("crate name must not be empty")
        if depth < 0:
            raise ValueError(f"depth must be >= 0, got {depth}")
        if depth > MAX_FETCH_DEPTH:
            logger.warning("Depth %d exceeds limit; using %d", depth, MAX_FETCH_DEPTH)
            depth = MAX_FETCH_DEPTH
        self.visited = {}
        self._missing = set()
        return self._fetch(name, depth)

    def _fetch(self, name: str, depth: int) -> Package | None:
        entry = self.visited.get(name)
        if entry is not None:
            if depth > entry.budget:
                # Reached again closer to the root: expand further, no new lookup.
                logger.debug("Re-expanding %s (budget %d -> %d)", name, entry.budget, depth)
                entry.budget = depth
                self._expand(entry.package, depth)
            else:
                logger.debug("Cache hit: %s", name)
            return entry.package
        if name in self._missing:
            return None

        try:
            package = self._lookup(name)
        except CrateNotFoundError:
            logger.warning("Crate not found on registry: %s", name)
            self._missing.add(name)
            return None

        # Cache before recursing so dependency cycles end at the lookup above.
        self.visited[name] = _CacheEntry(package=package, budget=depth)
        self.graph.add_node(package)
        self._expand(package, depth)
        return package

    def _expand(self, package: Package, depth: int) -> None:
        if depth <= 1:
            return
        for dep_name, _req in package.dependencies:
            child = self._fetch(dep_name, depth - 1)
            if child is not None:
                self.graph.add_node(child)
                self.graph.add_edge(package.name, child.name)

    def _lookup(self, name: str) -> Package:
        metadata = self.client.get_crate_metadata(name)
        self.fetch_count += 1
        dependencies = self.client.list_dependencies(metadata.id, metadata.max_version)
        selected = [dep.as_tuple() for dep in dependencies if self._selects(dep)]
        logger.debug(
            "Fetched %s %s: %d of %d dependencies selected",
            name,
            metadata.max_version,
            len(selected),
            len(dependencies),
        )
        return Package.create(name, metadata.homepage, selected)

    def _selects(self, dependency: Dependency) -> bool:
        if dependency.optional != self.optional:
            return False
        if self.runtime_only and dependency.kind == "dev":
            return False
        return True


def fetch_dependency_tree(
    package_name: str,
    depth: int,
    optional: bool = False,
    *,
    runtime_only: bool = False,
    client: RegistryClient | None = None,
    graph: DependencyGraph | None = None,
) -> tuple[DependencyGraph, Package | None]:
    """
    Fetch the dependency tree of a crate into a graph.

    Args:
        package_name: Root crate name.
        depth: Expansion budget; 1 fetches the root only.
        optional: Follow only optional dependencies instead of only required ones.
        runtime_only: Skip dev-dependencies.
        client: Registry client to use; a default one is created and closed if None.
        graph: Graph to fill; a new one if None.

    Returns:
        (graph, root package), the package being None if the crate does not exist.
    """
    graph = graph if graph is not None else DependencyGraph()
    if client is None:
        with RegistryClient() as default_client:
            fetcher = Fetcher(default_client, graph, optional=optional, runtime_only=runtime_only)
            return graph, fetcher.fetch(package_name, depth)
    fetcher = Fetcher(client, graph, optional=optional, runtime_only=runtime_only)
    return graph, fetcher.fetch(package_name, depth)
