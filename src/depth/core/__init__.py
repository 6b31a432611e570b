"""Core library: registry client, dependency fetching, graph building and printing."""

from depth.core.config import RegistryConfig
from depth.core.errors import CrateNotFoundError, DepthError, ManifestError, RegistryError
from depth.core.fetcher import Fetcher, fetch_dependency_tree
from depth.core.graph import DependencyGraph, DependencyNode
from depth.core.package import Dependency, Package, parse_manifest_dependencies
from depth.core.registry import CrateMetadata, RegistryClient

__all__ = [
    "RegistryConfig",
    "CrateNotFoundError",
    "DepthError",
    "ManifestError",
    "RegistryError",
    "Fetcher",
    "fetch_dependency_tree",
    "DependencyGraph",
    "DependencyNode",
    "Dependency",
    "Package",
    "parse_manifest_dependencies",
    "CrateMetadata",
    "RegistryClient",
]
