"""depth: visualize crates.io dependencies as a tree (library, CLI, TUI)."""

from importlib.metadata import version, PackageNotFoundError

from depth.api import (
    build_graph,
    manifest_dependencies,
    visualize_dependency_tree,
)
from depth.core.errors import CrateNotFoundError, DepthError, ManifestError, RegistryError

__all__ = [
    "build_graph",
    "manifest_dependencies",
    "visualize_dependency_tree",
    "CrateNotFoundError",
    "DepthError",
    "ManifestError",
    "RegistryError",
    "__version__",
]

try:
    __version__ = version("depth")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed as package
