"""Crate metadata records and Cargo.toml dependency parsing."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field

from depth.core.errors import ManifestError

# Crates whose names start with this are treated as toolchain-internal.
INTERNAL_PREFIX = "std"


@dataclass(frozen=True)
class Dependency:
    """One dependency declared by a crate version, as reported by the registry."""

    name: str
    req: str
    optional: bool = False
    kind: str = "normal"  # normal, build or dev

    def as_tuple(self) -> tuple[str, str]:
        return (self.name, self.req)


@dataclass(frozen=True)
class Package:
    """A crate with its homepage and the (name, version requirement) pairs it depends on."""

    name: str
    url: str
    dependencies: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    internal: bool = False

    @classmethod
    def create(
        cls,
        name: str,
        url: str | None,
        dependencies: list[tuple[str, str]] | tuple[tuple[str, str], ...] = (),
    ) -> Package:
        """Build a Package; a missing homepage becomes "" and `internal` comes from the name."""
        return cls(
            name=name,
            url=url or "",
            dependencies=tuple((dep_name, req) for dep_name, req in dependencies),
            internal=name.startswith(INTERNAL_PREFIX),
        )

    @property
    def dependency_names(self) -> list[str]:
        return [dep_name for dep_name, _ in self.dependencies]

    def to_dict(self) -> dict:
        """Serialize to a JSON-friendly dict."""
        return {
            "name": self.name,
            "url": self.url,
            "dependencies": [{"name": n, "req": r} for n, r in self.dependencies],
            "internal": self.internal,
        }


def parse_manifest_dependencies(content: str) -> list[str]:
    """
    Return the crate names declared under [dependencies] in a Cargo.toml.

    Returns an empty list when the manifest has no [dependencies] table.
    Raises ManifestError if the content is not valid TOML.
    """
    try:
        manifest = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"invalid Cargo.toml: {e}") from e

    dependencies = manifest.get("dependencies")
    if not isinstance(dependencies, dict):
        return []
    return list(dependencies.keys())
