"""Error types raised by the registry client, the fetcher and the manifest parser."""

from __future__ import annotations


class DepthError(Exception):
    """Base class for all depth errors."""


class RegistryError(DepthError):
    """The registry could not be reached or returned an unusable answer."""


class CrateNotFoundError(RegistryError):
    """The registry has no crate with the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"crate not found: {name}")
        self.name = name


class ManifestError(DepthError):
    """A Cargo.toml manifest could not be parsed."""
