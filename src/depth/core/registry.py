"""Synchronous crates.io API client: crate metadata and per-version dependency lists."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from depth.core.config import RegistryConfig
from depth.core.errors import CrateNotFoundError, RegistryError
from depth.core.package import Dependency

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrateMetadata:
    """The fields of a crate record that the dependency walk needs."""

    id: str
    homepage: str | None
    max_version: str


class RegistryClient:
    """Blocking client for the crates.io web API."""

    def __init__(
        self,
        config: RegistryConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config or RegistryConfig()
        self._client = httpx.Client(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": "application/json",
            },
            transport=transport,
        )

    def __enter__(self) -> RegistryClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_crate_metadata(self, name: str) -> CrateMetadata:
        """Fetch id, homepage and newest version for a crate name."""
        data = self._get_json(f"/crates/{name}", name, crate_lookup=True)
        try:
            crate = data["crate"]
            return CrateMetadata(
                id=crate["id"],
                homepage=crate.get("homepage"),
                max_version=crate["max_version"],
            )
        except (KeyError, TypeError) as e:
            raise RegistryError(f"unexpected crate record for {name}: missing {e}") from e

    def list_dependencies(self, crate_id: str, version: str) -> list[Dependency]:
        """Fetch the dependencies declared by one published version of a crate."""
        data = self._get_json(f"/crates/{crate_id}/{version}/dependencies", crate_id)
        try:
            return [
                Dependency(
                    name=dep["crate_id"],
                    req=dep.get("req", "*"),
                    optional=bool(dep.get("optional", False)),
                    kind=dep.get("kind") or "normal",
                )
                for dep in data["dependencies"]
            ]
        except (KeyError, TypeError) as e:
            raise RegistryError(
                f"unexpected dependency list for {crate_id} {version}: missing {e}"
            ) from e

    def _get_json(self, path: str, name: str, *, crate_lookup: bool = False) -> dict:
        """
        GET a registry path and decode the JSON body.

        A 404 means the crate does not exist only on the crate lookup itself;
        anywhere else it is an ordinary registry failure.
        """
        logger.debug("GET %s%s", self.config.base_url, path)
        try:
            response = self._client.get(path)
        except httpx.TimeoutException as e:
            raise RegistryError(f"registry timed out for {name}: {e}") from e
        except httpx.HTTPError as e:
            raise RegistryError(f"registry request failed for {name}: {e}") from e

        if response.status_code == 404 and crate_lookup:
            raise CrateNotFoundError(name)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RegistryError(
                f"registry returned HTTP {response.status_code} for {name}"
            ) from e
        try:
            return response.json()
        except ValueError as e:
            raise RegistryError(f"registry returned invalid JSON for {name}") from e
