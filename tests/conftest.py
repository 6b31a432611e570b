"""Shared fixtures: an in-memory crates.io served through httpx.MockTransport."""

from __future__ import annotations

import io

import httpx
import pytest
from rich.console import Console

from depth.core.config import RegistryConfig
from depth.core.registry import RegistryClient

BASE_URL = "https://crates.test/api/v1"
CRATES_PREFIX = "/api/v1/crates/"


def dep(
    name: str,
    req: str = "^1.0",
    optional: bool = False,
    kind: str = "normal",
) -> dict:
    """A dependency record as the registry API returns it."""
    return {"crate_id": name, "req": req, "optional": optional, "kind": kind}


class FakeRegistry:
    """Answers crate metadata and dependency requests from a dict of crates."""

    def __init__(
        self,
        crates: dict[str, dict],
        failing: set[str] | None = None,
    ) -> None:
        self.crates = crates
        self.failing = failing or set()
        self.paths: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        segments = request.url.path.removeprefix(CRATES_PREFIX).split("/")
        name = segments[0]
        if name in self.failing:
            return httpx.Response(500, json={"errors": [{"detail": "internal error"}]})
        crate = self.crates.get(name)
        if crate is None:
            return httpx.Response(404, json={"errors": [{"detail": "Not Found"}]})
        if len(segments) == 1:
            return httpx.Response(
                200,
                json={
                    "crate": {
                        "id": name,
                        "name": name,
                        "homepage": crate.get("homepage"),
                        "max_version": crate.get("version", "1.0.0"),
                    }
                },
            )
        if crate.get("no_dependency_list"):
            return httpx.Response(404, json={"errors": [{"detail": "Not Found"}]})
        return httpx.Response(200, json={"dependencies": crate.get("deps", [])})

    def metadata_calls(self, name: str | None = None) -> int:
        """Number of crate metadata requests, optionally for one crate."""
        calls = [p for p in self.paths if p.count("/") == CRATES_PREFIX.count("/")]
        if name is not None:
            calls = [p for p in calls if p == CRATES_PREFIX + name]
        return len(calls)

    def client(self) -> RegistryClient:
        return RegistryClient(
            RegistryConfig(base_url=BASE_URL, user_agent="depth-tests"),
            transport=httpx.MockTransport(self.handler),
        )


# demo -> left, right; left -> right
DEMO_CRATES = {
    "demo": {
        "homepage": "https://demo.example",
        "deps": [dep("left"), dep("right")],
    },
    "left": {
        "homepage": "https://left.example",
        "deps": [dep("right", "^0.3")],
    },
    "right": {
        "homepage": "https://right.example",
        "deps": [],
    },
}

DEMO_GOLDEN = [
    " ├── demo - (https://demo.example)",
    "   ├── left - (https://left.example)",
    "   ├── right - (https://right.example)",
]


@pytest.fixture
def demo_registry() -> FakeRegistry:
    return FakeRegistry(DEMO_CRATES)


@pytest.fixture
def plain_console() -> Console:
    """Console writing uncolored text to a buffer (read it with console.file.getvalue())."""
    return Console(
        file=io.StringIO(),
        color_system=None,
        highlight=False,
        soft_wrap=True,
        width=200,
    )
