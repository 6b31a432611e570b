"""FastAPI app: serve crates.io dependency trees for the frontend."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from depth.core.errors import RegistryError
from depth.core.fetcher import fetch_dependency_tree
from depth.core.registry import RegistryClient

logger = logging.getLogger(__name__)

app = FastAPI(
    title="depth API",
    description="crates.io dependency tree backend",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_registry() -> Iterator[RegistryClient]:
    """One registry client per request."""
    with RegistryClient() as client:
        yield client


def _fetch(name: str, levels: int, optional: bool, client: RegistryClient):
    try:
        graph, root = fetch_dependency_tree(name, levels + 1, optional, client=client)
    except RegistryError as e:
        logger.error("Registry failure for %s: %s", name, e)
        raise HTTPException(status_code=502, detail=f"Registry error: {e}") from e
    if root is None:
        raise HTTPException(status_code=404, detail=f"Crate not found: {name}")
    return graph, root


@app.get("/api/crates/{name}")
def get_crate(
    name: str,
    optional: bool = False,
    client: RegistryClient = Depends(get_registry),
) -> dict:
    """Return a crate's homepage and the dependencies its newest version declares."""
    _graph, root = _fetch(name, 0, optional, client)
    return root.to_dict()


@app.get("/api/crates/{name}/tree")
def get_tree(
    name: str,
    levels: int = Query(1, ge=0, le=10),
    optional: bool = False,
    client: RegistryClient = Depends(get_registry),
) -> dict:
    """Return the dependency tree of a crate, `levels` hops below it."""
    graph, root = _fetch(name, levels, optional, client)
    return graph.to_dict(root, levels + 1)


@app.get("/api/crates/{name}/dot", response_class=PlainTextResponse)
def get_dot(
    name: str,
    levels: int = Query(1, ge=0, le=10),
    optional: bool = False,
    client: RegistryClient = Depends(get_registry),
) -> str:
    """Return the fetched dependency graph in DOT format."""
    graph, _root = _fetch(name, levels, optional, client)
    return graph.to_dot()
