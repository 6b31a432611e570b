"""Registry client configuration (defaults overridable from the environment)."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_REGISTRY_URL = "https://crates.io/api/v1"
DEFAULT_USER_AGENT = "depth (https://github.com/wiseaidev/depth)"
DEFAULT_TIMEOUT = 1.0


@dataclass
class RegistryConfig:
    base_url: str = ""
    user_agent: str = ""
    timeout: float = 0.0

    def __post_init__(self) -> None:
        if not self.base_url:
            self.base_url = os.getenv("DEPTH_REGISTRY_URL") or DEFAULT_REGISTRY_URL
        self.base_url = self.base_url.rstrip("/")
        if not self.user_agent:
            self.user_agent = os.getenv("DEPTH_USER_AGENT") or DEFAULT_USER_AGENT
        if not self.timeout:
            self.timeout = _env_float("DEPTH_TIMEOUT", DEFAULT_TIMEOUT)


def _env_float(env_var: str, default: float) -> float:
    """Read a positive float from the environment, falling back to default."""
    value = os.environ.get(env_var, "").strip()
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default
