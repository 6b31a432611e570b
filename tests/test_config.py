"""Tests for depth.core.config module."""

from __future__ import annotations

import os
from unittest import mock

from depth.core.config import (
    DEFAULT_REGISTRY_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    RegistryConfig,
)

CLEAN_ENV = {"DEPTH_REGISTRY_URL": "", "DEPTH_USER_AGENT": "", "DEPTH_TIMEOUT": ""}


class TestRegistryConfig:
    """Tests for RegistryConfig defaults and environment overrides."""

    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, CLEAN_ENV):
            config = RegistryConfig()
        assert config.base_url == DEFAULT_REGISTRY_URL
        assert config.user_agent == DEFAULT_USER_AGENT
        assert config.timeout == DEFAULT_TIMEOUT

    def test_environment_overrides(self) -> None:
        env = {
            "DEPTH_REGISTRY_URL": "https://mirror.example/api/v1",
            "DEPTH_USER_AGENT": "my-agent (me@example.com)",
            "DEPTH_TIMEOUT": "5.5",
        }
        with mock.patch.dict(os.environ, env):
            config = RegistryConfig()
        assert config.base_url == "https://mirror.example/api/v1"
        assert config.user_agent == "my-agent (me@example.com)"
        assert config.timeout == 5.5

    def test_explicit_values_win(self) -> None:
        with mock.patch.dict(os.environ, {"DEPTH_TIMEOUT": "9"}):
            config = RegistryConfig(base_url="https://x.example/", user_agent="ua", timeout=2.0)
        assert config.base_url == "https://x.example"
        assert config.user_agent == "ua"
        assert config.timeout == 2.0

    def test_invalid_timeout_falls_back(self) -> None:
        for value in ("soon", "-1", "0"):
            with mock.patch.dict(os.environ, {**CLEAN_ENV, "DEPTH_TIMEOUT": value}):
                assert RegistryConfig().timeout == DEFAULT_TIMEOUT

    def test_unset_environment_uses_defaults(self) -> None:
        env = {k: v for k, v in os.environ.items() if not k.startswith("DEPTH_")}
        with mock.patch.dict(os.environ, env, clear=True):
            config = RegistryConfig()
        assert config.base_url == DEFAULT_REGISTRY_URL
        assert config.user_agent == DEFAULT_USER_AGENT
        assert config.timeout == DEFAULT_TIMEOUT
