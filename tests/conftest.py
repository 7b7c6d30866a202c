"""Shared pytest fixtures for bitbucket-mcp tests."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from bitbucket_mcp.client import BitbucketClient
from bitbucket_mcp.config import BasicAuth, BearerAuth, BitbucketConfig
from tests._fakes import FakeBitbucket

BASE_URL = "https://bitbucket.example.com"


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., BitbucketConfig]:
    """Factory for BitbucketConfig; token auth and default project ``TEST`` unless overridden."""

    def _make(**overrides: Any) -> BitbucketConfig:
        values: dict[str, Any] = {
            "base_url": BASE_URL,
            "credential": BearerAuth("test-token"),
            "default_project": "TEST",
            "log_dir": tmp_path,
        }
        values.update(overrides)
        return BitbucketConfig(**values)

    return _make


@pytest.fixture
def config(make_config: Callable[..., BitbucketConfig]) -> BitbucketConfig:
    return make_config()


@pytest.fixture
def basic_config(make_config: Callable[..., BitbucketConfig]) -> BitbucketConfig:
    return make_config(credential=BasicAuth("testuser", "testpass"))


@pytest.fixture
def bitbucket() -> FakeBitbucket:
    return FakeBitbucket()


@pytest.fixture
async def client(config: BitbucketConfig, bitbucket: FakeBitbucket) -> AsyncGenerator[BitbucketClient, None]:
    """A real BitbucketClient wired to the fake server."""
    async with BitbucketClient(config, transport=bitbucket.transport()) as c:
        yield c


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def bitbucket_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    """A clean BITBUCKET_* environment with token auth and default project ``TEST``."""
    for key in list(os.environ):
        if key.startswith("BITBUCKET_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("BITBUCKET_URL", BASE_URL)
    monkeypatch.setenv("BITBUCKET_TOKEN", "test-token")
    monkeypatch.setenv("BITBUCKET_DEFAULT_PROJECT", "TEST")
    monkeypatch.setenv("BITBUCKET_LOG_DIR", str(tmp_path))
    return monkeypatch
