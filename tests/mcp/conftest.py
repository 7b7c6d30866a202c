"""Fixtures for MCP server tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest

from bitbucket_mcp.client import BitbucketClient
from bitbucket_mcp.config import BitbucketConfig
from tests._fakes import FakeBitbucket


@pytest.fixture
async def mcp_server(config: BitbucketConfig, bitbucket: FakeBitbucket) -> AsyncGenerator[FakeBitbucket, None]:
    """Patch the MCP module globals with a test config and a client backed by the fake server."""
    import bitbucket_mcp.mcp_server as mcp_mod

    client = BitbucketClient(config, transport=bitbucket.transport())
    original_config = mcp_mod.config
    original_client = mcp_mod.client
    mcp_mod.config = config
    mcp_mod.client = client

    yield bitbucket

    mcp_mod.config = original_config
    mcp_mod.client = original_client
    await client.aclose()
