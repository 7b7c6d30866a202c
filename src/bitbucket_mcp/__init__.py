"""bitbucket-mcp — Bitbucket Server pull-request tools for MCP clients."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("bitbucket-mcp")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

from bitbucket_mcp.config import BitbucketConfig, load_config
