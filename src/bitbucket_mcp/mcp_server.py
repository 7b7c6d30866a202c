"""MCP server for Bitbucket Server pull requests.

Exposes project/repository discovery and the pull-request lifecycle as MCP
tools over stdio. Configuration comes from the environment (see
``bitbucket_mcp.config``) and is read once at startup.

Usage:
    bitbucket-mcp                       # Serve over stdio
    bitbucket-mcp --log-dir /tmp/logs   # Write bitbucket.log elsewhere
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool

from bitbucket_mcp import __version__
from bitbucket_mcp.client import BitbucketAPIError, BitbucketClient
from bitbucket_mcp.config import BitbucketConfig, ConfigError, load_config
from bitbucket_mcp.errors import ErrorKind, ToolError, internal_error, method_not_found, upstream_error
from bitbucket_mcp.mcp_tools import comments, discovery, pull_requests
from bitbucket_mcp.mcp_tools.common import ToolHandler
from bitbucket_mcp.validation import VALIDATORS

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Tool registry
# ---------------------------------------------------------------------------

# Order in which tools are advertised by list_tools.
TOOL_NAMES = (
    "list_projects",
    "list_repositories",
    "create_pull_request",
    "get_pull_request",
    "merge_pull_request",
    "decline_pull_request",
    "add_comment",
    "get_diff",
    "get_reviews",
)


def _build_registry() -> tuple[tuple[Tool, ...], dict[str, ToolHandler]]:
    tools_by_name: dict[str, Tool] = {}
    handlers: dict[str, ToolHandler] = {}
    for module in (discovery, pull_requests, comments):
        module_tools, module_handlers = module.register()
        for tool in module_tools:
            tools_by_name[tool.name] = tool
        handlers.update(module_handlers)
    if set(tools_by_name) != set(TOOL_NAMES) or set(handlers) != set(TOOL_NAMES):
        msg = f"Tool registry mismatch: tools={sorted(tools_by_name)} handlers={sorted(handlers)}"
        raise RuntimeError(msg)
    return tuple(tools_by_name[name] for name in TOOL_NAMES), handlers


_TOOLS, _HANDLERS = _build_registry()

# ---------------------------------------------------------------------------
# Server setup
# ---------------------------------------------------------------------------

server = Server("bitbucket-server", version=__version__)
config: BitbucketConfig | None = None
client: BitbucketClient | None = None


def _get_config() -> BitbucketConfig:
    if config is None:
        msg = "Configuration not loaded"
        raise RuntimeError(msg)
    return config


def _get_client() -> BitbucketClient:
    if client is None:
        msg = "Bitbucket client not initialized"
        raise RuntimeError(msg)
    return client


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------


@server.list_tools()  # type: ignore[untyped-decorator,no-untyped-call]
async def list_tools() -> list[Tool]:
    return [tool.model_copy(deep=True) for tool in _TOOLS]


# ---------------------------------------------------------------------------
# Tool dispatch
# ---------------------------------------------------------------------------


@server.call_tool(validate_input=False)  # type: ignore[untyped-decorator]
async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent] | CallToolResult:
    """Run one tool call and report classified failures as an ``isError`` result.

    The SDK's JSON Schema pre-check is off; the per-tool validators report
    invalid params.
    """
    t0 = time.monotonic()

    try:
        result = await dispatch(name, arguments or {})
    except ToolError as exc:
        logger.error(
            "tool_error",
            extra={"tool": name, "args_data": arguments, "kind": exc.kind.value, "error": exc.message},
            exc_info=exc.kind is ErrorKind.INTERNAL_ERROR,
        )
        return exc.to_result()
    else:
        duration_ms = round((time.monotonic() - t0) * 1000, 1)
        logger.info("tool_result", extra={"tool": name, "duration_ms": duration_ms})
        return result


async def dispatch(
    name: str,
    arguments: Mapping[str, Any],
    *,
    config: BitbucketConfig | None = None,
    client: BitbucketClient | None = None,
) -> list[TextContent]:
    """Validate, resolve and execute one tool call.

    *config* and *client* default to the server globals set up by ``_run``.

    Every failure leaves as a ToolError: validation problems as
    ``invalid_params``, unknown names as ``method_not_found``, Bitbucket
    failures as ``upstream_error`` and anything else as ``internal_error``.
    """
    try:
        return await _dispatch(name, arguments, config, client)
    except ToolError:
        raise
    except BitbucketAPIError as exc:
        raise upstream_error(exc.message) from exc
    except Exception as exc:
        raise internal_error(str(exc) or type(exc).__name__) from exc


async def _dispatch(
    name: str,
    arguments: Mapping[str, Any],
    active_config: BitbucketConfig | None,
    active_client: BitbucketClient | None,
) -> list[TextContent]:
    handler = _HANDLERS.get(name)
    if handler is None:
        raise method_not_found(name)
    command = VALIDATORS[name](arguments, active_config or _get_config())
    active_client = active_client or _get_client()
    logger.info("tool_call", extra={"tool": name, "args_data": dict(arguments or {})})
    return await handler(command, active_client)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


async def _run(log_dir: Path | None) -> None:
    global config, client

    try:
        loaded = load_config()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    if log_dir is not None:
        loaded = dataclasses.replace(loaded, log_dir=log_dir)
    config = loaded

    from bitbucket_mcp.logging import setup_logging

    setup_logging(config.log_dir)
    logger.info(
        "mcp_server_start",
        extra={
            "tool": "server",
            "args_data": {
                "base_url": config.base_url,
                "auth": config.auth_mode,
                "default_project": config.default_project,
            },
        },
    )

    client = BitbucketClient(config)
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await client.aclose()
        client = None


def main() -> None:
    import asyncio

    parser = argparse.ArgumentParser(description="Bitbucket Server MCP server")
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for bitbucket.log (overrides BITBUCKET_LOG_DIR)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args()

    asyncio.run(_run(args.log_dir))


if __name__ == "__main__":
    main()
