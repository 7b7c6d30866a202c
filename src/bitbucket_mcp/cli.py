"""Developer CLI for bitbucket-mcp.

Runs the same tool dispatch the MCP server uses, without an MCP client.

Usage:
    bitbucket-mcp-cli tools                                  # Print the tool catalogue
    bitbucket-mcp-cli call list_projects                     # Call a tool with no arguments
    bitbucket-mcp-cli call get_diff '{"repository": "api", "prId": 7}'
    bitbucket-mcp-cli check-config                           # Validate BITBUCKET_* settings
"""

from __future__ import annotations

import asyncio
import json as json_mod
import sys
from typing import Any

import click

from bitbucket_mcp import __version__
from bitbucket_mcp.client import BitbucketClient
from bitbucket_mcp.config import BitbucketConfig, ConfigError, load_config
from bitbucket_mcp.errors import ToolError


def _load_config_or_exit() -> BitbucketConfig:
    try:
        return load_config()
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


async def _call(name: str, arguments: dict[str, Any], config: BitbucketConfig) -> str:
    from bitbucket_mcp.mcp_server import dispatch

    async with BitbucketClient(config) as client:
        result = await dispatch(name, arguments, config=config, client=client)
    return "\n".join(item.text for item in result)


@click.group()
@click.version_option(version=__version__, prog_name="bitbucket-mcp")
def cli() -> None:
    """bitbucket-mcp — Bitbucket Server pull-request tools."""


@cli.command("tools")
@click.option("--json", "as_json", is_flag=True, help="Output full tool definitions as JSON")
def tools(as_json: bool) -> None:
    """List the tools the MCP server advertises."""
    from bitbucket_mcp.mcp_server import list_tools

    tool_list = asyncio.run(list_tools())
    if as_json:
        click.echo(json_mod.dumps([t.model_dump(exclude_none=True) for t in tool_list], indent=2))
        return
    for tool in tool_list:
        required = tool.inputSchema.get("required", [])
        click.echo(f"{tool.name:<22} {tool.description}")
        if required:
            click.echo(f"{'':<22} required: {', '.join(required)}")


@cli.command("call")
@click.argument("name")
@click.argument("arguments", default="{}")
def call(name: str, arguments: str) -> None:
    """Call tool NAME with ARGUMENTS given as a JSON object."""
    try:
        parsed = json_mod.loads(arguments)
    except json_mod.JSONDecodeError as exc:
        click.echo(f"Error: ARGUMENTS is not valid JSON: {exc}", err=True)
        sys.exit(1)
    if not isinstance(parsed, dict):
        click.echo("Error: ARGUMENTS must be a JSON object", err=True)
        sys.exit(1)

    config = _load_config_or_exit()
    try:
        output = asyncio.run(_call(name, parsed, config))
    except ToolError as exc:
        click.echo(f"Error [{exc.kind.value}]: {exc.message}", err=True)
        sys.exit(1)
    click.echo(output)


@cli.command("check-config")
def check_config() -> None:
    """Validate the BITBUCKET_* environment and show the effective settings."""
    config = _load_config_or_exit()
    click.echo(f"Base URL:        {config.base_url}")
    click.echo(f"REST API:        {config.api_url}")
    click.echo(f"Auth:            {config.auth_mode}")
    click.echo(f"Default project: {config.default_project or '(none)'}")
    click.echo(f"Log file:        {config.log_dir / 'bitbucket.log'}")
    click.echo(f"Timeout:         {config.timeout:g}s")


if __name__ == "__main__":
    cli()
