"""Pure helpers and constants shared across MCP tool modules.

This module has NO dependency on ``mcp_server`` module globals, so it can
be imported freely without triggering circular-import issues.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import quote

from mcp.types import TextContent

from bitbucket_mcp.client import BitbucketClient

# Upstream pagination defaults, applied right before the request.
DEFAULT_LIMIT = 25
DEFAULT_START = 0

ToolHandler = Callable[[Any, BitbucketClient], Awaitable[list[TextContent]]]

# Schema fragments reused by every repository-scoped tool.
PROJECT_PROPERTY = {
    "type": "string",
    "description": "Bitbucket project key. Defaults to BITBUCKET_DEFAULT_PROJECT when omitted.",
}
REPOSITORY_PROPERTY = {"type": "string", "description": "Repository slug"}
PR_ID_PROPERTY = {"type": "number", "description": "Pull request ID"}


def _text(content: object) -> list[TextContent]:
    if isinstance(content, str):
        return [TextContent(type="text", text=content)]
    return [TextContent(type="text", text=json.dumps(content, indent=2, default=str))]


def _segment(value: str) -> str:
    return quote(value, safe="")


def _repo_path(project: str, repository: str) -> str:
    return f"/projects/{_segment(project)}/repos/{_segment(repository)}"


def _pr_path(project: str, repository: str, pr_id: int | None = None, subresource: str | None = None) -> str:
    """Build ``/projects/{p}/repos/{r}/pull-requests[/{id}[/{sub}]]``."""
    path = f"{_repo_path(project, repository)}/pull-requests"
    if pr_id is not None:
        path += f"/{pr_id}"
        if subresource:
            path += f"/{subresource}"
    return path


def _page_params(limit: int | None, start: int | None) -> dict[str, int]:
    return {
        "limit": DEFAULT_LIMIT if limit is None else limit,
        "start": DEFAULT_START if start is None else start,
    }


def _values(payload: Any) -> list[Any]:
    """Return the ``values`` list of a Bitbucket paged response."""
    if isinstance(payload, dict) and isinstance(payload.get("values"), list):
        return payload["values"]
    return []
