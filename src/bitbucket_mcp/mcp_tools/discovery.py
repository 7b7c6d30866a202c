"""MCP tools for project and repository discovery."""

from __future__ import annotations

from typing import Any

from mcp.types import TextContent, Tool

from bitbucket_mcp.client import BitbucketClient
from bitbucket_mcp.mcp_tools.common import PROJECT_PROPERTY, ToolHandler, _page_params, _segment, _text, _values
from bitbucket_mcp.types.api import ProjectListResponse, ProjectSummary, RepositoryListResponse, RepositorySummary
from bitbucket_mcp.types.commands import ListProjects, ListRepositories

_LIMIT_PROPERTY = {"type": "number", "description": "Maximum number of results to return (default 25)"}
_START_PROPERTY = {"type": "number", "description": "Start index for pagination (default 0)"}


def register() -> tuple[list[Tool], dict[str, ToolHandler]]:
    """Return (tool_definitions, handler_map) for discovery tools."""
    tools = [
        Tool(
            name="list_projects",
            description="List the Bitbucket projects visible to the configured credential. Use it to find project keys.",
            inputSchema={
                "type": "object",
                "properties": {
                    "limit": _LIMIT_PROPERTY,
                    "start": _START_PROPERTY,
                },
            },
        ),
        Tool(
            name="list_repositories",
            description=(
                "List repositories in a project, or across all projects when no project is given "
                "and BITBUCKET_DEFAULT_PROJECT is unset."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT_PROPERTY,
                    "limit": _LIMIT_PROPERTY,
                    "start": _START_PROPERTY,
                },
            },
        ),
    ]

    handlers: dict[str, ToolHandler] = {
        "list_projects": _handle_list_projects,
        "list_repositories": _handle_list_repositories,
    }

    return tools, handlers


# ---------------------------------------------------------------------------
# Response shaping
# ---------------------------------------------------------------------------


def _project_summary(project: dict[str, Any]) -> ProjectSummary:
    return ProjectSummary(
        key=project.get("key", ""),
        name=project.get("name", ""),
        description=project.get("description"),
        public=bool(project.get("public", False)),
        type=project.get("type", ""),
    )


def _clone_url(repo: dict[str, Any]) -> str | None:
    for link in repo.get("links", {}).get("clone", []):
        if link.get("name") == "http":
            return link.get("href")
    return None


def _repository_summary(repo: dict[str, Any]) -> RepositorySummary:
    return RepositorySummary(
        slug=repo.get("slug", ""),
        name=repo.get("name", ""),
        project=(repo.get("project") or {}).get("key"),
        public=bool(repo.get("public", False)),
        state=repo.get("state"),
        cloneUrl=_clone_url(repo),
    )


def _paging(payload: Any) -> tuple[int, bool]:
    """Return ``(total, is_last_page)`` from a paged response."""
    if not isinstance(payload, dict):
        return 0, True
    total = payload.get("size", len(_values(payload)))
    return total, bool(payload.get("isLastPage", True))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_list_projects(command: ListProjects, client: BitbucketClient) -> list[TextContent]:
    payload = await client.get("/projects", params=_page_params(command.limit, command.start))
    projects = [_project_summary(p) for p in _values(payload)]
    total, is_last = _paging(payload)
    return _text(ProjectListResponse(total=total, showing=len(projects), isLastPage=is_last, projects=projects))


async def _handle_list_repositories(command: ListRepositories, client: BitbucketClient) -> list[TextContent]:
    path = f"/projects/{_segment(command.project)}/repos" if command.project else "/repos"
    payload = await client.get(path, params=_page_params(command.limit, command.start))
    repositories = [_repository_summary(r) for r in _values(payload)]
    total, is_last = _paging(payload)
    return _text(
        RepositoryListResponse(
            project=command.project or "all",
            total=total,
            showing=len(repositories),
            isLastPage=is_last,
            repositories=repositories,
        )
    )
