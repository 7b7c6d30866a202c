"""MCP tools for the pull-request lifecycle: create, inspect, merge, decline, diff, reviews."""

from __future__ import annotations

from typing import Any

from mcp.types import TextContent, Tool

from bitbucket_mcp.client import BitbucketClient
from bitbucket_mcp.mcp_tools.common import (
    PR_ID_PROPERTY,
    PROJECT_PROPERTY,
    REPOSITORY_PROPERTY,
    ToolHandler,
    _pr_path,
    _text,
    _values,
)
from bitbucket_mcp.types.api import PullRequestBody, RefBody
from bitbucket_mcp.types.commands import (
    CreatePullRequest,
    DeclinePullRequest,
    GetDiff,
    GetPullRequest,
    GetReviews,
    MergePullRequest,
)
from bitbucket_mcp.validation import MERGE_STRATEGIES

DEFAULT_MERGE_STRATEGY = "merge-commit"
DEFAULT_CONTEXT_LINES = 10
REVIEW_ACTIONS = frozenset({"APPROVED", "REVIEWED"})

# Bitbucket's optimistic-locking version; -1 skips the check.
_ANY_VERSION = -1


def register() -> tuple[list[Tool], dict[str, ToolHandler]]:
    """Return (tool_definitions, handler_map) for pull-request tools."""
    tools = [
        Tool(
            name="create_pull_request",
            description="Create a new pull request from sourceBranch into targetBranch within one repository.",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT_PROPERTY,
                    "repository": REPOSITORY_PROPERTY,
                    "title": {"type": "string", "description": "PR title"},
                    "description": {"type": "string", "description": "PR description"},
                    "sourceBranch": {"type": "string", "description": "Source branch name"},
                    "targetBranch": {"type": "string", "description": "Target branch name"},
                    "reviewers": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "List of reviewer usernames",
                    },
                },
                "required": ["repository", "title", "sourceBranch", "targetBranch"],
            },
        ),
        Tool(
            name="get_pull_request",
            description="Get pull request details: state, author, reviewers, refs",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT_PROPERTY,
                    "repository": REPOSITORY_PROPERTY,
                    "prId": PR_ID_PROPERTY,
                },
                "required": ["repository", "prId"],
            },
        ),
        Tool(
            name="merge_pull_request",
            description="Merge a pull request",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT_PROPERTY,
                    "repository": REPOSITORY_PROPERTY,
                    "prId": PR_ID_PROPERTY,
                    "message": {"type": "string", "description": "Merge commit message"},
                    "strategy": {
                        "type": "string",
                        "enum": list(MERGE_STRATEGIES),
                        "description": "Merge strategy to use (default merge-commit)",
                    },
                },
                "required": ["repository", "prId"],
            },
        ),
        Tool(
            name="decline_pull_request",
            description="Decline a pull request",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT_PROPERTY,
                    "repository": REPOSITORY_PROPERTY,
                    "prId": PR_ID_PROPERTY,
                    "message": {"type": "string", "description": "Reason for declining"},
                },
                "required": ["repository", "prId"],
            },
        ),
        Tool(
            name="get_diff",
            description="Get the pull request diff as plain text",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT_PROPERTY,
                    "repository": REPOSITORY_PROPERTY,
                    "prId": PR_ID_PROPERTY,
                    "contextLines": {"type": "number", "description": "Number of context lines (default 10)"},
                },
                "required": ["repository", "prId"],
            },
        ),
        Tool(
            name="get_reviews",
            description="Get pull request review activity (approvals and reviews only)",
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT_PROPERTY,
                    "repository": REPOSITORY_PROPERTY,
                    "prId": PR_ID_PROPERTY,
                },
                "required": ["repository", "prId"],
            },
        ),
    ]

    handlers: dict[str, ToolHandler] = {
        "create_pull_request": _handle_create_pull_request,
        "get_pull_request": _handle_get_pull_request,
        "merge_pull_request": _handle_merge_pull_request,
        "decline_pull_request": _handle_decline_pull_request,
        "get_diff": _handle_get_diff,
        "get_reviews": _handle_get_reviews,
    }

    return tools, handlers


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


def _ref(branch: str, project: str, repository: str) -> RefBody:
    return RefBody(
        id=f"refs/heads/{branch}",
        repository={"slug": repository, "project": {"key": project}},
    )


def pull_request_body(command: CreatePullRequest) -> PullRequestBody:
    body = PullRequestBody(
        title=command.title,
        fromRef=_ref(command.source_branch, command.project, command.repository),
        toRef=_ref(command.target_branch, command.project, command.repository),
    )
    if command.description is not None:
        body["description"] = command.description
    if command.reviewers is not None:
        body["reviewers"] = [{"user": {"name": name}} for name in command.reviewers]
    return body


def filter_reviews(activities: list[Any]) -> list[Any]:
    """Keep APPROVED / REVIEWED activities, preserving order."""
    return [a for a in activities if isinstance(a, dict) and a.get("action") in REVIEW_ACTIONS]


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_create_pull_request(command: CreatePullRequest, client: BitbucketClient) -> list[TextContent]:
    data = await client.post(_pr_path(command.project, command.repository), json=pull_request_body(command))
    return _text(data)


async def _handle_get_pull_request(command: GetPullRequest, client: BitbucketClient) -> list[TextContent]:
    data = await client.get(_pr_path(command.project, command.repository, command.pr_id))
    return _text(data)


async def _handle_merge_pull_request(command: MergePullRequest, client: BitbucketClient) -> list[TextContent]:
    body: dict[str, Any] = {"version": _ANY_VERSION, "strategy": command.strategy or DEFAULT_MERGE_STRATEGY}
    if command.message is not None:
        body["message"] = command.message
    data = await client.post(_pr_path(command.project, command.repository, command.pr_id, "merge"), json=body)
    return _text(data)


async def _handle_decline_pull_request(command: DeclinePullRequest, client: BitbucketClient) -> list[TextContent]:
    body: dict[str, Any] = {"version": _ANY_VERSION}
    if command.message is not None:
        body["message"] = command.message
    data = await client.post(_pr_path(command.project, command.repository, command.pr_id, "decline"), json=body)
    return _text(data)


async def _handle_get_diff(command: GetDiff, client: BitbucketClient) -> list[TextContent]:
    context_lines = DEFAULT_CONTEXT_LINES if command.context_lines is None else command.context_lines
    diff = await client.get(
        _pr_path(command.project, command.repository, command.pr_id, "diff"),
        params={"contextLines": context_lines},
        headers={"Accept": "text/plain"},
    )
    return _text(diff if diff is not None else "")


async def _handle_get_reviews(command: GetReviews, client: BitbucketClient) -> list[TextContent]:
    payload = await client.get(_pr_path(command.project, command.repository, command.pr_id, "activities"))
    return _text(filter_reviews(_values(payload)))
