"""MCP tool for pull-request comments: general, threaded replies, and inline file/line comments."""

from __future__ import annotations

from mcp.types import TextContent, Tool

from bitbucket_mcp.client import BitbucketClient
from bitbucket_mcp.mcp_tools.common import PR_ID_PROPERTY, PROJECT_PROPERTY, REPOSITORY_PROPERTY, ToolHandler, _pr_path, _text
from bitbucket_mcp.types.api import CommentBody
from bitbucket_mcp.types.commands import AddComment
from bitbucket_mcp.validation import DIFF_TYPES, FILE_TYPES, LINE_TYPES


def register() -> tuple[list[Tool], dict[str, ToolHandler]]:
    """Return (tool_definitions, handler_map) for comment tools."""
    tools = [
        Tool(
            name="add_comment",
            description=(
                "Add a comment to a pull request. Pass parentId to reply to a comment. "
                "Pass filePath and lineNumber to attach the comment to a line of the diff."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "project": PROJECT_PROPERTY,
                    "repository": REPOSITORY_PROPERTY,
                    "prId": PR_ID_PROPERTY,
                    "text": {"type": "string", "description": "Comment text"},
                    "parentId": {"type": "number", "description": "Parent comment ID for replies"},
                    "filePath": {"type": "string", "description": "File path for an inline comment"},
                    "lineNumber": {"type": "number", "description": "Line number for an inline comment (required with filePath)"},
                    "lineType": {
                        "type": "string",
                        "enum": list(LINE_TYPES),
                        "description": "Type of line being commented on (default CONTEXT)",
                    },
                    "fileType": {
                        "type": "string",
                        "enum": list(FILE_TYPES),
                        "description": "Which side of the diff: FROM (old) or TO (new, default)",
                    },
                    "diffType": {
                        "type": "string",
                        "enum": list(DIFF_TYPES),
                        "description": "Diff the line refers to (default EFFECTIVE)",
                    },
                    "fromHash": {"type": "string", "description": "Source commit hash, for COMMIT/RANGE diffs"},
                    "toHash": {"type": "string", "description": "Target commit hash, for COMMIT/RANGE diffs"},
                },
                "required": ["repository", "prId", "text"],
            },
        ),
    ]

    handlers: dict[str, ToolHandler] = {
        "add_comment": _handle_add_comment,
    }

    return tools, handlers


def comment_body(command: AddComment) -> CommentBody:
    body = CommentBody(text=command.text)
    # Bitbucket comment ids start at 1; a zero parentId posts a top-level comment.
    if command.parent_id:
        body["parent"] = {"id": command.parent_id}
    if command.anchor is not None:
        body["anchor"] = command.anchor
    return body


async def _handle_add_comment(command: AddComment, client: BitbucketClient) -> list[TextContent]:
    data = await client.post(_pr_path(command.project, command.repository, command.pr_id, "comments"), json=comment_body(command))
    return _text(data)
