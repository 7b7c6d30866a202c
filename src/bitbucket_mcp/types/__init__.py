# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
"""Typed contracts for tool inputs, resolved commands and upstream payloads."""

from __future__ import annotations

from bitbucket_mcp.types.api import CommentAnchor, CommentBody, PullRequestBody
from bitbucket_mcp.types.commands import Command
from bitbucket_mcp.types.inputs import TOOL_ARGS_MAP

__all__ = [
    "TOOL_ARGS_MAP",
    "Command",
    "CommentAnchor",
    "CommentBody",
    "PullRequestBody",
]
