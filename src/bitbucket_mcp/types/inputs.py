# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
"""TypedDict contracts for MCP tool handler input arguments.

Each TypedDict mirrors the JSON Schema ``inputSchema`` on the corresponding
``mcp.types.Tool`` definition.  The ``TOOL_ARGS_MAP`` registry maps tool names
to their TypedDict class so the sync test can verify structural agreement.

These describe the *raw* argument bag.  Runtime checking happens in
``bitbucket_mcp.validation``, which turns the bag into a resolved command
record from ``types/commands.py``.
"""

# NOTE: Do NOT add ``from __future__ import annotations`` to this module.
# It breaks TypedDict.__required_keys__ / __optional_keys__ introspection
# on Python <3.14, which the sync test in test_input_type_contracts.py
# depends on for verifying required/optional agreement with JSON Schema.

from typing import Literal, NotRequired, TypedDict

MergeStrategy = Literal["merge-commit", "squash", "fast-forward"]
DiffType = Literal["EFFECTIVE", "COMMIT", "RANGE"]
LineType = Literal["CONTEXT", "ADDED", "REMOVED"]
FileType = Literal["FROM", "TO"]

# ---------------------------------------------------------------------------
# discovery.py handlers
# ---------------------------------------------------------------------------


class ListProjectsArgs(TypedDict):
    limit: NotRequired[int]
    start: NotRequired[int]


class ListRepositoriesArgs(TypedDict):
    project: NotRequired[str]
    limit: NotRequired[int]
    start: NotRequired[int]


# ---------------------------------------------------------------------------
# pull_requests.py handlers
# ---------------------------------------------------------------------------


class CreatePullRequestArgs(TypedDict):
    project: NotRequired[str]
    repository: str
    title: str
    description: NotRequired[str]
    sourceBranch: str
    targetBranch: str
    reviewers: NotRequired[list[str]]


class PullRequestRefArgs(TypedDict):
    project: NotRequired[str]
    repository: str
    prId: int


class MergePullRequestArgs(TypedDict):
    project: NotRequired[str]
    repository: str
    prId: int
    message: NotRequired[str]
    strategy: NotRequired[MergeStrategy]


class DeclinePullRequestArgs(TypedDict):
    project: NotRequired[str]
    repository: str
    prId: int
    message: NotRequired[str]


class GetDiffArgs(TypedDict):
    project: NotRequired[str]
    repository: str
    prId: int
    contextLines: NotRequired[int]


# ---------------------------------------------------------------------------
# comments.py handlers
# ---------------------------------------------------------------------------


class AddCommentArgs(TypedDict):
    project: NotRequired[str]
    repository: str
    prId: int
    text: str
    parentId: NotRequired[int]
    filePath: NotRequired[str]
    lineNumber: NotRequired[int]
    lineType: NotRequired[LineType]
    fileType: NotRequired[FileType]
    diffType: NotRequired[DiffType]
    fromHash: NotRequired[str]
    toHash: NotRequired[str]


# Registry: tool_name -> TypedDict class.
TOOL_ARGS_MAP: dict[str, type] = {
    # discovery.py
    "list_projects": ListProjectsArgs,
    "list_repositories": ListRepositoriesArgs,
    # pull_requests.py
    "create_pull_request": CreatePullRequestArgs,
    "get_pull_request": PullRequestRefArgs,
    "merge_pull_request": MergePullRequestArgs,
    "decline_pull_request": DeclinePullRequestArgs,
    "get_diff": GetDiffArgs,
    "get_reviews": PullRequestRefArgs,
    # comments.py
    "add_comment": AddCommentArgs,
}
