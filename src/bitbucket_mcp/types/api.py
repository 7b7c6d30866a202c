# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
"""TypedDicts for upstream request bodies and shaped tool responses."""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict

from bitbucket_mcp.types.inputs import DiffType, FileType, LineType

# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class CommentAnchor(TypedDict):
    """Inline file comment location.

    ``fromHash`` / ``toHash`` are present only when the caller supplied them;
    Bitbucket rejects explicit nulls for these keys.
    """

    diffType: DiffType
    line: int
    lineType: LineType
    fileType: FileType
    path: str
    srcPath: str
    fromHash: NotRequired[str]
    toHash: NotRequired[str]


class CommentBody(TypedDict):
    text: str
    parent: NotRequired[dict[str, int]]
    anchor: NotRequired[CommentAnchor]


class RefBody(TypedDict):
    id: str
    repository: dict[str, Any]


class PullRequestBody(TypedDict):
    title: str
    description: NotRequired[str]
    fromRef: RefBody
    toRef: RefBody
    reviewers: NotRequired[list[dict[str, dict[str, str]]]]


# ---------------------------------------------------------------------------
# Shaped responses
# ---------------------------------------------------------------------------


class ProjectSummary(TypedDict):
    key: str
    name: str
    description: str | None
    public: bool
    type: str


class ProjectListResponse(TypedDict):
    total: int
    showing: int
    isLastPage: bool
    projects: list[ProjectSummary]


class RepositorySummary(TypedDict):
    slug: str
    name: str
    project: str | None
    public: bool
    state: str | None
    cloneUrl: str | None


class RepositoryListResponse(TypedDict):
    project: str
    total: int
    showing: int
    isLastPage: bool
    repositories: list[RepositorySummary]
