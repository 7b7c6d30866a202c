# IMPORT CONSTRAINT: types/ modules must only import from typing, stdlib, and each other.
"""Resolved command records, one per tool.

Built by ``bitbucket_mcp.validation`` from a raw argument bag.  Every record
that addresses a repository carries an already-resolved ``project``; optional
fields stay ``None`` when the caller omitted them.  Upstream defaults
(pagination, merge strategy, diff context) are applied by the handlers, right
before the request goes out.
"""

from __future__ import annotations

from dataclasses import dataclass

from bitbucket_mcp.types.api import CommentAnchor


@dataclass(frozen=True)
class ListProjects:
    limit: int | None = None
    start: int | None = None


@dataclass(frozen=True)
class ListRepositories:
    project: str | None = None
    limit: int | None = None
    start: int | None = None


@dataclass(frozen=True)
class RepoTarget:
    """Fields shared by every command addressing a single repository."""

    project: str
    repository: str


@dataclass(frozen=True)
class CreatePullRequest(RepoTarget):
    title: str
    source_branch: str
    target_branch: str
    description: str | None = None
    reviewers: tuple[str, ...] | None = None


@dataclass(frozen=True)
class PullRequestTarget(RepoTarget):
    pr_id: int


@dataclass(frozen=True)
class GetPullRequest(PullRequestTarget):
    pass


@dataclass(frozen=True)
class MergePullRequest(PullRequestTarget):
    message: str | None = None
    strategy: str | None = None


@dataclass(frozen=True)
class DeclinePullRequest(PullRequestTarget):
    message: str | None = None


@dataclass(frozen=True)
class AddComment(PullRequestTarget):
    text: str
    parent_id: int | None = None
    anchor: CommentAnchor | None = None


@dataclass(frozen=True)
class GetDiff(PullRequestTarget):
    context_lines: int | None = None


@dataclass(frozen=True)
class GetReviews(PullRequestTarget):
    pass


Command = (
    ListProjects
    | ListRepositories
    | CreatePullRequest
    | GetPullRequest
    | MergePullRequest
    | DeclinePullRequest
    | AddComment
    | GetDiff
    | GetReviews
)
