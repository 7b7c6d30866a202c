"""Per-tool argument validation.

Pure functions — no MCP server or HTTP dependencies.  Each validator turns
the untyped argument bag of one tool into its resolved command record from
``bitbucket_mcp.types.commands``, or raises an ``invalid_params`` ToolError
naming the offending field.

The checks here are written independently of the JSON Schemas in
``mcp_tools``; the contract tests under ``tests/util`` keep the two in step.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, cast

from bitbucket_mcp.config import BitbucketConfig
from bitbucket_mcp.errors import ToolError, invalid_params
from bitbucket_mcp.types.api import CommentAnchor
from bitbucket_mcp.types.commands import (
    AddComment,
    Command,
    CreatePullRequest,
    DeclinePullRequest,
    GetDiff,
    GetPullRequest,
    GetReviews,
    ListProjects,
    ListRepositories,
    MergePullRequest,
)

MERGE_STRATEGIES = ("merge-commit", "squash", "fast-forward")
DIFF_TYPES = ("EFFECTIVE", "COMMIT", "RANGE")
LINE_TYPES = ("CONTEXT", "ADDED", "REMOVED")
FILE_TYPES = ("FROM", "TO")

DEFAULT_DIFF_TYPE = "EFFECTIVE"
DEFAULT_LINE_TYPE = "CONTEXT"
DEFAULT_FILE_TYPE = "TO"


class _Args:
    """Typed accessors over a raw argument bag.

    ``None`` is treated the same as an absent key.
    """

    def __init__(self, tool: str, raw: Mapping[str, Any] | None) -> None:
        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise invalid_params(f"Invalid {tool} parameters: arguments must be an object")
        self.tool = tool
        self.raw = raw

    def _fail(self, key: str, problem: str) -> ToolError:
        return invalid_params(f"Invalid {self.tool} parameters: {key} {problem}")

    def _get(self, key: str, required: bool) -> Any:
        value = self.raw.get(key)
        if value is None and required:
            raise self._fail(key, "is required")
        return value

    def string(self, key: str, *, required: bool = False) -> str | None:
        value = self._get(key, required)
        if value is not None and not isinstance(value, str):
            raise self._fail(key, "must be a string")
        return value

    def require_string(self, key: str) -> str:
        return cast(str, self.string(key, required=True))

    def number(self, key: str, *, required: bool = False) -> int | None:
        value = self._get(key, required)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise self._fail(key, "must be a number")
        if isinstance(value, float):
            if not value.is_integer():
                raise self._fail(key, "must be a whole number")
            value = int(value)
        return value

    def require_number(self, key: str) -> int:
        return cast(int, self.number(key, required=True))

    def choice(self, key: str, choices: tuple[str, ...]) -> str | None:
        value = self.string(key)
        if value is not None and value not in choices:
            raise self._fail(key, f"must be one of {', '.join(choices)}")
        return value

    def string_list(self, key: str) -> tuple[str, ...] | None:
        value = self._get(key, False)
        if value is None:
            return None
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise self._fail(key, "must be an array of strings")
        return tuple(value)


# ---------------------------------------------------------------------------
# Anchor builder
# ---------------------------------------------------------------------------


def build_anchor(raw: Mapping[str, Any] | None, *, tool: str = "add_comment") -> CommentAnchor | None:
    """Build the inline-comment anchor from flat comment fields.

    Returns ``None`` for a plain (non-anchored) comment.  A file path without
    a line number is rejected rather than silently posting an unanchored
    comment.  ``fromHash`` / ``toHash`` are only included when supplied.
    """
    args = _Args(tool, raw)
    file_path = args.string("filePath")
    line = args.number("lineNumber")
    diff_type = args.choice("diffType", DIFF_TYPES)
    line_type = args.choice("lineType", LINE_TYPES)
    file_type = args.choice("fileType", FILE_TYPES)
    from_hash = args.string("fromHash")
    to_hash = args.string("toHash")

    if not file_path:
        return None
    if line is None:
        raise invalid_params("lineNumber is required when filePath is provided")

    anchor = CommentAnchor(
        diffType=cast(Any, diff_type or DEFAULT_DIFF_TYPE),
        line=line,
        lineType=cast(Any, line_type or DEFAULT_LINE_TYPE),
        fileType=cast(Any, file_type or DEFAULT_FILE_TYPE),
        path=file_path,
        srcPath=file_path,
    )
    if from_hash:
        anchor["fromHash"] = from_hash
    if to_hash:
        anchor["toHash"] = to_hash
    return anchor


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def validate_list_projects(raw: Mapping[str, Any] | None, config: BitbucketConfig) -> ListProjects:
    args = _Args("list_projects", raw)
    return ListProjects(limit=args.number("limit"), start=args.number("start"))


def validate_list_repositories(raw: Mapping[str, Any] | None, config: BitbucketConfig) -> ListRepositories:
    """Project is optional here: no explicit or default project lists every repository."""
    args = _Args("list_repositories", raw)
    return ListRepositories(
        project=args.string("project") or config.default_project,
        limit=args.number("limit"),
        start=args.number("start"),
    )


def validate_create_pull_request(raw: Mapping[str, Any] | None, config: BitbucketConfig) -> CreatePullRequest:
    args = _Args("create_pull_request", raw)
    provided_project = args.string("project")
    repository = args.require_string("repository")
    title = args.require_string("title")
    source_branch = args.require_string("sourceBranch")
    target_branch = args.require_string("targetBranch")
    description = args.string("description")
    reviewers = args.string_list("reviewers")
    return CreatePullRequest(
        project=config.resolve_project(provided_project),
        repository=repository,
        title=title,
        source_branch=source_branch,
        target_branch=target_branch,
        description=description,
        reviewers=reviewers,
    )


def _pr_fields(args: _Args) -> tuple[str | None, str, int]:
    """Return ``(provided_project, repository, pr_id)``; the project is resolved last."""
    return args.string("project"), args.require_string("repository"), args.require_number("prId")


def validate_get_pull_request(raw: Mapping[str, Any] | None, config: BitbucketConfig) -> GetPullRequest:
    project, repository, pr_id = _pr_fields(_Args("get_pull_request", raw))
    return GetPullRequest(project=config.resolve_project(project), repository=repository, pr_id=pr_id)


def validate_merge_pull_request(raw: Mapping[str, Any] | None, config: BitbucketConfig) -> MergePullRequest:
    args = _Args("merge_pull_request", raw)
    project, repository, pr_id = _pr_fields(args)
    message = args.string("message")
    strategy = args.choice("strategy", MERGE_STRATEGIES)
    return MergePullRequest(
        project=config.resolve_project(project),
        repository=repository,
        pr_id=pr_id,
        message=message,
        strategy=strategy,
    )


def validate_decline_pull_request(raw: Mapping[str, Any] | None, config: BitbucketConfig) -> DeclinePullRequest:
    args = _Args("decline_pull_request", raw)
    project, repository, pr_id = _pr_fields(args)
    message = args.string("message")
    return DeclinePullRequest(project=config.resolve_project(project), repository=repository, pr_id=pr_id, message=message)


def validate_add_comment(raw: Mapping[str, Any] | None, config: BitbucketConfig) -> AddComment:
    args = _Args("add_comment", raw)
    project, repository, pr_id = _pr_fields(args)
    text = args.require_string("text")
    parent_id = args.number("parentId")
    anchor = build_anchor(raw)
    return AddComment(
        project=config.resolve_project(project),
        repository=repository,
        pr_id=pr_id,
        text=text,
        parent_id=parent_id,
        anchor=anchor,
    )


def validate_get_diff(raw: Mapping[str, Any] | None, config: BitbucketConfig) -> GetDiff:
    args = _Args("get_diff", raw)
    project, repository, pr_id = _pr_fields(args)
    context_lines = args.number("contextLines")
    return GetDiff(project=config.resolve_project(project), repository=repository, pr_id=pr_id, context_lines=context_lines)


def validate_get_reviews(raw: Mapping[str, Any] | None, config: BitbucketConfig) -> GetReviews:
    project, repository, pr_id = _pr_fields(_Args("get_reviews", raw))
    return GetReviews(project=config.resolve_project(project), repository=repository, pr_id=pr_id)


Validator = Callable[[Mapping[str, Any] | None, BitbucketConfig], Command]

VALIDATORS: dict[str, Validator] = {
    "list_projects": validate_list_projects,
    "list_repositories": validate_list_repositories,
    "create_pull_request": validate_create_pull_request,
    "get_pull_request": validate_get_pull_request,
    "merge_pull_request": validate_merge_pull_request,
    "decline_pull_request": validate_decline_pull_request,
    "add_comment": validate_add_comment,
    "get_diff": validate_get_diff,
    "get_reviews": validate_get_reviews,
}
