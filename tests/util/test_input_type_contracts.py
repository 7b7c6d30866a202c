"""Sync tests: MCP JSON Schema <-> TypedDict <-> validator agreement.

The schemas advertised by ``list_tools`` and the checks in
``bitbucket_mcp.validation`` are written separately.  These tests introspect
each tool's inputSchema and verify that the TypedDict in ``types/inputs.py``
and the runtime validator both honour it: same keys, same required set, and
every declared primitive type (and enum) enforced.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable
from typing import Any, get_type_hints

import pytest
from mcp.types import Tool

from bitbucket_mcp.config import BitbucketConfig
from bitbucket_mcp.errors import ErrorKind, ToolError
from bitbucket_mcp.types.inputs import TOOL_ARGS_MAP
from bitbucket_mcp.validation import VALIDATORS

# ---------------------------------------------------------------------------
# Discovery: collect all MCP tools from all modules
# ---------------------------------------------------------------------------

_MCP_MODULES = [
    "bitbucket_mcp.mcp_tools.discovery",
    "bitbucket_mcp.mcp_tools.pull_requests",
    "bitbucket_mcp.mcp_tools.comments",
]


def _discover_tools() -> list[tuple[str, Tool]]:
    """Call register() on each MCP module, collect (tool_name, Tool) pairs."""
    result: list[tuple[str, Tool]] = []
    for mod_path in _MCP_MODULES:
        mod = importlib.import_module(mod_path)
        tools, _ = mod.register()
        for tool in tools:
            result.append((tool.name, tool))
    return result


_ALL_TOOLS = _discover_tools()

# Minimal valid arguments per tool (project comes from the default).
_VALID_ARGS: dict[str, dict[str, Any]] = {
    "list_projects": {},
    "list_repositories": {},
    "create_pull_request": {"repository": "r", "title": "t", "sourceBranch": "a", "targetBranch": "b"},
    "get_pull_request": {"repository": "r", "prId": 1},
    "merge_pull_request": {"repository": "r", "prId": 1},
    "decline_pull_request": {"repository": "r", "prId": 1},
    "add_comment": {"repository": "r", "prId": 1, "text": "x"},
    "get_diff": {"repository": "r", "prId": 1},
    "get_reviews": {"repository": "r", "prId": 1},
}

# A value of the wrong primitive type for each JSON Schema type.
_WRONG_TYPE: dict[str, Any] = {"string": 123, "number": "123", "array": "not-a-list"}

# A valid value for each JSON Schema type, used to probe optional fields.
_SAMPLE: dict[str, Any] = {"string": "value", "number": 7, "array": ["a"]}


def _fields(kind: str) -> list[tuple[str, str, dict[str, Any]]]:
    """(tool_name, field, property_schema) for every property of the given required-ness."""
    result = []
    for name, tool in _ALL_TOOLS:
        required = set(tool.inputSchema.get("required", []))
        for field, prop in tool.inputSchema.get("properties", {}).items():
            if (kind == "required") == (field in required):
                result.append((name, field, prop))
    return result


_ALL_FIELDS = _fields("required") + _fields("optional")


# ---------------------------------------------------------------------------
# Section 1: Structural sync — keys and required/optional
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("tool_name", "tool"),
    _ALL_TOOLS,
    ids=[name for name, _ in _ALL_TOOLS],
)
class TestSchemaTypedDictSync:
    """Verify each tool's JSON Schema matches its TypedDict structurally."""

    def test_typeddict_registered(self, tool_name: str, tool: Tool) -> None:
        assert tool_name in TOOL_ARGS_MAP, f"Tool '{tool_name}' has no TypedDict in TOOL_ARGS_MAP. Add one to types/inputs.py."

    def test_validator_registered(self, tool_name: str, tool: Tool) -> None:
        assert tool_name in VALIDATORS, f"Tool '{tool_name}' has no validator in validation.VALIDATORS."

    def test_keys_match(self, tool_name: str, tool: Tool) -> None:
        td_cls = TOOL_ARGS_MAP[tool_name]
        schema_keys = set(tool.inputSchema.get("properties", {}).keys())
        td_keys = set(get_type_hints(td_cls).keys())
        assert td_keys == schema_keys, (
            f"Key mismatch for '{tool_name}':\n  TypedDict extra: {td_keys - schema_keys}\n  Schema extra:    {schema_keys - td_keys}"
        )

    def test_required_fields_match(self, tool_name: str, tool: Tool) -> None:
        td_cls = TOOL_ARGS_MAP[tool_name]
        schema_required = set(tool.inputSchema.get("required", []))
        assert td_cls.__required_keys__ == schema_required

    def test_optional_fields_match(self, tool_name: str, tool: Tool) -> None:
        td_cls = TOOL_ARGS_MAP[tool_name]
        schema_props = set(tool.inputSchema.get("properties", {}).keys())
        schema_optional = schema_props - set(tool.inputSchema.get("required", []))
        assert td_cls.__optional_keys__ == schema_optional

    def test_minimal_arguments_validate(self, tool_name: str, tool: Tool, config: BitbucketConfig) -> None:
        VALIDATORS[tool_name](_VALID_ARGS[tool_name], config)


# ---------------------------------------------------------------------------
# Section 2: Behavioural sync — the validator enforces what the schema declares
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("tool_name", "field", "prop"),
    _fields("required"),
    ids=[f"{name}.{field}" for name, field, _ in _fields("required")],
)
def test_required_field_enforced(tool_name: str, field: str, prop: dict[str, Any], config: BitbucketConfig) -> None:
    args = {k: v for k, v in _VALID_ARGS[tool_name].items() if k != field}
    with pytest.raises(ToolError) as excinfo:
        VALIDATORS[tool_name](args, config)
    assert excinfo.value.kind is ErrorKind.INVALID_PARAMS


@pytest.mark.parametrize(
    ("tool_name", "field", "prop"),
    _ALL_FIELDS,
    ids=[f"{name}.{field}" for name, field, _ in _ALL_FIELDS],
)
def test_declared_type_enforced(tool_name: str, field: str, prop: dict[str, Any], config: BitbucketConfig) -> None:
    args = {**_VALID_ARGS[tool_name], field: _WRONG_TYPE[prop["type"]]}
    with pytest.raises(ToolError) as excinfo:
        VALIDATORS[tool_name](args, config)
    assert excinfo.value.kind is ErrorKind.INVALID_PARAMS
    assert field in excinfo.value.message


@pytest.mark.parametrize(
    ("tool_name", "field", "prop"),
    _fields("optional"),
    ids=[f"{name}.{field}" for name, field, _ in _fields("optional")],
)
def test_optional_field_accepted(
    tool_name: str,
    field: str,
    prop: dict[str, Any],
    make_config: Callable[..., BitbucketConfig],
) -> None:
    values = prop.get("enum") or [_SAMPLE[prop["type"]]]
    args = dict(_VALID_ARGS[tool_name])
    if field == "filePath":
        args["lineNumber"] = 1
    for value in values:
        VALIDATORS[tool_name]({**args, field: value}, make_config())


@pytest.mark.parametrize(
    ("tool_name", "field", "prop"),
    [f for f in _ALL_FIELDS if "enum" in f[2]],
    ids=[f"{name}.{field}" for name, field, prop in _ALL_FIELDS if "enum" in prop],
)
def test_enum_enforced(tool_name: str, field: str, prop: dict[str, Any], config: BitbucketConfig) -> None:
    args = {**_VALID_ARGS[tool_name], field: "NOT-A-CHOICE"}
    if field != "strategy":
        args.update(filePath="a.py", lineNumber=1)
    with pytest.raises(ToolError) as excinfo:
        VALIDATORS[tool_name](args, config)
    assert field in excinfo.value.message


# ---------------------------------------------------------------------------
# Section 3: Coverage guards
# ---------------------------------------------------------------------------


def test_all_mcp_modules_covered() -> None:
    """Ensure we're scanning all mcp_tools modules."""
    from pathlib import Path

    mcp_dir = Path(__file__).resolve().parents[2] / "src" / "bitbucket_mcp" / "mcp_tools"
    actual_modules = {f.stem for f in mcp_dir.glob("*.py") if f.stem not in ("__init__", "common")}
    scanned_modules = {m.rsplit(".", 1)[-1] for m in _MCP_MODULES}
    assert actual_modules == scanned_modules, f"Module mismatch:\n  On disk: {actual_modules}\n  Scanned: {scanned_modules}"


def test_maps_agree() -> None:
    tool_names = {name for name, _ in _ALL_TOOLS}
    assert set(TOOL_ARGS_MAP) == tool_names
    assert set(VALIDATORS) == tool_names
    assert set(_VALID_ARGS) == tool_names
