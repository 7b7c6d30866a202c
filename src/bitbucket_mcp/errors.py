"""Error taxonomy surfaced to MCP callers.

Every failure leaving the dispatcher is a :class:`ToolError`: an ``McpError``
whose ``ErrorData`` carries the JSON-RPC code plus ``data={"kind": ...}`` so
callers can tell an upstream failure from an internal one even though both
share the ``INTERNAL_ERROR`` code.

On the wire a ToolError becomes an ``isError`` ``CallToolResult`` whose text
and ``structuredContent`` are ``{"error": <message>, "code": <kind>}``.
"""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any

from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, CallToolResult, ErrorData, TextContent

UPSTREAM_MESSAGE_PREFIX = "Bitbucket API error: "


class ErrorKind(StrEnum):
    INVALID_PARAMS = "invalid_params"
    METHOD_NOT_FOUND = "method_not_found"
    UPSTREAM_ERROR = "upstream_error"
    INTERNAL_ERROR = "internal_error"

    @property
    def code(self) -> int:
        return _CODES[self]


_CODES: dict[ErrorKind, int] = {
    ErrorKind.INVALID_PARAMS: INVALID_PARAMS,
    ErrorKind.METHOD_NOT_FOUND: METHOD_NOT_FOUND,
    ErrorKind.UPSTREAM_ERROR: INTERNAL_ERROR,
    ErrorKind.INTERNAL_ERROR: INTERNAL_ERROR,
}


class ToolError(McpError):
    """A classified tool failure."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(ErrorData(code=kind.code, message=message, data={"kind": kind.value}))
        self.kind = kind

    @property
    def message(self) -> str:
        return self.error.message

    def __repr__(self) -> str:
        return f"ToolError({self.kind.value!r}, {self.message!r})"

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.kind.value}

    def to_result(self) -> CallToolResult:
        """Render as the ``isError`` tool result sent back to the MCP client."""
        payload = self.to_payload()
        return CallToolResult(
            content=[TextContent(type="text", text=json.dumps(payload, indent=2))],
            structuredContent=payload,
            isError=True,
        )


def invalid_params(message: str) -> ToolError:
    return ToolError(ErrorKind.INVALID_PARAMS, message)


def method_not_found(name: str) -> ToolError:
    return ToolError(ErrorKind.METHOD_NOT_FOUND, f"Unknown tool: {name}")


def upstream_error(message: str) -> ToolError:
    return ToolError(ErrorKind.UPSTREAM_ERROR, UPSTREAM_MESSAGE_PREFIX + message)


def internal_error(message: str) -> ToolError:
    return ToolError(ErrorKind.INTERNAL_ERROR, message)
