"""Error types surfaced to MCP clients.

Each error is an ``McpError`` so the protocol layer receives a
machine-checkable JSON-RPC code alongside the message.
"""

from typing import Optional, Sequence

from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_REQUEST, ErrorData


class ScenarioBridgeError(McpError):
    """Base class for errors raised by the scenario bridge."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(ErrorData(code=self.code, message=message))
        self.message = message


class InvalidRequest(ScenarioBridgeError):
    """Malformed or unknown tool name. Caller error."""

    code = INVALID_REQUEST


class InternalError(ScenarioBridgeError):
    """Failure talking to the Make API or the Results API."""

    code = INTERNAL_ERROR


class UnsupportedTypeError(InternalError):
    """Interface descriptor node with a type tag the remapper does not know."""

    def __init__(
        self, node_name: str, type_tag: Optional[str], supported: Sequence[str] = ()
    ):
        message = f"Unsupported interface type {type_tag!r} for field {node_name!r}"
        if supported:
            message += f" (supported: {', '.join(supported)})"
        super().__init__(message)
        self.node_name = node_name
        self.type_tag = type_tag


class AutomationAPIError(Exception):
    """Non-success or malformed response from the Make API."""

    def __init__(
        self, message: str, status_code: Optional[int] = None, detail: str = ""
    ):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
