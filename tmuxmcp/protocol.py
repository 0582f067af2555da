"""A small Model Context Protocol server speaking JSON-RPC over line streams."""

from __future__ import annotations

import enum
import json
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TextIO

JSONRPC_VERSION = "2.0"
LATEST_PROTOCOL_VERSION = "2025-03-26"
SUPPORTED_PROTOCOL_VERSIONS = ("2025-03-26", "2024-11-05")

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ToolArgumentError(ValueError):
    """Raised when a tool argument is missing or has the wrong type."""


class ParamType(str, enum.Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"


@dataclass(frozen=True)
class ToolParameter:
    name: str
    type: ParamType = ParamType.STRING
    description: str = ""
    required: bool = False


@dataclass(frozen=True)
class Tool:
    name: str
    description: str = ""
    parameters: tuple[ToolParameter, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        properties = {}
        for param in self.parameters:
            schema: dict[str, Any] = {"type": ParamType(param.type).value}
            if param.description:
                schema["description"] = param.description
            properties[param.name] = schema
        input_schema: dict[str, Any] = {"type": "object", "properties": properties}
        required = [p.name for p in self.parameters if p.required]
        if required:
            input_schema["required"] = required
        return {"name": self.name, "description": self.description, "inputSchema": input_schema}


@dataclass(frozen=True)
class ToolResult:
    content: tuple[str, ...] = ()
    is_error: bool = False

    @classmethod
    def text(cls, text: str) -> ToolResult:
        return cls((text,))

    @classmethod
    def error(cls, text: str) -> ToolResult:
        return cls((text,), is_error=True)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"content": [{"type": "text", "text": t} for t in self.content]}
        if self.is_error:
            result["isError"] = True
        return result


_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}


@dataclass
class ToolArguments:
    arguments: Mapping[str, Any] = field(default_factory=dict)

    def require_string(self, key: str) -> str:
        if key not in self.arguments:
            raise ToolArgumentError(f'required argument "{key}" not found')
        value = self.arguments[key]
        if not isinstance(value, str):
            raise ToolArgumentError(f'argument "{key}" is not a string')
        return value

    def get_string(self, key: str, default: str = "") -> str:
        value = self.arguments.get(key)
        return value if isinstance(value, str) else default

    def require_string_slice(self, key: str) -> list[str]:
        if key not in self.arguments:
            raise ToolArgumentError(f'required argument "{key}" not found')
        value = self.arguments[key]
        if not isinstance(value, (list, tuple)):
            raise ToolArgumentError(f'argument "{key}" is not a string slice')
        for index, item in enumerate(value):
            if not isinstance(item, str):
                raise ToolArgumentError(f'item {index} in argument "{key}" is not a string')
        return list(value)

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self.arguments.get(key)
        if isinstance(value, bool):
            return default
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return default
        return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.arguments.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            if value in _TRUE_WORDS:
                return True
            if value in _FALSE_WORDS:
                return False
        return default


ToolHandler = Callable[[ToolArguments], ToolResult]


class _RpcError(Exception):
    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def _error_response(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": {"code": code, "message": message}}


class McpServer:
    """Dispatches MCP requests to registered tools."""

    def __init__(self, name: str, version: str):
        self.name = name
        self.version = version
        self._tools: dict[str, tuple[Tool, ToolHandler]] = {}

    def add_tool(self, tool: Tool, handler: ToolHandler) -> None:
        self._tools[tool.name] = (tool, handler)

    def tool_names(self) -> list[str]:
        return sorted(self._tools)

    def _initialize(self, params: Mapping[str, Any]) -> dict[str, Any]:
        requested = params.get("protocolVersion")
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else LATEST_PROTOCOL_VERSION
        return {
            "protocolVersion": version,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": self.name, "version": self.version},
        }

    def _list_tools(self, params: Mapping[str, Any]) -> dict[str, Any]:
        return {"tools": [self._tools[name][0].to_dict() for name in self.tool_names()]}

    def _call_tool(self, params: Mapping[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if name not in self._tools:
            raise _RpcError(INVALID_PARAMS, f"tool '{name}' not found")
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, Mapping):
            raise _RpcError(INVALID_PARAMS, "tool arguments must be an object")
        _, handler = self._tools[name]
        try:
            result = handler(ToolArguments(arguments))
        except ToolArgumentError as exc:
            result = ToolResult.error(str(exc))
        except Exception as exc:
            raise _RpcError(INTERNAL_ERROR, f"panic recovered in {name} tool handler: {exc}") from exc
        return result.to_dict()

    def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Handle one decoded JSON-RPC message; return the response or None."""
        if not isinstance(message, dict):
            return _error_response(None, INVALID_REQUEST, "Invalid Request")
        request_id = message.get("id")
        if "method" not in message and ("result" in message or "error" in message):
            return None
        method = message.get("method")
        if message.get("jsonrpc") != JSONRPC_VERSION or not isinstance(method, str):
            return _error_response(request_id, INVALID_REQUEST, "Invalid Request")
        if "id" not in message:
            return None

        handlers = {
            "initialize": self._initialize,
            "ping": lambda params: {},
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }
        handler = handlers.get(method)
        if handler is None:
            return _error_response(request_id, METHOD_NOT_FOUND, f"Method {method} not found")
        params = message.get("params") or {}
        if not isinstance(params, Mapping):
            return _error_response(request_id, INVALID_PARAMS, "params must be an object")
        try:
            result = handler(params)
        except _RpcError as exc:
            return _error_response(request_id, exc.code, exc.message)
        return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}

    def serve(self, reader: Iterable[str], writer: TextIO) -> None:
        """Read newline-delimited JSON requests and write responses until EOF."""
        for line in reader:
            line = line.strip()
            if not line:
                continue
            try:
                message = json.loads(line)
            except json.JSONDecodeError as exc:
                response: dict[str, Any] | None = _error_response(None, PARSE_ERROR, f"Parse error: {exc}")
            else:
                response = self.handle_message(message)
            if response is not None:
                writer.write(json.dumps(response) + "\n")
                writer.flush()