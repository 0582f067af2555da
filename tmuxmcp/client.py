"""A client that starts an MCP server as a subprocess and talks to it over stdio."""

from __future__ import annotations

import json
import subprocess
from collections.abc import Mapping
from typing import Any

from tmuxmcp.protocol import LATEST_PROTOCOL_VERSION

CLIENT_NAME = "tty-test-client"
CLIENT_VERSION = "1.0.0"


class ClientError(RuntimeError):
    """Raised when the server cannot be reached or answers with an error."""


class Client:
    """Drives an MCP server process through newline-delimited JSON-RPC."""

    def __init__(self, command: str, *args: str, env: Mapping[str, str] | None = None):
        try:
            self._process = subprocess.Popen(
                [command, *args],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                env=None if env is None else dict(env),
            )
        except OSError as exc:
            raise ClientError(f"failed to create stdio client: {exc}") from exc
        self._next_id = 0
        self._closed = False

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _send(self, message: dict[str, Any]) -> None:
        if self._closed:
            raise ClientError("client is closed")
        try:
            self._process.stdin.write(json.dumps(message) + "\n")
            self._process.stdin.flush()
        except (BrokenPipeError, ValueError, OSError) as exc:
            raise ClientError(f"failed to write to server: {exc}") from exc

    def _request(self, method: str, params: Mapping[str, Any]) -> dict[str, Any]:
        self._next_id += 1
        request_id = self._next_id
        self._send({"jsonrpc": "2.0", "id": request_id, "method": method, "params": dict(params)})
        for line in self._process.stdout:
            line = line.strip()
            if not line:
                continue
            try:
                message = json.loads(line)
            except json.JSONDecodeError as exc:
                raise ClientError(f"invalid response from server: {exc}") from exc
            if not isinstance(message, dict) or message.get("id") != request_id:
                continue
            if "error" in message:
                error = message["error"] or {}
                raise ClientError(f"{error.get('message')} (code {error.get('code')})")
            return message.get("result") or {}
        raise ClientError("server closed the connection")

    def initialize(self) -> dict[str, Any]:
        """Perform the MCP handshake and return the server's reply."""
        params = {
            "protocolVersion": LATEST_PROTOCOL_VERSION,
            "capabilities": {},
            "clientInfo": {"name": CLIENT_NAME, "version": CLIENT_VERSION},
        }
        try:
            result = self._request("initialize", params)
            self._send({"jsonrpc": "2.0", "method": "notifications/initialized"})
        except ClientError as exc:
            raise ClientError(f"failed to initialize: {exc}") from exc
        return result

    def list_tools(self) -> dict[str, Any]:
        """Return the server's tool list result."""
        return self._request("tools/list", {})

    def call_tool(self, name: str, arguments: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Call a tool by name and return its result."""
        return self._request("tools/call", {"name": name, "arguments": dict(arguments or {})})

    def start_session(self, session_name: str, command: str = "", working_dir: str = "") -> dict[str, Any]:
        arguments = {"session_name": session_name}
        if command:
            arguments["command"] = command
        if working_dir:
            arguments["working_directory"] = working_dir
        return self.call_tool("start_session", arguments)

    def send_keys(self, session_name: str, keys: str) -> dict[str, Any]:
        return self.call_tool("send_keys", {"session_name": session_name, "keys": keys})

    def view_session(self, session_name: str) -> dict[str, Any]:
        return self.call_tool("view_session", {"session_name": session_name})

    def list_sessions(self) -> dict[str, Any]:
        return self.call_tool("list_sessions", {})

    def close_session(self, session_name: str) -> dict[str, Any]:
        return self.call_tool("close_session", {"session_name": session_name})

    def close(self) -> None:
        """Stop the server process."""
        if self._closed:
            return
        self._closed = True
        try:
            self._process.stdin.close()
        except OSError:
            pass
        try:
            self._process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            self._process.kill()
            self._process.wait()
        self._process.stdout.close()


def get_tool_result_text(result: Mapping[str, Any] | None) -> str:
    """Return the first text item of a tool result, or an empty string."""
    if not result:
        return ""
    for item in result.get("content") or ():
        if isinstance(item, Mapping) and item.get("type") == "text" and isinstance(item.get("text"), str):
            return item["text"]
    return ""