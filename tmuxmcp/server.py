"""The tmux MCP server: tool definitions, handlers and the command entry point."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from collections.abc import Sequence

from tmuxmcp import tmux
from tmuxmcp.protocol import (
    McpServer,
    ParamType,
    Tool,
    ToolArguments,
    ToolParameter,
    ToolResult,
)
from tmuxmcp.tmux import TmuxError

SERVER_NAME = "TTY MCP Server"
SERVER_VERSION = "1.0.0"


@dataclass
class Config:
    """Server settings taken from the command line."""

    use_http: bool = False
    port: str = "8080"


def _log(message: str) -> None:
    print(message, file=sys.stderr, flush=True)


def parse_args(args: Sequence[str]) -> Config:
    """Read --http and --port from the argument list; unknown arguments are ignored."""
    config = Config()
    args = list(args)
    for position, arg in enumerate(args):
        if arg == "--http":
            config.use_http = True
        elif arg == "--port" and position + 1 < len(args):
            config.port = args[position + 1]
    return config


def _start_session(args: ToolArguments) -> ToolResult:
    session_name = args.require_string("session_name")
    command = args.get_string("command", "")
    working_dir = args.get_string("working_directory", "")
    try:
        tmux.start_session(session_name, command, working_dir)
    except TmuxError as exc:
        return ToolResult.error(f"Failed to start session: {exc}")
    return ToolResult.text(f"Session '{session_name}' started successfully")


def _send_keys(args: ToolArguments) -> ToolResult:
    session_name = args.require_string("session_name")
    keys = args.require_string("keys")
    try:
        tmux.send_keys(session_name, keys)
    except TmuxError as exc:
        return ToolResult.error(f"Failed to send keys: {exc}")
    return ToolResult.text(f"Keys sent to session '{session_name}'")


def _view_session(args: ToolArguments) -> ToolResult:
    session_name = args.require_string("session_name")
    try:
        content = tmux.capture_pane(session_name)
    except TmuxError as exc:
        return ToolResult.error(f"Failed to capture session: {exc}")
    return ToolResult.text(content)


def _list_sessions(args: ToolArguments) -> ToolResult:
    try:
        sessions = tmux.list_sessions()
    except TmuxError as exc:
        return ToolResult.error(f"Failed to list sessions: {exc}")
    return ToolResult.text(sessions)


def _send_commands(args: ToolArguments) -> ToolResult:
    session_name = args.require_string("session_name")
    commands = args.require_string_slice("commands")
    default_delay_ms = int(args.get_float("default_delay_ms", 100))
    capture_screen = args.get_bool("capture_screen", True)
    try:
        report = tmux.send_commands(session_name, commands, default_delay_ms, capture_screen)
    except TmuxError as exc:
        return ToolResult.error(f"Failed to send commands: {exc}")
    return ToolResult.text(report)


def _join_session(args: ToolArguments) -> ToolResult:
    session_name = args.require_string("session_name")
    new_session_name = args.get_string("new_session_name", "")
    try:
        tmux.join_session(session_name, new_session_name)
    except TmuxError as exc:
        return ToolResult.error(f"Failed to join session: {exc}")
    if new_session_name:
        return ToolResult.text(f"Joined session '{session_name}' as '{new_session_name}'")
    return ToolResult.text(f"Joined session '{session_name}'")


def _close_session(args: ToolArguments) -> ToolResult:
    session_name = args.require_string("session_name")
    try:
        tmux.kill_session(session_name)
    except TmuxError as exc:
        return ToolResult.error(f"Failed to close session: {exc}")
    return ToolResult.text(f"Session '{session_name}' closed successfully")


def _string(name: str, description: str, required: bool = False) -> ToolParameter:
    return ToolParameter(name, ParamType.STRING, description, required)


_TOOLS = (
    (
        Tool(
            "start_session",
            "Start a new terminal session using tmux",
            (
                _string("session_name", "Name of the session to create", required=True),
                _string("command", "Optional command to run (defaults to shell)"),
                _string("working_directory", "Working directory for the session"),
            ),
        ),
        _start_session,
    ),
    (
        Tool(
            "send_keys",
            "Send keystrokes to a terminal session",
            (
                _string("session_name", "Name of the session", required=True),
                _string("keys", "Keys to send to the session", required=True),
            ),
        ),
        _send_keys,
    ),
    (
        Tool(
            "view_session",
            "View the current screen content of a terminal session",
            (_string("session_name", "Name of the session", required=True),),
        ),
        _view_session,
    ),
    (
        Tool("list_sessions", "List all active terminal sessions"),
        _list_sessions,
    ),
    (
        Tool(
            "send_commands",
            "Send a sequence of commands and keystrokes to a terminal session",
            (
                _string("session_name", "Name of the session", required=True),
                ToolParameter(
                    "commands",
                    ParamType.ARRAY,
                    "Array of commands to execute. Literals are typed as-is, "
                    "<COMMAND> are special keys/actions",
                    required=True,
                ),
                ToolParameter(
                    "default_delay_ms",
                    ParamType.NUMBER,
                    "Default delay between commands in milliseconds (default: 100)",
                ),
                ToolParameter(
                    "capture_screen",
                    ParamType.BOOLEAN,
                    "Whether to capture and return the screen content after execution "
                    "(default: true)",
                ),
            ),
        ),
        _send_commands,
    ),
    (
        Tool(
            "join_session",
            "Join an existing terminal session",
            (
                _string("session_name", "Name of the existing session to join", required=True),
                _string("new_session_name", "Name for this client's view of the session (optional)"),
            ),
        ),
        _join_session,
    ),
    (
        Tool(
            "close_session",
            "Close a terminal session",
            (_string("session_name", "Name of the session to close", required=True),),
        ),
        _close_session,
    ),
)


def register_tools(server: McpServer) -> None:
    """Register every tmux tool with the server."""
    for tool, handler in _TOOLS:
        server.add_tool(tool, handler)


def create_server(config: Config | None = None) -> McpServer:
    """Check that tmux is present and build a server with all tools registered."""
    _log("🔍 Checking tmux availability...")
    try:
        tmux.check_tmux_available()
    except TmuxError as exc:
        _log(f"❌ Tmux check failed: {exc}")
        raise TmuxError(
            f"tmux check failed: {exc}\n"
            "Please install tmux: brew install tmux (macOS) or apt-get install tmux (Ubuntu)"
        ) from exc
    _log("✅ Tmux is available")

    _log("🖥️ Creating MCP server...")
    server = McpServer(SERVER_NAME, SERVER_VERSION)
    _log("✅ MCP server created")

    _log("🛠️ Registering tools...")
    register_tools(server)
    _log("✅ Tools registered successfully")
    return server


def serve(server: McpServer) -> None:
    """Serve requests over standard input and output until input ends."""
    server.serve(sys.stdin, sys.stdout)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the server; return the process exit status."""
    config = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        server = create_server(config)
    except TmuxError as exc:
        print(f"Failed to create server: {exc}", file=sys.stderr)
        return 1
    try:
        serve(server)
    except OSError as exc:
        print(f"Server error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())