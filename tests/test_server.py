import io
import json
import stat
import sys

import pytest

from tmuxmcp.server import Config, create_server, main, parse_args, register_tools
from tmuxmcp.protocol import McpServer
from tmuxmcp.tmux import TmuxError

FAKE_TMUX = """\
import json, os, sys
state = os.path.join(os.path.dirname(os.path.abspath(__file__)), "sessions.json")
try:
    with open(state) as handle:
        sessions = json.load(handle)
except FileNotFoundError:
    sessions = {}
args = sys.argv[1:]
cmd = args[0] if args else ""

def save():
    with open(state, "w") as handle:
        json.dump(sessions, handle)

def target():
    return args[args.index("-t") + 1]

if cmd == "new-session":
    name = args[args.index("-s") + 1]
    if name in sessions:
        sys.exit(1)
    sessions[name] = ""
    save()
elif cmd == "list-sessions":
    if not sessions:
        sys.exit(1)
    for name in sessions:
        print(name + ": 1 windows")
elif cmd == "has-session":
    sys.exit(0 if target() in sessions else 1)
elif cmd == "send-keys":
    name = target()
    if name not in sessions:
        sys.exit(1)
    sessions[name] += args[-1] if "-l" in args else "[" + args[-1] + "]"
    save()
elif cmd == "capture-pane":
    name = target()
    if name not in sessions:
        sys.exit(1)
    print(sessions[name])
elif cmd == "kill-session":
    name = target()
    if name not in sessions:
        sys.exit(1)
    del sessions[name]
    save()
else:
    sys.exit(1)
"""

ALL_TOOLS = [
    "start_session",
    "send_keys",
    "send_commands",
    "view_session",
    "list_sessions",
    "join_session",
    "close_session",
]


@pytest.fixture
def fake_tmux(tmp_path, monkeypatch):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "tmux"
    script.write_text(f"#!{sys.executable}\n" + FAKE_TMUX)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    monkeypatch.setenv("PATH", str(bin_dir))
    return bin_dir


@pytest.fixture
def no_tmux(tmp_path, monkeypatch):
    empty = tmp_path / "empty"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))


@pytest.fixture
def server(fake_tmux):
    return create_server(Config())


def call(server, name, arguments=None):
    response = server.handle_message(
        {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments or {}},
        }
    )
    return response["result"]


def text_of(result):
    return result["content"][0]["text"]


def test_parse_args_defaults():
    config = parse_args([])
    assert config == Config(use_http=False, port="8080")


def test_parse_args_http_and_port():
    config = parse_args(["--http", "--port", "9090"])
    assert config.use_http is True
    assert config.port == "9090"


def test_parse_args_port_without_value_keeps_default():
    config = parse_args(["--port"])
    assert config.port == "8080"
    assert config.use_http is False


def test_register_tools_adds_all_tools():
    server = McpServer("test", "0")
    register_tools(server)
    assert server.tool_names() == sorted(ALL_TOOLS)


def test_create_server_without_tmux_raises(no_tmux):
    with pytest.raises(TmuxError, match="tmux check failed"):
        create_server(Config())


def test_create_server_with_tmux_registers_tools(server):
    assert set(server.tool_names()) == set(ALL_TOOLS)


def test_tools_list_schema_marks_required(server):
    response = server.handle_message({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
    tools = {tool["name"]: tool for tool in response["result"]["tools"]}
    schema = tools["send_commands"]["inputSchema"]
    assert schema["required"] == ["session_name", "commands"]
    assert schema["properties"]["commands"]["type"] == "array"
    assert schema["properties"]["default_delay_ms"]["type"] == "number"
    assert schema["properties"]["capture_screen"]["type"] == "boolean"


def test_missing_session_name_is_tool_error(server):
    result = call(server, "start_session")
    assert result["isError"] is True
    assert text_of(result) == 'required argument "session_name" not found'


def test_session_lifecycle(server):
    started = call(server, "start_session", {"session_name": "demo"})
    assert text_of(started) == "Session 'demo' started successfully"

    listed = call(server, "list_sessions")
    assert "demo" in text_of(listed)

    sent = call(server, "send_keys", {"session_name": "demo", "keys": "Enter"})
    assert text_of(sent) == "Keys sent to session 'demo'"

    viewed = call(server, "view_session", {"session_name": "demo"})
    assert "[Enter]" in text_of(viewed)

    closed = call(server, "close_session", {"session_name": "demo"})
    assert text_of(closed) == "Session 'demo' closed successfully"


def test_start_duplicate_session_fails(server):
    call(server, "start_session", {"session_name": "demo"})
    result = call(server, "start_session", {"session_name": "demo"})
    assert result["isError"] is True
    assert text_of(result).startswith("Failed to start session: failed to create tmux session")


def test_send_commands_reports_and_captures(server):
    call(server, "start_session", {"session_name": "demo"})
    result = call(
        server,
        "send_commands",
        {"session_name": "demo", "commands": ["echo hi", "<ENTER>"], "default_delay_ms": 0},
    )
    report = text_of(result)
    assert report.startswith("Executing 2 commands on session 'demo':\n")
    assert "Commands executed successfully.\n" in report
    assert "\nScreen content:\necho hi[Enter]" in report


def test_send_commands_without_capture(server):
    call(server, "start_session", {"session_name": "demo"})
    result = call(
        server,
        "send_commands",
        {
            "session_name": "demo",
            "commands": ["x"],
            "default_delay_ms": 0,
            "capture_screen": False,
        },
    )
    assert "Screen content" not in text_of(result)
    assert text_of(result).endswith("Commands executed successfully.\n")


def test_send_commands_unknown_special(server):
    call(server, "start_session", {"session_name": "demo"})
    result = call(
        server,
        "send_commands",
        {"session_name": "demo", "commands": ["<BOGUS>"], "default_delay_ms": 0},
    )
    assert result["isError"] is True
    assert "unknown special command: <BOGUS>" in text_of(result)


def test_send_commands_requires_string_list(server):
    result = call(server, "send_commands", {"session_name": "demo", "commands": "ls"})
    assert result["isError"] is True
    assert "commands" in text_of(result)


def test_join_missing_session(server):
    result = call(server, "join_session", {"session_name": "ghost"})
    assert result["isError"] is True
    assert text_of(result) == "Failed to join session: session 'ghost' does not exist"


def test_join_session_with_and_without_new_name(server):
    call(server, "start_session", {"session_name": "demo"})
    plain = call(server, "join_session", {"session_name": "demo"})
    assert text_of(plain) == "Joined session 'demo'"
    named = call(server, "join_session", {"session_name": "demo", "new_session_name": "mirror"})
    assert text_of(named) == "Joined session 'demo' as 'mirror'"
    assert "mirror" in text_of(call(server, "list_sessions"))


def test_close_missing_session_fails(server):
    result = call(server, "close_session", {"session_name": "ghost"})
    assert result["isError"] is True
    assert text_of(result).startswith("Failed to close session")


def test_list_sessions_with_none_fails(server):
    result = call(server, "list_sessions")
    assert result["isError"] is True
    assert text_of(result).startswith("Failed to list sessions: failed to list sessions")


def test_main_without_tmux_returns_error(no_tmux, capsys):
    assert main([]) == 1
    assert "Failed to create server: tmux check failed" in capsys.readouterr().err


def test_main_serves_stdio(fake_tmux, monkeypatch, capsys):
    request = {"jsonrpc": "2.0", "id": 7, "method": "tools/list"}
    monkeypatch.setattr(sys, "stdin", io.StringIO(json.dumps(request) + "\n"))
    assert main([]) == 0
    lines = capsys.readouterr().out.splitlines()
    response = json.loads(lines[0])
    assert response["id"] == 7
    assert {tool["name"] for tool in response["result"]["tools"]} == set(ALL_TOOLS)