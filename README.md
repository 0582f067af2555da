# tmuxmcp

A Model Context Protocol (MCP) server that lets an MCP client start, drive,
inspect and close terminal sessions through tmux. It speaks newline-delimited
JSON-RPC 2.0 over standard input and output.

## Requirements

- Python 3.10 or later
- `tmux` on your `PATH` (`brew install tmux` on macOS, `apt-get install tmux`
  on Debian/Ubuntu)

No third-party Python packages are needed.

## Installation

```
pip install tmuxmcp
```

## Running the server

```
tmux-mcp-server
```

The same entry point can be started with `python -m tmuxmcp.server`.

On start the server checks that tmux is on `PATH` (printing progress to
standard error), registers its tools and then answers MCP requests on stdin
and stdout until input ends. If tmux is missing it prints
`Failed to create server: ...` and exits with status 1.

The server handles the `initialize`, `ping`, `tools/list` and `tools/call`
methods. Notifications are accepted and not answered. It reports the
protocol version the client asks for when that is `2025-03-26` or
`2024-11-05`, and `2025-03-26` otherwise.

### What it does not do

`--http` and `--port PORT` are accepted and recorded in the `Config` returned
by `tmuxmcp.server.parse_args`, but there is no HTTP transport: the server
only ever serves over stdio. Other arguments are ignored.

## Tools

`tools/list` returns the tools sorted by name.

| Tool             | Arguments                                                                 | What it does |
|------------------|---------------------------------------------------------------------------|--------------|
| `start_session`  | `session_name`, optional `command`, optional `working_directory`          | Creates a detached 80x24 tmux session with exactly that name |
| `send_keys`      | `session_name`, `keys`                                                    | Sends keys with `tmux send-keys` (tmux key names such as `Enter` work) |
| `send_commands`  | `session_name`, `commands`, optional `default_delay_ms` (100), optional `capture_screen` (true) | Runs a sequence of literal text and special keys, then optionally returns the screen |
| `view_session`   | `session_name`                                                            | Returns the current pane content, escape sequences included |
| `list_sessions`  | none                                                                      | Returns the output of `tmux list-sessions` |
| `join_session`   | `session_name`, optional `new_session_name`                               | Checks the session exists, optionally creating a grouped session sharing its windows |
| `close_session`  | `session_name`                                                            | Kills the session |

A missing or mistyped required argument, or a failing tmux call, comes back
as a tool result with `isError: true` and a message such as
`Failed to start session: ...`.

### Commands for `send_commands`

Each entry in `commands` is either literal text, typed as-is with
`send-keys -l`, or a special command in angle brackets:

- `<ENTER>`, `<ESC>`, `<TAB>`, `<BACKSPACE>`, `<DELETE>`, `<SPACE>`
- `<UP>`, `<DOWN>`, `<LEFT>`, `<RIGHT>`, `<HOME>`, `<END>`, `<PAGEUP>`, `<PAGEDOWN>`
- `<CTRL+C>`, `<ALT+X>` and other Ctrl/Alt combinations (sent as `C-c`, `M-x`)
- `<SLEEP 500ms>` or `<SLEEP 1.5s>` to pause

The default delay is applied after every entry except sleeps. An unknown
special command stops the sequence with an error naming its position.

## Using it from Python

```python
from tmuxmcp.client import Client, get_tool_result_text

with Client("tmux-mcp-server") as client:
    client.initialize()
    client.start_session("demo")
    client.send_keys("demo", "echo hello")
    client.send_keys("demo", "Enter")
    print(get_tool_result_text(client.view_session("demo")))
    client.close_session("demo")
```

`Client(command, *args)` starts the server as a subprocess. Its methods
`initialize`, `list_tools`, `call_tool`, `start_session`, `send_keys`,
`view_session`, `list_sessions` and `close_session` return the JSON result as
a dict; `close` stops the process. Transport failures and JSON-RPC errors
raise `ClientError`. `get_tool_result_text` returns the first text item of a
tool result, or an empty string.

The tmux operations are also available directly in `tmuxmcp.tmux`
(`start_session`, `send_keys`, `send_commands`, `capture_pane`,
`list_sessions`, `join_session`, `kill_session`, `map_to_tmux_key`,
`parse_sleep_duration`); they raise `TmuxError` on failure.

The protocol layer in `tmuxmcp.protocol` (`McpServer`, `Tool`,
`ToolParameter`, `ToolResult`, `ToolArguments`) can be used to serve other
tools the same way.