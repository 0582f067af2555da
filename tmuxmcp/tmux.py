"""Control tmux sessions through the tmux command line."""

from __future__ import annotations

import math
import re
import shutil
import subprocess
import time
from collections.abc import Iterable

TMUX = "tmux"
SESSION_WIDTH = 80
SESSION_HEIGHT = 24
STARTUP_DELAY = 0.2

_KEY_MAP = {
    "ENTER": "Enter",
    "ESC": "Escape",
    "TAB": "Tab",
    "BACKSPACE": "BSpace",
    "DELETE": "Delete",
    "UP": "Up",
    "DOWN": "Down",
    "LEFT": "Left",
    "RIGHT": "Right",
    "HOME": "Home",
    "END": "End",
    "PAGEUP": "PPage",
    "PAGEDOWN": "NPage",
    "SPACE": "Space",
}

_INT_RE = re.compile(r"[+-]?\d+")


class TmuxError(RuntimeError):
    """Raised when a tmux operation fails."""


def _run(*args: str) -> str:
    """Run tmux with the given arguments and return its standard output."""
    try:
        completed = subprocess.run(
            [TMUX, *args],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as exc:
        raise TmuxError(str(exc)) from exc
    if completed.returncode != 0:
        raise TmuxError(f"exit status {completed.returncode}")
    return completed.stdout


def check_tmux_available() -> str:
    """Return the path of the tmux executable, or raise if it is not on PATH."""
    path = shutil.which(TMUX)
    if path is None:
        raise TmuxError("tmux is required but not found in PATH")
    return path


def start_session(session_name: str, command: str = "", working_dir: str = "") -> None:
    """Create a detached session with the exact given name."""
    args = [
        "new-session", "-d", "-s", session_name,
        "-x", str(SESSION_WIDTH), "-y", str(SESSION_HEIGHT),
    ]
    if working_dir:
        args += ["-c", working_dir]
    if command:
        args.append(command)
    try:
        _run(*args)
    except TmuxError as exc:
        raise TmuxError(f"failed to create tmux session: {exc}") from exc
    time.sleep(STARTUP_DELAY)


def send_keys(session_name: str, keys: str) -> None:
    """Send keys to a session, letting tmux interpret key names."""
    _run("send-keys", "-t", session_name, keys)


def map_to_tmux_key(cmd: str) -> str | None:
    """Translate a special command name to a tmux key name, or None if unknown."""
    if cmd.startswith("CTRL+"):
        return "C-" + cmd[len("CTRL+"):].lower()
    if cmd.startswith("ALT+"):
        return "M-" + cmd[len("ALT+"):].lower()
    return _KEY_MAP.get(cmd)


def parse_sleep_duration(cmd: str) -> float:
    """Parse 'SLEEP <n>ms' or 'SLEEP <x>s' and return the duration in seconds."""
    parts = cmd.split(" ")
    if len(parts) != 2:
        raise TmuxError(f"invalid sleep command format: {cmd}")
    time_str = parts[1]
    if time_str.endswith("ms"):
        value = time_str[:-2]
        if not _INT_RE.fullmatch(value):
            raise TmuxError(f"invalid milliseconds value: {value}")
        return max(0.0, int(value) / 1000)
    if time_str.endswith("s"):
        value = time_str[:-1]
        try:
            if "_" in value or value != value.strip():
                raise ValueError(value)
            seconds = float(value)
        except ValueError:
            raise TmuxError(f"invalid seconds value: {value}") from None
        if not math.isfinite(seconds):
            raise TmuxError(f"invalid seconds value: {value}")
        return max(0.0, seconds)
    raise TmuxError(f"sleep time must end with 'ms' or 's': {time_str}")


def _execute_special_command(session_name: str, command: str) -> None:
    cmd = command[1:-1]
    if cmd.startswith("SLEEP "):
        time.sleep(parse_sleep_duration(cmd))
        return
    key = map_to_tmux_key(cmd)
    if not key:
        raise TmuxError(f"unknown special command: {command}")
    _run("send-keys", "-t", session_name, key)


def _send_literal_text(session_name: str, text: str) -> None:
    _run("send-keys", "-l", "-t", session_name, text)


def send_commands(
    session_name: str,
    commands: Iterable[str],
    default_delay_ms: int = 100,
    capture_screen: bool = True,
) -> str:
    """Send literal text and <SPECIAL> commands in order and return a report."""
    commands = list(commands)
    lines = [f"Executing {len(commands)} commands on session '{session_name}':\n"]

    for number, command in enumerate(commands, start=1):
        if command.startswith("<") and command.endswith(">"):
            try:
                _execute_special_command(session_name, command)
            except TmuxError as exc:
                raise TmuxError(
                    f"failed to execute command {number} ('{command}'): {exc}"
                ) from exc
        else:
            try:
                _send_literal_text(session_name, command)
            except TmuxError as exc:
                raise TmuxError(
                    f"failed to send literal text {number} ('{command}'): {exc}"
                ) from exc

        if default_delay_ms > 0 and not command.startswith("<SLEEP"):
            time.sleep(default_delay_ms / 1000)

    lines.append("Commands executed successfully.\n")

    if capture_screen:
        try:
            content = capture_pane(session_name)
        except TmuxError as exc:
            lines.append(f"Warning: Failed to capture screen: {exc}\n")
        else:
            lines.append("\nScreen content:\n")
            lines.append(content)

    return "".join(lines)


def capture_pane(session_name: str) -> str:
    """Return the visible screen of a session, escape sequences included."""
    try:
        return _run("capture-pane", "-t", session_name, "-e", "-p")
    except TmuxError as exc:
        raise TmuxError(f"failed to capture screen: {exc}") from exc


def list_sessions() -> str:
    """Return the output of 'tmux list-sessions'."""
    try:
        return _run("list-sessions")
    except TmuxError as exc:
        raise TmuxError(f"failed to list sessions: {exc}") from exc


def join_session(session_name: str, new_session_name: str = "") -> None:
    """Check a session exists and optionally attach a new grouped session to it."""
    try:
        _run("has-session", "-t", session_name)
    except TmuxError:
        raise TmuxError(f"session '{session_name}' does not exist") from None

    if new_session_name:
        try:
            _run("new-session", "-d", "-s", new_session_name, "-t", session_name)
        except TmuxError as exc:
            raise TmuxError(f"failed to create shared session: {exc}") from exc

    time.sleep(STARTUP_DELAY)


def kill_session(session_name: str) -> None:
    """Close a session by name."""
    _run("kill-session", "-t", session_name)