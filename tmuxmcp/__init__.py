"""An MCP server and client for driving tmux terminal sessions over stdio."""

__version__ = "1.0.0"
__all__ = ["__version__"]