[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tmuxmcp"
version = "1.0.0"
description = "A Model Context Protocol server that drives tmux terminal sessions over stdio"
requires-python = ">=3.10"
dependencies = []
keywords = ["tmux", "mcp", "model-context-protocol", "terminal", "automation", "json-rpc"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Terminals",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tmux-mcp-server = "tmuxmcp.server:main"

[tool.hatch.build.targets.wheel]
packages = ["tmuxmcp"]

[tool.pytest.ini_options]
addopts = "-ra"
