"""mcphost - decorator-driven Model Context Protocol server over stdio.

Application code marks plain functions as tools, resources, resource
templates, or prompts; mcphost discovers them, describes their inputs, and
answers newline-delimited JSON-RPC requests on stdin/stdout.

Exports:
    __version__: Package version string.
    tool, resource, resource_template, prompt, Param: Capability decorators.
    McpServerHost, create_server: Stdio server entry points.
"""

from __future__ import annotations

__version__ = "0.3.0"

from mcphost.capabilities.decorators import Param, prompt, resource, resource_template, tool
from mcphost.core.config import ServerConfig
from mcphost.mcp.server import McpServerHost, create_server

__all__ = [
    "McpServerHost",
    "Param",
    "ServerConfig",
    "__version__",
    "create_server",
    "prompt",
    "resource",
    "resource_template",
    "tool",
]
