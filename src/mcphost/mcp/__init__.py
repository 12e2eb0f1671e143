"""MCP protocol layer: request dispatch, result envelopes, and the stdio server.

Importing submodules directly is preferred:
    from mcphost.mcp.dispatcher import RequestDispatcher
    from mcphost.mcp.server import McpServerHost
"""

from __future__ import annotations
