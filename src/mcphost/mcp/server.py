"""MCP server host over standard input/output.

Creates and runs the server:
    - Capability discovery over the given modules
    - One blocking read loop, one request at a time
    - Protocol errors answered and logged, never fatal
"""

from __future__ import annotations

import sys
from types import ModuleType
from typing import Any, TextIO

from mcphost.capabilities.registry import CapabilityRegistry
from mcphost.core.config import ServerConfig
from mcphost.core.console import get_logger
from mcphost.core.protocol import encode_message, error_response
from mcphost.core.result import ProtocolError
from mcphost.mcp.dispatcher import RequestDispatcher

logger = get_logger("mcp")


class McpServerHost:
    """A line-delimited JSON-RPC server exposing decorated capabilities.

    Capabilities are discovered once, at construction.
    """

    def __init__(
        self,
        *code_units: ModuleType | str,
        config: ServerConfig | None = None,
        registry: CapabilityRegistry | None = None,
    ) -> None:
        self.config = config or ServerConfig()
        self.registry = registry if registry is not None else CapabilityRegistry.discover(*code_units)
        self.dispatcher = RequestDispatcher(self.registry, self.config)

    def process_line(self, line: str) -> dict[str, Any] | None:
        """Handle one line and return the response to write, if any."""
        try:
            return self.dispatcher.handle_line(line)
        except ProtocolError as exc:
            logger.error("Rejected message (%s): %s", exc.code, exc)
            if exc.notification:
                return None
            return error_response(exc.request_id, exc.code, exc.message)

    def run(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        """Serve requests until end of input."""
        reader = stdin if stdin is not None else sys.stdin
        writer = stdout if stdout is not None else sys.stdout
        logger.info(
            "Serving %s %s (%r) over stdio",
            self.config.server_name,
            self.config.server_version,
            self.registry,
        )

        while True:
            line = reader.readline()
            if not line:
                break
            response = self.process_line(line)
            if response is None:
                continue
            writer.write(encode_message(response) + "\n")
            writer.flush()

        logger.info("Input closed; server stopping")


def create_server(*code_units: ModuleType | str, config: ServerConfig | None = None) -> McpServerHost:
    return McpServerHost(*code_units, config=config)


__all__ = ["McpServerHost", "create_server"]
