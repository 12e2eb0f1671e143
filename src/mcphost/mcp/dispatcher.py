"""Request routing for the MCP stdio protocol.

A ``RequestDispatcher`` owns a method -> handler table built once at
construction. Each inbound line moves through
``AwaitingLine -> Parsed -> Routed -> (Responded | Suppressed)``:

    dispatcher = RequestDispatcher(registry, config)
    response = dispatcher.handle_line('{"jsonrpc":"2.0","id":1,"method":"ping"}')
    # {"jsonrpc": "2.0", "id": 1, "result": {}}

Notifications (no ``id``) and lifecycle methods never produce a response.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from typing import Any

from mcphost.capabilities.registry import CapabilityKind, CapabilityRegistry
from mcphost.core.config import ServerConfig
from mcphost.core.console import get_logger
from mcphost.core.protocol import (
    InboundRequest,
    method_not_found_result,
    parse_request,
    success_response,
)
from mcphost.core.result import ProtocolError
from mcphost.mcp import handlers

logger = get_logger("dispatcher")

Handler = Callable[[dict[str, Any]], Any]

# Lifecycle messages: no result, and never answered even when an id is present.
LIFECYCLE_METHODS = frozenset({"notifications/initialized", "initialized", "cancelled"})


class RequestDispatcher:
    """Route parsed requests to registry listings and capability handlers."""

    def __init__(self, registry: CapabilityRegistry, config: ServerConfig | None = None) -> None:
        self.registry = registry
        self.config = config or ServerConfig()
        self._handlers: dict[str, Handler] = {
            "initialize": self._initialize,
            "ping": lambda _params: {},
            "tools/list": partial(self._list, CapabilityKind.TOOL, "tools"),
            "tools/call": partial(handlers.call_tool, registry),
            "resources/list": partial(self._list, CapabilityKind.RESOURCE, "resources"),
            "resources/read": partial(handlers.read_resource, registry),
            "resources/templates/list": partial(
                self._list, CapabilityKind.RESOURCE_TEMPLATE, "resourceTemplates"
            ),
            "prompts/list": partial(self._list, CapabilityKind.PROMPT, "prompts"),
            "prompts/get": partial(handlers.get_prompt, registry),
            "completion/complete": lambda _params: {
                "completion": {"values": [], "hasMore": False}
            },
        }

    @property
    def methods(self) -> frozenset[str]:
        return frozenset(self._handlers) | LIFECYCLE_METHODS

    def _initialize(self, _params: dict[str, Any]) -> dict[str, Any]:
        return {
            "protocolVersion": self.config.protocol_version,
            "capabilities": {"tools": {}, "resources": {}, "prompts": {}},
            "serverInfo": {
                "name": self.config.server_name,
                "version": self.config.server_version,
            },
        }

    def _list(self, kind: CapabilityKind, field: str, _params: dict[str, Any]) -> dict[str, Any]:
        return {field: self.registry.get_definitions(kind)}

    def dispatch(self, request: InboundRequest) -> Any:
        """Compute the result for ``request`` regardless of whether it will be sent."""
        if request.method in LIFECYCLE_METHODS:
            logger.debug("Lifecycle message %s", request.method)
            return None

        handler = self._handlers.get(request.method)
        if handler is None:
            logger.debug("Unknown method %s", request.method)
            return method_not_found_result()

        return handler(request.params or {})

    def handle(self, request: InboundRequest) -> dict[str, Any] | None:
        """Dispatch ``request`` and frame the response, or ``None`` when suppressed.

        Raises:
            ProtocolError: The routed handler rejected the request params. The
                error carries the request id and whether it was a notification.
        """
        try:
            result = self.dispatch(request)
        except ProtocolError as exc:
            exc.notification = request.is_notification
            exc.request_id = None if request.is_notification else request.id
            raise

        if request.is_notification or request.method in LIFECYCLE_METHODS:
            return None
        return success_response(request.id, result)

    def handle_line(self, line: str) -> dict[str, Any] | None:
        """Handle one raw input line. Blank lines are ignored.

        Raises:
            MalformedRequestError: The line is not a JSON-RPC request object.
            InvalidParamsError: A routed method is missing params it needs.
        """
        if not line.strip():
            return None
        return self.handle(parse_request(line))


__all__ = ["LIFECYCLE_METHODS", "RequestDispatcher"]
