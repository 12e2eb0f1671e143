"""Wire-level models for the MCP JSON-RPC channel.

Inbound envelopes are validated with pydantic; outbound payloads are pydantic
models dumped with their camelCase aliases. Field declaration order is the
key order clients see on the wire.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from mcphost.core.result import METHOD_NOT_FOUND, MalformedRequestError

JSONRPC_VERSION = "2.0"
DEFAULT_MIME_TYPE = "text/plain"

# Ids are echoed back exactly as received, whatever their JSON type.
RequestId = Any


class SchemaType(str, Enum):
    """JSON-Schema primitive type names used in tool input schemas."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


# ---------------------------------------------------------------------------
# Inbound
# ---------------------------------------------------------------------------


class InboundRequest(BaseModel):
    """A parsed JSON-RPC request or notification."""

    model_config = ConfigDict(frozen=True, extra="allow")

    jsonrpc: str | None = None
    id: RequestId = None
    method: str
    params: dict[str, Any] | None = None

    @property
    def is_notification(self) -> bool:
        # An explicit "id": null still expects a reply.
        return "id" not in self.model_fields_set


def parse_request(line: str) -> InboundRequest:
    """Parse one line into an ``InboundRequest``.

    Raises:
        MalformedRequestError: The line is not JSON, or not a request object.
    """
    try:
        return InboundRequest.model_validate_json(line)
    except PydanticValidationError as exc:
        errors = exc.errors()
        parse_error = any(err.get("type") == "json_invalid" for err in errors)
        request_id = _salvage_id(line) if not parse_error else None
        summary = "Parse error" if parse_error else "Invalid Request"
        raise MalformedRequestError(
            summary,
            parse_error=parse_error,
            request_id=request_id,
            context={"detail": errors[0].get("msg", "") if errors else ""},
        ) from exc


def _salvage_id(line: str) -> RequestId:
    try:
        payload = json.loads(line)
    except ValueError:
        return None
    if isinstance(payload, dict):
        return payload.get("id")
    return None


# ---------------------------------------------------------------------------
# Outbound
# ---------------------------------------------------------------------------


class WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class TextContent(WireModel):
    type: Literal["text"] = "text"
    text: str


class ToolCallResult(WireModel):
    content: list[TextContent]
    is_error: bool = Field(alias="isError")


class ResourceContents(WireModel):
    uri: str
    text: str
    mime_type: str = Field(default=DEFAULT_MIME_TYPE, alias="mimeType")


class ResourceReadResult(WireModel):
    contents: list[ResourceContents]


class PromptMessage(WireModel):
    role: Literal["user"] = "user"
    content: TextContent


class PromptResult(WireModel):
    description: str
    messages: list[PromptMessage]


class PropertySchema(WireModel):
    type: SchemaType
    description: str


class InputSchema(WireModel):
    type: Literal["object"] = "object"
    properties: dict[str, PropertySchema]
    required: list[str]


class ToolDefinition(WireModel):
    name: str
    description: str
    input_schema: InputSchema = Field(alias="inputSchema")


class ResourceDefinition(WireModel):
    uri: str
    name: str
    description: str
    mime_type: str = Field(alias="mimeType")


class ResourceTemplateDefinition(WireModel):
    uri_template: str = Field(alias="uriTemplate")
    name: str
    description: str
    mime_type: str = Field(alias="mimeType")


class PromptArgument(WireModel):
    name: str
    description: str
    required: bool


class PromptDefinition(WireModel):
    name: str
    description: str
    arguments: list[PromptArgument]


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


def success_response(request_id: RequestId, result: Any) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(request_id: RequestId, code: int, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {"code": code, "message": message},
    }


def method_not_found_result() -> dict[str, Any]:
    """Unknown methods answer inside ``result`` rather than a top-level ``error``."""
    return {"error": {"code": METHOD_NOT_FOUND, "message": "Method not found"}}


def encode_message(message: dict[str, Any]) -> str:
    """Serialize a response as one compact JSON line (without the newline)."""
    return json.dumps(message, separators=(",", ":"), ensure_ascii=False)


__all__ = [
    "DEFAULT_MIME_TYPE",
    "JSONRPC_VERSION",
    "InboundRequest",
    "InputSchema",
    "PromptArgument",
    "PromptDefinition",
    "PromptMessage",
    "PromptResult",
    "PropertySchema",
    "RequestId",
    "ResourceContents",
    "ResourceDefinition",
    "ResourceReadResult",
    "ResourceTemplateDefinition",
    "SchemaType",
    "TextContent",
    "ToolCallResult",
    "ToolDefinition",
    "WireModel",
    "encode_message",
    "error_response",
    "method_not_found_result",
    "parse_request",
    "success_response",
]
