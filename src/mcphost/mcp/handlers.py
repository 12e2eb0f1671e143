"""Kind-specific envelopes for ``tools/call``, ``resources/read`` and ``prompts/get``.

Each function turns an invocation outcome into the result payload its MCP
method promises. Application failures become data here; only missing or
ill-typed params raise (``InvalidParamsError``).
"""

from __future__ import annotations

from typing import Any

from mcphost.capabilities.invoker import call_capability, render_text
from mcphost.capabilities.registry import CapabilityKind, CapabilityRegistry
from mcphost.core.protocol import (
    DEFAULT_MIME_TYPE,
    PromptMessage,
    PromptResult,
    ResourceContents,
    ResourceReadResult,
    TextContent,
    ToolCallResult,
)
from mcphost.core.result import CapabilityError, CapabilityNotFoundError, Err, InvalidParamsError

ERROR_PREFIX = "Error: "


def _require_str(params: dict[str, Any], field: str) -> str:
    value = params.get(field)
    if not isinstance(value, str):
        raise InvalidParamsError(
            f"Invalid params: '{field}' must be a string",
            context={"field": field},
        )
    return value


def _arguments(params: dict[str, Any]) -> dict[str, Any] | None:
    arguments = params.get("arguments")
    if arguments is not None and not isinstance(arguments, dict):
        raise InvalidParamsError(
            "Invalid params: 'arguments' must be an object",
            context={"field": "arguments"},
        )
    return arguments


def _failure_text(error: CapabilityError) -> str:
    if isinstance(error, CapabilityNotFoundError):
        return error.message
    return ERROR_PREFIX + error.message


def call_tool(registry: CapabilityRegistry, params: dict[str, Any]) -> dict[str, Any]:
    name = _require_str(params, "name")
    outcome = call_capability(registry, CapabilityKind.TOOL, name, _arguments(params))

    if isinstance(outcome, Err):
        content = TextContent(text=_failure_text(outcome.error))
        return ToolCallResult(content=[content], is_error=True).to_wire()

    content = TextContent(text=render_text(outcome.value))
    return ToolCallResult(content=[content], is_error=False).to_wire()


def read_resource(registry: CapabilityRegistry, params: dict[str, Any]) -> dict[str, Any]:
    # Resource callables take no parameters; any "arguments" are ignored.
    uri = _require_str(params, "uri")
    outcome = call_capability(registry, CapabilityKind.RESOURCE, uri, with_arguments=False)

    if isinstance(outcome, Err):
        contents = ResourceContents(
            uri=uri, text=_failure_text(outcome.error), mime_type=DEFAULT_MIME_TYPE
        )
        return ResourceReadResult(contents=[contents]).to_wire()

    descriptor = registry.get(CapabilityKind.RESOURCE, uri)
    mime_type = descriptor.mime_type if descriptor and descriptor.mime_type else DEFAULT_MIME_TYPE
    contents = ResourceContents(uri=uri, text=render_text(outcome.value), mime_type=mime_type)
    return ResourceReadResult(contents=[contents]).to_wire()


def get_prompt(registry: CapabilityRegistry, params: dict[str, Any]) -> dict[str, Any]:
    name = _require_str(params, "name")
    outcome = call_capability(
        registry, CapabilityKind.PROMPT, name, _arguments(params), lenient=True
    )

    if isinstance(outcome, Err):
        if isinstance(outcome.error, CapabilityNotFoundError):
            return PromptResult(description="", messages=[]).to_wire()
        message = PromptMessage(content=TextContent(text=_failure_text(outcome.error)))
        return PromptResult(description="Error", messages=[message]).to_wire()

    descriptor = registry.get(CapabilityKind.PROMPT, name)
    message = PromptMessage(content=TextContent(text=render_text(outcome.value)))
    return PromptResult(
        description=descriptor.description if descriptor else "", messages=[message]
    ).to_wire()


__all__ = ["call_tool", "get_prompt", "read_resource"]
