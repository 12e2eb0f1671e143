"""
Unified Result types and error hierarchy for mcphost.

This module provides:
1. Result[T, E] type for explicit error handling
2. Domain-specific exception hierarchy

Capability invocation never lets an exception reach the dispatcher; it
returns one of these instead:

    from mcphost.core.result import Err, Ok, Result

    def lookup(key: str) -> Result[str, CapabilityNotFoundError]:
        if key not in table:
            return Err(CapabilityNotFoundError("tool", key))
        return Ok(table[key])
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Represents a successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Represents a failed result containing an error."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True


# Type alias for Result
Result = Ok[T] | Err[E]


# ---------------------------------------------------------------------------
# Domain-specific error hierarchy
# ---------------------------------------------------------------------------


class McpHostError(Exception):
    """Base exception for all mcphost errors.

    ``message`` is the human-readable text surfaced to protocol clients;
    ``context`` carries structured details for logs.
    """

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


class ConfigurationError(McpHostError):
    """Raised for configuration issues.

    Examples:
    - Invalid config values
    - Config file parse errors
    """


class RegistrationError(McpHostError):
    """Raised when a callable is decorated in a way the registry cannot accept.

    Examples:
    - A second capability decorator on the same callable
    - A classmethod marked as a capability
    - A resource without a URI
    """


# ---------------------------------------------------------------------------
# Protocol errors (the only failures that escape the dispatcher)
# ---------------------------------------------------------------------------

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


class ProtocolError(McpHostError):
    """Raised when an inbound message cannot be processed as a request."""

    code = INVALID_REQUEST

    def __init__(
        self,
        message: str,
        *,
        request_id: Any = None,
        notification: bool = False,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.request_id = request_id
        self.notification = notification


class MalformedRequestError(ProtocolError):
    """Raised for unparsable lines and envelopes without a usable ``method``."""

    def __init__(self, message: str, *, parse_error: bool = False, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.code = PARSE_ERROR if parse_error else INVALID_REQUEST


class InvalidParamsError(ProtocolError):
    """Raised when a routed method is missing the params it consumes."""

    code = INVALID_PARAMS


# ---------------------------------------------------------------------------
# Capability errors (always delivered as Err, never raised to the dispatcher)
# ---------------------------------------------------------------------------


class CapabilityError(McpHostError):
    """Base class for failures reported inside a capability outcome."""


class CapabilityNotFoundError(CapabilityError):
    """Raised when no capability is registered under the requested key."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind} '{key}' not found", context={"kind": kind})
        self.kind = kind
        self.key = key


class ArgumentError(CapabilityError):
    """Raised when call arguments cannot be bound to a capability signature."""

    def __init__(self, message: str, parameter: str) -> None:
        super().__init__(message, context={"parameter": parameter})
        self.parameter = parameter


class MissingArgumentError(ArgumentError):
    """Raised when a required argument is absent and has no default."""

    def __init__(self, parameter: str) -> None:
        super().__init__(f"Missing required parameter: {parameter}", parameter)


class ArgumentTypeError(ArgumentError):
    """Raised when a supplied argument does not fit the parameter's type."""


class InvocationError(CapabilityError):
    """Raised when the capability callable itself fails."""

    def __init__(self, key: str, cause: BaseException) -> None:
        super().__init__(error_message(cause), context={"capability": key})
        self.key = key
        self.cause = cause


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def error_message(exc: BaseException) -> str:
    """Return the message of ``exc`` itself, or its type name when it has none."""
    if isinstance(exc, McpHostError):
        return exc.message
    return str(exc) or type(exc).__name__


__all__ = [
    # Result types
    "Ok",
    "Err",
    "Result",
    # Error hierarchy
    "McpHostError",
    "ConfigurationError",
    "RegistrationError",
    "ProtocolError",
    "MalformedRequestError",
    "InvalidParamsError",
    "CapabilityError",
    "CapabilityNotFoundError",
    "ArgumentError",
    "MissingArgumentError",
    "ArgumentTypeError",
    "InvocationError",
    # JSON-RPC error codes
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    # Helpers
    "error_message",
]
