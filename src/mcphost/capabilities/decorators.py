"""Decorators that mark functions as MCP capabilities.

Each decorator builds the ``CapabilityDescriptor`` up front (including the
parameter specs) and attaches it to the function; discovery only has to find
the marker. The decorated function is returned unchanged, so it stays
directly callable from application code.

    @tool(description="Greets someone")
    def greet(name: Annotated[str, Param("Who to greet")]) -> str:
        return f"Hello, {name}!"
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, TypeVar, overload

from mcphost.capabilities.registry import (
    CAPABILITY_METADATA_ATTR,
    CapabilityDescriptor,
    CapabilityKind,
    get_capability_descriptor,
)
from mcphost.capabilities.schema import Param, build_parameter_specs
from mcphost.core.protocol import DEFAULT_MIME_TYPE
from mcphost.core.result import RegistrationError

F = TypeVar("F", bound=Callable[..., Any])


def _summary(func: Callable[..., Any]) -> str:
    doc = inspect.getdoc(func)
    if not doc:
        return ""
    return doc.strip().splitlines()[0].strip()


def _target(func: Any) -> Callable[..., Any]:
    if isinstance(func, classmethod):
        raise RegistrationError(
            "Classmethods cannot be capabilities; use a staticmethod or module function.",
            context={"function": getattr(func.__func__, "__qualname__", repr(func))},
        )
    if isinstance(func, staticmethod):
        return func.__func__
    if not callable(func):
        raise RegistrationError(f"Capability target {func!r} is not callable.")
    return func


def _register(
    func: F,
    kind: CapabilityKind,
    key: str | None,
    *,
    name: str | None,
    description: str | None,
    mime_type: str | None = None,
) -> F:
    target = _target(func)
    existing = get_capability_descriptor(target)
    if existing is not None:
        raise RegistrationError(
            f"{target.__qualname__} is already registered as {existing.kind.value} "
            f"'{existing.key}'; a callable may carry only one capability marker.",
            context={"requested": kind.value},
        )

    default_name = getattr(target, "__name__", "capability")
    descriptor = CapabilityDescriptor(
        kind=kind,
        key=key or name or default_name,
        display_name=name or default_name,
        description=_summary(target) if description is None else description,
        func=target,
        parameters=build_parameter_specs(target),
        mime_type=mime_type,
    )
    setattr(target, CAPABILITY_METADATA_ATTR, descriptor)
    return func


@overload
def tool(func: F, /) -> F: ...


@overload
def tool(
    *, name: str | None = None, description: str | None = None
) -> Callable[[F], F]: ...


def tool(
    func: F | None = None,
    /,
    *,
    name: str | None = None,
    description: str | None = None,
) -> F | Callable[[F], F]:
    """Mark a function as an MCP tool.

    Usable bare (``@tool``) or with options (``@tool(name=..., description=...)``).
    The tool name defaults to the function name and the description to the
    first docstring line.
    """

    def decorator(fn: F) -> F:
        return _register(fn, CapabilityKind.TOOL, name, name=name, description=description)

    return decorator(func) if func is not None else decorator


def resource(
    uri: str,
    *,
    name: str | None = None,
    description: str | None = None,
    mime_type: str = DEFAULT_MIME_TYPE,
) -> Callable[[F], F]:
    """Mark a zero-argument function as a readable resource at ``uri``."""
    if not uri:
        raise RegistrationError("Resource decorator requires a non-empty 'uri'.")

    def decorator(fn: F) -> F:
        return _register(
            fn, CapabilityKind.RESOURCE, uri, name=name, description=description, mime_type=mime_type
        )

    return decorator


def resource_template(
    uri_template: str,
    *,
    name: str | None = None,
    description: str | None = None,
    mime_type: str = DEFAULT_MIME_TYPE,
) -> Callable[[F], F]:
    """Advertise a URI template (e.g. ``file:///{path}``) in ``resources/templates/list``."""
    if not uri_template:
        raise RegistrationError("Resource template decorator requires a non-empty 'uri_template'.")

    def decorator(fn: F) -> F:
        return _register(
            fn,
            CapabilityKind.RESOURCE_TEMPLATE,
            uri_template,
            name=name,
            description=description,
            mime_type=mime_type,
        )

    return decorator


@overload
def prompt(func: F, /) -> F: ...


@overload
def prompt(
    *, name: str | None = None, description: str | None = None
) -> Callable[[F], F]: ...


def prompt(
    func: F | None = None,
    /,
    *,
    name: str | None = None,
    description: str | None = None,
) -> F | Callable[[F], F]:
    """Mark a function as a prompt template; its return value becomes the user message."""

    def decorator(fn: F) -> F:
        return _register(fn, CapabilityKind.PROMPT, name, name=name, description=description)

    return decorator(func) if func is not None else decorator


__all__ = [
    "Param",
    "prompt",
    "resource",
    "resource_template",
    "tool",
]
