"""Argument binding and capability invocation.

Turns a JSON ``arguments`` object into a native call, runs the callable, and
reports the outcome as ``Ok(value)`` / ``Err(CapabilityError)``. Nothing in
this module raises to its caller for application-level failures.
"""

from __future__ import annotations

import asyncio
import inspect
import json
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, get_origin

from pydantic import TypeAdapter, ValidationError

from mcphost.capabilities.registry import CapabilityDescriptor, CapabilityKind, CapabilityRegistry
from mcphost.capabilities.schema import ParameterSpec, unwrap_optional
from mcphost.core.console import get_logger
from mcphost.core.result import (
    ArgumentError,
    ArgumentTypeError,
    CapabilityError,
    CapabilityNotFoundError,
    Err,
    InvocationError,
    MissingArgumentError,
    Ok,
    Result,
)

logger = get_logger("invoker")

_JSON_TYPE_NAMES: dict[type, str] = {
    str: "string",
    bool: "boolean",
    int: "integer",
    float: "number",
    list: "array",
    dict: "object",
    type(None): "null",
}


def _json_type_name(value: Any) -> str:
    return _JSON_TYPE_NAMES.get(type(value), type(value).__name__)


def _mismatch(name: str, expected: str, value: Any) -> ArgumentTypeError:
    return ArgumentTypeError(
        f"Parameter '{name}' expects {expected}, got {_json_type_name(value)}", name
    )


def _expected_type(target: type, value: Any, name: str) -> ArgumentTypeError:
    return ArgumentTypeError(f"Parameter '{name}' expects {target.__name__}, got {value!r}", name)


# Checked in order; bool before int because bool subclasses int.
_SCALAR_TARGETS: dict[type, str] = {
    bool: "boolean",
    str: "string",
    int: "integer",
    Decimal: "number",
    float: "number",
}

# Decimal validates in lax mode so JSON numbers and numeric strings both pass.
_LAX_TARGETS = frozenset({Decimal})


@lru_cache(maxsize=None)
def _adapter(target: type) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _scalar_base(target: type) -> type | None:
    for base in _SCALAR_TARGETS:
        if issubclass(target, base):
            return base
    return None


def coerce_value(value: Any, annotation: Any, name: str = "value") -> Any:
    """Convert a decoded JSON value to the parameter's native type.

    Strings, integers, floats, decimals and booleans (and their subclasses,
    enums included) are validated with pydantic; any other target receives
    the JSON value untouched.

    Raises:
        ArgumentTypeError: The value cannot represent the target type.
    """
    target, nullable = unwrap_optional(annotation)
    if value is None and nullable:
        return None
    if not isinstance(target, type) or get_origin(target) is not None:
        return value
    base = _scalar_base(target)
    if base is None:
        return value

    expected = _SCALAR_TARGETS[base]
    candidate = value
    if base is int and isinstance(value, float) and value.is_integer():
        candidate = int(value)
    elif base is Decimal:
        if isinstance(value, bool):
            raise _mismatch(name, expected, value)
        if isinstance(value, float):
            candidate = str(value)

    try:
        plain = _adapter(base).validate_python(candidate, strict=base not in _LAX_TARGETS)
    except ValidationError as exc:
        raise _mismatch(name, expected, value) from exc
    if base is float:
        plain = float(plain)
    if target is base:
        return plain

    if issubclass(target, Enum):
        try:
            return _adapter(target).validate_python(plain)
        except ValidationError as exc:
            raise _expected_type(target, plain, name) from exc
    try:
        return target(plain)
    except (TypeError, ValueError) as exc:
        raise _expected_type(target, plain, name) from exc


def bind_arguments(
    parameters: tuple[ParameterSpec, ...],
    arguments: Mapping[str, Any] | None,
    *,
    lenient: bool = False,
) -> Result[dict[str, Any], ArgumentError]:
    """Build the keyword map for a call, in declaration order.

    Supplied values are coerced, absent ones fall back to defaults. A missing
    argument without a default fails the binding unless ``lenient`` is set,
    in which case it binds to ``None``; under ``lenient`` an explicit JSON
    ``null`` also binds to ``None`` whatever the annotation.
    """
    supplied = arguments or {}
    bound: dict[str, Any] = {}
    for spec in parameters:
        if spec.name in supplied:
            value = supplied[spec.name]
            if value is None and lenient:
                bound[spec.name] = None
                continue
            try:
                bound[spec.name] = coerce_value(value, spec.annotation, spec.name)
            except ArgumentTypeError as exc:
                return Err(exc)
        elif spec.has_default:
            bound[spec.name] = spec.default
        elif lenient:
            bound[spec.name] = None
        else:
            return Err(MissingArgumentError(spec.name))
    return Ok(bound)


def _call(descriptor: CapabilityDescriptor, bound: dict[str, Any]) -> Any:
    positional = [bound[spec.name] for spec in descriptor.parameters if not spec.keyword_only]
    keywords = {spec.name: bound[spec.name] for spec in descriptor.parameters if spec.keyword_only}
    return _run(descriptor, positional, keywords)


def _run(descriptor: CapabilityDescriptor, args: list[Any], kwargs: dict[str, Any]) -> Any:
    result = descriptor.func(*args, **kwargs)
    if inspect.iscoroutine(result):
        result = asyncio.run(result)
    return result


def invoke(
    descriptor: CapabilityDescriptor,
    arguments: Mapping[str, Any] | None = None,
    *,
    lenient: bool = False,
) -> Result[Any, CapabilityError]:
    """Bind ``arguments`` and call the capability.

    Binding failures and anything the callable raises come back as ``Err``.
    """
    binding = bind_arguments(descriptor.parameters, arguments, lenient=lenient)
    if isinstance(binding, Err):
        logger.debug("Rejected call to %s: %s", descriptor.key, binding.error.message)
        return binding

    try:
        value = _call(descriptor, binding.value)
    except Exception as exc:
        logger.debug("Capability %s raised", descriptor.key, exc_info=exc)
        return Err(InvocationError(descriptor.key, exc))
    return Ok(value)


def invoke_without_arguments(descriptor: CapabilityDescriptor) -> Result[Any, CapabilityError]:
    """Call a capability with no arguments at all (resource reads)."""
    try:
        value = _run(descriptor, [], {})
    except Exception as exc:
        logger.debug("Capability %s raised", descriptor.key, exc_info=exc)
        return Err(InvocationError(descriptor.key, exc))
    return Ok(value)


def call_capability(
    registry: CapabilityRegistry,
    kind: CapabilityKind,
    key: str,
    arguments: Mapping[str, Any] | None = None,
    *,
    lenient: bool = False,
    with_arguments: bool = True,
) -> Result[Any, CapabilityError]:
    """Look up ``key`` in the ``kind`` index and invoke it.

    A lookup miss is ``Err(CapabilityNotFoundError)``; nothing is called.
    """
    descriptor = registry.get(kind, key)
    if descriptor is None:
        return Err(CapabilityNotFoundError(kind.label, key))
    if not with_arguments:
        return invoke_without_arguments(descriptor)
    return invoke(descriptor, arguments, lenient=lenient)


def render_text(value: Any) -> str:
    """Render a capability return value as response text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


__all__ = [
    "bind_arguments",
    "call_capability",
    "coerce_value",
    "invoke",
    "invoke_without_arguments",
    "render_text",
]
