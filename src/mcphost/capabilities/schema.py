"""Schema inference for capability parameters.

Maps native Python annotations onto the six JSON-Schema primitive types and
derives the ``ParameterSpec`` list for a callable:
    - infer_type(): annotation -> SchemaType (total, never raises)
    - unwrap_optional(): strip Annotated / Optional wrappers
    - build_parameter_specs(): signature + Param metadata -> ParameterSpec tuple
"""

from __future__ import annotations

import inspect
import types
import typing
from collections.abc import Callable, Sequence
from collections.abc import Set as AbstractSet
from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated, Any, Union, get_args, get_origin

from mcphost.core.protocol import SchemaType


@dataclass(frozen=True, slots=True)
class Param:
    """Per-parameter metadata, attached with ``typing.Annotated``.

    Example:
        def greet(name: Annotated[str, Param("Who to greet")]) -> str: ...
    """

    description: str
    required: bool = True


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """One formal parameter of a capability callable."""

    name: str
    schema_type: SchemaType
    annotation: Any
    description: str
    required: bool = True
    has_default: bool = False
    default: Any = None
    keyword_only: bool = False


def _strip_annotated(tp: Any) -> Any:
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Return ``(inner_type, nullable)`` for ``Annotated``/``Optional`` wrappers.

    Unions with more than one non-None member are returned unchanged.
    """
    tp = _strip_annotated(tp)
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(tp) if arg is not type(None)]
        nullable = len(members) < len(get_args(tp))
        if len(members) == 1:
            inner, _ = unwrap_optional(members[0])
            return inner, nullable
        return tp, nullable
    return tp, False


def _safe_issubclass(candidate: Any, parent: type | tuple[type, ...]) -> bool:
    try:
        return isinstance(candidate, type) and issubclass(candidate, parent)
    except TypeError:
        return False


def infer_type(native_type: Any) -> SchemaType:
    """Map a native annotation to its JSON-Schema type.

    Precedence: optional wrappers are unwrapped, then string, integer,
    number, boolean, array; everything else is ``object``.
    """
    tp, _ = unwrap_optional(native_type)
    base = get_origin(tp) or tp

    if _safe_issubclass(base, str):
        return SchemaType.STRING
    # bool subclasses int
    if _safe_issubclass(base, bool):
        return SchemaType.BOOLEAN
    if _safe_issubclass(base, int):
        return SchemaType.INTEGER
    if _safe_issubclass(base, (float, Decimal)):
        return SchemaType.NUMBER
    if _safe_issubclass(base, (Sequence, AbstractSet)):
        return SchemaType.ARRAY
    return SchemaType.OBJECT


def _resolve_hints(func: Callable[..., Any]) -> dict[str, Any]:
    try:
        return typing.get_type_hints(func, include_extras=True)
    except Exception:
        # Forward references that cannot be resolved fall back to raw annotations.
        return {}


def _param_metadata(annotation: Any) -> Param | None:
    if get_origin(annotation) is not Annotated:
        return None
    for extra in get_args(annotation)[1:]:
        if isinstance(extra, Param):
            return extra
    return None


def build_parameter_specs(func: Callable[..., Any]) -> tuple[ParameterSpec, ...]:
    """Derive ``ParameterSpec`` records from a callable's signature."""
    signature = inspect.signature(func)
    hints = _resolve_hints(func)
    specs: list[ParameterSpec] = []

    for name, param in signature.parameters.items():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        annotation = hints.get(name, param.annotation)
        if annotation is inspect.Parameter.empty:
            annotation = Any
        metadata = _param_metadata(annotation)
        has_default = param.default is not inspect.Parameter.empty

        specs.append(
            ParameterSpec(
                name=name,
                schema_type=infer_type(annotation),
                annotation=_strip_annotated(annotation),
                description=metadata.description if metadata else name,
                required=metadata.required if metadata else True,
                has_default=has_default,
                default=param.default if has_default else None,
                keyword_only=param.kind is inspect.Parameter.KEYWORD_ONLY,
            )
        )

    return tuple(specs)


__all__ = [
    "Param",
    "ParameterSpec",
    "build_parameter_specs",
    "infer_type",
    "unwrap_optional",
]
