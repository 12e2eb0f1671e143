from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Annotated, Any, Optional

import pytest

from mcphost.capabilities.schema import (
    Param,
    build_parameter_specs,
    infer_type,
    unwrap_optional,
)
from mcphost.core.protocol import SchemaType


class Color(str):
    pass


class Point:
    pass


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (str, SchemaType.STRING),
        (Color, SchemaType.STRING),
        (int, SchemaType.INTEGER),
        (bool, SchemaType.BOOLEAN),
        (float, SchemaType.NUMBER),
        (Decimal, SchemaType.NUMBER),
        (list[int], SchemaType.ARRAY),
        (tuple[str, ...], SchemaType.ARRAY),
        (set[str], SchemaType.ARRAY),
        (Sequence[float], SchemaType.ARRAY),
        (dict[str, Any], SchemaType.OBJECT),
        (Point, SchemaType.OBJECT),
        (Any, SchemaType.OBJECT),
    ],
)
def test_infer_type_maps_native_types(annotation: Any, expected: SchemaType) -> None:
    assert infer_type(annotation) is expected


def test_infer_type_unwraps_optional_and_annotated() -> None:
    assert infer_type(Optional[int]) is SchemaType.INTEGER
    assert infer_type(bool | None) is SchemaType.BOOLEAN
    assert infer_type(Annotated[float | None, Param("x")]) is SchemaType.NUMBER


def test_infer_type_treats_wide_unions_as_object() -> None:
    assert infer_type(int | str) is SchemaType.OBJECT


def test_unwrap_optional_reports_nullability() -> None:
    assert unwrap_optional(int | None) == (int, True)
    assert unwrap_optional(Annotated[str, Param("s")]) == (str, False)
    inner, nullable = unwrap_optional(int | str | None)
    assert nullable is True
    assert inner == int | str | None


def test_build_parameter_specs_reads_param_metadata() -> None:
    def sample(
        name: Annotated[str, Param("Who to greet")],
        count: int = 3,
        *args: Any,
        loud: Annotated[bool, Param("Shout it", required=False)] = False,
        **kwargs: Any,
    ) -> str:
        return name

    specs = build_parameter_specs(sample)

    assert [spec.name for spec in specs] == ["name", "count", "loud"]
    name, count, loud = specs
    assert name.description == "Who to greet"
    assert name.required is True
    assert name.has_default is False
    assert name.annotation is str
    assert count.schema_type is SchemaType.INTEGER
    assert count.description == "count"
    # No metadata means required, even with a default.
    assert count.required is True
    assert count.has_default is True
    assert count.default == 3
    assert loud.required is False
    assert loud.keyword_only is True


def test_build_parameter_specs_treats_missing_annotations_as_object() -> None:
    def untyped(value):  # type: ignore[no-untyped-def]
        return value

    (spec,) = build_parameter_specs(untyped)
    assert spec.schema_type is SchemaType.OBJECT
    assert spec.annotation is Any


def test_build_parameter_specs_resolves_string_annotations() -> None:
    # This module uses postponed annotations, so hints arrive as strings.
    def priced(amount: Decimal) -> None:
        return None

    (spec,) = build_parameter_specs(priced)
    assert spec.annotation is Decimal
    assert spec.schema_type is SchemaType.NUMBER
