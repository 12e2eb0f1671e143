"""Capabilities package - declarative registration, discovery, and invocation.

This package provides a single source of truth for capability metadata,
schema inference, and argument binding across the dispatcher and the CLI.
"""

from __future__ import annotations

from mcphost.capabilities.decorators import prompt, resource, resource_template, tool
from mcphost.capabilities.invoker import bind_arguments, call_capability, coerce_value, invoke
from mcphost.capabilities.registry import (
    CAPABILITY_METADATA_ATTR,
    CapabilityDescriptor,
    CapabilityKind,
    CapabilityRegistry,
    discover,
    get_capability_descriptor,
    is_capability,
)
from mcphost.capabilities.schema import Param, ParameterSpec, infer_type

__all__ = [
    "CAPABILITY_METADATA_ATTR",
    "CapabilityDescriptor",
    "CapabilityKind",
    "CapabilityRegistry",
    "Param",
    "ParameterSpec",
    "bind_arguments",
    "call_capability",
    "coerce_value",
    "discover",
    "get_capability_descriptor",
    "infer_type",
    "invoke",
    "is_capability",
    "prompt",
    "resource",
    "resource_template",
    "tool",
]
