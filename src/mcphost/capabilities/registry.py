"""Unified capability registry and discovery.

This module is the single source of truth for:
- Capability metadata storage and retrieval
- Capability discovery from modules and packages
- The four name-keyed indexes (tools, resources, resource templates, prompts)
- Projection of descriptors into their ``*/list`` wire shapes

Usage:
    from mcphost.capabilities.registry import CapabilityKind, CapabilityRegistry

    registry = CapabilityRegistry.discover("myapp.capabilities")
    greet = registry.get(CapabilityKind.TOOL, "greet")
    definitions = registry.get_definitions(CapabilityKind.TOOL)
"""

from __future__ import annotations

import inspect
import pkgutil
import warnings
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from importlib import import_module
from types import MappingProxyType, ModuleType
from typing import Any, TypeGuard

from mcphost.capabilities.schema import ParameterSpec
from mcphost.core.console import get_logger
from mcphost.core.protocol import (
    DEFAULT_MIME_TYPE,
    InputSchema,
    PromptArgument,
    PromptDefinition,
    PropertySchema,
    ResourceDefinition,
    ResourceTemplateDefinition,
    ToolDefinition,
    WireModel,
)

logger = get_logger("registry")

# Single source of truth for the capability metadata attribute name
CAPABILITY_METADATA_ATTR = "__mcp_capability__"


class CapabilityKind(str, Enum):
    """Which index a capability lives in and which invocation contract applies."""

    TOOL = "tool"
    RESOURCE = "resource"
    RESOURCE_TEMPLATE = "resource_template"
    PROMPT = "prompt"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


@dataclass(frozen=True, slots=True)
class CapabilityDescriptor:
    """Identity and metadata for one discovered capability."""

    kind: CapabilityKind
    key: str
    display_name: str
    description: str
    func: Callable[..., Any]
    parameters: tuple[ParameterSpec, ...] = ()
    mime_type: str | None = None

    @property
    def qualified_name(self) -> str:
        module = getattr(self.func, "__module__", "?")
        return f"{module}.{getattr(self.func, '__qualname__', self.key)}"


CapabilityIndex = dict[str, CapabilityDescriptor]


# ---------------------------------------------------------------------------
# Capability Detection and Metadata
# ---------------------------------------------------------------------------


def get_capability_descriptor(obj: object) -> CapabilityDescriptor | None:
    """Return the descriptor attached by a capability decorator, if any."""
    if isinstance(obj, staticmethod):
        obj = obj.__func__
    if not callable(obj):
        return None
    descriptor = getattr(obj, CAPABILITY_METADATA_ATTR, None)
    return descriptor if isinstance(descriptor, CapabilityDescriptor) else None


def is_capability(obj: Any) -> TypeGuard[Callable[..., Any]]:
    """Check if an object carries a capability marker."""
    return get_capability_descriptor(obj) is not None


# ---------------------------------------------------------------------------
# Module Discovery
# ---------------------------------------------------------------------------


def discover_module_names(package_name: str) -> list[str]:
    """Discover public submodule names of a package using pkgutil.

    Handles zipapp/frozen scenarios where ``__path__`` may be missing.

    Returns:
        Sorted list of fully qualified module names, excluding the package itself.
    """
    try:
        package = import_module(package_name)
    except ImportError as exc:
        warnings.warn(
            f"Failed to import {package_name}: {exc}. Capability discovery disabled.",
            RuntimeWarning,
            stacklevel=2,
        )
        return []

    package_path = getattr(package, "__path__", None)
    if package_path is None:
        return []

    try:
        path_list = list(package_path)
    except TypeError:
        warnings.warn(
            f"Package {package_name}.__path__ is not iterable.",
            RuntimeWarning,
            stacklevel=2,
        )
        return []

    modules: list[str] = []
    for module_info in pkgutil.iter_modules(path_list, prefix=f"{package_name}."):
        if module_info.name.rsplit(".", 1)[-1].startswith("_"):
            continue
        modules.append(module_info.name)
        if module_info.ispkg:
            modules.extend(discover_module_names(module_info.name))

    return sorted(modules)


def _resolve_modules(code_unit: ModuleType | str) -> list[ModuleType]:
    module = import_module(code_unit) if isinstance(code_unit, str) else code_unit
    modules = [module]
    if getattr(module, "__path__", None) is not None:
        for name in discover_module_names(module.__name__):
            try:
                modules.append(import_module(name))
            except ImportError as exc:
                warnings.warn(
                    f"Failed to import capability module {name}: {exc}",
                    RuntimeWarning,
                    stacklevel=3,
                )
    return modules


def iter_module_capabilities(module: ModuleType) -> Iterator[CapabilityDescriptor]:
    """Yield descriptors reachable from a module, in definition order.

    Module-level functions are checked directly; classes defined in the module
    contribute their static methods.
    """
    for obj in list(vars(module).values()):
        descriptor = get_capability_descriptor(obj)
        if descriptor is not None:
            yield descriptor
            continue
        if inspect.isclass(obj) and obj.__module__ == module.__name__:
            for member in vars(obj).values():
                if not isinstance(member, staticmethod):
                    continue
                member_descriptor = get_capability_descriptor(member)
                if member_descriptor is not None:
                    yield member_descriptor


def _empty_indexes() -> dict[CapabilityKind, CapabilityIndex]:
    return {kind: {} for kind in CapabilityKind}


def _index_descriptors(
    descriptors: Iterable[CapabilityDescriptor],
) -> dict[CapabilityKind, CapabilityIndex]:
    indexes = _empty_indexes()
    for descriptor in descriptors:
        index = indexes[descriptor.kind]
        previous = index.get(descriptor.key)
        if previous is not None and previous.func is not descriptor.func:
            warnings.warn(
                f"Duplicate {descriptor.kind.value} '{descriptor.key}' in "
                f"{descriptor.qualified_name}; previous registration from "
                f"{previous.qualified_name} will be overwritten.",
                RuntimeWarning,
                stacklevel=3,
            )
        index[descriptor.key] = descriptor
    return indexes


def discover(*code_units: ModuleType | str) -> dict[CapabilityKind, CapabilityIndex]:
    """Scan modules (and packages, recursively) for decorated capabilities.

    Args:
        code_units: Module objects or importable dotted names.

    Returns:
        One index per CapabilityKind mapping key -> descriptor. For duplicate
        keys within a kind the last discovered descriptor wins.
    """
    descriptors: list[CapabilityDescriptor] = []
    for code_unit in code_units:
        for module in _resolve_modules(code_unit):
            descriptors.extend(iter_module_capabilities(module))
    return _index_descriptors(descriptors)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class CapabilityRegistry:
    """Read-only indexes of discovered capabilities.

    Built once; capabilities decorated after construction are not visible.
    """

    def __init__(self, indexes: Mapping[CapabilityKind, CapabilityIndex] | None = None) -> None:
        source = indexes or {}
        self._indexes: dict[CapabilityKind, CapabilityIndex] = {
            kind: dict(source.get(kind, {})) for kind in CapabilityKind
        }

    @classmethod
    def discover(cls, *code_units: ModuleType | str) -> CapabilityRegistry:
        registry = cls(discover(*code_units))
        logger.info(
            "Discovered %d tools, %d resources, %d resource templates, %d prompts",
            len(registry.tools),
            len(registry.resources),
            len(registry.resource_templates),
            len(registry.prompts),
        )
        return registry

    @classmethod
    def from_descriptors(cls, descriptors: Iterable[CapabilityDescriptor]) -> CapabilityRegistry:
        """Build a registry from an explicit descriptor table."""
        return cls(_index_descriptors(descriptors))

    def index(self, kind: CapabilityKind) -> Mapping[str, CapabilityDescriptor]:
        return MappingProxyType(self._indexes[kind])

    @property
    def tools(self) -> Mapping[str, CapabilityDescriptor]:
        return self.index(CapabilityKind.TOOL)

    @property
    def resources(self) -> Mapping[str, CapabilityDescriptor]:
        return self.index(CapabilityKind.RESOURCE)

    @property
    def resource_templates(self) -> Mapping[str, CapabilityDescriptor]:
        return self.index(CapabilityKind.RESOURCE_TEMPLATE)

    @property
    def prompts(self) -> Mapping[str, CapabilityDescriptor]:
        return self.index(CapabilityKind.PROMPT)

    def get(self, kind: CapabilityKind, key: str) -> CapabilityDescriptor | None:
        return self._indexes[kind].get(key)

    def get_definitions(self, kind: CapabilityKind) -> list[dict[str, Any]]:
        """Project every descriptor of ``kind`` into its wire shape, in insertion order."""
        return [to_definition(descriptor).to_wire() for descriptor in self._indexes[kind].values()]

    def __iter__(self) -> Iterator[CapabilityDescriptor]:
        for kind in CapabilityKind:
            yield from self._indexes[kind].values()

    def __len__(self) -> int:
        return sum(len(index) for index in self._indexes.values())

    def __repr__(self) -> str:
        return (
            f"CapabilityRegistry(tools={len(self.tools)}, "
            f"resources={len(self.resources)}, "
            f"resource_templates={len(self.resource_templates)}, "
            f"prompts={len(self.prompts)})"
        )


# ---------------------------------------------------------------------------
# Wire projection
# ---------------------------------------------------------------------------


def _tool_definition(descriptor: CapabilityDescriptor) -> ToolDefinition:
    properties = {
        spec.name: PropertySchema(type=spec.schema_type, description=spec.description)
        for spec in descriptor.parameters
    }
    required = [spec.name for spec in descriptor.parameters if spec.required]
    return ToolDefinition(
        name=descriptor.key,
        description=descriptor.description,
        input_schema=InputSchema(properties=properties, required=required),
    )


def _prompt_definition(descriptor: CapabilityDescriptor) -> PromptDefinition:
    return PromptDefinition(
        name=descriptor.key,
        description=descriptor.description,
        arguments=[
            PromptArgument(name=spec.name, description=spec.description, required=spec.required)
            for spec in descriptor.parameters
        ],
    )


def to_definition(descriptor: CapabilityDescriptor) -> WireModel:
    """Build the ``*/list`` entry for one descriptor."""
    mime_type = descriptor.mime_type or DEFAULT_MIME_TYPE
    if descriptor.kind is CapabilityKind.TOOL:
        return _tool_definition(descriptor)
    if descriptor.kind is CapabilityKind.RESOURCE:
        return ResourceDefinition(
            uri=descriptor.key,
            name=descriptor.display_name,
            description=descriptor.description,
            mime_type=mime_type,
        )
    if descriptor.kind is CapabilityKind.RESOURCE_TEMPLATE:
        return ResourceTemplateDefinition(
            uri_template=descriptor.key,
            name=descriptor.display_name,
            description=descriptor.description,
            mime_type=mime_type,
        )
    return _prompt_definition(descriptor)


__all__ = [
    "CAPABILITY_METADATA_ATTR",
    "CapabilityDescriptor",
    "CapabilityIndex",
    "CapabilityKind",
    "CapabilityRegistry",
    "discover",
    "discover_module_names",
    "get_capability_descriptor",
    "is_capability",
    "iter_module_capabilities",
    "to_definition",
]
