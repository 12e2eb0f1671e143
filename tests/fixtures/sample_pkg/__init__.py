from __future__ import annotations

from mcphost import tool


@tool(description="Defined in the package root")
def root_tool() -> str:
    return "root"
