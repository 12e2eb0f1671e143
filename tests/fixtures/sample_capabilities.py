"""Capabilities used across the test suite."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from mcphost import Param, prompt, resource, resource_template, tool

CALLS: list[str] = []


@tool(description="Greets someone")
def greet(name: Annotated[str, Param("Who to greet")]) -> str:
    CALLS.append("greet")
    return f"Hello, {name}!"


@tool
def add(a: int, b: int = 2) -> int:
    """Add two integers.

    The second operand defaults to two.
    """
    return a + b


@tool(description="Apply a factor to a price")
def scale(price: Decimal, factor: float, *, round_up: bool = False) -> str:
    result = price * Decimal(str(factor))
    if round_up:
        result = result.to_integral_value(rounding="ROUND_CEILING")
    return str(result)


@tool(description="Join words")
def join(
    words: list[str],
    separator: Annotated[str | None, Param("Joiner", required=False)] = None,
) -> str:
    return (separator or " ").join(words)


@tool(description="Always fails")
def explode() -> str:
    raise ValueError("kaboom")


@tool(name="wrapped-failure", description="Fails with a chained cause")
def wrapped_failure() -> str:
    try:
        raise ValueError("inner cause")
    except ValueError as exc:
        raise RuntimeError("outer wrapper") from exc


@tool(description="Echo text asynchronously")
async def async_echo(text: str) -> str:
    return text.upper()


@resource(
    "config://app",
    name="App config",
    description="Application settings",
    mime_type="application/json",
)
def app_config() -> dict[str, object]:
    return {"debug": False, "workers": 4}


@resource("memo://readme", description="Plain readme")
def readme() -> str:
    return "read me"


@resource("memo://broken", description="Unavailable memo")
def broken_resource() -> str:
    raise OSError("disk unavailable")


@resource_template("file:///{path}", name="Project file", description="Files by path")
def project_file(path: str) -> str:
    return path


@prompt(description="Review code")
def code_review(
    code: Annotated[str, Param("Code to review")],
    language: Annotated[str, Param("Language of the snippet", required=False)] = "python",
) -> str:
    return f"Review this {language} code:\n{code}"


@prompt(description="Summarize a topic")
def summarize(topic: str, context: str) -> str:
    suffix = f" using {context}" if context else ""
    return f"Summarize {topic}{suffix}"


@prompt(description="Broken template")
def failing_prompt() -> str:
    raise RuntimeError("template missing")


class MathTools:
    @staticmethod
    @tool(description="Multiply two numbers")
    def multiply(x: float, y: float) -> float:
        return x * y

    def not_a_capability(self) -> None:
        return None
