from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
FIXTURES = ROOT / "tests" / "fixtures"
for _path in (SRC, FIXTURES):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))


@pytest.fixture
def registry() -> Any:
    """Registry built from the shared sample capabilities module."""
    from mcphost.capabilities.registry import CapabilityRegistry

    return CapabilityRegistry.discover("sample_capabilities")


@pytest.fixture(autouse=True)
def isolate_config(tmp_path: Path, monkeypatch: Any) -> Path:
    """Point config to a temp path so tests don't touch user state."""
    cfg_path = tmp_path / "config.toml"
    monkeypatch.setenv("MCPHOST_CONFIG", str(cfg_path))
    for field in ("SERVER_NAME", "SERVER_VERSION", "PROTOCOL_VERSION", "LOG_LEVEL"):
        monkeypatch.delenv(f"MCPHOST_{field}", raising=False)
    return cfg_path


@pytest.fixture(autouse=True)
def capture_console(monkeypatch: Any) -> Console:
    """Use an in-memory Rich console during tests."""
    test_console = Console(record=True)
    import mcphost.core.console as core_console
    import mcphost.main as mcphost_main

    monkeypatch.setattr(core_console, "console", test_console)
    monkeypatch.setattr(mcphost_main, "console", test_console)
    return test_console


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Undo setup_logging() so caplog sees mcphost records in every test."""
    yield
    app_logger = logging.getLogger("mcphost")
    app_logger.handlers.clear()
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True
