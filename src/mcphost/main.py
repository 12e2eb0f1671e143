from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import typer
from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import __version__
from .capabilities.registry import CapabilityRegistry
from .core.config import CONFIG_ENV_VAR, ConfigLoadResult, ServerConfig, load_config
from .core.console import console, setup_logging
from .mcp.server import McpServerHost

app = typer.Typer(help="mcphost: serve decorated Python capabilities over MCP stdio.")

@dataclass
class AppState:
    config: ServerConfig
    config_meta: ConfigLoadResult
    logger: logging.Logger


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to an mcphost config file (TOML or JSON)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    loaded_config, meta = load_config(config_path=config)
    app_logger = setup_logging(level=loaded_config.log_level, verbose=verbose)
    ctx.obj = AppState(config=loaded_config, config_meta=meta, logger=app_logger)

    if meta.error:
        # Safe mode: defaults are in effect. Report on stderr only, stdout may be the protocol channel.
        app_logger.warning("Configuration error in %s, using defaults: %s", meta.path, meta.error)
    else:
        app_logger.debug(
            "Loaded configuration from %s (env overrides: %s)",
            meta.path,
            sorted(meta.env_overrides),
        )


def _discover(modules: list[str]) -> CapabilityRegistry:
    try:
        return CapabilityRegistry.discover(*modules)
    except ImportError as exc:
        console.print(f"[red]Cannot import capability module: {exc}[/red]")
        raise typer.Exit(code=1)


@app.command("serve")
def serve(
    ctx: typer.Context,
    modules: list[str] = typer.Argument(..., help="Modules or packages to scan for capabilities."),
    name: str | None = typer.Option(None, "--name", help="Server name advertised to clients."),
    server_version: str | None = typer.Option(
        None, "--server-version", help="Server version advertised to clients."
    ),
    protocol_version: str | None = typer.Option(
        None, "--protocol-version", help="MCP protocol version to advertise."
    ),
) -> None:
    """Serve capabilities as newline-delimited JSON-RPC on stdin/stdout."""
    state: AppState = ctx.obj
    overrides = {
        key: value
        for key, value in {
            "server_name": name,
            "server_version": server_version,
            "protocol_version": protocol_version,
        }.items()
        if value is not None
    }
    config = state.config.model_copy(update=overrides)
    host = McpServerHost(registry=_discover(modules), config=config)
    try:
        host.run()
    except KeyboardInterrupt:
        state.logger.info("Interrupted; shutting down")
        raise typer.Exit(code=130)


@app.command("list")
def list_capabilities(
    modules: list[str] = typer.Argument(..., help="Modules or packages to scan for capabilities."),
) -> None:
    """Show the capabilities discovered in the given modules."""
    registry = _discover(modules)
    if not len(registry):
        console.print(Panel("No capabilities found.", style="yellow"))
        return

    table = Table(title="Capabilities", box=box.SIMPLE_HEAVY, expand=True)
    table.add_column("Kind", style="magenta", no_wrap=True)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Parameters", style="green")
    table.add_column("Description", style="white")

    for descriptor in registry:
        params = ", ".join(
            f"{spec.name}: {spec.schema_type.value}{'' if spec.required else '?'}"
            for spec in descriptor.parameters
        )
        table.add_row(descriptor.kind.label, descriptor.key, params or "-", descriptor.description)

    console.print(table)


@app.command("config")
def show_config(ctx: typer.Context) -> None:
    """Show the effective server settings and which source supplied each."""
    state: AppState = ctx.obj
    meta = state.config_meta
    # After a load error every value is a default, whatever the environment held.
    from_env = set() if meta.error else meta.env_overrides
    from_file = state.config.model_fields_set - from_env

    table = Table(title="Server settings", box=box.SIMPLE, expand=True)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white", no_wrap=True)
    table.add_column("Source", style="magenta", no_wrap=True)
    table.add_column("Meaning", style="dim")

    for name, info in ServerConfig.model_fields.items():
        if name in from_env:
            source = "env"
        elif name in from_file:
            source = "file"
        else:
            source = "default"
        table.add_row(name, str(getattr(state.config, name)), source, info.description or "")

    console.print(table)

    if meta.error:
        console.print(Panel(Text(meta.error), title="Config error: defaults in use", style="red"))
    elif meta.file_loaded:
        console.print(f"Loaded {meta.path}")
    else:
        console.print(f"No config file at {meta.path}; set {CONFIG_ENV_VAR} or pass --config.")


@app.command("version")
def show_version() -> None:
    """Print the mcphost version."""
    console.print(__version__)


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
