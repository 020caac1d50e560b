"""Command-line interface for mcpcore.

Components are loaded from a ``module:attribute`` reference that resolves
to a ComponentRegistry, or to a zero-argument callable returning one.

Example:
    >>> # From terminal:
    >>> # mcpcore --version
    >>> # mcpcore serve --components myapp.mcp:registry
    >>> # mcpcore serve --components myapp.mcp:build_registry --transport http --port 8080
    >>> # mcpcore list --components myapp.mcp:registry --type tool
"""

import importlib
from enum import Enum
from typing import Annotated, Optional

import typer
import uvicorn
from pydantic import ValidationError

from mcpcore import __version__
from mcpcore.config import ServerConfig
from mcpcore.dispatcher import Dispatcher
from mcpcore.handlers.base import encode_json
from mcpcore.jsonrpc import JsonRpcHandler
from mcpcore.observability import configure_logging, get_logger
from mcpcore.registry import ComponentRegistry, ComponentType
from mcpcore.transport import create_app, run_stdio

app = typer.Typer(help="MCP server toolkit CLI.")

logger = get_logger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


class Transport(str, Enum):
    STDIO = "stdio"
    HTTP = "http"


def _version_callback(value: bool) -> None:
    """Print the version and exit when requested."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


VERSION_OPTION = typer.Option(
    False,
    "--version",
    help="Show mcpcore version and exit.",
    callback=_version_callback,
    is_eager=True,
)

COMPONENTS_OPTION = typer.Option(
    ...,
    "--components",
    "-c",
    help="Component registry as module:attribute (registry or factory).",
)


def load_registry(reference: str) -> ComponentRegistry:
    """Resolve ``module:attribute`` to a ComponentRegistry.

    Raises:
        typer.BadParameter: If the reference cannot be imported or does not
            yield a registry.
    """
    module_name, separator, attribute = reference.partition(":")
    if not separator or not module_name or not attribute:
        raise typer.BadParameter(f"Expected module:attribute, got {reference!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise typer.BadParameter(f"Cannot import module {module_name!r}: {exc}") from exc

    target = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise typer.BadParameter(f"{module_name!r} has no attribute {attribute!r}") from exc

    if not isinstance(target, ComponentRegistry) and callable(target):
        target = target()
    if not isinstance(target, ComponentRegistry):
        raise typer.BadParameter(
            f"{reference!r} is not a ComponentRegistry (got {type(target).__name__})"
        )
    return target


@app.callback()
def cli(version: bool = VERSION_OPTION) -> None:
    """mcpcore CLI entrypoint."""


@app.command("serve")
def serve(
    components: str = COMPONENTS_OPTION,
    transport: Annotated[
        Transport, typer.Option("--transport", "-t", help="Transport to serve on.")
    ] = Transport.STDIO,
    host: Annotated[str, typer.Option("--host", help="HTTP bind address.")] = DEFAULT_HOST,
    port: Annotated[int, typer.Option("--port", "-p", help="HTTP port.")] = DEFAULT_PORT,
    name: Annotated[
        Optional[str], typer.Option("--name", help="Server name reported to clients.")
    ] = None,
    debug: Annotated[
        bool, typer.Option("--debug", help="Verbose logs and exception details in errors.")
    ] = False,
) -> None:
    """Serve the registered components over stdio or HTTP."""
    overrides: dict[str, object] = {}
    if name:
        overrides["name"] = name
    if debug:
        overrides["debug"] = True
    try:
        config = ServerConfig.from_env(**overrides)
    except (ValueError, ValidationError) as exc:
        raise typer.BadParameter(f"Invalid configuration: {exc}") from exc

    configure_logging(log_level="DEBUG" if config.debug else None, force=True)
    registry = load_registry(components)
    handler = JsonRpcHandler(Dispatcher(registry, config))
    logger.info(
        "mcp.server.starting",
        transport=transport.value,
        server=config.name,
        tools=registry.count(ComponentType.TOOL),
        resources=registry.count(ComponentType.RESOURCE),
        prompts=registry.count(ComponentType.PROMPT),
    )

    if transport is Transport.HTTP:
        uvicorn.run(
            create_app(handler),
            host=host,
            port=port,
            log_level="debug" if config.debug else "info",
        )
    else:
        run_stdio(handler)


@app.command("list")
def list_components(
    components: str = COMPONENTS_OPTION,
    component_type: Annotated[
        Optional[ComponentType],
        typer.Option("--type", help="Only list this component type."),
    ] = None,
) -> None:
    """Print tool, resource and prompt definitions as JSON."""
    registry = load_registry(components)
    dispatcher = Dispatcher(registry)
    builders = {
        ComponentType.TOOL: ("tools", dispatcher.tool_handler),
        ComponentType.RESOURCE: ("resources", dispatcher.resource_handler),
        ComponentType.PROMPT: ("prompts", dispatcher.prompt_handler),
    }
    selected = [component_type] if component_type is not None else list(ComponentType)
    output: dict[str, list[dict[str, object]]] = {}
    for ctype in selected:
        key, handler = builders[ctype]
        output[key] = [
            handler.build_definition(entry_name, entry)
            for entry_name, entry in registry.all(ctype).items()
        ]
    typer.echo(encode_json(output, pretty=True))


def main() -> None:
    """Run the mcpcore CLI."""
    app()


if __name__ == "__main__":
    main()
