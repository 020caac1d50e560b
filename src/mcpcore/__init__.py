"""mcpcore: Model Context Protocol request dispatch core.

Expose tools, resources and prompts to MCP clients over JSON-RPC 2.0.

Example:
    >>> from mcpcore import ComponentRegistry, JsonRpcHandler
    >>>
    >>> registry = ComponentRegistry()
    >>> registry.register_tool("echo", lambda arguments: arguments.get("message", ""))
    >>> handler = JsonRpcHandler.for_registry(registry)
    >>> handler.process_request(
    ...     '{"jsonrpc":"2.0","method":"tools/call","params":{"name":"echo","arguments":{"message":"hi"}},"id":1}'
    ... )
    '{"jsonrpc":"2.0","result":{"content":[{"type":"text","text":"hi"}],"isError":false},"id":1}'
"""

__version__ = "0.1.0"

from mcpcore.components import (  # noqa: E402
    LegacyPromptAdapter,
    LegacyResourceAdapter,
    LegacyToolAdapter,
    McpPrompt,
    McpResource,
    McpTool,
    as_prompt,
    as_resource,
    as_tool,
)
from mcpcore.config import CapabilityFlags, ServerConfig  # noqa: E402
from mcpcore.dispatcher import Dispatcher  # noqa: E402
from mcpcore.errors import (  # noqa: E402
    ComponentNotInvocableError,
    InvalidCursorError,
    MCPError,
    ProtocolException,
    RegistrationError,
)
from mcpcore.jsonrpc import JsonRpcHandler  # noqa: E402
from mcpcore.registry import ComponentEntry, ComponentRegistry, ComponentType  # noqa: E402

__all__ = [
    "CapabilityFlags",
    "ComponentEntry",
    "ComponentNotInvocableError",
    "ComponentRegistry",
    "ComponentType",
    "Dispatcher",
    "InvalidCursorError",
    "JsonRpcHandler",
    "LegacyPromptAdapter",
    "LegacyResourceAdapter",
    "LegacyToolAdapter",
    "MCPError",
    "McpPrompt",
    "McpResource",
    "McpTool",
    "ProtocolException",
    "RegistrationError",
    "ServerConfig",
    "__version__",
    "as_prompt",
    "as_resource",
    "as_tool",
]
