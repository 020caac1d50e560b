"""Method routing for MCP requests.

The Dispatcher owns the three component handlers and the connection-level
methods (initialize, ping, completion/complete, logging/setLevel). Family
methods are routed by prefix:

    tools/*      -> ToolHandler
    resources/*  -> ResourceHandler
    prompts/*    -> PromptHandler

A family switched off in the server configuration answers -32601, exactly
like an unknown method.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from mcpcore.capabilities import CapabilityNegotiator
from mcpcore.components import McpPrompt, McpResource, as_prompt
from mcpcore.config import ServerConfig
from mcpcore.errors import ProtocolException
from mcpcore.handlers import BaseHandler, PromptHandler, ResourceHandler, ToolHandler
from mcpcore.observability import get_logger, is_debug_mode, sanitize_for_logging
from mcpcore.protocol import (
    MAX_COMPLETION_VALUES,
    CompleteResult,
    CompletionArgument,
    CompletionReference,
    CompletionValues,
    InitializeRequestParams,
    InitializeResult,
    is_supported_protocol_version,
)
from mcpcore.registry import ComponentRegistry, ComponentType

logger = get_logger(__name__)

# MCP log levels (RFC 5424 names) mapped to stdlib logging levels
LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "alert": logging.CRITICAL,
    "emergency": logging.CRITICAL,
}

# Root of the library's logger hierarchy; logging/setLevel adjusts it
LIBRARY_LOGGER = "mcpcore"


def _validation_messages(error: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in err['loc']) or 'params'}: {err['msg']}"
        for err in error.errors()
    ]


class Dispatcher:
    """Route MCP methods to their handlers.

    Attributes:
        registry: Component registry shared by the handlers
        config: Server configuration
        negotiator: Capability negotiator used by initialize
        debug: Debug mode, from the config or MCPCORE_DEBUG; shared with the handlers
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        config: ServerConfig | None = None,
        negotiator: CapabilityNegotiator | None = None,
    ) -> None:
        self.registry = registry
        self.config = config or ServerConfig()
        self.negotiator = negotiator or CapabilityNegotiator()
        self.debug = self.config.debug or is_debug_mode()

        handler_options = {"debug": self.debug, "page_size": self.config.page_size}
        self.tool_handler = ToolHandler(registry, **handler_options)
        self.resource_handler = ResourceHandler(registry, **handler_options)
        self.prompt_handler = PromptHandler(registry, **handler_options)

        flags = self.config.capabilities
        self._families: dict[str, tuple[bool, BaseHandler]] = {
            "tools": (flags.tools, self.tool_handler),
            "resources": (flags.resources, self.resource_handler),
            "prompts": (flags.prompts, self.prompt_handler),
        }

    def dispatch(self, method: str, params: dict[str, Any], request_id: Any = None) -> Any:
        """Run ``method`` and return its result.

        Raises:
            ProtocolException: For unknown or disabled methods and invalid
                params; anything else escaping a handler is unexpected.
        """
        flags = self.config.capabilities
        if method == "initialize":
            return self.initialize(params)
        if method == "ping":
            return {}
        if method == "completion/complete" and flags.completion:
            return self.complete(params)
        if method == "logging/setLevel" and flags.logging:
            return self.set_level(params)

        prefix, separator, _ = method.partition("/")
        family = self._families.get(prefix) if separator else None
        if family is not None and family[0]:
            handler = family[1]
            return handler.handle(method, params, {"request_id": request_id})

        raise ProtocolException.method_not_found(f"Method not found: {method}", method=method)

    def handle_notification(self, method: str, params: dict[str, Any]) -> None:
        """Acknowledge a notification; notifications never produce a response."""
        if method == "notifications/initialized":
            logger.info("mcp.client.initialized")
        elif method == "notifications/cancelled":
            logger.info(
                "mcp.request.cancelled",
                request_id=params.get("requestId"),
                reason=params.get("reason"),
            )
        else:
            logger.debug(
                "mcp.notification.received",
                method=method,
                params=sanitize_for_logging(params),
            )

    def initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        """Answer the initialize handshake with negotiated capabilities."""
        try:
            request = InitializeRequestParams.model_validate(params)
        except ValidationError as e:
            raise ProtocolException.invalid_params(
                "Invalid parameters: " + ", ".join(_validation_messages(e)),
                method="initialize",
            ) from e

        requested = request.protocol_version
        version = requested if is_supported_protocol_version(requested) else self.config.protocol_version
        capabilities = self.negotiator.negotiate(
            self.config.server_capabilities(), request.capabilities
        )
        logger.info(
            "mcp.initialize",
            requested_version=requested,
            protocol_version=version,
            client=request.client_info.name if request.client_info else None,
            capabilities=sorted(capabilities),
        )
        result = InitializeResult(
            protocol_version=version,
            capabilities=capabilities,
            server_info=self.config.server_info(),
            instructions=self.config.instructions,
        )
        return result.model_dump(by_alias=True, exclude_none=True)

    def complete(self, params: dict[str, Any]) -> dict[str, Any]:
        """completion/complete: argument suggestions from a prompt or resource."""
        ref = params.get("ref")
        if isinstance(ref, dict) and ref.get("type") not in ("ref/prompt", "ref/resource"):
            raise ProtocolException.invalid_params(
                f"Unknown reference type: {ref.get('type')}", method="completion/complete"
            )
        try:
            reference = CompletionReference.model_validate(ref)
            argument = CompletionArgument.model_validate(params.get("argument"))
        except ValidationError as e:
            raise ProtocolException.invalid_params(
                "Invalid parameters: " + ", ".join(_validation_messages(e)),
                method="completion/complete",
            ) from e

        component = self._completion_target(reference)
        values = [str(value) for value in component.complete(argument.name, argument.value)]
        result = CompleteResult(
            completion=CompletionValues(
                values=values[:MAX_COMPLETION_VALUES],
                total=len(values),
                has_more=len(values) > MAX_COMPLETION_VALUES,
            )
        )
        return result.model_dump(by_alias=True)

    def _completion_target(self, reference: CompletionReference) -> McpPrompt | McpResource:
        if reference.type == "ref/prompt":
            name = reference.name or ""
            if not self.registry.has(ComponentType.PROMPT, name):
                raise ProtocolException.method_not_found(
                    f"Prompt not found: {name}", method="completion/complete"
                )
            return as_prompt(self.registry.get(ComponentType.PROMPT, name).handler)

        uri = reference.uri or ""
        resource = self.resource_handler.find_resource(uri)
        if resource is None:
            raise ProtocolException.method_not_found(
                f"Resource not found: {uri}", method="completion/complete"
            )
        return resource

    def set_level(self, params: dict[str, Any]) -> dict[str, Any]:
        """logging/setLevel: adjust the library logger level."""
        level = params.get("level")
        if not isinstance(level, str) or level not in LOG_LEVELS:
            raise ProtocolException.invalid_params(
                f"Invalid log level: {level}",
                method="logging/setLevel",
                data={"allowed": list(LOG_LEVELS)},
            )
        logging.getLogger(LIBRARY_LOGGER).setLevel(LOG_LEVELS[level])
        logger.info("mcp.logging.level_set", level=level)
        return {}
