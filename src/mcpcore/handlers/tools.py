"""tools/list and tools/call."""

from __future__ import annotations

from typing import Any

from mcpcore.components import as_tool, component_label
from mcpcore.errors import ProtocolException
from mcpcore.handlers.base import BaseHandler
from mcpcore.protocol import DEFAULT_INPUT_SCHEMA, CallToolResult, ToolDefinition
from mcpcore.registry import ComponentEntry, ComponentType

_CALL_RULES: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "arguments": {"type": ["object", "null"]},
    },
}

_CALL_MESSAGES = {
    "name.type": "The tool name must be a string",
    "arguments.type": "The arguments must be an object",
}


class ToolHandler(BaseHandler):
    """Handler for the tools family.

    Tool failures are reported in-band: a tool that raises, or that has
    nothing to execute, yields ``isError: true`` content instead of a
    JSON-RPC error.
    """

    supported_methods = ("tools/list", "tools/call")

    def _handle_method(
        self, method: str, params: dict[str, Any], context: dict[str, Any]
    ) -> dict[str, Any]:
        if method == "tools/list":
            return self.list_tools(params, context)
        return self.call_tool(params, context)

    def list_tools(self, params: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        definitions = [
            self.build_definition(name, entry)
            for name, entry in self.registry.all(ComponentType.TOOL).items()
        ]
        page, next_cursor = self.paginate_definitions(definitions, params)
        result: dict[str, Any] = {"tools": page}
        if next_cursor is not None:
            result["nextCursor"] = next_cursor
        self.log_debug("Listed tools", count=len(page), total=len(definitions))
        return self.create_success_response(result, context)

    def build_definition(self, name: str, entry: ComponentEntry) -> dict[str, Any]:
        """Build ``{name, description, inputSchema}``; falls back entirely if an accessor raises."""
        try:
            tool = as_tool(entry.handler)
            definition = ToolDefinition(
                name=name,
                description=tool.get_description(),
                input_schema=tool.get_input_schema(),
            )
        except Exception as e:
            self.log_warning("Failed to build tool definition", tool=name, error=str(e))
            definition = ToolDefinition(
                name=name,
                description=f"Tool: {component_label(entry.handler)}",
                input_schema=dict(DEFAULT_INPUT_SCHEMA),
            )
        return definition.model_dump(by_alias=True)

    def call_tool(self, params: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        self.validate_required_params(params, ["name"])
        self.validate_request(params, _CALL_RULES, _CALL_MESSAGES)
        name: str = params["name"]
        arguments: dict[str, Any] = params.get("arguments") or {}

        if not self.registry.has(ComponentType.TOOL, name):
            raise ProtocolException.method_not_found(f"Tool not found: {name}", method="tools/call")

        tool = as_tool(self.registry.get(ComponentType.TOOL, name).handler)
        if not tool.validate_arguments(arguments):
            raise ProtocolException.invalid_params(
                f"Invalid arguments for tool: {name}", method="tools/call"
            )

        try:
            output = tool.execute(arguments)
        except Exception as e:
            self.log_error(
                "Tool execution failed",
                tool=name,
                error=str(e),
                arguments=self.sanitize_for_logging(arguments),
            )
            result = CallToolResult(
                content=[self.format_content(f"Tool execution failed: {e}")],
                is_error=True,
            )
            return self.create_success_response(result.model_dump(by_alias=True), context)

        self.log_info("Tool executed", tool=name, request_id=context.get("request_id"))
        result = CallToolResult(content=[self.format_content(output)], is_error=False)
        return self.create_success_response(result.model_dump(by_alias=True), context)
