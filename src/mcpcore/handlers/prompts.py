"""prompts/list and prompts/get."""

from __future__ import annotations

from typing import Any

from mcpcore.components import McpPrompt, as_prompt, component_label
from mcpcore.errors import INTERNAL_ERROR, ComponentNotInvocableError, ProtocolException
from mcpcore.handlers.base import BaseHandler, encode_json
from mcpcore.protocol import PromptDefinition
from mcpcore.registry import ComponentEntry, ComponentType

_GET_RULES: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "arguments": {"type": ["object", "null"]},
    },
}

_GET_MESSAGES = {
    "name.type": "The prompt name must be a string",
    "arguments.type": "The arguments must be an object",
}


def _is_message(value: Any) -> bool:
    return isinstance(value, dict) and ("role" in value or "content" in value)


class PromptHandler(BaseHandler):
    """Handler for the prompts family.

    Processing failures are reported in-band as ``{"error": {...}}``.
    """

    supported_methods = ("prompts/list", "prompts/get")

    def _handle_method(
        self, method: str, params: dict[str, Any], context: dict[str, Any]
    ) -> dict[str, Any]:
        if method == "prompts/list":
            return self.list_prompts(params, context)
        return self.get_prompt(params, context)

    def list_prompts(self, params: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        definitions = [
            self.build_definition(name, entry)
            for name, entry in self.registry.all(ComponentType.PROMPT).items()
        ]
        page, next_cursor = self.paginate_definitions(definitions, params)
        result: dict[str, Any] = {"prompts": page}
        if next_cursor is not None:
            result["nextCursor"] = next_cursor
        return self.create_success_response(result, context)

    def build_definition(self, name: str, entry: ComponentEntry) -> dict[str, Any]:
        try:
            prompt = as_prompt(entry.handler)
            definition = PromptDefinition(
                name=name,
                description=prompt.get_description(),
                arguments=prompt.get_arguments(),
            )
        except Exception as e:
            self.log_warning("Failed to build prompt definition", prompt=name, error=str(e))
            definition = PromptDefinition(
                name=name,
                description=f"Prompt: {component_label(entry.handler)}",
                arguments=[],
            )
        return definition.model_dump(by_alias=True)

    def get_prompt(self, params: dict[str, Any], context: dict[str, Any]) -> dict[str, Any]:
        self.validate_required_params(params, ["name"])
        self.validate_request(params, _GET_RULES, _GET_MESSAGES)
        name: str = params["name"]
        arguments: dict[str, Any] = params.get("arguments") or {}

        if not self.registry.has(ComponentType.PROMPT, name):
            raise ProtocolException.method_not_found(
                f"Prompt not found: {name}", method="prompts/get"
            )

        entry = self.registry.get(ComponentType.PROMPT, name)
        prompt = as_prompt(entry.handler)
        if not prompt.validate_arguments(arguments):
            raise ProtocolException.invalid_params(
                f"Invalid arguments for prompt: {name}", method="prompts/get"
            )

        try:
            output = prompt.process(arguments)
        except ComponentNotInvocableError as e:
            self.log_error("Prompt is not processable", prompt=name)
            return self.create_error_response(e.message, INTERNAL_ERROR)
        except Exception as e:
            self.log_error("Prompt processing failed", prompt=name, error=str(e))
            return self.create_error_response(f"Failed to process prompt: {e}", INTERNAL_ERROR)

        result = {
            "description": self._describe(prompt, entry),
            "messages": self.format_messages(output),
        }
        self.log_info("Prompt processed", prompt=name, message_count=len(result["messages"]))
        return self.create_success_response(result, context)

    def format_messages(self, output: Any) -> list[Any]:
        """Normalize a prompt result into a list of messages.

        A list of message-like dicts passes through, a single message-like
        dict is wrapped, and anything else becomes one user text message.
        An empty list is not a message list.
        """
        if isinstance(output, (list, tuple)) and output and all(_is_message(item) for item in output):
            return list(output)
        if _is_message(output):
            return [output]

        if isinstance(output, str):
            text = output
        elif isinstance(output, (dict, list, tuple)):
            text = encode_json(output, pretty=True)
        else:
            text = self.format_content(output)["text"]
        return [{"role": "user", "content": [{"type": "text", "text": text}]}]

    def _describe(self, prompt: McpPrompt, entry: ComponentEntry) -> str:
        try:
            return str(prompt.get_description())
        except Exception as e:
            self.log_warning("Failed to resolve prompt description", error=str(e))
            return f"Prompt: {component_label(entry.handler)}"
