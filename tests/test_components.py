"""Tests for the component interfaces and legacy adapters."""

from __future__ import annotations

from typing import Any

import pytest

from mcpcore.components import (
    LegacyPromptAdapter,
    LegacyResourceAdapter,
    LegacyToolAdapter,
    McpPrompt,
    McpResource,
    McpTool,
    as_prompt,
    as_resource,
    as_tool,
    component_label,
)
from mcpcore.errors import ComponentNotInvocableError
from mcpcore.protocol import DEFAULT_INPUT_SCHEMA


class Calculator(McpTool):
    def get_description(self) -> str:
        return "Add two numbers"

    def get_input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
            "required": ["a", "b"],
        }

    def execute(self, arguments: dict[str, Any]) -> Any:
        return arguments["a"] + arguments["b"]


class Inert:
    """Exposes nothing the dispatch core can call."""


def greet(arguments: dict[str, Any]) -> str:
    return f"hello {arguments.get('name', 'world')}"


class TestComponentLabel:
    """Fallback names for descriptions."""

    def test_function_uses_its_name(self) -> None:
        assert component_label(greet) == "greet"

    def test_instance_uses_class_name(self) -> None:
        assert component_label(Inert()) == "Inert"


class TestAsTool:
    """Tests for tool adaptation."""

    def test_canonical_tool_is_returned_as_is(self) -> None:
        tool = Calculator()
        assert as_tool(tool) is tool

    def test_other_handlers_are_wrapped(self) -> None:
        adapted = as_tool(greet)
        assert isinstance(adapted, LegacyToolAdapter)
        assert adapted.handler is greet

    def test_canonical_defaults(self) -> None:
        class Bare(McpTool):
            def execute(self, arguments: dict[str, Any]) -> Any:
                return None

        tool = Bare()
        assert tool.get_description() == "Tool: Bare"
        assert tool.get_input_schema() == DEFAULT_INPUT_SCHEMA

    def test_canonical_validation_uses_input_schema(self) -> None:
        tool = Calculator()
        assert tool.validate_arguments({"a": 1, "b": 2})
        assert not tool.validate_arguments({"a": 1})
        assert not tool.validate_arguments({"a": "one", "b": 2})


class TestLegacyToolAdapter:
    """Metadata chains and dispatch order for wrapped tools."""

    def test_getter_wins_over_attribute(self) -> None:
        class Tool:
            description = "from attribute"

            def get_description(self) -> str:
                return "from getter"

        assert as_tool(Tool()).get_description() == "from getter"

    def test_callable_attribute_is_called(self) -> None:
        class Tool:
            def description(self) -> str:
                return "from method"

        assert as_tool(Tool()).get_description() == "from method"

    def test_plain_attribute(self) -> None:
        class Tool:
            description = "from attribute"
            input_schema = {"type": "object", "properties": {"q": {"type": "string"}}}

        tool = as_tool(Tool())
        assert tool.get_description() == "from attribute"
        assert tool.get_input_schema() == {"type": "object", "properties": {"q": {"type": "string"}}}

    def test_none_getter_falls_through(self) -> None:
        class Tool:
            description = "from attribute"

            def get_description(self) -> None:
                return None

        assert as_tool(Tool()).get_description() == "from attribute"

    def test_fallbacks(self) -> None:
        tool = as_tool(Inert())
        assert tool.get_description() == "Tool: Inert"
        assert tool.get_input_schema() == DEFAULT_INPUT_SCHEMA

    def test_function_fallback_description(self) -> None:
        assert as_tool(greet).get_description() == "Tool: greet"

    def test_execute_wins_over_call(self) -> None:
        class Tool:
            def execute(self, arguments: dict[str, Any]) -> str:
                return "execute"

            def __call__(self, arguments: dict[str, Any]) -> str:
                return "call"

        assert as_tool(Tool()).execute({}) == "execute"

    def test_plain_callable(self) -> None:
        assert as_tool(greet).execute({"name": "ada"}) == "hello ada"

    def test_nothing_to_execute(self) -> None:
        with pytest.raises(ComponentNotInvocableError, match="Tool is not executable"):
            as_tool(Inert()).execute({})

    def test_validation_defaults_to_true(self) -> None:
        assert as_tool(greet).validate_arguments({"anything": 1})

    def test_validation_delegates(self) -> None:
        class Tool:
            def validate_arguments(self, arguments: dict[str, Any]) -> bool:
                return "q" in arguments

            def execute(self, arguments: dict[str, Any]) -> str:
                return "ok"

        tool = as_tool(Tool())
        assert tool.validate_arguments({"q": 1})
        assert not tool.validate_arguments({})


class TestLegacyResourceAdapter:
    """Metadata chains and dispatch order for wrapped resources."""

    def test_canonical_resource_is_returned_as_is(self) -> None:
        class Doc(McpResource):
            def read(self, params: dict[str, Any]) -> Any:
                return "doc"

        resource = Doc()
        assert as_resource(resource, "doc") is resource
        assert resource.get_uri() is None
        assert resource.get_description() == "Resource: Doc"
        assert resource.get_mime_type() == "text/plain"
        assert resource.get_metadata() == {}
        assert resource.complete("arg", "v") == []

    def test_uri_chain(self) -> None:
        class WithGetter:
            def get_uri(self) -> str:
                return "file:///getter"

        class WithAttribute:
            uri = "file:///attribute"

        assert as_resource(WithGetter(), "x").get_uri() == "file:///getter"
        assert as_resource(WithAttribute(), "x").get_uri() == "file:///attribute"
        assert as_resource(Inert(), "notes").get_uri() == "resource://notes"

    def test_mime_type_and_metadata(self) -> None:
        class Resource:
            mime_type = "application/json"

            def get_metadata(self) -> dict[str, Any]:
                return {"size": 12}

        adapted = as_resource(Resource(), "r")
        assert adapted.get_mime_type() == "application/json"
        assert adapted.get_metadata() == {"size": 12}

    def test_non_dict_metadata_is_ignored(self) -> None:
        class Resource:
            metadata = ["not", "a", "dict"]

        assert as_resource(Resource(), "r").get_metadata() == {}

    def test_description_fallback(self) -> None:
        assert as_resource(Inert(), "r").get_description() == "Resource: Inert"

    def test_read_order(self) -> None:
        class ReadAndContent:
            def read(self, params: dict[str, Any]) -> str:
                return "read"

            def get_content(self, params: dict[str, Any]) -> str:
                return "get_content"

        class ContentOnly:
            def get_content(self, params: dict[str, Any]) -> str:
                return "get_content"

            def __call__(self, params: dict[str, Any]) -> str:
                return "call"

        assert as_resource(ReadAndContent(), "a").read({}) == "read"
        assert as_resource(ContentOnly(), "b").read({}) == "get_content"
        assert as_resource(lambda params: "call", "c").read({}) == "call"

    def test_nothing_to_read(self) -> None:
        adapted = as_resource(Inert(), "r")
        assert isinstance(adapted, LegacyResourceAdapter)
        with pytest.raises(ComponentNotInvocableError, match="Resource is not readable"):
            adapted.read({})

    def test_complete_delegates(self) -> None:
        class Resource:
            def complete(self, argument: str, value: str) -> list[str]:
                return [f"{value}-1", f"{value}-2"]

        assert as_resource(Resource(), "r").complete("id", "x") == ["x-1", "x-2"]
        assert as_resource(Inert(), "r").complete("id", "x") == []


class TestLegacyPromptAdapter:
    """Metadata chains and dispatch order for wrapped prompts."""

    def test_canonical_prompt_validates_required_arguments(self) -> None:
        class Summary(McpPrompt):
            def get_arguments(self) -> list[dict[str, Any]]:
                return [
                    {"name": "text", "required": True},
                    {"name": "tone", "required": False},
                ]

            def process(self, arguments: dict[str, Any]) -> Any:
                return "ok"

        prompt = Summary()
        assert as_prompt(prompt) is prompt
        assert prompt.validate_arguments({"text": "abc"})
        assert not prompt.validate_arguments({"tone": "dry"})

    def test_arguments_chain(self) -> None:
        class Prompt:
            arguments = [{"name": "topic"}]

        assert as_prompt(Prompt()).get_arguments() == [{"name": "topic"}]
        assert as_prompt(Inert()).get_arguments() == []

    def test_description_fallback(self) -> None:
        assert as_prompt(greet).get_description() == "Prompt: greet"

    def test_process_order(self) -> None:
        class ProcessAndGet:
            def process(self, arguments: dict[str, Any]) -> str:
                return "process"

            def get(self, arguments: dict[str, Any]) -> str:
                return "get"

        class GetOnly:
            def get(self, arguments: dict[str, Any]) -> str:
                return "get"

        assert as_prompt(ProcessAndGet()).process({}) == "process"
        assert as_prompt(GetOnly()).process({}) == "get"
        assert as_prompt(greet).process({}) == "hello world"

    def test_nothing_to_process(self) -> None:
        adapted = as_prompt(Inert())
        assert isinstance(adapted, LegacyPromptAdapter)
        with pytest.raises(ComponentNotInvocableError, match="Prompt is not processable"):
            adapted.process({})
