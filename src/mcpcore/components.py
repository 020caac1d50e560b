"""Component interfaces for MCP tools, resources and prompts.

Each family has one canonical abstract base class with a single dispatch
method (``execute``, ``read``, ``process``). Handlers that do not subclass
it are wrapped by a legacy adapter which looks the metadata and dispatch
method up by name, in a fixed order:

    Tool metadata:      get_description() -> description -> "Tool: <Name>"
                        get_input_schema() -> input_schema -> default schema
    Tool dispatch:      execute(args) -> __call__(args)
    Resource metadata:  get_uri() -> uri -> "resource://<registered name>"
                        get_uri_template() -> uri_template -> none
                        get_mime_type() -> mime_type -> "text/plain"
                        get_metadata() -> metadata -> {}
    Resource dispatch:  read(params) -> get_content(params) -> __call__(params)
    Prompt metadata:    get_arguments() -> arguments -> []
    Prompt dispatch:    process(args) -> get(args) -> __call__(args)

An attribute found in the chain is called when callable and used as-is
otherwise. A value of None counts as absent.

Example:
    >>> class Echo(McpTool):
    ...     def get_description(self) -> str:
    ...         return "Echo the message back"
    ...
    ...     def execute(self, arguments):
    ...         return arguments.get("message", "")
    >>> as_tool(Echo()).execute({"message": "hi"})
    'hi'
    >>> as_tool(lambda arguments: 42).execute({})
    42
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import Any

import jsonschema

from mcpcore.errors import ComponentNotInvocableError
from mcpcore.protocol import DEFAULT_INPUT_SCHEMA, DEFAULT_MIME_TYPE

_MISSING = object()


def component_label(handler: Any) -> str:
    """Name used in fallback descriptions: ``__name__`` for functions, else the class name."""
    if inspect.isroutine(handler) or inspect.isclass(handler):
        return str(getattr(handler, "__name__", type(handler).__name__))
    return type(handler).__name__


def _lookup(handler: Any, getter: str, attribute: str) -> Any:
    """Resolve ``getter()`` then ``attribute`` on ``handler``; None when neither yields a value."""
    method = getattr(handler, getter, None)
    if callable(method):
        value = method()
        if value is not None:
            return value
    value = getattr(handler, attribute, None)
    if callable(value):
        value = value()
    return value


def _find_method(handler: Any, *names: str) -> Any:
    for name in names:
        method = getattr(handler, name, _MISSING)
        if method is not _MISSING and callable(method):
            return method
    if callable(handler):
        return handler
    return None


def _default_complete(argument: str, value: str) -> list[str]:
    return []


class McpTool(ABC):
    """Canonical tool interface."""

    def get_description(self) -> str:
        return f"Tool: {component_label(self)}"

    def get_input_schema(self) -> dict[str, Any]:
        return dict(DEFAULT_INPUT_SCHEMA)

    def validate_arguments(self, arguments: dict[str, Any]) -> bool:
        """Validate ``arguments`` against ``get_input_schema()``."""
        schema = self.get_input_schema()
        validator_cls = jsonschema.validators.validator_for(schema)
        return bool(validator_cls(schema).is_valid(arguments))

    @abstractmethod
    def execute(self, arguments: dict[str, Any]) -> Any:
        """Run the tool; the return value becomes a text content block."""


class McpResource(ABC):
    """Canonical resource interface.

    ``get_uri`` may return None, in which case the registry name is used to
    build ``resource://<name>``.
    """

    def get_uri(self) -> str | None:
        return None

    def get_uri_template(self) -> str | None:
        """RFC 6570 template for parameterized URIs; None for a fixed URI."""
        return None

    def get_description(self) -> str:
        return f"Resource: {component_label(self)}"

    def get_mime_type(self) -> str:
        return DEFAULT_MIME_TYPE

    def get_metadata(self) -> dict[str, Any]:
        return {}

    @abstractmethod
    def read(self, params: dict[str, Any]) -> Any:
        """Return the resource contents; ``params`` excludes ``uri``."""

    def complete(self, argument: str, value: str) -> list[str]:
        return []


class McpPrompt(ABC):
    """Canonical prompt interface."""

    def get_description(self) -> str:
        return f"Prompt: {component_label(self)}"

    def get_arguments(self) -> list[dict[str, Any]]:
        return []

    def validate_arguments(self, arguments: dict[str, Any]) -> bool:
        """Check that every argument declared ``required`` is present."""
        for argument in self.get_arguments():
            if isinstance(argument, dict) and argument.get("required") and argument.get("name") not in arguments:
                return False
        return True

    @abstractmethod
    def process(self, arguments: dict[str, Any]) -> Any:
        """Render the prompt; the result is normalized into a message list."""

    def complete(self, argument: str, value: str) -> list[str]:
        return []


class LegacyToolAdapter(McpTool):
    """Wrap an arbitrary tool handler in the McpTool interface."""

    def __init__(self, handler: Any) -> None:
        self.handler = handler

    def get_description(self) -> str:
        description = _lookup(self.handler, "get_description", "description")
        return str(description) if description is not None else f"Tool: {component_label(self.handler)}"

    def get_input_schema(self) -> dict[str, Any]:
        schema = _lookup(self.handler, "get_input_schema", "input_schema")
        return schema if schema is not None else dict(DEFAULT_INPUT_SCHEMA)

    def validate_arguments(self, arguments: dict[str, Any]) -> bool:
        validate = getattr(self.handler, "validate_arguments", None)
        if callable(validate):
            return bool(validate(arguments))
        return True

    def execute(self, arguments: dict[str, Any]) -> Any:
        method = _find_method(self.handler, "execute")
        if method is None:
            raise ComponentNotInvocableError("Tool is not executable")
        return method(arguments)


class LegacyResourceAdapter(McpResource):
    """Wrap an arbitrary resource handler in the McpResource interface."""

    def __init__(self, handler: Any, name: str) -> None:
        self.handler = handler
        self.name = name

    def get_uri(self) -> str:
        uri = _lookup(self.handler, "get_uri", "uri")
        return str(uri) if uri is not None else f"resource://{self.name}"

    def get_uri_template(self) -> str | None:
        template = _lookup(self.handler, "get_uri_template", "uri_template")
        return str(template) if template is not None else None

    def get_description(self) -> str:
        description = _lookup(self.handler, "get_description", "description")
        return (
            str(description)
            if description is not None
            else f"Resource: {component_label(self.handler)}"
        )

    def get_mime_type(self) -> str:
        mime_type = _lookup(self.handler, "get_mime_type", "mime_type")
        return str(mime_type) if mime_type is not None else DEFAULT_MIME_TYPE

    def get_metadata(self) -> dict[str, Any]:
        metadata = _lookup(self.handler, "get_metadata", "metadata")
        return dict(metadata) if isinstance(metadata, dict) else {}

    def read(self, params: dict[str, Any]) -> Any:
        method = _find_method(self.handler, "read", "get_content")
        if method is None:
            raise ComponentNotInvocableError("Resource is not readable")
        return method(params)

    def complete(self, argument: str, value: str) -> list[str]:
        complete = getattr(self.handler, "complete", _default_complete)
        return list(complete(argument, value))


class LegacyPromptAdapter(McpPrompt):
    """Wrap an arbitrary prompt handler in the McpPrompt interface."""

    def __init__(self, handler: Any) -> None:
        self.handler = handler

    def get_description(self) -> str:
        description = _lookup(self.handler, "get_description", "description")
        return (
            str(description)
            if description is not None
            else f"Prompt: {component_label(self.handler)}"
        )

    def get_arguments(self) -> list[dict[str, Any]]:
        arguments = _lookup(self.handler, "get_arguments", "arguments")
        return list(arguments) if arguments is not None else []

    def validate_arguments(self, arguments: dict[str, Any]) -> bool:
        validate = getattr(self.handler, "validate_arguments", None)
        if callable(validate):
            return bool(validate(arguments))
        return True

    def process(self, arguments: dict[str, Any]) -> Any:
        method = _find_method(self.handler, "process", "get")
        if method is None:
            raise ComponentNotInvocableError("Prompt is not processable")
        return method(arguments)

    def complete(self, argument: str, value: str) -> list[str]:
        complete = getattr(self.handler, "complete", _default_complete)
        return list(complete(argument, value))


def as_tool(handler: Any) -> McpTool:
    if isinstance(handler, McpTool):
        return handler
    return LegacyToolAdapter(handler)


def as_resource(handler: Any, name: str) -> McpResource:
    if isinstance(handler, McpResource):
        return handler
    return LegacyResourceAdapter(handler, name)


def as_prompt(handler: Any) -> McpPrompt:
    if isinstance(handler, McpPrompt):
        return handler
    return LegacyPromptAdapter(handler)
