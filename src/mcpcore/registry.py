"""Component registry for MCP tools, resources and prompts.

The registry maps a component type and a name to a handler plus the options
given at registration time. The dispatch core only reads from it; writes are
expected during startup.

Thread Safety:
    All operations on ComponentRegistry are thread-safe. The registry uses an
    internal RLock, and ``all()`` returns a snapshot copy so that readers
    never observe a registration in progress.

Example:
    >>> registry = ComponentRegistry()
    >>> registry.register_tool("echo", lambda arguments: arguments["message"])
    >>> registry.has("tool", "echo")
    True
    >>> list(registry.all("tool"))
    ['echo']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from threading import RLock
from typing import Any

from mcpcore.errors import RegistrationError
from mcpcore.observability import get_logger

logger = get_logger(__name__)


class ComponentType(str, Enum):
    """MCP component families."""

    TOOL = "tool"
    RESOURCE = "resource"
    PROMPT = "prompt"


@dataclass(frozen=True)
class ComponentEntry:
    """A registered component: its handler and registration options."""

    handler: Any
    options: dict[str, Any] = field(default_factory=dict)


def _component_type(value: ComponentType | str) -> ComponentType:
    try:
        return ComponentType(value)
    except ValueError:
        raise ValueError(
            f"Unknown component type: {value!r} (expected tool, resource or prompt)"
        ) from None


def _handler_label(handler: Any) -> str:
    return getattr(handler, "__name__", None) or type(handler).__name__


class ComponentRegistry:
    """Registry of MCP components keyed by type and name.

    Entries keep registration order, which is the order of */list results.

    Attributes:
        _components: Mapping of component type to (name -> entry)
        _lock: Reentrant lock for thread-safe operations
    """

    def __init__(self) -> None:
        self._components: dict[ComponentType, dict[str, ComponentEntry]] = {
            component_type: {} for component_type in ComponentType
        }
        self._lock = RLock()

    def register(
        self,
        component_type: ComponentType | str,
        name: str,
        handler: Any,
        **options: Any,
    ) -> None:
        """Register a component.

        Handlers are not checked for a dispatchable method here; a handler
        with none fails when it is called.

        Raises:
            RegistrationError: If the name is already registered for this type.
        """
        ctype = _component_type(component_type)
        with self._lock:
            if name in self._components[ctype]:
                raise RegistrationError(
                    f"Component '{name}' is already registered", ctype.value, name
                )
            self._components[ctype][name] = ComponentEntry(handler=handler, options=dict(options))
        logger.debug(
            "mcp.component.registered",
            component_type=ctype.value,
            name=name,
            handler_name=_handler_label(handler),
        )

    def register_tool(self, name: str, handler: Any, **options: Any) -> None:
        self.register(ComponentType.TOOL, name, handler, **options)

    def register_resource(self, name: str, handler: Any, **options: Any) -> None:
        self.register(ComponentType.RESOURCE, name, handler, **options)

    def register_prompt(self, name: str, handler: Any, **options: Any) -> None:
        self.register(ComponentType.PROMPT, name, handler, **options)

    def unregister(self, component_type: ComponentType | str, name: str) -> None:
        """Remove a component.

        Raises:
            RegistrationError: If no such component is registered.
        """
        ctype = _component_type(component_type)
        with self._lock:
            if name not in self._components[ctype]:
                raise RegistrationError(
                    f"Component '{name}' is not registered", ctype.value, name
                )
            del self._components[ctype][name]

    def has(self, component_type: ComponentType | str, name: str) -> bool:
        ctype = _component_type(component_type)
        with self._lock:
            return name in self._components[ctype]

    def get(self, component_type: ComponentType | str, name: str) -> ComponentEntry:
        """Return the entry for ``name``.

        Raises:
            RegistrationError: If no such component is registered.
        """
        ctype = _component_type(component_type)
        with self._lock:
            entry = self._components[ctype].get(name)
        if entry is None:
            raise RegistrationError(f"Component '{name}' is not registered", ctype.value, name)
        return entry

    def all(self, component_type: ComponentType | str) -> dict[str, ComponentEntry]:
        """Snapshot of all entries of a type, in registration order."""
        ctype = _component_type(component_type)
        with self._lock:
            return dict(self._components[ctype])

    def names(self, component_type: ComponentType | str) -> list[str]:
        return list(self.all(component_type))

    def count(self, component_type: ComponentType | str | None = None) -> int:
        with self._lock:
            if component_type is None:
                return sum(len(entries) for entries in self._components.values())
            return len(self._components[_component_type(component_type)])
