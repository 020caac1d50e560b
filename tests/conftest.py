"""Shared pytest fixtures for mcpcore tests.

Component fixtures cover the handler shapes the dispatch core accepts:
canonical interface subclasses, legacy objects exposing named methods,
plain callables, and objects with nothing to dispatch.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import pytest

from mcpcore.config import CapabilityFlags, ServerConfig
from mcpcore.dispatcher import LIBRARY_LOGGER, Dispatcher
from mcpcore.jsonrpc import JsonRpcHandler
from mcpcore.registry import ComponentRegistry


class RecordingLogger:
    """Stand-in for a structlog logger that keeps every call."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def _record(self, level: str, event: str, **kwargs: Any) -> None:
        self.records.append((level, event, kwargs))

    def debug(self, event: str, **kwargs: Any) -> None:
        self._record("debug", event, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        self._record("info", event, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._record("warning", event, **kwargs)

    def error(self, event: str, **kwargs: Any) -> None:
        self._record("error", event, **kwargs)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep MCPCORE_* variables and the library log level from leaking between tests."""
    for name in (
        "MCPCORE_DEBUG",
        "MCPCORE_SERVER_NAME",
        "MCPCORE_SERVER_VERSION",
        "MCPCORE_PAGE_SIZE",
        "MCPCORE_TOOLS_ENABLED",
        "MCPCORE_RESOURCES_ENABLED",
        "MCPCORE_PROMPTS_ENABLED",
        "MCPCORE_LOGGING_ENABLED",
        "MCPCORE_COMPLETION_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    library_logger = logging.getLogger(LIBRARY_LOGGER)
    level = library_logger.level
    yield
    library_logger.setLevel(level)


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def registry() -> ComponentRegistry:
    """Empty component registry."""
    return ComponentRegistry()


@pytest.fixture
def config() -> ServerConfig:
    """Server config with every capability enabled, completion included."""
    return ServerConfig(
        name="test-server",
        version="9.9.9",
        instructions="Use the calculator for arithmetic.",
        capabilities=CapabilityFlags(completion=True),
    )


@pytest.fixture
def dispatcher(registry: ComponentRegistry, config: ServerConfig) -> Dispatcher:
    return Dispatcher(registry, config)


@pytest.fixture
def rpc(dispatcher: Dispatcher) -> JsonRpcHandler:
    """JSON-RPC handler over the ``registry`` fixture."""
    return JsonRpcHandler(dispatcher)
