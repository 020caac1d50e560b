"""Server configuration.

Configuration is an explicit, immutable object handed to the Dispatcher at
construction time. Nothing in the request path reads environment variables
or module globals.

Environment Variables (read by ``ServerConfig.from_env``):
    MCPCORE_SERVER_NAME: Server name reported in serverInfo
    MCPCORE_SERVER_VERSION: Server version reported in serverInfo
    MCPCORE_DEBUG: Expose exception details in error data
    MCPCORE_PAGE_SIZE: Default page size for */list operations
    MCPCORE_TOOLS_ENABLED, MCPCORE_RESOURCES_ENABLED, MCPCORE_PROMPTS_ENABLED,
    MCPCORE_LOGGING_ENABLED, MCPCORE_COMPLETION_ENABLED: Capability toggles

Example:
    >>> config = ServerConfig(name="demo", capabilities=CapabilityFlags(prompts=False))
    >>> sorted(config.server_capabilities())
    ['logging', 'resources', 'tools']
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import Field

from mcpcore import __version__
from mcpcore.models.base import FrozenModel
from mcpcore.pagination import DEFAULT_PAGE_SIZE
from mcpcore.protocol import MCP_PROTOCOL_VERSION, Implementation

_TRUTHY = ("true", "1", "yes", "on")
_FALSY = ("false", "0", "no", "off")


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None:
        return default
    value = value.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got {value!r}")


class CapabilityFlags(FrozenModel):
    """Server-side feature toggles; each family can be switched off independently."""

    tools: bool = True
    resources: bool = True
    prompts: bool = True
    logging: bool = True
    completion: bool = False
    resources_subscribe: bool = False
    list_changed: bool = False


class ServerConfig(FrozenModel):
    """Immutable server configuration."""

    name: str = Field(default="mcpcore", min_length=1)
    version: str = Field(default=__version__)
    title: str | None = None
    description: str | None = None
    instructions: str | None = None
    protocol_version: str = Field(default=MCP_PROTOCOL_VERSION)
    debug: bool = False
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)
    capabilities: CapabilityFlags = Field(default_factory=CapabilityFlags)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, **overrides: Any) -> ServerConfig:
        """Build a config from MCPCORE_* variables; ``overrides`` take precedence.

        Raises:
            ValueError: If a variable holds a value that cannot be parsed.
        """
        env = os.environ if env is None else env
        defaults = CapabilityFlags()
        values: dict[str, Any] = {
            "debug": _env_bool(env, "MCPCORE_DEBUG", False),
            "capabilities": CapabilityFlags(
                tools=_env_bool(env, "MCPCORE_TOOLS_ENABLED", defaults.tools),
                resources=_env_bool(env, "MCPCORE_RESOURCES_ENABLED", defaults.resources),
                prompts=_env_bool(env, "MCPCORE_PROMPTS_ENABLED", defaults.prompts),
                logging=_env_bool(env, "MCPCORE_LOGGING_ENABLED", defaults.logging),
                completion=_env_bool(env, "MCPCORE_COMPLETION_ENABLED", defaults.completion),
            ),
        }
        if env.get("MCPCORE_SERVER_NAME"):
            values["name"] = env["MCPCORE_SERVER_NAME"]
        if env.get("MCPCORE_SERVER_VERSION"):
            values["version"] = env["MCPCORE_SERVER_VERSION"]
        if env.get("MCPCORE_PAGE_SIZE"):
            values["page_size"] = int(env["MCPCORE_PAGE_SIZE"])
        values.update(overrides)
        return cls(**values)

    def server_info(self) -> Implementation:
        return Implementation(
            name=self.name,
            version=self.version,
            title=self.title,
            description=self.description,
        )

    def server_capabilities(self) -> dict[str, Any]:
        """Capability map the server offers, before negotiation."""
        flags = self.capabilities
        capabilities: dict[str, Any] = {}
        if flags.tools:
            capabilities["tools"] = {"listChanged": flags.list_changed}
        if flags.resources:
            capabilities["resources"] = {
                "subscribe": flags.resources_subscribe,
                "listChanged": flags.list_changed,
            }
        if flags.prompts:
            capabilities["prompts"] = {"listChanged": flags.list_changed}
        if flags.logging:
            capabilities["logging"] = {}
        if flags.completion:
            capabilities["completion"] = {}
        return capabilities
