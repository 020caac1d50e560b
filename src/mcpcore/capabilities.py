"""Capability negotiation for the initialize handshake.

The negotiated set is the intersection of what the server offers and what
the client declares. A capability missing on either side is left out of the
result (not reported as ``false``). Inside a capability present on both
sides, each server feature is settled as follows:

    - server ``false`` or missing: ``false``
    - client silent: the server value
    - both booleans: logical AND
    - both objects: merged, client keys winning
    - otherwise: whichever side carries an object, else ``true``

A client may name a capability by an alternate spelling listed in
``CAPABILITY_ALIASES`` (``completions`` for ``completion``). The negotiated
entry is reported under the spelling the client used.

Example:
    >>> negotiator = CapabilityNegotiator()
    >>> negotiator.negotiate(
    ...     {"tools": {"listChanged": True}, "logging": {}},
    ...     {"tools": {"listChanged": False}},
    ... )
    {'tools': {'listChanged': False}}
"""

from __future__ import annotations

from typing import Any

from mcpcore.observability import get_logger

logger = get_logger(__name__)

# Server capability name -> other names clients use for it
CAPABILITY_ALIASES: dict[str, tuple[str, ...]] = {"completion": ("completions",)}


class CapabilityNegotiator:
    """Intersects server and client capability maps."""

    def negotiate(
        self,
        server_capabilities: dict[str, Any],
        client_capabilities: dict[str, Any] | None,
    ) -> dict[str, Any]:
        client_capabilities = client_capabilities or {}
        negotiated: dict[str, Any] = {}
        for capability, server_features in server_capabilities.items():
            client_key = self.client_key(capability, client_capabilities)
            if client_key is None:
                continue
            features = self.negotiate_capability(server_features, client_capabilities[client_key])
            if features is not None:
                negotiated[client_key] = features

        logger.debug(
            "mcp.capabilities.negotiated",
            server=sorted(server_capabilities),
            client=sorted(client_capabilities),
            negotiated=sorted(negotiated),
        )
        return negotiated

    def client_key(self, capability: str, client_capabilities: dict[str, Any]) -> str | None:
        """Key under which the client declared ``capability``, aliases included."""
        for key in (capability, *CAPABILITY_ALIASES.get(capability, ())):
            if key in client_capabilities:
                return key
        return None

    def negotiate_capability(self, server_features: Any, client_features: Any) -> dict[str, Any] | None:
        """Negotiate one capability; None means it is disabled on one side."""
        if server_features is False or server_features is None:
            return None
        if client_features is False or client_features is None:
            return None
        if not isinstance(server_features, dict):
            server_features = {}
        if not isinstance(client_features, dict):
            client_features = {}
        return {
            feature: self.negotiate_feature(server_value, client_features.get(feature))
            for feature, server_value in server_features.items()
        }

    def negotiate_feature(self, server_value: Any, client_value: Any) -> Any:
        if server_value is None or server_value is False:
            return False
        if client_value is None:
            return server_value
        if isinstance(server_value, bool) and isinstance(client_value, bool):
            return server_value and client_value
        if isinstance(server_value, dict) and isinstance(client_value, dict):
            return {**server_value, **client_value}
        if isinstance(server_value, dict):
            return server_value
        if isinstance(client_value, dict):
            return client_value
        return True

    def has_capability(self, capabilities: dict[str, Any], capability: str) -> bool:
        return capability in capabilities

    def has_feature(self, capabilities: dict[str, Any], capability: str, feature: str) -> bool:
        features = capabilities.get(capability)
        return isinstance(features, dict) and bool(features.get(feature))

    def summarize(self, capabilities: dict[str, Any]) -> dict[str, Any]:
        """Flatten a capability map into enabled/disabled ``capability.feature`` names."""
        enabled: list[str] = []
        disabled: list[str] = []
        for capability, features in capabilities.items():
            if not isinstance(features, dict):
                continue
            for feature, value in features.items():
                (enabled if value else disabled).append(f"{capability}.{feature}")
        return {
            "supported_capabilities": list(capabilities),
            "feature_count": len(enabled) + len(disabled),
            "enabled_features": enabled,
            "disabled_features": disabled,
        }
