"""mcpcore error taxonomy.

This module defines the error hierarchy for the MCP dispatch core. Every
error carries a JSON-RPC 2.0 error code so it can be surfaced to clients
without further translation.

Two tiers exist:
    - ProtocolException and its subclasses are protocol-level failures
      (bad envelope, unknown method, unknown component, invalid params)
      and become JSON-RPC ``error`` objects at the outermost layer.
    - ComponentNotInvocableError and any exception raised by a registered
      component are application-level failures; handlers report them
      in-band as a successful response.
"""

from __future__ import annotations

from typing import Any

# JSON-RPC 2.0 standard error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class MCPError(Exception):
    """Base exception for all mcpcore errors.

    Attributes:
        code: JSON-RPC error code (negative integer)
        message: Human-readable error message
        data: Optional additional error payload, sent to clients as-is
    """

    def __init__(self, message: str, code: int = INTERNAL_ERROR, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-RPC error object; ``data`` is omitted when None."""
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class ProtocolException(MCPError):
    """Raised for protocol-level failures that map to a JSON-RPC error.

    Attributes:
        method: The MCP method being processed when the error occurred
        protocol_version: Protocol version in effect, if relevant

    Example:
        >>> exc = ProtocolException.method_not_found("Tool not found: calc")
        >>> exc.code
        -32601
        >>> exc.to_dict()
        {'code': -32601, 'message': 'Tool not found: calc'}
    """

    def __init__(
        self,
        message: str,
        code: int = INTERNAL_ERROR,
        method: str | None = None,
        data: Any = None,
        protocol_version: str | None = None,
    ) -> None:
        super().__init__(message, code, data)
        self.method = method
        self.protocol_version = protocol_version

    @classmethod
    def parse_error(cls, data: Any = None) -> ProtocolException:
        return cls("Parse error", PARSE_ERROR, data=data)

    @classmethod
    def invalid_request(
        cls, reason: str = "Invalid Request", data: Any = None
    ) -> ProtocolException:
        return cls(reason, INVALID_REQUEST, data=data)

    @classmethod
    def method_not_found(
        cls, message: str, method: str | None = None, data: Any = None
    ) -> ProtocolException:
        return cls(message, METHOD_NOT_FOUND, method=method, data=data)

    @classmethod
    def unsupported_method(cls, method: str) -> ProtocolException:
        """Create the error a handler raises for a method it does not own."""
        return cls(f"Unsupported method: {method}", METHOD_NOT_FOUND, method=method)

    @classmethod
    def invalid_params(
        cls, message: str, method: str | None = None, data: Any = None
    ) -> ProtocolException:
        return cls(message, INVALID_PARAMS, method=method, data=data)

    @classmethod
    def internal_error(
        cls, message: str = "Internal error", method: str | None = None, data: Any = None
    ) -> ProtocolException:
        return cls(message, INTERNAL_ERROR, method=method, data=data)


class InvalidCursorError(ProtocolException):
    """Raised when a pagination cursor cannot be decoded.

    Attributes:
        cursor: The offending cursor string
    """

    def __init__(self, cursor: str, reason: str) -> None:
        super().__init__(f"Invalid cursor: {reason}", INVALID_PARAMS, data={"cursor": cursor})
        self.cursor = cursor
        self.reason = reason


class RegistrationError(MCPError):
    """Raised on registry misuse (duplicate registration, unknown name)."""

    def __init__(self, message: str, component_type: str, name: str) -> None:
        super().__init__(
            message,
            INTERNAL_ERROR,
            data={"component_type": component_type, "name": name},
        )
        self.component_type = component_type
        self.name = name


class ComponentNotInvocableError(MCPError):
    """Raised when a registered component exposes no dispatchable method.

    This is detected at call time, never at registration time.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, INTERNAL_ERROR)
