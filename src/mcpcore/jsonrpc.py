"""JSON-RPC 2.0 envelope handling for MCP.

JsonRpcHandler is the outermost layer of the dispatch core: it parses raw
JSON text, validates the envelope, hands the call to the Dispatcher and
serializes the result or error back to JSON text.

Standard JSON-RPC Error Codes:
    -32700: Parse error (invalid JSON)
    -32600: Invalid request (malformed JSON-RPC)
    -32601: Method not found / named component not found
    -32602: Invalid params
    -32603: Internal error

The request ``id`` is echoed in every response, errors included. Only parse
errors and envelopes whose id is itself invalid answer with ``id: null``.
Messages without an ``id`` key are notifications and are never answered.

Example:
    >>> from mcpcore.registry import ComponentRegistry
    >>> handler = JsonRpcHandler.for_registry(ComponentRegistry())
    >>> handler.process_request('{"jsonrpc":"2.0","method":"ping","id":1}')
    '{"jsonrpc":"2.0","result":{},"id":1}'
"""

from __future__ import annotations

import json
from typing import Any, Literal, Union

from pydantic import Field, StrictInt, StrictStr, ValidationError

from mcpcore.config import ServerConfig
from mcpcore.dispatcher import Dispatcher
from mcpcore.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    MCPError,
    ProtocolException,
)
from mcpcore.handlers.base import encode_json
from mcpcore.models.base import MCPBaseModel
from mcpcore.observability import get_logger
from mcpcore.registry import ComponentRegistry

__all__ = [
    "ERROR_MESSAGES",
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "JsonRpcError",
    "JsonRpcErrorResponse",
    "JsonRpcHandler",
    "JsonRpcRequest",
    "JsonRpcResponse",
]

logger = get_logger(__name__)

ERROR_MESSAGES: dict[int, str] = {
    PARSE_ERROR: "Parse error",
    INVALID_REQUEST: "Invalid Request",
    METHOD_NOT_FOUND: "Method not found",
    INVALID_PARAMS: "Invalid params",
    INTERNAL_ERROR: "Internal error",
}

RequestId = Union[StrictStr, StrictInt, None]


class JsonRpcError(MCPBaseModel):
    """JSON-RPC 2.0 error object."""

    code: int = Field(description="Error code (negative integer)")
    message: str = Field(description="Short error description")
    data: Any = Field(default=None, description="Optional additional error information")

    @staticmethod
    def from_code(code: int, data: Any = None) -> JsonRpcError:
        """Create an error carrying the standard message for ``code``.

        Example:
            >>> JsonRpcError.from_code(INVALID_PARAMS).message
            'Invalid params'
        """
        return JsonRpcError(code=code, message=ERROR_MESSAGES.get(code, "Unknown error"), data=data)


class JsonRpcRequest(MCPBaseModel):
    """JSON-RPC 2.0 request envelope (params are checked separately)."""

    jsonrpc: Literal["2.0"] = Field(description="JSON-RPC protocol version (always '2.0')")
    method: StrictStr = Field(min_length=1, description="RPC method name")
    id: RequestId = Field(default=None, description="Request identifier for correlation")


class JsonRpcResponse(MCPBaseModel):
    """JSON-RPC 2.0 successful response."""

    jsonrpc: Literal["2.0"] = Field(default="2.0")
    result: Any = Field(description="Response data")
    id: RequestId = Field(description="Request identifier (matches request)")


class JsonRpcErrorResponse(MCPBaseModel):
    """JSON-RPC 2.0 error response."""

    jsonrpc: Literal["2.0"] = Field(default="2.0")
    error: JsonRpcError = Field(description="Error object")
    id: RequestId = Field(description="Request identifier (or null)")


def _is_valid_id(value: Any) -> bool:
    return value is None or (isinstance(value, (str, int)) and not isinstance(value, bool))


def success_response(request_id: Any, result: Any) -> dict[str, Any]:
    return JsonRpcResponse(result=result, id=request_id).model_dump()


def error_response(request_id: Any, error: MCPError | JsonRpcError) -> dict[str, Any]:
    """Build an error envelope; the ``data`` key is dropped when empty."""
    if isinstance(error, MCPError):
        error = JsonRpcError(code=error.code, message=error.message, data=error.data)
    response = JsonRpcErrorResponse(error=error, id=request_id).model_dump()
    if response["error"]["data"] is None:
        del response["error"]["data"]
    return response


class JsonRpcHandler:
    """Parse, validate, dispatch and serialize JSON-RPC messages.

    Batches (JSON arrays) are processed element by element; notifications
    in a batch contribute nothing, and a batch made only of notifications
    produces no response at all.
    """

    def __init__(self, dispatcher: Dispatcher, debug: bool | None = None) -> None:
        self.dispatcher = dispatcher
        if debug is None:
            debug = dispatcher.debug
        self.debug = debug

    @classmethod
    def for_registry(
        cls, registry: ComponentRegistry, config: ServerConfig | None = None
    ) -> JsonRpcHandler:
        """Build a handler with a Dispatcher over ``registry``."""
        return cls(Dispatcher(registry, config))

    def process_request(self, raw: str | bytes) -> str | None:
        """Process one raw JSON-RPC payload.

        Returns:
            The serialized response, or None when nothing must be sent back
            (notifications).
        """
        try:
            message = self.parse(raw)
        except ProtocolException as e:
            logger.warning("mcp.request.parse_error", error=str(e.data))
            return self.serialize(error_response(None, e))

        response = self.handle_payload(message)
        if response is None:
            return None
        return self.serialize(response)

    def parse(self, raw: str | bytes) -> Any:
        """Decode JSON text.

        Raises:
            ProtocolException: -32700 when ``raw`` is not valid JSON.
        """
        try:
            return json.loads(raw)
        except (UnicodeDecodeError, ValueError) as e:
            data = str(e) if self.debug else None
            raise ProtocolException.parse_error(data=data) from e

    def serialize(self, response: dict[str, Any] | list[dict[str, Any]]) -> str:
        return encode_json(response)

    def handle_payload(self, message: Any) -> dict[str, Any] | list[dict[str, Any]] | None:
        """Handle a decoded payload: a single message or a batch."""
        if isinstance(message, list):
            if not message:
                return error_response(None, ProtocolException.invalid_request())
            responses = [
                response
                for response in (self.handle_message(item) for item in message)
                if response is not None
            ]
            return responses or None
        return self.handle_message(message)

    def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Handle one decoded JSON-RPC message.

        Returns:
            The response envelope, or None for notifications.
        """
        if not isinstance(message, dict):
            return error_response(None, ProtocolException.invalid_request())

        is_notification = "id" not in message
        raw_id = message.get("id")
        request_id = raw_id if _is_valid_id(raw_id) else None

        try:
            envelope = JsonRpcRequest.model_validate(
                {key: value for key, value in message.items() if key != "params"}
            )
        except ValidationError:
            logger.warning("mcp.request.invalid", request_id=request_id)
            return error_response(request_id, ProtocolException.invalid_request())

        method = envelope.method
        params = message.get("params")
        if params is None:
            params = {}
        elif not isinstance(params, dict):
            if is_notification:
                logger.warning("mcp.notification.invalid_params", method=method)
                return None
            return error_response(
                request_id,
                ProtocolException.invalid_params("Invalid params: params must be an object", method=method),
            )

        if is_notification:
            self._notify(method, params)
            return None
        return self._call(method, params, request_id)

    def _notify(self, method: str, params: dict[str, Any]) -> None:
        try:
            self.dispatcher.handle_notification(method, params)
        except Exception as e:
            logger.exception("mcp.notification.failed", method=method, error=str(e))

    def _call(self, method: str, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        logger.debug("mcp.request.received", method=method, request_id=request_id)
        try:
            result = self.dispatcher.dispatch(method, params, request_id)
        except ProtocolException as e:
            logger.info(
                "mcp.request.failed",
                method=method,
                request_id=request_id,
                code=e.code,
                error=e.message,
            )
            return error_response(request_id, e)
        except Exception as e:
            logger.exception("mcp.request.error", method=method, request_id=request_id)
            data = {"exception_type": type(e).__name__, "message": str(e)} if self.debug else None
            return error_response(request_id, ProtocolException.internal_error(data=data))

        logger.debug("mcp.request.completed", method=method, request_id=request_id)
        return success_response(request_id, result)
