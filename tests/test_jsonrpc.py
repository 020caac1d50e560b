"""Tests for JSON-RPC 2.0 envelope handling."""

from __future__ import annotations

import json
from typing import Any

import pytest

from mcpcore.config import ServerConfig
from mcpcore.dispatcher import Dispatcher
from mcpcore.errors import ProtocolException
from mcpcore.jsonrpc import (
    INVALID_PARAMS,
    JsonRpcError,
    JsonRpcHandler,
    JsonRpcRequest,
    error_response,
    success_response,
)
from mcpcore.registry import ComponentRegistry


def _send(rpc: JsonRpcHandler, message: Any) -> Any:
    raw = rpc.process_request(json.dumps(message))
    return None if raw is None else json.loads(raw)


def _request(method: str, request_id: Any = 1, **extra: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "method": method, "id": request_id, **extra}


class TestModels:
    """Envelope models and response builders."""

    def test_error_from_code(self) -> None:
        error = JsonRpcError.from_code(INVALID_PARAMS, data={"field": "name"})
        assert (error.code, error.message, error.data) == (-32602, "Invalid params", {"field": "name"})

    def test_error_from_unknown_code(self) -> None:
        assert JsonRpcError.from_code(-1).message == "Unknown error"

    def test_request_requires_version(self) -> None:
        request = JsonRpcRequest(jsonrpc="2.0", method="ping", id="a")
        assert request.id == "a"

    def test_success_response(self) -> None:
        assert success_response(3, {"ok": True}) == {"jsonrpc": "2.0", "result": {"ok": True}, "id": 3}

    def test_error_response_drops_empty_data(self) -> None:
        assert error_response(3, ProtocolException.method_not_found("Tool not found: x")) == {
            "jsonrpc": "2.0",
            "error": {"code": -32601, "message": "Tool not found: x"},
            "id": 3,
        }

    def test_error_response_keeps_data(self) -> None:
        response = error_response(None, JsonRpcError(code=-32602, message="bad", data=[1]))
        assert response["error"]["data"] == [1]
        assert response["id"] is None


class TestProcessRequest:
    """Single messages."""

    def test_ping_wire_format(self, rpc: JsonRpcHandler) -> None:
        raw = rpc.process_request('{"jsonrpc":"2.0","method":"ping","id":1}')
        assert raw == '{"jsonrpc":"2.0","result":{},"id":1}'

    def test_bytes_input(self, rpc: JsonRpcHandler) -> None:
        raw = rpc.process_request(b'{"jsonrpc":"2.0","method":"ping","id":"abc"}')
        assert json.loads(raw or "") == {"jsonrpc": "2.0", "result": {}, "id": "abc"}

    def test_explicit_null_id_is_answered(self, rpc: JsonRpcHandler) -> None:
        assert _send(rpc, _request("ping", None)) == {"jsonrpc": "2.0", "result": {}, "id": None}

    def test_protocol_error_echoes_id(self, rpc: JsonRpcHandler) -> None:
        response = _send(rpc, _request("tools/call", "req-7", params={"name": "ghost"}))
        assert response == {
            "jsonrpc": "2.0",
            "error": {"code": -32601, "message": "Tool not found: ghost"},
            "id": "req-7",
        }

    def test_unknown_method(self, rpc: JsonRpcHandler) -> None:
        response = _send(rpc, _request("no/such", 2))
        assert response["error"] == {"code": -32601, "message": "Method not found: no/such"}
        assert response["id"] == 2

    def test_non_ascii_is_not_escaped(self, rpc: JsonRpcHandler, registry: ComponentRegistry) -> None:
        registry.register_tool("greet", lambda arguments: "héllo wörld")
        raw = rpc.process_request(json.dumps(_request("tools/call", params={"name": "greet"})))
        assert "héllo wörld" in (raw or "")

    def test_missing_params_default_to_empty(self, rpc: JsonRpcHandler) -> None:
        assert _send(rpc, _request("tools/list", 1))["result"] == {"tools": []}

    def test_null_params(self, rpc: JsonRpcHandler) -> None:
        assert _send(rpc, _request("tools/list", 1, params=None))["result"] == {"tools": []}


class TestInvalidMessages:
    """Parse errors and malformed envelopes."""

    def test_parse_error(self, rpc: JsonRpcHandler) -> None:
        assert json.loads(rpc.process_request("{not json") or "") == {
            "jsonrpc": "2.0",
            "error": {"code": -32700, "message": "Parse error"},
            "id": None,
        }

    def test_parse_error_details_in_debug(self, registry: ComponentRegistry) -> None:
        rpc = JsonRpcHandler(Dispatcher(registry), debug=True)
        response = json.loads(rpc.process_request("{not json") or "")
        assert response["error"]["code"] == -32700
        assert response["error"]["data"]

    def test_undecodable_bytes(self, rpc: JsonRpcHandler) -> None:
        response = json.loads(rpc.process_request(b"\xff\xfe\x00") or "")
        assert response["error"]["code"] == -32700

    @pytest.mark.parametrize("payload", [5, "ping", None, True])
    def test_non_object(self, rpc: JsonRpcHandler, payload: Any) -> None:
        assert _send(rpc, payload) == {
            "jsonrpc": "2.0",
            "error": {"code": -32600, "message": "Invalid Request"},
            "id": None,
        }

    @pytest.mark.parametrize(
        "message",
        [
            {"method": "ping", "id": 4},
            {"jsonrpc": "1.0", "method": "ping", "id": 4},
            {"jsonrpc": "2.0", "id": 4},
            {"jsonrpc": "2.0", "method": "", "id": 4},
            {"jsonrpc": "2.0", "method": 12, "id": 4},
        ],
    )
    def test_bad_envelope_echoes_valid_id(self, rpc: JsonRpcHandler, message: dict[str, Any]) -> None:
        response = _send(rpc, message)
        assert response["error"]["code"] == -32600
        assert response["id"] == 4

    @pytest.mark.parametrize("request_id", [True, 1.5, [1], {"a": 1}])
    def test_invalid_id_answers_null(self, rpc: JsonRpcHandler, request_id: Any) -> None:
        response = _send(rpc, _request("ping", request_id))
        assert response["error"]["code"] == -32600
        assert response["id"] is None

    @pytest.mark.parametrize("params", [[1, 2], "x", 3])
    def test_params_must_be_an_object(self, rpc: JsonRpcHandler, params: Any) -> None:
        response = _send(rpc, _request("tools/list", 9, params=params))
        assert response["error"] == {"code": -32602, "message": "Invalid params: params must be an object"}
        assert response["id"] == 9


class TestNotifications:
    """Messages without an id."""

    def test_no_response(self, rpc: JsonRpcHandler) -> None:
        assert rpc.process_request('{"jsonrpc":"2.0","method":"notifications/initialized"}') is None

    def test_unknown_notification_is_silent(self, rpc: JsonRpcHandler) -> None:
        assert _send(rpc, {"jsonrpc": "2.0", "method": "notifications/unknown"}) is None

    def test_notification_with_bad_params_is_silent(self, rpc: JsonRpcHandler) -> None:
        assert _send(rpc, {"jsonrpc": "2.0", "method": "notifications/x", "params": [1]}) is None

    def test_failing_notification_is_silent(
        self, rpc: JsonRpcHandler, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def explode(method: str, params: dict[str, Any]) -> None:
            raise RuntimeError("boom")

        monkeypatch.setattr(rpc.dispatcher, "handle_notification", explode)
        assert _send(rpc, {"jsonrpc": "2.0", "method": "notifications/initialized"}) is None

    def test_method_calls_are_not_run_as_requests(
        self, rpc: JsonRpcHandler, registry: ComponentRegistry
    ) -> None:
        calls: list[dict[str, Any]] = []
        registry.register_tool("spy", lambda arguments: calls.append(arguments))
        _send(rpc, {"jsonrpc": "2.0", "method": "tools/call", "params": {"name": "spy"}})
        assert calls == []


class TestBatches:
    """JSON arrays of messages."""

    def test_mixed_batch(self, rpc: JsonRpcHandler) -> None:
        response = _send(
            rpc,
            [
                _request("ping", 1),
                {"jsonrpc": "2.0", "method": "notifications/initialized"},
                _request("no/such", 2),
                7,
            ],
        )
        assert [item["id"] for item in response] == [1, 2, None]
        assert response[0]["result"] == {}
        assert response[1]["error"]["code"] == -32601
        assert response[2]["error"]["code"] == -32600

    def test_notifications_only(self, rpc: JsonRpcHandler) -> None:
        batch = [{"jsonrpc": "2.0", "method": "notifications/initialized"}] * 2
        assert _send(rpc, batch) is None

    def test_empty_batch(self, rpc: JsonRpcHandler) -> None:
        assert _send(rpc, []) == {
            "jsonrpc": "2.0",
            "error": {"code": -32600, "message": "Invalid Request"},
            "id": None,
        }


class TestInternalErrors:
    """Unexpected exceptions escaping the dispatcher."""

    @pytest.fixture
    def exploding(self, monkeypatch: pytest.MonkeyPatch) -> Any:
        def explode(method: str, params: dict[str, Any], request_id: Any = None) -> Any:
            raise RuntimeError("database unreachable")

        def install(rpc: JsonRpcHandler) -> JsonRpcHandler:
            monkeypatch.setattr(rpc.dispatcher, "dispatch", explode)
            return rpc

        return install

    def test_details_hidden(self, rpc: JsonRpcHandler, exploding: Any) -> None:
        response = _send(exploding(rpc), _request("ping", 5))
        assert response == {
            "jsonrpc": "2.0",
            "error": {"code": -32603, "message": "Internal error"},
            "id": 5,
        }

    def test_details_in_debug(self, registry: ComponentRegistry, exploding: Any) -> None:
        rpc = exploding(JsonRpcHandler(Dispatcher(registry), debug=True))
        response = _send(rpc, _request("ping", 5))
        assert response["error"]["data"] == {
            "exception_type": "RuntimeError",
            "message": "database unreachable",
        }

    def test_debug_follows_config(self, registry: ComponentRegistry) -> None:
        assert JsonRpcHandler(Dispatcher(registry, ServerConfig(debug=True))).debug is True
        assert JsonRpcHandler(Dispatcher(registry)).debug is False

    def test_debug_follows_environment(
        self, registry: ComponentRegistry, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MCPCORE_DEBUG", "1")
        assert JsonRpcHandler(Dispatcher(registry)).debug is True
