"""In-process tests for StdioTransport with injected stdin/stdout."""

from __future__ import annotations

import io
import json

import pytest

from mcpcore.jsonrpc import JsonRpcHandler
from mcpcore.registry import ComponentRegistry
from mcpcore.transport.stdio import StdioTransport, run_stdio


class _StdinRaisesEOF(io.TextIOBase):
    """TextIO that raises EOFError on readline."""

    def readline(self, size: int = -1) -> str:  # type: ignore[override]
        raise EOFError()


@pytest.fixture
def handler() -> JsonRpcHandler:
    registry = ComponentRegistry()
    registry.register_tool("echo", lambda arguments: arguments.get("text", ""))
    return JsonRpcHandler.for_registry(registry)


def _lines(stdout: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stdout.getvalue().splitlines()]


@pytest.mark.asyncio
async def test_ping_request_returns_response(handler: JsonRpcHandler) -> None:
    """A single ping request writes one JSON-RPC response line."""
    stdin = io.StringIO('{"jsonrpc":"2.0","id":1,"method":"ping"}\n')
    stdout = io.StringIO()
    await StdioTransport(handler, stdin, stdout).serve()
    assert stdout.getvalue() == '{"jsonrpc":"2.0","result":{},"id":1}\n'


@pytest.mark.asyncio
async def test_responses_keep_request_order(handler: JsonRpcHandler) -> None:
    """Requests are answered one line each, in arrival order."""
    stdin = io.StringIO(
        '{"jsonrpc":"2.0","id":1,"method":"tools/list"}\n'
        '{"jsonrpc":"2.0","id":2,"method":"tools/call","params":{"name":"echo","arguments":{"text":"hi"}}}\n'
        '{"jsonrpc":"2.0","id":3,"method":"ping"}\n'
    )
    stdout = io.StringIO()
    await StdioTransport(handler, stdin, stdout).serve()
    responses = _lines(stdout)
    assert [response["id"] for response in responses] == [1, 2, 3]
    assert responses[1]["result"]["content"] == [{"type": "text", "text": "hi"}]


@pytest.mark.asyncio
async def test_notification_writes_nothing(handler: JsonRpcHandler) -> None:
    """A notification (no id) does not produce a response line."""
    stdin = io.StringIO('{"jsonrpc":"2.0","method":"notifications/initialized"}\n')
    stdout = io.StringIO()
    await StdioTransport(handler, stdin, stdout).serve()
    assert stdout.getvalue() == ""


@pytest.mark.asyncio
async def test_invalid_json_returns_parse_error_and_stays_alive(handler: JsonRpcHandler) -> None:
    """An unparseable line answers -32700 and later lines are still served."""
    stdin = io.StringIO('not json\n{"jsonrpc":"2.0","id":2,"method":"ping"}\n')
    stdout = io.StringIO()
    await StdioTransport(handler, stdin, stdout).serve()
    first, second = _lines(stdout)
    assert first["error"] == {"code": -32700, "message": "Parse error"}
    assert first["id"] is None
    assert second == {"jsonrpc": "2.0", "result": {}, "id": 2}


@pytest.mark.asyncio
async def test_batch_line_returns_array(handler: JsonRpcHandler) -> None:
    """A JSON array line is answered with a JSON array line."""
    stdin = io.StringIO(
        '[{"jsonrpc":"2.0","id":1,"method":"ping"},{"jsonrpc":"2.0","id":2,"method":"ping"}]\n'
    )
    stdout = io.StringIO()
    await StdioTransport(handler, stdin, stdout).serve()
    (response,) = _lines(stdout)
    assert [item["id"] for item in response] == [1, 2]


@pytest.mark.asyncio
async def test_blank_line_stops_serving(handler: JsonRpcHandler) -> None:
    """Lines after a blank line are not processed."""
    stdin = io.StringIO('\n{"jsonrpc":"2.0","id":1,"method":"ping"}\n')
    stdout = io.StringIO()
    await StdioTransport(handler, stdin, stdout).serve()
    assert stdout.getvalue() == ""


@pytest.mark.asyncio
async def test_crlf_line_endings(handler: JsonRpcHandler) -> None:
    stdin = io.StringIO('{"jsonrpc":"2.0","id":"a","method":"ping"}\r\n')
    stdout = io.StringIO()
    await StdioTransport(handler, stdin, stdout).serve()
    assert _lines(stdout) == [{"jsonrpc": "2.0", "result": {}, "id": "a"}]


@pytest.mark.asyncio
async def test_eof_error_stops_serving(handler: JsonRpcHandler) -> None:
    """EOFError from stdin ends the session cleanly."""
    stdout = io.StringIO()
    await StdioTransport(handler, _StdinRaisesEOF(), stdout).serve()
    assert stdout.getvalue() == ""


def test_run_stdio_blocks_until_eof(handler: JsonRpcHandler) -> None:
    """run_stdio drives the event loop itself."""
    stdin = io.StringIO('{"jsonrpc":"2.0","id":1,"method":"ping"}\n')
    stdout = io.StringIO()
    run_stdio(handler, stdin, stdout)
    assert _lines(stdout) == [{"jsonrpc": "2.0", "result": {}, "id": 1}]
