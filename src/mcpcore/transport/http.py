"""HTTP transport: a FastAPI app exposing the dispatch core.

Endpoints:
    POST /mcp    JSON-RPC request or batch; 200 with the JSON response, or
                 202 with an empty body when nothing is answered
                 (notifications)
    GET /health  Liveness probe, always {"status": "ok"}

The dispatch core is synchronous, so each request runs in the threadpool.

Example:
    >>> from mcpcore.jsonrpc import JsonRpcHandler
    >>> from mcpcore.registry import ComponentRegistry
    >>> app = create_app(JsonRpcHandler.for_registry(ComponentRegistry()))
    >>> # uvicorn.run(app, host="127.0.0.1", port=8000)
"""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from mcpcore import __version__
from mcpcore.jsonrpc import JsonRpcHandler
from mcpcore.observability import get_logger

logger = get_logger(__name__)

MCP_PATH = "/mcp"

# Maximum accepted request body (bytes)
DEFAULT_MAX_REQUEST_SIZE = 10 * 1024 * 1024


def _check_request_size(request: Request, body: bytes, max_size: int) -> None:
    """Reject bodies over ``max_size`` with 413, by Content-Length and by actual size."""
    content_length = request.headers.get("content-length")
    size = len(body)
    if content_length and content_length.isdigit():
        size = max(size, int(content_length))
    if size > max_size:
        logger.warning("mcp.request.size_exceeded", size=size, max_size=max_size)
        raise HTTPException(
            status_code=413,
            detail=f"Request size ({size} bytes) exceeds maximum ({max_size} bytes)",
        )


def create_app(
    handler: JsonRpcHandler,
    max_request_size: int = DEFAULT_MAX_REQUEST_SIZE,
) -> FastAPI:
    """Create a FastAPI application serving ``handler``.

    Args:
        handler: JSON-RPC handler wrapping the Dispatcher
        max_request_size: Maximum request body in bytes

    Returns:
        Configured FastAPI application
    """
    config = handler.dispatcher.config
    docs_url = "/docs" if handler.debug else None

    app = FastAPI(
        title=config.title or config.name,
        description=config.description or "MCP server",
        version=__version__,
        docs_url=docs_url,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_url else None,
    )
    app.state.jsonrpc_handler = handler
    app.state.max_request_size = max_request_size

    @app.get("/health")
    async def health() -> JSONResponse:
        """Liveness probe: always OK if the process is running."""
        return JSONResponse(status_code=200, content={"status": "ok"})

    @app.post(MCP_PATH)
    async def handle_mcp(request: Request) -> Response:
        """Process one JSON-RPC payload."""
        body = await request.body()
        _check_request_size(request, body, max_request_size)
        response = await run_in_threadpool(handler.process_request, body)
        if response is None:
            return Response(status_code=202)
        return Response(content=response, status_code=200, media_type="application/json")

    logger.info("mcp.transport.http.created", path=MCP_PATH, server=config.name)
    return app
