"""Transports carrying JSON-RPC messages to the dispatch core.

- ``stdio``: newline-delimited messages over stdin/stdout
- ``http``: FastAPI app with ``POST /mcp``
"""

from mcpcore.transport.http import create_app
from mcpcore.transport.stdio import StdioTransport, run_stdio

__all__ = ["StdioTransport", "create_app", "run_stdio"]
