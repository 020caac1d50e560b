"""Newline-delimited JSON-RPC over stdin/stdout.

One JSON-RPC message (or batch) per line on stdin, one response per line on
stdout. A blank line or EOF ends the session. Notifications produce no
output. Logs go to stderr so they never interleave with responses.
"""

from __future__ import annotations

import asyncio
import io
import sys

from mcpcore.jsonrpc import JsonRpcHandler
from mcpcore.observability import get_logger

logger = get_logger(__name__)

# Lines read ahead of the one being processed
QUEUE_SIZE = 128


class StdioTransport:
    """Serve a JsonRpcHandler over stdio.

    Requests are processed sequentially: a slow tool call delays every
    request queued behind it.
    """

    def __init__(
        self,
        handler: JsonRpcHandler,
        stdin: io.TextIOBase | None = None,
        stdout: io.TextIOBase | None = None,
    ) -> None:
        self.handler = handler
        self._stdin = stdin
        self._stdout = stdout

    def _read_line(self) -> str | None:
        stdin = self._stdin if self._stdin is not None else sys.stdin
        try:
            line = stdin.readline()
        except (EOFError, OSError) as e:
            logger.debug("mcp.transport.closed", reason=str(e))
            return None
        line = line.rstrip("\r\n")
        return line or None

    def _write_line(self, line: str) -> None:
        stdout = self._stdout if self._stdout is not None else sys.stdout
        stdout.write(line + "\n")
        stdout.flush()

    async def serve(self) -> None:
        """Run until stdin closes or a blank line arrives."""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=QUEUE_SIZE)

        async def producer() -> None:
            while True:
                line = await loop.run_in_executor(None, self._read_line)
                await queue.put(line)
                if line is None:
                    break

        async def consumer() -> None:
            while True:
                line = await queue.get()
                if line is None:
                    break
                response = self.handler.process_request(line)
                if response is not None:
                    self._write_line(response)

        logger.info("mcp.transport.stdio.started")
        await asyncio.gather(producer(), consumer())
        logger.info("mcp.transport.stdio.stopped")


def run_stdio(
    handler: JsonRpcHandler,
    stdin: io.TextIOBase | None = None,
    stdout: io.TextIOBase | None = None,
) -> None:
    """Blocking entry point: serve ``handler`` over stdio until EOF."""
    asyncio.run(StdioTransport(handler, stdin, stdout).serve())
