"""MCP stdio transport.

Reads one JSON-RPC request per line from stdin and writes one response per
line to stdout. Requests are handled strictly in order, so responses come
back in the order the requests arrived.

Usage in Claude Desktop config:
{
  "mcpServers": {
    "42-api": {
      "command": "fortytwo-mcp",
      "args": ["--stdio"],
      "env": {"42_CLIENT_ID": "...", "42_CLIENT_SECRET": "..."}
    }
  }
}
"""

import asyncio
import json
import sys
from typing import Any, Callable, Dict, Optional, TextIO

from mcp.types import INTERNAL_ERROR, INVALID_REQUEST

from services.dispatcher import Dispatcher, error_response
from utils.logging_ import logger


def is_notification(message: Any) -> bool:
    return (
        isinstance(message, dict)
        and "id" not in message
        and str(message.get("method", "")).startswith("notifications/")
    )


async def handle_line(dispatcher: Dispatcher, line: str) -> Optional[Dict[str, Any]]:
    """Turn one input line into a response, or None when nothing is owed."""
    line = line.strip()
    if not line:
        return None

    try:
        message = json.loads(line)
    except (ValueError, RecursionError):
        logger.warning(f"Invalid JSON: {line[:100]}")
        return error_response(None, INVALID_REQUEST, "Invalid Request")

    if is_notification(message):
        logger.debug(f"Notification received: {message.get('method')}")
        return None

    return await dispatcher.dispatch(message)


def line_reader(stdin: TextIO) -> Callable[[], str]:
    """Read raw bytes where possible so undecodable input becomes a bad line, not a crash."""
    buffer = getattr(stdin, "buffer", None)
    if buffer is None:
        return stdin.readline

    def readline() -> str:
        return buffer.readline().decode("utf-8", errors="replace")

    return readline


async def serve(dispatcher: Dispatcher, stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout):
    """Serve until stdin reaches EOF."""
    loop = asyncio.get_running_loop()
    readline = line_reader(stdin)
    logger.info("MCP server ready (stdio)")
    while True:
        line = await loop.run_in_executor(None, readline)
        if not line:
            break
        try:
            response = await handle_line(dispatcher, line)
        except Exception as e:
            logger.exception(f"Error handling stdin line: {e}")
            response = error_response(None, INTERNAL_ERROR, "Internal error")
        if response is not None:
            stdout.write(json.dumps(response, ensure_ascii=False) + "\n")
            stdout.flush()
    logger.info("stdin closed, stopping stdio transport")
