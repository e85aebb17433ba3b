"""Command-line entrypoint: pick a transport and serve."""

import argparse
import asyncio
import sys

import uvicorn

import config
from utils.errors import ConfigError
from utils.logging_ import logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fortytwo-mcp",
        description="MCP server exposing the 42 intranet API to LLM agents.",
    )
    transport = parser.add_mutually_exclusive_group()
    transport.add_argument("--stdio", dest="transport", action="store_const", const="stdio",
                           help="Serve MCP over stdin/stdout (default)")
    transport.add_argument("--http", dest="transport", action="store_const", const="http",
                           help="Serve MCP over HTTP POST")
    parser.set_defaults(transport="stdio")
    parser.add_argument("--host", default=config.HOST, help="HTTP bind address")
    parser.add_argument("--port", type=int, default=config.PORT, help="HTTP port (env: PORT)")
    return parser


async def _run_stdio(client_id: str, client_secret: str):
    from mcp_bridge import serve
    from services.api_client import build_api_client
    from services.dispatcher import build_dispatcher

    api = build_api_client(client_id, client_secret)
    dispatcher = build_dispatcher(api)
    dispatcher.enable_resource_reads()
    logger.info(f"Available tools: {', '.join(t.name for t in dispatcher.catalog.list_tools())}")
    try:
        await serve(dispatcher)
    finally:
        await api.aclose()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        client_id, client_secret = config.load_credentials()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.transport == "http":
        from main import create_app

        logger.info("Starting HTTP server...")
        uvicorn.run(create_app(), host=args.host, port=args.port, log_level=config.LOG_LEVEL.lower())
    else:
        asyncio.run(_run_stdio(client_id, client_secret))
    return 0


if __name__ == "__main__":
    sys.exit(main())
