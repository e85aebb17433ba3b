"""42 API MCP gateway, HTTP transport.

FastAPI application exposing a single JSON-RPC endpoint (``POST /``) and an
unauthenticated liveness probe (``GET /health``). JSON-RPC level failures are
encoded in the response envelope with HTTP 200; only transport failures
(unparseable body, errors before dispatch) use HTTP 500.
"""

import json
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from mcp.types import INTERNAL_ERROR, INVALID_REQUEST

from config import HOST, PORT, SERVER_NAME, SERVER_VERSION, load_credentials
from models import HealthResponse
from services.api_client import build_api_client
from services.dispatcher import Dispatcher, build_dispatcher, echo_id, error_response
from utils.logging_ import logger


def create_app(dispatcher: Optional[Dispatcher] = None) -> FastAPI:
    """Build the app; without a dispatcher one is wired from the environment at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        api = None
        if app.state.dispatcher is None:
            client_id, client_secret = load_credentials()
            api = build_api_client(client_id, client_secret)
            app.state.dispatcher = build_dispatcher(api)

        logger.info("=" * 60)
        logger.info(f"{SERVER_NAME} v{SERVER_VERSION} starting up (HTTP)")
        logger.info(f"  MCP endpoint: http://{HOST}:{PORT}/")
        logger.info(f"  Health check: http://{HOST}:{PORT}/health")
        logger.info(f"  Methods: {', '.join(app.state.dispatcher.methods)}")
        logger.info("=" * 60)

        yield

        logger.info(f"{SERVER_NAME} shutting down...")
        if api is not None:
            await api.aclose()

    app = FastAPI(
        title="42 API MCP Gateway",
        description="Expose 42 Intranet data as MCP resources and tools",
        version=SERVER_VERSION,
        lifespan=lifespan,
    )
    app.state.dispatcher = dispatcher

    # CORS for editor-hosted MCP clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.post("/")
    async def mcp_endpoint(request: Request):
        """Main MCP endpoint: one JSON-RPC envelope in, one out."""
        raw = await request.body()
        try:
            message = json.loads(raw)
        except (ValueError, RecursionError):
            logger.warning(f"Malformed request body: {raw[:100]!r}")
            return JSONResponse(error_response(None, INVALID_REQUEST, "Invalid Request"), status_code=500)

        logger.debug(f"Received MCP request: {message}")
        try:
            response = await request.app.state.dispatcher.dispatch(message)
        except Exception as e:
            logger.exception(f"Error handling request: {e}")
            return JSONResponse(
                error_response(echo_id(message), INTERNAL_ERROR, "Internal error"),
                status_code=500,
            )

        logger.debug(f"Sending response: {response}")
        return JSONResponse(response)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """Liveness only; does not touch the token cache or the 42 API."""
        return HealthResponse(status="healthy", server=SERVER_NAME, version=SERVER_VERSION)

    return app
