"""Error taxonomy for the gateway.

Every failure a request can hit maps onto one of these. The dispatcher turns
them into JSON-RPC error objects; only ConfigError is fatal.
"""

from typing import Any, List, Optional

from mcp.types import METHOD_NOT_FOUND


class GatewayError(Exception):
    """Base class for gateway errors."""


class ConfigError(GatewayError):
    """Required configuration is missing at startup."""


class AuthError(GatewayError):
    """The OAuth client-credentials exchange failed."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(message)


class UpstreamError(GatewayError):
    """The REST API answered with a non-2xx status or could not be reached."""

    def __init__(self, status: Optional[int], body: str = "", path: str = ""):
        self.status = status
        self.body = body
        self.path = path
        if status is None:
            message = f"42 API request to {path} failed: {body}"
        else:
            message = f"42 API error: {status} {body}"
        super().__init__(message)


class ValidationError(GatewayError):
    """Tool arguments did not satisfy the tool's input schema."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        self.errors = errors or []
        super().__init__(message)


class ProtocolError(GatewayError):
    """A JSON-RPC level failure that carries its own error code."""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class MethodNotFound(ProtocolError):
    def __init__(self, message: str = "Method not found"):
        super().__init__(METHOD_NOT_FOUND, message)
