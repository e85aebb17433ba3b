"""JSON-RPC dispatcher for the MCP methods the gateway serves.

Each envelope is handled on its own: validate, route through the method
table, wrap the outcome. Nothing raised while routing escapes ``dispatch``;
failures become JSON-RPC error objects and internal detail stays in the log.
"""

from typing import Any, Awaitable, Callable, Dict, Optional, Union

from mcp.types import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    INVALID_PARAMS,
    ErrorData,
    Implementation,
    TextContent,
    Tool,
)
from pydantic import ValidationError as PydanticValidationError

from config import PROTOCOL_VERSION, SERVER_NAME, SERVER_VERSION
from models import JsonRpcRequest
from routers.resources import register_resources
from routers.tools import register_tools
from services.api_client import ApiClient
from services.catalog import Catalog
from utils.errors import MethodNotFound, ProtocolError, ValidationError
from utils.logging_ import logger

MethodHandler = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]
RequestId = Optional[Union[int, str]]


def result_response(request_id: RequestId, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "result": result, "id": request_id}


def error_response(request_id: RequestId, code: int, message: str) -> Dict[str, Any]:
    error = ErrorData(code=code, message=message).model_dump(exclude_none=True)
    return {"jsonrpc": "2.0", "error": error, "id": request_id}


def echo_id(message: Any) -> RequestId:
    """The request id if it is usable, else None."""
    if not isinstance(message, dict):
        return None
    request_id = message.get("id")
    if isinstance(request_id, float) and request_id.is_integer():
        return int(request_id)
    if isinstance(request_id, bool) or not isinstance(request_id, (int, str)):
        return None
    return request_id


class Dispatcher:
    def __init__(
        self,
        catalog: Catalog,
        server_name: str = SERVER_NAME,
        server_version: str = SERVER_VERSION,
    ):
        self.catalog = catalog
        self.server_info = Implementation(name=server_name, version=server_version)
        self._methods: Dict[str, MethodHandler] = {
            "initialize": self.initialize,
            "tools/list": self.list_tools,
            "tools/call": self.call_tool,
            "resources/list": self.list_resources,
        }

    @property
    def methods(self):
        return tuple(self._methods)

    def register_method(self, name: str, handler: MethodHandler):
        if name in self._methods:
            raise ValueError(f"Method already registered: {name}")
        self._methods[name] = handler

    def enable_resource_reads(self):
        """Serve resources/read, resources/templates/list and ping."""
        self.register_method("resources/read", self.read_resource)
        self.register_method("resources/templates/list", self.list_resource_templates)
        self.register_method("ping", self.ping)

    # --- Request lifecycle ---

    async def dispatch(self, message: Any) -> Dict[str, Any]:
        request_id = echo_id(message)

        if not isinstance(message, dict) or message.get("jsonrpc") != "2.0":
            return error_response(request_id, INVALID_REQUEST, "Invalid Request")

        try:
            request = JsonRpcRequest.model_validate(message)
        except PydanticValidationError:
            return error_response(request_id, INVALID_REQUEST, "Invalid Request")

        try:
            handler = self._methods.get(request.method)
            if handler is None:
                raise MethodNotFound()
            result = await handler(request.params or {})
            return result_response(request_id, result)
        except ProtocolError as e:
            logger.info(f"{request.method}: {e.message} (code {e.code})")
            return error_response(request_id, e.code, e.message)
        except ValidationError as e:
            logger.warning(f"{request.method}: {e} {e.errors}")
            return error_response(request_id, INVALID_PARAMS, "Invalid params")
        except Exception as e:
            logger.exception(f"Error processing request {request.method}: {e}")
            return error_response(request_id, INTERNAL_ERROR, "Internal error")

    # --- Core methods ---

    async def initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {
                "tools": {"listChanged": True},
                "resources": {"subscribe": False, "listChanged": False},
            },
            "serverInfo": self.server_info.model_dump(exclude_none=True),
        }

    async def list_tools(self, params: Dict[str, Any]) -> Dict[str, Any]:
        tools = [
            Tool(
                name=t.name,
                title=t.title or None,
                description=t.description,
                inputSchema=t.input_schema(),
            ).model_dump(by_alias=True, exclude_none=True)
            for t in self.catalog.list_tools()
        ]
        return {"tools": tools}

    async def call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str):
            raise ValidationError("tools/call: missing tool name")
        tool = self.catalog.get_tool(name)
        if tool is None:
            raise MethodNotFound()

        logger.info(f"tools/call: {name}")
        text = await tool.invoke(params.get("arguments"))
        content = TextContent(type="text", text=text).model_dump(by_alias=True, exclude_none=True)
        return {"content": [content]}

    async def list_resources(self, params: Dict[str, Any]) -> Dict[str, Any]:
        resources = [
            {
                "uri": r.uri_pattern,
                "name": r.title or r.name,
                "description": r.description,
                "mimeType": r.mime_type,
            }
            for r in self.catalog.list_resources()
        ]
        return {"resources": resources}

    # --- Extended methods ---

    async def list_resource_templates(self, params: Dict[str, Any]) -> Dict[str, Any]:
        templates = [
            {
                "uriTemplate": r.uri_pattern,
                "name": r.title or r.name,
                "description": r.description,
                "mimeType": r.mime_type,
            }
            for r in self.catalog.list_resource_templates()
        ]
        return {"resourceTemplates": templates}

    async def read_resource(self, params: Dict[str, Any]) -> Dict[str, Any]:
        uri = params.get("uri")
        if not isinstance(uri, str):
            raise ValidationError("resources/read: missing uri")
        resolved = self.catalog.resolve_resource(uri)
        if resolved is None:
            raise ValidationError(f"resources/read: unknown resource {uri}")

        resource, variables = resolved
        logger.info(f"resources/read: {uri}")
        text = await resource.handler(variables)
        return {"contents": [{"uri": uri, "mimeType": resource.mime_type, "text": text}]}

    async def ping(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {}


def build_catalog(api: ApiClient) -> Catalog:
    catalog = Catalog()
    register_tools(catalog, api)
    register_resources(catalog, api)
    return catalog


def build_dispatcher(api: ApiClient) -> Dispatcher:
    return Dispatcher(build_catalog(api))
