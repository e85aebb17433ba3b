"""Tool and resource registry.

Registration happens once at startup through the ``tool`` and ``resource``
decorators; afterwards the catalog is only read. Each tool's pydantic input
model is the one source for both its advertised JSON Schema and the runtime
validation of tools/call arguments.
"""

import re
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from utils.errors import ValidationError

ToolHandler = Callable[[BaseModel], Awaitable[str]]
ResourceHandler = Callable[[Dict[str, str]], Awaitable[str]]

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def _clean_schema(node: Any) -> Any:
    """Strip pydantic noise so the schema reads like a hand-written one."""
    if isinstance(node, list):
        return [_clean_schema(item) for item in node]
    if not isinstance(node, dict):
        return node

    node = dict(node)
    node.pop("title", None)
    if isinstance(node.get("properties"), dict):
        node["properties"] = {k: _clean_schema(v) for k, v in node["properties"].items()}

    # Optional[X] -> X, the field simply isn't required
    variants = node.get("anyOf")
    if isinstance(variants, list):
        non_null = [v for v in variants if v != {"type": "null"}]
        if len(non_null) == 1 and len(non_null) < len(variants):
            node.pop("anyOf")
            for key, value in non_null[0].items():
                node.setdefault(key, value)
            if node.get("default", ...) is None:
                node.pop("default")

    for key in ("items", "anyOf", "allOf", "oneOf"):
        if key in node:
            node[key] = _clean_schema(node[key])
    return node


class ToolDefinition:
    __slots__ = ("name", "title", "description", "input_model", "handler")

    def __init__(
        self,
        name: str,
        input_model: Type[BaseModel],
        handler: ToolHandler,
        title: str = "",
        description: str = "",
    ):
        self.name = name
        self.title = title
        self.description = description
        self.input_model = input_model
        self.handler = handler

    def input_schema(self) -> Dict[str, Any]:
        schema = _clean_schema(self.input_model.model_json_schema(by_alias=True))
        schema.setdefault("properties", {})
        return schema

    def validate(self, arguments: Optional[Dict[str, Any]]) -> BaseModel:
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise ValidationError(f"{self.name}: arguments must be an object")
        try:
            return self.input_model.model_validate(arguments)
        except PydanticValidationError as e:
            raise ValidationError(f"{self.name}: invalid arguments", errors=e.errors()) from e

    async def invoke(self, arguments: Optional[Dict[str, Any]]) -> str:
        return await self.handler(self.validate(arguments))


class ResourceDefinition:
    __slots__ = ("uri_pattern", "name", "title", "description", "mime_type", "handler", "_regex")

    def __init__(
        self,
        uri_pattern: str,
        handler: ResourceHandler,
        name: str,
        title: str = "",
        description: str = "",
        mime_type: str = "application/json",
    ):
        self.uri_pattern = uri_pattern
        self.name = name
        self.title = title
        self.description = description
        self.mime_type = mime_type
        self.handler = handler
        self._regex = self._compile(uri_pattern) if self.is_template else None

    @property
    def is_template(self) -> bool:
        return bool(_PLACEHOLDER.search(self.uri_pattern))

    @staticmethod
    def _compile(pattern: str) -> "re.Pattern[str]":
        parts = []
        last = 0
        for m in _PLACEHOLDER.finditer(pattern):
            parts.append(re.escape(pattern[last:m.start()]))
            parts.append(f"(?P<{m.group(1)}>[^/]+)")
            last = m.end()
        parts.append(re.escape(pattern[last:]))
        return re.compile("".join(parts))

    def match(self, uri: str) -> Optional[Dict[str, str]]:
        if self._regex is None:
            return {} if uri == self.uri_pattern else None
        m = self._regex.fullmatch(uri)
        return m.groupdict() if m else None


class Catalog:
    def __init__(self):
        self._tools: Dict[str, ToolDefinition] = {}
        self._resources: List[ResourceDefinition] = []

    # --- Registration ---

    def add_tool(self, definition: ToolDefinition):
        if definition.name in self._tools:
            raise ValueError(f"Tool already registered: {definition.name}")
        self._tools[definition.name] = definition

    def add_resource(self, definition: ResourceDefinition):
        if any(r.uri_pattern == definition.uri_pattern for r in self._resources):
            raise ValueError(f"Resource already registered: {definition.uri_pattern}")
        self._resources.append(definition)

    def tool(self, name: str, input_model: Type[BaseModel], title: str = "", description: str = ""):
        """Decorator registering an async handler as a tool."""
        def decorator(func: ToolHandler) -> ToolHandler:
            self.add_tool(ToolDefinition(name, input_model, func, title=title, description=description))
            return func
        return decorator

    def resource(
        self,
        uri_pattern: str,
        name: str,
        title: str = "",
        description: str = "",
        mime_type: str = "application/json",
    ):
        """Decorator registering an async handler as a static or templated resource."""
        def decorator(func: ResourceHandler) -> ResourceHandler:
            self.add_resource(ResourceDefinition(
                uri_pattern, func, name=name, title=title, description=description, mime_type=mime_type,
            ))
            return func
        return decorator

    # --- Lookup ---

    def list_tools(self) -> List[ToolDefinition]:
        return list(self._tools.values())

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def list_resources(self) -> List[ResourceDefinition]:
        """Static resources only; templates need an identifier nobody knows in advance."""
        return [r for r in self._resources if not r.is_template]

    def list_resource_templates(self) -> List[ResourceDefinition]:
        return [r for r in self._resources if r.is_template]

    def resolve_resource(self, uri: str) -> Optional[Tuple[ResourceDefinition, Dict[str, str]]]:
        for resource in self.list_resources():
            if resource.uri_pattern == uri:
                return resource, {}
        for resource in self.list_resource_templates():
            variables = resource.match(uri)
            if variables is not None:
                return resource, variables
        return None
