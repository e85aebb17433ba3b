import asyncio
from typing import Optional

import pytest
from pydantic import Field

from models import CursusLevelInput, SearchUsersInput, ToolInput
from services.catalog import Catalog
from utils.errors import ValidationError


class EchoInput(ToolInput):
    word: str = Field(..., min_length=1, description="Word to echo")
    times: int = Field(1, ge=1, le=3, description="Repetitions")
    suffix: Optional[str] = Field(None, description="Optional suffix")


def make_catalog():
    catalog = Catalog()

    @catalog.tool("echo", EchoInput, title="Echo", description="Echo a word")
    async def echo(args):
        return " ".join([args.word] * args.times) + (args.suffix or "")

    @catalog.tool("second", SearchUsersInput)
    async def second(args):
        return args.query

    @catalog.resource("x://item/{id}", name="item")
    async def item(variables):
        return f"item {variables['id']}"

    @catalog.resource("x://item/latest", name="latest")
    async def latest(variables):
        return "latest"

    @catalog.resource("x://item/{id}/{part}", name="item-part")
    async def item_part(variables):
        return f"{variables['id']}:{variables['part']}"

    @catalog.resource("x://{anything}/{id}", name="catch-all")
    async def catch_all(variables):
        return "catch-all"

    return catalog


def test_tools_listed_in_registration_order():
    assert [t.name for t in make_catalog().list_tools()] == ["echo", "second"]


def test_duplicate_tool_rejected():
    catalog = make_catalog()
    with pytest.raises(ValueError):
        @catalog.tool("echo", EchoInput)
        async def again(args):
            return ""


def test_get_tool_unknown_returns_none():
    assert make_catalog().get_tool("doesNotExist") is None


def test_list_resources_excludes_templates():
    catalog = make_catalog()
    assert [r.uri_pattern for r in catalog.list_resources()] == ["x://item/latest"]
    assert [r.name for r in catalog.list_resource_templates()] == ["item", "item-part", "catch-all"]


def test_static_uri_takes_precedence_over_template():
    resource, variables = make_catalog().resolve_resource("x://item/latest")
    assert resource.name == "latest"
    assert variables == {}


def test_first_matching_template_wins():
    catalog = make_catalog()
    resource, variables = catalog.resolve_resource("x://item/42")
    assert resource.name == "item"
    assert variables == {"id": "42"}

    resource, variables = catalog.resolve_resource("x://item/42/notes")
    assert resource.name == "item-part"
    assert variables == {"id": "42", "part": "notes"}

    resource, _ = catalog.resolve_resource("x://other/7")
    assert resource.name == "catch-all"


def test_unknown_uri_does_not_resolve():
    assert make_catalog().resolve_resource("y://item/1") is None
    assert make_catalog().resolve_resource("x://item/") is None


def test_input_schema_is_json_schema_shaped():
    schema = make_catalog().get_tool("echo").input_schema()
    assert schema == {
        "type": "object",
        "properties": {
            "word": {"type": "string", "minLength": 1, "description": "Word to echo"},
            "times": {"type": "integer", "default": 1, "minimum": 1, "maximum": 3,
                      "description": "Repetitions"},
            "suffix": {"type": "string", "description": "Optional suffix"},
        },
        "required": ["word"],
    }


def test_input_schema_uses_camel_case_names():
    catalog = Catalog()
    catalog.tool("getCursusLevel", CursusLevelInput)(lambda args: None)
    schema = catalog.get_tool("getCursusLevel").input_schema()
    assert set(schema["properties"]) == {"userId", "cursusId"}
    assert schema["properties"]["cursusId"]["default"] == 21
    assert schema["required"] == ["userId"]


def test_validate_applies_defaults_and_rejects_bad_input():
    tool = make_catalog().get_tool("echo")
    args = tool.validate({"word": "hi"})
    assert args.times == 1

    with pytest.raises(ValidationError):
        tool.validate({"word": "hi", "times": 9})
    with pytest.raises(ValidationError):
        tool.validate({})
    with pytest.raises(ValidationError):
        tool.validate(["hi"])


def test_invoke_runs_handler_with_validated_input():
    tool = make_catalog().get_tool("echo")
    assert asyncio.run(tool.invoke({"word": "hi", "times": 2, "suffix": "!"})) == "hi hi!"
