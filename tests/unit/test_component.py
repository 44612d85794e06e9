import json

import pytest

from view_engine.error.exceptions import ComponentError, TemplateParseError, TemplateReadError
from view_engine.templates.component import parse_component
from view_engine.templates.context import RenderContext, RenderState
from view_engine.templates.scanner import DynamicBinding
from view_engine.utils.io import read_text


def test_parse_component():
    descriptor = parse_component(json.dumps({
        "type": "c",
        "states": {"default": {"__file__": "a.html", "label": "A"}, "b": {"__file__": "b.html"}},
    }))

    assert descriptor.state_file() == "a.html"
    assert descriptor.state_file("b") == "b.html"
    assert descriptor.entry_file("b") == "b.html"
    assert descriptor.as_data()["states"]["default"] == {"__file__": "a.html", "label": "A"}


def test_single_template_component():
    descriptor = parse_component('{"type": "d", "template": "only.html"}')
    assert descriptor.entry_file("anything") == "only.html"


def test_invalid_components():
    """Test malformed descriptors and unknown states raise ComponentError."""
    with pytest.raises(ComponentError):
        parse_component("{broken", "/site/component.json")
    with pytest.raises(ComponentError):
        parse_component('{"states": {"default": {}}}')
    with pytest.raises(TemplateParseError):
        parse_component('{"states": {}}').state_file()


def test_render_state_coerce():
    original = RenderState(project_name="blog", config={"partial_path": "x"})
    copy = RenderState.coerce(original)
    copy.config["partial_path"] = "y"

    assert original.config["partial_path"] == "x"
    assert RenderState.coerce({"project_name": "news", "unknown": 1}).project_name == "news"
    assert RenderState.coerce(None) == RenderState()


def test_render_context_queue():
    ctx = RenderContext()
    ctx.queue(DynamicBinding(context="kind", name="pick"))

    batch = ctx.drain()

    assert [binding.name for binding in batch] == ["pick"]
    assert ctx.pending == []


@pytest.mark.asyncio
async def test_read_text(tmp_path):
    path = tmp_path / "file.html"
    path.write_text("content", encoding="utf-8")

    assert await read_text(str(path)) == "content"
    with pytest.raises(TemplateReadError) as excinfo:
        await read_text(str(tmp_path / "missing.html"))
    assert excinfo.value.location == str(tmp_path / "missing.html")
