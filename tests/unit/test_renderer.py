import pytest

from view_engine import RenderState, ViewEngine, create_renderer


@pytest.mark.asyncio
async def test_locals_precedence(site, write_file):
    """Test request locals < state locals < engine locals."""
    write_file("blog/locals.html", "---\nlayout: false\n---\n{{ a }} {{ b }} {{ c }}")
    engine = ViewEngine(root=str(site), locals={"c": "engine"})
    render = create_renderer(engine)
    state = RenderState(project_name="blog", locals={"b": "state", "c": "state"})

    result = await render("locals", {"a": "request", "b": "request", "c": "request"}, state)

    assert result == "request state engine"


@pytest.mark.asyncio
async def test_renderer_without_locals(engine):
    render = create_renderer(engine)
    result = await render("index", state={"project_name": "blog"})
    assert result == "<main><h1></h1></main>"
