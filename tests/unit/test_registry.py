import pytest
from jinja2 import UndefinedError

from view_engine.templates.registry import Registry


@pytest.fixture
def registry():
    return Registry()


def test_register_helper_requires_callable(registry):
    with pytest.raises(TypeError):
        registry.register_helper("shout", "not callable")


def test_register_helper_mapping(registry):
    """Test helpers can be registered from a mapping and removed again."""
    registry.register_helper({"shout": str.upper, "whisper": str.lower})

    assert registry.has_helper("shout")
    assert registry.environment.globals["whisper"] is str.lower
    assert set(registry.helpers) == {"shout", "whisper"}

    registry.unregister_helper("shout")
    assert not registry.has_helper("shout")
    assert "shout" not in registry.environment.globals


def test_builtins_count_as_registered(registry):
    assert registry.has_helper("range")
    assert "range" not in registry.helpers


def test_call_unknown_helper(registry):
    with pytest.raises(UndefinedError, match="'missing' is undefined"):
        registry.call_helper("missing", 1)


def test_partial_tag_renders_registered_partial(registry):
    """Test hash arguments layer over the render context."""
    registry.register_partial("card", "<b>{{ title }}</b><i>{{ tag }}</i>")
    template = registry.environment.from_string('{% partial "card" title="Hi" %}')

    assert template.render(title="Outer", tag="t") == "<b>Hi</b><i>t</i>"


def test_include_uses_registered_partial(registry):
    registry.register_partial("footer", "<footer>{{ year }}</footer>")
    template = registry.environment.from_string('{% include "footer" %}')
    assert template.render(year=2024) == "<footer>2024</footer>"


def test_compiled_partial(registry):
    registry.register_partial("__body__", registry.environment.from_string("[{{ body }}]"))
    template = registry.environment.from_string('{% partial "__body__" %}')

    assert template.render(body="x") == "[x]"
    assert registry.partials["__body__"] is registry.get_template("__body__")


def test_reregistered_partial_is_reloaded(registry):
    registry.register_partial("card", "old")
    template = registry.environment.from_string('{% partial "card" %}')
    assert template.render() == "old"

    registry.register_partial("card", "new")
    assert template.render() == "new"


def test_dynamic_partial_tag(registry):
    """Test the helper named by a dynamic tag picks the partial."""
    registry.register_helper("pick", lambda kind: f"card_{kind}")
    registry.register_partial("card_a", "A")
    registry.register_partial("card_b", "B")
    template = registry.environment.from_string('{% partial "pick" _context="kind" %}')

    assert template.render(kind="a") == "A"
    assert template.render(kind="b") == "B"


def test_compile_parsed_template(registry):
    ast = registry.parse("{{ 1 + 2 }}", filename="inline")
    assert registry.compile(ast, filename="inline").render() == "3"
