import pytest

from view_engine.error.exceptions import TemplateParseError
from view_engine.templates.frontmatter import split_front_matter


def test_no_front_matter():
    parsed = split_front_matter("<p>hello</p>")
    assert parsed.metadata is None
    assert parsed.content == "<p>hello</p>"


def test_front_matter_split():
    """Test the YAML block is parsed and removed from the body."""
    parsed = split_front_matter("---\nlayout: plain\ndata: ./info\ntitle: Hi\n---\n<p>{{ title }}</p>")

    assert parsed.metadata == {"layout": "plain", "data": "./info", "title": "Hi"}
    assert parsed.content == "<p>{{ title }}</p>"


def test_boolean_layout():
    parsed = split_front_matter("---\nlayout: false\n---\nbody")
    assert parsed.metadata == {"layout": False}
    assert parsed.content == "body"


def test_empty_block():
    parsed = split_front_matter("---\n\n---\nbody")
    assert parsed.metadata == {}
    assert parsed.content == "body"


def test_invalid_yaml():
    with pytest.raises(TemplateParseError):
        split_front_matter("---\nlayout: [unclosed\n---\nbody", "/site/view.html")


def test_non_mapping_block():
    with pytest.raises(TemplateParseError, match="must be a mapping"):
        split_front_matter("---\n- a\n- b\n---\nbody")
