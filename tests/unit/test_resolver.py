import os

import pytest

from view_engine.config import EngineOptions
from view_engine.templates.context import RenderState
from view_engine.templates.resolver import PathResolver, is_placeholder


@pytest.fixture
def resolver(tmp_path):
    return PathResolver(EngineOptions(root=str(tmp_path), partial_path="partials"))


@pytest.fixture
def state():
    return RenderState(project_name="blog", view_name="index")


def test_is_placeholder():
    """Test placeholder detection."""
    assert is_placeholder("__default_layout__")
    assert is_placeholder("__fake__")
    assert not is_placeholder("__fake")
    assert not is_placeholder("layouts/__fake__")
    assert not is_placeholder("default")


def test_placeholder_returned_unchanged(resolver, state):
    assert resolver.resolve("__default_layout__", "layout", state=state) == "__default_layout__"


def test_bare_name_uses_kind_directory(resolver, state, tmp_path):
    """Test bare names resolve below root/project/kind_dir."""
    assert resolver.resolve("card", "partial", state=state) == os.path.join(
        str(tmp_path), "blog", "partials", "card.html"
    )
    assert resolver.resolve("index", "view", state=state) == os.path.join(str(tmp_path), "blog", "index.html")


def test_extension_only_added_when_missing(resolver, state, tmp_path):
    assert resolver.resolve("page.txt", "view", state=state).endswith("page.txt")
    assert resolver.resolve("info", "data", ".json", state=state) == os.path.join(str(tmp_path), "blog", "info.json")


def test_state_config_overrides_kind_directory(resolver, tmp_path):
    state = RenderState(project_name="blog", config={"partial_path": "blocks"})
    assert resolver.resolve("card", "partial", state=state) == os.path.join(
        str(tmp_path), "blog", "blocks", "card.html"
    )


def test_shared_prefix_switches_project(resolver, tmp_path):
    """Test shared names ignore per-render overrides."""
    state = RenderState(project_name="blog", config={"partial_path": "blocks"})
    assert resolver.resolve("shared/header", "partial", state=state) == os.path.join(
        str(tmp_path), "shared", "partials", "header.html"
    )


def test_relative_names_depend_on_base(resolver, state, tmp_path):
    """Test one relative name resolves differently from two bases."""
    first = resolver.resolve("./item", "partial", base_url=str(tmp_path / "blog" / "a" / "view.html"), state=state)
    second = resolver.resolve("./item", "partial", base_url=str(tmp_path / "blog" / "b" / "view.html"), state=state)

    assert first == os.path.join(str(tmp_path), "blog", "a", "item.html")
    assert second == os.path.join(str(tmp_path), "blog", "b", "item.html")
    assert first != second


def test_parent_relative_name(resolver, state, tmp_path):
    base = str(tmp_path / "blog" / "a" / "view.html")
    assert resolver.resolve("../item", "partial", base_url=base, state=state) == os.path.join(
        str(tmp_path), "blog", "item.html"
    )


def test_relative_name_without_base_uses_view_name(resolver, state, tmp_path):
    assert resolver.resolve("./item", "partial", state=state) == os.path.join(
        str(tmp_path), "blog", "index", "item.html"
    )


def test_absolute_name_kept(resolver, state, tmp_path):
    location = str(tmp_path / "elsewhere" / "card")
    assert resolver.resolve(location, "partial", state=state) == location + ".html"


def test_layout_path_defaults_to_view_path(tmp_path):
    resolver = PathResolver(EngineOptions(root=str(tmp_path), view_path="views"))
    state = RenderState(project_name="blog")
    assert resolver.resolve("default", "layout", state=state) == os.path.join(
        str(tmp_path), "blog", "views", "default.html"
    )
