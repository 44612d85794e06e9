"""Pytest configuration and fixtures."""
import pytest
from pathlib import Path

from view_engine import RenderState, ViewEngine


@pytest.fixture
def write_file(tmp_path):
    """Write a file below the temporary root and return its location."""
    def _write(relative: str, content: str) -> str:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def site(tmp_path, write_file) -> Path:
    """A root holding a ``blog`` project with a layout and two views."""
    write_file("blog/default.html", "<main>{{ body }}</main>")
    write_file("blog/plain.html", "<section>{{ body }}</section>")
    write_file("blog/index.html", "<h1>{{ title }}</h1>")
    write_file("blog/card.html", "<b>{{ title }}</b>")
    return tmp_path


@pytest.fixture
def engine(site):
    """Engine rooted at the test site."""
    return ViewEngine(root=str(site))


@pytest.fixture
def uncached_engine(site):
    """Engine rooted at the test site with caching disabled."""
    return ViewEngine(root=str(site), disable_cache=True)


@pytest.fixture
def blog_state():
    return RenderState(project_name="blog")
