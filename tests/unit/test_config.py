import json
import os

import pytest
import yaml

from view_engine.config import EngineOptions, load_options, load_options_file
from view_engine.error.exceptions import ConfigurationError
from view_engine.templates.context import RenderState


def test_defaults(tmp_path):
    options = EngineOptions(root=str(tmp_path))

    assert options.extname == ".html"
    assert options.shared == "shared"
    assert options.default_layout == "default"
    assert options.disable_cache is False
    assert options.layout_path == ""


def test_normalisation(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    options = EngineOptions(root="site", extname="hbs", view_path="views")

    assert options.root == os.path.join(os.getcwd(), "site")
    assert options.extname == ".hbs"
    assert options.layout_path == "views"


def test_get_prefers_state_config(tmp_path):
    options = EngineOptions(root=str(tmp_path), partial_path="partials")
    state = RenderState(config={"partial_path": "blocks"})

    assert options.get("partial_path") == "partials"
    assert options.get("partial_path", state) == "blocks"
    assert options.kind_dir("partial", state) == "blocks"
    assert options.instance_kind_dir("partial") == "partials"
    assert options.kind_dir(None) == ""


def test_load_options_file_formats(tmp_path):
    yaml_file = tmp_path / "options.yaml"
    yaml_file.write_text(yaml.dump({"root": str(tmp_path), "partial_path": "partials"}))
    json_file = tmp_path / "options.json"
    json_file.write_text(json.dumps({"extname": ".txt"}))

    assert load_options_file(str(yaml_file))["partial_path"] == "partials"
    assert load_options_file(str(json_file)) == {"extname": ".txt"}


def test_load_options_file_errors(tmp_path):
    with pytest.raises(ConfigurationError):
        load_options_file(str(tmp_path / "missing.yaml"))

    broken = tmp_path / "broken.json"
    broken.write_text("{")
    with pytest.raises(ConfigurationError):
        load_options_file(str(broken))


def test_load_options_precedence(tmp_path, monkeypatch):
    """Test file < environment < explicit overrides."""
    options_file = tmp_path / "options.yaml"
    options_file.write_text(yaml.dump({
        "root": str(tmp_path),
        "partial_path": "file",
        "data_path": "file",
        "helper_path": "file",
    }))
    monkeypatch.setenv("VIEW_ENGINE_DATA_PATH", "env")
    monkeypatch.setenv("VIEW_ENGINE_HELPER_PATH", "env")
    monkeypatch.setenv("VIEW_ENGINE_LOCALS", '{"site": "demo"}')

    options = load_options(str(options_file), helper_path="override", view_path=None)

    assert options.partial_path == "file"
    assert options.data_path == "env"
    assert options.helper_path == "override"
    assert options.locals == {"site": "demo"}


def test_load_options_invalid(monkeypatch, tmp_path):
    monkeypatch.setenv("VIEW_ENGINE_TEMPLATE_OPTIONS", "not json")
    with pytest.raises(ConfigurationError):
        load_options(root=str(tmp_path))

    monkeypatch.delenv("VIEW_ENGINE_TEMPLATE_OPTIONS")
    with pytest.raises(ConfigurationError):
        load_options(root=str(tmp_path), disable_cache="sometimes")
