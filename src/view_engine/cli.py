import json
import asyncio
import logging
from pathlib import Path
from typing import Dict, Any, Optional

import typer
import yaml
from dotenv import load_dotenv
from rich.console import Console

from .config import load_options
from .engine import PartialRequest, ViewEngine
from .error import ViewEngineError
from .logging import setup_logging
from .templates import RenderState

# VIEW_ENGINE_* variables may come from a .env file
load_dotenv()

app = typer.Typer(
    name="view-engine",
    help="Render views and components from a project tree"
)
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("view-engine-cli")


def load_data_file(path: Optional[Path]) -> Dict[str, Any]:
    """
    Load render data from a JSON or YAML file.

    Args:
        path: Data file, None for no data

    Returns:
        Data dictionary
    """
    if path is None:
        return {}
    if not path.exists():
        raise typer.BadParameter(f"Data file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f) if path.suffix == ".json" else yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise typer.BadParameter(f"Data file {path} must contain a mapping")
    return data


def build_engine(
    config: Optional[Path],
    root: Optional[Path],
    no_cache: bool
) -> ViewEngine:
    options = load_options(
        str(config) if config else None,
        root=str(root) if root else None,
        disable_cache=True if no_cache else None,
    )
    return ViewEngine(options)


@app.command("render")
def render(
    view: str = typer.Argument(..., help="View name or path"),
    root: Optional[Path] = typer.Option(None, "--root", "-r", help="Root directory holding the projects"),
    project: str = typer.Option("", "--project", "-p", help="Project the view belongs to"),
    data: Optional[Path] = typer.Option(None, "--data", "-d", help="JSON or YAML file with render data"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Disable template caching"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Engine options file"),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this rotating file"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Write logs as JSON lines")
):
    """Render a view and print the result."""
    setup_logging(log_level, str(log_file) if log_file else None, json_logs)
    try:
        engine = build_engine(config, root, no_cache)
        state = RenderState(project_name=project)
        output = asyncio.run(engine.render(view, load_data_file(data), state))
        logger.debug(f"Rendered view {view} ({len(output)} characters)")
    except ViewEngineError as e:
        err_console.print(f"[bold red]Render failed:[/bold red] {e}")
        raise typer.Exit(code=1)
    console.print(output, markup=False, highlight=False, soft_wrap=True, end="")


@app.command("component")
def component(
    config_file: str = typer.Argument(..., help="component.json path, relative to the root"),
    project: str = typer.Option(..., "--project", "-p", help="Project the component belongs to"),
    state: Optional[str] = typer.Option(None, "--state", "-s", help="Component state, default state when omitted"),
    root: Optional[Path] = typer.Option(None, "--root", "-r", help="Root directory holding the projects"),
    data: Optional[Path] = typer.Option(None, "--data", "-d", help="JSON or YAML file with render data"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Engine options file"),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this rotating file"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Write logs as JSON lines")
):
    """Render one state of a component and print the result."""
    setup_logging(log_level, str(log_file) if log_file else None, json_logs)
    try:
        engine = build_engine(config, root, False)
        request = PartialRequest(project=project, config_file=config_file, state=state)
        output = asyncio.run(engine.render_partial(request, load_data_file(data)))
    except ViewEngineError as e:
        err_console.print(f"[bold red]Component render failed:[/bold red] {e}")
        raise typer.Exit(code=1)
    console.print(output, markup=False, highlight=False, soft_wrap=True, end="")


if __name__ == "__main__":
    app()
