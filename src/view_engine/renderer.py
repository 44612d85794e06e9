"""
Request-side render function.
"""
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from .engine import ViewEngine, merge_data
from .templates.context import RenderState

logger = logging.getLogger(__name__)

RenderFunction = Callable[..., Awaitable[str]]


def create_renderer(engine: ViewEngine) -> RenderFunction:
    """
    Build the render function handed to request handlers.

    The returned coroutine merges the request locals, ``state.locals`` and the
    engine's ``locals`` option, later sources overriding earlier ones, and
    renders the view with the result.

    Args:
        engine: Engine to render with

    Returns:
        ``async render(name, locals=None, state=None) -> str``
    """

    async def render(
        name: str,
        locals: Optional[Mapping[str, Any]] = None,
        state: Union[RenderState, Mapping[str, Any], None] = None
    ) -> str:
        state = RenderState.coerce(state)
        data: Dict[str, Any] = merge_data({}, locals, state.locals, engine.options.locals)
        logger.debug(f"Rendering {name} for project {state.project_name or '<root>'}")
        return await engine.render(name, data, state)

    return render
