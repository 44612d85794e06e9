"""
View Engine: renders views through layouts, partials, helpers and data files.
"""
__version__ = "0.1.0"

from .config import EngineOptions, load_options
from .engine import PartialRequest, ViewEngine
from .error import ViewEngineError
from .renderer import create_renderer
from .templates import RenderState

__all__ = [
    "ViewEngine",
    "PartialRequest",
    "EngineOptions",
    "load_options",
    "RenderState",
    "ViewEngineError",
    "create_renderer",
    "__version__",
]
