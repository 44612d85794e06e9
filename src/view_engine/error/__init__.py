"""
Error types raised by the view engine.
"""
from .exceptions import (
    ErrorContext,
    ViewEngineError,
    ConfigurationError,
    ResolutionError,
    TemplateReadError,
    TemplateParseError,
    ComponentError,
    HelperUnavailableError,
)

__all__ = [
    'ErrorContext',
    'ViewEngineError',
    'ConfigurationError',
    'ResolutionError',
    'TemplateReadError',
    'TemplateParseError',
    'ComponentError',
    'HelperUnavailableError',
]
