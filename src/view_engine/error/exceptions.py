"""
Centralized exception definitions for the view engine.
"""
from typing import Optional


class ErrorContext:
    """Context information for errors."""

    def __init__(self, component: str = None, operation: str = None, **kwargs):
        self.component = component
        self.operation = operation
        self.details = kwargs


class ViewEngineError(Exception):
    """Base class for all view engine errors."""

    def __init__(self, message: str, context: ErrorContext = None, details: dict = None):
        super().__init__(message)
        self.context = context or ErrorContext()
        self.details = details or {}

    def __str__(self):
        base_str = super().__str__()
        if self.context.component and self.context.operation:
            return f"{base_str} [in {self.context.component}.{self.context.operation}]"
        return base_str


class ConfigurationError(ViewEngineError):
    """Error in engine configuration."""
    pass


class ResolutionError(ViewEngineError):
    """A template name could not be turned into something renderable."""

    def __init__(self, name: str, reason: Optional[str] = None, context: ErrorContext = None):
        message = f"Cannot resolve template '{name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, context, {"name": name})
        self.name = name


class TemplateReadError(ViewEngineError):
    """A view, layout, partial, data or component file could not be read."""

    def __init__(self, location: str, reason: Optional[str] = None, context: ErrorContext = None):
        message = f"Cannot read template file {location}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, context, {"location": location})
        self.location = location


class TemplateParseError(ViewEngineError):
    """Malformed front matter, template syntax or data file."""
    pass


class ComponentError(TemplateParseError):
    """Malformed component descriptor or unknown component state."""
    pass


class HelperUnavailableError(ViewEngineError):
    """A helper that failed to load was invoked during rendering."""

    def __init__(self, name: str, reason: Optional[str] = None, context: ErrorContext = None):
        message = f"Helper '{name}' is not available"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, context, {"helper": name})
        self.name = name
