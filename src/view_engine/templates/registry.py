"""
Registry of partials and helpers for one engine instance.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from jinja2 import Environment, FunctionLoader, Template, nodes

from .extension import PartialExtension, helper_undefined
from .scanner import DynamicBinding, TemplateReference

logger = logging.getLogger(__name__)


@dataclass
class PartialDependencies:
    """What an installed partial references, kept so later renders can replay it."""

    base_url: Optional[str] = None
    partials: List[TemplateReference] = field(default_factory=list)
    bindings: List[DynamicBinding] = field(default_factory=list)


class Registry:
    """
    Partials and helpers known to the template environment.

    Partials are stored as source text (served to Jinja2 through a loader, so
    ``{% include %}`` works as well as ``{% partial %}``) or, for synthetic
    templates, as compiled Template objects. Helpers are plain callables
    exposed as environment globals.
    """

    def __init__(self, template_options: Optional[Dict[str, Any]] = None):
        """
        Initialize the registry.

        Args:
            template_options: Keyword arguments for the Jinja2 environment
        """
        self._partials: Dict[str, Union[str, Template]] = {}
        self._helpers: Dict[str, Callable[..., Any]] = {}
        self._dependencies: Dict[str, PartialDependencies] = {}

        options = dict(template_options or {})
        extensions = list(options.pop("extensions", []))
        extensions.append(PartialExtension)
        self.environment = Environment(
            loader=FunctionLoader(self._load_partial),
            extensions=extensions,
            **options
        )
        self.environment.view_registry = self

    def _load_partial(self, name: str):
        source = self._partials.get(name)
        if not isinstance(source, str):
            return None
        return source, None, lambda: self._partials.get(name) is source

    def register_partial(self, name: str, partial: Union[str, Template]) -> None:
        """Register (or replace) a partial under ``name``."""
        self._partials[name] = partial
        self._dependencies.pop(name, None)
        logger.debug(f"Registered partial {name}")

    def unregister_partial(self, name: str) -> None:
        self._partials.pop(name, None)
        self._dependencies.pop(name, None)

    def record_dependencies(self, name: str, dependencies: PartialDependencies) -> None:
        self._dependencies[name] = dependencies

    def dependencies(self, name: str) -> Optional[PartialDependencies]:
        """Dependencies recorded when ``name`` was installed, None for partials registered directly."""
        return self._dependencies.get(name)

    def has_partial(self, name: str) -> bool:
        return name in self._partials

    def register_helper(
        self,
        name: Union[str, Mapping[str, Callable[..., Any]]],
        helper: Optional[Callable[..., Any]] = None
    ) -> None:
        """
        Register a helper, or every entry of a name -> helper mapping.

        Raises:
            TypeError: If a helper is not callable
        """
        if isinstance(name, Mapping):
            for key, value in name.items():
                self.register_helper(key, value)
            return
        if not callable(helper):
            raise TypeError(f"Helper '{name}' must be callable, got {type(helper).__name__}")
        self._helpers[name] = helper
        self.environment.globals[name] = helper
        logger.debug(f"Registered helper {name}")

    def unregister_helper(self, name: str) -> None:
        if self._helpers.pop(name, None) is not None:
            self.environment.globals.pop(name, None)

    def has_helper(self, name: str) -> bool:
        # Jinja2 builtins such as range or dict count as registered
        return name in self._helpers or name in self.environment.globals

    @property
    def helpers(self) -> Dict[str, Callable[..., Any]]:
        return dict(self._helpers)

    @property
    def partials(self) -> Dict[str, Union[str, Template]]:
        return dict(self._partials)

    def call_helper(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Invoke a helper by name, failing like Jinja2 does when it is undefined."""
        helper = self.environment.globals.get(name)
        if not callable(helper):
            raise helper_undefined(name)
        return helper(*args, **kwargs)

    def get_template(self, name: str) -> Template:
        """Compiled template for a registered partial."""
        partial = self._partials.get(name)
        if isinstance(partial, Template):
            return partial
        return self.environment.get_template(name)

    def parse(self, source: str, filename: Optional[str] = None) -> nodes.Template:
        return self.environment.parse(source, filename=filename)

    def compile(self, ast: nodes.Template, filename: Optional[str] = None) -> Template:
        """Turn a parsed template into a render-ready Template."""
        code = self.environment.compile(ast, filename=filename)
        return self.environment.template_class.from_code(
            self.environment, code, self.environment.make_globals(None)
        )
