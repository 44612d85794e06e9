"""
Dependency loading: makes every partial and helper a template references
available before the template itself is compiled.
"""
import asyncio
import importlib.util
import inspect
import logging
import os
import re
from dataclasses import dataclass, replace
from enum import Enum
from types import ModuleType
from typing import Any, Callable, Dict, Optional

from jinja2 import Template, TemplateSyntaxError

from ..config.options import EngineOptions
from ..error.exceptions import ResolutionError, TemplateParseError
from ..utils.io import read_text
from .cache import RenderCache
from .context import RenderContext, RenderState
from .directives import partial_comment, wrap_partial
from .registry import PartialDependencies, Registry
from .resolver import PathResolver, is_placeholder
from .scanner import DynamicBinding, HashPairs, scan

logger = logging.getLogger(__name__)


class HelperStatus(str, Enum):
    LOADED = "loaded"
    UNAVAILABLE = "unavailable"  # no module, or the module lacks the helper
    FAILED = "failed"  # the module raised while importing


@dataclass
class HelperLoadResult:
    """Outcome of loading one helper module."""

    name: str
    location: str
    status: HelperStatus
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is HelperStatus.LOADED


def load_module_from_path(path: str) -> ModuleType:
    """Import a Python file as an anonymous module."""
    module_name = "view_engine_helper_" + re.sub(r"\W", "_", path)
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load helper module {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def helpers_from_module(module: ModuleType) -> Dict[str, Callable[..., Any]]:
    """
    Helpers exported by a module: its ``helpers`` mapping when present,
    otherwise every public function defined in the module itself.
    """
    declared = getattr(module, "helpers", None)
    if isinstance(declared, dict):
        return dict(declared)
    return {
        name: value
        for name, value in vars(module).items()
        if not name.startswith("_")
        and inspect.isfunction(value)
        and value.__module__ == module.__name__
    }


class DependencyLoader:
    """Installs partials and helpers into the registry."""

    def __init__(
        self,
        options: EngineOptions,
        resolver: PathResolver,
        registry: Registry,
        cache: RenderCache
    ):
        self.options = options
        self.resolver = resolver
        self.registry = registry
        self.cache = cache
        # Helpers whose last load failed, surfaced when a template calls them
        self.failures: Dict[str, HelperLoadResult] = {}

    def install_helper(
        self,
        name: str,
        base_url: Optional[str] = None,
        state: Optional[RenderState] = None,
        require_name: bool = True
    ) -> HelperLoadResult:
        """
        Load a helper module and register what it exports.

        Failures are logged and reported in the result, never raised: a
        template only fails if it actually calls the missing helper.

        Args:
            name: Helper name, also the module name
            base_url: Location of the template using the helper
            state: Render state of the current render
            require_name: Whether the module must export a helper called ``name``

        Returns:
            HelperLoadResult
        """
        location = self.resolver.resolve(name, "helper", ".py", base_url, state)

        if not os.path.exists(location):
            result = HelperLoadResult(name, location, HelperStatus.UNAVAILABLE, "helper module not found")
        else:
            try:
                helpers = helpers_from_module(load_module_from_path(location))
                self.registry.register_helper(helpers)
            except Exception as e:  # noqa: BLE001
                result = HelperLoadResult(name, location, HelperStatus.FAILED, f"{type(e).__name__}: {e}")
            else:
                if require_name and name not in helpers:
                    result = HelperLoadResult(
                        name, location, HelperStatus.UNAVAILABLE, f"module does not define helper '{name}'"
                    )
                else:
                    result = HelperLoadResult(name, location, HelperStatus.LOADED)

        if result.ok:
            self.failures.pop(name, None)
            logger.debug(f"Installed helper {name} from {location}", extra={"helper": name, "location": location})
        else:
            self.failures[name] = result
            logger.warning(
                f"Could not load helper {name} from {location}: {result.error}",
                extra={"helper": name, "location": location}
            )
        return result

    async def install_partial(
        self,
        name: str,
        hash: Optional[HashPairs] = None,
        base_url: Optional[str] = None,
        dynamic: Optional[DynamicBinding] = None,
        ctx: Optional[RenderContext] = None
    ) -> None:
        """
        Load, register and scan a partial.

        A dynamic reference is only queued on the render context; it is
        installed once render data tells which partial it stands for.

        Args:
            name: Partial name
            hash: Constant hash arguments of the referencing tag
            base_url: Location of the referencing template
            dynamic: Dynamic binding of the reference, if any
            ctx: Render context of the current render

        Raises:
            ResolutionError: For an unknown placeholder name
            TemplateReadError: If the partial file cannot be read
        """
        ctx = ctx or RenderContext()
        if dynamic is not None:
            ctx.queue(replace(dynamic, base_url=base_url, hash=hash))
            logger.debug(f"Queued dynamic partial {dynamic.name} on {dynamic.context}")
            return

        if is_placeholder(name):
            entry = self.cache.peek(name)
            if entry is None or entry.compiled is None:
                raise ResolutionError(name, "placeholder is not in the cache")
            self.registry.register_partial(name, entry.compiled)
            return

        if name in ctx.installing:
            return
        ctx.installing.add(name)

        location = self.resolver.resolve(name, "partial", base_url=base_url, state=ctx.state)
        logger.debug(f"Installing partial {name} from {location}")
        source = await read_text(location)
        comment = partial_comment(name, location, hash)
        self.registry.register_partial(name, wrap_partial(source, comment))
        await self.compile(source, ctx, location, only_deps=True, owner=name)

    async def replay_partial(self, name: str, ctx: RenderContext) -> None:
        """
        Queue the dynamic partials of an already registered partial.

        Nested partials are replayed too, and nested partials that are not
        registered (any more) are installed.

        Args:
            name: Registered partial name
            ctx: Render context of the current render
        """
        # Installed during this pass: its bindings are queued already
        if name in ctx.installing or name in ctx.replayed:
            return
        ctx.replayed.add(name)

        dependencies = self.registry.dependencies(name)
        if dependencies is None:
            return
        for binding in dependencies.bindings:
            ctx.queue(binding)
        logger.debug(f"Replaying {len(dependencies.bindings)} dynamic partial(s) of {name}")

        await asyncio.gather(*(
            self.replay_partial(reference.name, ctx)
            if self.registry.has_partial(reference.name)
            else self.install_partial(reference.name, reference.hash, dependencies.base_url, ctx=ctx)
            for reference in dependencies.partials
        ))

    async def compile(
        self,
        content: str,
        ctx: RenderContext,
        url: Optional[str] = None,
        only_deps: bool = False,
        owner: Optional[str] = None
    ) -> Optional[Template]:
        """
        Compile template text after installing its dependencies.

        Helpers load synchronously; partials load concurrently and the
        template is compiled once all of them are registered.

        Args:
            content: Template text
            ctx: Render context of the current render
            url: Location of the text, base for relative names
            only_deps: Only install dependencies, do not compile
            owner: Partial whose source this is; its dependencies are recorded

        Returns:
            Compiled template, or None with ``only_deps``
        """
        try:
            ast = self.registry.parse(content, filename=url)
        except TemplateSyntaxError as e:
            raise TemplateParseError(f"Invalid template {url or '<string>'}: {e}") from e

        result = scan(ast, self.registry, reload_partials=self.options.disable_cache)

        for helper in result.helpers:
            self.install_helper(helper.name, url, ctx.state)

        if owner is not None:
            self.registry.record_dependencies(owner, PartialDependencies(
                base_url=url,
                partials=[reference for reference in result.partials + result.registered if reference.dynamic is None],
                bindings=[
                    replace(reference.dynamic, base_url=url, hash=reference.hash)
                    for reference in result.partials if reference.dynamic is not None
                ],
            ))

        jobs = [
            self.install_partial(reference.name, reference.hash, url, reference.dynamic, ctx)
            for reference in result.partials
        ]
        jobs.extend(self.replay_partial(reference.name, ctx) for reference in result.registered)
        if jobs:
            await asyncio.gather(*jobs)

        if only_deps:
            return None
        try:
            return self.registry.compile(ast, filename=url)
        except TemplateSyntaxError as e:
            raise TemplateParseError(f"Invalid template {url or '<string>'}: {e}") from e
