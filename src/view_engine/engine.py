"""
View engine: renders views through their layout, partials, helpers and data.
"""
import asyncio
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union

from jinja2 import Template, UndefinedError
from markupsafe import Markup
from pydantic import ValidationError

from .config.options import EngineOptions
from .error.exceptions import (
    ConfigurationError,
    ErrorContext,
    HelperUnavailableError,
    ResolutionError,
    TemplateParseError,
)
from .templates.cache import CacheEntry, RenderCache
from .templates.component import (
    COMPONENT_CONTEXT,
    COMPONENT_DATA_KEY,
    DEFAULT_STATE,
    DESCRIPTOR_NAME,
    ComponentDescriptor,
    parse_component,
)
from .templates.context import RenderContext, RenderState
from .templates.frontmatter import split_front_matter
from .templates.loader import DependencyLoader
from .templates.registry import Registry
from .templates.resolver import PathResolver, is_placeholder
from .templates.scanner import DynamicBinding
from .utils.io import read_text

logger = logging.getLogger(__name__)

IDENTITY_LAYOUT = "__default_layout__"
PARTIAL_TEMPLATE = "__partial_template__"
FAKE_VIEW = "__fake__"


@dataclass
class PartialRequest:
    """Which component state ``render_partial`` should render."""

    project: str
    config_file: str  # component.json, relative to the engine root
    state: Optional[str] = None


def merge_data(target: Dict[str, Any], *sources: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Shallow-merge sources into ``target`` in order; later sources win."""
    for source in sources:
        if source:
            target.update(source)
    return target


class ViewEngine:
    """
    Renders views from a directory tree of projects.

    Views may start with a front matter block choosing their ``layout`` and a
    JSON ``data`` file. Partials and helpers referenced by a template are
    loaded from disk the first time they are seen, and compiled templates,
    rendered views and data files are cached by location.

    Render state is kept per call, so concurrent renders on one engine do not
    interfere. The registry is shared: partial names are global to the engine.
    """

    def __init__(self, options: Union[EngineOptions, Mapping[str, Any], None] = None, **kwargs: Any):
        """
        Initialize the engine.

        Args:
            options: EngineOptions or a mapping of option values
            **kwargs: Option values, overriding ``options`` when it is a mapping
        """
        if not isinstance(options, EngineOptions):
            try:
                options = EngineOptions(**{**dict(options or {}), **kwargs})
            except ValidationError as e:
                raise ConfigurationError(
                    f"Invalid engine options: {e}",
                    ErrorContext(component="ViewEngine", operation="__init__")
                ) from e
        self.options = options

        self.registry = Registry(options.template_options)
        self.cache = RenderCache(disabled=options.disable_cache)
        self.resolver = PathResolver(options)
        self.loader = DependencyLoader(options, self.resolver, self.registry, self.cache)

        self.cache.set(IDENTITY_LAYOUT, CacheEntry(compiled=self.registry.environment.from_string("{{ body }}")))

        if options.pre_installed_helper:
            self.loader.install_helper(options.pre_installed_helper, require_name=False)

        logger.info(f"View engine created for root {options.root} (cache {'off' if options.disable_cache else 'on'})")

    # Registry passthroughs

    def register_helper(
        self,
        name: Union[str, Mapping[str, Callable[..., Any]]],
        helper: Optional[Callable[..., Any]] = None
    ) -> None:
        self.registry.register_helper(name, helper)

    def unregister_helper(self, name: str) -> None:
        self.registry.unregister_helper(name)

    def register_partial(self, name: str, partial: Union[str, Template]) -> None:
        self.registry.register_partial(name, partial)

    def unregister_partial(self, name: str) -> None:
        self.registry.unregister_partial(name)

    def invalidate(self, pattern: Optional[str] = None) -> int:
        """Drop cached entries whose location matches ``pattern`` (all files when None)."""
        return self.cache.invalidate(pattern)

    # Rendering

    async def render(
        self,
        view: str,
        data: Optional[Dict[str, Any]] = None,
        state: Union[RenderState, Mapping[str, Any], None] = None
    ) -> str:
        """
        Render a view.

        ``data`` is updated in place: the view's data file and front matter
        are merged into it and ``body`` holds the rendered view when the
        layout runs.

        Args:
            view: View name or location
            data: Render data
            state: Project and view identity of this render

        Returns:
            Rendered text

        Raises:
            TemplateReadError: If the view, its layout, data or partials cannot be read
            TemplateParseError: For malformed front matter, templates or data
            ResolutionError: For unknown placeholder names
            HelperUnavailableError: If the template calls a helper that failed to load
        """
        data = {} if data is None else data
        ctx = RenderContext(state=RenderState.coerce(state))
        url = self.resolver.resolve(view, "view", state=ctx.state)
        ctx.state.view_url = url
        logger.debug(f"Rendering view {view}", extra={"view": url})

        cached = self.cache.get(url)
        if cached is not None and cached.result is not None:
            logger.debug(f"Serving cached render of {url}", extra={"view": url})
            return cached.result

        try:
            raw = await read_text(url)
            parsed = split_front_matter(raw, url)
            metadata = parsed.metadata or {}
            layout_url = self.resolver.resolve(
                self._select_layout(metadata.get("layout"), ctx.state), "layout", state=ctx.state
            )
            data_path = metadata.get("data")

            jobs = [
                self.loader.compile(parsed.content, ctx, url),
                self._resolve_template(layout_url, ctx),
            ]
            if data_path:
                jobs.append(self.load_data(data_path, url, ctx.state))
            template, layout, *loaded = await asyncio.gather(*jobs)
            self.cache.set(url, CacheEntry(compiled=template))

            return await self._finish(
                template, url, data, ctx, layout, loaded[0] if loaded else None, parsed.metadata
            )
        finally:
            ctx.drain()

    async def render_partial(
        self,
        request: Union[PartialRequest, Mapping[str, Any]],
        data: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Render one state of a component as if it were a view of its project.

        The component is included from a fake view at the project root, so its
        own relative references resolve as usual, and rendered through the
        identity layout.

        Args:
            request: Project, component.json location and optional state
            data: Render data

        Returns:
            Rendered text
        """
        if not isinstance(request, PartialRequest):
            request = PartialRequest(**request)
        data = {} if data is None else data

        fake_url = os.path.abspath(os.path.join(self.options.root, request.project, FAKE_VIEW + ".html"))
        config_path = os.path.abspath(os.path.join(self.options.root, request.config_file))
        descriptor = await self.load_component(config_path)

        target = os.path.join(os.path.dirname(config_path), descriptor.entry_file(request.state))
        relative = os.path.relpath(target, os.path.dirname(fake_url)).replace(os.sep, "/")

        ctx = RenderContext(
            state=RenderState(project_name=request.project, view_name=FAKE_VIEW, view_url=fake_url),
            component=descriptor,
        )
        if request.state or DEFAULT_STATE in descriptor.states:
            data[COMPONENT_CONTEXT] = descriptor.state_file(request.state)
        logger.debug(f"Rendering component {config_path} through {relative}", extra={"view": fake_url})

        try:
            template = await self.loader.compile(
                f'{{% partial "./{relative}" _info="status=hide" %}}', ctx, fake_url
            )
            self.cache.set(PARTIAL_TEMPLATE, CacheEntry(compiled=template))
            layout = self.cache.peek(IDENTITY_LAYOUT).compiled
            return await self._finish(template, PARTIAL_TEMPLATE, data, ctx, layout, None, None)
        finally:
            ctx.drain()

    async def _finish(
        self,
        template: Template,
        key: str,
        data: Dict[str, Any],
        ctx: RenderContext,
        layout: Template,
        file_data: Optional[Mapping[str, Any]],
        metadata: Optional[Mapping[str, Any]]
    ) -> str:
        merge_data(data, file_data, metadata)
        await self._install_dynamic_partials(data, ctx)

        try:
            data["body"] = Markup(template.render(data))
            result = layout.render(data)
        except UndefinedError as e:
            unavailable = self._helper_error(e)
            if unavailable is None:
                raise
            raise unavailable from e

        self.cache.set(key, CacheEntry(compiled=template, result=result))
        return result

    def _helper_error(self, error: UndefinedError) -> Optional[HelperUnavailableError]:
        message = str(error)
        for name, failure in self.loader.failures.items():
            if f"'{name}' is undefined" in message:
                return HelperUnavailableError(name, failure.error)
        return None

    def _select_layout(self, layout: Any, state: RenderState) -> str:
        if layout is None or layout is True:
            return self.options.get("default_layout", state) or IDENTITY_LAYOUT
        if not layout or not isinstance(layout, str):
            return IDENTITY_LAYOUT
        return layout

    async def _resolve_template(self, url: str, ctx: RenderContext) -> Template:
        """Compiled template for a layout location, loading it on a cache miss."""
        if is_placeholder(url):
            entry = self.cache.peek(url)
            if entry is None or entry.compiled is None:
                raise ResolutionError(url, "placeholder is not in the cache")
            return entry.compiled

        entry = self.cache.get(url)
        if entry is not None and entry.compiled is not None:
            return entry.compiled

        template = await self.loader.compile(await read_text(url), ctx, url)
        self.cache.set(url, CacheEntry(compiled=template))
        return template

    async def _install_dynamic_partials(self, data: Dict[str, Any], ctx: RenderContext) -> None:
        # Installing a dynamic partial can queue more of them
        while ctx.pending:
            batch = ctx.drain()
            names = await asyncio.gather(*(
                self._dynamic_partial_name(binding, data, ctx) for binding in batch
            ))
            await asyncio.gather(*(
                self.loader.install_partial(name, binding.hash, binding.base_url, ctx=ctx)
                if self.options.disable_cache or not self.registry.has_partial(name)
                else self.loader.replay_partial(name, ctx)
                for binding, name in zip(batch, names)
            ))

    async def _dynamic_partial_name(self, binding: DynamicBinding, data: Dict[str, Any], ctx: RenderContext) -> str:
        """Ask the binding's helper which partial stands behind it for this data."""
        if binding.context == COMPONENT_CONTEXT:
            descriptor = ctx.component
            if descriptor is None:
                location = self.resolver.resolve("./" + DESCRIPTOR_NAME, base_url=binding.base_url, state=ctx.state)
                descriptor = await self.load_component(location)
            if not data.get(COMPONENT_CONTEXT):
                data[COMPONENT_CONTEXT] = descriptor.state_file()
            data.setdefault(COMPONENT_DATA_KEY, descriptor.as_data())

        try:
            name = self.registry.call_helper(binding.name, data.get(binding.context))
        except UndefinedError as e:
            unavailable = self._helper_error(e)
            if unavailable is None:
                raise
            raise unavailable from e

        if not isinstance(name, str) or not name:
            raise ResolutionError(binding.name, f"helper returned no partial name for '{binding.context}'")
        logger.debug(f"Dynamic partial {binding.name}({binding.context}) resolved to {name}")
        return name

    # Data

    async def load_data(self, name: str, base_url: Optional[str] = None, state: Optional[RenderState] = None) -> Any:
        """
        Load a JSON data file, from the cache when possible.

        Raises:
            TemplateReadError: If the file cannot be read
            TemplateParseError: If the file is not valid JSON
        """
        url = self.resolver.resolve(name, "data", ".json", base_url, state)
        entry = self.cache.get(url)
        if entry is not None and entry.result is not None:
            return entry.result

        logger.debug(f"Loading data file {url}", extra={"location": url})
        text = await read_text(url)
        try:
            result = json.loads(text)
        except json.JSONDecodeError as e:
            raise TemplateParseError(f"Invalid JSON in data file {url}: {e}") from e
        self.cache.set(url, CacheEntry(result=result))
        return result

    async def load_component(self, location: str) -> ComponentDescriptor:
        """Load and cache a component.json."""
        entry = self.cache.get(location)
        if entry is not None and isinstance(entry.result, ComponentDescriptor):
            return entry.result

        descriptor = parse_component(await read_text(location), location)
        self.cache.set(location, CacheEntry(result=descriptor))
        return descriptor
