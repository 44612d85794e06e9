"""
Dependency scanning over parsed templates.

The scan is a stateless walk over the AST: a mapping from node class to
handler function decides what each node contributes, and every call starts
from fresh accumulators.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple, Type

from jinja2 import nodes

from .extension import CONTEXT_KEY, RENDER_METHOD, PartialExtension

# Names Jinja2 binds itself inside templates
SPECIAL_NAMES = frozenset({"caller", "super", "varargs", "kwargs", "loop", "self"})

HashPairs = Tuple[Tuple[str, Any], ...]


@dataclass
class DynamicBinding:
    """A partial whose name is computed at render time by a helper."""

    context: str
    name: str
    base_url: Optional[str] = None
    hash: Optional[HashPairs] = None


@dataclass
class TemplateReference:
    """A partial referenced by a template."""

    name: str
    hash: HashPairs = ()
    dynamic: Optional[DynamicBinding] = None


@dataclass
class HelperReference:
    name: str


@dataclass
class ScanResult:
    partials: List[TemplateReference] = field(default_factory=list)
    helpers: List[HelperReference] = field(default_factory=list)
    # Static references dropped because the partial is already registered
    registered: List[TemplateReference] = field(default_factory=list)


@dataclass
class _Collected:
    partials: Dict[Tuple[str, Optional[str]], TemplateReference] = field(default_factory=dict)
    helpers: Dict[str, HelperReference] = field(default_factory=dict)
    bound: Set[str] = field(default_factory=set)


NodeHandler = Callable[[nodes.Node, _Collected], None]


def _const_pairs(node: nodes.Dict) -> HashPairs:
    pairs = []
    for pair in node.items:
        if isinstance(pair.key, nodes.Const) and isinstance(pair.value, nodes.Const):
            pairs.append((pair.key.value, pair.value.value))
    return tuple(pairs)


def _add_partial(collected: _Collected, reference: TemplateReference) -> None:
    key = (reference.name, reference.dynamic.context if reference.dynamic else None)
    collected.partials.setdefault(key, reference)


def _visit_call(node: nodes.Call, collected: _Collected) -> None:
    target = node.node
    if isinstance(target, nodes.Name) and target.ctx == "load":
        collected.helpers.setdefault(target.name, HelperReference(target.name))
        return
    if not (
        isinstance(target, nodes.ExtensionAttribute)
        and target.identifier == PartialExtension.identifier
        and target.name == RENDER_METHOD
    ):
        return

    name_node, hash_node = node.args[0], node.args[1]
    if not isinstance(name_node, nodes.Const):
        # Name only known at render time, it must be registered already
        return
    pairs = _const_pairs(hash_node)
    hash_dict = dict(pairs)
    dynamic = None
    if CONTEXT_KEY in hash_dict:
        dynamic = DynamicBinding(context=hash_dict[CONTEXT_KEY], name=name_node.value)
        collected.helpers.setdefault(name_node.value, HelperReference(name_node.value))
    _add_partial(collected, TemplateReference(name=name_node.value, hash=pairs, dynamic=dynamic))


def _visit_template_ref(node: nodes.Node, collected: _Collected) -> None:
    # include, import, from-import and extends all load templates by name
    if isinstance(node.template, nodes.Const) and isinstance(node.template.value, str):
        _add_partial(collected, TemplateReference(name=node.template.value))
    if isinstance(node, nodes.Import):
        collected.bound.add(node.target)
    elif isinstance(node, nodes.FromImport):
        for name in node.names:
            collected.bound.add(name[1] if isinstance(name, tuple) else name)


def _visit_name(node: nodes.Name, collected: _Collected) -> None:
    if node.ctx in ("store", "param"):
        collected.bound.add(node.name)


def _visit_macro(node: nodes.Macro, collected: _Collected) -> None:
    collected.bound.add(node.name)


DEFAULT_HANDLERS: Mapping[Type[nodes.Node], NodeHandler] = {
    nodes.Call: _visit_call,
    nodes.Include: _visit_template_ref,
    nodes.Import: _visit_template_ref,
    nodes.FromImport: _visit_template_ref,
    nodes.Extends: _visit_template_ref,
    nodes.Name: _visit_name,
    nodes.Macro: _visit_macro,
}


def walk(ast: nodes.Node, handlers: Mapping[Type[nodes.Node], NodeHandler], collected: _Collected) -> None:
    """Dispatch every node of ``ast`` to the handler registered for its class."""
    for node in ast.find_all(tuple(handlers)):
        for node_type in type(node).__mro__:
            handler = handlers.get(node_type)
            if handler is not None:
                handler(node, collected)
                break


def scan(
    ast: nodes.Template,
    registry,
    handlers: Optional[Mapping[Type[nodes.Node], NodeHandler]] = None,
    reload_partials: bool = False
) -> ScanResult:
    """
    Collect the partials and helpers a template needs that are not registered yet.

    Args:
        ast: Parsed template
        registry: Registry consulted to filter out known names
        handlers: Node handlers, defaults to DEFAULT_HANDLERS
        reload_partials: Report registered partials too (used when caching is off)

    Returns:
        ScanResult with the missing partial and helper references, plus the
        registered partials that were left out
    """
    collected = _Collected()
    walk(ast, handlers or DEFAULT_HANDLERS, collected)

    partials = []
    registered = []
    for reference in collected.partials.values():
        if reference.dynamic or reload_partials or not registry.has_partial(reference.name):
            partials.append(reference)
        else:
            registered.append(reference)
    helpers = [
        reference for name, reference in collected.helpers.items()
        if name not in collected.bound
        and name not in SPECIAL_NAMES
        and not registry.has_helper(name)
    ]
    return ScanResult(partials=partials, helpers=helpers, registered=registered)
