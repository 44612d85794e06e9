"""
Jinja2 extension providing the ``{% partial %}`` tag.

    {% partial "card" title=page.title %}
    {% partial "./sidebar" _info="status=hide" %}
    {% partial "pick_card" _context="kind" %}

The first argument names a registered partial. Keyword arguments are layered
over the current context while the partial renders. Two keys are reserved:
``_info`` carries the display directive read when the partial is installed and
``_context`` turns the tag into a dynamic partial, whose name is a helper that
maps ``context[_context]`` to the partial to render.
"""
from jinja2 import nodes
from jinja2.exceptions import UndefinedError
from jinja2.ext import Extension
from markupsafe import Markup

INFO_KEY = "_info"
CONTEXT_KEY = "_context"
RESERVED_KEYS = (INFO_KEY, CONTEXT_KEY)

RENDER_METHOD = "_render_partial"


class PartialExtension(Extension):
    """Extension for {% partial name key=value ... %} inclusion tags."""

    tags = {"partial"}

    def __init__(self, environment):
        super().__init__(environment)
        # Set by the owning Registry
        environment.extend(view_registry=None)

    def parse(self, parser):
        """Parse the partial name followed by optional key=value pairs."""
        lineno = next(parser.stream).lineno
        name = parser.parse_expression()

        pairs = []
        while parser.stream.current.type != "block_end":
            parser.stream.skip_if("comma")
            key = parser.stream.expect("name")
            parser.stream.expect("assign")
            value = parser.parse_expression()
            pairs.append(nodes.Pair(nodes.Const(key.value), value, lineno=key.lineno))

        call = self.call_method(
            RENDER_METHOD,
            [name, nodes.Dict(pairs), nodes.ContextReference()],
            lineno=lineno,
        )
        return nodes.Output([call], lineno=lineno)

    def _render_partial(self, name, hash_, context):
        """Render a registered partial at template render time."""
        registry = self.environment.view_registry
        binding = hash_.get(CONTEXT_KEY)
        if binding is not None:
            name = registry.call_helper(name, context.get(binding))

        template = registry.get_template(name)
        values = dict(context.get_all())
        values.update({key: value for key, value in hash_.items() if key not in RESERVED_KEYS})
        return Markup(template.render(values))


def helper_undefined(name: str) -> UndefinedError:
    """Build the error Jinja2 raises for an undefined callable."""
    return UndefinedError(f"'{name}' is undefined")
