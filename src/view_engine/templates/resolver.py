"""
Maps logical template names to file locations.
"""
import logging
import os
import re
from typing import Optional

from ..config.options import EngineOptions

logger = logging.getLogger(__name__)

# Synthetic templates such as the identity layout are addressed by these names
PLACEHOLDER_RE = re.compile(r"__[^_\s\W]+(_[^_\s\W]+)*__")
RELATIVE_RE = re.compile(r"^\.{1,2}")
SHARED_PREFIX = "shared" + os.sep


def is_placeholder(name: str) -> bool:
    """Check whether a name addresses a synthetic, cache-only template."""
    return bool(PLACEHOLDER_RE.fullmatch(name))


class PathResolver:
    """Resolves names to absolute template locations."""

    def __init__(self, options: EngineOptions):
        self.options = options

    def resolve(
        self,
        name: str,
        kind: Optional[str] = None,
        ext: Optional[str] = None,
        base_url: Optional[str] = None,
        state=None
    ) -> str:
        """
        Resolve a template name.

        1. placeholder names are returned unchanged;
        2. absolute names only get their extension added when missing;
        3. relative names (``./x``, ``../x``) resolve against the directory of
           ``base_url``, else against ``root/project/view_name``;
        4. bare names resolve to ``root/project/kind_dir/name``; a ``shared/``
           prefix switches the project to the shared one.

        Args:
            name: Template name, with or without extension and directories
            kind: view, layout, partial, helper or data
            ext: Extension to add when the name has none, defaults to ``extname``
            base_url: Location of the template referencing ``name``
            state: Render state of the current render

        Returns:
            Absolute location, or the placeholder name itself
        """
        if is_placeholder(name):
            return name

        is_relative = bool(RELATIVE_RE.match(name))
        name = os.path.normpath(name)
        base_url = base_url and os.path.normpath(base_url)

        if not os.path.splitext(name)[1]:
            name = name + (ext or self.options.extname)
        if os.path.isabs(name):
            return name

        project = getattr(state, "project_name", "") or ""
        if is_relative:
            if base_url:
                result = os.path.abspath(os.path.join(os.path.dirname(base_url), name))
            else:
                view_name = getattr(state, "view_name", "") or ""
                result = os.path.abspath(os.path.join(self.options.root, project, view_name, name))
        else:
            if name.startswith(SHARED_PREFIX):
                name = name[len(SHARED_PREFIX):]
                project = self.options.shared
                kind_dir = self.options.instance_kind_dir(kind)
            else:
                kind_dir = self.options.kind_dir(kind, state)
            result = os.path.join(self.options.root, project, kind_dir, name)

        logger.debug("Resolved %s template %s to %s", kind or "plain", name, result)
        return result
