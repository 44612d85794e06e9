"""
Front matter splitting for views.
"""
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from ..error.exceptions import TemplateParseError

FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)", re.DOTALL)


@dataclass
class FrontMatter:
    """A view split into its metadata block and its template body."""

    metadata: Optional[Dict[str, Any]]
    content: str


def split_front_matter(raw: str, location: Optional[str] = None) -> FrontMatter:
    """
    Split a leading ``---`` delimited YAML block from template text.

    Args:
        raw: Raw template text
        location: Template location, used in error messages

    Returns:
        FrontMatter; ``metadata`` is None when the text has no block

    Raises:
        TemplateParseError: If the block is not a YAML mapping
    """
    match = FRONTMATTER_RE.match(raw)
    if not match:
        return FrontMatter(metadata=None, content=raw)

    try:
        metadata = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise TemplateParseError(f"Invalid front matter in {location or 'template'}: {e}") from e

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise TemplateParseError(f"Front matter in {location or 'template'} must be a mapping")
    return FrontMatter(metadata=metadata, content=raw[match.end():])
