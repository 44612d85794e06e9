"""
Display directive for installed partials.

A partial tag may carry ``_info="path=relative status=show"``. Unless the
status is ``hide``, the partial's source is wrapped in HTML comments naming the
partial and, depending on ``path``, its resolved location or logical name.
"""
import logging
import re
from typing import Any, Dict, Iterable, Optional, Tuple

from .extension import INFO_KEY

logger = logging.getLogger(__name__)

PAIR_SEPARATOR_RE = re.compile(r"[\s,;&]+")

VALID_VALUES = {
    "path": {"absolute": "absolute", "relative": "relative", "false": False},
    "status": {"show": "show", "hide": "hide"},
}


def default_info() -> Dict[str, Any]:
    return {"path": "absolute", "status": "show"}


def parse_info(value: Any) -> Dict[str, Any]:
    """
    Parse an ``_info`` directive value.

    Unknown keys, unknown values and malformed pairs are ignored so that a
    broken directive falls back to the defaults.
    """
    options = default_info()
    if not isinstance(value, str):
        return options
    for raw_pair in PAIR_SEPARATOR_RE.split(value.strip()):
        if "=" not in raw_pair:
            continue
        key, raw_value = (part.strip() for part in raw_pair.split("=", 1))
        allowed = VALID_VALUES.get(key)
        if allowed is None or raw_value.lower() not in allowed:
            continue
        options[key] = allowed[raw_value.lower()]
    return options


def partial_comment(
    name: str,
    location: str,
    hash_pairs: Optional[Iterable[Tuple[str, Any]]] = None
) -> Optional[Tuple[str, str]]:
    """
    Build the comment pair wrapped around a partial.

    Args:
        name: Logical partial name
        location: Resolved partial location
        hash_pairs: Constant hash arguments of the partial tag

    Returns:
        (start, end) comments, or None when the directive hides them
    """
    info = default_info()
    for key, value in hash_pairs or ():
        if key == INFO_KEY:
            info = parse_info(value)
            break

    if info["status"] == "hide":
        return None

    if info["path"] == "absolute":
        shown = location
    elif info["path"] == "relative":
        shown = name
    else:
        shown = ""
    return (
        f"<!-- partialBegin#{name} {shown} -->\n",
        f"\n<!-- partialEnd#{name} -->\n",
    )


def wrap_partial(source: str, comment: Optional[Tuple[str, str]]) -> str:
    if comment is None:
        return source
    start, end = comment
    return start + source + end
