"""
Cache of compiled templates, rendered results and loaded data.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from jinja2 import Template

from .resolver import is_placeholder

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """
    One cached location.

    ``compiled`` holds a render-ready template; ``result`` holds either the
    last rendered text of a view or the parsed content of a data file.
    """

    compiled: Optional[Template] = None
    result: Any = None


class RenderCache:
    """
    Cache keyed by resolved location.

    With ``disabled`` set every lookup misses while writes still happen, so
    each render reloads its files but later steps of the same render can
    still see what earlier steps stored.
    """

    def __init__(self, disabled: bool = False):
        """
        Initialize the cache.

        Args:
            disabled: Treat every lookup as a miss
        """
        self.entries: Dict[str, CacheEntry] = {}
        self.disabled = disabled

    def get(self, key: str) -> Optional[CacheEntry]:
        """
        Get a cached entry by location.

        Args:
            key: Resolved location

        Returns:
            Cache entry or None on a miss
        """
        if self.disabled:
            return None
        entry = self.entries.get(key)
        if entry is not None:
            logger.debug(f"Cache hit for {key}")
        return entry

    def peek(self, key: str) -> Optional[CacheEntry]:
        """Get an entry even when lookups are disabled (synthetic templates)."""
        return self.entries.get(key)

    def set(self, key: str, entry: CacheEntry) -> None:
        self.entries[key] = entry

    def invalidate(self, pattern: Optional[str] = None) -> int:
        """
        Invalidate cache entries matching a pattern.

        Synthetic entries (names like ``__default_layout__``) are only dropped
        when the pattern matches them explicitly.

        Args:
            pattern: Regex pattern to match against keys, None for everything

        Returns:
            Number of dropped entries
        """
        if pattern:
            regex = re.compile(pattern)
            keys_to_remove = [key for key in self.entries if regex.search(key)]
        else:
            keys_to_remove = [key for key in self.entries if not is_placeholder(key)]

        for key in keys_to_remove:
            del self.entries[key]

        logger.debug(f"Invalidated {len(keys_to_remove)} cache entries matching pattern '{pattern}'")
        return len(keys_to_remove)

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)
