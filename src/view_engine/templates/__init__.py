"""
Template layer: name resolution, dependency scanning and loading, caching.
"""

from .cache import CacheEntry, RenderCache
from .context import RenderContext, RenderState
from .loader import DependencyLoader, HelperLoadResult, HelperStatus
from .registry import Registry
from .resolver import PathResolver, is_placeholder
from .scanner import DynamicBinding, HelperReference, ScanResult, TemplateReference, scan

__all__ = [
    'CacheEntry',
    'RenderCache',
    'RenderContext',
    'RenderState',
    'DependencyLoader',
    'HelperLoadResult',
    'HelperStatus',
    'Registry',
    'PathResolver',
    'is_placeholder',
    'DynamicBinding',
    'HelperReference',
    'ScanResult',
    'TemplateReference',
    'scan',
]
