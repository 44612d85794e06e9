"""
Engine configuration.
"""
from .options import EngineOptions, KIND_OPTIONS
from .loader import load_options, load_options_file, load_options_from_env

__all__ = [
    'EngineOptions',
    'KIND_OPTIONS',
    'load_options',
    'load_options_file',
    'load_options_from_env',
]
