"""
Utility helpers.
"""
from .io import read_text

__all__ = ['read_text']
