"""
Logging setup for the view engine.
"""
from .config import LogConfig, JsonFormatter, setup_logging

__all__ = ['LogConfig', 'JsonFormatter', 'setup_logging']
