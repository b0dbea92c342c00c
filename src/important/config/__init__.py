"""
Configuration loading for the important command-line tool.
"""

from .parser import ConfigParser, ConfigParseResult, ConfigurationError

__all__ = [
    'ConfigParser',
    'ConfigParseResult',
    'ConfigurationError',
]
