"""
Data models for important.

This module contains the core data structures used throughout the system.
"""

from .status import StatusCode, StatusFlag, combine_all
from .find_query import FindQuery
from .config import ImportantConfig, MetadataConfig, CatalogConfig, LoggingConfig

__all__ = [
    'StatusCode',
    'StatusFlag',
    'combine_all',
    'FindQuery',
    'ImportantConfig',
    'MetadataConfig',
    'CatalogConfig',
    'LoggingConfig',
]
