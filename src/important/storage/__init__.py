"""
Mark storage backends for important.

Marks live either in a per-file extended attribute or, where the filesystem
does not support those, in the catalog file of the working directory.
"""

from .metadata import MetadataBackend, AttributeResult
from .catalog import CatalogStore

__all__ = ['MetadataBackend', 'AttributeResult', 'CatalogStore']
