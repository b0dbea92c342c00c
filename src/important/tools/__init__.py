"""
Marking and search tools for important.

This module contains the mark/unmark orchestration, the filesystem walker and
the find pipeline.
"""

from .fs_walker import FSWalker
from .marker import Marker
from .query_engine import QueryEngine, QueryError

__all__ = ['FSWalker', 'Marker', 'QueryEngine', 'QueryError']
