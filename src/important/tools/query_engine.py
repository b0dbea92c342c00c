"""
Find pipeline for important.

The QueryEngine walks a directory tree and yields the absolute paths of
files that match the name and extension patterns of a FindQuery and are
marked by either backend. A file counts as marked when its attribute carries
the sentinel or when its path is listed in the catalog; both sources are
consulted because a file may have been marked through either one.
"""

import os
import re
import logging
from pathlib import Path
from typing import Dict, FrozenSet, Iterator, Optional

from ..models.config import ImportantConfig
from ..models.find_query import FindQuery
from ..models.status import StatusCode, INVALID_SYNTAX, PERMISSION_ERROR, IO_ERROR
from ..storage.catalog import CatalogStore
from ..storage.metadata import MetadataBackend
from .fs_walker import FSWalker


logger = logging.getLogger(__name__)


class QueryError(Exception):
    """Raised when a find query cannot be completed."""

    def __init__(self, message: str, status: StatusCode):
        super().__init__(message)
        self.status = status


class QueryEngine:
    """
    Finds marked files under a directory tree.

    Results are produced lazily in traversal order; results already yielded
    before a traversal error stay valid.
    """

    def __init__(self, config: ImportantConfig,
                 metadata: Optional[MetadataBackend] = None,
                 catalog: Optional[CatalogStore] = None,
                 walker: Optional[FSWalker] = None):
        """
        Initialize the query engine.

        Args:
            config: Configuration with the working directory and backend settings
            metadata: Attribute backend (built from config when None)
            catalog: Catalog store (built from config when None)
            walker: Filesystem walker (a fresh FSWalker when None)
        """
        self.config = config
        self.metadata = metadata or MetadataBackend(config.metadata)
        self.catalog = catalog or CatalogStore(config.catalog_path, config.catalog)
        self.walker = walker or FSWalker()
        self._files_matched = 0

    def find(self, query: FindQuery) -> Iterator[str]:
        """
        Find marked files matching a query.

        Patterns are compiled and the search root is resolved before this
        method returns, so malformed patterns fail before any traversal.

        Args:
            query: The find query

        Returns:
            Iterator over absolute paths of matching marked files

        Raises:
            QueryError: With INVALID_SYNTAX for a malformed pattern (raised
                immediately), PERMISSION_ERROR or IO_ERROR for traversal errors
                (raised while iterating)
        """
        root = Path(os.path.abspath(query.resolve_directory(self.config.working_directory)))
        logger.debug(f"Running find: {query}")

        level = logging.INFO if query.verbose else logging.DEBUG
        logger.log(level, f"Searching in the directory: {root}")
        logger.log(level, f"Name regexp: {query.name_regexp()}")
        logger.log(level, f"Extension regexp: {query.extension_regexp()}")

        try:
            name_pattern, ext_pattern = query.compile_patterns()
        except re.error as e:
            raise QueryError(f"RegExp {e.pattern} is not valid! {e}", INVALID_SYNTAX) from e

        # Read once per search; the catalog does not change while finding.
        listed = self.catalog.snapshot()
        return self._iter_matches(root, name_pattern, ext_pattern, listed)

    def _iter_matches(self, root: Path, name_pattern: re.Pattern, ext_pattern: re.Pattern,
                      listed: FrozenSet[str]) -> Iterator[str]:
        try:
            for path in self.walker.walk(root):
                name = path.name
                if not path.is_file():
                    continue
                if not name_pattern.fullmatch(name):
                    continue
                if not ext_pattern.fullmatch(name):
                    continue
                if not self.is_marked(path, listed):
                    continue
                self._files_matched += 1
                yield str(path)
        except PermissionError as e:
            raise QueryError(f"current user does not have the 'read' permissions on {e.filename or root}.",
                             PERMISSION_ERROR) from e
        except OSError as e:
            raise QueryError(f"System I/O error occurred while trying to traverse the {root} directory. "
                             f"Underlying error message: '{e}'.", IO_ERROR) from e

    def is_marked(self, path: Path, listed: Optional[FrozenSet[str]] = None) -> bool:
        """
        Check whether either backend marks the file.

        Args:
            path: File to check
            listed: Catalog snapshot to consult instead of reading the catalog
        """
        absolute = os.path.abspath(path)
        if self.metadata.has_mark(absolute):
            return True
        if listed is None:
            return self.catalog.contains(absolute)
        return absolute in listed

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the find operations run so far.

        Returns:
            Dictionary containing operation statistics
        """
        stats = self.walker.get_stats()
        stats['files_matched'] = self._files_matched
        return stats
