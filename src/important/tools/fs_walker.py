"""
Filesystem walker for important.

This module wraps ``os.walk`` for the find pipeline. Unlike a best-effort
crawler, traversal errors are raised to the caller: find aborts on the first
permission or I/O error instead of silently skipping parts of the tree.
"""

import os
from pathlib import Path
from typing import Dict, Iterator, Union
import logging


logger = logging.getLogger(__name__)


def _raise_walk_error(error: OSError) -> None:
    raise error


class FSWalker:
    """
    Filesystem walker that yields the non-directory entries of a tree.

    Directories are descended into but never yielded. Symbolic links to
    directories are listed as entries and not followed.
    """

    def __init__(self):
        self._stats = {
            'directories_traversed': 0,
            'files_scanned': 0,
        }

    def walk(self, root: Union[str, Path]) -> Iterator[Path]:
        """
        Walk a directory tree in traversal order.

        Args:
            root: Directory to walk; a file root yields only itself

        Yields:
            Path of every non-directory entry below the root

        Raises:
            OSError: On the first traversal error (PermissionError included)
        """
        root_path = Path(root)
        if root_path.exists() and not root_path.is_dir():
            self._stats['files_scanned'] += 1
            yield root_path
            return

        logger.debug(f"Walking directory tree: {root_path}")
        for current_dir, _subdirs, files in os.walk(root_path, onerror=_raise_walk_error):
            current_path = Path(current_dir)
            self._stats['directories_traversed'] += 1

            for filename in files:
                self._stats['files_scanned'] += 1
                yield current_path / filename

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the filesystem walking operation.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()
