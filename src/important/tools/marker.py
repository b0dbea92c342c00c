"""
Mark and unmark orchestration for important.

The Marker processes a batch of file arguments. For every file it probes the
extended attribute backend and falls back to the catalog file when attributes
are unavailable or a write cannot be verified. Per-file outcomes are combined
into one StatusCode; a failing file never stops the rest of the batch.
"""

import os
import sys
import logging
from pathlib import Path
from typing import List, Optional, Sequence, TextIO, Union

from ..models.config import ImportantConfig
from ..models.status import StatusCode, OK, NOT_FOUND, PERMISSION_ERROR, UNCERTAIN
from ..storage.catalog import CatalogStore
from ..storage.metadata import MetadataBackend


logger = logging.getLogger(__name__)


class Marker:
    """
    Marks and unmarks files using the attribute backend or the catalog.

    Progress lines are written to ``stdout``; warnings and errors go through
    logging.
    """

    def __init__(self, config: ImportantConfig,
                 metadata: Optional[MetadataBackend] = None,
                 catalog: Optional[CatalogStore] = None,
                 stdout: Optional[TextIO] = None):
        """
        Initialize the marker.

        Args:
            config: Configuration with the working directory and backend settings
            metadata: Attribute backend (built from config when None)
            catalog: Catalog store (built from config when None)
            stdout: Stream for progress lines (sys.stdout at call time when None)
        """
        self.config = config
        self.metadata = metadata or MetadataBackend(config.metadata)
        self.catalog = catalog or CatalogStore(config.catalog_path, config.catalog)
        self._stdout = stdout

    def _progress(self, message: str) -> None:
        print(message, file=self._stdout or sys.stdout)

    def mark(self, targets: Sequence[str]) -> StatusCode:
        """
        Mark every target file.

        Args:
            targets: File arguments, relative ones anchored at the working directory

        Returns:
            Combined status of the whole batch
        """
        status = OK
        if not targets:
            logger.warning("no files given, nothing to mark.")
            return status

        for target in targets:
            path = self._resolve(target)
            if isinstance(path, StatusCode):
                status = status | path
            elif path is not None:
                status = status | self._mark_one(target, path)

        return status

    def unmark(self, targets: Sequence[str]) -> StatusCode:
        """
        Unmark every target file.

        Attributes are cleared per file, then the catalog is rewritten once for
        every resolved path of the batch.

        Args:
            targets: File arguments, relative ones anchored at the working directory

        Returns:
            Combined status of the whole batch
        """
        status = OK
        if not targets:
            logger.warning("no files given, nothing to unmark.")
            return status

        resolved: List[str] = []
        cleared: List[str] = []
        for target in targets:
            path = self._resolve(target)
            if isinstance(path, StatusCode):
                status = status | path
                continue
            if path is None:
                continue

            resolved.append(str(path))
            file_status = self._unmark_one(path)
            if file_status.is_ok:
                cleared.append(target)
            status = status | file_status

        catalog_status = self.catalog.remove_all(resolved)
        if catalog_status.is_ok:
            for target in cleared:
                self._progress(f"{target} unmarked successfully.")

        return status | catalog_status

    def _resolve(self, target: str) -> Union[Path, StatusCode, None]:
        """
        Resolve a target argument to an absolute file path.

        Returns:
            The absolute Path, None for skipped directories, or the failure
            StatusCode
        """
        path = self.config.resolve_path(target)
        try:
            if not path.exists():
                logger.error(f"on {target}: file does not exist or current user does not have permissions to locate it.")
                return NOT_FOUND
            if path.is_dir():
                logger.warning(f"on {target}: This is a directory, skipping...")
                return None
        except PermissionError:
            logger.error(f"on {target}: current user does not have the 'read' permissions on this file/directory.")
            return PERMISSION_ERROR
        # Absolute and normalized, symbolic links kept as given.
        return Path(os.path.abspath(path))

    def _warn_fallback(self, target: str) -> None:
        if not self.metadata.config.enabled:
            return
        logger.warning(f"on {target}: it may be that file system does not support extended file arguments. "
                       f"falling back to the additional file approach. "
                       f"note: files 'importance' will not be preserved on copying/moving.")

    def _mark_one(self, target: str, path: Path) -> StatusCode:
        if not self.metadata.is_available(path):
            self._warn_fallback(target)
            return self._mark_in_catalog(target, path)

        result = self.metadata.set_mark(path)
        if not result.needs_fallback:
            self._progress(f"{target} marked successfully.")
            return OK

        self._warn_fallback(target)
        catalog_status = self._mark_in_catalog(target, path)
        if catalog_status.is_ok:
            return OK
        # The attribute write may have partially happened.
        return catalog_status | UNCERTAIN

    def _mark_in_catalog(self, target: str, path: Path) -> StatusCode:
        status = self.catalog.add(str(path))
        if status.is_ok:
            self._progress(f"{target} marked successfully.")
        return status

    def _unmark_one(self, path: Path) -> StatusCode:
        if not self.metadata.is_available(path):
            return OK
        return self.metadata.clear_mark(path)
