"""
Catalog file backend for important.

The catalog is a flat text file (``.important`` in the working directory)
holding one absolute path per line. It is used for files whose filesystem has
no extended attribute support.

The catalog is rewritten by read-modify-write without locking, so only one
invocation may modify it at a time.
"""

import logging
from pathlib import Path
from typing import FrozenSet, Iterable, List, Union

from ..models.config import CatalogConfig
from ..models.status import StatusCode, OK, PERMISSION_ERROR, IO_ERROR


logger = logging.getLogger(__name__)


class CatalogStore:
    """Set of marked absolute paths persisted in the catalog file."""

    def __init__(self, path: Union[str, Path], config: CatalogConfig):
        """
        Initialize the catalog store.

        Args:
            path: Location of the catalog file
            config: Catalog file settings
        """
        self._path = Path(path)
        self.config = config

    @property
    def path(self) -> Path:
        return self._path

    def _read_lines(self) -> List[str]:
        with open(self._path, 'r', encoding=self.config.encoding) as f:
            return [line.rstrip('\r\n') for line in f if line.strip()]

    def _listed_or_empty(self) -> List[str]:
        """
        Read the listed paths for a lookup.

        A missing catalog or any read error means nothing is listed.
        """
        try:
            return self._read_lines()
        except FileNotFoundError:
            return []
        except PermissionError:
            logger.warning(f"on search: current user does not have the 'read' permissions on {self._path}.")
            return []
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"on search: System I/O error occurred while trying to read {self._path}. "
                         f"Underlying error message: '{e}'.")
            return []

    def contains(self, path: str) -> bool:
        """Check whether a path is listed in the catalog."""
        return path in self._listed_or_empty()

    def snapshot(self) -> FrozenSet[str]:
        """Get the listed paths as a set, reading the catalog once."""
        return frozenset(self._listed_or_empty())

    def entries(self) -> List[str]:
        """Get the listed paths without duplicates, in file order."""
        try:
            return list(dict.fromkeys(self._read_lines()))
        except FileNotFoundError:
            return []

    def add(self, path: str) -> StatusCode:
        """
        Append a path to the catalog, creating the file on first use.

        Duplicates are not collapsed here; they disappear on the next removal.
        """
        try:
            with open(self._path, 'a', encoding=self.config.encoding) as f:
                f.write(path + '\n')
            logger.debug(f"Added {path} to {self._path}")
            return OK
        except PermissionError:
            logger.error(f"on {path}: current user does not have the 'read/create' permissions on {self._path}.")
            return PERMISSION_ERROR
        except OSError as e:
            logger.error(f"on {path}: System I/O error occurred while trying to create an additional attributes file. "
                         f"Underlying error message: '{e}'.")
            return IO_ERROR

    def remove_all(self, paths: Iterable[str]) -> StatusCode:
        """
        Remove a batch of paths and rewrite the catalog once.

        A missing catalog is a no-op. Errors are reported for the batch as a
        whole.
        """
        to_remove = set(paths)
        if not to_remove:
            return OK

        try:
            if not self._path.exists():
                return OK
            remaining = [line for line in dict.fromkeys(self._read_lines()) if line not in to_remove]
            with open(self._path, 'w', encoding=self.config.encoding) as f:
                f.writelines(line + '\n' for line in remaining)
            logger.debug(f"Rewrote {self._path} with {len(remaining)} entries")
            return OK
        except PermissionError:
            logger.error(f"on unmarking: current user does not have the 'read/write' permissions on {self._path}.")
            return PERMISSION_ERROR
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"on unmarking: System I/O error occurred while trying to modify an additional attributes file. "
                         f"Underlying error message: '{e}'.")
            return IO_ERROR
