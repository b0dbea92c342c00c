"""
Extended attribute backend for important.

Marks are stored as a small named attribute (``user.imp`` by default) whose
value is a single sentinel byte. Writes are read back and verified, since some
network and virtual filesystems accept attribute writes without persisting
them.
"""

import errno
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from ..models.config import MetadataConfig
from ..models.status import StatusCode, OK, PERMISSION_ERROR, IO_ERROR, UNCERTAIN


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# errno values meaning "this filesystem has no extended attributes"
_UNSUPPORTED_ERRNOS = {
    code for code in (
        getattr(errno, 'ENOTSUP', None),
        getattr(errno, 'EOPNOTSUPP', None),
        getattr(errno, 'ENOSYS', None),
    ) if code is not None
}

_NO_ATTRIBUTE_ERRNOS = {
    code for code in (
        getattr(errno, 'ENODATA', None),
        getattr(errno, 'ENOATTR', None),
    ) if code is not None
}

_XATTR_CALLS = ('listxattr', 'getxattr', 'setxattr', 'removexattr')


@dataclass(frozen=True)
class AttributeResult:
    """
    Outcome of writing a mark attribute.

    Attributes:
        status: Classified outcome of the attribute write
        needs_fallback: Whether the mark has to be written to the catalog instead
    """
    status: StatusCode
    needs_fallback: bool


class MetadataBackend:
    """
    Reads, writes and deletes the mark attribute of single files.

    Every method takes the target path explicitly; the backend itself holds no
    per-file state.
    """

    def __init__(self, config: MetadataConfig):
        """
        Initialize the backend.

        Args:
            config: Extended attribute settings
        """
        self.config = config
        self.attribute = config.get_full_name()
        self.sentinel = config.get_sentinel_bytes()

    def platform_supported(self) -> bool:
        """Check whether this platform exposes extended attribute calls."""
        return all(hasattr(os, name) for name in _XATTR_CALLS)

    def is_available(self, path: PathLike) -> bool:
        """
        Check whether the filesystem entry supports extended attributes.

        Errors other than "not supported" leave the backend available; the
        operation that follows reports them.
        """
        if not self.config.enabled or not self.platform_supported():
            return False
        try:
            os.listxattr(path)
        except OSError as e:
            if e.errno in _UNSUPPORTED_ERRNOS:
                logger.debug(f"Extended attributes not supported for {path}: {e}")
                return False
        return True

    def _list(self, path: PathLike) -> List[str]:
        return os.listxattr(path)

    def _read(self, path: PathLike) -> bytes:
        return os.getxattr(path, self.attribute)[:self.config.max_read_bytes]

    def has_mark(self, path: PathLike) -> bool:
        """
        Check whether the file carries the mark attribute.

        Any failure counts as "not marked" so callers can still consult the
        catalog.
        """
        if not self.is_available(path):
            return False
        try:
            if self.attribute not in self._list(path):
                return False
            return self._read(path)[:1] == self.sentinel
        except PermissionError:
            logger.warning(f"on {path}: current user does not have the 'read (attributes)' permissions on this file.")
            return False
        except OSError as e:
            if e.errno in _NO_ATTRIBUTE_ERRNOS:
                return False
            logger.error(f"on {path}: System I/O error occurred while trying to check if marked. "
                         f"Underlying error message: '{e}'.")
            return False

    def set_mark(self, path: PathLike) -> AttributeResult:
        """
        Write the sentinel value and verify it by reading it back.

        Returns:
            AttributeResult; ``needs_fallback`` is set whenever the mark could
            not be confirmed in the attribute
        """
        try:
            os.setxattr(path, self.attribute, self.sentinel)
            try:
                value = self._read(path)
            except OSError as e:
                if e.errno not in _NO_ATTRIBUTE_ERRNOS:
                    raise
                value = b''
        except PermissionError:
            logger.error(f"on {path}: current user does not have the 'write (attribute)' permissions on this file.")
            return AttributeResult(PERMISSION_ERROR, needs_fallback=True)
        except OSError as e:
            logger.error(f"on {path}: System I/O error occurred while trying to modify file's attribute. "
                         f"Underlying error message: '{e}'.")
            return AttributeResult(IO_ERROR, needs_fallback=True)

        if value[:1] != self.sentinel:
            logger.warning(f"on {path}: attribute {self.attribute} did not read back as written.")
            return AttributeResult(UNCERTAIN, needs_fallback=True)

        return AttributeResult(OK, needs_fallback=False)

    def clear_mark(self, path: PathLike) -> StatusCode:
        """
        Delete the mark attribute and verify it is gone.

        A missing attribute is success. Permission and I/O errors yield
        UNCERTAIN because the attribute may or may not still exist.
        """
        try:
            if self.attribute not in self._list(path):
                return OK
            os.removexattr(path, self.attribute)
            if self.attribute in self._list(path):
                logger.error(f"on {path}: attribute {self.attribute} still present after deletion.")
                return IO_ERROR
            return OK
        except PermissionError:
            logger.error(f"on {path}: current user does not have the 'delete attribute' permissions on this file.")
            return UNCERTAIN
        except OSError as e:
            if e.errno in _NO_ATTRIBUTE_ERRNOS:
                return OK
            logger.error(f"on {path}: System I/O error occurred while trying to modify file's attribute. "
                         f"Underlying error message: '{e}'.")
            return UNCERTAIN
