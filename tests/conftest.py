"""
Shared fixtures for the important test suite.

Extended attribute support differs between filesystems (tmpfs, overlayfs,
network mounts), so the xattr calls of the ``os`` module are replaced by an
in-memory store wherever a test depends on attribute behaviour.
"""

import errno
import logging
import os

import pytest


ENOATTR = getattr(errno, 'ENODATA', None) or getattr(errno, 'ENOATTR')


class FakeXattrs:
    """In-memory stand-in for os.listxattr/getxattr/setxattr/removexattr."""

    def __init__(self):
        self.store = {}
        self.unsupported = set()
        self.failures = {}
        self.drop_writes = False
        self.ignore_removes = False

    def _key(self, path) -> str:
        return os.path.abspath(os.fspath(path))

    def _check(self, operation: str, path) -> str:
        key = self._key(path)
        if key in self.unsupported:
            raise OSError(errno.ENOTSUP, "Operation not supported", key)
        error = self.failures.get(operation)
        if error is not None:
            raise error
        return key

    def listxattr(self, path=None, *, follow_symlinks=True):
        key = self._check('list', path)
        return list(self.store.get(key, {}))

    def getxattr(self, path, attribute, *, follow_symlinks=True):
        key = self._check('get', path)
        try:
            return self.store[key][attribute]
        except KeyError:
            raise OSError(ENOATTR, "No data available", key)

    def setxattr(self, path, attribute, value, flags=0, *, follow_symlinks=True):
        key = self._check('set', path)
        if self.drop_writes:
            return
        self.store.setdefault(key, {})[attribute] = bytes(value)

    def removexattr(self, path, attribute, *, follow_symlinks=True):
        key = self._check('remove', path)
        if self.ignore_removes:
            return
        try:
            del self.store[key][attribute]
        except KeyError:
            raise OSError(ENOATTR, "No data available", key)

    def marked(self, path, attribute='user.imp') -> bool:
        return self.store.get(self._key(path), {}).get(attribute, b'')[:1] == b'y'


@pytest.fixture
def fake_xattrs(monkeypatch):
    """Install an in-memory extended attribute store."""
    fake = FakeXattrs()
    for name in ('listxattr', 'getxattr', 'setxattr', 'removexattr'):
        monkeypatch.setattr(os, name, getattr(fake, name), raising=False)
    return fake


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI attaches to the package logger."""
    yield
    package_logger = logging.getLogger("important")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
