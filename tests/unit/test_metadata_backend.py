"""
Unit tests for the extended attribute backend.

The ``os`` xattr calls are replaced by the in-memory ``fake_xattrs`` fixture,
which can also simulate unsupported filesystems, silently dropped writes and
permission or I/O failures.
"""

import errno
import os
import logging

import pytest

from important.models.config import MetadataConfig
from important.models.status import OK, PERMISSION_ERROR, IO_ERROR, UNCERTAIN
from important.storage.metadata import MetadataBackend, AttributeResult


@pytest.fixture
def target(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("content")
    return path


@pytest.fixture
def backend():
    return MetadataBackend(MetadataConfig())


class TestAvailability:
    """Test cases for the capability probe."""

    def test_available(self, fake_xattrs, backend, target):
        assert backend.is_available(target)

    def test_unsupported_filesystem(self, fake_xattrs, backend, target):
        fake_xattrs.unsupported.add(str(target))

        assert not backend.is_available(target)

    def test_disabled_by_config(self, fake_xattrs, target):
        backend = MetadataBackend(MetadataConfig(enabled=False))

        assert not backend.is_available(target)

    def test_platform_without_xattr_calls(self, monkeypatch, backend, target):
        monkeypatch.delattr(os, 'listxattr', raising=False)

        assert not backend.platform_supported()
        assert not backend.is_available(target)

    def test_other_errors_leave_backend_available(self, fake_xattrs, backend, target):
        fake_xattrs.failures['list'] = PermissionError(errno.EACCES, "Permission denied")

        assert backend.is_available(target)


class TestSetMark:
    """Test cases for writing the mark attribute."""

    def test_write_and_verify(self, fake_xattrs, backend, target):
        result = backend.set_mark(target)

        assert result == AttributeResult(OK, needs_fallback=False)
        assert fake_xattrs.store[str(target)]['user.imp'] == b'y'
        assert backend.has_mark(target)

    def test_dropped_write_needs_fallback(self, fake_xattrs, backend, target, caplog):
        """A filesystem that accepts but does not keep the write is detected."""
        fake_xattrs.drop_writes = True

        with caplog.at_level(logging.WARNING):
            result = backend.set_mark(target)

        assert result.needs_fallback
        assert result.status == UNCERTAIN
        assert not backend.has_mark(target)

    def test_wrong_readback_needs_fallback(self, fake_xattrs, backend, target):
        fake_xattrs.store[str(target)] = {'user.imp': b'n'}
        fake_xattrs.drop_writes = True

        assert backend.set_mark(target).needs_fallback

    def test_permission_error(self, fake_xattrs, backend, target, caplog):
        fake_xattrs.failures['set'] = PermissionError(errno.EPERM, "Operation not permitted")

        with caplog.at_level(logging.ERROR):
            result = backend.set_mark(target)

        assert result == AttributeResult(PERMISSION_ERROR, needs_fallback=True)
        assert "write (attribute)" in caplog.text

    def test_io_error(self, fake_xattrs, backend, target, caplog):
        fake_xattrs.failures['set'] = OSError(errno.EIO, "Input/output error")

        with caplog.at_level(logging.ERROR):
            result = backend.set_mark(target)

        assert result == AttributeResult(IO_ERROR, needs_fallback=True)
        assert "Input/output error" in caplog.text

    def test_custom_attribute_settings(self, fake_xattrs, target):
        backend = MetadataBackend(MetadataConfig(attribute_name="star", namespace="user", sentinel="1"))

        assert not backend.set_mark(target).needs_fallback
        assert fake_xattrs.store[str(target)] == {'user.star': b'1'}


class TestHasMark:
    """Test cases for reading the mark attribute."""

    def test_unmarked(self, fake_xattrs, backend, target):
        assert not backend.has_mark(target)

    def test_other_value_is_not_a_mark(self, fake_xattrs, backend, target):
        fake_xattrs.store[str(target)] = {'user.imp': b'no'}

        assert not backend.has_mark(target)

    def test_only_first_byte_counts(self, fake_xattrs, backend, target):
        fake_xattrs.store[str(target)] = {'user.imp': b'yes'}

        assert backend.has_mark(target)

    def test_read_is_bounded(self, fake_xattrs, target):
        backend = MetadataBackend(MetadataConfig(max_read_bytes=1))
        fake_xattrs.store[str(target)] = {'user.imp': b'y' + b'x' * 70000}

        assert backend.has_mark(target)

    def test_unsupported_filesystem(self, fake_xattrs, backend, target):
        fake_xattrs.store[str(target)] = {'user.imp': b'y'}
        fake_xattrs.unsupported.add(str(target))

        assert not backend.has_mark(target)

    def test_read_errors_mean_unmarked(self, fake_xattrs, backend, target, caplog):
        fake_xattrs.store[str(target)] = {'user.imp': b'y'}
        fake_xattrs.failures['get'] = OSError(errno.EIO, "Input/output error")

        with caplog.at_level(logging.ERROR):
            assert not backend.has_mark(target)
        assert "check if marked" in caplog.text

    def test_permission_errors_mean_unmarked(self, fake_xattrs, backend, target, caplog):
        fake_xattrs.store[str(target)] = {'user.imp': b'y'}
        fake_xattrs.failures['get'] = PermissionError(errno.EACCES, "Permission denied")

        with caplog.at_level(logging.WARNING):
            assert not backend.has_mark(target)
        assert "read (attributes)" in caplog.text


class TestClearMark:
    """Test cases for deleting the mark attribute."""

    def test_clear(self, fake_xattrs, backend, target):
        backend.set_mark(target)

        assert backend.clear_mark(target) == OK
        assert not backend.has_mark(target)

    def test_clear_unmarked_is_ok(self, fake_xattrs, backend, target):
        assert backend.clear_mark(target) == OK

    def test_other_attributes_survive(self, fake_xattrs, backend, target):
        fake_xattrs.store[str(target)] = {'user.imp': b'y', 'user.other': b'1'}

        backend.clear_mark(target)

        assert fake_xattrs.store[str(target)] == {'user.other': b'1'}

    def test_attribute_still_listed_after_delete(self, fake_xattrs, backend, target):
        backend.set_mark(target)
        fake_xattrs.ignore_removes = True

        assert backend.clear_mark(target) == IO_ERROR

    def test_permission_error_is_uncertain(self, fake_xattrs, backend, target, caplog):
        backend.set_mark(target)
        fake_xattrs.failures['remove'] = PermissionError(errno.EPERM, "Operation not permitted")

        with caplog.at_level(logging.ERROR):
            assert backend.clear_mark(target) == UNCERTAIN
        assert "delete attribute" in caplog.text

    def test_io_error_is_uncertain(self, fake_xattrs, backend, target):
        backend.set_mark(target)
        fake_xattrs.failures['list'] = OSError(errno.EIO, "Input/output error")

        assert backend.clear_mark(target) == UNCERTAIN

    def test_attribute_vanishing_before_delete_is_ok(self, fake_xattrs, backend, target, monkeypatch):
        backend.set_mark(target)
        original_remove = fake_xattrs.removexattr

        def remove_twice(path, attribute, **kwargs):
            original_remove(path, attribute)
            original_remove(path, attribute)

        monkeypatch.setattr(os, 'removexattr', remove_twice)

        assert backend.clear_mark(target) == OK
