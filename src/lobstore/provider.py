##############################################################################
#
# Copyright (c) 2026 Zope Foundation and Contributors.
# All Rights Reserved.
#
# This software is subject to the provisions of the Zope Public License,
# Version 2.1 (ZPL).  A copy of the ZPL should accompany this distribution.
# THIS SOFTWARE IS PROVIDED "AS IS" AND ANY AND ALL EXPRESS OR IMPLIED
# WARRANTIES ARE DISCLAIMED, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED
# WARRANTIES OF TITLE, MERCHANTABILITY, AGAINST INFRINGEMENT, AND FITNESS
# FOR A PARTICULAR PURPOSE
#
##############################################################################
"""Temporary backing files

A TemporaryFileProvider owns a scratch directory.  It creates the files
that back content storages in it and deletes them again when the
storages are released.  Nothing in the scratch directory survives the
provider: files that are still allocated when the provider is closed are
deleted, and files left behind by a process that died are purged the
next time a provider is opened on the same directory.
"""
import codecs
import logging
import os
import re
import threading
import weakref

import zc.lockfile
import zope.interface

from lobstore.exceptions import CharsetResolutionError
from lobstore.exceptions import ContentStorageError
from lobstore.exceptions import DisposalWarning
from lobstore.exceptions import OwnershipError
from lobstore.exceptions import StorageAccessError
from lobstore.interfaces import IApplication
from lobstore.interfaces import IBackingFile
from lobstore.interfaces import IBackingFileProvider
from lobstore.monitor import checkCanceled
from lobstore.utils import DEFAULT_BUFSIZE
from lobstore.utils import cp
from lobstore.utils import mktemp


logger = logging.getLogger('lobstore.provider')

LOCK_FILE = '.lock'
TEMP_SUFFIX = '.tmp'

_unsafe = re.compile(r'[^A-Za-z0-9_.]+')

_pid = str(os.getpid())


def log(msg, level=logging.INFO, subsys=_pid, exc_info=False):
    message = "(%s) %s" % (subsys, msg)
    logger.log(level, message, exc_info=exc_info)


def _safe_name(name):
    # Hints and application names end up in file names.
    return _unsafe.sub('_', str(name)).strip('_.') or 'content'


@zope.interface.implementer(IBackingFile)
class TemporaryFile(object):
    """A file in a provider's scratch directory.

    A temporary file is owned by at most one live storage at a time.  The
    owner is only weakly referenced.
    """

    disposed = False

    def __init__(self, provider, path):
        self.provider = provider
        self.path = path
        self._owner = None

    def __repr__(self):
        return '<TemporaryFile %s>' % self.path

    def __fspath__(self):
        return self.path

    @property
    def owner(self):
        ref = self._owner
        if ref is None:
            return None
        return ref()

    def claim(self, owner):
        """Make owner the only storage allowed to dispose of the file."""
        if self.disposed:
            raise StorageAccessError("%s was already deleted" % self.path)
        current = self.owner
        if current is not None and current is not owner:
            raise OwnershipError(self, current)
        self._owner = weakref.ref(owner)

    def relinquish(self):
        self._owner = None

    def exists(self):
        return os.path.exists(self.path)

    def open(self):
        return open(self.path, 'rb')

    def getSize(self):
        return os.path.getsize(self.path)

    def getCharset(self):
        return self.provider.getCharset(self)

    def setCharset(self, charset):
        self.provider.setCharset(self, charset)

    def setContents(self, stream, monitor=None):
        checkCanceled(monitor)
        with open(self.path, 'wb') as f:
            cp(stream, f, bufsize=self.provider.buffer_size, monitor=monitor)


@zope.interface.implementer(IBackingFileProvider)
class TemporaryFileProvider(object):
    """Allocates temporary files in a scratch directory.

    The scratch directory is locked while the provider is open, so that
    two processes never use (and purge) the same directory.
    """

    closed = False

    def __init__(self, scratch_root, default_charset='utf-8',
                 buffer_size=DEFAULT_BUFSIZE, purge=True, prefix='lob'):
        self.scratch_root = os.path.abspath(scratch_root)
        self.default_charset = codecs.lookup(default_charset).name
        self.buffer_size = buffer_size
        self.prefix = _safe_name(prefix)
        self._files = {}  # path -> TemporaryFile
        self._charsets = {}  # path -> charset name
        self._undeleted = {}  # path -> disposed TemporaryFile still on disk
        self._lock = threading.Lock()

        if not os.path.exists(self.scratch_root):
            os.makedirs(self.scratch_root)
            log("Scratch directory '%s' does not exist. "
                "Created new directory." % self.scratch_root)

        self._lock_path = os.path.join(self.scratch_root, LOCK_FILE)
        self._lock_file = zc.lockfile.LockFile(self._lock_path)

        if purge:
            self.purge()

    def __repr__(self):
        return '<%s at %s>' % (self.__class__.__name__, self.scratch_root)

    def __enter__(self):
        return self

    def __exit__(self, t, v, tb):
        self.close()

    def _isTemporaryFile(self, name):
        return (name.startswith(self.prefix + '-')
                and name.endswith(TEMP_SUFFIX))

    def purge(self):
        """Delete temporary files that no open storage knows about.

        Returns the sorted list of deleted file names.
        """
        with self._lock:
            live = set(self._files)

        removed = []
        for dirpath, dirnames, filenames in os.walk(self.scratch_root):
            dirnames.sort()
            for name in sorted(filenames):
                path = os.path.join(dirpath, name)
                if path in live or not self._isTemporaryFile(name):
                    continue
                try:
                    os.remove(path)
                except OSError:
                    log("Couldn't remove stale file %s" % path,
                        level=logging.WARNING, exc_info=True)
                else:
                    removed.append(path)
                    with self._lock:
                        self._undeleted.pop(path, None)

        if removed:
            log("Removed %d stale file(s) from %s"
                % (len(removed), self.scratch_root))
        return sorted(removed)

    def temporaryDirectory(self, application=None):
        """Return the directory files for the application are created in.
        """
        if IApplication.providedBy(application):
            return os.path.join(self.scratch_root,
                                _safe_name(application.name))
        return self.scratch_root

    def allocate(self, hint, application=None, monitor=None):
        if self.closed:
            raise ContentStorageError("%r is closed" % self)
        checkCanceled(monitor)

        directory = self.temporaryDirectory(application)
        if not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)

        path = mktemp(dir=directory,
                      prefix='%s-%s-' % (self.prefix, _safe_name(hint)),
                      suffix=TEMP_SUFFIX)
        backing_file = TemporaryFile(self, path)
        with self._lock:
            # close() may have run since the check above.
            closed = self.closed
            if not closed:
                self._files[path] = backing_file
        if closed:
            os.remove(path)
            raise ContentStorageError("%r is closed" % self)
        logger.debug("Allocated %s", path)
        return backing_file

    def dispose(self, backing_file, monitor=None):
        """Delete an allocated file.

        If the file can't be deleted it is no longer usable, but the
        provider keeps track of it and tries again when it is purged or
        closed.
        """
        path = backing_file.path
        with self._lock:
            known = self._files.pop(path, None)
            self._charsets.pop(path, None)

        if known is None:
            raise DisposalWarning(
                "%s wasn't allocated by %r or was already deleted"
                % (path, self))

        known.disposed = True
        known.relinquish()
        try:
            os.remove(path)
        except FileNotFoundError as e:
            raise DisposalWarning("%s was already gone" % path) from e
        except OSError as e:
            with self._lock:
                self._undeleted[path] = known
            raise DisposalWarning("Couldn't delete %s" % path) from e
        logger.debug("Deleted %s", path)

    def _retryUndeleted(self):
        with self._lock:
            undeleted = sorted(self._undeleted)
        for path in undeleted:
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
            except OSError:
                logger.warning("Couldn't delete %s on close", path,
                               exc_info=True)
                continue
            with self._lock:
                self._undeleted.pop(path, None)
            logger.debug("Deleted %s", path)

    def getCharset(self, backing_file):
        path = backing_file.path
        with self._lock:
            if path not in self._files:
                raise CharsetResolutionError(
                    "%s isn't an allocated file" % path)
            charset = self._charsets.get(path, self.default_charset)

        if not os.path.exists(path):
            raise CharsetResolutionError("%s doesn't exist" % path)
        return charset

    def setCharset(self, backing_file, charset):
        path = backing_file.path
        if charset is not None:
            # LookupError for unknown charsets.
            charset = codecs.lookup(charset).name
        with self._lock:
            if path not in self._files:
                raise ValueError("%s isn't an allocated file" % path)
            if charset is None:
                self._charsets.pop(path, None)
            else:
                self._charsets[path] = charset

    def listFiles(self):
        """Return the allocated files, sorted by name."""
        with self._lock:
            return [self._files[path] for path in sorted(self._files)]

    def close(self):
        """Delete all allocated files and unlock the scratch directory."""
        with self._lock:
            if self.closed:
                return
            self.closed = True

        for backing_file in self.listFiles():
            try:
                self.dispose(backing_file)
            except DisposalWarning:
                logger.warning("Couldn't delete %s on close",
                               backing_file.path, exc_info=True)
        self._retryUndeleted()

        self._lock_file.close()
