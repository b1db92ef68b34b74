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
"""File backed content storages
"""
import codecs
import io
import logging
import os

import zope.interface

from lobstore.exceptions import CharsetResolutionError
from lobstore.exceptions import CloneError
from lobstore.exceptions import StorageAccessError
from lobstore.interfaces import IContentStorage
from lobstore.interfaces import IContentStorageLocal
from lobstore.monitor import NullProgressMonitor
from lobstore.monitor import SubProgressMonitor
from lobstore.monitor import checkCanceled
from lobstore.utils import positive_id


logger = logging.getLogger('lobstore.storage')

# Used to decode text when a storage doesn't know its charset.
DEFAULT_CHARSET = 'utf-8'


def textStream(stream, charset):
    """Wrap a binary stream in a text stream decoding charset.

    Malformed input is replaced rather than raising while reading.
    """
    if charset is None:
        charset = DEFAULT_CHARSET
    try:
        return io.TextIOWrapper(stream, encoding=charset, errors='replace')
    except LookupError:
        logger.warning("Unknown charset %r, decoding as %s",
                       charset, DEFAULT_CHARSET)
        return io.TextIOWrapper(stream, encoding=DEFAULT_CHARSET,
                                errors='replace')


def discard(backing_file):
    """Give a backing file back to its provider, logging failures."""
    try:
        backing_file.provider.dispose(backing_file)
    except Exception:
        logger.warning("Couldn't delete %s", backing_file.path,
                       exc_info=True)


def copyToNewFile(provider, open_source, hint, application=None,
                  monitor=None, total=None):
    """Copy data into a newly allocated backing file.

    open_source is called to get the binary stream to copy from.  If
    anything goes wrong the new file is deleted again and CloneError is
    raised.
    """
    if monitor is None:
        monitor = NullProgressMonitor()

    monitor.beginTask("Copy content", total)
    try:
        try:
            checkCanceled(monitor)
            target = provider.allocate(hint, application, monitor)
        except Exception as e:
            raise CloneError("Couldn't allocate a file for %s" % hint) from e

        try:
            with open_source() as stream:
                target.setContents(stream, SubProgressMonitor(monitor))
        except Exception as e:
            discard(target)
            raise CloneError("Couldn't copy content to %s" % target.path
                             ) from e
    finally:
        monitor.done()

    return target


class ContentStorageMixin(object):
    """Behavior shared by content storages.

    Storages can be used as context managers, in which case they are
    released on exit.
    """

    def __enter__(self):
        return self

    def __exit__(self, t, v, tb):
        self.release()

    def openText(self):
        stream = self.openStream()
        return textStream(stream, self.getCharset())


@zope.interface.implementer(IContentStorageLocal)
class TemporaryContentStorage(ContentStorageMixin):
    """Content storage backed by a temporary file.

    The storage owns its backing file: it is the only object that will
    delete it, which it does when it is released.  Clones get a backing
    file of their own.
    """

    def __init__(self, application, backing_file):
        backing_file.claim(self)
        self.application = application
        self._file = backing_file

    def __repr__(self):
        if self._file is None:
            return '<%s (released) at %s>' % (self.__class__.__name__,
                                              hex(id(self)))
        return '<%s for %s>' % (self.__class__.__name__, self._file.path)

    def _backingFile(self):
        backing_file = self._file
        if backing_file is None:
            raise StorageAccessError("%r was released" % self)
        return backing_file

    def getBackingFile(self):
        return self._backingFile()

    def openStream(self):
        backing_file = self._backingFile()
        try:
            return backing_file.open()
        except OSError as e:
            raise StorageAccessError("Couldn't open %s" % backing_file.path
                                     ) from e

    def getSize(self):
        backing_file = self._backingFile()
        try:
            return backing_file.getSize()
        except OSError as e:
            raise StorageAccessError(
                "Couldn't get the size of %s" % backing_file.path) from e

    def getCharset(self):
        backing_file = self._file
        if backing_file is None:
            logger.warning("No charset for %r", self)
            return None
        try:
            return backing_file.getCharset()
        except (CharsetResolutionError, OSError):
            logger.warning("Couldn't determine the charset of %s",
                           backing_file.path, exc_info=True)
            return None

    def clone(self, monitor=None):
        try:
            source = self._backingFile()
        except StorageAccessError as e:
            raise CloneError("Can't clone %r" % self) from e

        try:
            total = source.getSize()
        except OSError:
            total = None

        # No locking: a concurrent writer may leave a torn copy.
        target = copyToNewFile(source.provider, source.open,
                               'copy%d' % positive_id(self),
                               self.application, monitor, total)

        charset = self.getCharset()
        if charset is not None:
            try:
                target.setCharset(charset)
            except Exception:
                logger.warning("Couldn't set the charset of %s",
                               target.path, exc_info=True)

        return self.__class__(self.application, target)

    def release(self):
        backing_file = self._file
        if backing_file is None:
            logger.debug("%r was already released", self)
            return
        self._file = None
        discard(backing_file)


@zope.interface.implementer(IContentStorage)
class ExternalContentStorage(ContentStorageMixin):
    """Content storage for a file owned by somebody else.

    This is used for files chosen by users, like the source of an
    import.  Releasing the storage leaves the file alone.  Clones are
    temporary storages allocated from the given provider.
    """

    def __init__(self, provider, path, charset=None, application=None):
        if charset is not None:
            charset = codecs.lookup(charset).name
        self.provider = provider
        self.path = os.path.abspath(path)
        self.charset = charset
        self.application = application
        self.released = False

    def __repr__(self):
        return '<%s for %s>' % (self.__class__.__name__, self.path)

    def _checkReleased(self):
        if self.released:
            raise StorageAccessError("%r was released" % self)

    def _open(self):
        return open(self.path, 'rb')

    def openStream(self):
        self._checkReleased()
        try:
            return self._open()
        except OSError as e:
            raise StorageAccessError("Couldn't open %s" % self.path) from e

    def getSize(self):
        self._checkReleased()
        try:
            return os.path.getsize(self.path)
        except OSError as e:
            raise StorageAccessError(
                "Couldn't get the size of %s" % self.path) from e

    def getCharset(self):
        return self.charset

    def clone(self, monitor=None):
        if self.released:
            raise CloneError("Can't clone %r" % self) from StorageAccessError(
                "%r was released" % self)

        target = copyToNewFile(self.provider, self._open,
                               'copy%d' % positive_id(self),
                               self.application, monitor)
        if self.charset is not None:
            try:
                target.setCharset(self.charset)
            except Exception:
                logger.warning("Couldn't set the charset of %s",
                               target.path, exc_info=True)
        return TemporaryContentStorage(self.application, target)

    def release(self):
        self.released = True


def createTemporaryStorage(provider, source, hint='content', application=None,
                           charset=None, monitor=None):
    """Store data in a new temporary content storage.

    source is bytes, text or a binary file object.  Text is encoded with
    charset, or with DEFAULT_CHARSET if no charset is given.

    If no file can be allocated, or the data can't be stored, the new
    file is deleted and StorageAccessError is raised.  An unknown charset
    raises LookupError before anything is allocated.
    """
    if charset is not None:
        charset = codecs.lookup(charset).name

    if isinstance(source, str):
        if charset is None:
            charset = DEFAULT_CHARSET
        source = source.encode(charset)
    if isinstance(source, (bytes, bytearray, memoryview)):
        source = io.BytesIO(source)

    try:
        backing_file = provider.allocate(hint, application, monitor)
    except Exception as e:
        raise StorageAccessError(
            "Couldn't allocate a file for %s" % hint) from e

    try:
        backing_file.setContents(source, monitor)
        if charset is not None:
            backing_file.setCharset(charset)
    except Exception as e:
        discard(backing_file)
        raise StorageAccessError(
            "Couldn't store content in %s" % backing_file.path) from e

    return TemporaryContentStorage(application, backing_file)
