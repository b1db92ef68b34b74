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
"""In-memory content storages

These are for values small enough to keep in memory.  They behave like
file backed storages, but release only drops the value.
"""
import codecs
import io

import zope.interface

from lobstore.exceptions import CloneError
from lobstore.exceptions import StorageAccessError
from lobstore.interfaces import IContentStorage
from lobstore.monitor import checkCanceled
from lobstore.storage import ContentStorageMixin


class MemoryContentStorage(ContentStorageMixin):

    def __init__(self, data, charset='utf-8'):
        if charset is not None:
            charset = codecs.lookup(charset).name
        self.charset = charset
        self._data = data

    def __repr__(self):
        if self._data is None:
            return '<%s (released) at %s>' % (self.__class__.__name__,
                                              hex(id(self)))
        return '<%s of %d bytes>' % (self.__class__.__name__, self.getSize())

    def _value(self):
        data = self._data
        if data is None:
            raise StorageAccessError("%r was released" % self)
        return data

    def getCharset(self):
        return self.charset

    def clone(self, monitor=None):
        try:
            checkCanceled(monitor)
            data = self._value()
        except Exception as e:
            raise CloneError("Can't clone %r" % self) from e
        return self.__class__(data, self.charset)

    def release(self):
        self._data = None


@zope.interface.implementer(IContentStorage)
class BytesContentStorage(MemoryContentStorage):
    """Binary content kept in memory."""

    def __init__(self, data, charset='utf-8'):
        super().__init__(bytes(data), charset)

    def openStream(self):
        return io.BytesIO(self._value())

    def getSize(self):
        return len(self._value())


@zope.interface.implementer(IContentStorage)
class StringContentStorage(MemoryContentStorage):
    """Text content kept in memory.

    The charset is used for the binary view of the text; the size is the
    size of the encoded text.
    """

    def __init__(self, text, charset='utf-8'):
        if charset is None:
            charset = 'utf-8'
        super().__init__(str(text), charset)

    def _encoded(self):
        return self._value().encode(self.charset, 'replace')

    def openStream(self):
        return io.BytesIO(self._encoded())

    def openText(self):
        return io.StringIO(self._value())

    def getSize(self):
        return len(self._encoded())
