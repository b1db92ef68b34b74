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
import os
import struct
from tempfile import mkstemp


__all__ = ['cp',
           'mktemp',
           'positive_id',
           'DEFAULT_BUFSIZE',
           ]

DEFAULT_BUFSIZE = 64 * 1024


def cp(f1, f2, length=None, bufsize=DEFAULT_BUFSIZE, monitor=None):
    """Copy all data from one file to another.

    It copies the data from the current position of the input file (f1)
    appending it to the current position of the output file (f2).

    It copies at most 'length' bytes. If 'length' isn't given, it copies
    until the end of the input file.  The input doesn't need to be
    seekable.

    If a monitor is given, it is told about every chunk written.  The
    copy itself doesn't check for cancellation.

    Returns the number of bytes copied.
    """
    read = f1.read
    write = f2.write
    n = bufsize
    copied = 0

    while length is None or length > 0:
        if length is not None and n > length:
            n = length
        data = read(n)
        if not data:
            break
        write(data)
        copied += len(data)
        if length is not None:
            length -= len(data)
        if monitor is not None:
            monitor.worked(len(data))

    return copied


# Adding _ADDRESS_MASK to a negative id() turns it into the unsigned
# value of the same address.
_ADDRESS_MASK = 256 ** struct.calcsize('P')


def positive_id(obj):
    """Return id(obj) as a non-negative integer."""

    result = id(obj)
    if result < 0:
        result += _ADDRESS_MASK
        assert result > 0
    return result


def mktemp(dir=None, prefix='tmp', suffix=''):
    """Create a temp file, known by name, in a semi-secure manner."""
    handle, filename = mkstemp(dir=dir, prefix=prefix, suffix=suffix)
    os.close(handle)
    return filename
