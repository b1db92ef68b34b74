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
# FOR A PARTICULAR PURPOSE.
#
##############################################################################
"""Conveniences for testing content storages
"""
import os
import re
import tempfile
import unittest

import zope.interface
import zope.testing.setupstack
from zope.testing import renormalizing

from lobstore.interfaces import IApplication
from lobstore.provider import LOCK_FILE
from lobstore.provider import TemporaryFileProvider


checker = renormalizing.RENormalizing([
    (re.compile("<(.*?) at 0x[0-9a-f]*?>"),
     r"<\1 at 0x000000000000>"),
    (re.compile("lobstore.exceptions.StorageAccessError"),
     r"StorageAccessError"),
    (re.compile("lobstore.exceptions.CloneError"),
     r"CloneError"),
    (re.compile("lobstore.exceptions.OwnershipError"),
     r"OwnershipError"),
    (re.compile("lobstore.exceptions.OperationCanceled"),
     r"OperationCanceled"),
])


def setUp(test, name='test'):
    d = tempfile.mkdtemp(prefix=name)
    zope.testing.setupstack.register(test, zope.testing.setupstack.rmtree, d)
    zope.testing.setupstack.register(
        test, setattr, tempfile, 'tempdir', tempfile.tempdir)
    tempfile.tempdir = d
    zope.testing.setupstack.register(test, os.chdir, os.getcwd())
    os.chdir(d)


def tearDown(test):
    zope.testing.setupstack.tearDown(test)


def openProvider(test, scratch_root='scratch', **kw):
    """Open a provider that is closed when the test is torn down."""
    provider = TemporaryFileProvider(scratch_root, **kw)
    zope.testing.setupstack.register(test, provider.close)
    return provider


def scratchFiles(scratch_root='scratch'):
    """Return the names of the files in a scratch directory.

    Names are relative to the scratch directory.  The lock file is left
    out.
    """
    result = []
    for dirpath, dirnames, filenames in os.walk(scratch_root):
        for name in filenames:
            path = os.path.relpath(os.path.join(dirpath, name), scratch_root)
            if path != LOCK_FILE:
                result.append(path)
    return sorted(result)


def writeFile(path, data):
    with open(path, 'wb') as f:
        f.write(data)


def readAll(stream):
    with stream:
        return stream.read()


@zope.interface.implementer(IApplication)
class Application(object):

    def __init__(self, name='test'):
        self.name = name

    def __repr__(self):
        return '<Application %s>' % self.name


class TestCase(unittest.TestCase):

    def setUp(self):
        self.globs = {}
        name = self.__class__.__name__
        mname = getattr(self, '_TestCase__testMethodName', '')
        if mname:
            name += '-' + mname
        setUp(self, name)

    tearDown = tearDown
