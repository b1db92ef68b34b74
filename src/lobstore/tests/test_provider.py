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
import io
import os
from unittest import mock

import zc.lockfile
from zope.interface.verify import verifyObject
from zope.testing import loggingsupport

from lobstore.exceptions import CharsetResolutionError
from lobstore.exceptions import ContentStorageError
from lobstore.exceptions import DisposalWarning
from lobstore.exceptions import OperationCanceled
from lobstore.interfaces import IBackingFile
from lobstore.interfaces import IBackingFileProvider
from lobstore.monitor import NullProgressMonitor
from lobstore.provider import TemporaryFileProvider
from lobstore.storage import createTemporaryStorage
from lobstore.tests import util
from lobstore.utils import mktemp


class ProviderTests(util.TestCase):

    def setUp(self):
        util.TestCase.setUp(self)
        self.provider = util.openProvider(self)

    def test_interfaces(self):
        self.assertTrue(verifyObject(IBackingFileProvider, self.provider))
        backing_file = self.provider.allocate('x')
        self.assertTrue(verifyObject(IBackingFile, backing_file))

    def test_allocate(self):
        first = self.provider.allocate('blob value')
        second = self.provider.allocate('blob value')
        self.assertNotEqual(first.path, second.path)
        for backing_file in first, second:
            self.assertTrue(backing_file.exists())
            self.assertEqual(backing_file.getSize(), 0)
            self.assertIs(backing_file.provider, self.provider)
            name = os.path.basename(backing_file.path)
            self.assertTrue(name.startswith('lob-blob_value-'), name)
            self.assertTrue(name.endswith('.tmp'), name)
        self.assertEqual(self.provider.listFiles(), sorted(
            [first, second], key=lambda f: f.path))

    def test_allocate_for_application(self):
        backing_file = self.provider.allocate(
            'x', util.Application('my app/1'))
        self.assertEqual(os.path.dirname(backing_file.path),
                         os.path.abspath(os.path.join('scratch', 'my_app_1')))

    def test_allocate_ignores_other_contexts(self):
        backing_file = self.provider.allocate('x', object())
        self.assertEqual(os.path.dirname(backing_file.path),
                         os.path.abspath('scratch'))

    def test_allocate_canceled(self):
        monitor = NullProgressMonitor()
        monitor.setCanceled()
        self.assertRaises(OperationCanceled, self.provider.allocate, 'x',
                          monitor=monitor)
        self.assertEqual(util.scratchFiles(), [])

    def test_set_contents(self):
        backing_file = self.provider.allocate('x')
        backing_file.setContents(io.BytesIO(b'data'))
        backing_file.setContents(io.BytesIO(b'new'))
        with backing_file.open() as f:
            self.assertEqual(f.read(), b'new')

    def test_set_contents_canceled(self):
        backing_file = self.provider.allocate('x')
        monitor = NullProgressMonitor()
        monitor.setCanceled()
        self.assertRaises(OperationCanceled, backing_file.setContents,
                          io.BytesIO(b'data'), monitor)

    def test_dispose(self):
        backing_file = self.provider.allocate('x')
        self.provider.dispose(backing_file)
        self.assertFalse(backing_file.exists())
        self.assertTrue(backing_file.disposed)
        self.assertEqual(self.provider.listFiles(), [])
        self.assertRaises(DisposalWarning, self.provider.dispose,
                          backing_file)

    def test_dispose_missing_file(self):
        backing_file = self.provider.allocate('x')
        os.remove(backing_file.path)
        with self.assertRaises(DisposalWarning) as context:
            self.provider.dispose(backing_file)
        self.assertIsInstance(context.exception.__cause__, OSError)
        self.assertEqual(self.provider.listFiles(), [])

    def test_dispose_failure_is_retried_on_close(self):
        backing_file = self.provider.allocate('x')
        with mock.patch('lobstore.provider.os.remove',
                        side_effect=OSError('busy')):
            self.assertRaises(DisposalWarning, self.provider.dispose,
                              backing_file)
        self.assertTrue(backing_file.exists())
        self.assertTrue(backing_file.disposed)
        self.assertEqual(self.provider.listFiles(), [])
        self.provider.close()
        self.assertFalse(backing_file.exists())

    def test_dispose_failure_is_retried_on_purge(self):
        backing_file = self.provider.allocate('x')
        with mock.patch('lobstore.provider.os.remove',
                        side_effect=OSError('busy')):
            self.assertRaises(DisposalWarning, self.provider.dispose,
                              backing_file)
        self.assertEqual(self.provider.purge(), [backing_file.path])
        self.assertFalse(backing_file.exists())

    def test_dispose_foreign_file(self):
        other = util.openProvider(self, 'other')
        backing_file = other.allocate('x')
        self.assertRaises(DisposalWarning, self.provider.dispose,
                          backing_file)
        self.assertTrue(backing_file.exists())

    def test_charsets(self):
        backing_file = self.provider.allocate('x')
        self.assertEqual(backing_file.getCharset(), 'utf-8')
        backing_file.setCharset('Latin-1')
        self.assertEqual(backing_file.getCharset(), 'iso8859-1')
        backing_file.setCharset(None)
        self.assertEqual(backing_file.getCharset(), 'utf-8')
        self.assertRaises(LookupError, backing_file.setCharset, 'klingon')

    def test_default_charset(self):
        provider = util.openProvider(self, 'other', default_charset='cp1252')
        self.assertEqual(provider.allocate('x').getCharset(), 'cp1252')

    def test_charset_of_disposed_file(self):
        backing_file = self.provider.allocate('x')
        backing_file.setCharset('ascii')
        self.provider.dispose(backing_file)
        self.assertRaises(CharsetResolutionError, backing_file.getCharset)
        self.assertRaises(ValueError, backing_file.setCharset, 'ascii')

    def test_charset_of_missing_file(self):
        backing_file = self.provider.allocate('x')
        os.remove(backing_file.path)
        self.assertRaises(CharsetResolutionError, backing_file.getCharset)


class LifecycleTests(util.TestCase):

    def setUp(self):
        util.TestCase.setUp(self)
        self.handler = loggingsupport.InstalledHandler('lobstore')

    def tearDown(self):
        self.handler.uninstall()
        util.TestCase.tearDown(self)

    def test_creates_scratch_directory(self):
        provider = util.openProvider(self, os.path.join('a', 'b'))
        self.assertTrue(os.path.isdir(os.path.join('a', 'b')))
        self.assertEqual(provider.scratch_root, os.path.abspath('a/b'))
        self.assertIn("Created new directory",
                      self.handler.records[0].getMessage())

    def test_close_deletes_allocated_files(self):
        provider = TemporaryFileProvider('scratch')
        storage = createTemporaryStorage(provider, b'ABC',
                                         application=util.Application())
        provider.allocate('orphan')
        provider.close()
        self.assertEqual(util.scratchFiles(), [])
        self.assertTrue(provider.closed)
        self.assertRaises(ContentStorageError, provider.allocate, 'x')

        # Releasing a storage after its provider was closed is harmless.
        storage.release()
        provider.close()

    def test_close_logs_disposal_failures(self):
        provider = TemporaryFileProvider('scratch')
        os.remove(provider.allocate('x').path)
        provider.close()
        record, = [r for r in self.handler.records
                   if r.levelname == 'WARNING']
        self.assertEqual(record.name, 'lobstore.provider')

    def test_close_during_allocate(self):
        provider = util.openProvider(self, 'scratch')
        real_mktemp = mktemp

        def close_then_mktemp(*args, **kw):
            path = real_mktemp(*args, **kw)
            provider.close()
            return path

        with mock.patch('lobstore.provider.mktemp', close_then_mktemp):
            self.assertRaises(ContentStorageError, provider.allocate, 'x')
        self.assertEqual(util.scratchFiles(), [])
        self.assertEqual(provider.listFiles(), [])

    def test_context_manager(self):
        with TemporaryFileProvider('scratch') as provider:
            provider.allocate('x')
            self.assertEqual(len(util.scratchFiles()), 1)
        self.assertEqual(util.scratchFiles(), [])
        self.assertTrue(provider.closed)

    def test_scratch_directory_is_locked(self):
        provider = TemporaryFileProvider('scratch')
        try:
            self.assertRaises(zc.lockfile.LockError,
                              TemporaryFileProvider, 'scratch')
        finally:
            provider.close()
        util.openProvider(self, 'scratch')

    def test_purge_on_open(self):
        os.makedirs(os.path.join('scratch', 'app'))
        util.writeFile(os.path.join('scratch', 'lob-copy1-abc.tmp'), b'x')
        util.writeFile(os.path.join('scratch', 'app', 'lob-x-abc.tmp'), b'x')
        util.writeFile(os.path.join('scratch', 'notes.txt'), b'keep me')
        util.writeFile(os.path.join('scratch', 'other-x-abc.tmp'), b'keep')

        util.openProvider(self, 'scratch')
        self.assertEqual(util.scratchFiles(), ['notes.txt',
                                               'other-x-abc.tmp'])
        self.assertIn("Removed 2 stale file(s)",
                      self.handler.records[-1].getMessage())

    def test_no_purge(self):
        os.makedirs('scratch')
        util.writeFile(os.path.join('scratch', 'lob-copy1-abc.tmp'), b'x')
        util.openProvider(self, 'scratch', purge=False)
        self.assertEqual(util.scratchFiles(), ['lob-copy1-abc.tmp'])

    def test_purge_keeps_live_files(self):
        provider = util.openProvider(self, 'scratch')
        live = provider.allocate('live')
        util.writeFile(os.path.join('scratch', 'lob-stale-abc.tmp'), b'x')
        removed = provider.purge()
        self.assertEqual(removed,
                         [os.path.abspath('scratch/lob-stale-abc.tmp')])
        self.assertTrue(live.exists())

    def test_purge_failure_is_logged(self):
        provider = util.openProvider(self, 'scratch')
        util.writeFile(os.path.join('scratch', 'lob-stale-abc.tmp'), b'x')
        with mock.patch('lobstore.provider.os.remove',
                        side_effect=OSError('busy')):
            self.assertEqual(provider.purge(), [])
        self.assertEqual(self.handler.records[-1].levelname, 'WARNING')
