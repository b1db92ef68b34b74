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

from zope.interface import Attribute
from zope.interface import Interface


class IContentStorage(Interface):
    """Storage for the value of a large object (LOB).

    A content storage holds binary or character data that is too large
    (or changes too often) to be kept in memory: BLOB and CLOB cells,
    script bodies, import and export buffers.  The data is written once,
    before the storage is created, and can then be read, copied and
    finally discarded.

    Streams
    -------

    openStream() and openText() return open file objects.  The storage
    doesn't keep track of them: the caller must close them on every
    exit path, typically with a ``with`` statement.

    Concurrency
    -----------

    Storages do no locking.  A storage must not be released while
    another thread reads or clones it.  Clones share nothing with the
    storage they were made from.

    Release
    -------

    Once release() has been called the storage is dead.  Reads raise
    StorageAccessError.  Calling release() again is harmless.
    """

    def openStream():
        """Return a binary file object positioned at the start of the data.

        StorageAccessError is raised if the data can't be read.
        """

    def openText():
        """Return a text file object decoding the data.

        The data is decoded with the charset returned by getCharset().
        If the charset can't be determined, a default charset is used
        rather than failing.

        StorageAccessError is raised if the data can't be read.
        """

    def getSize():
        """Return the current size of the data in bytes.

        The size is computed on every call and is never cached.
        """

    def getCharset():
        """Return the name of the charset of the data, or None.

        Failures to determine the charset are logged and result in None.
        """

    def clone(monitor=None):
        """Return a new, independent storage holding a copy of the data.

        The optional monitor, an IProgressMonitor, is told about the
        progress of the copy and is asked whether to cancel between I/O
        calls.

        CloneError is raised if the copy can't be made.  No partial copy
        is left behind when that happens, and this storage is unaffected.
        """

    def release():
        """Discard the data and any resource holding it.

        This never raises.  Failures are logged.
        """


class IContentStorageLocal(IContentStorage):
    """A content storage whose data lives in a local file."""

    def getBackingFile():
        """Return the IBackingFile holding the data.

        This is for collaborators that need the file itself, for example
        to hand its path to a bulk loader.  The storage remains the owner
        of the file.
        """


class IBackingFile(Interface):
    """A file allocated by a backing file provider."""

    path = Attribute("The absolute file name.")

    provider = Attribute("The IBackingFileProvider that allocated the file.")

    def exists():
        """Return whether the file still exists."""

    def open():
        """Open the file for reading in binary mode.

        OSError is raised if the file can't be opened.
        """

    def getSize():
        """Return the current size of the file in bytes."""

    def getCharset():
        """Return the name of the charset of the file content.

        CharsetResolutionError is raised if it can't be determined.
        """

    def setCharset(charset):
        """Set the charset of the file content.

        Passing None reverts to the provider's default charset.
        """

    def setContents(stream, monitor=None):
        """Replace the file content with the data read from stream."""


class IBackingFileProvider(Interface):
    """Allocates and deletes the files backing content storages.

    The provider decides where files are created and how they are
    named.  Storages only ask for new files and give them back.
    """

    def allocate(hint, application=None, monitor=None):
        """Create a new, empty file and return it as an IBackingFile.

        The hint is used to make the file name recognizable.  The
        application, if given, is the context the file is allocated for.
        """

    def dispose(backing_file, monitor=None):
        """Delete a file allocated by this provider.

        DisposalWarning is raised if the file can't be deleted.  A file
        that couldn't be deleted is deleted later, when the provider is
        purged or closed.
        """


class IApplication(Interface):
    """The application owning content storages.

    Storages don't look at the application; they only pass it to the
    provider when they allocate files.
    """

    name = Attribute("""Short name of the application.

    Providers may use it to keep the files of different applications
    apart.
    """)


class IProgressMonitor(Interface):
    """Receives progress reports and can request cancellation."""

    def beginTask(name, total):
        """Start a task of the given total amount of work.

        A total of None means the amount of work isn't known.
        """

    def subTask(name):
        """Report the name of the current step."""

    def worked(amount):
        """Report that some amount of work was done."""

    def done():
        """Report that the task is finished."""

    def isCanceled():
        """Return whether the operation should stop."""
