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
"""Content storage exceptions

Read and clone failures are raised to the caller.  CharsetResolutionError
and DisposalWarning are raised by backing file providers and absorbed
(logged) by the storages.
"""


class ContentStorageError(Exception):
    """Content storage error."""


class StorageAccessError(ContentStorageError):
    """The backing resource could not be opened or read.

    This is raised for missing files, permission problems and for
    storages that have already been released.
    """


class CloneError(ContentStorageError):
    """A storage could not be cloned.

    The original failure is available as ``__cause__``.  Any partially
    written destination file has been removed by the time this is raised.
    """


class OperationCanceled(ContentStorageError):
    """A progress monitor asked for the operation to stop."""


class OwnershipError(ContentStorageError):
    """A backing file is already owned by another storage."""

    def __str__(self):
        backing_file, owner = self.args
        return "%s is already owned by %r" % (backing_file, owner)


class CharsetResolutionError(ContentStorageError):
    """The charset of a backing file couldn't be determined."""


class DisposalWarning(ContentStorageError, Warning):
    """A backing file couldn't be deleted."""
