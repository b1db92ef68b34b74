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
"""Progress monitors
"""
import zope.interface

from lobstore.exceptions import OperationCanceled
from lobstore.interfaces import IProgressMonitor


@zope.interface.implementer(IProgressMonitor)
class NullProgressMonitor(object):
    """A monitor that ignores progress reports.

    It can still be canceled, which is what most callers need.
    """

    def __init__(self):
        self._canceled = False

    def beginTask(self, name, total):
        pass

    def subTask(self, name):
        pass

    def worked(self, amount):
        pass

    def done(self):
        pass

    def isCanceled(self):
        return self._canceled

    def setCanceled(self, canceled=True):
        self._canceled = canceled


@zope.interface.implementer(IProgressMonitor)
class SubProgressMonitor(object):
    """Monitor for one step of a larger task.

    Work is forwarded to the parent monitor.  Task names are reported to
    the parent as sub tasks, and the step is canceled when the parent is.
    """

    def __init__(self, parent):
        self.parent = parent

    def beginTask(self, name, total):
        self.parent.subTask(name)

    def subTask(self, name):
        self.parent.subTask(name)

    def worked(self, amount):
        self.parent.worked(amount)

    def done(self):
        pass

    def isCanceled(self):
        return self.parent.isCanceled()


def checkCanceled(monitor):
    """Raise OperationCanceled if the monitor asks to stop."""
    if monitor is not None and monitor.isCanceled():
        raise OperationCanceled()
