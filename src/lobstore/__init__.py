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

from lobstore.exceptions import CloneError
from lobstore.exceptions import ContentStorageError
from lobstore.exceptions import StorageAccessError
from lobstore.memory import BytesContentStorage
from lobstore.memory import StringContentStorage
from lobstore.provider import TemporaryFileProvider
from lobstore.storage import ExternalContentStorage
from lobstore.storage import TemporaryContentStorage
from lobstore.storage import createTemporaryStorage
