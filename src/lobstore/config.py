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
"""Open backing file providers from a configuration.

A configuration looks like this::

  <temporaryfiles>
    scratch-root /var/tmp/myapp-lobs
    default-charset latin-1
    buffer-size 1MB
  </temporaryfiles>

  <eventlog>
    <logfile>
      path STDERR
    </logfile>
  </eventlog>

The eventlog section is optional.
"""
import codecs
import logging
import os
from io import StringIO

import ZConfig

import lobstore
from lobstore.provider import TemporaryFileProvider


logger = logging.getLogger('lobstore.config')

schema_path = os.path.join(lobstore.__path__[0], "schema.xml")
_schema = None


def getSchema():
    global _schema
    if _schema is None:
        _schema = ZConfig.loadSchema(schema_path)
    return _schema


def charset(value):
    """Datatype for charset names; returns the canonical name."""
    try:
        return codecs.lookup(value).name
    except LookupError:
        raise ValueError("unknown charset %r" % value)


def loadConfigString(s):
    """Load a configuration from a string.

    Returns the ZConfig configuration object, with ``provider`` and
    ``eventlog`` attributes.
    """
    return loadConfigFile(StringIO(s))


def loadConfigFile(f):
    config, handler = ZConfig.loadConfigFile(getSchema(), f)
    return config


def loadConfigURL(url):
    """Load a configuration from a URL or file name."""
    config, handler = ZConfig.loadConfig(getSchema(), url)
    return config


def providerFromString(s):
    """Open the backing file provider configured in a string."""
    return providerFromConfig(loadConfigString(s).provider)


def providerFromFile(f):
    """Open the backing file provider configured in a file object."""
    return providerFromConfig(loadConfigFile(f).provider)


def providerFromURL(url):
    """Open the backing file provider configured at a URL or file name."""
    return providerFromConfig(loadConfigURL(url).provider)


def providerFromConfig(section):
    return section.open()


class BaseConfig(object):
    """Object representing a configured provider.

    Methods:

    open() -- open and return the configured object

    Attributes:

    name   -- name of the section

    """

    def __init__(self, config):
        self.config = config
        self.name = config.getSectionName()

    def open(self, **kw):
        """Open and return the configured object."""
        raise NotImplementedError


class TemporaryFiles(BaseConfig):

    def open(self, **kw):
        """Open the provider.

        Keyword arguments override the configured options.
        """
        config = self.config
        options = dict(default_charset=config.default_charset,
                       buffer_size=config.buffer_size,
                       purge=config.purge_on_open,
                       prefix=config.prefix)
        options.update(kw)
        logger.debug("Opening scratch directory %s", config.scratch_root)
        return TemporaryFileProvider(config.scratch_root, **options)
