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
"""Delete stale temporary files from a scratch directory.

usage: purgescratch [-v] [-C config_file | scratch_dir]

Temporary files are left behind when a process using a scratch directory
dies.  They are normally removed the next time the directory is opened;
this removes them without having to start the application.

The scratch directory is given either directly or through a configuration
file with a <temporaryfiles> section (and, optionally, an <eventlog>
section).  The directory must not be in use by another process.

-v  print the names of the deleted files
-C  configuration file
"""
import getopt
import logging
import sys

import zc.lockfile

from lobstore.config import loadConfigURL
from lobstore.provider import TemporaryFileProvider


def usage():
    print(__doc__)


def setup_default_logging(verbose):
    root = logging.getLogger()
    root.setLevel(verbose and logging.INFO or logging.WARNING)
    fmt = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        "%Y-%m-%dT%H:%M:%S")
    handler = logging.StreamHandler()
    handler.setFormatter(fmt)
    root.addHandler(handler)


def open_provider(config_path, args, verbose):
    if config_path is not None:
        config = loadConfigURL(config_path)
        if config.eventlog is not None:
            config.eventlog()
        else:
            setup_default_logging(verbose)
        return config.provider.open(purge=False)

    setup_default_logging(verbose)
    return TemporaryFileProvider(args[0], purge=False)


def main(args=None):
    if args is None:
        args = sys.argv[1:]

    try:
        opts, args = getopt.getopt(args, 'vC:')
    except getopt.error as msg:
        usage()
        print(msg)
        return 2

    verbose = False
    config_path = None
    for k, v in opts:
        if k == '-v':
            verbose = True
        elif k == '-C':
            config_path = v

    if (config_path is None) == (len(args) != 1):
        usage()
        print("Specify either a configuration file or a scratch directory")
        return 2

    try:
        provider = open_provider(config_path, args, verbose)
    except zc.lockfile.LockError:
        print("The scratch directory is in use")
        return 1

    try:
        removed = provider.purge()
    finally:
        provider.close()

    if verbose:
        for path in removed:
            print(path)
        print("%d file(s) deleted" % len(removed))
    return 0


if __name__ == "__main__":
    sys.exit(main())
