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
from setuptools import find_packages
from setuptools import setup


def read(path):
    with open(path) as f:
        return f.read()


long_description = read("README.rst") + "\n\n" + read("CHANGES.rst")


setup(
    name="lobstore",
    version='1.0.0.dev0',
    author="Zope Foundation and Contributors",
    author_email="zodb-dev@zope.dev",
    keywords="blob clob lob temporary storage database",
    packages=find_packages('src'),
    package_dir={'': 'src'},
    license="ZPL 2.1",
    platforms=["any"],
    classifiers=[
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Zope Public License",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: Implementation :: CPython",
        "Programming Language :: Python :: Implementation :: PyPy",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: Unix",
    ],
    description=long_description.split('\n', 2)[1],
    long_description=long_description,
    long_description_content_type='text/x-rst',
    extras_require={
        'test': [
            'manuel',
            'zope.testing',
            'zope.testrunner >= 4.4.6',
        ],
    },
    install_requires=[
        'ZConfig',
        'zc.lockfile',
        'zope.interface',
    ],
    zip_safe=False,
    entry_points="""
      [console_scripts]
      purgescratch = lobstore.scripts.purgescratch:main
    """,
    include_package_data=True,
    package_data={'lobstore': ['*.xml']},
    python_requires='>=3.7',
)
