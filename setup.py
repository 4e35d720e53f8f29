#!/usr/bin/env python3
"""
BBC-BASIC install script for source distribution

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import os
import json
from io import open

from setuptools import find_packages, setup


###############################################################################
# get descriptions and version number

# file location
HERE = os.path.abspath(os.path.dirname(__file__))

# obtain metadata without importing the package (to avoid breaking sdist install)
with open(os.path.join(HERE, 'bbcbasic', 'basic', 'data', 'meta.json'), 'r') as meta:
    _METADATA = json.load(meta)
    VERSION = _METADATA['version']
    AUTHOR = _METADATA['author']


###############################################################################
# setup parameters

SETUP_OPTIONS = dict(
    name='bbcbasic',
    version=VERSION,
    author=AUTHOR,
    description='BBC BASIC interpreter',
    license='GPLv3',
    python_requires='>=3.6',

    # contents
    # only include subpackages of bbcbasic: exclude tests
    packages=find_packages(include=['bbcbasic', 'bbcbasic.*']),
    package_data={
        'bbcbasic.data': ['*.txt'],
        'bbcbasic.basic.data': ['*.json'],
    },
    install_requires=[
        'numpy',
        'importlib_resources',
    ],
    extras_require={
        'test': ['pytest'],
    },
    # launchers
    entry_points=dict(
        console_scripts=['bbcbasic=bbcbasic:main'],
    ),
)

###############################################################################
# run the setup

# perform the installation
setup(**SETUP_OPTIONS)
