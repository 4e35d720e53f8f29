"""
BBC-BASIC - data
Release metadata

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import json

import importlib_resources

# copyright metadata
_METADATA = json.loads(importlib_resources.files(__package__).joinpath('meta.json').read_text())
NAME, VERSION, AUTHOR, COPYRIGHT = (_METADATA[_key] for _key in (
    'name', 'version', 'author', 'copyright'
))
LONG_VERSION = u'%s %s' % (NAME, VERSION)
