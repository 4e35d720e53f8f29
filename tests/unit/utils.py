"""
BBC-BASIC tests.utils
Shared testing utilities

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import unittest
import os
import shutil
from unittest import main as run_tests

from bbcbasic.basic.converter import Tokeniser
from bbcbasic.basic.base.codestream import TokenStream


class TestCase(unittest.TestCase):
    """Base class for test cases."""

    tag = None

    def __init__(self, *args, **kwargs):
        """Define output dir name."""
        unittest.TestCase.__init__(self, *args, **kwargs)
        here = os.path.dirname(os.path.abspath(__file__))
        self._dir = os.path.join(here, u'output', self.tag or u'default')

    def setUp(self):
        """Ensure output directory exists and is empty."""
        try:
            shutil.rmtree(self._dir)
        except EnvironmentError:
            pass
        if not os.path.isdir(self._dir):
            os.makedirs(self._dir)

    def output_path(self, *names):
        """Output file name."""
        return os.path.join(self._dir, *names)


def token_stream(text):
    """Token stream over a tokenised direct-mode line."""
    # tokenise as the argument of PRINT, so that a leading digit is not
    # taken as a line number and keywords take their expression form
    return TokenStream(Tokeniser().tokenise_line(u'PRINT ' + text).tokens[1:])
