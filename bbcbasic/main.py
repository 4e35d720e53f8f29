"""
BBC-BASIC - main.py
Command-line front end

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import sys
import logging
from contextlib import contextmanager

from . import config
from .data import read_usage
from .basic import Session
from .basic import NAME, VERSION, LONG_VERSION, COPYRIGHT


def main(*arguments):
    """Initialise, parse arguments and perform requested operations."""
    # get settings and prepare logging
    settings = config.Settings(arguments or None)
    if settings.version:
        # print version and exit
        _show_version(settings)
    elif settings.help:
        # print usage and exit
        _show_usage()
    else:
        # start an interpreter session with standard i/o
        _run_session(settings.session_params, **settings.launch_params)


def _show_usage():
    """Show usage description."""
    sys.stdout.write(read_usage())

def _show_version(settings):
    """Show version with optional debugging details."""
    if settings.debug:
        sys.stdout.write(u'%s\n%s\nPython %s\n' % (LONG_VERSION, COPYRIGHT, sys.version))
    else:
        sys.stdout.write(u'%s %s\n%s\n' % (NAME, VERSION, COPYRIGHT))

def _run_session(session_params, prog=None, commands=(), quit=False):
    """Start a session on standard i/o and handle exits."""
    with Session(output_stream=sys.stdout, input_stream=sys.stdin, **session_params) as session:
        _operate_session(session, prog, commands, quit)

def _operate_session(session, prog, commands, quit):
    """Run an interactive BASIC session."""
    if prog:
        logging.debug('Loading %s', prog)
        session.execute(u'LOAD "%s"' % (prog,))
    for cmd in commands:
        session.execute(cmd)
    if not quit:
        session.interact()


@contextmanager
def script_entry_point_guard():
    """Wrapper for entry points, to deal with Ctrl-C and sigpipe."""
    exit_code = True
    try:
        yield
        exit_code = False
    except KeyboardInterrupt:
        exit_code = False
    except BrokenPipeError:
        pass
    # broken pipe usually gets caught above, but flush streams here as a failsafe
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (OSError, ValueError):
            exit_code = True
    if exit_code:
        sys.exit(1)
