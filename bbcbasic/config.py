"""
BBC-BASIC - config.py
Configuration file and command-line options parser

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import os
import io
import sys
import logging
import configparser
from collections import deque


# user configuration directory
USER_CONFIG_HOME = os.environ.get(u'XDG_CONFIG_HOME') or os.path.join(
    os.path.expanduser(u'~'), u'.config'
)
USER_CONFIG_DIR = os.path.join(USER_CONFIG_HOME, u'bbcbasic')

# default config file name
CONFIG_NAME = u'BBCBASIC.INI'

# user and local config files
USER_CONFIG_PATH = os.path.join(USER_CONFIG_DIR, CONFIG_NAME)

# format for log files
LOGGING_FORMAT = u'[%(asctime)s.%(msecs)04d] %(levelname)s: %(message)s'
LOGGING_FORMATTER = logging.Formatter(fmt=LOGGING_FORMAT, datefmt=u'%H:%M:%S')

# bool strings
TRUES = (u'YES', u'TRUE', u'ON', u'1')
FALSES = (u'NO', u'FALSE', u'OFF', u'0')

# by default, load what's in section [bbcbasic]
DEFAULT_SECTION = u'bbcbasic'


##############################################################################
# short-form arguments

SHORT_ARGS = {
    u'h': (u'help', u'True'),
    u'q': (u'quit', u'True'),
    u'v': (u'version', u'True'),
    u'l': (u'load', None),
    u'r': (u'run', None),
    u'e': (u'exec', None),
}


##############################################################################
# long-form arguments

# number of positional arguments
NUM_POSITIONAL = 1

ARGUMENTS = {
    u'exec': {u'type': u'string', u'default': u'', },
    u'quit': {u'type': u'bool', u'default': False, },
    u'run': {u'type': u'string', u'default': u'', },
    u'load': {u'type': u'string', u'default': u'', },
    u'debug': {u'type': u'bool', u'default': False, },
    u'logfile': {u'type': u'string', u'default': u'', },
    u'config': {u'type': u'string', u'default': u'', },
    u'step-limit': {u'type': u'int', u'default': 0, },
    u'trace': {u'type': u'bool', u'default': False, },
    u'help': {u'type': u'bool', u'default': False, },
    u'version': {u'type': u'bool', u'default': False, },
}


##########################################################################
# logging

class Lumberjack(object):
    """Logging manager."""

    def __init__(self):
        """Set up the global logger temporarily until we know the log stream."""
        # include messages from warnings madule in the logs
        logging.captureWarnings(True)
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.INFO)
        # send to a buffer until we know where to log to
        self._logstream = io.StringIO()
        handler = logging.StreamHandler(self._logstream)
        handler.setFormatter(LOGGING_FORMATTER)
        root_logger.addHandler(handler)

    def reset(self):
        """Reset root logger."""
        root_logger = logging.getLogger()
        # remove all old handlers: temporary ones we set as well as any default ones
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
        return root_logger

    def prepare(self, logfile, debug):
        """Set up the global logger."""
        loglevel = logging.DEBUG if debug else logging.INFO
        root_logger = self.reset()
        root_logger.setLevel(loglevel)
        if logfile:
            logstream = io.open(logfile, 'w', encoding='utf_8', errors='replace')
        else:
            logstream = sys.stderr
        # write out cached logs
        logstream.write(self._logstream.getvalue())
        handler = logging.StreamHandler(logstream)
        handler.setFormatter(LOGGING_FORMATTER)
        root_logger.addHandler(handler)


##############################################################################
# settings container

class Settings(object):
    """Read and retrieve command-line settings and options."""

    def __init__(self, arguments=None, user_config=USER_CONFIG_PATH):
        """Initialise settings."""
        if arguments is None:
            self._uargv = sys.argv[1:]
        else:
            self._uargv = list(arguments)
        lumberjack = Lumberjack()
        try:
            self._options = ArgumentParser(user_config).retrieve_options(self._uargv)
        except Exception:
            # avoid losing exception messages occuring while logging was disabled
            lumberjack.reset()
            raise
        # prepare global logger for use by main program
        lumberjack.prepare(self.get('logfile'), self.get('debug'))

    def get(self, name, get_default=True):
        """Get value of option; choose whether to get default or None (unspecified)."""
        try:
            value = self._options[name]
            if get_default and (value is None or value == u''):
                raise KeyError
        except KeyError:
            if get_default:
                try:
                    value = ARGUMENTS[name][u'default']
                except KeyError:
                    # positional argument not given
                    value = None
            else:
                value = None
        return value

    @property
    def session_params(self):
        """Dict of parameters for the BASIC session."""
        return {
            'step_limit': self.get('step-limit') or 0,
            'trace': self.get('trace'),
        }

    @property
    def launch_params(self):
        """Dict of launch parameters."""
        prog = self.get('run') or self.get('load') or self.get(0)
        run = bool(
            # positional argument and --load not specified
            (self.get(0) and self.get('load', get_default=False) is None)
            or self.get('run')
        )
        # treat colons outside quotes as line separators
        commands = split_quoted(self.get('exec'), split_by=u':', quote=u'"')
        if run:
            commands.append(u'RUN')
        return {
            'prog': prog,
            'commands': commands,
            'quit': self.get('quit'),
        }

    @property
    def version(self):
        """Version operating mode."""
        return self.get('version')

    @property
    def help(self):
        """Help operating mode."""
        return self.get('help')

    @property
    def debug(self):
        """Debugging mode."""
        return self.get('debug')


##############################################################################
# argument parsing

class ArgumentParser(object):
    """Parse BBC-BASIC config file and command-line arguments."""

    def __init__(self, user_config=USER_CONFIG_PATH):
        """Set up the parser."""
        self._user_config = user_config

    def retrieve_options(self, uargv):
        """Retrieve command line and option file options."""
        # convert command line arguments to string dictionary form
        remaining = self._get_arguments_dict(uargv)
        # config files: user file, then local or specified file
        args = self._parse_config_arg_and_process_config_file(remaining)
        unrecognised = ((_k, _v) for _k, _v in args.items() if _k not in ARGUMENTS)
        for key, value in unrecognised:
            logging.warning(
                'Ignored unrecognised option `%s=%s` in configuration file', key, value
            )
        args = {_k: _v for _k, _v in args.items() if _k in ARGUMENTS}
        # command-line args override config file settings
        args.update(self._parse_args(remaining))
        self._convert_types(args)
        return args

    def _append_short_args(self, args, key, value):
        """Append short arguments and value to dict."""
        long_arg_value = None
        for i, short_arg in enumerate(key[1:]):
            try:
                long_arg, long_arg_value = SHORT_ARGS[short_arg]
            except KeyError:
                logging.warning(u'Ignored unrecognised option `-%s`', short_arg)
            else:
                if i == len(key)-2:
                    # assign provided value to last argument specified
                    args[long_arg] = long_arg_value or value or u''
                else:
                    args[long_arg] = long_arg_value or u''
        # if value provided not used, push back as positional
        if long_arg_value and value:
            return value
        return None

    def _get_arguments_dict(self, argv):
        """Convert command-line arguments to dictionary."""
        args = {}
        arg_deque = deque(argv)
        # positional arguments
        pos = 0
        # use -- to end option parsing, everything is a positional argument afterwards
        options_ended = False
        while arg_deque:
            arg = arg_deque.popleft()
            if not arg.startswith(u'-') or options_ended:
                # strip enclosing quotes, but only if paired
                for quote in u'"\'':
                    if len(arg) > 1 and arg.startswith(quote) and arg.endswith(quote):
                        arg = arg[1:-1]
                args[pos] = arg
                pos += 1
            elif arg == u'--':
                options_ended = True
            else:
                key, _, value = arg.partition(u'=')
                if key.startswith(u'--'):
                    if key[2:]:
                        args[key[2:]] = value
                else:
                    if not value:
                        # -key value, without = to connect
                        # only use the next value if it does not itself look like an option flag
                        if arg_deque and not arg_deque[0].startswith(u'-'):
                            value = arg_deque.popleft()
                    unused_value = self._append_short_args(args, key, value)
                    if unused_value:
                        arg_deque.appendleft(unused_value)
        return args

    def _parse_config_arg_and_process_config_file(self, remaining):
        """Find the correct config files and read them."""
        args = self._read_config_file(self._user_config)
        config_file = remaining.pop(u'config', None)
        if not config_file and os.path.exists(CONFIG_NAME):
            config_file = CONFIG_NAME
        if config_file:
            args.update(self._read_config_file(config_file))
        return args

    def _read_config_file(self, config_file):
        """Read the [bbcbasic] section of a config file."""
        if not config_file or not os.path.exists(config_file):
            return {}
        try:
            config = configparser.RawConfigParser(allow_no_value=True)
            # use utf_8_sig to ignore a BOM if it's at the start of the file
            with io.open(config_file, 'r', encoding='utf_8_sig', errors='replace') as f:
                config.read_file(WhitespaceStripper(f))
        except (configparser.Error, IOError):
            logging.warning(
                u'Error in configuration file `%s`. Configuration not loaded.', config_file
            )
            return {}
        if not config.has_section(DEFAULT_SECTION):
            return {}
        return {
            _key: (_value if _value is not None else u'')
            for _key, _value in config.items(DEFAULT_SECTION)
        }

    def _parse_args(self, remaining):
        """Process command line options."""
        known = list(ARGUMENTS.keys()) + list(range(NUM_POSITIONAL))
        args = {d: remaining[d] for d in remaining if d in known}
        not_recognised = {d: remaining[d] for d in remaining if d not in known}
        for d in not_recognised:
            if not_recognised[d]:
                if isinstance(d, int):
                    logging.warning(
                        u'Ignored surplus positional command-line argument #%s: `%s`',
                        d, not_recognised[d]
                    )
                else:
                    logging.warning(
                        u'Ignored unrecognised command-line argument `%s=%s`',
                        d, not_recognised[d]
                    )
            else:
                logging.warning(u'Ignored unrecognised command-line argument `%s`', d)
        return args

    def _convert_types(self, args):
        """Convert arguments to required type."""
        for name in args:
            args[name] = self._parse_type(name, args[name])

    ##########################################################################
    # type conversions

    def _parse_type(self, d, arg):
        """Convert argument to required type."""
        if d not in ARGUMENTS:
            return arg
        if ARGUMENTS[d][u'type'] == u'int':
            return self._to_int(d, arg)
        elif ARGUMENTS[d][u'type'] == u'bool':
            return self._to_bool(d, arg)
        return arg

    def _to_bool(self, argname, strval):
        """Convert bool string to bool. Empty string (i.e. specified) means True."""
        if strval == u'':
            return True
        if strval.upper() in TRUES:
            return True
        elif strval.upper() in FALSES:
            return False
        else:
            logging.warning(
                u'Boolean option `%s=%s` interpreted as `%s=True`',
                argname, strval, argname
            )
        return True

    def _to_int(self, argname, strval):
        """Convert int string to int."""
        if strval:
            try:
                return int(strval)
            except ValueError:
                logging.warning(
                    u'Option `%s=%s` ignored: value should be an integer',
                    argname, strval
                )
        return None


##############################################################################
# utilities

def split_quoted(line, split_by=u':', quote=u'"'):
    """Split a line outside quotes."""
    if not line:
        return []
    parts = [u'']
    quoted = False
    for char in line:
        if char == quote:
            quoted = not quoted
        if char == split_by and not quoted:
            parts.append(u'')
        else:
            parts[-1] += char
    return [_part.strip() for _part in parts if _part.strip()]


class WhitespaceStripper(object):
    """File wrapper for ConfigParser that strips leading whitespace."""

    def __init__(self, file):
        """Initialise to file object."""
        self._file = file

    def readline(self):
        """Read a line and strip whitespace (but not EOL)."""
        return self._file.readline().lstrip(u' \t')

    def __next__(self):
        line = self.readline()
        if not line:
            raise StopIteration()
        return line

    def __iter__(self):
        """We are iterable."""
        return self
