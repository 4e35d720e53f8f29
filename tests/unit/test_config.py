"""
BBC-BASIC tests.test_config
unit tests for settings and option parsing

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import io
import logging

from bbcbasic.config import Settings, ArgumentParser, Lumberjack, split_quoted
from tests.unit.utils import TestCase, run_tests


class ConfigTest(TestCase):
    """Unit tests for config module."""

    tag = u'config'

    def setUp(self):
        """Point the user config file somewhere empty."""
        TestCase.setUp(self)
        self._no_config = self.output_path(u'none.ini')

    def tearDown(self):
        """Drop the log handlers set up by Settings."""
        Lumberjack().reset()

    def _settings(self, *args):
        return Settings(args, user_config=self._no_config)

    def _write_config(self, name, text):
        path = self.output_path(name)
        with io.open(path, 'w', encoding='utf-8') as f:
            f.write(text)
        return path

    def test_defaults(self):
        """No arguments give an interactive session."""
        settings = self._settings()
        assert settings.launch_params == {'prog': None, 'commands': [], 'quit': False}
        assert settings.session_params == {'step_limit': 0, 'trace': False}
        assert not settings.version
        assert not settings.help
        assert not settings.debug

    def test_positional_runs(self):
        """A program name on its own is loaded and run."""
        settings = self._settings(u'prog.bas')
        assert settings.launch_params['prog'] == u'prog.bas'
        assert settings.launch_params['commands'] == [u'RUN']

    def test_load(self):
        """--load and -l load without running."""
        for args in ((u'--load=prog.bas',), (u'-l', u'prog.bas'), (u'-l=prog.bas',)):
            settings = self._settings(*args)
            assert settings.launch_params['prog'] == u'prog.bas', args
            assert settings.launch_params['commands'] == [], args

    def test_run(self):
        """--run loads and runs."""
        settings = self._settings(u'--run=game.bas')
        assert settings.launch_params['prog'] == u'game.bas'
        assert settings.launch_params['commands'] == [u'RUN']

    def test_exec(self):
        """--exec splits on colons outside quotes."""
        settings = self._settings(u'--exec=A%=1:PRINT "a:b"')
        assert settings.launch_params['commands'] == [u'A%=1', u'PRINT "a:b"']

    def test_exec_then_run(self):
        """Commands run before the program starts."""
        settings = self._settings(u'prog.bas', u'-e', u'A%=1')
        assert settings.launch_params['commands'] == [u'A%=1', u'RUN']

    def test_combined_short_args(self):
        """Short options can be combined; the value goes to the last one."""
        settings = self._settings(u'-qe', u'PRINT 1')
        assert settings.launch_params == {
            'prog': None, 'commands': [u'PRINT 1'], 'quit': True
        }

    def test_flag_before_positional(self):
        """A value after a flag is taken as positional."""
        settings = self._settings(u'-q', u'prog.bas')
        assert settings.launch_params['quit']
        assert settings.launch_params['prog'] == u'prog.bas'

    def test_session_params(self):
        """Step limit and trace."""
        settings = self._settings(u'--step-limit=50', u'--trace')
        assert settings.session_params == {'step_limit': 50, 'trace': True}

    def test_end_of_options(self):
        """-- ends option parsing."""
        settings = self._settings(u'--', u'-file.bas')
        assert settings.launch_params['prog'] == u'-file.bas'

    def test_quoted_positional(self):
        """Paired quotes are stripped from positional arguments."""
        settings = self._settings(u'"my prog.bas"')
        assert settings.launch_params['prog'] == u'my prog.bas'

    def test_modes(self):
        """Version, help and debug."""
        assert self._settings(u'-v').version
        assert self._settings(u'--help').help
        assert self._settings(u'--debug').debug

    def test_bool_values(self):
        """Boolean option values."""
        parser = ArgumentParser(self._no_config)
        assert parser.retrieve_options([u'--quit=yes'])[u'quit'] is True
        assert parser.retrieve_options([u'--quit=OFF'])[u'quit'] is False
        assert parser.retrieve_options([u'--quit'])[u'quit'] is True
        with self.assertLogs(level=logging.WARNING):
            assert parser.retrieve_options([u'--quit=maybe'])[u'quit'] is True

    def test_int_values(self):
        """Integer option values."""
        parser = ArgumentParser(self._no_config)
        assert parser.retrieve_options([u'--step-limit=12'])[u'step-limit'] == 12
        with self.assertLogs(level=logging.WARNING):
            assert parser.retrieve_options([u'--step-limit=many'])[u'step-limit'] is None

    def test_unrecognised(self):
        """Unknown options are ignored with a warning."""
        parser = ArgumentParser(self._no_config)
        with self.assertLogs(level=logging.WARNING):
            options = parser.retrieve_options([u'--nonsense=1'])
        assert u'nonsense' not in options
        with self.assertLogs(level=logging.WARNING):
            options = parser.retrieve_options([u'-z'])
        assert options == {}
        with self.assertLogs(level=logging.WARNING):
            options = parser.retrieve_options([u'one.bas', u'two.bas'])
        assert options == {0: u'one.bas'}

    def test_config_file(self):
        """Options in the user config file."""
        path = self._write_config(
            u'user.ini',
            u'[bbcbasic]\n  step-limit=20\n  trace=on\n[other]\nquit=yes\n'
        )
        settings = Settings([], user_config=path)
        assert settings.session_params == {'step_limit': 20, 'trace': True}
        assert not settings.launch_params['quit']

    def test_config_file_override(self):
        """The command line overrides the config files."""
        user = self._write_config(u'user.ini', u'[bbcbasic]\nstep-limit=20\ntrace=yes\n')
        local = self._write_config(u'local.ini', u'[bbcbasic]\nstep-limit=30\n')
        settings = Settings([u'--config=%s' % (local,)], user_config=user)
        assert settings.session_params == {'step_limit': 30, 'trace': True}
        settings = Settings([u'--config=%s' % (local,), u'--step-limit=5'], user_config=user)
        assert settings.session_params['step_limit'] == 5

    def test_config_file_unknown_key(self):
        """Unknown keys in a config file are ignored with a warning."""
        path = self._write_config(u'user.ini', u'[bbcbasic]\ncolour=green\n')
        with self.assertLogs(level=logging.WARNING):
            options = ArgumentParser(path).retrieve_options([])
        assert options == {}

    def test_config_file_broken(self):
        """A broken config file is not loaded."""
        path = self._write_config(u'user.ini', u'step-limit=20\n')
        with self.assertLogs(level=logging.WARNING):
            options = ArgumentParser(path).retrieve_options([])
        assert options == {}

    def test_config_file_missing_section(self):
        """A config file without our section gives no options."""
        path = self._write_config(u'user.ini', u'[other]\nstep-limit=20\n')
        assert ArgumentParser(path).retrieve_options([]) == {}

    def test_logfile(self):
        """Logs go to the log file."""
        logfile = self.output_path(u'bbcbasic.log')
        lumberjack = Lumberjack()
        logging.info('before')
        lumberjack.prepare(logfile, debug=True)
        logging.debug('after')
        for handler in logging.getLogger().handlers:
            handler.flush()
        with io.open(logfile, 'r', encoding='utf-8') as f:
            text = f.read()
        assert u'INFO: before' in text
        assert u'DEBUG: after' in text

    def test_split_quoted(self):
        """Split outside quotes."""
        assert split_quoted(u'') == []
        assert split_quoted(u'a:b') == [u'a', u'b']
        assert split_quoted(u' a : : b ') == [u'a', u'b']
        assert split_quoted(u'PRINT "x:y":END') == [u'PRINT "x:y"', u'END']
        assert split_quoted(u'a,b', split_by=u',') == [u'a', u'b']


if __name__ == '__main__':
    run_tests()
