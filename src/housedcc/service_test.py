import os
import shutil
import tempfile
import unittest
from unittest.mock import Mock, patch

from hamcrest import assert_that, is_, contains_string

from housedcc.config.config import load_config
from housedcc.service import DccService, main, parse_args


class DccServiceTest(unittest.TestCase):

    def setUp(self):
        self.directory = tempfile.mkdtemp()
        with open(os.path.join(self.directory, 'dcc.cfg'), 'w') as f:
            f.write('[pidcc]\nexecutable = /nonexistent/pidcc\npin_a = 17\nliveness_ticks = 2\n'
                    '[service]\ntick = 0.5\n'
                    '[trains]\n[[models]]\n[[[GP9]]]\ntype = engine\ndevices = light:13,\n'
                    '[[vehicles]]\n[[[UP123]]]\nmodel = GP9\naddress = 3\n')
        self.config = load_config('dcc', self.directory)
        self.loop = Mock()

    def tearDown(self):
        shutil.rmtree(self.directory)

    def test_built_from_config(self):
        sut = DccService(self.config, self.loop)
        assert_that(sut.controller.channel.connector.endpoint, is_('/nonexistent/pidcc'))
        assert_that(sut.controller.supervisor.cadence.every, is_(2))
        assert_that(sut.tick, is_(0.5))

    def test_start_applies_config(self):
        sut = DccService(self.config, self.loop)
        sut.start()
        assert_that(sut.controller.export_config(), is_({'pin_a': 17, 'pin_b': 0}))
        assert_that(sut.fleet.exists('UP123'), is_(True))
        assert_that(sut.fleet.models['GP9'].functions['light'], is_(13))
        self.loop.background.assert_called_once_with(sut.controller.periodic, 0.5)

    def test_stop(self):
        sut = DccService(self.config, self.loop)
        sut.stop()
        self.loop.stop.assert_called_once_with()

    def test_parse_args(self):
        args = parse_args(['--config-dir', '/etc/house', '--debug'])
        assert_that(args.config_dir, is_('/etc/house'))
        assert_that(args.config, is_(None))
        assert_that(args.debug, is_(True))

    def test_main_invalid_configuration(self):
        override = os.path.join(self.directory, 'bad.cfg')
        with open(override, 'w') as f:
            f.write('[pidcc]\nbuffer_size = tiny\n')
        with patch('housedcc.service.logger') as logger:
            assert_that(main(['--config-dir', self.directory, '--config', override]), is_(1))
        assert_that(logger.error.call_args[0][1].args[0], contains_string('buffer_size'))

    def test_main_missing_override(self):
        with patch('housedcc.service.logger'):
            assert_that(main(['--config', os.path.join(self.directory, 'none.cfg')]), is_(1))

    def test_main_runs_service(self):
        with patch('housedcc.service.DccService') as service, patch('signal.signal'):
            assert_that(main(['--config-dir', self.directory]), is_(0))
        service.return_value.run.assert_called_once_with()


if __name__ == '__main__':  # pragma no cover
    unittest.main()
