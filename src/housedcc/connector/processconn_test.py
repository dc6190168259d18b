import sys
import unittest
from unittest.mock import patch

from hamcrest import assert_that, is_, calling, raises

from housedcc.connector.base import ConnectorError, ConnectionNotAvailableError
from housedcc.connector.processconn import ProcessConnector


class ProcessConnectorTest(unittest.TestCase):
    def test_is_executable_non_file(self):
        self.expectExecutable('blahblah', False)

    def test_is_executable_file_not_executable(self):
        self.expectExecutable(__file__, False)

    def test_is_executable_file_executable(self):
        self.expectExecutable(sys.executable, True)

    def expectExecutable(self, file, executable):
        self.assertEqual(executable, ProcessConnector._is_executable(file))

    def test_constructor(self):
        file = sys.executable
        cwd = 'a/b/c'
        args = ['1', '2']
        sut = ProcessConnector(file, args, cwd)
        self.assertEqual(sut.image, file)
        self.assertEqual(sut.args, args)
        self.assertEqual(sut.cwd, cwd)
        self.assertEqual(sut.pid, None)

    def test_try_available(self):
        sut = ProcessConnector(sys.executable)
        self.assertEqual(sut._try_available(), True)

    def test_endpoint(self):
        sut = ProcessConnector(sys.executable)
        self.assertEqual(sut.endpoint, sys.executable)

    def test_connect_builds_process_conduit(self):
        with patch("housedcc.connector.processconn.ProcessConduit") as conduit:
            conduit.return_value.pid = 123
            sut = ProcessConnector(sys.executable, ['-V'], cwd='/')
            sut.connect()
            conduit.assert_called_once_with(sys.executable, '-V', cwd='/')
            assert_that(sut.pid, is_(123))

    def test_connect_missing_image(self):
        sut = ProcessConnector("$$$")
        assert_that(calling(sut.connect), raises(ConnectionNotAvailableError))

    def test_connect_invalid(self):
        sut = ProcessConnector("$$$")
        # fake availability so it tries to create the ProcessConduit
        sut._try_available = lambda: True
        assert_that(calling(sut.connect), raises(ConnectorError))
