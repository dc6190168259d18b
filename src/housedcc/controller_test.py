import os
import unittest
from unittest.mock import Mock

from hamcrest import assert_that, is_, equal_to

from housedcc.capture import Capture
from housedcc.controller import PiDccController
from housedcc.protocol.readiness import Readiness, ReadinessTracker
from housedcc.support.events import EventSource
from housedcc.support.event_loop import SelectorLoop

cat_command = "/bin/cat" if os.access("/bin/cat", os.X_OK) else None


class PiDccControllerTest(unittest.TestCase):

    def setUp(self):
        self.now = 100
        self.channel = Mock()
        self.channel.lines = EventSource()
        self.channel.write_line.return_value = True
        self.capture = Capture("PIDCC")
        self.readiness = ReadinessTracker(self.capture, clock=lambda: self.now)
        self.supervisor = Mock()
        self.sut = PiDccController(self.channel, self.readiness, self.capture, self.supervisor)
        self.sut.configure_pins(17, 0)
        self.channel.write_line.reset_mock()

    def written(self):
        return [c[0][0] for c in self.channel.write_line.call_args_list]

    def status(self, line):
        self.channel.lines.fire(line)

    def test_configure_pins_sends_pin_line(self):
        self.sut.configure_pins(17, 27)
        assert_that(self.written(), is_(["pin 17 27"]))
        assert_that(self.sut.enabled, is_(True))

    def test_move_forward(self):
        assert_that(self.sut.move(5, 15), is_(True))
        assert_that(self.written(), is_(["send 5 105"]))

    def test_move_reverse(self):
        assert_that(self.sut.move(3, -1), is_(True))
        assert_that(self.written(), is_(["send 3 66"]))

    def test_move_clamps_speed(self):
        self.sut.move(3, 40)
        self.sut.move(3, 28)
        written = self.written()
        assert_that(written[0], is_(written[1]))

    def test_move_invalid_address(self):
        assert_that(self.sut.move(0, 5), is_(False))
        assert_that(self.sut.move(128, 5), is_(False))
        self.channel.write_line.assert_not_called()

    def test_stop_all(self):
        assert_that(self.sut.stop(0), is_(True))
        assert_that(self.written(), is_(["send 0 64"]))

    def test_emergency_stop(self):
        self.sut.stop(7, emergency=True)
        assert_that(self.written(), is_(["send 7 65"]))

    def test_stop_invalid_address(self):
        assert_that(self.sut.stop(128), is_(False))
        self.channel.write_line.assert_not_called()

    def test_full_refuses_all_but_stop(self):
        self.status("% busy")
        assert_that(self.sut.move(5, 10), is_(True))
        self.status("* full")
        assert_that(self.readiness.state, is_(Readiness.full))
        assert_that(self.sut.stop(5), is_(True))
        assert_that(self.sut.move(5, 10), is_(False))
        assert_that(self.sut.set_function(5, 0x90), is_(False))
        assert_that(self.sut.set_accessory(10, 0, True), is_(False))
        assert_that(self.written(), is_(["send 5 118", "send 5 64"]))

    def test_idle_accepts_again(self):
        self.status("* full")
        self.status("# idle")
        assert_that(self.sut.move(5, 10), is_(True))

    def test_set_function(self):
        assert_that(self.sut.set_function(3, 0x91), is_(True))
        assert_that(self.written(), is_(["send 3 145"]))

    def test_set_function_highest_address(self):
        assert_that(self.sut.set_function(127, 0x90), is_(True))
        assert_that(self.sut.set_function(128, 0x90), is_(False))
        assert_that(self.written(), is_(["send 127 144"]))

    def test_set_function_invalid(self):
        assert_that(self.sut.set_function(0, 0x91), is_(False))
        assert_that(self.sut.set_function(3, 256), is_(False))
        self.channel.write_line.assert_not_called()

    def test_set_accessory(self):
        assert_that(self.sut.set_accessory(65, 2, True), is_(True))
        assert_that(self.written(), is_(["send 129 154"]))

    def test_set_accessory_invalid(self):
        assert_that(self.sut.set_accessory(512, 0, True), is_(False))
        self.channel.write_line.assert_not_called()

    def test_write_failure_reported(self):
        self.channel.write_line.return_value = False
        assert_that(self.sut.move(5, 1), is_(False))

    def test_disabled_builds_without_writing(self):
        self.sut.configure_pins(0, 0)
        assert_that(self.sut.enabled, is_(False))
        assert_that(self.sut.move(5, 15), is_(True))
        self.channel.write_line.assert_not_called()
        last = self.capture.records[-1]
        assert_that((last.action, last.text), is_(('BUILT', 'send 5 105')))

    def test_periodic_ticks_supervisor(self):
        self.sut.periodic(123)
        self.supervisor.tick.assert_called_once_with(123)

    def test_export_config(self):
        self.sut.configure_pins(17, 27)
        assert_that(self.sut.export_config(), is_(equal_to({'pin_a': 17, 'pin_b': 27})))

    def test_reload(self):
        self.sut.reload({'pin_a': '22'})
        assert_that(self.sut.export_config(), is_(equal_to({'pin_a': 22, 'pin_b': 0})))
        assert_that(self.written(), is_(["pin 22 0"]))

    def test_initialize_starts_channel(self):
        self.channel.initialize.return_value = True
        assert_that(self.sut.initialize(), is_(True))


class PiDccControllerIntegrationTest(unittest.TestCase):

    def setUp(self):
        self.loop = SelectorLoop()

    def tearDown(self):
        self.sut.channel.close()
        self.loop.close()

    @unittest.skipUnless(cat_command, "cat command not available")
    def test_status_echoed_by_generator(self):
        """ cat echoes each command line, so a line starting with a status tag is read back """
        self.sut = PiDccController.create(self.loop, cat_command)
        self.sut.initialize()
        self.sut.configure_pins(17, 0)
        self.sut.channel.write_line("* full")
        for _ in range(50):
            if self.sut.readiness.state == Readiness.full:
                break
            self.loop.run_once(timeout=0.1)
        assert_that(self.sut.readiness.state, is_(Readiness.full))
        assert_that(self.sut.move(5, 15), is_(False))
        assert_that(self.sut.stop(5), is_(True))

    def test_missing_executable_retried(self):
        self.sut = PiDccController.create(self.loop, "/nonexistent/pidcc", liveness_ticks=1)
        assert_that(self.sut.initialize(), is_(False))
        self.sut.periodic(100)
        assert_that(self.sut.supervisor.relaunches, is_(1))


if __name__ == '__main__':  # pragma no cover
    unittest.main()
