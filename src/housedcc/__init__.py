"""


PiDCC Channel

- Command generator: the external pidcc program, which turns each command line read on its
  standard input into a DCC signal on two GPIO pins, and reports its readiness on its
  standard output.
- Command encoder (protocol.dcc): renders locomotive speed and stop, function groups and
  accessory commands as "send <byte> <byte>" lines.
- Channel (channel): launches the generator through a ProcessConnector, registers its output
  with the event loop and writes command lines without ever blocking.
- Line reassembler (protocol.io): rebuilds complete status lines from the chunks read,
  in a bounded buffer.
- Readiness (protocol.readiness): tracks the idle, busy and full states reported by the
  generator. A full generator refuses all commands but stops. Busy and full expire when
  the generator goes quiet.
- Supervisor (supervisor): expires the readiness on every tick, and every few ticks
  checks that the generator is alive, relaunching it when it is gone.
- Controller (controller): the API used by the rest of the service. Each command answers
  whether it was accepted for transmission.
- Fleet (fleet): names vehicles and their devices, and remembers their speed and functions.


Notes:

Everything runs on a single thread, driven by the SelectorLoop: the generator's output is read
when readable, and the periodic tick runs as a background callback of the loop.

There is no command queue. A command refused because the generator is full is dropped, and the
caller decides whether to send it again.

The generator's status lines carry no correlation with the commands sent. A status applies
to the generator as a whole, and the last one received wins.
"""
