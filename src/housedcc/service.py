"""
Runs the PiDCC channel and the fleet on a single-threaded event loop, configured from the
`dcc` configuration files.
"""
import argparse
import logging
import signal

from configobj import ConfigObjError

from housedcc.config.config import apply_conf_path, load_config
from housedcc.controller import PiDccController
from housedcc.fleet import Fleet
from housedcc.support.event_loop import SelectorLoop

logger = logging.getLogger(__name__)

config_name = 'dcc'


class DccService:
    """
    Owns the event loop, the controller and the fleet. The periodic tick of the controller
    is a background callback of the loop.
    """

    def __init__(self, config, loop=None):
        self.config = config
        self.loop = loop if loop is not None else SelectorLoop()
        pidcc = config['pidcc']
        self.controller = PiDccController.create(
            self.loop, pidcc['executable'],
            status_timeout=pidcc['status_timeout'], liveness_ticks=pidcc['liveness_ticks'],
            buffer_size=pidcc['buffer_size'], buffer_margin=pidcc['buffer_margin'])
        self.fleet = Fleet(self.controller)
        self.tick = 1.0
        apply_conf_path(config, 'service', self)

    def start(self):
        """ starts the generator and loads the fleet. A generator that fails is retried on the tick. """
        if not self.controller.initialize():
            logger.warning("PiDCC not started, will retry")
        self.controller.reload(self.config['pidcc'])
        self.fleet.reload(self.config['trains'])
        self.loop.background(self.controller.periodic, self.tick)

    def run(self):
        self.start()
        try:
            self.loop.run()
        finally:
            self.close()

    def stop(self, *args):
        self.loop.stop()

    def close(self):
        self.controller.channel.close()
        self.loop.close()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='DCC model railway control through the PiDCC generator')
    parser.add_argument('--config-dir', help='the directory holding dcc.cfg')
    parser.add_argument('--config', help='a configuration file applied over all others')
    parser.add_argument('--debug', action='store_true', help='log the protocol lines exchanged')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format='%(asctime)s %(name)s %(levelname)s %(message)s')
    try:
        config = load_config(config_name, args.config_dir, args.config)
    except (ConfigObjError, IOError) as e:
        logger.error("invalid configuration: %s", e)
        return 1
    service = DccService(config)
    signal.signal(signal.SIGTERM, service.stop)
    signal.signal(signal.SIGINT, service.stop)
    service.run()
    return 0


if __name__ == '__main__':  # pragma no cover
    raise SystemExit(main())
