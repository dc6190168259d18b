import logging
import os
import subprocess

logger = logging.getLogger(__name__)


class ProcessConduit:
    """
    Two-way byte streams to a locally hosted process: the process's standard output is the
    `input` endpoint and its standard input is the `output` endpoint. Both endpoints are
    non-blocking.
    """

    def __init__(self, *args, cwd=None):
        """
        args: the process image name and any additional arguments required by the process.
        raises OSError and ValueError
        """
        self.cwd = cwd
        self.process = subprocess.Popen(args, cwd=cwd, stdout=subprocess.PIPE, stdin=subprocess.PIPE, bufsize=0)
        self.input = self.process.stdout
        self.output = self.process.stdin
        os.set_blocking(self.input.fileno(), False)
        os.set_blocking(self.output.fileno(), False)

    @property
    def pid(self):
        return self.process.pid if self.process is not None else None

    @property
    def open(self):
        """
        True while the process runs. Checking does not block: an exited process is reaped
        and reported closed.
        """
        return self.process is not None and self.process.poll() is None

    @property
    def exit_code(self):
        """ the exit status of the process, or None when it is still running. """
        return self.process.poll() if self.process is not None else None

    def close(self):
        """ closes both endpoints, then terminates the process if it still runs and reaps it. """
        if self.process is None:
            return
        for stream in (self.output, self.input):
            if not stream.closed:
                stream.close()
        if self.process.poll() is None:
            logger.debug("terminating process %d", self.process.pid)
            self.process.terminate()
        self.process.wait()
        self.process = None
