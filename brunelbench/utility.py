# encoding: utf-8
"""
A collection of utility functions and classes.

Functions:
    init_logging()    - convenience function for setting up logging to file and
                        to the screen.

Classes:
    Timer    - measures the wall-clock duration of the phases of a benchmark.

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import os
import time
import logging


def init_logging(logfile, debug=False, num_processes=1, rank=0, level=None):
    """
    Configure the root logger for a benchmark run.

    Messages go to `logfile`, or to stderr if `logfile` is None. When the run
    is distributed, each rank writes to its own file (`logfile.<rank>`) and
    messages are prefixed with the rank. `level`, if given, takes precedence
    over `debug`.
    """
    prefix = ""
    if num_processes > 1:
        prefix = "Rank %d of %d: " % (rank, num_processes)
        if logfile:
            logfile = "%s.%d" % (logfile, rank)
    if logfile:
        logfile = os.path.abspath(logfile)
    if level is None:
        level = debug and logging.DEBUG or logging.INFO
    logging.basicConfig(level=level,
                        format=prefix + "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                        filename=logfile,
                        filemode="w")
    return logging.getLogger("BrunelBench")


class Timer(object):
    """
    Wall-clock timer. Timing starts on creation of the timer.

    Each call to :meth:`mark` stores the time elapsed since the previous mark
    (or since the timer was started) under a label, so that the phases of a
    benchmark can be timed one after another.
    """

    def __init__(self):
        self.marks = {}
        self.start()

    def start(self):
        """Start/restart timing."""
        self._start_time = time.perf_counter()
        self._last_check = self._start_time

    def elapsed_time(self):
        """Return the time in seconds since the timer was started."""
        return time.perf_counter() - self._start_time

    def mark(self, label):
        """Store and return the time (s) since the last mark under `label`."""
        current_time = time.perf_counter()
        duration = current_time - self._last_check
        self._last_check = current_time
        self.marks[label] = duration
        return duration
