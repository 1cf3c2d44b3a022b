# encoding: utf-8
"""
Interface between BrunelBench and the simulator which integrates the neuron
dynamics and delivers spike events.

Network construction only ever talks to a simulator through the methods of
:class:`BaseBackend`. A backend is created once per run and passed
explicitly to every builder; there is no global simulator state.

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import logging
import numpy as np

from . import errors

logger = logging.getLogger("BrunelBench")

DEFAULT_MAX_DELAY = 10.0
DEFAULT_TIMESTEP = 0.1
DEFAULT_MIN_DELAY = 0.1


class BaseBackend(object):
    """
    Base class for simulator backends.

    `timestep`, `min_delay` and `max_delay` should all be in milliseconds.
    `num_processes` and `rank` describe how the simulation is distributed;
    construction itself is always single-threaded.
    """
    name = None

    def __init__(self, timestep=DEFAULT_TIMESTEP, min_delay=DEFAULT_MIN_DELAY,
                 max_delay=DEFAULT_MAX_DELAY, num_processes=1, rank=0):
        if min_delay > max_delay:
            raise errors.InvalidParameterValueError("min_delay has to be less than or equal to max_delay.")
        if min_delay < timestep:
            raise errors.InvalidParameterValueError(
                "min_delay (%g) must be greater than timestep (%g)" % (min_delay, timestep))
        if num_processes < 1 or not 0 <= rank < num_processes:
            raise errors.InvalidParameterValueError(
                "Invalid rank %s for %s processes" % (rank, num_processes))
        self.timestep = timestep
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.num_processes = num_processes
        self.rank = rank
        self.t = 0.0

    def check_delays(self, delays):
        delays = np.asarray(delays)
        if delays.size and (delays.min() < self.min_delay or delays.max() > self.max_delay):
            raise errors.ConnectionError("delay (%s) is out of range [%s,%s]" % (
                delays, self.min_delay, self.max_delay))

    # --- Creating and modifying units --------------------------------------

    def create_population(self, model_tag, defaults, count):
        """Create `count` units of the given model; return an array of their ids."""
        raise NotImplementedError

    def create_unit(self, model_tag, defaults):
        """Create a single unit of the given model; return its id."""
        raise NotImplementedError

    def set_unit_state(self, unit, field, value):
        raise NotImplementedError

    def get_unit_state(self, unit, field):
        raise NotImplementedError

    # --- Connecting units ---------------------------------------------------

    def register_synapse_model(self, base_model, name, overrides):
        """Make a copy of `base_model` available as `name`, with changed defaults."""
        raise NotImplementedError

    def connect(self, sources, targets, synapse_model, weights, delays):
        """
        Create one connection for each element of the equal-length arrays
        `sources`, `targets`, `weights` and `delays`.
        """
        raise NotImplementedError

    def num_connections(self):
        """Return the total number of connections, including those to recorders."""
        raise NotImplementedError

    # --- Recording and running ---------------------------------------------

    def create_recorder(self, label=None, start=0.0):
        """
        Create a spike recorder which ignores spikes emitted before `start`
        (ms); return an object with an `event_count()` method.
        """
        raise NotImplementedError

    def record(self, recorder, units):
        """Send every spike emitted by `units` to `recorder`."""
        raise NotImplementedError

    def run(self, duration):
        """Advance the simulation by `duration` ms."""
        raise NotImplementedError
