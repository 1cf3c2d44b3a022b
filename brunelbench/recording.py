"""
Defines classes and functions for attaching external stimulation and spike
recorders to populations, and for estimating firing rates from what was
recorded.

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import logging
import numpy as np
import quantities as pq

from . import errors
from .populations import BasePopulation

logger = logging.getLogger("BrunelBench")


class Recorder(object):
    """
    Records the spikes of a fixed set of units, `recorded`, for the duration
    of the run.
    """

    def __init__(self, backend, recorded, label=None, start=0.0):
        self.backend = backend
        self.recorded = recorded
        self.label = label or "recorder of %s" % recorded.label
        self._device = backend.create_recorder(self.label, start=start)
        backend.record(self._device, recorded.all_cells)

    def __len__(self):
        return self.recorded.size

    def event_count(self):
        """Return the number of spikes recorded so far."""
        return int(self._device.event_count())

    def get_data(self):
        """Return the recorded spikes as a :class:`neo.Block`."""
        return self._device.get_data()

    def mean_spike_count(self):
        """Return the mean number of spikes per recorded unit."""
        if self.recorded.size == 0:
            return 0.0
        return self.event_count() / float(self.recorded.size)

    def __repr__(self):
        return "Recorder(%r, %d units)" % (self.label, self.recorded.size)


class StimulusAndRecordingAttacher(object):
    """
    Connects external stimulus sources to populations and binds recorders to
    the first units of populations.
    """

    def __init__(self, backend, connectivity):
        self.backend = backend
        self.connectivity = connectivity

    def attach_stimulus(self, stimulus, population, synapse_class, label=None):
        """
        Connect every unit of `stimulus` to every unit of `population`. A
        single stimulus source therefore gives exactly one connection per
        unit of `population`.
        """
        label = label or "%s→%s" % (stimulus.label, population.label)
        return self.connectivity.connect_all_to_all(stimulus, population,
                                                    synapse_class, label=label)

    def attach_recorder(self, population, n_rec, label=None, start=0.0):
        """
        Return a :class:`Recorder` which receives every spike emitted by the
        first `n_rec` units of `population`.
        """
        if not isinstance(population, BasePopulation):
            raise errors.ConnectionError("Can only record from a Population or PopulationView")
        if n_rec < 0 or n_rec > population.size:
            raise errors.InvalidRecordingSizeError(n_rec, population.size)
        recorder = Recorder(self.backend, population[:n_rec], label=label, start=start)
        logger.info("Recording spikes from the first %d units of %s" % (n_rec, population.label))
        return recorder


def estimate_rate_hz(recorder, assumed_recorded_count, sim_duration_ms):
    """
    Return an approximate mean firing rate (Hz) for the units recorded by
    `recorder`::

        event_count / assumed_recorded_count / sim_duration_ms * 1000

    `assumed_recorded_count` is an estimate of how many units contributed to
    the count (when the simulation is distributed over several processes, the
    number of recorded units divided evenly between them). The result is an
    approximation, and should be reported as one.
    """
    if assumed_recorded_count <= 0:
        raise errors.InvalidParameterValueError(
            "assumed_recorded_count must be positive, not %s" % assumed_recorded_count)
    if sim_duration_ms <= 0:
        raise errors.InvalidParameterValueError(
            "sim_duration_ms must be positive, not %s" % sim_duration_ms)
    n_events = recorder.event_count()
    if n_events == 0:
        logger.warning("%r has no events, the estimated rate is zero" % (recorder,))
    return n_events / float(assumed_recorded_count) / sim_duration_ms * 1000.0


def mean_rate(block, duration_ms):
    """
    Return the mean firing rate (Hz) of the spike trains in a
    :class:`neo.Block`, counting every spike train including silent ones.
    """
    spiketrains = [st for segment in block.segments for st in segment.spiketrains]
    if not spiketrains:
        raise errors.InvalidParameterValueError("The block contains no spike trains")
    if duration_ms <= 0:
        raise errors.InvalidParameterValueError("duration_ms must be positive, not %s" % duration_ms)
    counts = np.array([st.size for st in spiketrains], dtype=float)
    rate = counts.mean() / (duration_ms * pq.ms)
    return float(rate.rescale(pq.Hz).magnitude)
