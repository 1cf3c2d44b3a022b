"""
Mock implementation of the simulator backend, for testing and documentation
purposes.

This backend stores the network structure in memory, exactly as it was
built, but generates random spike data rather than really running
simulations: during `run()` every recorded unit emits a Poisson-distributed
number of spikes at a fixed rate.

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import logging
import numpy as np
import neo
import quantities as pq

from . import errors
from .random import NumpyRNG
from .simulator import BaseBackend, DEFAULT_MAX_DELAY, DEFAULT_MIN_DELAY, DEFAULT_TIMESTEP

logger = logging.getLogger("BrunelBench")

CELL_MODELS = ('iaf_psc_alpha', 'poisson_generator')
SYNAPSE_MODELS = ('static_synapse', 'stdp_pl_synapse_hom')


class MockRecorder(object):
    """Accumulates the spikes emitted by the units it records from."""

    def __init__(self, backend, label=None, start=0.0):
        self.backend = backend
        self.label = label
        self.start = start
        self.units = np.zeros((0,), dtype=int)
        self._spike_times = {}

    def _add_units(self, units):
        self.units = np.concatenate((self.units, np.asarray(units, dtype=int)))
        for unit in units:
            self._spike_times.setdefault(int(unit), [])

    def _store(self, unit, times):
        self._spike_times[int(unit)].extend(times)

    def event_count(self):
        """Return the number of spike events recorded so far."""
        return sum(len(times) for times in self._spike_times.values())

    @property
    def n_events(self):
        return self.event_count()

    def get_data(self):
        """Return the recorded spikes as a :class:`neo.Block`."""
        t_stop = max(self.backend.t, self.start)
        segment = neo.Segment(name="segment000")
        for unit in self.units:
            times = np.sort(np.array(self._spike_times[int(unit)], dtype=float))
            spiketrain = neo.SpikeTrain(times * pq.ms, t_start=self.start * pq.ms,
                                        t_stop=t_stop * pq.ms)
            spiketrain.annotate(source_id=int(unit))
            segment.spiketrains.append(spiketrain)
        block = neo.Block(name=self.label or "recorder")
        block.segments.append(segment)
        return block


class MockBackend(BaseBackend):
    """
    In-memory backend. `kernel_seed` seeds the generator used for the random
    spike data, `spike_rate` (Hz) sets the firing rate of every recorded unit.
    """
    name = "MockSimulator"

    def __init__(self, timestep=DEFAULT_TIMESTEP, min_delay=DEFAULT_MIN_DELAY,
                 max_delay=DEFAULT_MAX_DELAY, num_processes=1, rank=0,
                 kernel_seed=12345, spike_rate=10.0):
        super(MockBackend, self).__init__(timestep, min_delay, max_delay, num_processes, rank)
        if spike_rate < 0:
            raise errors.InvalidParameterValueError("spike_rate must be non-negative")
        self.spike_rate = spike_rate
        self.rng = NumpyRNG(seed=kernel_seed)
        self._next_id = 1
        self._blocks = []      # (first id, last id, model tag, defaults)
        self._states = {}
        self._synapse_models = dict((name, {}) for name in SYNAPSE_MODELS)
        self._sources = []
        self._targets = []
        self._weights = []
        self._delays = []
        self._models = []
        self.recorders = []

    # --- Creating and modifying units --------------------------------------

    def create_population(self, model_tag, defaults, count):
        if model_tag not in CELL_MODELS:
            raise errors.InvalidModelError("Unknown cell model '%s'" % model_tag)
        if count < 0:
            raise errors.InvalidParameterValueError("Cannot create %s units" % count)
        first = self._next_id
        self._next_id += count
        self._blocks.append((first, self._next_id - 1, model_tag, dict(defaults)))
        return np.arange(first, self._next_id, dtype=int)

    def create_unit(self, model_tag, defaults):
        return int(self.create_population(model_tag, defaults, 1)[0])

    def _block(self, unit):
        for first, last, model_tag, defaults in self._blocks:
            if first <= unit <= last:
                return model_tag, defaults
        raise errors.InvalidParameterValueError("Unit %s does not exist" % unit)

    def model_of(self, unit):
        return self._block(unit)[0]

    def set_unit_state(self, unit, field, value):
        model_tag, defaults = self._block(unit)
        if field not in defaults:
            raise errors.NonExistentParameterError(field, model_tag, defaults.keys())
        self._states.setdefault(int(unit), {})[field] = value

    def get_unit_state(self, unit, field):
        model_tag, defaults = self._block(unit)
        state = self._states.get(int(unit), {})
        if field in state:
            return state[field]
        elif field in defaults:
            return defaults[field]
        raise errors.NonExistentParameterError(field, model_tag, defaults.keys())

    # --- Connecting units ---------------------------------------------------

    def register_synapse_model(self, base_model, name, overrides):
        if base_model not in SYNAPSE_MODELS:
            raise errors.InvalidModelError("Unknown synapse model '%s'" % base_model)
        if name in self._synapse_models:
            raise errors.InvalidModelError("Synapse model '%s' already exists" % name)
        self._synapse_models[name] = dict(overrides)

    def synapse_defaults(self, name):
        return dict(self._synapse_models[name])

    def connect(self, sources, targets, synapse_model, weights, delays):
        if synapse_model not in self._synapse_models:
            raise errors.ConnectionError("Unknown synapse model '%s'" % synapse_model)
        sources = np.asarray(sources, dtype=int)
        targets = np.asarray(targets, dtype=int)
        weights = np.asarray(weights, dtype=float)
        delays = np.asarray(delays, dtype=float)
        if not (sources.shape == targets.shape == weights.shape == delays.shape):
            raise errors.ConnectionError("sources, targets, weights and delays must have the same shape")
        self.check_delays(delays)
        self._sources.append(sources)
        self._targets.append(targets)
        self._weights.append(weights)
        self._delays.append(delays)
        self._models.append((synapse_model, sources.size))

    def get_connections(self, synapse_model=None):
        """
        Return (sources, targets, weights, delays) arrays for all connections,
        or only for those using `synapse_model`.
        """
        selected = [i for i, (name, n) in enumerate(self._models)
                    if synapse_model is None or name == synapse_model]
        if not selected:
            empty = np.zeros((0,))
            return empty.astype(int), empty.astype(int), empty, empty
        return tuple(np.concatenate([arrays[i] for i in selected])
                     for arrays in (self._sources, self._targets, self._weights, self._delays))

    def num_connections(self):
        n_synapses = sum(n for name, n in self._models)
        n_recorded = sum(recorder.units.size for recorder in self.recorders)
        return n_synapses + n_recorded

    # --- Recording and running ---------------------------------------------

    def create_recorder(self, label=None, start=0.0):
        recorder = MockRecorder(self, label, start)
        self.recorders.append(recorder)
        return recorder

    def record(self, recorder, units):
        for unit in units:
            self._block(unit)
        recorder._add_units(units)

    def run(self, duration):
        if duration < 0:
            raise errors.InvalidParameterValueError("Cannot run for a negative time (%g ms)" % duration)
        t_stop = self.t + duration
        for recorder in self.recorders:
            t_start = max(self.t, recorder.start)
            if t_stop <= t_start or recorder.units.size == 0:
                continue
            expected = self.spike_rate * (t_stop - t_start) / 1000.0
            counts = self.rng.next(recorder.units.size, 'poisson', {'lambda_': expected})
            for unit, count in zip(recorder.units, counts):
                if count > 0:
                    times = self.rng.next(int(count), 'uniform', {'low': t_start, 'high': t_stop})
                    recorder._store(unit, times.tolist())
        logger.debug("Mock simulation advanced from %g ms to %g ms" % (self.t, t_stop))
        self.t = t_stop
