# encoding: utf-8
"""
Projections: the connections of a given synapse class between two
populations, and the builder that creates them.

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import logging
from collections import namedtuple
import numpy as np

from . import errors
from .connectors import AllToAllConnector, FixedInDegreeConnector
from .models import SynapseClass
from .parameters import LazyArray
from .populations import BasePopulation

logger = logging.getLogger("BrunelBench")

Connection = namedtuple("Connection", ["source", "target", "weight", "delay", "synapse"])


class Projection(object):
    """
    A container for all the connections of a given synapse class between two
    populations.

    Arguments:
        `presynaptic_neurons` and `postsynaptic_neurons`:
            Population or PopulationView objects.
        `connector`:
            a Connector object, encapsulating the algorithm to use for
            connecting the units.
        `synapse_class`:
            a registered SynapseClass, giving the synapse model, the delay
            and the rule for the weight of each connection.
        `backend`:
            the simulator backend in which the connections are created.
        `rng`:
            the random number generator used by the connector and by random
            weight rules.

    Connections are created when the projection is created, and are never
    removed or modified afterwards. The projection keeps its own copy of the
    source index, target index and weight of every connection (about 24 bytes
    per connection) alongside the copy held by the backend.
    """
    _nProj = 0

    def __init__(self, presynaptic_neurons, postsynaptic_neurons, connector,
                 synapse_class, backend, rng=None, label=None):
        for prefix, pop in zip(("pre", "post"),
                               (presynaptic_neurons, postsynaptic_neurons)):
            if not isinstance(pop, BasePopulation):
                raise errors.ConnectionError("%ssynaptic_neurons must be a Population or PopulationView, not a %s" % (prefix, type(pop)))
        if not isinstance(synapse_class, SynapseClass):
            raise errors.ConnectionError("synapse_class must be a SynapseClass, not a %s" % type(synapse_class))
        self.pre = presynaptic_neurons
        self.post = postsynaptic_neurons
        self.synapse_class = synapse_class
        self.backend = backend
        self.rng = rng
        self.label = label
        if label is None:
            self.label = u"%s→%s" % (self.pre.label, self.post.label)
        self._connector = connector
        self._n = 0
        self._pre_indices = np.zeros((0,), dtype=int)
        self._post_indices = np.zeros((0,), dtype=int)
        self._weights = np.zeros((0,), dtype=float)
        connector.connect(self)
        self._pre_indices = self._pre_indices[:self._n]
        self._post_indices = self._post_indices[:self._n]
        self._weights = self._weights[:self._n]
        Projection._nProj += 1
        logger.info("Created projection %s with %d connections (%s, synapse class '%s')" % (
            self.label, len(self), connector.__class__.__name__, synapse_class.name))

    def _reserve(self, count):
        """Make room for at least `count` more connections."""
        needed = self._n + count
        if needed <= self._pre_indices.size:
            return
        capacity = max(needed, 2 * self._pre_indices.size)
        for name in ('_pre_indices', '_post_indices', '_weights'):
            current = getattr(self, name)
            grown = np.empty((capacity,), dtype=current.dtype)
            grown[:self._n] = current[:self._n]
            setattr(self, name, grown)

    def _convergent_connect(self, presynaptic_indices, postsynaptic_index):
        """
        Connect the source units with indices `presynaptic_indices` to the
        target unit with index `postsynaptic_index`.
        """
        presynaptic_indices = np.asarray(presynaptic_indices, dtype=int)
        n = presynaptic_indices.size
        if n == 0:
            return
        weights = LazyArray(self.synapse_class.weight, shape=(n,)).evaluate()
        delays = np.ones((n,)) * self.synapse_class.delay
        sources = self.pre.all_cells[presynaptic_indices]
        targets = np.repeat(self.post.all_cells[postsynaptic_index], n)
        self.backend.connect(sources, targets, self.synapse_class.name, weights, delays)
        self._reserve(n)
        end = self._n + n
        self._pre_indices[self._n:end] = presynaptic_indices
        self._post_indices[self._n:end] = postsynaptic_index
        self._weights[self._n:end] = weights
        self._n = end

    def __len__(self):
        """Return the total number of connections."""
        return self._pre_indices.size

    def size(self):
        return len(self)

    @property
    def shape(self):
        return (self.pre.size, self.post.size)

    def __repr__(self):
        return 'Projection("%s")' % self.label

    def __getitem__(self, i):
        """Return the *i*th connection within the Projection."""
        return Connection(self.pre.all_cells[self._pre_indices[i]],
                          self.post.all_cells[self._post_indices[i]],
                          self._weights[i],
                          self.synapse_class.delay,
                          self.synapse_class.name)

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def connections(self):
        """Return an iterator over all connections."""
        return iter(self)

    def get(self, attribute):
        """
        Return an array with one value per connection for `attribute`, which
        may be 'source', 'target' (unit ids), 'source_index', 'target_index'
        (positions within the populations), 'weight' or 'delay'.
        """
        if attribute == 'source':
            return self.pre.all_cells[self._pre_indices]
        elif attribute == 'target':
            return self.post.all_cells[self._post_indices]
        elif attribute == 'source_index':
            return self._pre_indices.copy()
        elif attribute == 'target_index':
            return self._post_indices.copy()
        elif attribute == 'weight':
            return self._weights.copy()
        elif attribute == 'delay':
            return np.ones((len(self),)) * self.synapse_class.delay
        else:
            raise errors.NonExistentParameterError(
                attribute, "Projection", ['source', 'target', 'source_index',
                                          'target_index', 'weight', 'delay'])

    @property
    def sources(self):
        return self.get('source')

    @property
    def targets(self):
        return self.get('target')

    def in_degrees(self):
        """Return the number of incoming connections of each target unit."""
        return np.bincount(self._post_indices, minlength=self.post.size)


class ConnectivityBuilder(object):
    """
    Builds projections between populations that have already been created,
    drawing all random choices from `rng`.

    Each method call is a single, complete connection pass. Passes consume
    random numbers, so they must be made in the same order to reproduce a
    network for a given seed.
    """

    def __init__(self, backend, rng):
        self.backend = backend
        self.rng = rng

    def connect_fixed_in_degree(self, source, target, in_degree, synapse_class,
                                weight=None, label=None, allow_self_connections=True,
                                with_replacement=True):
        """
        Give every unit of `target` exactly `in_degree` connections from units
        of `source` chosen uniformly at random.

        If `weight` is given (a number or a RandomDistribution) it replaces
        the weight rule of `synapse_class` for this pass only.
        """
        if weight is not None:
            synapse_class = synapse_class.with_weight(weight)
        connector = FixedInDegreeConnector(in_degree,
                                           allow_self_connections=allow_self_connections,
                                           with_replacement=with_replacement)
        return Projection(source, target, connector, synapse_class,
                          self.backend, rng=self.rng, label=label)

    def connect_all_to_all(self, source, target, synapse_class, label=None):
        """Connect every unit of `source` to every unit of `target`."""
        return Projection(source, target, AllToAllConnector(), synapse_class,
                          self.backend, rng=self.rng, label=label)
