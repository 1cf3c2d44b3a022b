# encoding: utf-8
"""
Defines classes encapsulating the algorithms used to decide which units of
a source population connect to which units of a target population.

Classes:
    AllToAllConnector
    FixedInDegreeConnector

Connectors are stateless: all randomness comes from the generator of the
projection being connected.

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import logging
import numpy as np

from . import errors

logger = logging.getLogger("BrunelBench")


class Connector(object):
    """
    Base class for connectors.

    All connector sub-classes have the following optional keyword arguments:
        `allow_self_connections`:
            if the connector is used to connect a Population to itself, this
            flag determines whether a unit is allowed to connect to itself.
    """

    def __init__(self, allow_self_connections=True):
        assert isinstance(allow_self_connections, bool)
        self.allow_self_connections = allow_self_connections

    def connect(self, projection):
        raise NotImplementedError

    def _candidates(self, projection, post_index):
        """Indices of the source units eligible to connect to target `post_index`."""
        candidates = np.arange(projection.pre.size)
        if not self.allow_self_connections:
            target = projection.post.all_cells[post_index]
            candidates = candidates[projection.pre.all_cells != target]
        return candidates

    def describe(self):
        return "%s(%s)" % (self.__class__.__name__,
                           ", ".join("%s=%r" % item for item in sorted(self.__dict__.items())))


class AllToAllConnector(Connector):
    """
    Connects every unit of the source population to every unit of the target
    population.
    """

    def connect(self, projection):
        projection._reserve(projection.pre.size * projection.post.size)
        for post_index in range(projection.post.size):
            sources = self._candidates(projection, post_index)
            projection._convergent_connect(sources, post_index)


class FixedInDegreeConnector(Connector):
    """
    Each target unit receives exactly `n` connections, from source units
    chosen uniformly at random.

    Arguments:
        `n`:
            the in-degree. Must not be negative nor exceed the size of the
            source population.
        `with_replacement`:
            if True (the default) the `n` sources of a target are drawn
            independently, so the same source may appear more than once. If
            False, they are `n` distinct units.
        `allow_self_connections`:
            if True (the default) a unit may be chosen as one of its own
            sources when a population is connected to itself.
    """

    def __init__(self, n, allow_self_connections=True, with_replacement=True):
        Connector.__init__(self, allow_self_connections)
        assert isinstance(with_replacement, bool)
        self.n = n
        self.with_replacement = with_replacement

    def check_degree(self, projection):
        if not isinstance(self.n, (int, np.integer)):
            raise errors.DegreeOutOfRangeError(self.n, projection.pre.size)
        available = projection.pre.size
        if not self.allow_self_connections \
                and np.isin(projection.post.all_cells, projection.pre.all_cells).any():
            # a target that is also a source loses itself as a candidate
            available -= 1
        if self.n < 0 or self.n > projection.pre.size:
            raise errors.DegreeOutOfRangeError(self.n, projection.pre.size)
        if self.n > 0 and available == 0:
            raise errors.DegreeOutOfRangeError(self.n, available)
        if not self.with_replacement and self.n > available:
            raise errors.DegreeOutOfRangeError(self.n, available)

    def connect(self, projection):
        self.check_degree(projection)
        if self.n == 0:
            return
        projection._reserve(self.n * projection.post.size)
        rng = projection.rng
        for post_index in range(projection.post.size):
            candidates = self._candidates(projection, post_index)
            if self.with_replacement:
                picks = rng.next(self.n, 'uniform_int', {'low': 0, 'high': candidates.size})
                sources = candidates[picks]
            else:
                sources = rng.permutation(candidates)[:self.n]
            projection._convergent_connect(sources, post_index)
