"""
Random number generation for network construction.

Classes:
    NumpyRNG           - seeded generator built on numpy.random.RandomState
    RandomDistribution - a named distribution bound to a generator, evaluated
                         lazily (e.g. one weight per connection)

A single NumpyRNG instance supplies every random number used while a network
is built: initial membrane potentials, the sources chosen for each target
and random synaptic weights. It is passed explicitly to each consumer, and
the order in which they draw from it is fixed, so a given seed always yields
the same network.

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import logging
import numpy.random
from lazyarray import VectorizedIterable

from . import errors

logger = logging.getLogger("BrunelBench")

# name: (numpy.random.RandomState method, {our parameter name: numpy name})
# Methods not found on RandomState are looked up on NumpyRNG itself.
DISTRIBUTIONS = {
    'uniform':        ('uniform', {'low': 'low', 'high': 'high'}),
    'uniform_int':    ('randint', {'low': 'low', 'high': 'high'}),
    'normal':         ('normal', {'mu': 'loc', 'sigma': 'scale'}),
    'normal_clipped': ('_normal_clipped', {'mu': 'mu', 'sigma': 'sigma',
                                           'low': 'low', 'high': 'high'}),
    'poisson':        ('poisson', {'lambda_': 'lam'}),
}

# positional order of the parameters of each distribution
available_distributions = {
    'uniform':        ('low', 'high'),
    'uniform_int':    ('low', 'high'),
    'normal':         ('mu', 'sigma'),
    'normal_clipped': ('mu', 'sigma', 'low', 'high'),
    'poisson':        ('lambda_',),
}

MAX_REDRAWS = 1000


def get_mpi_config():
    """Return (rank, number of processes), or (0, 1) if mpi4py is not available."""
    try:
        from mpi4py import MPI
    except ImportError:
        return 0, 1
    return MPI.COMM_WORLD.rank, MPI.COMM_WORLD.size


class BaseRNG(object):
    """
    Common behaviour of random number generators: seed handling and the
    `next()` interface. Subclasses implement `_draw(distribution, n, parameters)`.

    With `parallel_safe=True` every MPI process draws the same sequence, so
    that all processes build an identical network. Otherwise the seed is
    offset by the MPI rank.
    """

    def __init__(self, seed=None, parallel_safe=True):
        self.parallel_safe = parallel_safe
        self.mpi_rank, self.num_processes = get_mpi_config()
        self.seed = None
        if seed is not None:
            self.seed = self._rank_seed(seed)

    def _rank_seed(self, seed):
        assert isinstance(seed, int), "seed must be an int, got %r" % (seed,)
        if self.parallel_safe:
            return seed
        if self.mpi_rank != 0:
            logger.warning("Using seed %d on MPI rank %d" % (seed + self.mpi_rank, self.mpi_rank))
        return seed + self.mpi_rank

    def __repr__(self):
        return "%s(seed=%r)" % (self.__class__.__name__, self.seed)

    def _check_seeded(self):
        if self.seed is None:
            raise errors.SeedNotSetError(
                "%s must be seeded before drawing random numbers" % self.__class__.__name__)

    def next(self, n=None, distribution=None, parameters=None):
        """
        Draw from `distribution` (uniform on [0, 1) if not given).

        Returns a single value if `n` is None, otherwise an array of `n`
        values (empty for n=0). Negative `n` raises ValueError.
        """
        self._check_seeded()
        if distribution is None:
            distribution = 'uniform'
            if parameters is None:
                parameters = {'low': 0.0, 'high': 1.0}
        if n is None:
            return numpy.asarray(self._draw(distribution, 1, parameters))[0]
        if n < 0:
            raise ValueError("Cannot draw %d values" % n)
        if n == 0:
            return numpy.empty((0,))
        return numpy.asarray(self._draw(distribution, n, parameters))

    def _draw(self, distribution, n, parameters):
        raise NotImplementedError


class NumpyRNG(BaseRNG):
    """Mersenne Twister generator, from :class:`numpy.random.RandomState`."""

    def __init__(self, seed=None, parallel_safe=True):
        BaseRNG.__init__(self, seed, parallel_safe)
        self.rng = numpy.random.RandomState()
        if self.seed is not None:
            self.rng.seed(self.seed)

    def set_seed(self, seed):
        """(Re)seed the generator. The draw sequence restarts from the beginning."""
        self.seed = self._rank_seed(seed)
        self.rng.seed(self.seed)

    def _draw(self, distribution, n, parameters):
        method_name, names = DISTRIBUTIONS[distribution]
        if set(parameters) != set(names):
            raise KeyError("%s needs parameters %s, got %s" % (distribution, sorted(names),
                                                               sorted(parameters)))
        kwargs = dict((names[name], value) for name, value in parameters.items())
        method = getattr(self.rng, method_name, None) or getattr(self, method_name)
        return method(size=n, **kwargs)

    def __deepcopy__(self, memo):
        clone = NumpyRNG(parallel_safe=self.parallel_safe)
        clone.seed = self.seed
        clone.rng.set_state(self.rng.get_state())
        return clone

    def _redraw_outside(self, draw, low, high, size):
        """
        Call `draw(k)` to replace values outside [low, high] until none are
        left. Gives up after MAX_REDRAWS rounds.
        """
        values = numpy.array(draw(1 if size is None else size), dtype=float, ndmin=1)
        outside = numpy.flatnonzero((values < low) | (values > high))
        rounds = 0
        while outside.size > 0:
            if rounds == MAX_REDRAWS:
                raise errors.InvalidParameterValueError(
                    "No value within [%g, %g] after %d redraws; check the distribution "
                    "parameters" % (low, high, MAX_REDRAWS))
            values[outside] = draw(outside.size)
            still_outside = (values[outside] < low) | (values[outside] > high)
            outside = outside[still_outside]
            rounds += 1
        if size is None:
            return values[0]
        return values

    def _normal_clipped(self, mu=0.0, sigma=1.0, low=-numpy.inf, high=numpy.inf, size=None):
        """Normal distribution, resampling values which fall outside [low, high]."""
        return self._redraw_outside(lambda k: self.rng.normal(mu, sigma, k), low, high, size)

    def next_clipped_normal(self, mean, sigma, upper_bound):
        """
        Return a single value drawn from a normal distribution with the given
        `mean` and `sigma`, redrawn until it is less than or equal to
        `upper_bound`. No lower bound is applied.
        """
        self._check_seeded()
        return float(self._normal_clipped(mu=mean, sigma=sigma, high=upper_bound))

    def permutation(self, arr):
        """Return a randomly permuted copy of `arr`."""
        self._check_seeded()
        return self.rng.permutation(arr)


class RandomDistribution(VectorizedIterable):
    """
    A distribution from which values are drawn on demand, e.g. when a
    :class:`~brunelbench.parameters.LazyArray` of connection weights is
    evaluated.

    Parameters are given either as a tuple, `parameters_pos`, in the order
    listed in `available_distributions`, or as keyword arguments. Every
    parameter must be given. `rng` must be a seeded generator; there is no
    default, since draws from a hidden generator would not be reproducible.

    >>> rng = NumpyRNG(seed=55)
    >>> weight = RandomDistribution('normal', mu=45.6, sigma=3.47, rng=rng)
    >>> weight.next(3).shape
    (3,)
    """

    def __init__(self, distribution, parameters_pos=None, rng=None, **parameters_named):
        if distribution not in available_distributions:
            raise errors.InvalidParameterValueError("Unknown distribution '%s'" % distribution)
        self.name = distribution
        expected = available_distributions[distribution]
        if parameters_pos is not None and parameters_named:
            raise ValueError("Give the parameters of %s either by position or by name, not both"
                             % distribution)
        if parameters_pos is not None:
            if len(parameters_pos) != len(expected):
                raise ValueError("%s takes parameters %s, got %s" % (distribution, expected,
                                                                     parameters_pos))
            parameters_named = dict(zip(expected, parameters_pos))
        elif set(parameters_named) != set(expected):
            raise KeyError("%s takes parameters %s, got %s" % (distribution, expected,
                                                               tuple(parameters_named)))
        self.parameters = parameters_named
        if rng is None:
            raise errors.SeedNotSetError("RandomDistribution requires an explicit, seeded rng")
        assert isinstance(rng, BaseRNG), "rng must be a brunelbench.random generator"
        self.rng = rng

    def next(self, n=None):
        """Return `n` values drawn from the distribution."""
        return self.rng.next(n=n, distribution=self.name, parameters=self.parameters)

    def __repr__(self):
        return "RandomDistribution(%r, %s, rng=%r)" % (self.name, self.parameters, self.rng)
