"""
Assorted utility functions.

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

from . import errors


def in_degree(population_size, epsilon):
    """
    Return the number of incoming connections each target receives from a
    population of `population_size` units, for connection probability
    `epsilon`.

    Examples::

        >>> in_degree(9000, 0.1)
        900
        >>> in_degree(2250, 0.1)
        225
    """
    if population_size < 0:
        raise errors.InvalidParameterValueError("Population size must be non-negative, not %s" % population_size)
    if not 0 <= epsilon <= 1:
        raise errors.InvalidParameterValueError("epsilon must lie in [0, 1], not %s" % epsilon)
    return int(round(population_size * epsilon))
