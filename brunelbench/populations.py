# encoding: utf-8
"""
Populations: ordered, fixed-size groups of units of the same model type.

Classes:
    Population     - a group of units created together
    PopulationView - an ordered subset of a Population's units
    PopulationBuilder - creates populations with randomized membrane potential

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import logging
import numpy as np

from . import errors
from .models import CellType

logger = logging.getLogger("BrunelBench")


class BasePopulation(object):
    """Functionality shared by :class:`Population` and :class:`PopulationView`."""

    def __len__(self):
        return self.all_cells.size

    @property
    def size(self):
        return self.all_cells.size

    def __iter__(self):
        return iter(self.all_cells)

    def __contains__(self, unit):
        return bool(np.any(self.all_cells == unit))

    def __getitem__(self, index):
        """
        Return either a single unit id (if `index` is an integer) or a
        :class:`PopulationView` (if `index` is a slice, a list/array of
        indices or a boolean mask).
        """
        if isinstance(index, (int, np.integer)):
            return self.all_cells[index]
        elif isinstance(index, (slice, list, np.ndarray)):
            return PopulationView(self, index)
        else:
            raise TypeError("indices must be integers, slices, lists, arrays or boolean masks, not %s" % type(index).__name__)

    def id_to_index(self, unit):
        """Return the position of `unit` within this population."""
        index = np.where(self.all_cells == unit)[0]
        if index.size == 0:
            raise IndexError("Unit %s is not in %s" % (unit, self.label))
        return int(index[0])

    def first(self, n):
        """Return a view of the first `n` units, in creation order."""
        return self[:n]

    def get_state(self, field):
        """Return the current value of `field` for every unit, as an array."""
        return np.array([self.backend.get_unit_state(unit, field) for unit in self.all_cells])


class Population(BasePopulation):
    """
    A group of `size` units of the model `cell_type`, created in the
    simulator `backend`. Unit ids are assigned in creation order and remain
    valid for the lifetime of the run.
    """
    _nPop = 0

    def __init__(self, size, cell_type, backend, label=None):
        if not isinstance(cell_type, CellType):
            raise errors.InvalidModelError("cell_type must be a CellType instance, not %r" % (cell_type,))
        if not isinstance(size, (int, np.integer)) or size < 0:
            raise errors.InvalidParameterValueError("Population size must be a non-negative integer, not %r" % (size,))
        self.celltype = cell_type
        self.backend = backend
        self.label = label or "population%d" % Population._nPop
        self.all_cells = np.asarray(
            backend.create_population(cell_type.model_tag, cell_type.parameters.as_dict(), size),
            dtype=int)
        if self.all_cells.size != size or np.unique(self.all_cells).size != size:
            raise errors.InvalidModelError("Backend did not return %d distinct unit ids" % size)
        Population._nPop += 1

    @property
    def first_id(self):
        return self.all_cells[0]

    @property
    def last_id(self):
        return self.all_cells[-1]

    def __repr__(self):
        return "Population(%d, %s, label=%r)" % (self.size, self.celltype.__class__.__name__, self.label)


class PopulationView(BasePopulation):
    """
    A view of a subset of the units of a parent population, in the order given
    by `selector` (a slice, an array of indices or a boolean mask).
    """

    def __init__(self, parent, selector, label=None):
        self.parent = parent
        self.mask = selector
        self.all_cells = parent.all_cells[selector]
        self.celltype = parent.celltype
        self.backend = parent.backend
        self.label = label or "view of %s" % parent.label

    def __repr__(self):
        return "PopulationView(parent=%r, size=%d)" % (self.parent.label, self.size)


class PopulationBuilder(object):
    """
    Creates populations and, optionally, gives each unit an initial membrane
    potential drawn from a normal distribution clipped at the firing threshold.

    Each call to :meth:`build` draws one value per unit from `rng`, in unit
    order, so populations must always be built in the same order for a
    given seed to reproduce the same network.
    """

    def __init__(self, backend, rng, randomize_potential=True,
                 mean_potential=5.7, sigma_potential=7.2):
        self.backend = backend
        self.rng = rng
        self.randomize_potential = randomize_potential
        self.mean_potential = mean_potential
        self.sigma_potential = sigma_potential

    def build(self, count, cell_type, label=None):
        logger.info("Creating population %s with %d %s units" % (label, count, cell_type.model_tag))
        population = Population(count, cell_type, self.backend, label=label)
        if self.randomize_potential:
            threshold = cell_type.parameters['V_th']
            for unit in population:
                v_init = self.rng.next_clipped_normal(self.mean_potential,
                                                      self.sigma_potential,
                                                      threshold)
                self.backend.set_unit_state(unit, 'V_m', v_init)
            logger.debug("Randomized V_m of %s around %g mV (sigma %g mV, clipped at %g mV)" % (
                population.label, self.mean_potential, self.sigma_potential, threshold))
        return population
