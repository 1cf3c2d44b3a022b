"""
Tests of the Connector classes, using the brunelbench.mock backend.

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import unittest
import numpy as np
from numpy.testing import assert_array_equal

from brunelbench import connectors, errors
from brunelbench.mock import MockBackend
from brunelbench.models import IafPscAlpha, PoissonGenerator, StaticSynapse, SynapseCatalog
from brunelbench.populations import Population
from brunelbench.projections import Projection
from brunelbench.random import NumpyRNG, RandomDistribution
from .mocks import MockRNG


class ConnectorTestCase(unittest.TestCase):

    def setUp(self):
        self.backend = MockBackend()
        self.p1 = Population(5, IafPscAlpha(), self.backend, label="p1")
        self.p2 = Population(4, IafPscAlpha(), self.backend, label="p2")
        self.syn = SynapseCatalog(self.backend).register('syn_ex', StaticSynapse(weight=2.0, delay=1.5))

    def project(self, pre, post, connector, rng=None, synapse_class=None):
        return Projection(pre, post, connector, synapse_class or self.syn, self.backend,
                          rng=rng or NumpyRNG(seed=8782))


class TestAllToAllConnector(ConnectorTestCase):

    def test_connect(self):
        prj = self.project(self.p1, self.p2, connectors.AllToAllConnector())
        self.assertEqual(len(prj), 20)
        assert_array_equal(prj.in_degrees(), [5, 5, 5, 5])
        assert_array_equal(prj.get('source_index')[:5], np.arange(5))
        assert_array_equal(prj.get('target_index')[:5], np.zeros(5))

    def test_single_stimulus_source(self):
        stimulus = Population(1, PoissonGenerator(rate=100.0), self.backend)
        prj = self.project(stimulus, self.p2, connectors.AllToAllConnector())
        self.assertEqual(len(prj), self.p2.size)
        assert_array_equal(prj.get('source'), np.repeat(stimulus.first_id, 4))
        assert_array_equal(prj.get('target'), self.p2.all_cells)

    def test_no_self_connections(self):
        prj = self.project(self.p1, self.p1, connectors.AllToAllConnector(allow_self_connections=False))
        self.assertEqual(len(prj), 20)
        self.assertFalse((prj.get('source') == prj.get('target')).any())

    def test_no_self_connections_through_a_reversed_view(self):
        prj = self.project(self.p1, self.p1[::-1],
                           connectors.AllToAllConnector(allow_self_connections=False))
        self.assertEqual(len(prj), 20)
        self.assertFalse((prj.get('source') == prj.get('target')).any())

    def test_does_not_draw_random_numbers(self):
        rng = NumpyRNG(seed=3)
        self.project(self.p1, self.p2, connectors.AllToAllConnector(), rng=rng)
        assert_array_equal(rng.next(3), NumpyRNG(seed=3).next(3))


class TestFixedInDegreeConnector(ConnectorTestCase):

    def test_in_degree(self):
        prj = self.project(self.p1, self.p2, connectors.FixedInDegreeConnector(3))
        self.assertEqual(len(prj), 12)
        assert_array_equal(prj.in_degrees(), [3, 3, 3, 3])
        self.assertTrue(np.isin(prj.get('source'), self.p1.all_cells).all())
        self.assertTrue(np.isin(prj.get('target'), self.p2.all_cells).all())

    def test_with_replacement_uses_uniform_int(self):
        p3 = Population(3, IafPscAlpha(), self.backend)
        prj = self.project(self.p1, p3, connectors.FixedInDegreeConnector(2), rng=MockRNG(delta=1))
        assert_array_equal(prj.get('source_index'), [0, 1, 2, 3, 4, 0])
        assert_array_equal(prj.get('target_index'), [0, 0, 1, 1, 2, 2])

    def test_multiple_connections_between_a_pair(self):
        # with replacement, a source may be drawn more than once for the same target
        prj = self.project(self.p1, self.p2, connectors.FixedInDegreeConnector(5))
        assert_array_equal(prj.in_degrees(), [5, 5, 5, 5])
        n_distinct = [np.unique(prj.get('source_index')[prj.get('target_index') == i]).size
                      for i in range(self.p2.size)]
        self.assertTrue(min(n_distinct) < 5)

    def test_without_replacement(self):
        prj = self.project(self.p1, self.p2,
                           connectors.FixedInDegreeConnector(5, with_replacement=False))
        for i in range(self.p2.size):
            sources = prj.get('source_index')[prj.get('target_index') == i]
            self.assertEqual(sorted(sources), [0, 1, 2, 3, 4])

    def test_without_replacement_uses_permutation(self):
        prj = self.project(self.p1, self.p2,
                           connectors.FixedInDegreeConnector(2, with_replacement=False),
                           rng=MockRNG())
        assert_array_equal(prj.get('source_index'), [4, 3] * 4)

    def test_no_self_connections(self):
        prj = self.project(self.p1, self.p1,
                           connectors.FixedInDegreeConnector(4, allow_self_connections=False,
                                                             with_replacement=False))
        self.assertEqual(len(prj), 20)
        self.assertFalse((prj.get('source') == prj.get('target')).any())

    def test_no_self_connections_with_replacement(self):
        prj = self.project(self.p1, self.p1,
                           connectors.FixedInDegreeConnector(4, allow_self_connections=False))
        self.assertEqual(len(prj), 20)
        self.assertFalse((prj.get('source') == prj.get('target')).any())

    def test_no_self_connections_through_views(self):
        for pre, post in ((self.p1, self.p1[:]), (self.p1[::-1], self.p1),
                          (self.p1, self.p1.first(3))):
            for with_replacement in (True, False):
                prj = self.project(pre, post, connectors.FixedInDegreeConnector(
                    4, allow_self_connections=False, with_replacement=with_replacement))
                self.assertEqual(len(prj), 4 * post.size)
                self.assertFalse((prj.get('source') == prj.get('target')).any())

    def test_views_of_disjoint_units_keep_all_sources(self):
        # p1[:2] and p1[2:] share no units, so every source is eligible
        prj = self.project(self.p1[:2], self.p1[2:],
                           connectors.FixedInDegreeConnector(2, allow_self_connections=False,
                                                             with_replacement=False))
        assert_array_equal(prj.in_degrees(), [2, 2, 2])

    def test_zero_in_degree(self):
        prj = self.project(self.p1, self.p2, connectors.FixedInDegreeConnector(0))
        self.assertEqual(len(prj), 0)
        assert_array_equal(prj.in_degrees(), [0, 0, 0, 0])

    def test_in_degree_equal_to_source_size(self):
        prj = self.project(self.p1, self.p2,
                           connectors.FixedInDegreeConnector(5, with_replacement=False))
        self.assertEqual(len(prj), 20)

    def test_degree_out_of_range(self):
        for connector in (connectors.FixedInDegreeConnector(6, with_replacement=False),
                          connectors.FixedInDegreeConnector(-1),
                          connectors.FixedInDegreeConnector(2.5)):
            self.assertRaises(errors.DegreeOutOfRangeError, self.project, self.p1, self.p2, connector)

    def test_degree_larger_than_source_population(self):
        # the in-degree may not exceed the source size, even with replacement
        self.assertRaises(errors.DegreeOutOfRangeError, self.project, self.p1, self.p2,
                          connectors.FixedInDegreeConnector(6))

    def test_degree_out_of_range_without_self_connections(self):
        connector = connectors.FixedInDegreeConnector(5, allow_self_connections=False,
                                                      with_replacement=False)
        with self.assertRaises(errors.DegreeOutOfRangeError) as cm:
            self.project(self.p1, self.p1, connector)
        self.assertEqual(cm.exception.available, 4)

    def test_degree_out_of_range_through_a_view(self):
        connector = connectors.FixedInDegreeConnector(5, allow_self_connections=False,
                                                      with_replacement=False)
        with self.assertRaises(errors.DegreeOutOfRangeError) as cm:
            self.project(self.p1, self.p1[1:3], connector)
        self.assertEqual(cm.exception.available, 4)

    def test_single_unit_without_self_connections(self):
        p = Population(1, IafPscAlpha(), self.backend)
        self.assertRaises(errors.DegreeOutOfRangeError, self.project, p, p,
                          connectors.FixedInDegreeConnector(1, allow_self_connections=False))
        self.assertRaises(errors.DegreeOutOfRangeError, self.project, p, p[:],
                          connectors.FixedInDegreeConnector(1, allow_self_connections=False))

    def test_random_weights(self):
        rd = RandomDistribution('uniform', (0.0, 1.0), rng=MockRNG(start=10.0, delta=1.0))
        prj = self.project(self.p1, self.p2, connectors.FixedInDegreeConnector(2),
                           synapse_class=self.syn.with_weight(rd))
        assert_array_equal(prj.get('weight'), np.arange(10.0, 18.0))

    def test_same_seed_same_connections(self):
        a = self.project(self.p1, self.p2, connectors.FixedInDegreeConnector(3), rng=NumpyRNG(seed=1))
        b = self.project(self.p1, self.p2, connectors.FixedInDegreeConnector(3), rng=NumpyRNG(seed=1))
        assert_array_equal(a.get('source'), b.get('source'))

    def test_describe(self):
        self.assertIn("n=3", connectors.FixedInDegreeConnector(3).describe())
