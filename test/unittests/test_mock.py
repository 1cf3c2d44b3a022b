"""
Tests of the in-memory mock backend.

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import unittest
import numpy as np
from numpy.testing import assert_array_equal
import neo
import quantities as pq

from brunelbench import errors
from brunelbench.mock import MockBackend
from brunelbench.simulator import BaseBackend


class BackendSetupTest(unittest.TestCase):

    def test_invalid_delays(self):
        self.assertRaises(errors.InvalidParameterValueError, MockBackend, min_delay=2.0, max_delay=1.0)
        self.assertRaises(errors.InvalidParameterValueError, MockBackend, timestep=0.5, min_delay=0.1)

    def test_invalid_rank(self):
        self.assertRaises(errors.InvalidParameterValueError, MockBackend, num_processes=2, rank=2)
        self.assertRaises(errors.InvalidParameterValueError, MockBackend, num_processes=0)

    def test_base_backend_is_abstract(self):
        backend = BaseBackend()
        self.assertRaises(NotImplementedError, backend.create_population, 'iaf_psc_alpha', {}, 3)
        self.assertRaises(NotImplementedError, backend.run, 10.0)


class UnitTest(unittest.TestCase):

    def setUp(self):
        self.backend = MockBackend()

    def test_ids_are_consecutive_and_distinct(self):
        a = self.backend.create_population('iaf_psc_alpha', {'V_m': 0.0}, 3)
        b = self.backend.create_population('iaf_psc_alpha', {'V_m': 0.0}, 2)
        assert_array_equal(a, [1, 2, 3])
        assert_array_equal(b, [4, 5])
        self.assertEqual(self.backend.create_unit('poisson_generator', {'rate': 1.0}), 6)
        self.assertEqual(self.backend.model_of(6), 'poisson_generator')

    def test_unknown_model(self):
        self.assertRaises(errors.InvalidModelError, self.backend.create_population, 'hh_psc_alpha', {}, 2)

    def test_unit_state(self):
        ids = self.backend.create_population('iaf_psc_alpha', {'V_m': 5.7}, 2)
        self.backend.set_unit_state(ids[0], 'V_m', -3.0)
        self.assertEqual(self.backend.get_unit_state(ids[0], 'V_m'), -3.0)
        self.assertEqual(self.backend.get_unit_state(ids[1], 'V_m'), 5.7)
        self.assertRaises(errors.NonExistentParameterError, self.backend.set_unit_state, ids[0], 'foo', 1.0)
        self.assertRaises(errors.InvalidParameterValueError, self.backend.get_unit_state, 99, 'V_m')


class ConnectTest(unittest.TestCase):

    def setUp(self):
        self.backend = MockBackend()
        self.backend.register_synapse_model('static_synapse', 'syn_ex', {'weight': 1.0, 'delay': 1.5})

    def test_register_synapse_model(self):
        self.assertRaises(errors.InvalidModelError, self.backend.register_synapse_model,
                          'static_synapse', 'syn_ex', {})
        self.assertRaises(errors.InvalidModelError, self.backend.register_synapse_model,
                          'tsodyks_synapse', 'syn_tm', {})

    def test_connect(self):
        self.backend.connect([1, 2], [3, 3], 'syn_ex', [1.0, 2.0], [1.5, 1.5])
        self.backend.connect([4], [5], 'static_synapse', [0.5], [1.0])
        self.assertEqual(self.backend.num_connections(), 3)
        sources, targets, weights, delays = self.backend.get_connections('syn_ex')
        assert_array_equal(sources, [1, 2])
        assert_array_equal(weights, [1.0, 2.0])
        self.assertEqual(self.backend.get_connections()[0].size, 3)
        self.assertEqual(self.backend.get_connections('syn_in')[0].size, 0)

    def test_connect_errors(self):
        self.assertRaises(errors.ConnectionError, self.backend.connect, [1], [2], 'syn_in', [1.0], [1.5])
        self.assertRaises(errors.ConnectionError, self.backend.connect, [1, 2], [2], 'syn_ex', [1.0], [1.5])
        self.assertRaises(errors.ConnectionError, self.backend.connect, [1], [2], 'syn_ex', [1.0], [20.0])


class RecordingTest(unittest.TestCase):

    def setUp(self):
        self.backend = MockBackend(kernel_seed=42, spike_rate=20.0)
        self.ids = self.backend.create_population('iaf_psc_alpha', {'V_m': 0.0}, 10)

    def test_recorded_units_count_as_connections(self):
        recorder = self.backend.create_recorder("rec")
        self.backend.record(recorder, self.ids[:4])
        self.assertEqual(self.backend.num_connections(), 4)

    def test_record_unknown_unit(self):
        recorder = self.backend.create_recorder("rec")
        self.assertRaises(errors.InvalidParameterValueError, self.backend.record, recorder, [999])

    def test_run(self):
        recorder = self.backend.create_recorder("rec")
        self.backend.record(recorder, self.ids)
        self.backend.run(1000.0)
        self.assertEqual(self.backend.t, 1000.0)
        # 10 units at 20 Hz for 1 s
        self.assertTrue(100 < recorder.event_count() < 300)

    def test_spikes_before_start_are_ignored(self):
        recorder = self.backend.create_recorder("rec", start=50.0)
        self.backend.record(recorder, self.ids)
        self.backend.run(50.0)
        self.assertEqual(recorder.event_count(), 0)
        self.backend.run(500.0)
        self.assertTrue(recorder.event_count() > 0)
        block = recorder.get_data()
        for st in block.segments[0].spiketrains:
            if st.size:
                self.assertTrue(st.min() >= 50.0 * pq.ms)

    def test_zero_rate(self):
        backend = MockBackend(spike_rate=0.0)
        ids = backend.create_population('iaf_psc_alpha', {}, 3)
        recorder = backend.create_recorder()
        backend.record(recorder, ids)
        backend.run(100.0)
        self.assertEqual(recorder.event_count(), 0)

    def test_negative_duration(self):
        self.assertRaises(errors.InvalidParameterValueError, self.backend.run, -1.0)

    def test_get_data(self):
        recorder = self.backend.create_recorder("rec")
        self.backend.record(recorder, self.ids[:3])
        self.backend.run(200.0)
        block = recorder.get_data()
        self.assertIsInstance(block, neo.Block)
        spiketrains = block.segments[0].spiketrains
        self.assertEqual(len(spiketrains), 3)
        self.assertEqual([st.annotations['source_id'] for st in spiketrains], list(self.ids[:3]))
        self.assertEqual(sum(st.size for st in spiketrains), recorder.event_count())
        self.assertEqual(spiketrains[0].t_stop, 200.0 * pq.ms)

    def test_same_seed_same_spikes(self):
        counts = []
        for i in range(2):
            backend = MockBackend(kernel_seed=7)
            ids = backend.create_population('iaf_psc_alpha', {}, 5)
            recorder = backend.create_recorder()
            backend.record(recorder, ids)
            backend.run(300.0)
            counts.append(recorder.event_count())
        self.assertEqual(counts[0], counts[1])
        self.assertTrue(np.all(np.array(counts) >= 0))
