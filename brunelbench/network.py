# encoding: utf-8
"""
The benchmark network: two populations of integrate-and-fire neurons, one
excitatory (E) and one inhibitory (I), with random fixed-in-degree
connectivity, plastic E→E synapses and a shared Poisson drive.

The network is always built in the same order:

    1. parameter resolution
    2. E population, then I population (randomized membrane potentials)
    3. synapse classes syn_ex, syn_in and syn_std
    4. stimulus → E, stimulus → I (all-to-all)
    5. E → E, E → I, I → E, I → I (fixed in-degree)
    6. spike recorders on the first Nrec units of E and of I

Changing this order changes the network obtained for a given seed.

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import logging

from . import errors
from .models import (IafPscAlpha, PoissonGenerator, StaticSynapse,
                     STDPPowerLawSynapse, SynapseCatalog)
from .parameters import resolve
from .populations import Population, PopulationBuilder
from .projections import ConnectivityBuilder
from .random import NumpyRNG, RandomDistribution
from .recording import StimulusAndRecordingAttacher, estimate_rate_hz
from .utility import Timer

logger = logging.getLogger("BrunelBench")


class BenchmarkReport(object):
    """
    Summary of a benchmark run: timings, network size and firing rates.

    The rates are approximate: they assume the recorded spikes came from
    Nrec / num_processes units.
    """

    def __init__(self, build_time, presimulation_time, simulation_time,
                 num_neurons, expected_connections, num_connections,
                 rate_ex, rate_in, num_processes=1):
        self.build_time = build_time
        self.presimulation_time = presimulation_time
        self.simulation_time = simulation_time
        self.num_neurons = num_neurons
        self.expected_connections = expected_connections
        self.num_connections = num_connections
        self.rate_ex = rate_ex
        self.rate_in = rate_in
        self.num_processes = num_processes

    def as_dict(self):
        return {
            'build_time': self.build_time,
            'presimulation_time': self.presimulation_time,
            'simulation_time': self.simulation_time,
            'num_neurons': self.num_neurons,
            'expected_connections': self.expected_connections,
            'num_connections': self.num_connections,
            'rate_ex': self.rate_ex,
            'rate_in': self.rate_in,
            'rates_are_approximate': True,
            'num_processes': self.num_processes,
        }

    def __str__(self):
        def fmt_rate(rate):
            return "n/a" if rate is None else "%.2f Hz (approximate)" % rate
        lines = [
            "Number of neurons    : %d" % self.num_neurons,
            "Number of connections: %d (expected %d)" % (self.num_connections,
                                                          self.expected_connections),
            "Excitatory rate      : %s" % fmt_rate(self.rate_ex),
            "Inhibitory rate      : %s" % fmt_rate(self.rate_in),
            "Building time        : %.2f s" % self.build_time,
            "Presimulation time   : %.2f s" % self.presimulation_time,
            "Simulation time      : %.2f s" % self.simulation_time,
        ]
        return "\n".join(lines)


class BrunelNetwork(object):
    """
    Builds and runs the benchmark network in `backend`, using the independent
    parameters `parameters` (see :func:`brunelbench.parameters.default_parameters`).
    """

    def __init__(self, parameters, backend):
        self.parameters = resolve(parameters)
        for name in ('Nrec', 'rng_seed', 'simtime', 'presimtime', 'sigma_w',
                     'mean_potential', 'sigma_potential', 'stdp_params'):
            self.parameters.lookup(name)
        n_rec = self.parameters['Nrec']
        smallest = min(self.parameters['NE'], self.parameters['NI'])
        if n_rec < 0 or n_rec > smallest:
            raise errors.InvalidRecordingSizeError(n_rec, smallest)
        self.backend = backend
        self.built = False
        self.has_run = False
        self.timer = Timer()
        self.populations = {}
        self.projections = {}
        self.recorders = {}
        self.synapses = None
        self.rng = None
        self.build_time = None

    def build(self):
        if self.built:
            raise RuntimeError("The network has already been built")
        P = self.parameters
        backend = self.backend
        self.timer.start()

        self.rng = NumpyRNG(seed=P['rng_seed'])
        cell_type = IafPscAlpha(**P['model_params'].as_dict())
        builder = PopulationBuilder(backend, self.rng,
                                    randomize_potential=P.get('randomize_Vm', True),
                                    mean_potential=P['mean_potential'],
                                    sigma_potential=P['sigma_potential'])
        E_neurons = builder.build(P['NE'], cell_type, label="E_neurons")
        I_neurons = builder.build(P['NI'], cell_type, label="I_neurons")
        self.populations = {'E': E_neurons, 'I': I_neurons}

        self.synapses = SynapseCatalog(backend)
        syn_ex = self.synapses.register('syn_ex', StaticSynapse(weight=P['weight_ex'],
                                                                delay=P['delay']))
        syn_in = self.synapses.register('syn_in', StaticSynapse(weight=P['weight_in'],
                                                                delay=P['delay']))
        syn_std = self.synapses.register('syn_std', STDPPowerLawSynapse(
            weight=P['weight_stdp'], delay=P['delay'], Wmax=P['Wmax'],
            **P['stdp_params'].as_dict()))

        logger.info("Creating excitatory stimulus with rate %g Hz" % P['stimulus_rate'])
        stimulus = Population(1, PoissonGenerator(rate=P['stimulus_rate']), backend,
                              label="E_stimulus")
        self.populations['stimulus'] = stimulus

        connectivity = ConnectivityBuilder(backend, self.rng)
        attacher = StimulusAndRecordingAttacher(backend, connectivity)
        self.projections['stimulus→E'] = attacher.attach_stimulus(stimulus, E_neurons, syn_ex)
        self.projections['stimulus→I'] = attacher.attach_stimulus(stimulus, I_neurons, syn_ex)

        ee_weight = RandomDistribution('normal', mu=P['weight_stdp'], sigma=P['sigma_w'], rng=self.rng)
        self.projections['E→E'] = connectivity.connect_fixed_in_degree(
            E_neurons, E_neurons, P['CE'], syn_std, weight=ee_weight, label="E→E")
        self.projections['E→I'] = connectivity.connect_fixed_in_degree(
            E_neurons, I_neurons, P['CE'], syn_ex, label="E→I")
        self.projections['I→E'] = connectivity.connect_fixed_in_degree(
            I_neurons, E_neurons, P['CI'], syn_in, label="I→E")
        self.projections['I→I'] = connectivity.connect_fixed_in_degree(
            I_neurons, I_neurons, P['CI'], syn_in, label="I→I")

        self.recorders['E'] = attacher.attach_recorder(E_neurons, P['Nrec'], label="E_recorder",
                                                       start=P['presimtime'])
        self.recorders['I'] = attacher.attach_recorder(I_neurons, P['Nrec'], label="I_recorder",
                                                       start=P['presimtime'])

        self.build_time = self.timer.mark("build")
        self.built = True
        logger.info("Built network with %d neurons and %d connections in %.2f s" % (
            self.count_neurons(), self.backend.num_connections(), self.build_time))
        return self

    def count_neurons(self):
        """Return the number of neurons (stimulus devices are not counted)."""
        return self.parameters['NE'] + self.parameters['NI']

    def expected_connections(self):
        """
        Return the number of connections the network should contain:
        (CE + CI) * N recurrent connections, one stimulus connection per
        neuron and one recorder connection per recorded neuron.
        """
        P = self.parameters
        N = self.count_neurons()
        return (P['CE'] + P['CI']) * N + 2 * P['Nrec'] + N

    def run(self):
        """
        Simulate for `presimtime` and then `simtime` ms (building the network
        first if necessary) and return a :class:`BenchmarkReport`.
        A network can only be run once.
        """
        if self.has_run:
            raise RuntimeError("The network has already been run")
        if not self.built:
            self.build()
        P = self.parameters
        if P['simtime'] < 0 or P['presimtime'] < 0:
            raise errors.InvalidParameterValueError("simtime and presimtime must be non-negative")

        self.timer.mark("idle")
        logger.info("Presimulating for %g ms" % P['presimtime'])
        self.backend.run(P['presimtime'])
        presimulation_time = self.timer.mark("presimulation")
        logger.info("Simulating for %g ms" % P['simtime'])
        self.backend.run(P['simtime'])
        simulation_time = self.timer.mark("simulation")

        rates = {}
        assumed_recorded_count = P['Nrec'] / float(self.backend.num_processes)
        for name, recorder in self.recorders.items():
            if assumed_recorded_count > 0 and P['simtime'] > 0:
                rates[name] = estimate_rate_hz(recorder, assumed_recorded_count, P['simtime'])
            else:
                logger.warning("Cannot estimate the rate of %s: nothing was recorded" % name)
                rates[name] = None

        report = BenchmarkReport(self.build_time, presimulation_time, simulation_time,
                                 self.count_neurons(), self.expected_connections(),
                                 self.backend.num_connections(),
                                 rates['E'], rates['I'],
                                 num_processes=self.backend.num_processes)
        self.has_run = True
        logger.info("Benchmark finished\n%s" % report)
        return report
