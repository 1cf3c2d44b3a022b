"""
BrunelBench builds the two-population Brunel benchmark network (an
excitatory and an inhibitory population of integrate-and-fire neurons with
random fixed-in-degree connectivity and plastic excitatory-excitatory
synapses) in a simulator backend, and estimates the firing rates of the
populations after the simulation has been run.

Building the network:
    resolve()              - derive weights, in-degrees and stimulus rate
    default_parameters()   - the standard benchmark parameters
    BrunelNetwork          - builds and runs the complete benchmark

Components:
    NumpyRNG, RandomDistribution
    Population, PopulationView, PopulationBuilder
    StaticSynapse, STDPPowerLawSynapse, SynapseCatalog
    AllToAllConnector, FixedInDegreeConnector
    Projection, ConnectivityBuilder
    Recorder, StimulusAndRecordingAttacher, estimate_rate_hz

Simulator backends:
    mock

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

__version__ = '0.1.0'
__all__ = ["core", "errors", "random", "parameters", "models", "simulator",
           "mock", "populations", "connectors", "projections", "recording",
           "network", "utility", "benchmark"]

from .core import in_degree                                         # noqa: F401
from .parameters import ParameterSet, resolve, default_parameters   # noqa: F401
from .random import NumpyRNG, RandomDistribution                    # noqa: F401
from .models import (                                               # noqa: F401
    IafPscAlpha,
    PoissonGenerator,
    StaticSynapse,
    STDPPowerLawSynapse,
    SynapseClass,
    SynapseCatalog,
)
from .populations import Population, PopulationView, PopulationBuilder  # noqa: F401
from .connectors import AllToAllConnector, FixedInDegreeConnector       # noqa: F401
from .projections import Projection, ConnectivityBuilder                # noqa: F401
from .recording import (                                                # noqa: F401
    Recorder,
    StimulusAndRecordingAttacher,
    estimate_rate_hz,
    mean_rate,
)
from .network import BrunelNetwork, BenchmarkReport                     # noqa: F401
