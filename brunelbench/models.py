# encoding: utf-8
"""
Definition of the model types used in the benchmark network: the neuron and
device models that make up populations, and the synapse models used by
projections.

Each model type enumerates the parameters it recognizes, with their default
values, in `default_parameters`. Giving a model a parameter it does not
recognize is an error.

Classes:
    IafPscAlpha, PoissonGenerator
    StaticSynapse, STDPPowerLawSynapse
    SynapseClass, SynapseCatalog

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import logging
from numbers import Number

from . import errors
from .parameters import ParameterSet
from .random import RandomDistribution

logger = logging.getLogger("BrunelBench")


class BaseModelType(object):
    """Base class for neuron, device and synapse model types."""

    model_tag = None  # name of the model in the simulator backend
    default_parameters = {}

    def __init__(self, **parameters):
        for name in parameters:
            if name not in self.default_parameters:
                raise errors.NonExistentParameterError(name, self.__class__.__name__,
                                                       self.default_parameters.keys())
        values = dict(self.default_parameters)
        values.update(parameters)
        for name, value in values.items():
            if not isinstance(value, Number) or isinstance(value, bool):
                raise errors.InvalidParameterValueError(
                    "%s.%s must be a number, not %r" % (self.__class__.__name__, name, value))
        self.parameters = ParameterSet(values)
        self.validate()

    def validate(self):
        pass

    def get_parameter_names(self):
        return tuple(sorted(self.default_parameters))

    def describe(self):
        return "%s (%s) with parameters %s" % (self.__class__.__name__, self.model_tag,
                                               self.parameters.as_dict())

    def __repr__(self):
        args = ", ".join("%s=%r" % item for item in sorted(self.parameters.items()))
        return "%s(%s)" % (self.__class__.__name__, args)


# ==============================================================================
#   Neuron and device models
# ==============================================================================

class CellType(BaseModelType):
    """Base class for models which can be instantiated as population units."""
    pass


class IafPscAlpha(CellType):
    """
    Leaky integrate-and-fire neuron with alpha-shaped postsynaptic currents.
    Units: mV, ms, pF.
    """
    model_tag = 'iaf_psc_alpha'
    default_parameters = {
        'E_L': 0.0,
        'C_m': 250.0,
        'tau_m': 10.0,
        't_ref': 0.5,
        'V_th': 20.0,
        'V_reset': 0.0,
        'tau_syn_ex': 0.32582722403722841,
        'tau_syn_in': 0.32582722403722841,
        'tau_minus': 30.0,
        'V_m': 5.7,
    }

    def validate(self):
        p = self.parameters
        if p['C_m'] <= 0 or p['tau_m'] <= 0:
            raise errors.InvalidParameterValueError("C_m and tau_m must be positive")
        if p['t_ref'] < 0:
            raise errors.InvalidParameterValueError("t_ref must be non-negative")
        if p['V_reset'] >= p['V_th']:
            raise errors.InvalidParameterValueError("V_reset must be below V_th")


class PoissonGenerator(CellType):
    """Generator of Poisson spike trains with a fixed `rate` (Hz)."""
    model_tag = 'poisson_generator'
    default_parameters = {
        'rate': 0.0,
    }

    def validate(self):
        if self.parameters['rate'] < 0:
            raise errors.InvalidParameterValueError("rate must be non-negative")


# ==============================================================================
#   Synapse models
# ==============================================================================

class SynapseType(BaseModelType):
    """Base class for synapse models. All synapses have a weight and a delay."""

    def validate(self):
        if self.parameters['delay'] <= 0:
            raise errors.InvalidParameterValueError("delay must be positive")

    @property
    def weight(self):
        return self.parameters['weight']

    @property
    def delay(self):
        return self.parameters['delay']


class StaticSynapse(SynapseType):
    """
    Synaptic connection with fixed weight (pA) and delay (ms).
    """
    model_tag = 'static_synapse'
    default_parameters = {
        'weight': 1.0,
        'delay': 1.0,
    }


class STDPPowerLawSynapse(SynapseType):
    """
    Spike-timing-dependent plasticity with a power-law weight dependence of
    potentiation (exponent `mu`), weight-independent depression scaled by the
    asymmetry parameter `alpha`, step size `lambda` and maximum weight `Wmax`.

    The plasticity rule itself is applied by the simulator backend.
    """
    model_tag = 'stdp_pl_synapse_hom'
    default_parameters = {
        'weight': 1.0,
        'delay': 1.0,
        'alpha': 0.0513,
        'lambda': 0.1,
        'mu': 0.4,
        'tau_plus': 15.0,
        'Wmax': 100.0,
    }

    def validate(self):
        super(STDPPowerLawSynapse, self).validate()
        if self.parameters['Wmax'] < self.parameters['weight']:
            raise errors.InvalidParameterValueError("Wmax must not be smaller than the initial weight")


class SynapseClass(object):
    """
    A synapse model registered with the backend under `name`, together with
    the rule used to give each connection its weight: either a single number
    or a :class:`~brunelbench.random.RandomDistribution` from which one value
    is drawn per connection.
    """

    def __init__(self, name, synapse_type, weight=None):
        self.name = name
        self.synapse_type = synapse_type
        if weight is None:
            weight = synapse_type.weight
        if not isinstance(weight, (Number, RandomDistribution)):
            raise errors.InvalidParameterValueError(
                "weight must be a number or a RandomDistribution, not %r" % (weight,))
        self.weight = weight

    @property
    def delay(self):
        return self.synapse_type.delay

    @property
    def model_tag(self):
        return self.synapse_type.model_tag

    @property
    def is_plastic(self):
        return not isinstance(self.synapse_type, StaticSynapse)

    def with_weight(self, weight):
        """Return a copy of this synapse class using a different weight rule."""
        return SynapseClass(self.name, self.synapse_type, weight)

    def __repr__(self):
        return "SynapseClass(%r, %r, weight=%s)" % (self.name, self.synapse_type, self.weight)


class SynapseCatalog(object):
    """
    The synapse classes available for building projections, each registered
    as a named copy of a backend synapse model with its own defaults.
    """

    def __init__(self, backend):
        self.backend = backend
        self._classes = {}

    def register(self, name, synapse_type, weight=None):
        if name in self._classes:
            raise errors.InvalidModelError("Synapse class '%s' is already registered" % name)
        if not isinstance(synapse_type, SynapseType):
            raise errors.InvalidModelError("%r is not a synapse type" % (synapse_type,))
        self.backend.register_synapse_model(synapse_type.model_tag, name,
                                            synapse_type.parameters.as_dict())
        synapse_class = SynapseClass(name, synapse_type, weight)
        self._classes[name] = synapse_class
        logger.debug("Registered synapse class %r" % synapse_class)
        return synapse_class

    def __getitem__(self, name):
        try:
            return self._classes[name]
        except KeyError:
            raise errors.ConnectionError("Unknown synapse class '%s'" % name)

    def __contains__(self, name):
        return name in self._classes

    def __len__(self):
        return len(self._classes)

    def names(self):
        return list(self._classes)
