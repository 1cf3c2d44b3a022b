"""
Parameter set handling

The benchmark is described by a small number of independent parameters (the
population sizes, the connection probability `epsilon`, the excitatory
weight `JE`, the relative inhibitory strength `g`, ...). Everything else -
synaptic weights, in-degrees, the rate of the external drive - is derived
from these by :func:`resolve`, which returns an immutable
:class:`ParameterSet`.

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import logging
from collections.abc import Mapping
from copy import deepcopy
from numbers import Number
import numpy as np
from lazyarray import larray
from scipy.special import lambertw

from . import errors
from .core import in_degree
from .random import RandomDistribution

logger = logging.getLogger("BrunelBench")

# independent fields read by resolve(); nested fields use a dotted path
REQUIRED_PARAMETERS = ('NE', 'NI', 'epsilon', 'JE', 'g', 'delay', 'eta',
                       'model_params.V_th', 'model_params.tau_m',
                       'model_params.C_m', 'model_params.tau_syn_ex')

DERIVED_PARAMETERS = ('weight_ex', 'weight_in', 'weight_stdp', 'Wmax',
                      'CE', 'CI', 'stimulus_rate')


class ParameterSet(Mapping):
    """
    An immutable mapping of parameter names to values.

    Nested dictionaries are themselves converted to :class:`ParameterSet`
    objects. A ParameterSet is never modified after creation: use
    :meth:`merged` to obtain a new set with additional or replaced fields.
    """

    def __init__(self, parameters=None, **extra):
        items = {}
        if parameters is not None:
            items.update(parameters)
        items.update(extra)
        self._parameters = {}
        for name, value in items.items():
            if isinstance(value, Mapping):
                value = ParameterSet(value)
            self._parameters[name] = value

    def __getitem__(self, name):
        return self._parameters[name]

    def __iter__(self):
        return iter(self._parameters)

    def __len__(self):
        return len(self._parameters)

    def __repr__(self):
        return "ParameterSet(%r)" % self.as_dict()

    def lookup(self, path):
        """Return the value at a dotted `path`, e.g. "model_params.V_th"."""
        value = self
        for part in path.split("."):
            if not isinstance(value, Mapping) or part not in value:
                raise errors.MissingParameterError(path)
            value = value[part]
        return value

    def merged(self, other):
        """Return a new ParameterSet containing these parameters updated with `other`."""
        parameters = self.as_dict()
        parameters.update(other)
        return ParameterSet(parameters)

    def as_dict(self):
        """Return a deep copy of the parameters as plain, mutable dictionaries."""
        D = {}
        for name, value in self._parameters.items():
            if isinstance(value, ParameterSet):
                D[name] = value.as_dict()
            else:
                D[name] = deepcopy(value)
        return D


class LazyArray(larray):
    """
    Array of connection or state values which is only evaluated on access.

    Arguments:
        `value`:
            a number, a NumPy array or a
            :class:`~brunelbench.random.RandomDistribution`, from which
            values are drawn when the array is evaluated.
        `shape`:
            a tuple giving the shape of the array.
    """

    def __init__(self, value, shape=None, dtype=None):
        if not isinstance(value, (Number, np.ndarray, RandomDistribution)):
            raise errors.InvalidParameterValueError(
                "Value should be a number, an array or a RandomDistribution, not %s" % type(value).__name__)
        super(LazyArray, self).__init__(value, shape, dtype)


def psp_to_current_amplitude(psp_amplitude, tau_m, tau_syn, C_m):
    """
    Return the amplitude (pA) of an alpha-shaped postsynaptic current which
    produces a postsynaptic potential with peak `psp_amplitude` (mV) in a
    leaky integrate-and-fire neuron with membrane time constant `tau_m` (ms),
    synaptic time constant `tau_syn` (ms) and capacitance `C_m` (pF).
    """
    if tau_m == tau_syn:
        raise errors.InvalidParameterValueError("tau_m and tau_syn must differ")
    a = tau_m / tau_syn
    b = 1.0 / tau_syn - 1.0 / tau_m
    # time of the PSP maximum, from the lower branch of the Lambert W function
    t_max = 1.0 / b * (-lambertw(-np.exp(-1.0 / a) / a, k=-1).real - 1.0 / a)
    v_max = np.exp(1.0) / (tau_syn * C_m * b) * (
        (np.exp(-t_max / tau_m) - np.exp(-t_max / tau_syn)) / b
        - t_max * np.exp(-t_max / tau_syn))
    return psp_amplitude / v_max


def resolve(parameters):
    """
    Return a :class:`ParameterSet` containing all of `parameters` together
    with the fields derived from them:

        ``weight_ex``     = JE
        ``weight_in``     = -g * JE
        ``weight_stdp``   = JE
        ``Wmax``          = 2 * JE
        ``CE``, ``CI``    = in-degrees from NE and NI for probability epsilon
        ``stimulus_rate`` = rate (Hz) of the external Poisson drive

    Derived fields are always recomputed from the independent ones, so
    resolving an already-resolved set returns an equal set.
    """
    P = ParameterSet(parameters)
    for path in REQUIRED_PARAMETERS:
        P.lookup(path)

    JE = P['JE']
    g = P['g']
    CE = in_degree(P['NE'], P['epsilon'])
    CI = in_degree(P['NI'], P['epsilon'])
    model_params = P['model_params']
    if CE > 0 and JE != 0:
        nu_thresh = model_params['V_th'] / (
            CE * model_params['tau_m'] / model_params['C_m']
            * JE * np.exp(1.0) * model_params['tau_syn_ex'])
        stimulus_rate = float(P['eta'] * nu_thresh * CE * 1000.0)
    else:
        stimulus_rate = 0.0

    derived = {
        'weight_ex': JE,
        'weight_in': -g * JE,
        'weight_stdp': JE,
        'Wmax': 2 * JE,
        'CE': CE,
        'CI': CI,
        'stimulus_rate': stimulus_rate,
    }
    logger.debug("Derived parameters: %s" % derived)
    return P.merged(derived)


def default_parameters(scale=1.0):
    """
    Return the independent parameters of the benchmark network, with
    population sizes scaled by `scale` (scale=1 gives 11250 neurons).
    """
    model_params = {
        'E_L': 0.0,         # resting membrane potential (mV)
        'C_m': 250.0,       # capacity of the membrane (pF)
        'tau_m': 10.0,      # membrane time constant (ms)
        't_ref': 0.5,       # duration of refractory period (ms)
        'V_th': 20.0,       # threshold (mV)
        'V_reset': 0.0,     # reset potential (mV)
        # time constants of postsynaptic currents (ms)
        'tau_syn_ex': 0.32582722403722841,
        'tau_syn_in': 0.32582722403722841,
        'tau_minus': 30.0,  # time constant for STDP, depression (ms)
        'V_m': 5.7,         # initial membrane potential (mV)
    }
    JE = psp_to_current_amplitude(0.14, model_params['tau_m'],
                                  model_params['tau_syn_ex'], model_params['C_m'])
    return {
        'NE': int(9000 * scale),
        'NI': int(2250 * scale),
        'Nrec': 1000,
        'epsilon': 0.1,
        'JE': float(JE),      # excitatory weight (pA), 0.14 mV PSP
        'g': 5.0,             # relative strength of inhibition
        'eta': 1.685,         # external rate relative to threshold rate
        'delay': 1.5,         # synaptic delay (ms)
        'sigma_w': 3.47,      # standard deviation of E->E weights (pA)
        'randomize_Vm': True,
        'mean_potential': 5.7,
        'sigma_potential': 7.2,
        'rng_seed': 55,
        'simtime': 250.0,     # simulated time (ms)
        'presimtime': 50.0,   # simulated time before recording starts (ms)
        'model_params': model_params,
        'stdp_params': {
            'alpha': 0.0513,
            'lambda': 0.1,    # STDP step size
            'mu': 0.4,        # STDP weight dependence exponent (potentiation)
            'tau_plus': 15.0,  # time constant for potentiation
        },
    }
