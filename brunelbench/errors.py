# encoding: utf-8
"""
Defines exceptions for the BrunelBench API

    MissingParameterError
    NonExistentParameterError
    InvalidParameterValueError
    InvalidRecordingSizeError
    DegreeOutOfRangeError
    SeedNotSetError
    ConnectionError
    InvalidModelError

All of these are raised while the network is being constructed. None of them
are recoverable: a network that failed to build must be discarded.

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""


class MissingParameterError(KeyError):
    """An independent parameter needed to resolve the parameter set is absent."""

    def __init__(self, parameter_name):
        Exception.__init__(self, parameter_name)
        self.parameter_name = parameter_name

    def __str__(self):
        return "Missing parameter '%s'" % self.parameter_name


class NonExistentParameterError(KeyError):
    """
    Model parameter does not exist.
    """

    def __init__(self, parameter_name, model_name, valid_parameter_names=['unknown']):
        Exception.__init__(self)
        self.parameter_name = parameter_name
        self.model_name = model_name
        self.valid_parameter_names = sorted(valid_parameter_names)

    def __str__(self):
        return "%s (valid parameters for %s are: %s)" % (self.parameter_name,
                                                         self.model_name,
                                                         ", ".join(self.valid_parameter_names))


class InvalidParameterValueError(ValueError):
    """Inappropriate parameter value"""
    pass


class InvalidRecordingSizeError(ValueError):
    """Attempt to record from more units than a population contains."""

    def __init__(self, n_rec, population_size):
        ValueError.__init__(self, n_rec, population_size)
        self.n_rec = n_rec
        self.population_size = population_size

    def __str__(self):
        return "Cannot record from %s units of a population of size %d" % (self.n_rec,
                                                                          self.population_size)


class DegreeOutOfRangeError(ValueError):
    """Requested in-degree is negative or larger than the available sources."""

    def __init__(self, in_degree, available):
        ValueError.__init__(self, in_degree, available)
        self.in_degree = in_degree
        self.available = available

    def __str__(self):
        return "In-degree %s is out of range [0, %d]" % (self.in_degree, self.available)


class SeedNotSetError(RuntimeError):
    """Attempt to draw random numbers from a generator that has not been seeded."""
    pass


class ConnectionError(Exception):
    """Attempt to create an invalid connection."""
    pass


class InvalidModelError(Exception):
    """Attempt to use a non-existent model type."""
    pass
