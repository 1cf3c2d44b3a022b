"""
Command-line entry point: build and run the benchmark network on the mock
backend and report timings, network size and approximate firing rates.

Usage::

    brunelbench --scale 0.1 --nrec 100 --output results.json

:copyright: Copyright 2024 by the BrunelBench team, see AUTHORS.
:license: CeCILL, see LICENSE for details.
"""

import argparse
import json
import logging
from collections.abc import Mapping

from . import errors
from .mock import MockBackend
from .network import BrunelNetwork
from .parameters import default_parameters
from .utility import init_logging

logger = logging.getLogger("BrunelBench")


def load_parameters(scale, filename=None):
    """
    Return the default parameters for `scale`, updated from the JSON file
    `filename` if given. Nested dictionaries in the file update the
    corresponding default dictionaries rather than replacing them.
    """
    parameters = default_parameters(scale)
    if filename:
        with open(filename) as fp:
            overrides = json.load(fp)
        for name, value in overrides.items():
            if isinstance(value, Mapping) and isinstance(parameters.get(name), Mapping):
                parameters[name].update(value)
            else:
                parameters[name] = value
        logger.debug("Loaded parameters from %s" % filename)
    return parameters


def build_parser():
    parser = argparse.ArgumentParser(
        prog="brunelbench",
        description="Build a Brunel-style benchmark network and estimate its firing rates.")
    parser.add_argument("--scale", type=float, default=1.0,
                        help="scaling factor for the population sizes (default: 1.0)")
    parser.add_argument("--simtime", type=float, help="simulated time, in ms")
    parser.add_argument("--presimtime", type=float, help="simulated time before recording, in ms")
    parser.add_argument("--seed", type=int, help="seed for network construction")
    parser.add_argument("--nrec", type=int,
                        help="number of neurons to record from per population (default: 1000); "
                             "must not exceed the inhibitory population size, int(2250 * scale)")
    parser.add_argument("--spike-rate", type=float, default=10.0,
                        help="firing rate of the mock backend, in Hz (default: 10)")
    parser.add_argument("--parameters", help="JSON file of parameter overrides")
    parser.add_argument("--output", help="write the report to this JSON file")
    parser.add_argument("--logfile", help="log to this file instead of stderr")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    init_logging(args.logfile, debug=args.debug)

    parameters = load_parameters(args.scale, args.parameters)
    for name, value in (('simtime', args.simtime), ('presimtime', args.presimtime),
                        ('rng_seed', args.seed), ('Nrec', args.nrec)):
        if value is not None:
            parameters[name] = value

    backend = MockBackend(spike_rate=args.spike_rate)
    try:
        network = BrunelNetwork(parameters, backend)
        report = network.run()
    except (errors.MissingParameterError, errors.InvalidParameterValueError,
            errors.InvalidRecordingSizeError, errors.DegreeOutOfRangeError) as err:
        parser.error(str(err))
    print(report)
    if args.output:
        with open(args.output, "w") as fp:
            json.dump(report.as_dict(), fp, indent=2)
        logger.info("Report written to %s" % args.output)
    return 0
