"""Analysis package.

Design principle:
  - Ingest produces immutable :class:`~zmes_parser.models.parameters.ZmesFile` objects.
  - Analysis consumes them read-only and produces derived views (measurements, tables).

Name-based lookup is the only binding between the volatile parameter tree and
the fixed output schema; the descriptor tables live in
:mod:`zmes_parser.models.profile`.
"""

from .frames import measurement_to_frame, parameters_to_frame, to_serializable
from .measurement_xy import record_to_measurement, to_measurement_xy
from .tree_search import find_parameter, find_parameter_deep, iter_parameters

__all__ = [
    "find_parameter",
    "find_parameter_deep",
    "iter_parameters",
    "record_to_measurement",
    "to_measurement_xy",
    "measurement_to_frame",
    "parameters_to_frame",
    "to_serializable",
]
