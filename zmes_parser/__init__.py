"""ZMES Parser -- Python tooling for Malvern Panalytical Zetasizer ``.zmes`` exports.

A ``.zmes`` file is an SQLite database written by ZS XPLORER. It stores a
registry of parameter types, a tree-shaped schema of parameter nodes per
record kind, and per-record typed values (including .NET-serialized arrays
of doubles hidden in opaque blobs).

This package provides tools for:
- Opening a ``.zmes`` snapshot from bytes or from disk
- Rebuilding the ordered parameter tree of every record
- Extracting typed values (text, numbers, booleans, decoded double arrays)
- Projecting a record into a cross-instrument XY measurement (sizes vs. distributions)
- Flattening parameters and measurements into pandas DataFrames / JSON

Key principles:
- Read-only: the source database is never modified
- Structural problems fail loudly (SchemaError); data anomalies degrade to "no value"
- Full traceability: non-fatal anomalies are kept as warnings on the parsed file

Main subpackages:
- ingest: Database access, tree building, value extraction, blob decoding
- models: Data models (Parameter, Record, ZmesFile, Measurement, ProjectionProfile)
- analysis: Tree search, measurement projection, tabular helpers
- gui: Interactive ipywidgets viewer
"""

from .analysis.measurement_xy import to_measurement_xy
from .analysis.tree_search import find_parameter, find_parameter_deep, iter_parameters
from .ingest.errors import MissingSchemaError, NoRootError, SchemaError, UnknownTypeError
from .ingest.reader import ZmesReader, ZmesReaderConfig, parse, parse_file
from .models.measurement import Measurement, MeasurementVariable
from .models.parameters import Parameter, Record, RecordGroup, ZmesFile
from .models.profile import DEFAULT_PROFILE, ProjectionProfile

__all__ = [
    "parse",
    "parse_file",
    "ZmesReader",
    "ZmesReaderConfig",
    "to_measurement_xy",
    "find_parameter",
    "find_parameter_deep",
    "iter_parameters",
    "Parameter",
    "Record",
    "RecordGroup",
    "ZmesFile",
    "Measurement",
    "MeasurementVariable",
    "ProjectionProfile",
    "DEFAULT_PROFILE",
    "SchemaError",
    "MissingSchemaError",
    "UnknownTypeError",
    "NoRootError",
]
