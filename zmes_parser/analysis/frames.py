from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from zmes_parser.analysis.tree_search import iter_parameters
from zmes_parser.models.measurement import Measurement
from zmes_parser.models.parameters import Parameter, ParameterValueKind


PARAMETER_COLUMNS = ["path", "depth", "name", "urn", "kind", "value", "n_children"]


def parameters_to_frame(parameter: Parameter, *, sep: str = "/") -> pd.DataFrame:
    """
    Flatten a parameter tree into one row per node (pre-order).

    Array values are summarized as ``<array n=N>``; use the Parameter itself (or
    measurement_to_frame) to get the data.

    Examples
    --------
    >>> from zmes_parser.models.parameters import Parameter
    >>> root = Parameter("Root", "urn:r", children=(Parameter("A", "urn:a", value=1),))
    >>> parameters_to_frame(root)["path"].tolist()
    ['Root', 'Root/A']
    """
    rows: List[Dict[str, Any]] = []
    for path, p in iter_parameters(parameter):
        kind = p.kind
        value: Any = p.value
        if kind is ParameterValueKind.ARRAY:
            value = f"<array n={int(np.asarray(p.value).shape[0])}>"
        rows.append(
            {
                "path": sep.join(path),
                "depth": len(path) - 1,
                "name": p.name,
                "urn": p.urn,
                "kind": kind.value,
                "value": value,
                "n_children": len(p.children),
            }
        )
    return pd.DataFrame(rows, columns=PARAMETER_COLUMNS)


def measurement_to_frame(measurement: Measurement, *, with_units: bool = False) -> pd.DataFrame:
    """
    One column per variable symbol (x first), one row per point.

    Optional variables shorter than x are padded with NaN. With ``with_units``
    the columns are named ``"<label> [<units>]"`` instead of the symbol.
    """
    n = max(v.n_points for v in measurement.variables.values())
    data: Dict[str, np.ndarray] = {}
    for symbol, v in measurement.variables.items():
        col = np.full(n, np.nan, dtype=np.float64)
        col[: v.n_points] = v.data
        if with_units:
            key = f"{v.label} [{v.units}]" if v.units else v.label
        else:
            key = symbol
        data[key] = col
    return pd.DataFrame(data)


def to_serializable(value: Any) -> Any:
    """
    JSON-friendly copy of parsed structures.

    Dataclasses become dicts (None-valued ``value`` keys and empty ``children``
    omitted), numpy arrays and tuples become lists, enums become their value.
    """
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        out: Dict[str, Any] = {}
        for f in dataclasses.fields(value):
            v = getattr(value, f.name)
            if isinstance(value, Parameter) and (
                (f.name == "value" and v is None) or (f.name == "children" and not v)
            ):
                continue
            out[f.name] = to_serializable(v)
        return out
    if isinstance(value, dict):
        return {str(k): to_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_serializable(v) for v in value]
    return value
