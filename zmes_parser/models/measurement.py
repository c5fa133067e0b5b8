from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np


@dataclass(frozen=True, eq=False)
class MeasurementVariable:
    """
    One named data series of an XY measurement.

    data is the decoded array borrowed from the source Parameter (read-only view),
    never a modified copy.
    """
    symbol: str
    label: str
    units: str
    data: np.ndarray
    is_dependent: bool

    @property
    def n_points(self) -> int:
        return int(self.data.shape[0])


@dataclass(frozen=True, eq=False)
class Measurement:
    """
    Cross-instrument XY measurement derived from one ZmesRecord.

    Attributes
    ----------
    id:
        Record GUID.
    title:
        Sample name (empty string if unknown).
    data_type:
        Measurement kind label, e.g. "Size measurement".
    meta:
        Scalar metadata (operator, timestamps, cumulants results, material/dispersant info).
    settings:
        Instrument identity plus numeric acquisition settings.
    variables:
        Keyed by single-letter symbol; always contains "x" and "y".
    """
    id: str
    title: str
    data_type: str
    meta: Dict[str, Any]
    settings: Dict[str, Any]
    variables: Dict[str, MeasurementVariable]

    @property
    def x(self) -> MeasurementVariable:
        return self.variables["x"]

    @property
    def y(self) -> MeasurementVariable:
        return self.variables["y"]

    def get_variable(self, symbol: str) -> Optional[MeasurementVariable]:
        return self.variables.get(symbol)
