"""Projection of parsed .zmes records into XY measurements.

Each record is bound to a fixed output schema purely by parameter name, using
the descriptor tables of a :class:`~zmes_parser.models.profile.ProjectionProfile`:

- variables: array-valued series (x = sizes, y = intensity distribution, a.. extras)
- meta: scalar results and context (operator, cumulants, material, dispersant)
- settings: instrument identity plus numeric acquisition settings

A record is skipped when x or y cannot be found as an array. Every other field is
best-effort and simply omitted when absent.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np

from zmes_parser.analysis.tree_search import find_parameter, find_parameter_deep
from zmes_parser.models.measurement import Measurement, MeasurementVariable
from zmes_parser.models.parameters import Parameter, ParameterValueKind, ZmesFile
from zmes_parser.models.profile import DEFAULT_PROFILE, FieldDescriptor, ProjectionProfile

_NUMERIC = (ParameterValueKind.INTEGER, ParameterValueKind.REAL)


def to_measurement_xy(zmes_file: ZmesFile, profile: ProjectionProfile = DEFAULT_PROFILE) -> List[Measurement]:
    """One Measurement per record that has both x and y arrays, in record order."""
    measurements: List[Measurement] = []
    for record in zmes_file.records:
        m = record_to_measurement(record.parameters, record_id=record.guid, profile=profile)
        if m is not None:
            measurements.append(m)
    return measurements


def record_to_measurement(
    parameters: Parameter,
    *,
    record_id: str,
    profile: ProjectionProfile = DEFAULT_PROFILE,
) -> Optional[Measurement]:
    variables = build_variables(parameters, profile)
    if variables is None:
        return None
    return Measurement(
        id=record_id,
        title=extract_title(parameters, profile),
        data_type=profile.data_type,
        meta=extract_meta(parameters, profile),
        settings=extract_settings(parameters, profile),
        variables=variables,
    )


def build_variables(parameters: Parameter, profile: ProjectionProfile) -> Optional[Dict[str, MeasurementVariable]]:
    """
    Collect every descriptor whose parameter is array-valued.

    Returns None if "x" or "y" is missing. x and y come first in the result.
    """
    found: Dict[str, MeasurementVariable] = {}
    for d in profile.variables:
        p = find_parameter_deep(parameters, d.parameter_name)
        if p is None or not isinstance(p.value, np.ndarray):
            continue
        found[d.symbol] = MeasurementVariable(
            symbol=d.symbol,
            label=d.label,
            units=d.units,
            data=p.value,
            is_dependent=d.is_dependent,
        )

    if "x" not in found or "y" not in found:
        return None

    variables = {"x": found["x"], "y": found["y"]}
    for symbol, v in found.items():
        if symbol not in variables:
            variables[symbol] = v
    return variables


def extract_title(parameters: Parameter, profile: ProjectionProfile) -> str:
    scope = find_parameter(parameters, profile.title_scope)
    if scope is None:
        return ""
    p = find_parameter_deep(scope, profile.title_parameter)
    if p is None or not isinstance(p.value, str):
        return ""
    return p.value


def _lookup(parameters: Parameter, field: FieldDescriptor) -> Optional[Parameter]:
    if field.scope is None:
        return find_parameter_deep(parameters, field.parameter_name)
    container = find_parameter_deep(parameters, field.scope)
    if container is None:
        return None
    return find_parameter_deep(container, field.parameter_name)


def extract_meta(parameters: Parameter, profile: ProjectionProfile) -> Dict[str, Any]:
    meta: Dict[str, Any] = {}

    for field in profile.top_level_meta:
        p = find_parameter(parameters, field.parameter_name)
        if p is not None and p.value is not None:
            meta[field.key] = p.value

    for field in profile.deep_meta:
        p = _lookup(parameters, field)
        if p is not None and p.value is not None:
            meta[field.key] = p.value

    return meta


def extract_settings(parameters: Parameter, profile: ProjectionProfile) -> Dict[str, Any]:
    ident = profile.instrument

    instrument: Dict[str, Any] = {
        "manufacturer": ident.manufacturer,
        "model": ident.model,
    }
    serial = find_parameter_deep(parameters, ident.serial_number_parameter)
    if serial is not None and isinstance(serial.value, str):
        instrument["serial_number"] = serial.value

    software: Dict[str, Any] = {"name": ident.software_name}
    version = find_parameter(parameters, ident.software_version_parameter)
    if version is not None and isinstance(version.value, str):
        software["version"] = version.value
    instrument["software"] = software

    settings: Dict[str, Any] = {"instrument": instrument}

    # Type-guarded: a text value under a numeric setting's name is ignored.
    for field in profile.settings:
        p = _lookup(parameters, field)
        if p is not None and p.kind in _NUMERIC:
            settings[field.key] = p.value

    return settings
