"""Projection profile -- descriptor tables binding parameter names to a measurement.

A ProjectionProfile lists every parameter name the XY projection looks up,
together with where it goes in the output (variable symbol, meta key or
settings key). It can be:

- Used as-is (``DEFAULT_PROFILE`` covers Zetasizer size measurements)
- Overridden field-by-field via ``dataclasses.replace()``
- Serialized to/from a dict for JSON provenance

Adding an instrument field is a change to these tables, not to the projection code.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class VariableDescriptor:
    """
    parameter_name: friendly name of the array-valued parameter (deep search).
    symbol: single-letter variable key ("x" independent, "y" primary dependent, "a".. extras).
    """
    parameter_name: str
    symbol: str
    label: str
    units: str
    is_dependent: bool


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Scalar field lookup.

    scope: when set, the friendly name of a container that is located first
    (deep search from the root); parameter_name is then searched inside it only.
    """
    parameter_name: str
    key: str
    scope: Optional[str] = None


@dataclass(frozen=True)
class InstrumentIdentity:
    manufacturer: str
    model: str
    software_name: str
    serial_number_parameter: str = "Instrument Serial Number"
    software_version_parameter: str = "Software Version"


@dataclass(frozen=True)
class ProjectionProfile:
    """Frozen descriptor tables for the XY projection.

    Fields
    ------
    variables : tuple of VariableDescriptor
        Array-valued series. "x" and "y" are mandatory: a record without both is skipped.
    top_level_meta : tuple of FieldDescriptor
        Matched against the immediate children of the root only.
    deep_meta : tuple of FieldDescriptor
        Matched anywhere in the tree (first pre-order match), or inside ``scope``.
    settings : tuple of FieldDescriptor
        Deep search; kept only when the matched value is numeric (int/float, not bool).
    instrument : InstrumentIdentity
        Fixed identity written to ``settings["instrument"]``.
    title_scope, title_parameter : str
        Title = text value of ``title_parameter`` inside the top-level ``title_scope``.
    data_type : str
        Measurement kind label.
    """

    variables: Tuple[VariableDescriptor, ...]
    top_level_meta: Tuple[FieldDescriptor, ...] = ()
    deep_meta: Tuple[FieldDescriptor, ...] = ()
    settings: Tuple[FieldDescriptor, ...] = ()
    instrument: InstrumentIdentity = InstrumentIdentity(
        manufacturer="Malvern Panalytical",
        model="Zetasizer",
        software_name="ZS XPLORER",
    )
    title_scope: str = "Sample Settings"
    title_parameter: str = "Sample Name"
    data_type: str = "Size measurement"

    def variable(self, symbol: str) -> VariableDescriptor:
        for v in self.variables:
            if v.symbol == symbol:
                return v
        raise KeyError(f"No variable with symbol '{symbol}' in profile.")

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly dict (tuples become lists)."""
        d = asdict(self)
        for key in ("variables", "top_level_meta", "deep_meta", "settings"):
            d[key] = list(d[key])
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> ProjectionProfile:
        """Reconstruct from a dict (e.g. loaded from JSON)."""
        d = dict(d)  # shallow copy
        d["variables"] = tuple(VariableDescriptor(**v) for v in d.get("variables", ()))
        for key in ("top_level_meta", "deep_meta", "settings"):
            if key in d:
                d[key] = tuple(FieldDescriptor(**f) for f in d[key])
        if "instrument" in d and isinstance(d["instrument"], dict):
            d["instrument"] = InstrumentIdentity(**d["instrument"])
        return cls(**d)


DEFAULT_PROFILE = ProjectionProfile(
    variables=(
        VariableDescriptor("Sizes", "x", "Particle diameter", "nm", False),
        VariableDescriptor("Particle Size Intensity Distribution", "y", "Intensity", "%", True),
        VariableDescriptor("Particle Size Volume Distribution (%)", "a", "Volume", "%", True),
        VariableDescriptor("Particle Size Number Distribution", "b", "Number", "%", True),
        VariableDescriptor("Molecular Weights", "c", "Molecular weight", "Da", True),
        VariableDescriptor("Diffusion Coefficients", "d", "Diffusion coefficient", "µm²/s", True),
        VariableDescriptor("Relaxation Times", "e", "Relaxation time", "µs", True),
        VariableDescriptor("Form Factor", "f", "Form factor", "", True),
    ),
    top_level_meta=(
        FieldDescriptor("Operator Name", "operator_name"),
        FieldDescriptor("Measurement Start Date And Time", "measurement_start_date_time"),
        FieldDescriptor("Measurement Completed Date And Time", "measurement_completed_date_time"),
        FieldDescriptor("Repeat", "repeat"),
        FieldDescriptor("Number Of Repeats", "number_of_repeats"),
        FieldDescriptor("Pause Between Repeats (s)", "pause_between_repeats"),
        FieldDescriptor("Quality Indicator", "quality_indicator"),
        FieldDescriptor("Result State", "result_state"),
        FieldDescriptor("Measurement Type", "measurement_type"),
    ),
    deep_meta=(
        FieldDescriptor("Z-Average (nm)", "z_average"),
        FieldDescriptor("Polydispersity Index (PI)", "polydispersity_index"),
        FieldDescriptor("Derived Mean Count Rate (kcps)", "derived_mean_count_rate"),
        # Core Characteristics also carry RI/absorption; only the material's are wanted.
        FieldDescriptor("Material RI", "material_ri", scope="Material Settings"),
        FieldDescriptor("Material Absorption", "material_absorption", scope="Material Settings"),
        FieldDescriptor("Dispersant Viscosity (cP)", "dispersant_viscosity"),
        FieldDescriptor("Dispersant RI", "dispersant_ri"),
    ),
    settings=(
        FieldDescriptor("Detector Angle (°)", "detector_angle"),
        FieldDescriptor("Run Duration (s)", "run_duration"),
        FieldDescriptor("Number Of Runs", "number_of_runs"),
        FieldDescriptor("Temperature (°C)", "temperature"),
        FieldDescriptor("Attenuator", "attenuator"),
        FieldDescriptor("Attenuation Factor", "attenuation_factor"),
        FieldDescriptor("Cuvette Position (mm)", "cuvette_position"),
        FieldDescriptor("Laser Wavelength (nm)", "laser_wavelength"),
    ),
)
