from .measurement import Measurement, MeasurementVariable
from .parameters import (
    Parameter,
    ParameterDataType,
    ParameterType,
    ParameterValueKind,
    Record,
    RecordGroup,
    TreeNode,
    ZmesFile,
)
from .profile import DEFAULT_PROFILE, FieldDescriptor, InstrumentIdentity, ProjectionProfile, VariableDescriptor

__all__ = [
    "Measurement",
    "MeasurementVariable",
    "Parameter",
    "ParameterDataType",
    "ParameterType",
    "ParameterValueKind",
    "Record",
    "RecordGroup",
    "TreeNode",
    "ZmesFile",
    "DEFAULT_PROFILE",
    "FieldDescriptor",
    "InstrumentIdentity",
    "ProjectionProfile",
    "VariableDescriptor",
]
