from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, Iterator, List, Optional, Tuple, Union

import numpy as np


class ParameterDataType(IntEnum):
    """
    Values of RecordParameterTypes.ParameterDataType.

    The code selects which RecordParameterData column (if any) holds the value
    of a parameter for a record. Codes not listed here are carried as plain ints
    and yield "no value".
    """
    NONE = 0
    INT32_SINGLE = 1
    INT32 = 2
    DOUBLE = 4
    SINGLE = 5
    BOOLEAN = 6
    INT64_SINGLE = 7
    INT64 = 9
    GUID = 16
    TEXT = 17
    DICTIONARY_KEYS = 32
    DICTIONARY = 36
    GUID_LIST = 42
    DATE_TIME = 48
    DURATION = 50
    BLOB_ARRAY = 70


class ParameterValueKind(Enum):
    ABSENT = "absent"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    ARRAY = "array"


ParameterValue = Union[bool, int, float, str, np.ndarray]


def value_kind(value: Optional[ParameterValue]) -> ParameterValueKind:
    """Classify a parameter value (bool is matched before int)."""
    if value is None:
        return ParameterValueKind.ABSENT
    if isinstance(value, (bool, np.bool_)):
        return ParameterValueKind.BOOLEAN
    if isinstance(value, (int, np.integer)):
        return ParameterValueKind.INTEGER
    if isinstance(value, (float, np.floating)):
        return ParameterValueKind.REAL
    if isinstance(value, str):
        return ParameterValueKind.TEXT
    if isinstance(value, np.ndarray):
        return ParameterValueKind.ARRAY
    raise TypeError(f"Unsupported parameter value type: {type(value).__name__}")


@dataclass(frozen=True)
class ParameterType:
    """
    One row of RecordParameterTypes.

    Many tree nodes (across record kinds) may reference the same type.
    data_type is kept as a raw int so that unknown codes survive loading.
    """
    id: int
    guid: str
    urn: str
    friendly_name: str
    data_type: int
    description: Optional[str] = None
    units_urn: Optional[str] = None

    @property
    def known_data_type(self) -> Optional[ParameterDataType]:
        try:
            return ParameterDataType(self.data_type)
        except ValueError:
            return None


@dataclass(eq=False)
class TreeNode:
    """
    Schema node from RecordParameterTreeNodes (no values attached).

    Children are linked and sorted by sibling_index during tree building;
    afterwards the tree is shared read-only between records of the same kind.
    """
    id: int
    parameter_type: ParameterType
    parent_id: Optional[int]
    sibling_index: int
    children: List["TreeNode"] = field(default_factory=list)

    @property
    def parameter_type_id(self) -> int:
        return self.parameter_type.id

    @property
    def name(self) -> str:
        return self.parameter_type.friendly_name

    def iter_preorder(self) -> Iterator["TreeNode"]:
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass(frozen=True, eq=False)
class Parameter:
    """
    Value-bearing node of a record's parameter tree.

    Notes
    - value is None when the record has no data row for the node, or when the
      node's data type carries no value (grouping/dictionary nodes).
    - Array values are read-only float64 numpy arrays.
    - children is empty for leaves; order mirrors the schema tree exactly.
    """
    name: str
    urn: str
    value: Optional[ParameterValue] = None
    children: Tuple["Parameter", ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def has_value(self) -> bool:
        return self.value is not None

    @property
    def kind(self) -> ParameterValueKind:
        return value_kind(self.value)


@dataclass(frozen=True)
class RecordGroup:
    id: int
    guid: str
    name: Optional[str] = None


@dataclass(frozen=True, eq=False)
class Record:
    """One row of StandardRecords with its populated parameter tree."""
    id: int
    guid: str
    group: RecordGroup
    created_at: str
    modified_at: str
    parameters: Parameter
    root_parameter_type_id: Optional[int] = None


@dataclass(frozen=True, eq=False)
class ZmesFile:
    """
    Parsed representation of a .zmes file.

    warnings collects non-fatal anomalies found while parsing (undecodable blobs,
    unknown data-type codes, dangling rows). The parse itself never fails on them.
    """
    schema_version: int
    metadata: Dict[str, str]
    records: Tuple[Record, ...]
    warnings: Tuple[str, ...] = ()

    @property
    def n_records(self) -> int:
        return int(len(self.records))

    def get_record(self, guid: str) -> Record:
        for record in self.records:
            if record.guid == guid:
                return record
        raise KeyError(f"No record with guid='{guid}'.")
