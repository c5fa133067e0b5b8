"""Synthetic .zmes databases for tests.

ZmesBuilder writes the subset of the ZS XPLORER schema read by the parser into an
in-memory SQLite database and returns its bytes, so no binary fixtures are needed.
"""

from __future__ import annotations

import sqlite3
import struct
import uuid
from typing import Dict, Iterable, Optional, Sequence

import numpy as np
import pytest

from zmes_parser.models.parameters import ParameterDataType as DT


MARKER = bytes([0x06, 0x01, 0x01, 0x01, 0x02, 0x01])

_TABLES = {
    "SchemaMeta": "CREATE TABLE SchemaMeta (CurrentVersion INTEGER)",
    "StoreMetadata": "CREATE TABLE StoreMetadata (Key TEXT, Value TEXT)",
    "StandardRecordGroups": "CREATE TABLE StandardRecordGroups (Id INTEGER PRIMARY KEY, Guid TEXT, GivenName TEXT)",
    "StandardRecords": (
        "CREATE TABLE StandardRecords (Id INTEGER PRIMARY KEY, Guid TEXT, CreatedDateTime TEXT, "
        "ModifiedDateTime TEXT, RootParameterTypeId INTEGER, GroupId INTEGER)"
    ),
    "RecordParameterTypes": (
        "CREATE TABLE RecordParameterTypes (Id INTEGER PRIMARY KEY, Guid TEXT, UniformResourceName TEXT, "
        "FriendlyName TEXT, ParameterDataType INTEGER, Description TEXT, DataUnitsUrn TEXT)"
    ),
    "RecordParameterTreeNodes": (
        "CREATE TABLE RecordParameterTreeNodes (Id INTEGER PRIMARY KEY, ParameterTypeId INTEGER, "
        "ParentNodeId INTEGER, SiblingIndex INTEGER, RootParameterTypeId INTEGER)"
    ),
    "RecordParameterData": (
        "CREATE TABLE RecordParameterData (Id INTEGER PRIMARY KEY, RecordId INTEGER, ParameterTreeNodeId INTEGER, "
        "ParameterTypeId INTEGER, Data_Boolean INTEGER, Data_Double REAL, Data_Int32 INTEGER, Data_Int64 INTEGER, "
        "Data_Single REAL, Data_Text TEXT, Data_Blob BLOB)"
    ),
}


def encode_double_array(values: Iterable[float], header: bytes = b"\x00" * 205) -> bytes:
    """BinaryFormatter-like System.Double[] payload: opaque header + (marker, <f8) entries."""
    return header + b"".join(MARKER + struct.pack("<d", float(v)) for v in values)


class ZmesBuilder:
    def __init__(self, *, schema_version: Optional[int] = 3, omit_tables: Sequence[str] = ()):
        self.conn = sqlite3.connect(":memory:")
        for name, ddl in _TABLES.items():
            if name not in omit_tables:
                self.conn.execute(ddl)
        if schema_version is not None and "SchemaMeta" not in omit_tables:
            self.conn.execute("INSERT INTO SchemaMeta VALUES (?)", (schema_version,))
        self._next_type_id = 100
        self._next_node_id = 1000
        self._node_type: Dict[int, int] = {}
        self._node_root: Dict[int, int] = {}
        self._child_count: Dict[Optional[int], int] = {}

    # --- schema ---------------------------------------------------------

    def add_type(self, name: str, data_type: int, *, urn: Optional[str] = None, type_id: Optional[int] = None) -> int:
        if type_id is None:
            type_id = self._next_type_id
            self._next_type_id += 1
        self.conn.execute(
            "INSERT INTO RecordParameterTypes VALUES (?, ?, ?, ?, ?, ?, ?)",
            (type_id, str(uuid.uuid4()), urn or f"urn:test:{name}", name, int(data_type), None, None),
        )
        return type_id

    def add_node(
        self,
        type_id: int,
        *,
        parent: Optional[int] = None,
        sibling_index: Optional[int] = None,
        root_type_id: Optional[int] = None,
    ) -> int:
        node_id = self._next_node_id
        self._next_node_id += 1
        if root_type_id is None:
            root_type_id = type_id if parent is None else self._node_root[parent]
        if sibling_index is None:
            sibling_index = self._child_count.get(parent, 0)
        self._child_count[parent] = self._child_count.get(parent, 0) + 1
        self.conn.execute(
            "INSERT INTO RecordParameterTreeNodes VALUES (?, ?, ?, ?, ?)",
            (node_id, type_id, parent, sibling_index, root_type_id),
        )
        self._node_type[node_id] = type_id
        self._node_root[node_id] = root_type_id
        return node_id

    def add_parameter(self, name: str, data_type: int, *, parent: Optional[int] = None, **kwargs) -> int:
        """New type + tree node in one go. Returns the node id."""
        type_id = self.add_type(name, data_type)
        return self.add_node(type_id, parent=parent, **kwargs)

    def root_type_of(self, node_id: int) -> int:
        return self._node_root[node_id]

    # --- records --------------------------------------------------------

    def add_metadata(self, key: str, value: Optional[str]) -> None:
        self.conn.execute("INSERT INTO StoreMetadata VALUES (?, ?)", (key, value))

    def add_group(self, *, guid: Optional[str] = None, name: Optional[str] = None) -> int:
        cur = self.conn.execute(
            "INSERT INTO StandardRecordGroups (Guid, GivenName) VALUES (?, ?)",
            (guid or str(uuid.uuid4()), name),
        )
        return int(cur.lastrowid)

    def add_record(
        self,
        root_type_id: int,
        *,
        group_id: Optional[int] = None,
        guid: Optional[str] = None,
        created: str = "2026-02-20 13:18:16.4711904",
        modified: str = "2026-02-20 13:20:01.0000000",
    ) -> int:
        if group_id is None:
            group_id = self.add_group()
        cur = self.conn.execute(
            "INSERT INTO StandardRecords (Guid, CreatedDateTime, ModifiedDateTime, RootParameterTypeId, GroupId) "
            "VALUES (?, ?, ?, ?, ?)",
            (guid or str(uuid.uuid4()), created, modified, root_type_id, group_id),
        )
        return int(cur.lastrowid)

    def set_value(
        self,
        record_id: int,
        node_id: int,
        *,
        boolean: Optional[int] = None,
        double: Optional[float] = None,
        int32: Optional[int] = None,
        int64: Optional[int] = None,
        single: Optional[float] = None,
        text: Optional[str] = None,
        blob: Optional[bytes] = None,
    ) -> None:
        self.conn.execute(
            "INSERT INTO RecordParameterData (RecordId, ParameterTreeNodeId, ParameterTypeId, Data_Boolean, "
            "Data_Double, Data_Int32, Data_Int64, Data_Single, Data_Text, Data_Blob) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                record_id,
                node_id,
                self._node_type.get(node_id),
                boolean,
                double,
                int32,
                int64,
                single,
                text,
                sqlite3.Binary(blob) if blob is not None else None,
            ),
        )

    def to_bytes(self) -> bytes:
        self.conn.commit()
        return self.conn.serialize()

    def close(self) -> None:
        self.conn.close()


SIZES = np.geomspace(0.3, 10000.0, 70)
RECORD_GUID = "1c90a5c0-581d-4df8-92e7-b731c635e614"


def _distribution(n: int, center: int, width: float) -> np.ndarray:
    k = np.arange(n, dtype=np.float64)
    d = np.exp(-0.5 * ((k - center) / width) ** 2)
    return 100.0 * d / d.sum()


def build_size_tree(b: ZmesBuilder) -> Dict[str, int]:
    """
    Schema tree of a "Size Measurement Result" as written by a Zetasizer DLS export.

    Returns {<parameter name>: node id, "root_type": root type id}.
    """
    ids: Dict[str, int] = {}
    root = b.add_parameter("Size Measurement Result", DT.DICTIONARY)
    ids["Size Measurement Result"] = root

    for name, dt in [
        ("Operator Name", DT.TEXT),
        ("Software Version", DT.TEXT),
        ("Measurement Start Date And Time", DT.DATE_TIME),
        ("Repeat", DT.INT64),
        ("Number Of Repeats", DT.INT64),
        ("Quality Indicator", DT.TEXT),
        ("Result State", DT.TEXT),
    ]:
        ids[name] = b.add_parameter(name, dt, parent=root)

    ais = b.add_parameter("Actual Instrument Settings", DT.DICTIONARY, parent=root)
    ids["Actual Instrument Settings"] = ais
    for name, dt in [
        ("Instrument Serial Number", DT.TEXT),
        ("Attenuator", DT.INT32_SINGLE),
        ("Number Of Runs", DT.INT64),
        ("Detector Angle (°)", DT.DOUBLE),
        ("Laser Wavelength (nm)", DT.SINGLE),
        ("Temperature (°C)", DT.DOUBLE),
        ("Cuvette Position (mm)", DT.TEXT),
        ("Dispersant Viscosity (cP)", DT.DOUBLE),
        ("Dispersant RI", DT.DOUBLE),
    ]:
        ids[name] = b.add_parameter(name, dt, parent=ais)

    sample = b.add_parameter("Sample Settings", DT.DICTIONARY, parent=root)
    ids["Sample Settings"] = sample
    ids["Sample Name"] = b.add_parameter("Sample Name", DT.TEXT, parent=sample)
    material = b.add_parameter("Material Settings", DT.DICTIONARY, parent=sample)
    ids["Material RI"] = b.add_parameter("Material RI", DT.DOUBLE, parent=material)
    ids["Material Absorption"] = b.add_parameter("Material Absorption", DT.DOUBLE, parent=material)

    results = b.add_parameter("Analysis Results", DT.DICTIONARY, parent=root)
    cumulants = b.add_parameter("Cumulants Result", DT.DICTIONARY, parent=results)
    ids["Z-Average (nm)"] = b.add_parameter("Z-Average (nm)", DT.DOUBLE, parent=cumulants)
    ids["Polydispersity Index (PI)"] = b.add_parameter("Polydispersity Index (PI)", DT.DOUBLE, parent=cumulants)
    dist = b.add_parameter("Distribution Result", DT.DICTIONARY, parent=results)
    for name in (
        "Sizes",
        "Particle Size Intensity Distribution",
        "Particle Size Volume Distribution (%)",
        "Particle Size Number Distribution",
    ):
        ids[name] = b.add_parameter(name, DT.BLOB_ARRAY, parent=dist)

    ids["Is Reference"] = b.add_parameter("Is Reference", DT.BOOLEAN, parent=root)
    ids["root_type"] = b.root_type_of(root)
    return ids


def add_size_record(
    b: ZmesBuilder,
    ids: Dict[str, int],
    *,
    guid: str = RECORD_GUID,
    with_sizes: bool = True,
    with_intensity: bool = True,
) -> int:
    """Write one record (with values) for a tree from build_size_tree. Returns the record id."""
    rec = b.add_record(ids["root_type"], guid=guid)

    b.set_value(rec, ids["Operator Name"], text="gbf-network")
    b.set_value(rec, ids["Software Version"], text="4.1.0.82")
    b.set_value(rec, ids["Measurement Start Date And Time"], text="2026-02-20T13:18:16.7108229Z")
    b.set_value(rec, ids["Repeat"], int64=1)
    b.set_value(rec, ids["Number Of Repeats"], int64=3)
    b.set_value(rec, ids["Quality Indicator"], text="GoodData")
    b.set_value(rec, ids["Result State"], text="Completed")
    b.set_value(rec, ids["Instrument Serial Number"], text="100038577")
    b.set_value(rec, ids["Attenuator"], int32=6)
    b.set_value(rec, ids["Number Of Runs"], int64=20)
    b.set_value(rec, ids["Detector Angle (°)"], double=173.0)
    b.set_value(rec, ids["Laser Wavelength (nm)"], single=632.8)
    b.set_value(rec, ids["Temperature (°C)"], double=25.01)
    b.set_value(rec, ids["Cuvette Position (mm)"], text="4.65")
    b.set_value(rec, ids["Dispersant Viscosity (cP)"], double=2.32)
    b.set_value(rec, ids["Dispersant RI"], double=1.39)
    b.set_value(rec, ids["Sample Name"], text="SICPA-DNA FN230.A iPr")
    b.set_value(rec, ids["Material RI"], double=1.7)
    b.set_value(rec, ids["Material Absorption"], double=0.01)
    b.set_value(rec, ids["Z-Average (nm)"], double=363.255)
    b.set_value(rec, ids["Polydispersity Index (PI)"], double=0.2039)
    b.set_value(rec, ids["Is Reference"], boolean=0)

    n = SIZES.size
    if with_sizes:
        b.set_value(rec, ids["Sizes"], blob=encode_double_array(SIZES))
    if with_intensity:
        b.set_value(rec, ids["Particle Size Intensity Distribution"], blob=encode_double_array(_distribution(n, 40, 4.0)))
    b.set_value(rec, ids["Particle Size Volume Distribution (%)"], blob=encode_double_array(_distribution(n, 38, 5.0)))
    b.set_value(rec, ids["Particle Size Number Distribution"], blob=encode_double_array(_distribution(n, 35, 6.0)))
    return rec


@pytest.fixture
def zmes_builder():
    b = ZmesBuilder()
    yield b
    b.close()


@pytest.fixture
def size_measurement_bytes(zmes_builder) -> bytes:
    add_size_record(zmes_builder, build_size_tree(zmes_builder))
    return zmes_builder.to_bytes()


@pytest.fixture
def zmes_helpers():
    """Module-level helpers for tests (test modules do not import conftest)."""

    class _Helpers:
        builder_cls = ZmesBuilder
        build_size_tree = staticmethod(build_size_tree)
        add_size_record = staticmethod(add_size_record)
        encode = staticmethod(encode_double_array)
        sizes = SIZES
        record_guid = RECORD_GUID

    return _Helpers
