from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

from zmes_parser.ingest.database import ZmesDatabase
from zmes_parser.ingest.decode_blob import decode_blob_with_report
from zmes_parser.models.parameters import Parameter, ParameterDataType as DT, ParameterValue, TreeNode


_DATA_SQL = """
    SELECT
      Id                  AS id,
      ParameterTreeNodeId AS tree_node_id,
      ParameterTypeId     AS parameter_type_id,
      Data_Boolean        AS data_boolean,
      Data_Double         AS data_double,
      Data_Int32          AS data_int32,
      Data_Int64          AS data_int64,
      Data_Single         AS data_single,
      Data_Text           AS data_text
    FROM RecordParameterData
    WHERE RecordId = ?
    ORDER BY Id
"""

# Blobs can be large; fetched separately, only where present.
_BLOB_SQL = """
    SELECT
      ParameterTreeNodeId AS tree_node_id,
      Data_Blob           AS data_blob
    FROM RecordParameterData
    WHERE RecordId = ? AND Data_Blob IS NOT NULL AND ParameterTreeNodeId IS NOT NULL
"""

_NO_VALUE = {DT.NONE, DT.DICTIONARY}
_INT32 = {DT.INT32_SINGLE, DT.INT32}
_REAL = {DT.DOUBLE, DT.SINGLE, DT.DURATION}
_TEXT = {DT.GUID, DT.TEXT, DT.DICTIONARY_KEYS, DT.GUID_LIST, DT.DATE_TIME}
_KNOWN = {int(c) for c in DT}


@dataclass(frozen=True)
class RawValueRow:
    """
    One RecordParameterData row. At most one column is meaningful, selected by the
    node's data-type code; numeric values may land in either REAL column.
    """
    tree_node_id: int
    parameter_type_id: Optional[int] = None
    data_boolean: Optional[int] = None
    data_double: Optional[float] = None
    data_int32: Optional[int] = None
    data_int64: Optional[int] = None
    data_single: Optional[float] = None
    data_text: Optional[str] = None
    data_blob: Optional[bytes] = None


def load_value_rows(
    db: ZmesDatabase,
    record_id: int,
    unlinked: Optional[List[int]] = None,
) -> Dict[int, RawValueRow]:
    """
    All data rows of a record keyed by tree node id, blobs merged in.

    Rows without a tree node id cannot be placed; their row ids are appended to
    ``unlinked`` (when given) and they are otherwise skipped.
    """
    blobs: Dict[int, bytes] = {}
    for row in db.select_all(_BLOB_SQL, [int(record_id)]):
        blobs[int(row["tree_node_id"])] = bytes(row["data_blob"])

    out: Dict[int, RawValueRow] = {}
    for row in db.select_all(_DATA_SQL, [int(record_id)]):
        if row["tree_node_id"] is None:
            if unlinked is not None:
                unlinked.append(int(row["id"]))
            continue
        node_id = int(row["tree_node_id"])
        out[node_id] = RawValueRow(
            tree_node_id=node_id,
            parameter_type_id=row["parameter_type_id"],
            data_boolean=row["data_boolean"],
            data_double=row["data_double"],
            data_int32=row["data_int32"],
            data_int64=row["data_int64"],
            data_single=row["data_single"],
            data_text=row["data_text"],
            data_blob=blobs.get(node_id),
        )
    return out


def _first_not_none(*values):
    for v in values:
        if v is not None:
            return v
    return None


def extract_value(
    data_type: int,
    row: RawValueRow,
    *,
    decode_arrays: bool = True,
    warnings: Optional[List[str]] = None,
) -> Optional[ParameterValue]:
    """
    Pick the typed value out of a raw row according to the data-type code.

    Returns None ("no value") for grouping/dictionary codes, for unrecognized codes
    and for empty columns. Numeric REAL codes read Data_Double and fall back to
    Data_Single: SQLite stores both as REAL and writers use either.
    """
    code = int(data_type)

    if code in _NO_VALUE:
        return None

    if code in _INT32:
        return _as_int(row.data_int32)

    if code in _REAL:
        v = _first_not_none(row.data_double, row.data_single)
        return float(v) if v is not None else None

    if code == DT.BOOLEAN:
        return bool(row.data_boolean) if row.data_boolean is not None else None

    if code == DT.INT64_SINGLE:
        return _as_int(_first_not_none(row.data_int64, row.data_int32))

    if code == DT.INT64:
        return _as_int(row.data_int64)

    if code in _TEXT:
        return str(row.data_text) if row.data_text is not None else None

    if code == DT.BLOB_ARRAY:
        if row.data_blob is None or not decode_arrays:
            return None
        values, blob_warnings = decode_blob_with_report(row.data_blob)
        if warnings is not None:
            warnings.extend(f"tree node {row.tree_node_id}: {w}" for w in blob_warnings)
        values.setflags(write=False)
        return values

    return None


def _as_int(v) -> Optional[int]:
    return int(v) if v is not None else None


def attach_values(
    db: ZmesDatabase,
    record_id: int,
    tree: TreeNode,
    *,
    decode_arrays: bool = True,
    warnings: Optional[List[str]] = None,
) -> Parameter:
    """
    Populate a schema tree with the values of one record.

    The output mirrors the tree exactly (same shape and child order); nodes without
    a data row, or whose code yields no value, keep their position with value=None.
    The input tree is not modified.
    """
    unlinked: List[int] = []
    rows = load_value_rows(db, record_id, unlinked)
    local: List[str] = []
    unknown_codes: Counter = Counter()
    seen = set()

    def convert(node: TreeNode) -> Parameter:
        seen.add(node.id)
        pt = node.parameter_type
        value = None
        row = rows.get(node.id)
        if row is not None:
            if pt.data_type not in _KNOWN:
                unknown_codes[pt.data_type] += 1
            else:
                value = extract_value(pt.data_type, row, decode_arrays=decode_arrays, warnings=local)
        children = tuple(convert(c) for c in node.children)
        return Parameter(name=pt.friendly_name, urn=pt.urn, value=value, children=children)

    root = convert(tree)

    if warnings is not None:
        warnings.extend(f"record {record_id}: {w}" for w in local)
        for code, n in sorted(unknown_codes.items()):
            warnings.append(f"record {record_id}: unrecognized data type code {code} on {n} parameter(s); value omitted")
        dangling = sorted(set(rows) - seen)
        if dangling:
            warnings.append(
                f"record {record_id}: {len(dangling)} data row(s) reference tree nodes outside the record tree: "
                f"{dangling[:10]}"
            )
        if unlinked:
            warnings.append(
                f"record {record_id}: {len(unlinked)} data row(s) without a tree node id skipped: {unlinked[:10]}"
            )
    return root
