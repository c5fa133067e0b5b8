from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from zmes_parser.ingest.database import ZmesDatabase
from zmes_parser.ingest.errors import NoRootError
from zmes_parser.models.parameters import Parameter, Record, RecordGroup


_RECORDS_SQL = """
    SELECT
      r.Id                  AS id,
      r.Guid                AS guid,
      r.CreatedDateTime     AS created_at,
      r.ModifiedDateTime    AS modified_at,
      r.RootParameterTypeId AS root_parameter_type_id,
      g.Id                  AS group_id,
      g.Guid                AS group_guid,
      g.GivenName           AS group_name
    FROM StandardRecords r
    JOIN StandardRecordGroups g ON r.GroupId = g.Id
    ORDER BY r.Id
"""


@dataclass(frozen=True)
class RawRecord:
    """StandardRecords row joined with its StandardRecordGroups row."""
    id: int
    guid: str
    created_at: str
    modified_at: str
    root_parameter_type_id: int
    group_id: int
    group_guid: str
    group_name: Optional[str] = None


def read_schema_version(db: ZmesDatabase) -> int:
    version = db.select_scalar("SELECT CurrentVersion FROM SchemaMeta LIMIT 1")
    return int(version) if version is not None else 0


def read_store_metadata(db: ZmesDatabase) -> Dict[str, str]:
    metadata: Dict[str, str] = {}
    for row in db.select_all("SELECT Key, Value FROM StoreMetadata"):
        value = row["Value"]
        metadata[str(row["Key"])] = str(value) if value is not None else ""
    return metadata


def read_records(db: ZmesDatabase) -> List[RawRecord]:
    out: List[RawRecord] = []
    for row in db.select_all(_RECORDS_SQL):
        if row["root_parameter_type_id"] is None:
            raise NoRootError(f"Record {row['id']} has no RootParameterTypeId.")
        out.append(
            RawRecord(
                id=int(row["id"]),
                guid=row["guid"] or "",
                created_at=row["created_at"] or "",
                modified_at=row["modified_at"] or "",
                root_parameter_type_id=int(row["root_parameter_type_id"]),
                group_id=int(row["group_id"]),
                group_guid=row["group_guid"] or "",
                group_name=row["group_name"],
            )
        )
    return out


def assemble_record(raw: RawRecord, parameters: Parameter) -> Record:
    return Record(
        id=raw.id,
        guid=raw.guid,
        group=RecordGroup(id=raw.group_id, guid=raw.group_guid, name=raw.group_name),
        created_at=raw.created_at,
        modified_at=raw.modified_at,
        parameters=parameters,
        root_parameter_type_id=raw.root_parameter_type_id,
    )
