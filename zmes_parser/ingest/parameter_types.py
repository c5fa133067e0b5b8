from __future__ import annotations

from typing import Dict

from zmes_parser.ingest.database import ZmesDatabase
from zmes_parser.models.parameters import ParameterType


_TYPES_SQL = """
    SELECT
      Id                  AS id,
      Guid                AS guid,
      UniformResourceName AS urn,
      FriendlyName        AS friendly_name,
      ParameterDataType   AS data_type,
      Description         AS description,
      DataUnitsUrn        AS units_urn
    FROM RecordParameterTypes
"""


def load_parameter_types(db: ZmesDatabase) -> Dict[int, ParameterType]:
    """
    Load all of RecordParameterTypes keyed by id.

    Raises MissingSchemaError if the table (or one of its columns) is absent.
    """
    types: Dict[int, ParameterType] = {}
    for row in db.select_all(_TYPES_SQL):
        pt = ParameterType(
            id=int(row["id"]),
            guid=row["guid"] or "",
            urn=row["urn"] or "",
            friendly_name=row["friendly_name"] or "",
            data_type=int(row["data_type"]) if row["data_type"] is not None else 0,
            description=row["description"],
            units_urn=row["units_urn"],
        )
        types[pt.id] = pt
    return types
