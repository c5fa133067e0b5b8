from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from zmes_parser.ingest.database import open_database
from zmes_parser.ingest.parameter_data import attach_values
from zmes_parser.ingest.parameter_tree import ParameterTreeCache
from zmes_parser.ingest.parameter_types import load_parameter_types
from zmes_parser.ingest.records import assemble_record, read_records, read_schema_version, read_store_metadata
from zmes_parser.models.parameters import Record, ZmesFile


@dataclass(frozen=True)
class ZmesReaderConfig:
    """
    Reader configuration for .zmes files.

    strict_single_root:
      - True: a record-kind tree with more than one root node is a SchemaError.
      - False: the first root (lowest sibling index, then id) is used and a warning is recorded.
    cache_trees:
      Build each RootParameterTypeId tree once and share it between records of that kind.
    decode_arrays:
      - True: decode blob arrays into float64 numpy arrays.
      - False: leave blob-array parameters without value (metadata-only parse).
    """
    strict_single_root: bool = True
    cache_trees: bool = True
    decode_arrays: bool = True


class ZmesReader:
    """
    Reader for Zetasizer .zmes exports (SQLite snapshots written by ZS XPLORER).

    Flow: parameter types -> per-kind schema tree -> per-record values -> Record.

    The whole snapshot is loaded in memory. Structural problems raise SchemaError and
    abort the parse; data anomalies end up in ZmesFile.warnings. The database handle
    is always closed, including on failure.
    """

    def __init__(self, config: Optional[ZmesReaderConfig] = None):
        self.config = config or ZmesReaderConfig()

    def read(self, file_path: Union[str, Path]) -> ZmesFile:
        path = Path(file_path).expanduser().resolve()
        if not path.exists():
            raise FileNotFoundError(str(path))
        return self.read_bytes(path.read_bytes())

    def read_bytes(self, data: bytes) -> ZmesFile:
        cfg = self.config
        warnings: List[str] = []

        with open_database(data) as db:
            schema_version = read_schema_version(db)
            metadata = read_store_metadata(db)

            parameter_types = load_parameter_types(db)
            trees = ParameterTreeCache(
                db,
                parameter_types,
                strict_single_root=cfg.strict_single_root,
                enabled=cfg.cache_trees,
                warnings=warnings,
            )

            records: List[Record] = []
            for raw in read_records(db):
                tree = trees.get(raw.root_parameter_type_id)
                parameters = attach_values(
                    db,
                    raw.id,
                    tree,
                    decode_arrays=cfg.decode_arrays,
                    warnings=warnings,
                )
                records.append(assemble_record(raw, parameters))

        return ZmesFile(
            schema_version=schema_version,
            metadata=metadata,
            records=tuple(records),
            warnings=tuple(warnings),
        )


def parse(data: bytes, config: Optional[ZmesReaderConfig] = None) -> ZmesFile:
    """
    Parse the raw bytes of a .zmes file.

    Example::

        from pathlib import Path
        from zmes_parser import parse

        zf = parse(Path("measurement.zmes").read_bytes())
        print(zf.records[0].parameters.name)
    """
    return ZmesReader(config).read_bytes(data)


def parse_file(file_path: Union[str, Path], config: Optional[ZmesReaderConfig] = None) -> ZmesFile:
    return ZmesReader(config).read(file_path)
