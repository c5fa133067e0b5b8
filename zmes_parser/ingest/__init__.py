"""Ingest package - reading .zmes SQLite snapshots.

This package handles:
- Opening the snapshot from bytes (in-memory SQLite, always closed after use)
- Loading the parameter-type registry (RecordParameterTypes)
- Rebuilding the ordered schema tree per record kind (RecordParameterTreeNodes)
- Extracting typed values per record (RecordParameterData), decoding blob arrays

Key classes:
- ZmesReader: full parse into a ZmesFile
- ZmesDatabase: thin read-only query wrapper
- ParameterTreeCache: one schema tree per RootParameterTypeId

Design principle:
- Structural problems raise SchemaError; data anomalies become "no value" plus a warning
"""
