from __future__ import annotations

from typing import List, Tuple, Union

import numpy as np

# 6-byte record header preceding every element of a .NET BinaryFormatter
# serialized System.Double[]; each element is header + little-endian IEEE 754 double.
ENTRY_MARKER = bytes([0x06, 0x01, 0x01, 0x01, 0x02, 0x01])
ENTRY_SIZE = 14

_ENTRY_DTYPE = np.dtype([("marker", "V6"), ("value", "<f8")])

BlobLike = Union[bytes, bytearray, memoryview]


def find_marker(blob: BlobLike) -> int:
    """Byte offset of the first ENTRY_MARKER in blob, or -1."""
    return bytes(blob).find(ENTRY_MARKER)


def decode_blob_with_report(blob: BlobLike) -> Tuple[np.ndarray, List[str]]:
    """
    Decode a serialized ``System.Double[]`` blob into a float64 array.

    The type-metadata header in front of the data (about 205 bytes) is not parsed:
    decoding starts at the first entry marker and then trusts the fixed 14-byte
    stride. Subsequent markers are not re-verified.

    Returns (values, warnings). Never raises on malformed content:
      - empty blob or no marker -> empty array
      - trailing bytes short of a full entry are dropped
    """
    warnings: List[str] = []
    raw = bytes(blob)
    if not raw:
        return np.empty(0, dtype=np.float64), warnings

    offset = raw.find(ENTRY_MARKER)
    if offset < 0:
        warnings.append(f"no array entry marker found in {len(raw)}-byte blob; decoded as empty array")
        return np.empty(0, dtype=np.float64), warnings

    remaining = len(raw) - offset
    count = remaining // ENTRY_SIZE
    trailing = remaining - count * ENTRY_SIZE
    if trailing:
        warnings.append(f"dropped {trailing} trailing bytes after {count} array entries")
    if count == 0:
        return np.empty(0, dtype=np.float64), warnings

    entries = np.frombuffer(raw, dtype=_ENTRY_DTYPE, count=count, offset=offset)
    values = np.array(entries["value"], dtype=np.float64)
    return values, warnings


def decode_blob(blob: BlobLike) -> np.ndarray:
    """Decode a serialized ``System.Double[]`` blob (see decode_blob_with_report)."""
    values, _ = decode_blob_with_report(blob)
    return values
