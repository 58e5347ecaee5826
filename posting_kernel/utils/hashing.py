"""
Deterministic hashing utilities.

All hashing in the posting kernel must be deterministic and reproducible.
Two serializations live here:

- ``canonical_snapshot_json`` keeps the key order it is given. Rule
  snapshots are hashed this way; their field order is part of the contract.
- ``canonicalize_json`` sorts keys. Used for configuration checksums where
  no field order is prescribed.
"""

import hashlib
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID


def _json_serializer(obj: Any) -> Any:
    """
    Custom JSON serializer for types not natively supported.

    Raises:
        TypeError: If object type is not supported.
    """
    if isinstance(obj, Decimal):
        # Normalize Decimal to string representation
        # Remove trailing zeros for consistency
        return str(obj.normalize())
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, UUID):
        return str(obj)

    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _pairs_to_ordered(pairs: tuple[tuple[str, Any], ...]) -> dict[str, Any]:
    # dict keeps insertion order; json.dumps below never sorts
    ordered: dict[str, Any] = {}
    for key, value in pairs:
        if isinstance(value, tuple) and value and isinstance(value[0], tuple):
            ordered[key] = _pairs_to_ordered(value)
        else:
            ordered[key] = value
    return ordered


def canonical_snapshot_json(pairs: tuple[tuple[str, Any], ...]) -> str:
    """
    Serialize ordered (key, value) pairs to canonical JSON.

    Byte-stable for identical logical content:
    - Keys appear exactly in the order given (never sorted)
    - Compact separators, no whitespace
    - Forward slashes and non-ASCII characters are not escaped
    - Missing values serialize as ``null``

    Args:
        pairs: Snapshot as ordered pairs; nested sections are pairs too.

    Returns:
        Canonical JSON string.
    """
    return json.dumps(
        _pairs_to_ordered(pairs),
        ensure_ascii=False,
        separators=(",", ":"),
        default=_json_serializer,
    )


def hash_snapshot(pairs: tuple[tuple[str, Any], ...]) -> str:
    """
    Compute the rule hash of a snapshot.

    Returns:
        Lowercase hex SHA-256 of the UTF-8 canonical serialization.
    """
    canonical = canonical_snapshot_json(pairs)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def canonicalize_json(data: dict | list | Any) -> str:
    """
    Convert data to canonical JSON string with sorted keys.

    Produces a deterministic JSON representation:
    - Keys are sorted alphabetically
    - No whitespace
    - Consistent handling of special types (Decimal, date, UUID)
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_serializer,
    )


def hash_payload(payload: dict) -> str:
    """
    Compute SHA-256 hash of a payload.

    Returns:
        Hex-encoded SHA-256 hash (64 characters).
    """
    canonical = canonicalize_json(payload)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
