"""Utility modules for the posting kernel."""

from posting_kernel.utils.hashing import (
    canonical_snapshot_json,
    canonicalize_json,
    hash_payload,
    hash_snapshot,
)

__all__ = [
    "canonical_snapshot_json",
    "canonicalize_json",
    "hash_payload",
    "hash_snapshot",
]
