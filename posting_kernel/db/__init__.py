"""Database layer - engine and base classes for collaborator-backing models."""

from posting_kernel.db.base import Base, TrackedBase, UUIDString
from posting_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    init_engine_from_url,
    reset_engine,
)

__all__ = [
    "Base",
    "TrackedBase",
    "UUIDString",
    "create_tables",
    "drop_tables",
    "get_engine",
    "init_engine_from_url",
    "reset_engine",
]
