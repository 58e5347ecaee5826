"""
Module: posting_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    the domain DTOs they return.  MUST NOT import from services/.

Invariants enforced:
    - Read-only access: Selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - DTO return convention: Selectors return frozen domain DTOs, never ORM
      model instances.
    - Session ownership: the caller owns the session and its transaction.

Identifier shape:
    The models store ids in UUIDString columns and read them back as UUIDs,
    so the tables only hold UUID-shaped tenant, event and account ids.  The
    kernel treats ids as opaque strings; a lookup key that is not a UUID
    simply matches no row and the selector answers None (not found).  Hosts
    with non-UUID ids use their own collaborators.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from posting_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session):
        self.session = session
