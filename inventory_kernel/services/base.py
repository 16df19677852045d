"""
BaseService -- abstract base for kernel write services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every SQL-backed writer in the kernel layer.  Concrete services receive
    a SQLAlchemy ``Session`` that they use via ``session.flush()`` -- never
    ``session.commit()``.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or rollback themselves.  The caller
      (``session_scope()``, the CLI or a test fixture) owns commit/rollback.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for kernel write services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide query-only (read) methods -- those belong
          in ``inventory_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session
