"""
SqlCountSessionStore -- persisted count sessions.

Responsibility:
    Implements ``CountSessionStore`` over the ``count_sessions`` and
    ``count_session_lines`` tables so that an ACTIVE session survives
    process restarts.  ``get`` rebuilds the domain entity (baseline,
    entries, status) from the rows.

Invariants enforced:
    - Flush-only: never commits.
    - ``save`` of an unknown session raises ``CountSessionNotFoundError``.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from inventory_kernel.domain.count_session import CountSession
from inventory_kernel.exceptions import CountSessionNotFoundError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.count_session import CountSessionModel
from inventory_kernel.selectors.catalog_selector import CountSessionSelector
from inventory_kernel.services.base import BaseService

logger = get_logger("services.count_session_store")


class SqlCountSessionStore(BaseService[CountSessionModel]):
    """Count session store backed by the caller's SQLAlchemy session."""

    def __init__(self, session: Session):
        super().__init__(session)
        self._selector = CountSessionSelector(session)

    def add(self, session: CountSession) -> None:
        model = CountSessionModel.from_domain(session)
        model.created_by = session.responsible
        self.session.add(model)
        self.session.flush()
        logger.debug("count_session_persisted", extra={"session_id": str(session.id)})

    def get(self, session_id: UUID) -> CountSession | None:
        return self._selector.get(session_id)

    def save(self, session: CountSession) -> None:
        model = self._selector.session_row(session.id)
        if model is None:
            raise CountSessionNotFoundError(str(session.id))
        model.apply(session)
        self.session.flush()

    def list_active(self) -> list[CountSession]:
        return self._selector.list_active()
