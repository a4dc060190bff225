"""
app/repositories/page_configuration_repository.py

Persistence for operator-managed page configurations.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.page_configuration import PageConfiguration


class PageConfigurationRepository:
    """
    Data access layer for PageConfiguration rows.

    Transaction control belongs to the caller.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_all(self) -> list[PageConfiguration]:
        stmt = select(PageConfiguration).order_by(PageConfiguration.id)
        return list(self._session.scalars(stmt))

    def list_active(self) -> list[PageConfiguration]:
        """Active pages in declaration (id) order."""
        stmt = (
            select(PageConfiguration)
            .where(PageConfiguration.active.is_(True))
            .order_by(PageConfiguration.id)
        )
        return list(self._session.scalars(stmt))

    def get(self, page_id: int) -> PageConfiguration | None:
        return self._session.get(PageConfiguration, page_id)

    def get_by_name(self, page_name: str) -> PageConfiguration | None:
        stmt = select(PageConfiguration).where(PageConfiguration.page_name == page_name)
        return self._session.scalars(stmt).first()

    def exists_by_name(self, page_name: str) -> bool:
        return self.get_by_name(page_name) is not None

    def add(self, page: PageConfiguration) -> PageConfiguration:
        self._session.add(page)
        self._session.flush()
        return page

    def delete(self, page: PageConfiguration) -> None:
        self._session.delete(page)
        self._session.flush()
