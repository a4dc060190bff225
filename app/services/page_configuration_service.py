"""
app/services/page_configuration_service.py

Management of the pages the scanner visits.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.errors import PageAlreadyExistsError, PageNotFoundError, PersistenceError
from app.repositories.page_configuration_repository import PageConfigurationRepository
from db.models.page_configuration import PageConfiguration

logger = logging.getLogger(__name__)


def _required_text(value: str, field_name: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValueError(f"{field_name} must not be blank.")
    return cleaned


class PageConfigurationService:
    """
    CRUD over page configurations with name uniqueness.

    Removing or deactivating a page leaves its scan reports in place.
    """

    def __init__(self, db: Session) -> None:
        self._db = db
        self._pages = PageConfigurationRepository(db)

    def list_pages(self) -> list[PageConfiguration]:
        return self._pages.list_all()

    def list_active_pages(self) -> list[PageConfiguration]:
        return self._pages.list_active()

    def get_page(self, page_id: int) -> PageConfiguration:
        page = self._pages.get(page_id)
        if page is None:
            raise PageNotFoundError(f"Page configuration {page_id} not found.")
        return page

    def create_page(self, page_name: str, cms_source_id: str) -> PageConfiguration:
        name = _required_text(page_name, "page_name")
        source = _required_text(cms_source_id, "cms_source_id")
        if self._pages.exists_by_name(name):
            raise PageAlreadyExistsError(f"Page with name '{name}' already exists.")

        page = PageConfiguration(page_name=name, cms_source_id=source, active=True)
        self._commit(lambda: self._pages.add(page))
        logger.info("Created page configuration id=%s page_name=%s", page.id, page.page_name)
        return page

    def update_page(
        self,
        page_id: int,
        page_name: str,
        cms_source_id: str,
        active: bool,
    ) -> PageConfiguration:
        page = self.get_page(page_id)
        name = _required_text(page_name, "page_name")
        source = _required_text(cms_source_id, "cms_source_id")

        if name != page.page_name:
            clash = self._pages.get_by_name(name)
            if clash is not None and clash.id != page.id:
                raise PageAlreadyExistsError(f"Page with name '{name}' already exists.")

        page.page_name = name
        page.cms_source_id = source
        page.active = active
        self._commit()
        logger.info("Updated page configuration id=%s page_name=%s active=%s", page.id, name, active)
        return page

    def delete_page(self, page_id: int) -> None:
        page = self.get_page(page_id)
        self._commit(lambda: self._pages.delete(page))
        logger.info("Deleted page configuration id=%s", page_id)

    def toggle_page(self, page_id: int) -> PageConfiguration:
        page = self.get_page(page_id)
        page.active = not page.active
        self._commit()
        logger.info("Toggled page configuration id=%s active=%s", page.id, page.active)
        return page

    def _commit(self, write: Callable[[], object] | None = None) -> None:
        try:
            if write is not None:
                write()
            self._db.commit()
        except IntegrityError as exc:
            self._db.rollback()
            raise PageAlreadyExistsError(f"Page configuration violates a uniqueness constraint: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise PersistenceError(f"Could not save page configuration: {exc}") from exc
