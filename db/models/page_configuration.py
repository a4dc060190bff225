"""
db/models/page_configuration.py

Operator-owned list of marketing pages the scheduler scans.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class PageConfiguration(Base, TimestampMixin):
    """
    One scannable page.

    ``active=False`` removes the page from scheduled scans while keeping
    its report history, which is keyed by page name rather than by id.
    """

    __tablename__ = "page_configurations"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    page_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )
    cms_source_id: Mapped[str] = mapped_column(
        String(2048),
        nullable=False,
        comment="CMS page URL or path relative to CMS_BASE_URL",
    )
    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    __table_args__ = (Index("ix_page_configurations_active", "active"),)

    def __repr__(self) -> str:
        return (
            f"<PageConfiguration id={self.id} page_name={self.page_name!r} "
            f"active={self.active}>"
        )
