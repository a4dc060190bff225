"""
tests/conftest.py

Shared fixtures: an in-memory SQLite report store and in-process fakes for
the CMS adapter and the detection entry point.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401 registers all ORM models on Base.metadata
from app.connectors.cms_connector import PageDocumentFetchResult
from app.domain.scan import DetectionResult
from app.domain.signals import AnomalyRecord, BannerSignal
from db.base import Base


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> Callable[[], Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory: Callable[[], Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeCmsConnector:
    """Serves page documents by cms_source_id; listed ids raise instead."""

    def __init__(
        self,
        documents: dict[str, Any] | None = None,
        *,
        errors: dict[str, Exception] | None = None,
        is_fallback: bool = False,
    ) -> None:
        self.documents = documents or {}
        self.errors = errors or {}
        self.is_fallback = is_fallback
        self.calls: list[str] = []

    def fetch_page_document(self, cms_source_id: str) -> PageDocumentFetchResult:
        self.calls.append(cms_source_id)
        if cms_source_id in self.errors:
            raise self.errors[cms_source_id]
        return PageDocumentFetchResult(
            source="cms",
            document=self.documents[cms_source_id],
            is_fallback=self.is_fallback,
        )


class FakeDetectionService:
    """Returns ``anomalies[catalog_id]`` synthetic anomalies; listed ids raise."""

    def __init__(
        self,
        anomalies: dict[str, int] | None = None,
        *,
        failures: dict[str, Exception] | None = None,
    ) -> None:
        self.anomalies = anomalies or {}
        self.failures = failures or {}
        self.calls: list[tuple[str, str]] = []

    def detect(self, banner_url: str, catalog_id: str) -> DetectionResult:
        self.calls.append((banner_url, catalog_id))
        if catalog_id in self.failures:
            raise self.failures[catalog_id]
        records = tuple(
            AnomalyRecord(
                item_code=f"{catalog_id}-P{index}",
                brand_name="Zara",
                discount_percent=60.0,
                reasons=("Discount 60.0% is above banner maximum 50.0%",),
            )
            for index in range(self.anomalies.get(catalog_id, 0))
        )
        return DetectionResult(
            banner_url=banner_url,
            catalog_id=catalog_id,
            banner_signal=BannerSignal(brands=("Nike",), discount_lower=20.0, discount_upper=50.0),
            anomalies=records,
        )


def page_document(*catalog_ids: str, component_name: str = "HeroCarousel") -> dict[str, Any]:
    return {
        "slots": [
            {
                "component": {
                    "name": component_name,
                    "banners": [
                        {
                            "imageUrl": f"https://cdn.example.com/banner-{catalog_id}.jpg",
                            "hotspots": [{"targetId": catalog_id}],
                        }
                    ],
                }
            }
            for catalog_id in catalog_ids
        ]
    }


@pytest.fixture()
def make_cms() -> Callable[..., FakeCmsConnector]:
    return FakeCmsConnector


@pytest.fixture()
def make_detection() -> Callable[..., FakeDetectionService]:
    return FakeDetectionService


@pytest.fixture()
def make_page_document() -> Callable[..., dict[str, Any]]:
    return page_document
