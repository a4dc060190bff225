"""
app/connectors/cms_connector.py

CMS adapter returning the raw layout document of a marketing page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from app.config import CmsSettings, ExternalHTTPSettings
from app.connectors.base import BaseConnector
from app.domain.errors import AdapterTransportError

logger = logging.getLogger(__name__)

_FALLBACK_BANNER_ROOT = "https://assets.ajio.com/medias/sys_master/root/20240101"


def fallback_page_document() -> dict[str, Any]:
    """Fixed three-banner layout used when the CMS cannot be reached."""
    return {
        "slots": [
            {
                "component": {
                    "name": "banner",
                    "banners": [
                        {
                            "imageUrl": f"{_FALLBACK_BANNER_ROOT}/banner{index}.jpg",
                            "hotspots": [{"targetId": catalog_id}],
                        }
                    ],
                }
            }
            for index, catalog_id in ((1, "83"), (2, "84"), (3, "85"))
        ]
    }


@dataclass(frozen=True)
class PageDocumentFetchResult:
    """
    Raw CMS body (unparsed) plus a flag telling real content from fallback.
    """

    source: str
    document: Any
    is_fallback: bool = False


class CmsConnector(BaseConnector):
    """
    Adapter for fetching page layouts from the CMS.

    Only transport failures fall back. The body is returned untouched so
    the page resolver, not this adapter, decides whether it is malformed.
    """

    def __init__(
        self,
        *,
        settings: CmsSettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(
            source="cms",
            http_settings=http_settings,
            session=session,
            use_fallback=settings.use_fallback,
        )
        self._settings = settings

    def fetch_page_document(self, cms_source_id: str) -> PageDocumentFetchResult:
        url = self.resolve_url(cms_source_id)
        logger.info("Fetching page document cms_source_id=%s url=%s", cms_source_id, url)
        document, is_fallback = self._with_fallback(
            lambda: self._request_text(
                method="GET",
                url=url,
                headers={"User-Agent": self._settings.user_agent, "Accept": "application/json"},
            ),
            fallback_page_document,
            subject=cms_source_id,
            fallback_on=(AdapterTransportError,),
        )
        return PageDocumentFetchResult(source=self.source, document=document, is_fallback=is_fallback)

    def resolve_url(self, cms_source_id: str) -> str:
        source = cms_source_id.strip()
        if source.startswith(("http://", "https://")):
            return source
        if not self._settings.base_url:
            raise AdapterTransportError(
                f"{self.source}: '{cms_source_id}' is not a URL and CMS_BASE_URL is not set."
            )
        return f"{self._settings.base_url.rstrip('/')}/{source.lstrip('/')}"
