"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector
from app.connectors.catalog_connector import CatalogConnector, CatalogFetchResult
from app.connectors.cms_connector import CmsConnector, PageDocumentFetchResult
from app.connectors.vision_connector import BannerVisionConnector, SignalFetchResult

__all__ = [
    "BannerVisionConnector",
    "BaseConnector",
    "CatalogConnector",
    "CatalogFetchResult",
    "CmsConnector",
    "PageDocumentFetchResult",
    "SignalFetchResult",
]
