"""
detection/base.py

Abstract base class for banner anomaly engines.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from app.domain.signals import AnomalyRecord, BannerSignal, CatalogItem


class BaseAnomalyEngine(ABC):
    """
    Contract for anomaly engine implementations.

    Subclasses receive the catalog items behind a banner and the claims
    extracted from the banner image, and return one record per item that
    contradicts those claims.

    No I/O, no shared mutable state and no side effects are permitted
    inside :meth:`detect`; equal inputs must give equal outputs.
    """

    @abstractmethod
    def detect(
        self,
        items: Sequence[CatalogItem],
        signal: BannerSignal,
    ) -> tuple[AnomalyRecord, ...]:
        """
        Reconcile catalog items against a banner signal.

        Parameters
        ----------
        items:
            Catalog items in catalog order. Order decides which records
            survive truncation.

        signal:
            Brands and discount range claimed by the banner.

        Returns
        -------
        tuple[AnomalyRecord, ...]
            Records in catalog order, each with at least one reason.
        """
