"""
app/services/page_resolver.py

Flattens a CMS page layout into the banner components that can be scanned.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from app.domain.errors import MalformedSourceDocument
from app.domain.signals import ScanComponent

logger = logging.getLogger(__name__)

DEFAULT_COMPONENT_TYPE = "banner"


def _decode(raw_document: Any) -> Any:
    if isinstance(raw_document, (bytes, bytearray)):
        try:
            raw_document = raw_document.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedSourceDocument("Page document is not valid UTF-8.") from exc
    if isinstance(raw_document, str):
        try:
            return json.loads(raw_document)
        except ValueError as exc:
            raise MalformedSourceDocument(f"Page document is not valid JSON: {exc}") from exc
    return raw_document


def _require_mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedSourceDocument(f"{where} must be an object, got {type(value).__name__}.")
    return value


def _optional_list(container: Mapping[str, Any], key: str, where: str) -> list[Any]:
    value = container.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedSourceDocument(f"{where}.{key} must be a list, got {type(value).__name__}.")
    return value


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list, bool)):
        return ""
    return str(value).strip()


class PageComponentResolver:
    """
    Resolves ``page -> slots -> component -> banners -> hotspots`` into a
    flat tuple of :class:`ScanComponent`.

    A banner yields one component built from its ``imageUrl``, the
    ``targetId`` of its first hotspot and the enclosing component's
    ``name``. Banners without hotspots, URL or target id are skipped. A
    document whose structure cannot be read raises
    :class:`MalformedSourceDocument`; no partial result is returned.
    """

    def resolve(self, raw_document: Any) -> tuple[ScanComponent, ...]:
        document = _require_mapping(_decode(raw_document), "page")
        if "page" in document and "slots" not in document:
            document = _require_mapping(document["page"], "page")

        slots = document.get("slots")
        if not isinstance(slots, list):
            raise MalformedSourceDocument("page.slots is missing or not a list.")

        components: list[ScanComponent] = []
        skipped = 0
        for slot_index, raw_slot in enumerate(slots):
            slot = _require_mapping(raw_slot, f"slots[{slot_index}]")
            raw_component = slot.get("component")
            if raw_component is None:
                continue

            where = f"slots[{slot_index}].component"
            component = _require_mapping(raw_component, where)
            component_type = _text(component.get("name")) or DEFAULT_COMPONENT_TYPE

            for banner_index, raw_banner in enumerate(_optional_list(component, "banners", where)):
                banner_where = f"{where}.banners[{banner_index}]"
                banner = _require_mapping(raw_banner, banner_where)
                hotspots = _optional_list(banner, "hotspots", banner_where)
                if not hotspots:
                    skipped += 1
                    continue

                first_hotspot = _require_mapping(hotspots[0], f"{banner_where}.hotspots[0]")
                banner_url = _text(banner.get("imageUrl"))
                catalog_id = _text(first_hotspot.get("targetId"))
                if not banner_url or not catalog_id:
                    skipped += 1
                    continue

                components.append(
                    ScanComponent(
                        banner_url=banner_url,
                        catalog_id=catalog_id,
                        component_type=component_type,
                    )
                )

        logger.info("Resolved %s scan components (%s banners skipped)", len(components), skipped)
        return tuple(components)
