"""CMS service - reads and batch updates of site content"""

import logging
from typing import Any, Iterable, Optional

from ...backend import BackendClient
from ...errors import DomainRejection, ValidationFailed
from ...notices import success
from ...schemas import CmsAsset, CmsContent, CmsSection, parse_records
from .schemas import AssetInput, CmsMutationResponse

logger = logging.getLogger(__name__)

CONTENT_PATH = "/api/cms/content"
PUBLIC_CONTENT_PATH = "/api/public/cms/content"
SECTIONS_PATH = "/api/cms/sections"
ASSETS_PATH = "/api/cms/assets"


def group_by_section(items: Iterable[CmsContent]) -> dict[str, dict[str, str]]:
    """[{section, key, value}] -> {section: {key: value}}"""
    grouped: dict[str, dict[str, str]] = {}
    for item in items:
        grouped.setdefault(item.section, {})[item.key] = item.value
    return grouped


def content_map(items: Iterable[CmsContent], section: Optional[str] = None) -> dict[str, str]:
    """{key: value} for one section, or for everything when section is None"""
    return {
        item.key: item.value
        for item in items
        if section is None or item.section == section
    }


def _require_section(section: str) -> str:
    section = (section or "").strip()
    if not section:
        raise ValidationFailed("Section is required")
    return section


class CmsService:
    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def all_content(self) -> list[CmsContent]:
        return parse_records(CmsContent, await self.backend.query(CONTENT_PATH))

    async def grouped_content(self) -> dict[str, dict[str, str]]:
        return group_by_section(await self.all_content())

    async def public_content(self, section: Optional[str] = None) -> dict[str, str]:
        items = parse_records(CmsContent, await self.backend.query(PUBLIC_CONTENT_PATH))
        return content_map(items, section)

    def _invalidate_content(self) -> None:
        self.backend.invalidate(CONTENT_PATH)
        self.backend.invalidate(PUBLIC_CONTENT_PATH)

    async def save_section(self, section: str, updates: dict[str, str]) -> CmsMutationResponse:
        section = _require_section(section)
        if not updates:
            raise ValidationFailed("Nothing to save", title="Update Failed")
        result = await self.backend.post(f"{CONTENT_PATH}/{section}/batch", updates)
        self._invalidate_content()
        logger.info(f"📝 CMS section {section} updated ({len(updates)} keys)")
        return CmsMutationResponse(
            data=result,
            notices=[success("Content Updated", "Your changes have been saved successfully.")],
        )

    async def delete_content(self, section: str, key: str) -> CmsMutationResponse:
        section = _require_section(section)
        result = await self.backend.delete(f"{CONTENT_PATH}/{section}/{key}")
        self._invalidate_content()
        return CmsMutationResponse(data=result, notices=[success("Content Deleted")])

    async def sections(self) -> list[CmsSection]:
        return parse_records(CmsSection, await self.backend.query(SECTIONS_PATH))

    async def set_section_visibility(self, section: str, visible: bool) -> CmsMutationResponse:
        section = _require_section(section)
        result = await self.backend.patch(f"{SECTIONS_PATH}/{section}/visibility", {"visible": visible})
        if result is None:
            raise DomainRejection(f"Section {section} not found", title="Not found")
        self.backend.invalidate(SECTIONS_PATH)
        self._invalidate_content()
        state = "shown" if visible else "hidden"
        logger.info(f"👁️ CMS section {section} {state}")
        return CmsMutationResponse(data=result, notices=[success("Section Updated", f"{section} is now {state}")])

    async def assets(self, section: str) -> list[CmsAsset]:
        section = _require_section(section)
        return parse_records(CmsAsset, await self.backend.query(f"{ASSETS_PATH}/{section}"))

    async def save_asset(self, section: str, asset: AssetInput) -> CmsMutationResponse:
        section = _require_section(section)
        result: Any = await self.backend.post(f"{ASSETS_PATH}/{section}", asset.model_dump())
        self.backend.invalidate(f"{ASSETS_PATH}/{section}")
        return CmsMutationResponse(data=result, notices=[success("Asset Saved")])

    async def delete_asset(self, section: str, key: str) -> CmsMutationResponse:
        section = _require_section(section)
        result = await self.backend.delete(f"{ASSETS_PATH}/{section}/{key}")
        self.backend.invalidate(f"{ASSETS_PATH}/{section}")
        return CmsMutationResponse(data=result, notices=[success("Asset Deleted")])
