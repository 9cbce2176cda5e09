"""CMS router - public content reads and admin editing"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...backend import BackendClient
from ...dependencies import get_backend, get_public_backend
from .schemas import (
    EDITABLE_SECTIONS,
    AssetInput,
    CmsMutationResponse,
    ContentGroups,
    SectionContentUpdate,
    SectionVisibilityUpdate,
)
from .service import CmsService

router = APIRouter(prefix="/cms", tags=["CMS"])


def get_public_cms_service(backend: BackendClient = Depends(get_public_backend)) -> CmsService:
    return CmsService(backend)


def get_cms_service(backend: BackendClient = Depends(get_backend)) -> CmsService:
    return CmsService(backend)


# ============================================================================
# PUBLIC
# ============================================================================


@router.get("/public/content")
async def get_public_content(
    section: Optional[str] = Query(None),
    service: CmsService = Depends(get_public_cms_service),
) -> dict[str, str]:
    """{key: value} map for the given section (all sections when omitted)"""
    return await service.public_content(section)


@router.get("/public/content/{section}")
async def get_public_section_content(section: str, service: CmsService = Depends(get_public_cms_service)) -> dict[str, str]:
    return await service.public_content(section)


# ============================================================================
# ADMIN
# ============================================================================


@router.get("/content", response_model=ContentGroups)
async def get_content(service: CmsService = Depends(get_cms_service)):
    """All content grouped by section; editable sections are always present"""
    grouped = await service.grouped_content()
    for section in EDITABLE_SECTIONS:
        grouped.setdefault(section, {})
    return ContentGroups(sections=grouped)


@router.post("/content/{section}", response_model=CmsMutationResponse)
async def save_section_content(
    section: str,
    data: SectionContentUpdate,
    service: CmsService = Depends(get_cms_service),
):
    return await service.save_section(section, data.updates)


@router.delete("/content/{section}/{key}", response_model=CmsMutationResponse)
async def delete_content(section: str, key: str, service: CmsService = Depends(get_cms_service)):
    return await service.delete_content(section, key)


@router.get("/sections")
async def list_sections(service: CmsService = Depends(get_cms_service)):
    return await service.sections()


@router.patch("/sections/{section}/visibility", response_model=CmsMutationResponse)
async def set_section_visibility(
    section: str,
    data: SectionVisibilityUpdate,
    service: CmsService = Depends(get_cms_service),
):
    return await service.set_section_visibility(section, data.visible)


@router.get("/assets/{section}")
async def list_assets(section: str, service: CmsService = Depends(get_cms_service)):
    return await service.assets(section)


@router.post("/assets/{section}", response_model=CmsMutationResponse)
async def save_asset(section: str, data: AssetInput, service: CmsService = Depends(get_cms_service)):
    return await service.save_asset(section, data)


@router.delete("/assets/{section}/{key}", response_model=CmsMutationResponse)
async def delete_asset(section: str, key: str, service: CmsService = Depends(get_cms_service)):
    return await service.delete_asset(section, key)
