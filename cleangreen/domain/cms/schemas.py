"""CMS request/response models"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ...notices import Notice

# Sections the admin editor shows, in display order
EDITABLE_SECTIONS = (
    "home_hero",
    "home_welcome",
    "about_page",
    "services_intro",
    "contact_page",
    "footer",
)


class SectionContentUpdate(BaseModel):
    """{key: value} map saved in one request"""

    updates: dict[str, str] = Field(default_factory=dict)

    @field_validator("updates")
    @classmethod
    def keys_not_blank(cls, v: dict[str, str]) -> dict[str, str]:
        cleaned = {}
        for key, value in v.items():
            key = key.strip()
            if not key:
                raise ValueError("Content keys cannot be blank")
            cleaned[key] = value
        return cleaned


class SectionVisibilityUpdate(BaseModel):
    visible: bool


class AssetInput(BaseModel):
    key: str
    url: str
    altText: Optional[str] = None


class ContentGroups(BaseModel):
    """All content, keyed by section then by content key"""

    sections: dict[str, dict[str, str]]


class CmsMutationResponse(BaseModel):
    data: Any = None
    notices: list[Notice] = Field(default_factory=list)
