"""Pydantic schemas for Profile API."""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.common import PageMeta
from domain.entities.profile import Profile

ThemeName = Literal["classic", "modern", "minimal", "creative", "professional"]


class WorkExperienceSchema(BaseModel):
    """One entry of the work history."""

    company: str = Field(..., min_length=1, max_length=200)
    position: str = Field(..., min_length=1, max_length=200)
    start_date: str = Field(..., max_length=32)
    end_date: Optional[str] = Field(None, max_length=32)
    description: str = Field("", max_length=5000)
    current: bool = False


class ProjectSchema(BaseModel):
    """A portfolio project."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    url: Optional[str] = Field(None, max_length=500)
    technologies: List[str] = Field(default_factory=list)
    start_date: Optional[str] = Field(None, max_length=32)
    end_date: Optional[str] = Field(None, max_length=32)


class SocialLinksSchema(BaseModel):
    """Social and contact handles."""

    linkedin: Optional[str] = Field(None, max_length=500)
    github: Optional[str] = Field(None, max_length=500)
    twitter: Optional[str] = Field(None, max_length=500)
    website: Optional[str] = Field(None, max_length=500)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=200)


class ExternalLinkInput(BaseModel):
    """Link tile as sent by the editor. Omit ``id`` for a new tile."""

    id: Optional[UUID] = None
    label: str = Field(..., min_length=1, max_length=100)
    url: str = Field(..., min_length=1, max_length=2000)
    icon: Optional[str] = Field(None, max_length=50)
    is_active: bool = True


class ExternalLinkResponse(BaseModel):
    """Link tile with its click counter."""

    id: UUID
    label: str
    url: str
    icon: Optional[str] = None
    click_count: int = 0
    is_active: bool = True
    position: int = 0


class PublicExternalLink(BaseModel):
    """Link tile as shown to visitors."""

    id: UUID
    label: str
    url: str
    icon: Optional[str] = None


class ProfileCreate(BaseModel):
    """Schema for creating a Profile."""

    slug: str = Field(..., min_length=1, max_length=64)


class ProfileUpdate(BaseModel):
    """Schema for a partial Profile update.

    Unknown keys are kept so the service can reject them by name.
    """

    model_config = ConfigDict(extra="allow")

    slug: Optional[str] = Field(None, max_length=64)
    name: Optional[str] = Field(None, max_length=200)
    tagline: Optional[str] = Field(None, max_length=300)
    bio: Optional[str] = Field(None, max_length=10000)
    skills: Optional[List[str]] = None
    work_history: Optional[List[WorkExperienceSchema]] = None
    projects: Optional[List[ProjectSchema]] = None
    social_links: Optional[SocialLinksSchema] = None
    external_links: Optional[List[ExternalLinkInput]] = None
    resume_url: Optional[str] = Field(None, max_length=500)
    theme: Optional[ThemeName] = None
    seo_title: Optional[str] = Field(None, max_length=200)
    seo_description: Optional[str] = Field(None, max_length=500)
    og_image: Optional[str] = Field(None, max_length=500)


class ProfileResponse(BaseModel):
    """Schema for the owner's view of a Profile."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "user_id": "456e4567-e89b-12d3-a456-426614174000",
                "slug": "alice",
                "name": "Alice Example",
                "tagline": "Backend engineer",
                "theme": "classic",
                "is_published": True,
                "public_url": "https://alice.namedrop.cv",
                "view_count": 42,
                "created_at": "2026-02-01T10:00:00",
                "updated_at": "2026-02-01T10:00:00",
            }
        },
    )

    id: UUID
    user_id: UUID
    slug: str
    name: Optional[str] = None
    tagline: Optional[str] = None
    bio: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    work_history: List[WorkExperienceSchema] = Field(default_factory=list)
    projects: List[ProjectSchema] = Field(default_factory=list)
    social_links: SocialLinksSchema = Field(default_factory=SocialLinksSchema)
    external_links: List[ExternalLinkResponse] = Field(default_factory=list)
    resume_url: Optional[str] = None
    custom_domain: Optional[str] = None
    custom_domain_verified: bool = False
    theme: ThemeName = "classic"
    is_published: bool = False
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    og_image: Optional[str] = None
    qr_code_url: Optional[str] = None
    public_url: Optional[str] = None
    view_count: int = 0
    download_count: int = 0
    link_click_count: int = 0
    last_slug_change: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, profile: Profile, public_url: str | None = None) -> "ProfileResponse":
        return cls(
            id=profile.id,
            user_id=profile.user_id,
            slug=profile.slug,
            name=profile.name,
            tagline=profile.tagline,
            bio=profile.bio,
            skills=profile.skills,
            work_history=[WorkExperienceSchema(**item.to_dict()) for item in profile.work_history],
            projects=[ProjectSchema(**item.to_dict()) for item in profile.projects],
            social_links=SocialLinksSchema(**profile.social_links.to_dict()),
            external_links=[
                ExternalLinkResponse(
                    id=link.id,
                    label=link.label,
                    url=link.url,
                    icon=link.icon,
                    click_count=link.click_count,
                    is_active=link.is_active,
                    position=link.position,
                )
                for link in profile.external_links
            ],
            resume_url=profile.resume_url,
            custom_domain=profile.custom_domain,
            custom_domain_verified=profile.custom_domain_verified,
            theme=profile.theme.value,
            is_published=profile.is_published,
            seo_title=profile.seo_title,
            seo_description=profile.seo_description,
            og_image=profile.og_image,
            qr_code_url=profile.qr_code_url,
            public_url=public_url,
            view_count=profile.view_count,
            download_count=profile.download_count,
            link_click_count=profile.link_click_count,
            last_slug_change=profile.last_slug_change,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )


class PublicProfileResponse(BaseModel):
    """Rendering payload of a published profile."""

    id: UUID
    slug: str
    name: Optional[str] = None
    tagline: Optional[str] = None
    bio: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    work_history: List[WorkExperienceSchema] = Field(default_factory=list)
    projects: List[ProjectSchema] = Field(default_factory=list)
    social_links: SocialLinksSchema = Field(default_factory=SocialLinksSchema)
    external_links: List[PublicExternalLink] = Field(default_factory=list)
    resume_url: Optional[str] = None
    theme: ThemeName = "classic"
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    og_image: Optional[str] = None
    custom_domain: Optional[str] = None

    @classmethod
    def from_entity(cls, profile: Profile) -> "PublicProfileResponse":
        return cls(
            id=profile.id,
            slug=profile.slug,
            name=profile.name,
            tagline=profile.tagline,
            bio=profile.bio,
            skills=profile.skills,
            work_history=[WorkExperienceSchema(**item.to_dict()) for item in profile.work_history],
            projects=[ProjectSchema(**item.to_dict()) for item in profile.projects],
            social_links=SocialLinksSchema(**profile.social_links.to_dict()),
            external_links=[
                PublicExternalLink(id=link.id, label=link.label, url=link.url, icon=link.icon)
                for link in profile.external_links
                if link.is_active
            ],
            resume_url=profile.resume_url,
            theme=profile.theme.value,
            seo_title=profile.seo_title or profile.name,
            seo_description=profile.seo_description or profile.tagline,
            og_image=profile.og_image,
            custom_domain=profile.custom_domain if profile.custom_domain_verified else None,
        )


class ProfileDetailResponse(BaseModel):
    """Schema for single Profile response."""

    data: ProfileResponse


class ProfileListResponse(BaseModel):
    """Schema for list of Profiles response."""

    data: List[ProfileResponse]
    meta: PageMeta


class PublicProfileDetailResponse(BaseModel):
    """Schema for a resolved public profile."""

    data: PublicProfileResponse
