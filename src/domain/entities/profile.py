"""Profile domain entities."""

import re
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID, uuid4

SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 32

# Lowercase DNS label: letters, digits and inner hyphens
_SLUG_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")

# Subdomains used by the product itself
RESERVED_SLUGS = frozenset(
    {
        "www",
        "api",
        "app",
        "admin",
        "blog",
        "custom",
        "dashboard",
        "help",
        "mail",
        "static",
        "status",
        "support",
    }
)


class Theme(StrEnum):
    """Visual theme of the public profile page."""

    CLASSIC = "classic"
    MODERN = "modern"
    MINIMAL = "minimal"
    CREATIVE = "creative"
    PROFESSIONAL = "professional"


def normalize_slug(raw: str) -> str:
    """Trim and lower-case a user-supplied slug."""
    return raw.strip().lower()


def slug_error(slug: str) -> str | None:
    """Return why ``slug`` is unacceptable, or None when it is valid."""
    if len(slug) < SLUG_MIN_LENGTH or len(slug) > SLUG_MAX_LENGTH:
        return f"must be between {SLUG_MIN_LENGTH} and {SLUG_MAX_LENGTH} characters"
    if not _SLUG_PATTERN.match(slug):
        return "only lowercase letters, digits and inner hyphens are allowed"
    if "--" in slug:
        return "consecutive hyphens are not allowed"
    if slug in RESERVED_SLUGS:
        return "this name is reserved"
    return None


@dataclass
class WorkExperience:
    """One entry of the work history."""

    company: str
    position: str
    start_date: str
    description: str = ""
    end_date: str | None = None
    current: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkExperience":
        return cls(
            company=data["company"],
            position=data["position"],
            start_date=data["start_date"],
            description=data.get("description") or "",
            end_date=data.get("end_date"),
            current=bool(data.get("current", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Project:
    """A portfolio project."""

    name: str
    description: str = ""
    url: str | None = None
    technologies: list[str] = field(default_factory=list)
    start_date: str | None = None
    end_date: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        return cls(
            name=data["name"],
            description=data.get("description") or "",
            url=data.get("url"),
            technologies=list(data.get("technologies") or []),
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SocialLinks:
    """Known social/contact handles shown in the profile header."""

    linkedin: str | None = None
    github: str | None = None
    twitter: str | None = None
    website: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "SocialLinks":
        data = data or {}
        return cls(**{key: data.get(key) for key in cls.__dataclass_fields__})

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value}


@dataclass
class ExternalLink:
    """Link-in-bio tile with its own click counter."""

    label: str
    url: str
    id: UUID = field(default_factory=uuid4)
    icon: str | None = None
    click_count: int = 0
    is_active: bool = True
    position: int = 0


@dataclass
class Profile:
    """Domain entity for a public CV/bio-link profile."""

    user_id: UUID
    slug: str
    id: UUID = field(default_factory=uuid4)
    name: str | None = None
    tagline: str | None = None
    bio: str | None = None
    skills: list[str] = field(default_factory=list)
    work_history: list[WorkExperience] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    social_links: SocialLinks = field(default_factory=SocialLinks)
    external_links: list[ExternalLink] = field(default_factory=list)
    resume_url: str | None = None
    custom_domain: str | None = None
    custom_domain_verified: bool = False
    theme: Theme = Theme.CLASSIC
    is_published: bool = False
    seo_title: str | None = None
    seo_description: str | None = None
    og_image: str | None = None
    qr_code_url: str | None = None
    view_count: int = 0
    download_count: int = 0
    link_click_count: int = 0
    last_slug_change: datetime | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def missing_publish_fields(self) -> list[str]:
        """Fields that must be filled in before the profile can go live."""
        missing: list[str] = []
        if not (self.name and self.name.strip()):
            missing.append("name")
        if not (self.bio and self.bio.strip()) and not self.work_history:
            missing.append("bio or work_history")
        return missing

    def publish(self, at: datetime) -> None:
        """Mark the profile as publicly reachable."""
        self.is_published = True
        self.updated_at = at

    def unpublish(self, at: datetime) -> None:
        """Hide the profile from public resolution."""
        self.is_published = False
        self.updated_at = at

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at
