from __future__ import annotations

from pydantic import Field

from .common import CamelModel


class SocialLinks(CamelModel):
    facebook: str = ""
    twitter: str = ""
    instagram: str = ""
    linkedin: str = ""


class SiteSettingsUpdate(CamelModel):
    logo_url: str = ""
    organization_name: str | None = None
    contact_email: str = ""
    contact_phone: str = ""
    social_links: SocialLinks = Field(default_factory=SocialLinks)


class NewsletterSubscribeRequest(CamelModel):
    email: str | None = None
