# =============================================================================
# core/models/company_profile.py - Company Profile Schemas
# =============================================================================
# The sender's company details shown on proposals and exports.
# =============================================================================

from uuid import UUID

from pydantic import BaseModel, Field

from core.models.brand_kit import HEX_COLOR


class CompanyProfileUpdate(BaseModel):
    """Upsert payload for the current user's company profile."""
    company_name: str | None = Field(default=None, max_length=255)
    company_email: str | None = Field(default=None, max_length=320)
    company_phone: str | None = Field(default=None, max_length=64)
    company_website: str | None = Field(default=None, max_length=2048)
    company_address: str | None = Field(default=None, max_length=1000)
    brand_color_primary: str | None = Field(default=None, pattern=HEX_COLOR)
    brand_color_secondary: str | None = Field(default=None, pattern=HEX_COLOR)


class CompanyProfileResponse(CompanyProfileUpdate):
    """Stored company profile."""
    user_id: UUID
    company_logo_url: str | None = None


class LogoUploadResponse(BaseModel):
    """Result of a logo upload."""
    logo_url: str
    path: str
