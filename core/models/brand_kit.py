# =============================================================================
# core/models/brand_kit.py - Brand Kit Schemas
# =============================================================================
# A brand kit is a saved set of colors and fonts applied to proposals.
# Defaults match the web client's color picker initial values.
# =============================================================================

from uuid import UUID

from pydantic import BaseModel, Field

HEX_COLOR = r"^#[0-9a-fA-F]{6}$"


class BrandKitCreate(BaseModel):
    """
    Create a brand kit.

    Example:
        {"name": "Acme", "primary_color": "#0f172a", "font_primary": "Poppins"}
    """
    name: str = Field(..., min_length=1, max_length=100)
    primary_color: str = Field(default="#22c55e", pattern=HEX_COLOR)
    secondary_color: str = Field(default="#16a34a", pattern=HEX_COLOR)
    accent_color: str = Field(default="#f59e0b", pattern=HEX_COLOR)
    font_primary: str = Field(default="Inter", max_length=64)
    font_secondary: str = Field(default="Inter", max_length=64)
    logo_url: str | None = Field(default=None, max_length=2048)


class BrandKitUpdate(BaseModel):
    """Partial brand kit update."""
    name: str | None = Field(default=None, min_length=1, max_length=100)
    primary_color: str | None = Field(default=None, pattern=HEX_COLOR)
    secondary_color: str | None = Field(default=None, pattern=HEX_COLOR)
    accent_color: str | None = Field(default=None, pattern=HEX_COLOR)
    font_primary: str | None = Field(default=None, max_length=64)
    font_secondary: str | None = Field(default=None, max_length=64)
    logo_url: str | None = Field(default=None, max_length=2048)


class BrandKitResponse(BrandKitCreate):
    """A stored brand kit."""
    id: UUID
    user_id: UUID
    is_default: bool = False
