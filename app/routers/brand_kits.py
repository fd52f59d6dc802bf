# =============================================================================
# app/routers/brand_kits.py - Brand Kit Endpoints
# =============================================================================
# Colors, fonts and logo applied to proposals and exports.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field

from app.auth import get_current_user, AuthUser
from core.models.brand_kit import BrandKitCreate, BrandKitResponse, BrandKitUpdate
from core.services.brand_kit_service import BrandKitService

router = APIRouter()

KitPath = Annotated[UUID, Path(description="Brand kit UUID")]


class BrandKitDeleteResponse(BaseModel):
    brand_kit_id: str
    message: str = Field(default="Brand kit deleted")


@router.get("", response_model=list[BrandKitResponse])
async def list_brand_kits(user: AuthUser = Depends(get_current_user)):
    """List brand kits, default first."""
    return [BrandKitResponse(**kit) for kit in BrandKitService.list_brand_kits(user.id)]


@router.post("", response_model=BrandKitResponse, status_code=201)
async def create_brand_kit(
    request: BrandKitCreate,
    user: AuthUser = Depends(get_current_user),
):
    """Create a brand kit. A user's first kit becomes the default."""
    return BrandKitResponse(**BrandKitService.create_brand_kit(user.id, request))


@router.get("/{kit_id}", response_model=BrandKitResponse)
async def get_brand_kit(kit_id: KitPath, user: AuthUser = Depends(get_current_user)):
    return BrandKitResponse(**BrandKitService.get_brand_kit(kit_id, user.id))


@router.patch("/{kit_id}", response_model=BrandKitResponse)
async def update_brand_kit(
    kit_id: KitPath,
    request: BrandKitUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Update brand kit fields."""
    return BrandKitResponse(**BrandKitService.update_brand_kit(kit_id, user.id, request))


@router.post("/{kit_id}/default", response_model=BrandKitResponse)
async def set_default_brand_kit(kit_id: KitPath, user: AuthUser = Depends(get_current_user)):
    """Make this kit the default and clear the flag on the others."""
    return BrandKitResponse(**BrandKitService.set_default(kit_id, user.id))


@router.delete("/{kit_id}", response_model=BrandKitDeleteResponse)
async def delete_brand_kit(kit_id: KitPath, user: AuthUser = Depends(get_current_user)):
    """Delete a brand kit. Deleting the default promotes the newest remaining kit."""
    BrandKitService.delete_brand_kit(kit_id, user.id)
    return BrandKitDeleteResponse(brand_kit_id=str(kit_id))
