# =============================================================================
# app/routers/profile.py - Company Profile Endpoints
# =============================================================================
# The user's company details and logo, shown on proposals and emails.
# =============================================================================

from fastapi import APIRouter, Depends, File, UploadFile

from app.auth import get_current_user, AuthUser
from core.models.company_profile import (
    CompanyProfileResponse,
    CompanyProfileUpdate,
    LogoUploadResponse,
)
from core.services.company_profile_service import CompanyProfileService

router = APIRouter()


@router.get("", response_model=CompanyProfileResponse)
async def get_profile(user: AuthUser = Depends(get_current_user)):
    """Get the company profile. Empty fields when none has been saved yet."""
    return CompanyProfileResponse(**CompanyProfileService.get_profile(user.id))


@router.put("", response_model=CompanyProfileResponse)
async def upsert_profile(
    request: CompanyProfileUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Create or update the company profile."""
    return CompanyProfileResponse(**CompanyProfileService.upsert_profile(user.id, request))


@router.post("/logo", response_model=LogoUploadResponse)
async def upload_logo(
    file: UploadFile = File(..., description="PNG, JPEG, SVG or WebP, 5 MB max"),
    user: AuthUser = Depends(get_current_user),
):
    """
    Upload a company logo.

    Stores the file in the logos bucket and saves its public URL on the
    profile.
    """
    content = await file.read()
    result = CompanyProfileService.upload_logo(user.id, content, file.filename or "logo")
    return LogoUploadResponse(**result)
