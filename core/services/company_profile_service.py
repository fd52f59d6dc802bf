# =============================================================================
# core/services/company_profile_service.py - Sender Company Profile
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from core.models.company_profile import CompanyProfileUpdate
from core.services.storage_service import StorageService
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)


class CompanyProfileService:
    """One company profile row per user, keyed by user_id."""

    @staticmethod
    def get_profile(user_id: UUID | str) -> dict[str, Any]:
        """Get the profile; an empty profile when the user has none yet."""
        profile = SupabaseClient.fetch_one("company_profiles", "user_id", normalize_uuid(user_id))
        return profile or {"user_id": normalize_uuid(user_id)}

    @staticmethod
    def upsert_profile(user_id: UUID | str, data: CompanyProfileUpdate) -> dict[str, Any]:
        """Create or update the profile with the fields set on data."""
        row = {
            **data.model_dump(exclude_unset=True),
            "user_id": normalize_uuid(user_id),
            "updated_at": utc_now_iso(),
        }
        return CompanyProfileService._upsert(row)

    @staticmethod
    def upload_logo(user_id: UUID | str, file_content: bytes, filename: str) -> dict[str, str]:
        """
        Store a logo and point the profile at it.

        Returns:
            Dict with logo_url and path
        """
        uid = normalize_uuid(user_id)
        uploaded = StorageService.upload_logo(uid, file_content, filename)
        CompanyProfileService._upsert({
            "user_id": uid,
            "company_logo_url": uploaded["logo_url"],
            "updated_at": utc_now_iso(),
        })
        return uploaded

    @staticmethod
    def _upsert(row: dict[str, Any]) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        try:
            response = client.table("company_profiles").upsert(row, on_conflict="user_id").execute()
        except Exception as e:
            logger.error(f"Failed to save company profile: {e}")
            raise
        return response.data[0] if response.data else row
