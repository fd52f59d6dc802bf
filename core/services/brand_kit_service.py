# =============================================================================
# core/services/brand_kit_service.py - Brand Kits
# =============================================================================
# A user's saved color/font sets. Exactly one kit per user is the default;
# the first kit created becomes the default.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import ResourceNotFoundError
from core.models.brand_kit import BrandKitCreate, BrandKitUpdate
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)


class BrandKitService:
    """Service for brand kit operations."""

    @staticmethod
    def list_brand_kits(user_id: UUID | str) -> list[dict[str, Any]]:
        """List the user's kits, default first, then newest."""
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("brand_kits")
                .select("*")
                .eq("user_id", normalize_uuid(user_id))
                .order("is_default", desc=True)
                .order("created_at", desc=True)
                .execute()
            )
            return response.data or []
        except Exception as e:
            logger.error(f"Failed to list brand kits: {e}")
            raise

    @staticmethod
    def get_brand_kit(kit_id: str | UUID, user_id: UUID | str) -> dict[str, Any]:
        """
        Get one of the user's kits.

        Raises:
            ResourceNotFoundError: If missing or owned by someone else
        """
        kit = SupabaseClient.fetch_one("brand_kits", "id", normalize_uuid(kit_id))
        if not kit or str(kit.get("user_id")) != str(user_id):
            raise ResourceNotFoundError("Brand kit", str(kit_id))
        return kit

    @staticmethod
    def create_brand_kit(user_id: UUID | str, data: BrandKitCreate) -> dict[str, Any]:
        """Create a kit; it is the default when the user has no other kits."""
        client = SupabaseClient.get_client()
        existing = BrandKitService.list_brand_kits(user_id)

        row = {
            **data.model_dump(),
            "user_id": normalize_uuid(user_id),
            "is_default": not existing,
        }

        try:
            response = client.table("brand_kits").insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to create brand kit: {e}")
            raise

        kit = response.data[0] if response.data else row
        logger.info(f"Created brand kit {kit.get('id')} for user {user_id}")
        return kit

    @staticmethod
    def update_brand_kit(
        kit_id: str | UUID,
        user_id: UUID | str,
        data: BrandKitUpdate,
    ) -> dict[str, Any]:
        kit = BrandKitService.get_brand_kit(kit_id, user_id)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            return kit

        update_data["updated_at"] = utc_now_iso()
        client = SupabaseClient.get_client()
        response = client.table("brand_kits").update(update_data).eq("id", kit["id"]).execute()
        return response.data[0] if response.data else {**kit, **update_data}

    @staticmethod
    def delete_brand_kit(kit_id: str | UUID, user_id: UUID | str) -> None:
        """
        Delete a kit. If it was the default, the newest remaining kit
        takes over.
        """
        kit = BrandKitService.get_brand_kit(kit_id, user_id)
        client = SupabaseClient.get_client()
        client.table("brand_kits").delete().eq("id", kit["id"]).execute()
        logger.info(f"Deleted brand kit {kit['id']}")

        if kit.get("is_default"):
            remaining = BrandKitService.list_brand_kits(user_id)
            if remaining:
                BrandKitService.set_default(remaining[0]["id"], user_id)

    @staticmethod
    def set_default(kit_id: str | UUID, user_id: UUID | str) -> dict[str, Any]:
        """Make a kit the user's default and clear the flag on the rest."""
        kit = BrandKitService.get_brand_kit(kit_id, user_id)
        client = SupabaseClient.get_client()

        try:
            (
                client.table("brand_kits")
                .update({"is_default": False})
                .eq("user_id", normalize_uuid(user_id))
                .neq("id", kit["id"])
                .execute()
            )
            response = (
                client.table("brand_kits")
                .update({"is_default": True, "updated_at": utc_now_iso()})
                .eq("id", kit["id"])
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to set default brand kit: {e}")
            raise

        return response.data[0] if response.data else {**kit, "is_default": True}
