# =============================================================================
# core/services/webhook_service.py - Outbound Webhook Configuration
# =============================================================================
# CRUD for a user's webhook_configurations rows and event triggering.
# Delivery itself is in lib/webhook_dispatcher.py.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import ResourceNotFoundError
from core.models.webhook import WebhookConfigCreate, WebhookConfigUpdate
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso
from lib.webhook_dispatcher import DispatchSummary, dispatch_event

logger = logging.getLogger(__name__)


def to_response(config: dict[str, Any]) -> dict[str, Any]:
    """Strip the secret from a configuration row."""
    public = {key: value for key, value in config.items() if key != "secret"}
    public["has_secret"] = bool(config.get("secret"))
    return public


class WebhookService:
    """Service for outbound webhook configurations."""

    @staticmethod
    def list_webhooks(user_id: UUID | str) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        response = (
            client.table("webhook_configurations")
            .select("*")
            .eq("user_id", normalize_uuid(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    @staticmethod
    def get_webhook(webhook_id: str | UUID, user_id: UUID | str) -> dict[str, Any]:
        """
        Raises:
            ResourceNotFoundError: If missing or owned by someone else
        """
        config = SupabaseClient.fetch_one("webhook_configurations", "id", normalize_uuid(webhook_id))
        if not config or str(config.get("user_id")) != str(user_id):
            raise ResourceNotFoundError("Webhook", str(webhook_id))
        return config

    @staticmethod
    def create_webhook(user_id: UUID | str, data: WebhookConfigCreate) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        row = {
            **data.model_dump(mode="json"),
            "user_id": normalize_uuid(user_id),
        }

        try:
            response = client.table("webhook_configurations").insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to create webhook: {e}")
            raise

        config = response.data[0] if response.data else row
        logger.info(f"Created webhook {config.get('id')} for events {row['events']}")
        return config

    @staticmethod
    def update_webhook(
        webhook_id: str | UUID,
        user_id: UUID | str,
        data: WebhookConfigUpdate,
    ) -> dict[str, Any]:
        config = WebhookService.get_webhook(webhook_id, user_id)
        update_data = data.model_dump(exclude_unset=True, mode="json")
        if not update_data:
            return config
        return WebhookService._write(config, update_data)

    @staticmethod
    def toggle_webhook(
        webhook_id: str | UUID,
        user_id: UUID | str,
        is_active: bool | None = None,
    ) -> dict[str, Any]:
        """
        Set the active flag, or flip it when is_active is None.
        """
        config = WebhookService.get_webhook(webhook_id, user_id)
        new_state = (not config.get("is_active")) if is_active is None else is_active
        return WebhookService._write(config, {"is_active": new_state})

    @staticmethod
    def delete_webhook(webhook_id: str | UUID, user_id: UUID | str) -> None:
        config = WebhookService.get_webhook(webhook_id, user_id)
        client = SupabaseClient.get_client()
        client.table("webhook_configurations").delete().eq("id", config["id"]).execute()
        logger.info(f"Deleted webhook {config['id']}")

    # -------------------------------------------------------------------------
    # Triggering
    # -------------------------------------------------------------------------

    @staticmethod
    def get_active_configs(user_id: UUID | str, event_type: str) -> list[dict[str, Any]]:
        """Active configurations for a user subscribed to event_type."""
        client = SupabaseClient.get_client()
        response = (
            client.table("webhook_configurations")
            .select("*")
            .eq("user_id", normalize_uuid(user_id))
            .eq("is_active", True)
            .contains("events", [event_type])
            .execute()
        )
        return response.data or []

    @staticmethod
    def trigger_event(
        user_id: UUID | str,
        event_type: str,
        data: dict[str, Any],
    ) -> DispatchSummary:
        """
        Deliver an event to the user's matching webhooks now.

        Returns:
            DispatchSummary with per-delivery failures
        """
        configs = WebhookService.get_active_configs(user_id, event_type)
        summary = dispatch_event(
            configs,
            event_type,
            data,
            timeout=settings.WEBHOOK_TIMEOUT_SECONDS,
        )
        logger.info(
            f"Event {event_type} for user {user_id}: "
            f"{summary.succeeded}/{summary.total} delivered"
        )
        return summary

    @staticmethod
    def _write(config: dict[str, Any], update_data: dict[str, Any]) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        update_data["updated_at"] = utc_now_iso()
        response = (
            client.table("webhook_configurations")
            .update(update_data)
            .eq("id", config["id"])
            .execute()
        )
        return response.data[0] if response.data else {**config, **update_data}
