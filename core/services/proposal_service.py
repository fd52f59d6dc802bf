# =============================================================================
# core/services/proposal_service.py - Proposal Business Logic
# =============================================================================
# Handles proposal CRUD operations and section-level edits.
# Separates HTTP concerns from database/business logic.
# =============================================================================

import copy
import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.content_renderer import normalize_sections
from lib.utils import normalize_uuid, utc_now_iso
from core.models.proposal import ProposalCreate, ProposalStatus, ProposalUpdate
from app.exceptions import InvalidRequestError, ProposalNotFoundError, ResourceNotFoundError

logger = logging.getLogger(__name__)


class ProposalService:
    """
    Service for proposal management operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def create_proposal(
        user_id: UUID | str,
        data: ProposalCreate,
    ) -> dict[str, Any]:
        """
        Create a new draft proposal.

        When a template is given and no content, the template's sections
        become the proposal's content.

        Args:
            user_id: The user ID who owns this proposal
            data: Validated create payload

        Returns:
            Created proposal dict

        Raises:
            ResourceNotFoundError: If template_id doesn't exist
        """
        client = SupabaseClient.get_client()

        content = data.content
        if data.template_id and content is None:
            template = SupabaseClient.fetch_one("templates", "id", data.template_id)
            if not template:
                raise ResourceNotFoundError("Template", str(data.template_id))
            template_data = template.get("template_data") or {}
            content = {"sections": copy.deepcopy(template_data.get("sections") or [])}

        row = {
            "user_id": normalize_uuid(user_id),
            "title": data.title,
            "client_name": data.client_name,
            "client_email": data.client_email,
            "worth": data.worth,
            "content": content if content is not None else {"sections": []},
            "status": ProposalStatus.DRAFT.value,
            "template_id": str(data.template_id) if data.template_id else None,
            "brand_kit_id": str(data.brand_kit_id) if data.brand_kit_id else None,
            "requires_signature": data.requires_signature,
        }

        try:
            response = client.table("proposals").insert(row).execute()

            if response.data:
                proposal = response.data[0]
                logger.info(f"Created proposal: {proposal['id']} for user: {user_id}")
                return proposal

            raise Exception("Insert returned no data")

        except Exception as e:
            logger.error(f"Failed to create proposal: {e}")
            raise

    @staticmethod
    def get_proposal(
        proposal_id: str | UUID,
        user_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """
        Get a proposal by ID.

        Args:
            proposal_id: The proposal UUID
            user_id: If provided, verify the proposal belongs to this user

        Returns:
            Proposal dict

        Raises:
            ProposalNotFoundError: If proposal doesn't exist or user doesn't own it
        """
        proposal = SupabaseClient.fetch_proposal(proposal_id)

        if not proposal:
            raise ProposalNotFoundError(str(proposal_id))

        # Don't reveal that another user's proposal exists
        if user_id and str(proposal.get("user_id")) != str(user_id):
            raise ProposalNotFoundError(str(proposal_id))

        return proposal

    @staticmethod
    def list_proposals(
        user_id: UUID | str,
        page: int = 1,
        page_size: int = 10,
        status: ProposalStatus | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List proposals with pagination for a specific user.

        Args:
            user_id: Filter proposals by this user
            page: Page number (1-indexed)
            page_size: Items per page
            status: Optional status filter

        Returns:
            Tuple of (proposals list, total count)
        """
        client = SupabaseClient.get_client()

        query = client.table("proposals").select("*", count="exact")
        query = query.eq("user_id", normalize_uuid(user_id))

        if status:
            query = query.eq("status", status.value)

        offset = (page - 1) * page_size
        query = query.order("created_at", desc=True).range(offset, offset + page_size - 1)

        try:
            response = query.execute()
            return response.data or [], response.count or 0

        except Exception as e:
            logger.error(f"Failed to list proposals: {e}")
            raise

    @staticmethod
    def update_proposal(
        proposal_id: str | UUID,
        data: ProposalUpdate,
        user_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """
        Update a proposal with the fields set on data.

        Moving to "sent" stamps sent_at.

        Args:
            proposal_id: The proposal UUID
            data: Partial update
            user_id: If provided, verify the proposal belongs to this user

        Returns:
            Updated proposal dict

        Raises:
            ProposalNotFoundError: If proposal doesn't exist or user doesn't own it
        """
        proposal = ProposalService.get_proposal(proposal_id, user_id=user_id)

        update_data = data.model_dump(exclude_unset=True, mode="json")
        if not update_data:
            return proposal

        if update_data.get("status") == ProposalStatus.SENT.value and not proposal.get("sent_at"):
            update_data["sent_at"] = utc_now_iso()

        return ProposalService._write(proposal, update_data)

    @staticmethod
    def set_status(
        proposal_id: str | UUID,
        status: ProposalStatus,
    ) -> dict[str, Any]:
        """Set a proposal's status without an ownership check (system transitions)."""
        proposal = ProposalService.get_proposal(proposal_id)
        if proposal.get("status") == status.value:
            return proposal
        return ProposalService._write(proposal, {"status": status.value})

    @staticmethod
    def update_section(
        proposal_id: str | UUID,
        section_type: str,
        field: str,
        value: Any,
        user_id: UUID | str | None = None,
    ) -> dict[str, Any]:
        """
        Set one field on the first section with the given type.

        The section is appended when the proposal has none of that type.
        Numeric-keyed and bare-list content is rewritten into the
        {"sections": [...]} format.

        Args:
            proposal_id: The proposal UUID
            section_type: Section "type" tag (e.g. "executive_summary")
            field: Field name on the section (e.g. "content", "title")
            value: New value
            user_id: If provided, verify the proposal belongs to this user

        Returns:
            Updated proposal dict

        Raises:
            InvalidRequestError: If the proposal still uses the legacy flat map
        """
        proposal = ProposalService.get_proposal(proposal_id, user_id=user_id)
        sections = copy.deepcopy(normalize_sections(proposal.get("content")))

        if any(s.get("type") == "legacy" for s in sections):
            raise InvalidRequestError(
                "Legacy proposal content can't be edited by section",
                suggestion="Replace the whole content with PATCH /proposals/{id}",
            )

        target = next((s for s in sections if s.get("type") == section_type), None)
        if target is None:
            target = {"type": section_type}
            sections.append(target)
        target[field] = value

        # Styling keys stored next to "sections" survive the edit
        content = proposal.get("content")
        if isinstance(content, dict) and "sections" in content:
            new_content = {**content, "sections": sections}
        else:
            new_content = {"sections": sections}

        return ProposalService._write(proposal, {"content": new_content})

    @staticmethod
    def delete_proposal(
        proposal_id: str | UUID,
        user_id: UUID | str | None = None,
    ) -> None:
        """
        Permanently delete a proposal.

        Signatures, shares and analytics cascade in the database.
        """
        proposal = ProposalService.get_proposal(proposal_id, user_id=user_id)
        client = SupabaseClient.get_client()

        try:
            client.table("proposals").delete().eq("id", proposal["id"]).execute()
            logger.info(f"Deleted proposal: {proposal['id']}")
        except Exception as e:
            logger.error(f"Failed to delete proposal: {e}")
            raise

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    @staticmethod
    def _write(proposal: dict[str, Any], update_data: dict[str, Any]) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        update_data["updated_at"] = utc_now_iso()

        try:
            response = (
                client.table("proposals")
                .update(update_data)
                .eq("id", proposal["id"])
                .execute()
            )

            if response.data:
                logger.info(f"Updated proposal: {proposal['id']} ({', '.join(update_data)})")
                return response.data[0]

            return {**proposal, **update_data}

        except Exception as e:
            logger.error(f"Failed to update proposal: {e}")
            raise
