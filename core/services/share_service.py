# =============================================================================
# core/services/share_service.py - Secure Share Links
# =============================================================================
# Creates, lists, revokes and resolves token-addressable proposal links.
#
# Tokens are 32 random bytes in standard base64 (stored form). Public URLs
# carry the URL-safe form without padding; resolve_share() maps either
# form, plus common copy/paste damage, back to the stored token.
# =============================================================================

import base64
import json
import logging
import secrets
from datetime import timedelta
from typing import Any
from urllib.parse import unquote
from uuid import UUID

from app.config import settings
from app.exceptions import (
    ResourceNotFoundError,
    ShareExpiredError,
    ShareForbiddenError,
    ShareNotFoundError,
    ProposalNotFoundError,
)
from core.models.proposal import ProposalStatus
from core.models.share import ShareCreate, SharePermissions, SharedProposalView, SharedSigner
from core.services.proposal_service import ProposalService
from lib.content_renderer import render_sections
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, parse_timestamp, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

# Proposal fields exposed to anonymous visitors
PUBLIC_PROPOSAL_FIELDS = ("id", "title", "client_name", "client_email", "worth", "created_at", "status")


# =============================================================================
# Token Helpers
# =============================================================================

def generate_share_token() -> str:
    """Generate a new share token (standard base64, 44 chars)."""
    return base64.b64encode(secrets.token_bytes(32)).decode("ascii")


def to_url_token(token: str) -> str:
    """Convert a stored token to its URL-safe, unpadded form."""
    return token.replace("+", "-").replace("/", "_").rstrip("=")


def normalize_share_token(raw: str) -> str:
    """
    Map a token from a URL back to its stored form.

    Steps: URL-decode, turn whitespace back into "+" (a decoded "+"
    becomes a space), translate base64url to base64, then re-pad.

    Example:
        normalize_share_token("ab-c_d")  # "ab+c/d=="
    """
    token = unquote(raw or "").strip()
    token = "".join("+" if ch.isspace() else ch for ch in token)
    token = token.replace("-", "+").replace("_", "/")
    remainder = len(token) % 4
    if remainder:
        token += "=" * (4 - remainder)
    return token


def build_share_url(token: str) -> str:
    """Public URL for a share token."""
    return f"{settings.PUBLIC_APP_URL.rstrip('/')}/shared/{to_url_token(token)}"


def parse_permissions(raw: Any) -> SharePermissions:
    """
    Parse stored permissions (JSON string or dict) into SharePermissions.

    Unparseable values fall back to the defaults.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Share has malformed permissions JSON, using defaults")
            raw = {}
    if not isinstance(raw, dict):
        raw = {}
    return SharePermissions.model_validate(raw)


# =============================================================================
# Service
# =============================================================================

class ShareService:
    """
    Service for secure share links.

    Owner operations verify proposal ownership; resolve_share() is the
    anonymous entry point.
    """

    @staticmethod
    def create_share(
        proposal_id: str | UUID,
        user_id: UUID | str,
        data: ShareCreate,
    ) -> dict[str, Any]:
        """
        Create a secure share for a proposal.

        Args:
            proposal_id: The proposal UUID
            user_id: Owner; must own the proposal
            data: Expiry, permissions and snapshot options

        Returns:
            Share row with "share_url" added

        Raises:
            ProposalNotFoundError: If proposal doesn't exist or user doesn't own it
        """
        proposal = ProposalService.get_proposal(proposal_id, user_id=user_id)
        client = SupabaseClient.get_client()

        days = data.expires_in_days or settings.SHARE_DEFAULT_EXPIRY_DAYS
        token = generate_share_token()
        row = {
            "proposal_id": proposal["id"],
            "created_by": normalize_uuid(user_id),
            "share_token": token,
            "permissions": data.permissions.model_dump_json(by_alias=True),
            "expires_at": (utc_now() + timedelta(days=days)).isoformat(),
            "content_snapshot": proposal.get("content") if data.snapshot else None,
            "accessed_count": 0,
        }

        try:
            response = client.table("secure_proposal_shares").insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to create share: {e}")
            raise

        share = response.data[0] if response.data else row

        if not proposal.get("sharing_enabled"):
            client.table("proposals").update({"sharing_enabled": True}).eq("id", proposal["id"]).execute()

        logger.info(f"Created share for proposal {proposal['id']} expiring in {days} days")
        return {**share, "share_url": build_share_url(share["share_token"])}

    @staticmethod
    def list_shares(
        proposal_id: str | UUID,
        user_id: UUID | str,
    ) -> list[dict[str, Any]]:
        """List a proposal's shares, newest first, each with its share_url."""
        proposal = ProposalService.get_proposal(proposal_id, user_id=user_id)
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("secure_proposal_shares")
                .select("*")
                .eq("proposal_id", proposal["id"])
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to list shares: {e}")
            raise

        return [
            {**share, "share_url": build_share_url(share["share_token"])}
            for share in response.data or []
        ]

    @staticmethod
    def revoke_share(
        share_id: str | UUID,
        user_id: UUID | str,
    ) -> None:
        """
        Delete a share so its link stops working.

        Raises:
            ResourceNotFoundError: If the share doesn't exist or belongs to
                another user's proposal
        """
        share = SupabaseClient.fetch_one("secure_proposal_shares", "id", normalize_uuid(share_id))
        if not share:
            raise ResourceNotFoundError("Share", str(share_id))

        try:
            ProposalService.get_proposal(share["proposal_id"], user_id=user_id)
        except ProposalNotFoundError:
            raise ResourceNotFoundError("Share", str(share_id))

        client = SupabaseClient.get_client()
        client.table("secure_proposal_shares").delete().eq("id", share["id"]).execute()
        logger.info(f"Revoked share {share['id']}")

    # -------------------------------------------------------------------------
    # Public Access
    # -------------------------------------------------------------------------

    @staticmethod
    def get_valid_share(raw_token: str) -> dict[str, Any]:
        """
        Look up a share by raw token and check it hasn't expired.

        Raises:
            ShareNotFoundError: 404 if the token is unknown
            ShareExpiredError: 410 if the share has expired
        """
        token = normalize_share_token(raw_token)
        share = SupabaseClient.fetch_share_by_token(token)
        if not share:
            logger.info("Share lookup failed for unknown token")
            raise ShareNotFoundError()

        expires_at = parse_timestamp(share.get("expires_at"))
        if expires_at and expires_at <= utc_now():
            raise ShareExpiredError(share.get("expires_at"))

        return share

    @staticmethod
    def require_permission(share: dict[str, Any], permission: str) -> SharePermissions:
        """
        Check that a share grants a permission (snake_case field name).

        Raises:
            ShareForbiddenError: If the permission isn't granted
        """
        permissions = parse_permissions(share.get("permissions"))
        if not getattr(permissions, permission, False):
            raise ShareForbiddenError(permission.replace("_", " "))
        return permissions

    @staticmethod
    def resolve_share(
        raw_token: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
        visitor_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Resolve a public share link into a viewable proposal.

        A frozen content_snapshot takes precedence over live content. When
        the share tracks views, the visit is recorded and a sent proposal
        becomes viewed.

        Args:
            raw_token: Token from the URL
            ip_address: Visitor IP (for analytics)
            user_agent: Visitor user agent (for analytics)
            visitor_id: Client-generated visitor id (for unique viewers)

        Returns:
            Dict with:
            - view: SharedProposalView for the visitor
            - proposal: Full proposal row (for event emission)
            - tracked: Whether a view was recorded

        Raises:
            ShareNotFoundError: Unknown token (404)
            ShareExpiredError: Expired share (410)
            ProposalNotFoundError: Proposal was deleted (404)
        """
        share = ShareService.get_valid_share(raw_token)

        proposal = SupabaseClient.fetch_proposal(share["proposal_id"])
        if not proposal:
            raise ProposalNotFoundError()

        content = share.get("content_snapshot")
        if content is None:
            content = proposal.get("content")

        public_proposal = {field: proposal.get(field) for field in PUBLIC_PROPOSAL_FIELDS}
        permissions = parse_permissions(share.get("permissions"))

        signers = [
            SharedSigner(
                id=signer["id"],
                signer_name=signer["signer_name"],
                signer_email=signer.get("signer_email"),
                status=signer.get("status", "pending"),
                signed_at=signer.get("signed_at"),
                order=index,
            )
            for index, signer in enumerate(SupabaseClient.fetch_signatures(proposal["id"]), start=1)
        ]

        tracked = False
        if permissions.track_views:
            tracked = ShareService._record_visit(share, proposal, ip_address, user_agent, visitor_id)

        view = SharedProposalView(
            proposal=public_proposal,
            sections=render_sections(content),
            signers=signers,
            permissions=permissions,
            expires_at=share.get("expires_at"),
        )
        return {"view": view, "proposal": proposal, "tracked": tracked}

    @staticmethod
    def _record_visit(
        share: dict[str, Any],
        proposal: dict[str, Any],
        ip_address: str | None,
        user_agent: str | None,
        visitor_id: str | None,
    ) -> bool:
        """Record a tracked visit. Returns False (and logs) on failure."""
        from core.services.analytics_service import AnalyticsService

        client = SupabaseClient.get_client()
        try:
            AnalyticsService.insert_event(
                proposal_id=proposal["id"],
                event_type="view",
                visitor_id=visitor_id,
                ip_address=ip_address,
                user_agent=user_agent,
                metadata={"share_id": share["id"]},
            )
            client.table("secure_proposal_shares").update({
                "accessed_count": (share.get("accessed_count") or 0) + 1,
                "last_accessed_at": utc_now_iso(),
            }).eq("id", share["id"]).execute()

            if proposal.get("status") == ProposalStatus.SENT.value:
                ProposalService.set_status(proposal["id"], ProposalStatus.VIEWED)
        except Exception as e:
            logger.warning(f"Failed to record share visit for {share['id']}: {e}")
            return False
        return True
