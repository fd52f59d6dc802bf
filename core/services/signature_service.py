# =============================================================================
# core/services/signature_service.py - E-Signatures
# =============================================================================
# Manages proposal signers and signature capture.
#
# Signing is open to the proposal owner and to share visitors whose link
# grants requireSignature. Once every signer has signed, the proposal
# moves to "signed".
# =============================================================================

import base64
import io
import logging
from typing import Any
from uuid import UUID

from PIL import Image, ImageDraw, ImageFont

from app.exceptions import ResourceNotFoundError, SignatureStateError
from core.models.proposal import ProposalStatus
from core.models.signature import SignatureStatus, SignatureSummary, SignerCreate, SignRequest
from core.services.proposal_service import ProposalService
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

SIGNATURE_SIZE = (400, 100)
SIGNATURE_FONT_SIZE = 36


def render_typed_signature(name: str) -> str:
    """
    Render a typed name as a PNG data URL.

    Returns:
        "data:image/png;base64,..." string, 400x100, dark ink on white
    """
    image = Image.new("RGB", SIGNATURE_SIZE, "white")
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default(size=SIGNATURE_FONT_SIZE)

    left, top, right, bottom = draw.textbbox((0, 0), name, font=font)
    x = max((SIGNATURE_SIZE[0] - (right - left)) // 2, 4)
    y = (SIGNATURE_SIZE[1] - (bottom - top)) // 2 - top
    draw.text((x, y), name, fill="#1f2937", font=font)
    draw.line((20, 85, SIGNATURE_SIZE[0] - 20, 85), fill="#9ca3af", width=1)

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def _with_order(signers: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [{**signer, "order": index} for index, signer in enumerate(signers, start=1)]


class SignatureService:
    """Service for proposal signers."""

    @staticmethod
    def list_signers(
        proposal_id: str | UUID,
        user_id: UUID | str,
    ) -> list[dict[str, Any]]:
        """List signers in signing order."""
        proposal = ProposalService.get_proposal(proposal_id, user_id=user_id)
        return _with_order(SupabaseClient.fetch_signatures(proposal["id"]))

    @staticmethod
    def add_signer(
        proposal_id: str | UUID,
        user_id: UUID | str,
        data: SignerCreate,
    ) -> dict[str, Any]:
        """
        Add a pending signer to a proposal.

        Returns:
            Signer row with its order
        """
        proposal = ProposalService.get_proposal(proposal_id, user_id=user_id)
        client = SupabaseClient.get_client()

        row = {
            "proposal_id": proposal["id"],
            "signer_name": data.signer_name,
            "signer_email": data.signer_email,
            "status": SignatureStatus.PENDING.value,
        }

        try:
            response = client.table("proposal_signatures").insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to add signer: {e}")
            raise

        signer = response.data[0] if response.data else row
        existing = SupabaseClient.fetch_signatures(proposal["id"])
        order = next(
            (i for i, s in enumerate(existing, start=1) if s.get("id") == signer.get("id")),
            len(existing),
        )
        logger.info(f"Added signer to proposal {proposal['id']}")
        return {**signer, "order": max(order, 1)}

    @staticmethod
    def remove_signer(
        signature_id: str | UUID,
        user_id: UUID | str,
    ) -> None:
        """Remove a signer. The owner of the signer's proposal only."""
        signer = SignatureService._get_signer(signature_id)
        ProposalService.get_proposal(signer["proposal_id"], user_id=user_id)

        client = SupabaseClient.get_client()
        client.table("proposal_signatures").delete().eq("id", signer["id"]).execute()
        logger.info(f"Removed signer {signer['id']}")

    @staticmethod
    def sign(
        signature_id: str | UUID,
        request: SignRequest,
        ip_address: str | None = None,
        user_agent: str | None = None,
        user_id: UUID | str | None = None,
        share_token: str | None = None,
    ) -> dict[str, Any]:
        """
        Capture a signature.

        Exactly one of user_id (owner) or share_token (visitor) authorizes
        the call.

        Returns:
            Dict with:
            - signature: Updated signer row
            - all_signed: Whether every signer has now signed
            - proposal: The proposal row (status "signed" when all_signed)

        Raises:
            ResourceNotFoundError: Unknown signer, or signer not on the shared proposal
            SignatureStateError: Signer already signed or declined
            ShareForbiddenError: Share doesn't grant requireSignature
        """
        signer = SignatureService._authorize(signature_id, user_id, share_token)
        if signer.get("status") != SignatureStatus.PENDING.value:
            raise SignatureStateError(str(signer["id"]), signer.get("status"))

        signature_data = request.signature_data or render_typed_signature(request.typed_name)
        update = {
            "status": SignatureStatus.SIGNED.value,
            "signature_data": signature_data,
            "signed_at": utc_now_iso(),
            "ip_address": ip_address,
            "user_agent": user_agent,
        }

        client = SupabaseClient.get_client()
        try:
            response = client.table("proposal_signatures").update(update).eq("id", signer["id"]).execute()
        except Exception as e:
            logger.error(f"Failed to record signature {signer['id']}: {e}")
            raise

        signed = response.data[0] if response.data else {**signer, **update}
        logger.info(f"Signer {signer['id']} signed proposal {signer['proposal_id']}")

        signers = SupabaseClient.fetch_signatures(signer["proposal_id"])
        all_signed = bool(signers) and all(
            s.get("status") == SignatureStatus.SIGNED.value for s in signers
        )

        if all_signed:
            proposal = ProposalService.set_status(signer["proposal_id"], ProposalStatus.SIGNED)
        else:
            proposal = ProposalService.get_proposal(signer["proposal_id"])

        return {"signature": signed, "all_signed": all_signed, "proposal": proposal}

    @staticmethod
    def decline(
        signature_id: str | UUID,
        user_id: UUID | str | None = None,
        share_token: str | None = None,
    ) -> dict[str, Any]:
        """Mark a pending signer as declined."""
        signer = SignatureService._authorize(signature_id, user_id, share_token)
        if signer.get("status") != SignatureStatus.PENDING.value:
            raise SignatureStateError(str(signer["id"]), signer.get("status"))

        client = SupabaseClient.get_client()
        update = {"status": SignatureStatus.DECLINED.value}
        response = client.table("proposal_signatures").update(update).eq("id", signer["id"]).execute()
        logger.info(f"Signer {signer['id']} declined")
        return response.data[0] if response.data else {**signer, **update}

    @staticmethod
    def get_summary(
        proposal_id: str | UUID,
        user_id: UUID | str,
    ) -> SignatureSummary:
        """Signing progress for a proposal."""
        signers = SignatureService.list_signers(proposal_id, user_id)
        return summarize_signers(signers)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    @staticmethod
    def _get_signer(signature_id: str | UUID) -> dict[str, Any]:
        signer = SupabaseClient.fetch_one("proposal_signatures", "id", normalize_uuid(signature_id))
        if not signer:
            raise ResourceNotFoundError("Signature", str(signature_id))
        return signer

    @staticmethod
    def _authorize(
        signature_id: str | UUID,
        user_id: UUID | str | None,
        share_token: str | None,
    ) -> dict[str, Any]:
        from core.services.share_service import ShareService

        signer = SignatureService._get_signer(signature_id)

        if user_id is not None:
            ProposalService.get_proposal(signer["proposal_id"], user_id=user_id)
            return signer

        share = ShareService.get_valid_share(share_token or "")
        if str(share["proposal_id"]) != str(signer["proposal_id"]):
            raise ResourceNotFoundError("Signature", str(signature_id))
        ShareService.require_permission(share, "require_signature")
        return signer


def summarize_signers(signers: list[dict[str, Any]]) -> SignatureSummary:
    """
    Count signed signers.

    Example:
        summarize_signers([{"status": "signed", ...}, {"status": "pending", ...}])
        # signed=1, total=2, percent=50, all_signed=False
    """
    ordered = signers if all("order" in s for s in signers) else _with_order(signers)
    total = len(ordered)
    signed = sum(1 for s in ordered if s.get("status") == SignatureStatus.SIGNED.value)
    percent = round(signed * 100 / total) if total else 0
    return SignatureSummary(
        signers=ordered,
        signed=signed,
        total=total,
        percent=percent,
        all_signed=total > 0 and signed == total,
    )
