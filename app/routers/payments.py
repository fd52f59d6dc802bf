# =============================================================================
# app/routers/payments.py - Payment Settings and Payment Link Endpoints
# =============================================================================
# Users connect their own Stripe / PayPal accounts and generate links that
# let clients pay for a proposal.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import get_current_user, AuthUser
from app.dependencies import SubscribedUser
from core.models.payment import (
    PaymentLinkCreate,
    PaymentLinkResponse,
    PaymentSettingsResponse,
    PaymentSettingsUpdate,
)
from core.services.payment_service import PaymentLinkService, PaymentSettingsService

router = APIRouter()


@router.get("/payment-settings", response_model=PaymentSettingsResponse)
async def get_payment_settings(user: AuthUser = Depends(get_current_user)):
    """Provider settings with secrets masked."""
    return PaymentSettingsService.get_settings(user.id)


@router.put("/payment-settings", response_model=PaymentSettingsResponse)
async def update_payment_settings(
    request: PaymentSettingsUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Save Stripe and PayPal credentials. Omitted fields are left unchanged."""
    return PaymentSettingsService.upsert_settings(user.id, request)


@router.get("/proposals/{proposal_id}/payment-links", response_model=list[PaymentLinkResponse])
async def list_payment_links(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """List a proposal's payment links, newest first."""
    return [PaymentLinkResponse(**link) for link in PaymentLinkService.list_links(proposal_id, user.id)]


@router.post(
    "/proposals/{proposal_id}/payment-links",
    response_model=PaymentLinkResponse,
    status_code=201,
)
async def create_payment_link(
    proposal_id: Annotated[UUID, Path(description="Proposal UUID")],
    request: PaymentLinkCreate,
    user: SubscribedUser,
):
    """
    Generate a Stripe or PayPal payment link.

    The amount must be positive. Stripe links need a secret key in the
    payment settings; PayPal uses the REST credentials when present and a
    PayPal.me URL otherwise.
    """
    link = PaymentLinkService.create_link(proposal_id, user.id, request)
    return PaymentLinkResponse(**link)
