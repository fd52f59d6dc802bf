# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - proposal.py: Proposal CRUD schemas
# - share.py: Secure share links and the public shared view
# - signature.py: E-signature signers and capture
# - brand_kit.py / company_profile.py: Branding
# - analytics.py: Engagement events and summary
# - webhook.py: Outbound webhook configuration
# - payment.py: Payment settings and payment links
# - subscription.py: Platform subscription status
# - template.py: Templates, AI content generation, company research
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Proposal Models
# -----------------------------------------------------------------------------
from .proposal import (
    ProposalCreate,
    ProposalList,
    ProposalResponse,
    ProposalStatus,
    ProposalUpdate,
    SectionUpdate,
)

# -----------------------------------------------------------------------------
# Sharing and Signatures
# -----------------------------------------------------------------------------
from .share import (
    ShareCreate,
    ShareEmailRequest,
    SharePermissions,
    ShareResponse,
    SharedProposalView,
    SharedSigner,
)
from .signature import (
    SignatureResponse,
    SignatureStatus,
    SignatureSummary,
    SignerCreate,
    SignRequest,
)

# -----------------------------------------------------------------------------
# Branding
# -----------------------------------------------------------------------------
from .brand_kit import BrandKitCreate, BrandKitResponse, BrandKitUpdate
from .company_profile import CompanyProfileResponse, CompanyProfileUpdate, LogoUploadResponse

# -----------------------------------------------------------------------------
# Analytics and Webhooks
# -----------------------------------------------------------------------------
from .analytics import (
    AnalyticsEventCreate,
    AnalyticsEventType,
    AnalyticsSummary,
    DailyViews,
    SectionStat,
)
from .webhook import (
    WebhookConfigCreate,
    WebhookConfigResponse,
    WebhookConfigUpdate,
    WebhookEvent,
    WebhookTriggerRequest,
)

# -----------------------------------------------------------------------------
# Billing
# -----------------------------------------------------------------------------
from .payment import (
    BillingInterval,
    PaymentLinkCreate,
    PaymentLinkResponse,
    PaymentLinkStatus,
    PaymentProvider,
    PaymentSettingsResponse,
    PaymentSettingsUpdate,
    PaymentType,
)
from .subscription import (
    PlanPaymentCreate,
    PlanPaymentResponse,
    PlanType,
    SubscriptionCheckoutResponse,
    SubscriptionCreate,
    SubscriptionStatus,
    SubscriptionStatusResponse,
)

# -----------------------------------------------------------------------------
# Templates and Content
# -----------------------------------------------------------------------------
from .template import (
    CompanyResearch,
    CompanyResearchRequest,
    ContentGenerateRequest,
    ContentGenerateResponse,
    TemplateResponse,
)

__all__ = [
    # Proposal
    "ProposalCreate",
    "ProposalList",
    "ProposalResponse",
    "ProposalStatus",
    "ProposalUpdate",
    "SectionUpdate",
    # Share
    "ShareCreate",
    "ShareEmailRequest",
    "SharePermissions",
    "ShareResponse",
    "SharedProposalView",
    "SharedSigner",
    # Signature
    "SignatureResponse",
    "SignatureStatus",
    "SignatureSummary",
    "SignerCreate",
    "SignRequest",
    # Branding
    "BrandKitCreate",
    "BrandKitResponse",
    "BrandKitUpdate",
    "CompanyProfileResponse",
    "CompanyProfileUpdate",
    "LogoUploadResponse",
    # Analytics
    "AnalyticsEventCreate",
    "AnalyticsEventType",
    "AnalyticsSummary",
    "DailyViews",
    "SectionStat",
    # Webhooks
    "WebhookConfigCreate",
    "WebhookConfigResponse",
    "WebhookConfigUpdate",
    "WebhookEvent",
    "WebhookTriggerRequest",
    # Payments
    "BillingInterval",
    "PaymentLinkCreate",
    "PaymentLinkResponse",
    "PaymentLinkStatus",
    "PaymentProvider",
    "PaymentSettingsResponse",
    "PaymentSettingsUpdate",
    "PaymentType",
    # Subscription
    "PlanPaymentCreate",
    "PlanPaymentResponse",
    "PlanType",
    "SubscriptionCheckoutResponse",
    "SubscriptionCreate",
    "SubscriptionStatus",
    "SubscriptionStatusResponse",
    # Templates
    "CompanyResearch",
    "CompanyResearchRequest",
    "ContentGenerateRequest",
    "ContentGenerateResponse",
    "TemplateResponse",
]
