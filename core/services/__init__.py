# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .proposal_service import ProposalService
from .template_service import TemplateService
from .share_service import ShareService
from .signature_service import SignatureService
from .analytics_service import AnalyticsService
from .brand_kit_service import BrandKitService
from .company_profile_service import CompanyProfileService
from .storage_service import StorageService
from .webhook_service import WebhookService
from .payment_service import PaymentLinkService, PaymentSettingsService
from .subscription_service import SubscriptionService
from .billing_webhook_service import BillingWebhookService
from .content_service import ContentService
from .research_service import ResearchService
from .export_service import ExportService
from .email_service import EmailService

__all__ = [
    "ProposalService",
    "TemplateService",
    "ShareService",
    "SignatureService",
    "AnalyticsService",
    "BrandKitService",
    "CompanyProfileService",
    "StorageService",
    "WebhookService",
    "PaymentLinkService",
    "PaymentSettingsService",
    "SubscriptionService",
    "BillingWebhookService",
    "ContentService",
    "ResearchService",
    "ExportService",
    "EmailService",
]
