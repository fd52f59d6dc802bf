# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error carries a machine-readable code and, where possible, a
# suggestion telling the caller how to fix the request.
# =============================================================================

import math
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class ProposalKraftException(Exception):
    """
    Base exception for the ProposalKraft API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "PROPOSALKRAFT_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Resource Exceptions
# =============================================================================

class ResourceNotFoundError(ProposalKraftException):
    """Raised when a row doesn't exist or belongs to another user."""

    def __init__(self, resource: str, resource_id: str | None = None):
        super().__init__(
            message=f"{resource} not found" + (f": {resource_id}" if resource_id else ""),
            code=f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {resource.lower()} id is correct and that you own it",
            details={"id": resource_id} if resource_id else None,
        )


class ProposalNotFoundError(ResourceNotFoundError):
    """Raised when a proposal ID doesn't exist."""

    def __init__(self, proposal_id: str | None = None):
        super().__init__("Proposal", proposal_id)


class InvalidRequestError(ProposalKraftException):
    """Raised for semantically invalid input that passed schema validation."""

    def __init__(self, message: str, suggestion: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="INVALID_REQUEST",
            status_code=400,
            suggestion=suggestion,
            details=details,
        )


# =============================================================================
# Auth Exceptions
# =============================================================================

class AuthenticationError(ProposalKraftException):
    """Raised when a bearer token is missing, expired or fails verification."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            status_code=401,
            suggestion="Sign in again to get a fresh access token",
        )


# =============================================================================
# Share Exceptions
# =============================================================================

class ShareNotFoundError(ProposalKraftException):
    """Raised when a share token doesn't match any share."""

    def __init__(self):
        super().__init__(
            message="Invalid or expired share link",
            code="SHARE_NOT_FOUND",
            status_code=404,
            suggestion="Ask the proposal owner for a new share link",
        )


class ShareExpiredError(ProposalKraftException):
    """Raised when a share token exists but its expiry has passed."""

    def __init__(self, expires_at: str | None = None):
        super().__init__(
            message="This share link has expired",
            code="SHARE_EXPIRED",
            status_code=410,
            suggestion="Ask the proposal owner to share the proposal again",
            details={"expires_at": expires_at} if expires_at else None,
        )


class ShareForbiddenError(ProposalKraftException):
    """Raised when a share doesn't grant the requested action."""

    def __init__(self, action: str):
        super().__init__(
            message=f"This share link does not allow {action}",
            code="SHARE_FORBIDDEN",
            status_code=403,
            suggestion="Ask the proposal owner to enable this permission",
            details={"action": action},
        )


# =============================================================================
# Signature Exceptions
# =============================================================================

class SignatureStateError(ProposalKraftException):
    """Raised when a signer has already signed or declined."""

    def __init__(self, signature_id: str, status: str):
        super().__init__(
            message=f"Signature request is already {status}",
            code="SIGNATURE_ALREADY_COMPLETED",
            status_code=409,
            suggestion="Add a new signer if another signature is needed",
            details={"signature_id": signature_id, "status": status},
        )


# =============================================================================
# Billing Exceptions
# =============================================================================

class InvalidAmountError(ProposalKraftException):
    """Raised when a payment amount is missing or not positive."""

    def __init__(self, amount: Any = None):
        # NaN and Infinity are not valid JSON in the response body
        if isinstance(amount, float) and not math.isfinite(amount):
            amount = str(amount)
        super().__init__(
            message="Invalid amount",
            code="INVALID_AMOUNT",
            status_code=400,
            suggestion="Provide an amount greater than zero",
            details={"amount": amount} if amount is not None else None,
        )


class PaymentSettingsMissingError(ProposalKraftException):
    """Raised when the user hasn't configured the requested payment provider."""

    def __init__(self, provider: str):
        super().__init__(
            message=f"{provider.title()} payment settings are not configured",
            code="PAYMENT_SETTINGS_MISSING",
            status_code=400,
            suggestion=f"Add your {provider.title()} credentials under payment settings",
            details={"provider": provider},
        )


class PaymentProviderError(ProposalKraftException):
    """Raised when Stripe or PayPal rejects a request."""

    def __init__(self, provider: str, error: str):
        super().__init__(
            message=f"{provider.title()} request failed: {error}",
            code="PAYMENT_PROVIDER_ERROR",
            status_code=502,
            suggestion="Check your provider credentials and try again",
            details={"provider": provider},
        )


class InvalidPlanError(ProposalKraftException):
    """Raised when a plan type has no configured provider plan id."""

    def __init__(self, plan_type: str):
        super().__init__(
            message=f"Invalid plan selected: {plan_type}",
            code="INVALID_PLAN",
            status_code=400,
            suggestion="Choose one of: freelance, agency, enterprise",
            details={"plan_type": plan_type},
        )


class SubscriptionRequiredError(ProposalKraftException):
    """Raised when an authoring endpoint is called without an active plan."""

    def __init__(self):
        super().__init__(
            message="Subscription required",
            code="SUBSCRIPTION_REQUIRED",
            status_code=402,
            suggestion="Subscribe to a plan to use this feature",
        )


class WebhookSignatureError(ProposalKraftException):
    """Raised when an inbound provider webhook fails verification."""

    def __init__(self, provider: str, status_code: int = 401):
        super().__init__(
            message=f"Invalid {provider} webhook signature",
            code="INVALID_WEBHOOK_SIGNATURE",
            status_code=status_code,
            details={"provider": provider},
        )


class InvalidWebhookPayloadError(ProposalKraftException):
    """Raised when a provider webhook body is missing required fields."""

    def __init__(self):
        super().__init__(
            message="Invalid webhook data",
            code="INVALID_WEBHOOK_DATA",
            status_code=400,
        )


# =============================================================================
# Throttling / AI Exceptions
# =============================================================================

class RateLimitedError(ProposalKraftException):
    """Raised when a caller or upstream exceeds its request quota."""

    def __init__(self, message: str = "Rate limits exceeded", retry_after: int | None = None):
        super().__init__(
            message=message,
            code="RATE_LIMITED",
            status_code=429,
            suggestion="Please try again later",
            details={"retry_after": retry_after} if retry_after else None,
        )


class AIPaymentRequiredError(ProposalKraftException):
    """Raised when the AI provider reports exhausted credits."""

    def __init__(self):
        super().__init__(
            message="Payment required",
            code="AI_PAYMENT_REQUIRED",
            status_code=402,
            suggestion="Add credits to the AI provider account",
        )


# =============================================================================
# Storage Exceptions
# =============================================================================

class InvalidFileTypeError(ProposalKraftException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, filename: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid file type: {filename}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion=f"Only these file types are supported: {', '.join(allowed)}",
            details={"filename": filename, "allowed_types": allowed}
        )


class FileTooLargeError(ProposalKraftException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb}
        )


class StorageUploadError(ProposalKraftException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload file to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def proposalkraft_exception_handler(
    request: Request,
    exc: ProposalKraftException
) -> JSONResponse:
    """
    Convert ProposalKraftException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def library_error_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle errors raised by lib/ clients (Supabase, PayPal).

    These carry code and suggestion but no HTTP status; upstream failures
    surface as 502.
    """
    content = {
        "detail": getattr(exc, "message", str(exc)),
        "code": getattr(exc, "code", "UPSTREAM_ERROR"),
    }
    suggestion = getattr(exc, "suggestion", None)
    if suggestion:
        content["suggestion"] = suggestion
    return JSONResponse(status_code=502, content=content)
