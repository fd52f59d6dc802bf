# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized lookups used across services:
# - Proposals by id
# - Secure shares by token
# - Signers for a proposal
# - Active subscription and payment settings for a user
#
# Write paths live in the service classes; this module covers the shared
# reads and turns PostgREST "no rows" into None.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   proposal = SupabaseClient.fetch_proposal(proposal_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import parse_timestamp, utc_now

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST error code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        proposal = SupabaseClient.fetch_proposal("550e8400-...")
        share = SupabaseClient.fetch_share_by_token(token)
        signers = SupabaseClient.fetch_signatures(proposal["id"])
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Ownership is enforced by the service layer instead.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Generic Lookups
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_one(
        cls,
        table: str,
        column: str,
        value: Any,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a single row where column equals value.

        Args:
            table: Table name
            column: Column to match
            value: Value to match (UUIDs are normalized)
            columns: Select list (default: all columns)

        Returns:
            Row dict, or None if no row matches

        Raises:
            SupabaseClientError: If the query fails for any other reason

        Example:
            kit = SupabaseClient.fetch_one("brand_kits", "id", kit_id)
        """
        client = cls.get_client()
        if isinstance(value, UUID):
            value = str(value)

        try:
            response = (
                client.table(table)
                .select(columns)
                .eq(column, value)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code="FETCH_FAILED",
                suggestion=f"Check that the {table} table exists and {column} is valid",
                details={"table": table, "column": column, "value": str(value)}
            )

    # -------------------------------------------------------------------------
    # Proposals
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_proposal(cls, proposal_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a proposal by ID.

        Args:
            proposal_id: The proposal UUID

        Returns:
            Proposal dict with all fields, or None if not found
        """
        return cls.fetch_one("proposals", "id", cls._normalize_uuid(proposal_id))

    # -------------------------------------------------------------------------
    # Secure Shares
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_share_by_token(cls, share_token: str) -> dict[str, Any] | None:
        """
        Fetch a secure share by its (already normalized) token.

        Args:
            share_token: Standard base64 share token

        Returns:
            Share dict, or None if the token is unknown
        """
        return cls.fetch_one("secure_proposal_shares", "share_token", share_token)

    # -------------------------------------------------------------------------
    # Signatures
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_signatures(cls, proposal_id: str | UUID) -> list[dict[str, Any]]:
        """
        Fetch the signers of a proposal in the order they were added.

        Args:
            proposal_id: The proposal UUID

        Returns:
            List of signature dicts ordered by created_at (oldest first)

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        proposal_id_str = cls._normalize_uuid(proposal_id)

        try:
            response = (
                client.table("proposal_signatures")
                .select("*")
                .eq("proposal_id", proposal_id_str)
                .order("created_at")
                .execute()
            )
            signers = response.data or []
            logger.debug(f"Fetched {len(signers)} signers for proposal {proposal_id_str}")
            return signers

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch signatures: {e}",
                code="FETCH_SIGNATURES_FAILED",
                details={"proposal_id": proposal_id_str}
            )

    # -------------------------------------------------------------------------
    # Billing
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_active_subscription(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch the user's active subscription whose period hasn't ended.

        A subscription with no current_period_end counts as active.

        Args:
            user_id: The user UUID

        Returns:
            Subscription dict, or None if the user has no active plan

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("subscriptions")
                .select("*")
                .eq("user_id", user_id_str)
                .eq("status", "active")
                .order("current_period_end", desc=True)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch subscription: {e}",
                code="FETCH_SUBSCRIPTION_FAILED",
                details={"user_id": user_id_str}
            )

        now = utc_now()
        for row in response.data or []:
            period_end = parse_timestamp(row.get("current_period_end"))
            if period_end is None or period_end > now:
                return row
        return None

    @classmethod
    def fetch_payment_settings(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a user's payment provider credentials.

        Args:
            user_id: The user UUID

        Returns:
            user_payment_settings row, or None if never configured
        """
        return cls.fetch_one("user_payment_settings", "user_id", cls._normalize_uuid(user_id))
