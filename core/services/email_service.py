# =============================================================================
# core/services/email_service.py - Transactional Email (Postmark)
# =============================================================================
# Sends the "proposal shared with you" email. Called from the Celery worker
# (workers/tasks.py), never inline from a request.
# =============================================================================

import html
import logging

from postmarker.core import PostmarkClient

from app.config import settings
from app.exceptions import InvalidRequestError

logger = logging.getLogger(__name__)

SHARE_EMAIL_TAG = "proposal-shared"

# Lazy-loaded Postmark client
_client = None


def get_postmark_client() -> PostmarkClient | None:
    """Get or create the Postmark client; None when no token is configured."""
    global _client
    if _client is None and settings.POSTMARK_SERVER_TOKEN:
        _client = PostmarkClient(server_token=settings.POSTMARK_SERVER_TOKEN)
    return _client


def share_email_subject(sender_name: str, proposal_title: str) -> str:
    return f"{sender_name} shared a proposal: {proposal_title}"


def build_share_email_html(
    sender_name: str,
    proposal_title: str,
    share_url: str,
    message: str | None = None,
    recipient_name: str | None = None,
) -> str:
    sender = html.escape(sender_name)
    title = html.escape(proposal_title)
    url = html.escape(share_url, quote=True)
    greeting = f"Hello {html.escape(recipient_name)}!" if recipient_name else "Hello!"
    note = ""
    if message:
        note = (
            '<p style="margin: 0 0 15px 0; font-size: 15px; color: #555; font-style: italic;">'
            f"{html.escape(message)}</p>"
        )

    return f"""<div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); padding: 30px; border-radius: 10px; text-align: center; margin-bottom: 30px;">
    <h1 style="color: white; margin: 0; font-size: 24px;">New Proposal Shared</h1>
  </div>
  <div style="background: #f8f9fa; padding: 25px; border-radius: 8px; margin-bottom: 25px;">
    <p style="margin: 0 0 15px 0; font-size: 16px; color: #333;">{greeting}</p>
    <p style="margin: 0 0 15px 0; font-size: 16px; color: #333;"><strong>{sender}</strong> has shared a proposal with you:</p>
    <h2 style="margin: 0 0 20px 0; color: #2d3748; font-size: 20px;">"{title}"</h2>
    {note}
    <div style="text-align: center;">
      <a href="{url}" style="background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 12px 30px; text-decoration: none; border-radius: 6px; display: inline-block; font-weight: 500;">View Proposal</a>
    </div>
  </div>
  <div style="color: #666; font-size: 14px; text-align: center; border-top: 1px solid #eee; padding-top: 20px;">
    <p style="margin: 0;">This proposal was shared via our secure platform.</p>
    <p style="margin: 5px 0 0 0;">If you have any questions, please contact {sender} directly.</p>
  </div>
</div>"""


def build_share_email_text(
    sender_name: str,
    proposal_title: str,
    share_url: str,
    message: str | None = None,
) -> str:
    lines = [
        f'{sender_name} has shared a proposal with you: "{proposal_title}"',
        "",
    ]
    if message:
        lines += [message, ""]
    lines += [f"View Proposal: {share_url}"]
    return "\n".join(lines)


class EmailService:
    """Service for outbound email."""

    @staticmethod
    def send_share_email(
        recipient_email: str,
        proposal_title: str,
        sender_name: str,
        share_url: str,
        message: str | None = None,
        recipient_name: str | None = None,
    ) -> str | None:
        """
        Email a share link.

        Returns:
            Postmark MessageID, or None when email is not configured

        Raises:
            InvalidRequestError: share_url is not a public /shared/ link
        """
        if not share_url or "/shared/" not in share_url:
            logger.error(f"Refusing to email non-public share URL: {share_url}")
            raise InvalidRequestError(
                "Share URL must use /shared/ route for public access",
                suggestion="Create a share link and send its share_url",
            )

        client = get_postmark_client()
        if client is None:
            logger.warning(f"POSTMARK_SERVER_TOKEN not set - share email to {recipient_email} not sent")
            return None

        response = client.emails.send(
            From=settings.EMAIL_FROM,
            To=recipient_email,
            Subject=share_email_subject(sender_name, proposal_title),
            HtmlBody=build_share_email_html(sender_name, proposal_title, share_url, message, recipient_name),
            TextBody=build_share_email_text(sender_name, proposal_title, share_url, message),
            TrackOpens=True,
            TrackLinks="HtmlOnly",
            Tag=SHARE_EMAIL_TAG,
        )
        logger.info(f"Share email sent to {recipient_email}: {response['MessageID']}")
        return response["MessageID"]
