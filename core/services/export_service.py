# =============================================================================
# core/services/export_service.py - Proposal Export (PDF / HTML)
# =============================================================================
# Renders a proposal to a downloadable document:
#
#   cover block (title, client, tagline, generated date)
#   then each selected section from lib/content_renderer
#
# PDF output is A4 via reportlab platypus. Brand kit colors replace the
# default green when the proposal references a kit.
# =============================================================================

import html
import io
import logging
import re
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    HRFlowable,
    KeepTogether,
    ListFlowable,
    ListItem,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from core.services.proposal_service import ProposalService
from lib.content_renderer import (
    RenderedSection,
    filter_sections,
    render_html,
    render_sections,
)
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now

logger = logging.getLogger(__name__)

DEFAULT_ACCENT = "#22c55e"
TEXT_COLOR = "#1f2937"
MUTED_COLOR = "#6b7280"
BORDER_COLOR = "#dddddd"
COVER_KEY = "cover"

MEDIA_TYPES = {
    "pdf": "application/pdf",
    "html": "text/html; charset=utf-8",
}


@dataclass
class ExportedDocument:
    """A rendered export ready to stream."""
    content: bytes
    filename: str
    media_type: str


def export_filename(title: str | None, fmt: str) -> str:
    """
    Example:
        export_filename("Acme / Q3 Website", "pdf")  # "Acme___Q3_Website_proposal.pdf"
    """
    safe = re.sub(r"[^a-zA-Z0-9]", "_", title or "proposal")
    return f"{safe}_proposal.pdf" if fmt == "pdf" else f"{safe}.html"


def _tagline(sections: list[RenderedSection]) -> str:
    cover = next((s for s in sections if s.type == "cover_page"), None)
    return (cover.subtitle or "") if cover else ""


def _para_text(value: Any) -> str:
    """Escape for reportlab paragraph markup, keeping line breaks."""
    return html.escape(str(value or "")).replace("\n", "<br/>")


# =============================================================================
# PDF
# =============================================================================

def _pdf_styles(accent: str) -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()["Normal"]
    accent_color = HexColor(accent)
    return {
        "title": ParagraphStyle(
            "CoverTitle", parent=base, fontName="Helvetica-Bold", fontSize=26,
            leading=32, textColor=accent_color, alignment=TA_CENTER, spaceAfter=8,
        ),
        "client": ParagraphStyle(
            "CoverClient", parent=base, fontName="Helvetica", fontSize=15,
            leading=20, textColor=HexColor("#666666"), alignment=TA_CENTER, spaceAfter=10,
        ),
        "meta": ParagraphStyle(
            "CoverMeta", parent=base, fontName="Helvetica", fontSize=10,
            leading=14, textColor=HexColor(MUTED_COLOR), alignment=TA_CENTER, spaceAfter=4,
        ),
        "heading": ParagraphStyle(
            "SectionHead", parent=base, fontName="Helvetica-Bold", fontSize=15,
            leading=19, textColor=accent_color, spaceBefore=14, spaceAfter=8,
        ),
        "subheading": ParagraphStyle(
            "SubHead", parent=base, fontName="Helvetica-Bold", fontSize=11,
            leading=14, textColor=HexColor(TEXT_COLOR), spaceBefore=6, spaceAfter=4,
        ),
        "body": ParagraphStyle(
            "Body", parent=base, fontName="Helvetica", fontSize=10,
            leading=14, textColor=HexColor(TEXT_COLOR), spaceAfter=6,
        ),
    }


def _section_flowables(section: RenderedSection, styles: dict[str, ParagraphStyle]) -> list:
    flow: list = [
        Paragraph(_para_text(section.title), styles["heading"]),
        HRFlowable(width="100%", thickness=0.5, color=HexColor(BORDER_COLOR), spaceAfter=6),
    ]
    if section.subtitle and section.type != "cover_page":
        flow.append(Paragraph(f"<i>{_para_text(section.subtitle)}</i>", styles["body"]))
    if section.text:
        flow.append(Paragraph(_para_text(section.text), styles["body"]))
    if section.items:
        flow.append(ListFlowable(
            [ListItem(Paragraph(_para_text(item), styles["body"])) for item in section.items],
            bulletType="bullet",
            start="•",
            leftIndent=12,
        ))
    for package in section.packages:
        heading = package.name + (f" - {package.price}" if package.price else "")
        flow.append(Paragraph(_para_text(heading), styles["subheading"]))
        if package.features:
            flow.append(ListFlowable(
                [ListItem(Paragraph(_para_text(f), styles["body"])) for f in package.features],
                bulletType="bullet",
                start="•",
                leftIndent=12,
            ))
    if section.phases:
        rows = [["Phase", "Duration"]] + [[p.phase, p.duration or ""] for p in section.phases]
        table = Table(rows, hAlign="LEFT", colWidths=[90 * mm, 60 * mm])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), HexColor("#f8f9fa")),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9.5),
            ("GRID", (0, 0), (-1, -1), 0.5, HexColor(BORDER_COLOR)),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]))
        flow.append(table)
        flow.append(Spacer(1, 6))
    for field in section.fields:
        flow.append(Paragraph(_para_text(field.label), styles["subheading"]))
        flow.append(Paragraph(_para_text(field.value), styles["body"]))
    if section.link_url:
        label = _para_text(section.link_label or "Pay Now")
        flow.append(Paragraph(f'<link href="{html.escape(section.link_url)}">{label}</link>', styles["body"]))
    return [KeepTogether(flow[:3]), *flow[3:]]


def render_pdf(
    proposal: dict[str, Any],
    sections: list[RenderedSection],
    include_cover: bool = True,
    accent: str = DEFAULT_ACCENT,
) -> bytes:
    """Render the proposal as an A4 PDF."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=20 * mm,
        bottomMargin=20 * mm,
        title=proposal.get("title") or "Proposal",
        author="ProposalKraft",
    )
    styles = _pdf_styles(accent)
    story: list = []

    if include_cover:
        story.append(Paragraph(_para_text(proposal.get("title")), styles["title"]))
        if proposal.get("client_name"):
            story.append(Paragraph(f"Prepared for {_para_text(proposal['client_name'])}", styles["client"]))
        tagline = _tagline(sections)
        if tagline:
            story.append(Paragraph(_para_text(tagline), styles["meta"]))
        story.append(Paragraph(f"Generated on {utc_now().strftime('%B %d, %Y')}", styles["meta"]))
        story.append(HRFlowable(width="100%", thickness=2, color=HexColor(accent), spaceBefore=10, spaceAfter=16))

    for section in sections:
        story.extend(_section_flowables(section, styles))

    if not story:
        story.append(Paragraph("No content available.", styles["body"]))

    doc.build(story)
    return buffer.getvalue()


# =============================================================================
# HTML
# =============================================================================

def render_html_document(
    proposal: dict[str, Any],
    sections: list[RenderedSection],
    include_cover: bool = True,
    accent: str = DEFAULT_ACCENT,
) -> str:
    """Render the proposal as a standalone HTML page."""
    title = html.escape(proposal.get("title") or "Proposal")
    cover = ""
    if include_cover:
        client = html.escape(proposal.get("client_name") or "")
        tagline = html.escape(_tagline(sections))
        cover = f"""<header class="cover">
<h1>{title}</h1>
<h2>Prepared for {client}</h2>
<p class="tagline">{tagline}</p>
<p class="generated">Generated on {utc_now().strftime('%B %d, %Y')}</p>
</header>"""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: Arial, sans-serif; font-size: 12px; line-height: 1.6; color: {TEXT_COLOR}; max-width: 210mm; margin: 0 auto; padding: 20mm; }}
.cover {{ text-align: center; margin-bottom: 40px; border-bottom: 2px solid {accent}; padding-bottom: 20px; }}
.cover h1 {{ font-size: 32px; color: {accent}; margin-bottom: 10px; }}
.cover h2 {{ font-size: 20px; color: #666; }}
.tagline, .generated {{ color: #888; }}
.proposal-section {{ margin-bottom: 30px; page-break-inside: avoid; }}
.proposal-section h2 {{ font-size: 18px; color: {accent}; border-bottom: 1px solid {BORDER_COLOR}; padding-bottom: 5px; }}
.proposal-section .body {{ white-space: pre-wrap; }}
table.timeline {{ width: 100%; border-collapse: collapse; }}
table.timeline td {{ border: 1px solid {BORDER_COLOR}; padding: 8px; }}
.pay-button {{ display: inline-block; background: {accent}; color: #fff; padding: 10px 20px; border-radius: 6px; text-decoration: none; }}
</style>
</head>
<body>
{cover}
{render_html(sections)}
</body>
</html>
"""


# =============================================================================
# Service
# =============================================================================

class ExportService:
    """Service for proposal exports."""

    @staticmethod
    def export_proposal(
        proposal_id: str | UUID,
        user_id: UUID | str,
        fmt: str = "pdf",
        include: list[str] | None = None,
    ) -> ExportedDocument:
        """
        Export a proposal the user owns.

        Args:
            proposal_id: The proposal UUID
            user_id: Owner
            fmt: "pdf" or "html"
            include: Section types to include; "cover" toggles the cover
                block. None includes everything.

        Returns:
            ExportedDocument
        """
        proposal = ProposalService.get_proposal(proposal_id, user_id=user_id)
        sections = render_sections(proposal.get("content"))
        include_cover = not include or COVER_KEY in include
        section_types = [key for key in include or [] if key != COVER_KEY]
        if not include:
            selected = sections
        elif section_types:
            selected = filter_sections(sections, section_types)
        else:
            selected = []

        accent = DEFAULT_ACCENT
        if proposal.get("brand_kit_id"):
            kit = SupabaseClient.fetch_one("brand_kits", "id", proposal["brand_kit_id"])
            if kit and kit.get("primary_color"):
                accent = kit["primary_color"]

        if fmt == "pdf":
            content = render_pdf(proposal, selected, include_cover=include_cover, accent=accent)
        else:
            content = render_html_document(proposal, selected, include_cover=include_cover, accent=accent).encode("utf-8")

        logger.info(f"Exported proposal {proposal['id']} as {fmt} ({len(content)} bytes)")
        return ExportedDocument(
            content=content,
            filename=export_filename(proposal.get("title"), fmt),
            media_type=MEDIA_TYPES[fmt],
        )
