# =============================================================================
# lib/content_renderer.py - Proposal Content Renderer
# =============================================================================
# Turns the loosely-typed JSON stored in proposals.content (or a share's
# content_snapshot) into an ordered list of RenderedSection models.
#
# Accepted shapes:
# - {"sections": [...]}            editor format
# - [...]                          bare section list
# - {"0": {...}, "1": {...}}       list serialized as an object
# - {"client_problem": {...}}      legacy flat map (one section per key)
#
# Each section is dispatched on its "type" tag. Section fields may live on
# the section itself or inside a nested "content" object.
#
# The renderer never raises on malformed input: unusable values are skipped
# and an empty result renders as "No content available."
#
# Usage:
#   from lib.content_renderer import render_sections, render_html
#   sections = render_sections(proposal["content"])
#   html = render_html(sections)
# =============================================================================

from __future__ import annotations

import html
import logging
import re
from typing import Any, Callable

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

NO_CONTENT_TEXT = "No content available."
PAYMENT_PENDING_TEXT = "Payment link will be available soon"
DEFAULT_BUTTON_TEXT = "Pay Now"


# =============================================================================
# Rendered Models
# =============================================================================

class RenderedField(BaseModel):
    """A labelled value inside a section."""
    label: str
    value: str


class RenderedPackage(BaseModel):
    """One pricing package."""
    name: str
    price: str | None = None
    features: list[str] = Field(default_factory=list)


class RenderedPhase(BaseModel):
    """One timeline phase."""
    phase: str
    duration: str | None = None


class RenderedSection(BaseModel):
    """
    Presentation-ready proposal section.

    Only the attributes relevant to the section's type are populated;
    the rest keep their empty defaults.

    Example:
        {
            "type": "pricing",
            "title": "Pricing",
            "packages": [{"name": "MVP", "price": "$45,000.00", "features": ["Web app"]}],
            "fields": [{"label": "Payment Terms", "value": "Net 30"}]
        }
    """
    index: int = Field(..., ge=0, description="Position in the rendered document")
    type: str = Field(default="text", description="Section type tag")
    title: str = Field(default="", description="Display heading")
    subtitle: str | None = Field(default=None, description="Tagline or secondary heading")
    text: str | None = Field(default=None, description="Body text")
    fields: list[RenderedField] = Field(default_factory=list)
    items: list[str] = Field(default_factory=list)
    packages: list[RenderedPackage] = Field(default_factory=list)
    phases: list[RenderedPhase] = Field(default_factory=list)
    link_url: str | None = Field(default=None, description="Payment URL for payment_link sections")
    link_label: str | None = Field(default=None, description="Button label for the payment URL")
    style: dict[str, str] = Field(default_factory=dict, description="Color overrides (titleColor, taglineColor)")


# =============================================================================
# Formatting Helpers
# =============================================================================

def title_from_key(key: str) -> str:
    """
    Title-case an underscore key.

    Example:
        title_from_key("client_problem")  # "Client Problem"
    """
    return " ".join(word[:1].upper() + word[1:] for word in str(key).split("_") if word)


def label_from_key(key: str) -> str:
    """
    Split a camelCase key into words and capitalize the first letter.

    Example:
        label_from_key("projectGoal")  # "Project Goal"
    """
    spaced = re.sub(r"([A-Z])", r" \1", str(key)).strip()
    return spaced[:1].upper() + spaced[1:]


def format_currency(value: Any) -> str:
    """
    Format a number as USD. Strings (e.g. "$2,500/mo") pass through.

    Example:
        format_currency(45000)  # "$45,000.00"
    """
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float)):
        sign = "-" if value < 0 else ""
        return f"{sign}${abs(value):,.2f}"
    return str(value)


def _stringify(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(_stringify(v) for v in value if v not in (None, ""))
    if isinstance(value, dict):
        return ", ".join(f"{label_from_key(k)}: {_stringify(v)}" for k, v in value.items() if v)
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def _string_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [_stringify(v) for v in value if v not in (None, "")]
    if isinstance(value, str) and value:
        return [value]
    return []


# =============================================================================
# Shape Normalization
# =============================================================================

def _is_numeric_keyed(content: dict) -> bool:
    # isdigit() alone accepts superscripts that int() rejects
    return bool(content) and all(
        isinstance(key, str) and key.isascii() and key.isdigit() for key in content
    )


def normalize_sections(content: Any) -> list[dict[str, Any]]:
    """
    Normalize any stored content shape into a list of section dicts.

    Legacy flat maps are converted to sections of type "legacy" carrying
    the original key as "key" and the mapping as "data".

    Args:
        content: Value of proposals.content or content_snapshot

    Returns:
        Ordered list of section dicts (may be empty)
    """
    if content is None or isinstance(content, (str, int, float, bool)):
        return []

    if isinstance(content, list):
        return [item for item in content if isinstance(item, dict)]

    if not isinstance(content, dict):
        return []

    if "sections" in content:
        return normalize_sections(content["sections"])

    if _is_numeric_keyed(content):
        ordered = sorted(content.items(), key=lambda kv: int(kv[0]))
        return [value for _, value in ordered if isinstance(value, dict)]

    sections = []
    for key, value in content.items():
        if not isinstance(value, dict) or not value:
            continue
        sections.append({"type": "legacy", "key": key, "data": value})
    return sections


# =============================================================================
# Section Renderers
# =============================================================================

def _field_source(section: dict[str, Any]) -> dict[str, Any]:
    """Merge top-level section fields with a nested content object."""
    nested = section.get("content")
    if isinstance(nested, dict):
        return {**section, **nested}
    return section


def _render_cover_page(section: dict, out: RenderedSection) -> None:
    src = _field_source(section)
    out.subtitle = src.get("tagline") or None
    company = src.get("company_name") or src.get("companyName")
    if company:
        out.fields.append(RenderedField(label="Prepared By", value=str(company)))
    style = section.get("style")
    if isinstance(style, dict):
        out.style = {k: str(v) for k, v in style.items() if k in ("titleColor", "taglineColor") and v}


def _render_services(section: dict, out: RenderedSection) -> None:
    src = _field_source(section)
    out.items = _string_list(src.get("items") or src.get("services"))
    if isinstance(section.get("content"), str):
        out.text = section["content"]


def _render_pricing(section: dict, out: RenderedSection) -> None:
    src = _field_source(section)
    for pkg in src.get("packages") or []:
        if not isinstance(pkg, dict):
            continue
        price = pkg.get("price")
        out.packages.append(RenderedPackage(
            name=str(pkg.get("name") or "Package"),
            price=format_currency(price) if price not in (None, "") else None,
            features=_string_list(pkg.get("features")),
        ))
    if src.get("payment_terms"):
        out.fields.append(RenderedField(label="Payment Terms", value=str(src["payment_terms"])))
    if src.get("total"):
        out.fields.append(RenderedField(label="Total", value=format_currency(src["total"])))


def _render_scope_of_work(section: dict, out: RenderedSection) -> None:
    src = _field_source(section)
    out.items = _string_list(src.get("deliverables"))
    out.phases = _phases(src.get("timeline"))
    for key in ("included", "excluded"):
        values = _string_list(src.get(key))
        if values:
            out.fields.append(RenderedField(label=title_from_key(key), value=", ".join(values)))
    if isinstance(section.get("content"), str):
        out.text = section["content"]


def _render_proposed_solution(section: dict, out: RenderedSection) -> None:
    src = _field_source(section)
    if isinstance(section.get("content"), str):
        out.text = section["content"]
    elif src.get("text"):
        out.text = str(src["text"])
    if src.get("approach"):
        out.fields.append(RenderedField(label="Approach", value=_stringify(src["approach"])))
    tools = _string_list(src.get("tools"))
    if tools:
        out.fields.append(RenderedField(label="Tools", value=", ".join(tools)))
    if src.get("why_fits"):
        out.fields.append(RenderedField(label="Why It Fits", value=_stringify(src["why_fits"])))


def _render_timeline(section: dict, out: RenderedSection) -> None:
    src = _field_source(section)
    out.phases = _phases(src.get("phases") or src.get("timeline"))
    if not out.phases:
        _render_text(section, out)


def _render_payment_link(section: dict, out: RenderedSection) -> None:
    src = _field_source(section)
    if src.get("text"):
        out.text = str(src["text"])
    url = src.get("paymentUrl") or src.get("payment_url")
    if url:
        label = str(src.get("buttonText") or DEFAULT_BUTTON_TEXT)
        amount = src.get("amount")
        if amount not in (None, ""):
            label = f"{label} - {format_currency(amount) if isinstance(amount, (int, float)) else '$' + str(amount)}"
        out.link_url = str(url)
        out.link_label = label
    else:
        out.fields.append(RenderedField(label="Payment", value=PAYMENT_PENDING_TEXT))


def _render_legacy(section: dict, out: RenderedSection) -> None:
    out.title = title_from_key(section.get("key", ""))
    for key, value in (section.get("data") or {}).items():
        if not value:
            continue
        out.fields.append(RenderedField(label=label_from_key(key), value=_stringify(value)))


def _render_text(section: dict, out: RenderedSection) -> None:
    content = section.get("content")
    if isinstance(content, dict) and content.get("text"):
        out.text = str(content["text"])
    elif isinstance(content, str) and content:
        out.text = content
    elif section.get("text"):
        out.text = str(section["text"])
    else:
        out.text = NO_CONTENT_TEXT


def _phases(value: Any) -> list[RenderedPhase]:
    phases = []
    for entry in value or []:
        if isinstance(entry, dict) and (entry.get("phase") or entry.get("name")):
            duration = entry.get("duration")
            phases.append(RenderedPhase(
                phase=str(entry.get("phase") or entry.get("name")),
                duration=str(duration) if duration else None,
            ))
        elif isinstance(entry, str):
            phases.append(RenderedPhase(phase=entry))
    return phases


SECTION_RENDERERS: dict[str, Callable[[dict, RenderedSection], None]] = {
    "cover_page": _render_cover_page,
    "services": _render_services,
    "pricing": _render_pricing,
    "scope_of_work": _render_scope_of_work,
    "proposed_solution": _render_proposed_solution,
    "timeline": _render_timeline,
    "payment_link": _render_payment_link,
    "legacy": _render_legacy,
}


# =============================================================================
# Public API
# =============================================================================

def render_section(section: dict[str, Any], index: int = 0) -> RenderedSection:
    """
    Render one section dict.

    Unknown types fall through to the plain-text renderer.

    Args:
        section: Section dict with a "type" tag
        index: Position in the document

    Returns:
        RenderedSection
    """
    section_type = str(section.get("type") or "text")
    out = RenderedSection(
        index=index,
        type=section_type,
        title=str(section.get("title") or title_from_key(section_type)),
    )
    renderer = SECTION_RENDERERS.get(section_type, _render_text)
    try:
        renderer(section, out)
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning(f"Could not render {section_type} section at {index}: {e}")
        out.text = out.text or NO_CONTENT_TEXT
    return out


def render_sections(content: Any) -> list[RenderedSection]:
    """
    Normalize and render stored proposal content.

    Args:
        content: Any JSON value

    Returns:
        List of RenderedSection in document order (empty for unusable input)

    Example:
        sections = render_sections({"sections": [{"type": "executive_summary", "content": "..."}]})
        sections[0].title  # "Executive Summary"
    """
    return [render_section(section, i) for i, section in enumerate(normalize_sections(content))]


def filter_sections(sections: list[RenderedSection], include: list[str] | None) -> list[RenderedSection]:
    """Keep only sections whose type is listed (None keeps all)."""
    if not include:
        return sections
    wanted = set(include)
    return [s for s in sections if s.type in wanted]


# -----------------------------------------------------------------------------
# HTML Output
# -----------------------------------------------------------------------------

def _esc(value: Any) -> str:
    return html.escape(str(value), quote=True)


def section_to_html(section: RenderedSection) -> str:
    """Render one section as an HTML fragment with escaped content."""
    parts = [f'<section class="proposal-section section-{_esc(section.type)}">']
    title_style = f' style="color: {_esc(section.style["titleColor"])}"' if section.style.get("titleColor") else ""
    tag = "h1" if section.type == "cover_page" else "h2"
    parts.append(f"<{tag}{title_style}>{_esc(section.title)}</{tag}>")
    if section.subtitle:
        parts.append(f'<p class="tagline">{_esc(section.subtitle)}</p>')
    if section.text:
        parts.append(f'<p class="body">{_esc(section.text)}</p>')
    if section.items:
        parts.append("<ul>" + "".join(f"<li>{_esc(item)}</li>" for item in section.items) + "</ul>")
    for pkg in section.packages:
        features = "".join(f"<li>{_esc(f)}</li>" for f in pkg.features)
        price = f'<div class="price">{_esc(pkg.price)}</div>' if pkg.price else ""
        parts.append(f'<div class="package"><h3>{_esc(pkg.name)}</h3>{price}<ul>{features}</ul></div>')
    if section.phases:
        rows = "".join(
            f"<tr><td>{_esc(p.phase)}</td><td>{_esc(p.duration or '')}</td></tr>" for p in section.phases
        )
        parts.append(f'<table class="timeline">{rows}</table>')
    for field in section.fields:
        parts.append(f'<div class="field"><h4>{_esc(field.label)}</h4><p>{_esc(field.value)}</p></div>')
    if section.link_url:
        parts.append(
            f'<a class="pay-button" href="{_esc(section.link_url)}" target="_blank" '
            f'rel="noopener noreferrer">{_esc(section.link_label or DEFAULT_BUTTON_TEXT)}</a>'
        )
    parts.append("</section>")
    return "\n".join(parts)


def render_html(sections: list[RenderedSection]) -> str:
    """
    Render sections as an HTML fragment.

    Returns a single paragraph with NO_CONTENT_TEXT when there are no sections.
    """
    if not sections:
        return f'<p class="empty">{NO_CONTENT_TEXT}</p>'
    return "\n".join(section_to_html(section) for section in sections)
