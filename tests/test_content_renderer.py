# =============================================================================
# tests/test_content_renderer.py - Shared Proposal Renderer Tests
# =============================================================================
# The renderer accepts every content shape the editor has ever stored and
# must never raise.
# =============================================================================

import pytest

from lib.content_renderer import (
    NO_CONTENT_TEXT,
    PAYMENT_PENDING_TEXT,
    filter_sections,
    format_currency,
    label_from_key,
    normalize_sections,
    render_html,
    render_sections,
    title_from_key,
)


# =============================================================================
# Shape Normalization
# =============================================================================

class TestNormalizeSections:
    """Every stored shape becomes a list of section dicts."""

    def test_sections_wrapper(self):
        content = {"sections": [{"type": "services"}, {"type": "pricing"}]}
        assert [s["type"] for s in normalize_sections(content)] == ["services", "pricing"]

    def test_bare_list_drops_non_dicts(self):
        assert normalize_sections([{"type": "a"}, "junk", 3, None]) == [{"type": "a"}]

    def test_numeric_keyed_object_sorted_numerically(self):
        content = {"10": {"type": "c"}, "2": {"type": "b"}, "0": {"type": "a"}}
        assert [s["type"] for s in normalize_sections(content)] == ["a", "b", "c"]

    def test_legacy_map(self):
        content = {"client_problem": {"problemStatement": "Slow site"}, "empty": {}}
        sections = normalize_sections(content)
        assert sections == [{"type": "legacy", "key": "client_problem", "data": {"problemStatement": "Slow site"}}]

    def test_non_ascii_digit_keys_are_legacy(self):
        content = {"\u00b2": {"type": "objective", "content": "x"}}
        assert normalize_sections(content) == [
            {"type": "legacy", "key": "\u00b2", "data": {"type": "objective", "content": "x"}}
        ]

    @pytest.mark.parametrize("value", [None, "text", 42, True, {}, []])
    def test_unusable_values_are_empty(self, value):
        assert normalize_sections(value) == []


# =============================================================================
# Section Rendering
# =============================================================================

class TestRenderSections:
    """Type-specific rendering."""

    def test_cover_page(self):
        [cover] = render_sections([{
            "type": "cover_page",
            "title": "Website Redesign",
            "content": {"tagline": "Faster, cleaner", "company_name": "Studio K"},
            "style": {"titleColor": "#ff0000", "ignored": "x"},
        }])
        assert cover.title == "Website Redesign"
        assert cover.subtitle == "Faster, cleaner"
        assert cover.fields[0].label == "Prepared By"
        assert cover.fields[0].value == "Studio K"
        assert cover.style == {"titleColor": "#ff0000"}

    def test_pricing_packages_and_terms(self):
        [pricing] = render_sections([{
            "type": "pricing",
            "content": {
                "packages": [{"name": "MVP", "price": 45000, "features": ["Web app"]}, "bad"],
                "payment_terms": "Net 30",
                "total": 45000,
            },
        }])
        assert pricing.title == "Pricing"
        assert len(pricing.packages) == 1
        assert pricing.packages[0].price == "$45,000.00"
        assert [f.label for f in pricing.fields] == ["Payment Terms", "Total"]

    def test_scope_of_work_timeline(self):
        [scope] = render_sections([{
            "type": "scope_of_work",
            "content": {
                "deliverables": ["Design", "Build"],
                "timeline": [{"phase": "Discovery", "duration": "2 weeks"}, "Launch"],
                "excluded": ["Hosting"],
            },
        }])
        assert scope.items == ["Design", "Build"]
        assert [p.phase for p in scope.phases] == ["Discovery", "Launch"]
        assert scope.phases[0].duration == "2 weeks"
        assert scope.fields[0].label == "Excluded"

    def test_payment_link_with_url(self):
        [link] = render_sections([{
            "type": "payment_link",
            "content": {"paymentUrl": "https://pay.test/x", "amount": 1500, "buttonText": "Pay deposit"},
        }])
        assert link.link_url == "https://pay.test/x"
        assert link.link_label == "Pay deposit - $1,500.00"

    def test_payment_link_without_url(self):
        [link] = render_sections([{"type": "payment_link", "content": {}}])
        assert link.link_url is None
        assert link.fields[0].value == PAYMENT_PENDING_TEXT

    def test_legacy_fields(self):
        [legacy] = render_sections({"client_problem": {"problemStatement": "Slow site", "impact": ["a", "b"]}})
        assert legacy.title == "Client Problem"
        assert [(f.label, f.value) for f in legacy.fields] == [
            ("Problem Statement", "Slow site"),
            ("Impact", "a, b"),
        ]

    def test_unknown_type_renders_text(self):
        [section] = render_sections([{"type": "executive_summary", "content": "We will help."}])
        assert section.title == "Executive Summary"
        assert section.text == "We will help."

    def test_empty_text_section(self):
        [section] = render_sections([{"type": "notes"}])
        assert section.text == NO_CONTENT_TEXT

    def test_malformed_fields_never_raise(self):
        sections = render_sections([
            {"type": "pricing", "content": {"packages": "not-a-list"}},
            {"type": "timeline", "content": {"phases": 7}},
            {"type": "services", "content": {"items": {"a": 1}}},
        ])
        assert len(sections) == 3

    def test_unusual_keys_never_raise(self):
        sections = render_sections({"\u00b2": {"type": "objective", "content": "x"}, "1": {"type": "a"}})
        assert [s.type for s in sections] == ["legacy", "legacy"]

    def test_indexes_follow_order(self):
        sections = render_sections({"1": {"type": "b"}, "0": {"type": "a"}})
        assert [(s.index, s.type) for s in sections] == [(0, "a"), (1, "b")]


# =============================================================================
# Helpers and HTML
# =============================================================================

class TestHelpers:

    def test_title_from_key(self):
        assert title_from_key("client_problem") == "Client Problem"

    def test_label_from_key(self):
        assert label_from_key("projectGoal") == "Project Goal"

    def test_format_currency(self):
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(-20) == "-$20.00"
        assert format_currency("$2,500/mo") == "$2,500/mo"

    def test_filter_sections(self):
        sections = render_sections([{"type": "a"}, {"type": "b"}])
        assert [s.type for s in filter_sections(sections, ["b"])] == ["b"]
        assert filter_sections(sections, None) == sections


class TestRenderHtml:

    def test_escapes_content(self):
        html = render_html(render_sections([{"type": "notes", "title": "<b>x</b>", "content": "<script>alert(1)</script>"}]))
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "&lt;b&gt;x&lt;/b&gt;" in html

    def test_empty(self):
        assert NO_CONTENT_TEXT in render_html([])

    def test_pay_button(self):
        html = render_html(render_sections([{"type": "payment_link", "paymentUrl": "https://pay.test/x"}]))
        assert 'href="https://pay.test/x"' in html
        assert "Pay Now" in html
