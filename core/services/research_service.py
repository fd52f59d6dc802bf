# =============================================================================
# core/services/research_service.py - Prospect Research
# =============================================================================
# Keyword heuristics that sketch a prospect (industry, size, likely pain
# points) for the proposal writer. No network access.
# =============================================================================

import logging
import re

from core.models.template import CompanyResearch
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

GENERAL_INDUSTRY = "General Business"

# First match wins
INDUSTRY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("Technology", ("tech", "software", "digital")),
    ("Healthcare", ("health", "medical", "pharma")),
    ("Finance", ("finance", "bank", "capital")),
    ("Retail", ("retail", "store", "shop")),
    ("Construction", ("construction", "building")),
    ("Food & Beverage", ("food", "restaurant", "catering")),
    ("Education", ("education", "school", "university")),
    ("Consulting", ("consulting", "advisory")),
]

SIZE_LARGE = "Large (500+ employees)"
SIZE_MEDIUM = "Medium (50-500 employees)"
SIZE_SMALL = "Small (1-50 employees)"

SIZE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    (SIZE_LARGE, ("enterprise", "global", "international")),
    (SIZE_MEDIUM, ("solutions", "systems", "group")),
    (SIZE_SMALL, ("studio", "boutique", "local")),
]

COMMON_PAIN_POINTS = [
    "Manual processes consuming too much time",
    "Difficulty tracking and managing data",
    "Lack of real-time visibility into operations",
    "Inefficient communication between teams",
    "Compliance and reporting challenges",
]

INDUSTRY_PAIN_POINTS = {
    "Technology": [
        "Scaling development processes",
        "Managing technical debt",
        "Keeping up with rapid technology changes",
        "Talent acquisition and retention",
        "Security and data protection concerns",
    ],
    "Healthcare": [
        "Patient data management and privacy",
        "Regulatory compliance requirements",
        "Appointment scheduling inefficiencies",
        "Insurance claim processing delays",
        "Staff coordination and communication",
    ],
    "Finance": [
        "Risk management and assessment",
        "Regulatory compliance burden",
        "Legacy system integration",
        "Customer onboarding processes",
        "Fraud detection and prevention",
    ],
    "Retail": [
        "Inventory management challenges",
        "Customer experience consistency",
        "Multi-channel sales coordination",
        "Supply chain visibility",
        "Seasonal demand forecasting",
    ],
    "Construction": [
        "Project timeline management",
        "Material cost fluctuations",
        "Safety compliance monitoring",
        "Subcontractor coordination",
        "Quality control documentation",
    ],
}

INDUSTRY_OPPORTUNITIES = {
    "Technology": [
        "Automation of development workflows",
        "AI/ML integration opportunities",
        "Cloud migration benefits",
        "API-first architecture adoption",
    ],
    "Healthcare": [
        "Telemedicine platform integration",
        "Patient portal improvements",
        "Automated billing systems",
        "Data analytics for better outcomes",
    ],
    "Finance": [
        "Digital transformation initiatives",
        "Automated risk assessment",
        "Customer self-service portals",
        "Real-time fraud monitoring",
    ],
    "Retail": [
        "E-commerce platform optimization",
        "Customer loyalty programs",
        "Inventory automation",
        "Personalized shopping experiences",
    ],
}

DEFAULT_OPPORTUNITIES = [
    "Process automation opportunities",
    "Digital transformation potential",
    "Customer experience improvements",
    "Operational efficiency gains",
]

CHALLENGES = [
    "Budget constraints for new initiatives",
    "Change management and user adoption",
    "Integration with existing systems",
    "Training staff on new processes",
    "Measuring ROI on technology investments",
]

RECOMMENDATIONS = [
    "Implement automated workflow solutions to reduce manual processes",
    "Establish centralized data management system",
    "Create real-time dashboard for operational visibility",
    "Develop integrated communication platform",
    "Design scalable processes for future growth",
]


def detect_industry(company_name: str) -> str:
    name = company_name.lower()
    for industry, keywords in INDUSTRY_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return industry
    return GENERAL_INDUSTRY


def estimate_company_size(company_name: str) -> str:
    name = company_name.lower()
    for size, keywords in SIZE_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return size
    return SIZE_MEDIUM


def pain_points_for(industry: str, size: str) -> list[str]:
    """Three common, up to three industry and two size pain points."""
    if size == SIZE_SMALL:
        size_points = ["Limited resources for growth", "Lack of specialized expertise"]
    elif size == SIZE_LARGE:
        size_points = ["Complex organizational structure", "Siloed departments"]
    else:
        size_points = ["Scaling existing processes", "Managing growth efficiently"]

    return COMMON_PAIN_POINTS[:3] + INDUSTRY_PAIN_POINTS.get(industry, [])[:3] + size_points


def guess_website(company_name: str) -> str:
    """
    Example:
        guess_website("Acme Tech Group")  # "https://acmetechgroup.com"
    """
    slug = re.sub(r"\s+", "", company_name.lower())
    return f"https://{slug}.com"


class ResearchService:
    """Service for prospect research."""

    @staticmethod
    def research_company(company_name: str, website: str | None = None) -> CompanyResearch:
        industry = detect_industry(company_name)
        size = estimate_company_size(company_name)
        logger.info(f"Researched {company_name}: {industry}, {size}")

        return CompanyResearch(
            company_name=company_name,
            website=website or guess_website(company_name),
            industry=industry,
            size=size,
            pain_points=pain_points_for(industry, size),
            opportunities=list(INDUSTRY_OPPORTUNITIES.get(industry, DEFAULT_OPPORTUNITIES)),
            challenges=list(CHALLENGES),
            recommendations=list(RECOMMENDATIONS),
            last_updated=utc_now_iso(),
        )
