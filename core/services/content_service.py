# =============================================================================
# core/services/content_service.py - AI Proposal Copy
# =============================================================================
# Drafts copy for a proposal section with OpenAI. When the model is not
# configured or fails, built-in templates are used instead.
#
# Upstream quota errors are not masked: 429 -> RateLimitedError,
# 402 / insufficient_quota -> AIPaymentRequiredError.
# =============================================================================

import logging

import openai

from app.config import settings
from app.exceptions import AIPaymentRequiredError, RateLimitedError
from core.models.template import ContentGenerateResponse

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT = "your business needs"

# Lazy-loaded OpenAI client
_client = None


def get_openai_client():
    """Get or create OpenAI client (lazy initialization)."""
    global _client
    if _client is None:
        _client = openai.OpenAI(api_key=settings.OPENAI_API_KEY)
    return _client


# =============================================================================
# Fallback Templates
# =============================================================================

def _executive_summary(context: str) -> str:
    return f"""## Executive Summary

Based on your requirements for {context}, we have developed a comprehensive solution that addresses your key business objectives. Our approach combines industry best practices with innovative strategies to deliver measurable results.

**Key Benefits:**
• Strategic alignment with your business goals
• Proven methodologies and frameworks
• Experienced team with relevant expertise
• Clear timeline and deliverables
• Competitive pricing with exceptional value

**Expected Outcomes:**
We anticipate significant improvements in efficiency, cost savings, and overall business performance. Our solution is designed to provide both immediate impact and long-term sustainable growth."""


def _scope_of_work(context: str) -> str:
    return f"""## Scope of Work

### Project Overview
This project focuses on {context} and includes the following key components:

### Deliverables
1. **Analysis & Planning Phase**
   - Current state assessment
   - Requirements gathering
   - Strategic planning documentation

2. **Implementation Phase**
   - Solution development
   - Testing and quality assurance
   - Training and knowledge transfer

3. **Support & Optimization**
   - Post-implementation support
   - Performance monitoring
   - Continuous improvement recommendations

### Timeline
The project is structured in phases to ensure systematic progress and regular milestone reviews."""


def _pricing(context: str) -> str:
    return """## Investment & Pricing

### Professional Services Package

**Phase 1: Discovery & Planning**
- Comprehensive assessment: $5,000
- Strategic planning: $3,000
- Documentation: $2,000

**Phase 2: Implementation**
- Core development: $15,000
- Testing & QA: $5,000
- Training: $3,000

**Phase 3: Support & Optimization**
- 3-month support: $6,000
- Performance optimization: $4,000

### Total Investment: $43,000

**Payment Terms:**
- 25% upon contract signing
- 50% at project milestones
- 25% upon completion

*All pricing includes project management, regular reporting, and standard revisions.*"""


def _about_us(context: str) -> str:
    return f"""## About Our Company

### Our Mission
We are dedicated to delivering exceptional results that drive business growth and success. With years of experience in {context}, we understand the challenges and opportunities in your industry.

### Our Expertise
• **Proven Track Record:** Successfully completed 100+ projects
• **Industry Experience:** Deep knowledge in your sector
• **Expert Team:** Certified professionals with relevant expertise
• **Quality Commitment:** Rigorous quality assurance processes

### Why Choose Us
1. **Results-Driven Approach:** Focus on measurable outcomes
2. **Transparent Communication:** Regular updates and clear reporting
3. **Flexible Solutions:** Adaptable to your specific needs
4. **Ongoing Support:** Commitment beyond project completion

### Client Success Stories
Our clients have achieved an average of 30% improvement in efficiency and 25% cost reduction through our solutions."""


FALLBACK_TEMPLATES = {
    "executive_summary": _executive_summary,
    "scope_of_work": _scope_of_work,
    "pricing": _pricing,
    "about_us": _about_us,
}


def fallback_content(section: str, context: str | None) -> str:
    """
    Template copy for a section.

    Known sections get their template with context defaulting to
    "your business needs"; others get a generic block.
    """
    template = FALLBACK_TEMPLATES.get(section)
    if template:
        return template(context or DEFAULT_CONTEXT)

    label = section.replace("_", " ")
    heading = label[:1].upper() + label[1:]
    return f"""## {heading}

Based on your requirements for {context or 'this project'}, we have prepared the following information:

This section addresses the key aspects of {label} relevant to your business objectives. Our approach ensures comprehensive coverage of all necessary components while maintaining focus on practical implementation and measurable results.

**Key Points:**
• Tailored to your specific requirements
• Industry best practices implementation
• Clear deliverables and timelines
• Ongoing support and optimization

We believe this approach will provide significant value and help achieve your desired outcomes."""


# =============================================================================
# Prompting
# =============================================================================

SECTION_GUIDANCE = {
    "executive_summary": "a persuasive executive summary with key benefits and expected outcomes",
    "scope_of_work": "a scope of work with project overview, phased deliverables and timeline",
    "pricing": "an investment and pricing section with phases, line items and payment terms",
    "about_us": "an about-us section covering mission, expertise and why choose us",
}


def build_system_prompt(section: str) -> str:
    guidance = SECTION_GUIDANCE.get(section, f"the {section.replace('_', ' ')} section")
    return f"""You write business proposal copy for freelancers and agencies.

Write {guidance}.

Guidelines:
- Use Markdown with a level-2 heading for the section title
- Be specific to the client context the user gives
- Keep a confident, professional tone
- 150-300 words
- Return only the section content, no preamble"""


def _classify_openai_error(e: Exception) -> Exception | None:
    """Map quota errors to API errors; None means fall back to a template."""
    if isinstance(e, openai.RateLimitError):
        if getattr(e, "code", None) == "insufficient_quota":
            return AIPaymentRequiredError()
        return RateLimitedError()
    if isinstance(e, openai.APIStatusError) and e.status_code == 402:
        return AIPaymentRequiredError()
    return None


class ContentService:
    """Service for AI section drafting."""

    @staticmethod
    def generate(section: str, context: str | None = None) -> ContentGenerateResponse:
        """
        Draft copy for one section.

        Raises:
            RateLimitedError: OpenAI returned 429
            AIPaymentRequiredError: OpenAI returned 402 or insufficient_quota
        """
        if not settings.OPENAI_API_KEY:
            logger.info(f"No OpenAI key configured, using template for {section}")
            return ContentGenerateResponse(content=fallback_content(section, context), source="template")

        user_prompt = f"Client context: {context or DEFAULT_CONTEXT}"

        try:
            client = get_openai_client()
            response = client.chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": build_system_prompt(section)},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=settings.CONTENT_TEMPERATURE,
                max_tokens=800,
            )
            content = (response.choices[0].message.content or "").strip()
        except openai.OpenAIError as e:
            mapped = _classify_openai_error(e)
            if mapped:
                logger.warning(f"OpenAI quota error for {section}: {e}")
                raise mapped
            logger.error(f"OpenAI API error: {e}")
            return ContentGenerateResponse(content=fallback_content(section, context), source="template")

        if not content:
            return ContentGenerateResponse(content=fallback_content(section, context), source="template")

        logger.info(f"Generated {section} content ({len(content)} chars)")
        return ContentGenerateResponse(content=content, source="ai")
