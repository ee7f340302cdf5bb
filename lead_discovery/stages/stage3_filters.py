"""
Stage 3: Filter Policy
======================
Inclusion/exclusion decisions driven by the user's search filters.

Two checkpoints:
- include(): right after classification, on website status alone.
  MODERN_SITE is always excluded; other statuses follow their flag.
- include_enriched(): after enrichment, for the flags that need owner and
  social data (independent_only, verified_owner, active_social).
"""

from typing import Optional

from ..models.schemas import BusinessLead, SearchFilters, WebsiteStatus
from ..config.settings import CONFIDENCE_RULES
from .stage5_scoring import days_since_post

# Status -> name of the SearchFilters flag that admits it
STATUS_FLAGS = {
    WebsiteStatus.NO_WEBSITE: "no_website",
    WebsiteStatus.SOCIAL_ONLY: "social_only",
    WebsiteStatus.OUTDATED_SITE: "outdated_site",
}

ACTIVE_SOCIAL_MAX_DAYS = CONFIDENCE_RULES["recent_social_max_days"]


def include(website_status: WebsiteStatus, filters: SearchFilters) -> bool:
    """Decide whether a classified business continues down the pipeline."""
    if website_status == WebsiteStatus.MODERN_SITE:
        return False

    flag = STATUS_FLAGS.get(website_status)
    if flag is None:
        return True
    return bool(getattr(filters, flag))


def include_enriched(lead: BusinessLead, filters: SearchFilters) -> bool:
    """Apply the owner/size/social flags to an enriched provisional lead."""
    return rejection_reason(lead, filters) is None


def rejection_reason(lead: BusinessLead, filters: SearchFilters) -> Optional[str]:
    """Name the first enriched filter the lead fails, or None."""
    if filters.independent_only and not lead.independent_business:
        return "independent_only"

    if filters.verified_owner and not lead.owner_verified:
        return "verified_owner"

    if filters.active_social:
        if not lead.recent_posts or days_since_post(lead.recent_posts) > ACTIVE_SOCIAL_MAX_DAYS:
            return "active_social"

    return None
