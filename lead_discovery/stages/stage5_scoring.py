"""
Stage 5: Weighted Scoring
=========================
Deterministic five-factor lead score plus a separate confidence metric.

Factors (weight):
- Website problem (35): how badly the business needs a new site
- Decision-maker reachability (25): verified owner and corroborating sources
- Social activity (15): freshness of the last social post
- Reputation (15): rating and review volume
- Size match (10): independent businesses only

Each factor yields a value in [0, 1]; its contribution is value x weight and
the lead score is the rounded sum of contributions.
"""

import math
import re
from typing import Callable, Dict, List, Optional, Tuple

from ..models.schemas import BusinessLead, FactorScore, ScoreBreakdown
from ..config.settings import (
    SCORING_FACTORS,
    WEBSITE_STATUS_VALUES,
    UNKNOWN_WEBSITE_VALUE,
    SOCIAL_ACTIVITY_BANDS,
    STALE_SOCIAL_VALUE,
    NO_SOCIAL_VALUE,
    UNPARSABLE_POST_AGE_DAYS,
    RATING_BANDS,
    REVIEW_COUNT_BANDS,
    MISSING_REPUTATION_VALUE,
    CONFIDENCE_RULES,
)

_POST_AGE_RE = re.compile(r"(\d+)\s+(day|week|month)s?\s+ago", re.IGNORECASE)
_UNIT_DAYS = {"day": 1, "week": 7, "month": 30}


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def days_since_post(recent_posts: str) -> int:
    """Parse '3 days ago' / '1 week ago' / '2 months ago' into days."""
    match = _POST_AGE_RE.search(recent_posts or "")
    if not match:
        return UNPARSABLE_POST_AGE_DAYS
    return int(match.group(1)) * _UNIT_DAYS[match.group(2).lower()]


def _first_band(value: float, bands: List[Tuple[float, float]]) -> float:
    for minimum, points in bands:
        if value >= minimum:
            return points
    return 0.0


class LeadScoringStage:
    """
    Stage 5: Score a lead from a declarative (factor, weight, rule) table.
    """

    def __init__(self, factors: Optional[List[Tuple[str, int]]] = None):
        self.factors = factors or SCORING_FACTORS
        self.rules: Dict[str, Callable[[BusinessLead], float]] = {
            "website": self._website_value,
            "decision_maker": self._decision_maker_value,
            "social": self._social_value,
            "reputation": self._reputation_value,
            "size_match": self._size_match_value,
        }

    def score(self, lead: BusinessLead) -> Tuple[int, ScoreBreakdown]:
        """
        Calculate the lead score and its breakdown.

        Pure function of the lead's fields; calling it twice on the same
        lead yields identical output.
        """
        factor_scores = {}
        for name, weight in self.factors:
            value = round(self.rules[name](lead), 4)
            factor_scores[name] = FactorScore(
                value=value,
                weight=weight,
                score=round(value * weight, 4),
            )

        breakdown = ScoreBreakdown(**factor_scores)
        lead_score = max(0, min(100, round_half_up(breakdown.total())))
        return lead_score, breakdown

    def confidence(self, lead: BusinessLead) -> int:
        """Completeness/freshness of the data behind a lead, 0-100."""
        rules = CONFIDENCE_RULES
        confidence = rules["base"]

        if lead.owner_verified:
            confidence += rules["owner_verified"]
        if lead.email_business or lead.owner_contact:
            confidence += rules["contact_available"]
        if lead.recent_posts and days_since_post(lead.recent_posts) <= rules["recent_social_max_days"]:
            confidence += rules["recent_social"]
        if lead.avg_rating and lead.avg_rating >= rules["good_rating_min"]:
            confidence += rules["good_rating"]

        return max(0, min(100, confidence))

    def flags(self, lead: BusinessLead) -> List[str]:
        """Human-readable warnings shown alongside a lead."""
        flags = []
        if not lead.owner_verified:
            flags.append("Owner not verified")
        if not lead.email_business and not lead.owner_contact:
            flags.append("No direct contact email")
        if not lead.recent_posts or days_since_post(lead.recent_posts) > SOCIAL_ACTIVITY_BANDS[-1][0]:
            flags.append("No recent social activity")
        if not lead.num_reviews or lead.num_reviews < REVIEW_COUNT_BANDS[-1][0]:
            flags.append("Limited review history")
        if not lead.independent_business:
            flags.append("Possible chain business")
        return flags

    # =========================================================================
    # Factor value rules
    # =========================================================================

    def _website_value(self, lead: BusinessLead) -> float:
        status = lead.website_status.value if lead.website_status else None
        return WEBSITE_STATUS_VALUES.get(status, UNKNOWN_WEBSITE_VALUE)

    def _decision_maker_value(self, lead: BusinessLead) -> float:
        if not lead.owner_verified:
            return 0.3
        sources = len(lead.owner_sources or [])
        if sources >= 2:
            return 1.0
        if sources == 1:
            return 0.6
        return 0.3

    def _social_value(self, lead: BusinessLead) -> float:
        if not lead.recent_posts:
            return NO_SOCIAL_VALUE
        days = days_since_post(lead.recent_posts)
        for max_days, value in SOCIAL_ACTIVITY_BANDS:
            if days <= max_days:
                return value
        return STALE_SOCIAL_VALUE

    def _reputation_value(self, lead: BusinessLead) -> float:
        # Zero counts as missing, same as an absent rating
        if not lead.avg_rating or not lead.num_reviews:
            return MISSING_REPUTATION_VALUE
        score = _first_band(lead.avg_rating, RATING_BANDS)
        score += _first_band(lead.num_reviews, REVIEW_COUNT_BANDS)
        return min(score, 1.0)

    def _size_match_value(self, lead: BusinessLead) -> float:
        return 1.0 if lead.independent_business else 0.0
