"""
Pydantic schemas for the Lead Discovery Engine
"""

from enum import Enum
from typing import List, Optional
from pydantic import AliasGenerator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# ENUMS
# =============================================================================

class WebsiteStatus(str, Enum):
    """Web presence category of a business"""
    NO_WEBSITE = "NO_WEBSITE"
    SOCIAL_ONLY = "SOCIAL_ONLY"
    OUTDATED_SITE = "OUTDATED_SITE"
    MODERN_SITE = "MODERN_SITE"


class JobStatus(str, Enum):
    """Discovery job lifecycle state"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


# =============================================================================
# INPUT SCHEMAS
# =============================================================================

# Request bodies accept snake_case or camelCase keys; unknown keys are rejected
INPUT_MODEL_CONFIG = ConfigDict(
    extra="forbid",
    populate_by_name=True,
    alias_generator=AliasGenerator(validation_alias=to_camel),
)


class SearchFilters(BaseModel):
    """User-selected inclusion flags for a discovery run"""
    model_config = INPUT_MODEL_CONFIG

    no_website: bool = True
    social_only: bool = True
    outdated_site: bool = True
    independent_only: bool = False
    verified_owner: bool = False
    active_social: bool = False


class SearchConfig(BaseModel):
    """Request to start a discovery job"""
    location: str = Field(..., min_length=1, description="City, State")
    business_type: str = Field(..., min_length=1, description="e.g. coffee shop")
    filters: SearchFilters = Field(default_factory=SearchFilters)

    @field_validator("location", "business_type")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    model_config = ConfigDict(
        **INPUT_MODEL_CONFIG,
        json_schema_extra={
            "example": {
                "location": "Austin, TX",
                "business_type": "coffee shop",
                "filters": {
                    "no_website": True,
                    "social_only": True,
                    "outdated_site": True,
                    "independent_only": False,
                    "verified_owner": False,
                    "active_social": False,
                },
            }
        },
    )


# =============================================================================
# COLLABORATOR SCHEMAS
# =============================================================================

class RawCandidate(BaseModel):
    """A business record as returned by a data-acquisition source"""
    business_name: str
    address: str = ""
    city: str = ""
    state: str = ""
    postal_code: Optional[str] = None
    phone_primary: Optional[str] = None
    website_url: Optional[str] = None
    google_maps_url: Optional[str] = None
    yelp_url: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    email_business: Optional[str] = None
    avg_rating: Optional[float] = None
    num_reviews: Optional[int] = None
    recent_posts: Optional[str] = None

    @property
    def social_urls(self) -> List[str]:
        return [u for u in (self.facebook_url, self.instagram_url) if u]


class PageSignals(BaseModel):
    """Modernity signals read from a fetched homepage"""
    has_viewport: bool = False
    has_modern_framework: bool = False
    is_secure_transport: bool = False


class OwnerInfo(BaseModel):
    """Result of an owner lookup"""
    owner_name: Optional[str] = None
    owner_verified: bool = False
    owner_sources: List[str] = Field(default_factory=list)
    owner_contact: Optional[str] = None


class DemoAssets(BaseModel):
    """Demo website assets prepared for a business"""
    demo_desktop_screenshot_url: Optional[str] = None
    demo_mobile_screenshot_url: Optional[str] = None
    demo_video_url: Optional[str] = None


# =============================================================================
# SCORING SCHEMAS
# =============================================================================

class FactorScore(BaseModel):
    """One weighted factor of the lead score"""
    value: float = Field(..., ge=0, le=1)
    weight: int
    score: float


class ScoreBreakdown(BaseModel):
    """Five-factor breakdown backing a lead score"""
    website: FactorScore
    decision_maker: FactorScore
    social: FactorScore
    reputation: FactorScore
    size_match: FactorScore

    def total(self) -> float:
        return sum(getattr(self, name).score for name in type(self).model_fields)


# =============================================================================
# PERSISTED RECORDS
# =============================================================================

class JobProgress(BaseModel):
    """Per-stage completion percentages"""
    google_places: int = Field(0, ge=0, le=100)
    social_media: int = Field(0, ge=0, le=100)
    owner_verification: int = Field(0, ge=0, le=100)


class DiscoveryJob(BaseModel):
    """One discovery run"""
    id: str = Field(default_factory=new_id)
    location: str
    business_type: str
    filters: SearchFilters = Field(default_factory=SearchFilters)
    status: JobStatus = JobStatus.PENDING
    progress: JobProgress = Field(default_factory=JobProgress)
    total_found: int = Field(0, ge=0)
    qualified_leads: int = Field(0, ge=0)
    high_score_leads: int = Field(0, ge=0)
    verified_owners: int = Field(0, ge=0)
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None


class BusinessLead(BaseModel):
    """A qualified, scored business"""
    id: str = Field(default_factory=new_id)
    job_id: Optional[str] = None

    # Business identity
    business_name: str
    address: str = ""
    city: str = ""
    state: str = ""
    postal_code: Optional[str] = None

    # Contact & presence
    phone_primary: Optional[str] = None
    email_business: Optional[str] = None
    website_status: WebsiteStatus
    website_url: Optional[str] = None
    google_maps_url: Optional[str] = None
    yelp_url: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None

    # Owner
    owner_name: Optional[str] = None
    owner_verified: bool = False
    owner_sources: List[str] = Field(default_factory=list)
    owner_contact: Optional[str] = None

    # Activity & reputation
    recent_posts: Optional[str] = None
    avg_rating: Optional[float] = None
    num_reviews: Optional[int] = None
    independent_business: bool = True

    # Outreach material
    personal_hook: Optional[str] = None
    demo_desktop_screenshot_url: Optional[str] = None
    demo_mobile_screenshot_url: Optional[str] = None
    demo_video_url: Optional[str] = None

    # Scoring
    lead_score: int = Field(0, ge=0, le=100)
    score_breakdown: Optional[ScoreBreakdown] = None
    confidence: int = Field(0, ge=0, le=100)
    flags: List[str] = Field(default_factory=list)

    # Drafts
    outreach_email: Optional[str] = None
    outreach_dm: Optional[str] = None
    outreach_sms: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)

    @property
    def contact_email(self) -> str:
        return self.email_business or self.owner_contact or ""

    @property
    def social_urls(self) -> List[str]:
        return [u for u in (self.facebook_url, self.instagram_url) if u]


# =============================================================================
# OUTREACH SCHEMAS
# =============================================================================

class OutreachMessages(BaseModel):
    """Channel-specific outreach drafts"""
    email: str
    dm: str
    sms: str


class OutreachAlternatives(BaseModel):
    """Tone variants of the outreach drafts"""
    formal: OutreachMessages
    casual: OutreachMessages


class OutreachResult(BaseModel):
    """Response body for outreach generation"""
    messages: OutreachMessages
    alternatives: OutreachAlternatives


# =============================================================================
# API RESPONSE SCHEMAS
# =============================================================================

class StartJobResponse(BaseModel):
    """Response after a job is accepted"""
    job_id: str
    status: str = "started"
