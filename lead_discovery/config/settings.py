"""
Configuration settings for the Lead Discovery Engine
"""

from typing import Dict, List, Tuple
import os

# =============================================================================
# LLM CONFIGURATION (OpenRouter) - used for personal hook generation
# =============================================================================

LLM_CONFIG = {
    "provider": os.getenv("LLM_PROVIDER", "openrouter"),  # openrouter, openai
    "model": os.getenv("LLM_MODEL", "openai/gpt-4o-mini"),
    "api_key": os.getenv("OPENROUTER_API_KEY", ""),
    "base_url": os.getenv("LLM_BASE_URL", "https://openrouter.ai/api/v1"),
    "max_tokens": 120,
    "temperature": 0.7,
    "max_retries": int(os.getenv("LLM_MAX_RETRIES", "1")),
    "site_url": os.getenv("OPENROUTER_SITE_URL", "http://localhost:8000"),
    "app_name": os.getenv("OPENROUTER_APP_NAME", "Lead Discovery Engine"),
}

# =============================================================================
# DATA SOURCES
# =============================================================================

GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")
MAX_CANDIDATES = int(os.getenv("MAX_CANDIDATES", "25"))
OWNER_DIRECTORY_PATH = os.getenv("OWNER_DIRECTORY_PATH", "")
DEMO_ASSET_BASE_URL = os.getenv("DEMO_ASSET_BASE_URL", "https://example.com/demo")
OUTREACH_SENDER_NAME = os.getenv("OUTREACH_SENDER_NAME", "Alex")

# =============================================================================
# PIPELINE THRESHOLDS & TIMEOUTS
# =============================================================================

# Minimum lead score for a candidate to be persisted. Deliberately permissive;
# raise it once the data sources are producing richer owner/social data.
DEFAULT_THRESHOLDS = {
    "qualification": int(os.getenv("QUALIFICATION_THRESHOLD", "40")),
    "high_score": int(os.getenv("HIGH_SCORE_THRESHOLD", "80")),
}

DEFAULT_TIMEOUTS = {
    "acquisition_s": float(os.getenv("ACQUISITION_TIMEOUT_S", "15")),
    "enrichment_s": float(os.getenv("ENRICHMENT_TIMEOUT_S", "10")),
    "website_fetch_s": float(os.getenv("WEBSITE_FETCH_TIMEOUT_S", "10")),
    "llm_s": float(os.getenv("LLM_TIMEOUT_S", "8")),
}

JOB_WORKERS = int(os.getenv("JOB_WORKERS", "2"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# =============================================================================
# SCORING FACTORS (name, weight) - weights sum to 100
# =============================================================================

SCORING_FACTORS: List[Tuple[str, int]] = [
    ("website", 35),
    ("decision_maker", 25),
    ("social", 15),
    ("reputation", 15),
    ("size_match", 10),
]

WEBSITE_STATUS_VALUES = {
    "NO_WEBSITE": 1.0,
    "SOCIAL_ONLY": 0.9,
    "OUTDATED_SITE": 0.8,
    "MODERN_SITE": 0.0,
}
UNKNOWN_WEBSITE_VALUE = 0.5

# (max days since last post, value), checked in order
SOCIAL_ACTIVITY_BANDS = [
    (7, 1.0),
    (30, 0.8),
    (90, 0.6),
]
STALE_SOCIAL_VALUE = 0.3
NO_SOCIAL_VALUE = 0.2
UNPARSABLE_POST_AGE_DAYS = 999

RATING_BANDS = [
    (4.0, 0.6),
    (3.5, 0.4),
    (3.0, 0.2),
]
REVIEW_COUNT_BANDS = [
    (100, 0.4),
    (50, 0.3),
    (20, 0.2),
    (5, 0.1),
]
MISSING_REPUTATION_VALUE = 0.4

CONFIDENCE_RULES = {
    "base": 50,
    "owner_verified": 20,
    "contact_available": 15,
    "recent_social": 10,
    "good_rating": 5,
    "recent_social_max_days": 30,
    "good_rating_min": 3.5,
}

# =============================================================================
# WEBSITE CLASSIFICATION
# =============================================================================

SOCIAL_DOMAINS = [
    "facebook.com",
    "fb.com",
    "instagram.com",
    "tiktok.com",
    "twitter.com",
    "x.com",
    "linkedin.com",
]

MODERN_FRAMEWORK_MARKERS = [
    "bootstrap",
    "tailwind",
    "react",
    "vue",
    "angular",
    "next",
    "nuxt",
    "svelte",
    "gatsby",
]

# Attributes/ids left in the DOM by client-side frameworks
MODERN_FRAMEWORK_DOM_MARKERS = [
    "__NEXT_DATA__",
    "__nuxt",
    "data-reactroot",
    "ng-version",
]

HTTP_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
}

# =============================================================================
# SIZE MATCH
# =============================================================================

# Lower-cased name fragments of franchises/chains; a match marks the business
# as not independent.
KNOWN_CHAINS = [
    "starbucks",
    "dunkin",
    "mcdonald",
    "subway",
    "burger king",
    "wendy's",
    "taco bell",
    "chipotle",
    "domino's",
    "pizza hut",
    "panera",
    "great clips",
    "supercuts",
    "sport clips",
    "applebee",
    "olive garden",
    "chili's",
    "7-eleven",
]

# =============================================================================
# ENRICHMENT FALLBACKS
# =============================================================================

GENERIC_HOOKS = [
    "Your location has such great local character and charm.",
    "Noticed your strong community presence and customer loyalty.",
    "Your business has such a welcoming atmosphere from what I've seen.",
    "The reviews mention your excellent customer service consistently.",
    "Your business has such authentic local personality and style.",
]

FACEBOOK_HOOK = "Noticed your recent Facebook activity and community engagement."
INSTAGRAM_HOOK = "Loved the recent photos on your Instagram - great visual storytelling."

# =============================================================================
# CSV EXPORT
# =============================================================================

CSV_COLUMNS = [
    "Business Name",
    "Owner",
    "Website Status",
    "Lead Score",
    "Contact Email",
    "Phone",
    "Address",
    "City",
    "State",
    "Personal Hook",
]

# =============================================================================
# SAMPLE DATA (offline acquisition)
# =============================================================================

SAMPLE_ADDRESSES = [
    "123 Main Street",
    "456 Oak Avenue",
    "789 Pine Road",
    "321 Elm Drive",
    "654 Maple Lane",
    "987 Cedar Court",
    "147 Birch Way",
    "258 Walnut Street",
]

SAMPLE_BUSINESS_NAMES: Dict[str, List[str]] = {
    "coffee": ["{city} Coffee Roasters", "The Daily Grind", "Sunrise Cafe",
               "Bean There Done That", "Local Grounds"],
    "restaurant": ["{city} Bistro", "Home Kitchen", "The Local Table",
                   "Family Diner", "Garden Restaurant"],
    "bar": ["{city} Taphouse", "The Corner Pub", "Local Brewery", "Craft Beer Co."],
    "salon": ["{city} Hair Studio", "Bella Beauty Salon", "Style & Grace",
              "The Hair Lounge"],
}

# Keyword aliases onto SAMPLE_BUSINESS_NAMES keys
SAMPLE_TYPE_ALIASES = {
    "cafe": "coffee",
    "coffee": "coffee",
    "restaurant": "restaurant",
    "bar": "bar",
    "pub": "bar",
    "salon": "salon",
    "beauty": "salon",
}
