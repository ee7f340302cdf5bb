"""
Stage 1: Candidate Acquisition
==============================
Retrieves raw business candidates for a location and business type.

Sources:
- GooglePlacesSource: Google Maps Places text search + place details
- SampleDataSource: deterministic offline dataset for demos and development

Any source failure is raised as AcquisitionError; the orchestrator treats it
as a hard failure of the job.
"""

import hashlib
import logging
import re
import time
from abc import ABC, abstractmethod
from typing import List, Optional, Dict, Any
from urllib.parse import quote_plus, urlparse

import googlemaps
from googlemaps.exceptions import ApiError, TransportError, Timeout

from ..errors import AcquisitionError
from ..models.schemas import RawCandidate
from ..config.settings import (
    GOOGLE_MAPS_API_KEY,
    MAX_CANDIDATES,
    SAMPLE_ADDRESSES,
    SAMPLE_BUSINESS_NAMES,
    SAMPLE_TYPE_ALIASES,
)

logger = logging.getLogger(__name__)

MAX_PAGES = 3  # Places text search serves at most 3 pages of 20
PAGINATION_DELAY_SECONDS = 2.0  # next_page_token needs a moment to activate
DETAIL_FIELDS = ["formatted_phone_number", "website", "url"]
_ZIP_RE = re.compile(r"\b(\d{5})(?:-\d{4})?\b")
_COUNTRY_SUFFIXES = {"usa", "united states", "us"}


class CandidateSource(ABC):
    """Interface every data-acquisition source implements."""

    @abstractmethod
    def search(self, location: str, business_type: str) -> List[RawCandidate]:
        """Return raw candidates; raise AcquisitionError on failure."""


def parse_address(formatted: str) -> Dict[str, Optional[str]]:
    """
    Split a formatted US address into street, city, state and postal code.

    "123 Main St, Austin, TX 78701, USA" ->
        {"address": "123 Main St", "city": "Austin", "state": "TX", "postal_code": "78701"}
    """
    parts = [p.strip() for p in (formatted or "").split(",") if p.strip()]
    if parts and parts[-1].lower() in _COUNTRY_SUFFIXES:
        parts = parts[:-1]

    result: Dict[str, Optional[str]] = {
        "address": parts[0] if parts else (formatted or ""),
        "city": "",
        "state": "",
        "postal_code": None,
    }
    if len(parts) < 2:
        return result

    state_zip = parts[-1]
    zip_match = _ZIP_RE.search(state_zip)
    if zip_match:
        result["postal_code"] = zip_match.group(1)
    result["state"] = state_zip.split(" ")[0] if state_zip else ""
    if len(parts) >= 3:
        result["city"] = parts[-2]
    return result


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", name.lower())


def _yelp_search_url(name: str, city: str, state: str) -> str:
    loc = f"{city}, {state}".strip(", ")
    return (
        f"https://www.yelp.com/search?find_desc={quote_plus(name)}"
        f"&find_loc={quote_plus(loc)}"
    )


class GooglePlacesSource(CandidateSource):
    """
    Candidate source backed by the Google Maps Places API.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        max_results: int = MAX_CANDIDATES,
        client: Optional[googlemaps.Client] = None,
    ):
        self.api_key = api_key or GOOGLE_MAPS_API_KEY
        if client is None and not self.api_key:
            raise ValueError(
                "Google Maps API key required. Set GOOGLE_MAPS_API_KEY environment "
                "variable or pass api_key parameter."
            )
        self.max_results = max_results
        self._client = client or googlemaps.Client(key=self.api_key)

    def search(self, location: str, business_type: str) -> List[RawCandidate]:
        query = f"{business_type} in {location}"
        logger.info("Searching Google Places for '%s'", query)

        try:
            places = self._text_search(query)
            candidates = [self._to_candidate(place) for place in places]
        except (ApiError, TransportError, Timeout) as e:
            raise AcquisitionError(f"Google Places search failed: {e}") from e

        logger.info("Google Places returned %d candidates for '%s'", len(candidates), query)
        return candidates

    def _text_search(self, query: str) -> List[Dict[str, Any]]:
        results: List[Dict[str, Any]] = []
        response = self._client.places(query=query)

        for page in range(MAX_PAGES):
            results.extend(response.get("results", []))
            token = response.get("next_page_token")
            if len(results) >= self.max_results or not token or page == MAX_PAGES - 1:
                break
            time.sleep(PAGINATION_DELAY_SECONDS)
            response = self._client.places(query=query, page_token=token)

        return results[: self.max_results]

    def _to_candidate(self, place: Dict[str, Any]) -> RawCandidate:
        name = place.get("name", "")
        address = parse_address(place.get("formatted_address", ""))

        details: Dict[str, Any] = {}
        place_id = place.get("place_id")
        if place_id:
            details = self._client.place(place_id, fields=DETAIL_FIELDS).get("result", {})

        website = details.get("website")
        facebook_url = None
        instagram_url = None
        if website:
            host = urlparse(website).netloc.lower()
            if "facebook.com" in host:
                facebook_url = website
            elif "instagram.com" in host:
                instagram_url = website

        return RawCandidate(
            business_name=name,
            address=address["address"] or "",
            city=address["city"] or "",
            state=address["state"] or "",
            postal_code=address["postal_code"],
            phone_primary=details.get("formatted_phone_number"),
            website_url=website,
            google_maps_url=details.get("url"),
            yelp_url=_yelp_search_url(name, address["city"] or "", address["state"] or ""),
            facebook_url=facebook_url,
            instagram_url=instagram_url,
            avg_rating=place.get("rating"),
            num_reviews=place.get("user_ratings_total"),
        )


class SampleDataSource(CandidateSource):
    """
    Deterministic offline candidates shaped like real search results.

    Every attribute is derived from a hash of the business name, so the same
    search always returns the same businesses.
    """

    def search(self, location: str, business_type: str) -> List[RawCandidate]:
        parts = [p.strip() for p in location.split(",")]
        city = parts[0] or "Downtown"
        state = parts[1] if len(parts) > 1 and parts[1] else "CA"

        names = self._business_names(city, business_type)
        candidates = [
            self._build(name, SAMPLE_ADDRESSES[i % len(SAMPLE_ADDRESSES)], city, state)
            for i, name in enumerate(names)
        ]
        logger.info("Sample source produced %d candidates for %s", len(candidates), location)
        return candidates

    def _business_names(self, city: str, business_type: str) -> List[str]:
        type_lower = business_type.lower()
        for keyword, key in SAMPLE_TYPE_ALIASES.items():
            if keyword in type_lower:
                return [n.format(city=city) for n in SAMPLE_BUSINESS_NAMES[key]]

        word = business_type.split()[0].title()
        return [
            f"{city} {word} Co.",
            f"Local {word} Shop",
            f"Family {word}",
            f"{word} Express",
        ]

    def _build(self, name: str, address: str, city: str, state: str) -> RawCandidate:
        digest = hashlib.sha256(name.encode("utf-8")).digest()
        slug = _slug(name)

        website_kind = digest[0] % 4
        if website_kind == 0:
            website = None
        elif website_kind == 1:
            website = f"https://facebook.com/{slug}"
        else:
            website = f"http://www.{slug}.example"

        return RawCandidate(
            business_name=name,
            address=address,
            city=city,
            state=state,
            postal_code=str(10000 + int.from_bytes(digest[1:3], "big") % 90000),
            phone_primary=(
                f"({200 + digest[3] % 800}) {200 + digest[4] % 800}-"
                f"{1000 + int.from_bytes(digest[5:7], 'big') % 9000}"
            ),
            website_url=website,
            google_maps_url=f"https://maps.google.com/search/{quote_plus(name + ' ' + city)}",
            yelp_url=f"https://www.yelp.com/biz/{slug}-{_slug(city)}",
            facebook_url=f"https://facebook.com/{slug}" if digest[7] % 10 >= 3 else None,
            instagram_url=f"https://instagram.com/{slug}" if digest[8] % 10 >= 4 else None,
            email_business=f"info@{slug}.com" if digest[9] % 2 else None,
            avg_rating=round(3.0 + (digest[10] % 21) / 10, 1),
            num_reviews=15 + digest[11] % 200,
            recent_posts=f"{digest[12] % 45} days ago" if digest[13] % 4 else None,
        )
