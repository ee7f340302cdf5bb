"""
Stage 2: Website Classification
===============================
Determines a business's web-presence category.

Rules, in order:
1. No URL                               -> NO_WEBSITE
2. URL on a social network domain       -> SOCIAL_ONLY
3. Viewport + modern framework + HTTPS  -> MODERN_SITE, otherwise OUTDATED_SITE
4. Unreachable site                     -> OUTDATED_SITE
"""

import logging
from typing import Optional, List
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from ..models.schemas import PageSignals, WebsiteStatus
from ..config.settings import (
    SOCIAL_DOMAINS,
    MODERN_FRAMEWORK_MARKERS,
    MODERN_FRAMEWORK_DOM_MARKERS,
    HTTP_HEADERS,
    DEFAULT_TIMEOUTS,
)

logger = logging.getLogger(__name__)


def _host(url: str) -> str:
    if "://" not in url:
        url = f"http://{url}"
    host = urlparse(url).netloc.lower()
    host = host.split("@")[-1].split(":")[0]
    return host


def is_social_url(url: Optional[str]) -> bool:
    """True when the URL's host is (a subdomain of) a known social network."""
    if not url or not url.strip():
        return False
    host = _host(url.strip())
    return any(host == d or host.endswith("." + d) for d in SOCIAL_DOMAINS)


def classify(website_url: Optional[str], page_signals: Optional[PageSignals]) -> WebsiteStatus:
    """
    Classify web presence from a URL and the signals read from its page.

    ``page_signals`` is None when the site could not be fetched.
    """
    if not website_url or not website_url.strip():
        return WebsiteStatus.NO_WEBSITE

    if is_social_url(website_url):
        return WebsiteStatus.SOCIAL_ONLY

    if page_signals is None:
        return WebsiteStatus.OUTDATED_SITE

    if (
        page_signals.has_viewport
        and page_signals.has_modern_framework
        and page_signals.is_secure_transport
    ):
        return WebsiteStatus.MODERN_SITE
    return WebsiteStatus.OUTDATED_SITE


class WebsiteFetcher:
    """
    Fetches a homepage once and reads its modernity signals.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUTS["website_fetch_s"],
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(HTTP_HEADERS)

    def fetch(self, url: str) -> Optional[PageSignals]:
        """Return PageSignals, or None when the site is unreachable."""
        if "://" not in url:
            url = f"http://{url}"

        try:
            response = self.session.get(url, timeout=self.timeout, allow_redirects=True)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.info("Website unreachable %s: %s", url, e)
            return None

        try:
            return self.extract_signals(response.text, response.url or url)
        except (ValueError, TypeError, AssertionError) as e:
            logger.info("Could not parse %s: %s", url, e)
            return None

    def extract_signals(self, html: str, final_url: str) -> PageSignals:
        """Read viewport, framework and transport signals from page HTML."""
        soup = BeautifulSoup(html, "html.parser")

        viewport = soup.find("meta", attrs={"name": lambda v: v and v.lower() == "viewport"})

        asset_refs: List[str] = [
            tag.get("href", "") for tag in soup.find_all("link")
        ] + [tag.get("src", "") for tag in soup.find_all("script")]
        has_framework = any(
            marker in ref.lower()
            for ref in asset_refs
            for marker in MODERN_FRAMEWORK_MARKERS
        )
        if not has_framework:
            has_framework = any(marker in html for marker in MODERN_FRAMEWORK_DOM_MARKERS)

        return PageSignals(
            has_viewport=viewport is not None,
            has_modern_framework=has_framework,
            is_secure_transport=urlparse(final_url).scheme.lower() == "https",
        )


class WebsiteClassifier:
    """
    Classifies a business website, fetching the page only when needed.
    """

    def __init__(self, fetcher: Optional[WebsiteFetcher] = None):
        self.fetcher = fetcher or WebsiteFetcher()

    def analyze(self, website_url: Optional[str]) -> WebsiteStatus:
        """
        Classify a URL end to end. Never raises: any fetch problem is
        reported as OUTDATED_SITE.
        """
        if not website_url or not website_url.strip() or is_social_url(website_url):
            return classify(website_url, None)

        try:
            signals = self.fetcher.fetch(website_url.strip())
        except Exception as e:
            logger.warning("Website fetch failed for %s: %s", website_url, e)
            signals = None

        status = classify(website_url, signals)
        logger.debug("Classified %s as %s", website_url, status.value)
        return status
