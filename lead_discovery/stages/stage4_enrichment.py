"""
Stage 4: Enrichment
===================
Collaborators that add owner, outreach-hook and demo-asset data to a
candidate that passed the filter policy.

All of them fail soft: a lookup problem yields an empty/placeholder result
instead of an exception, so one bad candidate never aborts a job.
"""

import hashlib
import json
import logging
import re
from collections import OrderedDict
from pathlib import Path
from typing import Optional, Dict, Any, List, Union

from openai import OpenAI, OpenAIError

from ..models.schemas import OwnerInfo, DemoAssets, RawCandidate
from ..config.settings import (
    LLM_CONFIG,
    DEFAULT_TIMEOUTS,
    OWNER_DIRECTORY_PATH,
    DEMO_ASSET_BASE_URL,
    KNOWN_CHAINS,
    GENERIC_HOOKS,
    FACEBOOK_HOOK,
    INSTAGRAM_HOOK,
)

logger = logging.getLogger(__name__)


def is_independent(business_name: str) -> bool:
    """False when the name matches a known chain or franchise."""
    name = business_name.lower()
    return not any(chain in name for chain in KNOWN_CHAINS)


def _normalize(name: str) -> str:
    return re.sub(r"\s+", " ", name.strip().lower())


class OwnerDirectoryResolver:
    """
    Resolves business owners from a directory of sourced owner mentions.

    Directory format (JSON)::

        {
          "Sunrise Cafe": [
            {"owner_name": "Maria Lopez", "source": "linkedin.com/in/marialopez",
             "contact": "maria@sunrisecafe.com"},
            {"owner_name": "Maria Lopez", "source": "sos.state.tx.us/filing/123"}
          ]
        }

    An owner is verified when at least two distinct sources name them.
    """

    MIN_SOURCES_FOR_VERIFICATION = 2

    def __init__(self, directory: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.directory = {
            _normalize(name): records for name, records in (directory or {}).items()
        }

    @classmethod
    def from_file(cls, path: Union[str, Path, None] = None) -> "OwnerDirectoryResolver":
        """Load a directory file; a missing or unreadable file gives an empty directory."""
        path = path or OWNER_DIRECTORY_PATH
        if not path:
            return cls()
        try:
            with open(path, encoding="utf-8") as f:
                return cls(json.load(f))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Owner directory %s not loaded: %s", path, e)
            return cls()

    def resolve(self, business_name: str) -> OwnerInfo:
        records = self.directory.get(_normalize(business_name), [])
        if not records:
            return OwnerInfo()

        # Group sources by owner, preserving first-seen order
        by_owner: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()
        for record in records:
            owner = (record.get("owner_name") or "").strip()
            if owner:
                by_owner.setdefault(owner, []).append(record)
        if not by_owner:
            return OwnerInfo()

        owner, owner_records = max(by_owner.items(), key=lambda item: len(item[1]))
        sources = [r["source"] for r in owner_records if r.get("source")]
        verified = len(set(sources)) >= self.MIN_SOURCES_FOR_VERIFICATION
        contact = next((r["contact"] for r in owner_records if r.get("contact")), None)

        return OwnerInfo(
            owner_name=owner,
            owner_verified=verified,
            owner_sources=sources,
            owner_contact=contact if verified else None,
        )


class HookGenerator:
    """
    Writes the one-line personal opener used in outreach.

    Uses an LLM (OpenRouter/OpenAI) when an API key is configured and falls
    back to rule-based hooks otherwise. Always returns non-empty text.
    """

    def __init__(self, api_key: Optional[str] = None, client: Optional[Any] = None):
        self.api_key = api_key or LLM_CONFIG.get("api_key")
        self.model = LLM_CONFIG.get("model")
        self.client = client

        if self.client is None and self.api_key:
            # Bounded so an abandoned call frees its worker
            limits = {
                "timeout": DEFAULT_TIMEOUTS["llm_s"],
                "max_retries": LLM_CONFIG.get("max_retries", 1),
            }
            if LLM_CONFIG.get("provider") == "openai":
                self.client = OpenAI(api_key=self.api_key, **limits)
            else:
                self.client = OpenAI(
                    api_key=self.api_key,
                    **limits,
                    base_url=LLM_CONFIG.get("base_url"),
                    default_headers={
                        "HTTP-Referer": LLM_CONFIG.get("site_url"),
                        "X-Title": LLM_CONFIG.get("app_name"),
                    },
                )

    def generate(self, business_name: str, social_urls: List[str]) -> str:
        if self.client:
            try:
                hook = self._generate_with_llm(business_name, social_urls)
                if hook:
                    return hook
            except OpenAIError as e:
                logger.warning("LLM hook generation failed for %s: %s", business_name, e)

        return self._generate_rule_based(business_name, social_urls)

    def _generate_with_llm(self, business_name: str, social_urls: List[str]) -> str:
        socials = ", ".join(social_urls) if social_urls else "none found"
        prompt = (
            f"Write one short, warm, specific-sounding opening sentence for a cold "
            f"message to the owner of a local business called '{business_name}'. "
            f"Known social profiles: {socials}. Do not mention websites, pricing or "
            f"that you are selling anything. Return only the sentence."
        )
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": "You write brief, friendly outreach openers."},
                {"role": "user", "content": prompt},
            ],
            temperature=LLM_CONFIG.get("temperature", 0.7),
            max_tokens=LLM_CONFIG.get("max_tokens", 120),
        )
        content = response.choices[0].message.content or ""
        return content.strip().strip('"').strip()

    def _generate_rule_based(self, business_name: str, social_urls: List[str]) -> str:
        if any("facebook" in url for url in social_urls):
            return FACEBOOK_HOOK
        if any("instagram" in url for url in social_urls):
            return INSTAGRAM_HOOK

        digest = hashlib.sha256(business_name.encode("utf-8")).digest()
        return GENERIC_HOOKS[digest[0] % len(GENERIC_HOOKS)]


class DemoAssetGenerator:
    """
    Prepares demo-site asset locations for a business.

    Rendering happens out of band; this returns where the assets will live.
    """

    def __init__(self, base_url: str = DEMO_ASSET_BASE_URL):
        self.base_url = base_url.rstrip("/")

    def generate(self, business: RawCandidate) -> DemoAssets:
        slug = re.sub(r"[^a-z0-9]+", "-", business.business_name.lower()).strip("-")
        if not slug:
            return DemoAssets()
        return DemoAssets(
            demo_desktop_screenshot_url=f"{self.base_url}/{slug}-desktop.png",
            demo_mobile_screenshot_url=f"{self.base_url}/{slug}-mobile.png",
            demo_video_url=f"{self.base_url}/{slug}-video.mp4",
        )
