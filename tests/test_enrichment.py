"""
Unit tests for stage4_enrichment collaborators.
"""

import json
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from lead_discovery.config.settings import (
    DEFAULT_TIMEOUTS,
    FACEBOOK_HOOK,
    GENERIC_HOOKS,
    INSTAGRAM_HOOK,
    LLM_CONFIG,
)
from lead_discovery.models.schemas import DemoAssets, OwnerInfo
from lead_discovery.stages.stage4_enrichment import (
    DemoAssetGenerator,
    HookGenerator,
    OwnerDirectoryResolver,
    is_independent,
)


def _llm_client(content):
    client = MagicMock()
    message = MagicMock()
    message.content = content
    client.chat.completions.create.return_value = MagicMock(choices=[MagicMock(message=message)])
    return client


@pytest.mark.unit
class TestIsIndependent:
    @pytest.mark.parametrize("name", ["Starbucks Reserve", "SUBWAY #1234", "Domino's Pizza"])
    def test_chains(self, name):
        assert is_independent(name) is False

    @pytest.mark.parametrize("name", ["Sunrise Cafe", "The Corner Pub"])
    def test_independents(self, name):
        assert is_independent(name) is True


# ============================================================================
# Owner lookup
# ============================================================================

@pytest.mark.unit
class TestOwnerDirectoryResolver:
    def test_two_sources_verify_owner(self, owner_directory):
        info = OwnerDirectoryResolver(owner_directory).resolve("Sunrise Cafe")

        assert info.owner_name == "Maria Lopez"
        assert info.owner_verified is True
        assert info.owner_sources == ["linkedin.com/in/marialopez", "sos.state.tx.us/filing/123"]
        assert info.owner_contact == "maria@sunrisecafe.com"

    def test_lookup_ignores_case_and_spacing(self, owner_directory):
        info = OwnerDirectoryResolver(owner_directory).resolve("  sunrise   CAFE ")
        assert info.owner_name == "Maria Lopez"

    def test_single_source_is_unverified_without_contact(self):
        directory = {"Local Grounds": [
            {"owner_name": "Sam Lee", "source": "yelp.com/biz/local-grounds", "contact": "sam@lg.com"},
        ]}
        info = OwnerDirectoryResolver(directory).resolve("Local Grounds")

        assert info.owner_name == "Sam Lee"
        assert info.owner_verified is False
        assert info.owner_contact is None

    def test_repeated_source_counts_once(self):
        directory = {"Local Grounds": [
            {"owner_name": "Sam Lee", "source": "yelp.com/biz/local-grounds"},
            {"owner_name": "Sam Lee", "source": "yelp.com/biz/local-grounds"},
        ]}
        assert OwnerDirectoryResolver(directory).resolve("Local Grounds").owner_verified is False

    def test_most_mentioned_owner_wins(self):
        directory = {"Bean There": [
            {"owner_name": "Ann Park", "source": "a.com"},
            {"owner_name": "Joe Kim", "source": "b.com"},
            {"owner_name": "Joe Kim", "source": "c.com"},
        ]}
        info = OwnerDirectoryResolver(directory).resolve("Bean There")
        assert info.owner_name == "Joe Kim"
        assert info.owner_verified is True

    def test_unknown_business(self, owner_directory):
        assert OwnerDirectoryResolver(owner_directory).resolve("Nowhere Diner") == OwnerInfo()

    def test_from_file(self, tmp_path, owner_directory):
        path = tmp_path / "owners.json"
        path.write_text(json.dumps(owner_directory), encoding="utf-8")

        resolver = OwnerDirectoryResolver.from_file(path)

        assert resolver.resolve("Sunrise Cafe").owner_verified is True

    def test_from_missing_file_is_empty(self, tmp_path):
        resolver = OwnerDirectoryResolver.from_file(tmp_path / "missing.json")
        assert resolver.resolve("Sunrise Cafe") == OwnerInfo()

    def test_from_malformed_file_is_empty(self, tmp_path):
        path = tmp_path / "owners.json"
        path.write_text("{not json", encoding="utf-8")
        assert OwnerDirectoryResolver.from_file(path).directory == {}


# ============================================================================
# Personal hooks
# ============================================================================

@pytest.mark.unit
class TestHookGenerator:
    def test_llm_hook_is_cleaned(self):
        client = _llm_client('  "Your latte art is the talk of South Congress."  ')
        hook = HookGenerator(client=client).generate("Sunrise Cafe", [])

        assert hook == "Your latte art is the talk of South Congress."
        client.chat.completions.create.assert_called_once()

    def test_llm_error_falls_back_to_rules(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = OpenAIError("rate limited")

        hook = HookGenerator(client=client).generate("Sunrise Cafe", ["https://facebook.com/sunrise"])

        assert hook == FACEBOOK_HOOK

    def test_empty_llm_reply_falls_back(self):
        hook = HookGenerator(client=_llm_client("")).generate("Sunrise Cafe", ["https://instagram.com/s"])
        assert hook == INSTAGRAM_HOOK

    def test_rule_based_without_key(self, monkeypatch):
        monkeypatch.setitem(LLM_CONFIG, "api_key", "")
        generator = HookGenerator()

        assert generator.client is None
        hook = generator.generate("Sunrise Cafe", [])
        assert hook in GENERIC_HOOKS
        assert generator.generate("Sunrise Cafe", []) == hook

    def test_facebook_preferred_over_instagram(self, monkeypatch):
        monkeypatch.setitem(LLM_CONFIG, "api_key", "")
        hook = HookGenerator().generate(
            "Sunrise Cafe", ["https://instagram.com/s", "https://facebook.com/s"]
        )
        assert hook == FACEBOOK_HOOK

    @pytest.mark.parametrize("provider", ["openrouter", "openai"])
    def test_llm_client_is_time_bounded(self, monkeypatch, provider):
        monkeypatch.setitem(LLM_CONFIG, "provider", provider)
        monkeypatch.setitem(LLM_CONFIG, "max_retries", 1)
        monkeypatch.setitem(DEFAULT_TIMEOUTS, "llm_s", 4.0)

        client = HookGenerator(api_key="test-key").client

        assert client.timeout == 4.0
        assert client.max_retries == 1


# ============================================================================
# Demo assets
# ============================================================================

@pytest.mark.unit
class TestDemoAssetGenerator:
    def test_slugged_urls(self, make_candidate):
        assets = DemoAssetGenerator("https://demo.test/").generate(make_candidate("Bean There, Done That!"))

        assert assets.demo_desktop_screenshot_url == "https://demo.test/bean-there-done-that-desktop.png"
        assert assets.demo_mobile_screenshot_url == "https://demo.test/bean-there-done-that-mobile.png"
        assert assets.demo_video_url == "https://demo.test/bean-there-done-that-video.mp4"

    def test_unsluggable_name(self, make_candidate):
        assert DemoAssetGenerator("https://demo.test").generate(make_candidate("!!!")) == DemoAssets()
