"""
Shared pytest fixtures for the lead discovery test suite.
"""

import threading
import time
from typing import Dict, List, Optional

import pytest

from lead_discovery.config.logging_config import reset_logging
from lead_discovery.engine import DiscoveryEngine
from lead_discovery.errors import AcquisitionError, StoreError
from lead_discovery.models.pipeline_config import (
    PipelineConfig,
    ScoringThresholds,
    TimeoutConfig,
)
from lead_discovery.models.schemas import BusinessLead, RawCandidate, WebsiteStatus
from lead_discovery.stages.stage1_acquisition import CandidateSource
from lead_discovery.stages.stage2_classifier import classify
from lead_discovery.stages.stage4_enrichment import DemoAssetGenerator, OwnerDirectoryResolver
from lead_discovery.stages.stage6_outreach import MessageComposer
from lead_discovery.storage.store import InMemoryLeadStore


# ── Logging isolation ─────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def _reset_logging():
    """Tear down package logging handlers between tests."""
    yield
    reset_logging()


# ── Fake collaborators ────────────────────────────────────────────────────────

class StaticSource(CandidateSource):
    """Returns a fixed candidate list, or raises the given error."""

    def __init__(self, candidates: List[RawCandidate], error: Optional[Exception] = None, delay: float = 0):
        self.candidates = candidates
        self.error = error
        self.delay = delay
        self.calls = []

    def search(self, location, business_type):
        self.calls.append((location, business_type))
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.candidates)


class MappedClassifier:
    """Classifies by URL lookup; unmapped URLs use the offline rules."""

    def __init__(self, statuses: Dict[str, WebsiteStatus]):
        self.statuses = statuses

    def analyze(self, website_url):
        if website_url in self.statuses:
            return self.statuses[website_url]
        return classify(website_url, None)


class StaticHookGenerator:
    def generate(self, business_name, social_urls):
        return f"Loved the vibe at {business_name}."


class SlowOwnerResolver:
    def __init__(self, delay: float):
        self.delay = delay

    def resolve(self, business_name):
        time.sleep(self.delay)
        raise AssertionError("result should have been abandoned")


class BrokenOwnerResolver:
    def resolve(self, business_name):
        raise RuntimeError("directory offline")


class BlockingHookGenerator:
    """Holds every call until released, like a hung LLM endpoint."""

    def __init__(self):
        self.release = threading.Event()

    def generate(self, business_name, social_urls):
        self.release.wait(timeout=10)
        return f"Loved the vibe at {business_name}."


class FailingLeadStore(InMemoryLeadStore):
    """Accepts the first `accept` leads, then raises on create_lead."""

    def __init__(self, accept: int = 1):
        super().__init__()
        self.accept = accept

    def create_lead(self, lead):
        if self.accept <= 0:
            raise StoreError("lead table unavailable")
        self.accept -= 1
        return super().create_lead(lead)


# ── Records ───────────────────────────────────────────────────────────────────

@pytest.fixture
def make_candidate():
    """Factory for RawCandidate with sensible defaults."""
    def _make(business_name="Sunrise Cafe", **overrides):
        data = {
            "business_name": business_name,
            "address": "123 Main Street",
            "city": "Austin",
            "state": "TX",
            "postal_code": "78701",
            "phone_primary": "(512) 555-0100",
        }
        data.update(overrides)
        return RawCandidate(**data)
    return _make


@pytest.fixture
def make_lead():
    """Factory for BusinessLead with sensible defaults."""
    def _make(**overrides):
        data = {
            "business_name": "Sunrise Cafe",
            "address": "123 Main Street",
            "city": "Austin",
            "state": "TX",
            "website_status": WebsiteStatus.NO_WEBSITE,
        }
        data.update(overrides)
        return BusinessLead(**data)
    return _make


@pytest.fixture
def owner_directory():
    """Owner records with Sunrise Cafe confirmed by two sources."""
    return {
        "Sunrise Cafe": [
            {
                "owner_name": "Maria Lopez",
                "source": "linkedin.com/in/marialopez",
                "contact": "maria@sunrisecafe.com",
            },
            {"owner_name": "Maria Lopez", "source": "sos.state.tx.us/filing/123"},
        ],
    }


@pytest.fixture
def ten_candidates(make_candidate):
    """
    Ten candidates of which exactly three qualify at the default thresholds:
    three with weak web presence, four modern sites, three low-rated chains.
    """
    qualifying = [
        make_candidate(
            "Sunrise Cafe",
            website_url=None,
            avg_rating=4.5,
            num_reviews=150,
            recent_posts="3 days ago",
        ),
        make_candidate("Bean There", website_url="https://facebook.com/beanthere",
                       facebook_url="https://facebook.com/beanthere"),
        make_candidate("Local Grounds", website_url="http://localgrounds.test"),
    ]
    modern = [
        make_candidate(f"Modern Roasters {i}", website_url=f"https://modern{i}.test",
                       avg_rating=4.8, num_reviews=300)
        for i in range(4)
    ]
    chains = [
        make_candidate(f"Starbucks #{i}", website_url=f"http://sb{i}.test",
                       avg_rating=2.0, num_reviews=2)
        for i in range(3)
    ]
    return qualifying + modern + chains


@pytest.fixture
def ten_statuses():
    statuses = {f"https://modern{i}.test": WebsiteStatus.MODERN_SITE for i in range(4)}
    statuses["http://localgrounds.test"] = WebsiteStatus.OUTDATED_SITE
    for i in range(3):
        statuses[f"http://sb{i}.test"] = WebsiteStatus.OUTDATED_SITE
    return statuses


# ── Engine ────────────────────────────────────────────────────────────────────

def make_config(qualification=40, high_score=80, acquisition_s=2.0, enrichment_s=2.0):
    return PipelineConfig(
        name="Test Pipeline",
        thresholds=ScoringThresholds(qualification=qualification, high_score=high_score),
        timeouts=TimeoutConfig(
            acquisition_s=acquisition_s,
            enrichment_s=enrichment_s,
            website_fetch_s=1.0,
        ),
        job_workers=1,
    )


@pytest.fixture
def build_engine():
    """Factory for an engine wired to in-process fakes; shut down after the test."""
    engines = []

    def _build(
        candidates=None,
        statuses=None,
        owners=None,
        source=None,
        owner_resolver=None,
        hook_generator=None,
        store=None,
        **config_kwargs,
    ):
        engine = DiscoveryEngine(
            store=store or InMemoryLeadStore(),
            source=source or StaticSource(candidates or []),
            classifier=MappedClassifier(statuses or {}),
            owner_resolver=owner_resolver or OwnerDirectoryResolver(owners or {}),
            hook_generator=hook_generator or StaticHookGenerator(),
            demo_generator=DemoAssetGenerator("https://demo.test"),
            composer=MessageComposer(sender_name="Alex"),
            config=make_config(**config_kwargs),
        )
        engines.append(engine)
        return engine

    yield _build
    for engine in engines:
        engine.shutdown(wait=True)


@pytest.fixture
def make_source():
    return StaticSource


@pytest.fixture
def failing_source():
    return StaticSource([], error=AcquisitionError("Google Places search failed: REQUEST_DENIED"))


@pytest.fixture
def slow_source():
    return StaticSource([], delay=0.5)


@pytest.fixture
def slow_owner_resolver():
    return SlowOwnerResolver(delay=0.5)


@pytest.fixture
def broken_owner_resolver():
    return BrokenOwnerResolver()


@pytest.fixture
def blocking_hook_generator():
    generator = BlockingHookGenerator()
    yield generator
    generator.release.set()


@pytest.fixture
def failing_lead_store():
    return FailingLeadStore(accept=1)
