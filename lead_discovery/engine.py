"""
Lead Discovery Engine - Main Orchestrator
=========================================
Owns the lifecycle of discovery jobs:
  Acquisition -> Classification -> Filter Policy -> Enrichment ->
  Scoring -> Outreach Drafts -> Lead Store

Job states: pending -> running -> completed | failed. A job never leaves a
terminal state. Progress percentages are only ever raised, and the job
counters are flushed to the store as each lead is persisted, so a failed job
keeps the totals it had reached.

Each job gets its own pool for external calls. A call that outlives its
timeout keeps its worker only until the job ends, and never delays another
job's acquisition.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout
from typing import Optional, Dict, Any, Callable

from .errors import AcquisitionError
from .models.schemas import (
    SearchConfig,
    DiscoveryJob,
    JobStatus,
    JobProgress,
    BusinessLead,
    RawCandidate,
    OwnerInfo,
    DemoAssets,
    WebsiteStatus,
    OutreachResult,
    utcnow,
)
from .models.pipeline_config import PipelineConfig, create_default_pipeline_config
from .storage.store import LeadStore, InMemoryLeadStore
from .stages.stage1_acquisition import CandidateSource, GooglePlacesSource, SampleDataSource
from .stages.stage2_classifier import WebsiteClassifier, WebsiteFetcher
from .stages.stage3_filters import include, include_enriched, rejection_reason
from .stages.stage4_enrichment import (
    OwnerDirectoryResolver,
    HookGenerator,
    DemoAssetGenerator,
    is_independent,
)
from .stages.stage5_scoring import LeadScoringStage, round_half_up
from .stages.stage6_outreach import MessageComposer
from .config.settings import GOOGLE_MAPS_API_KEY, GENERIC_HOOKS

logger = logging.getLogger(__name__)

CALL_POOL_WORKERS = 8


class DiscoveryEngine:
    """
    Runs discovery jobs end to end against an injected store and collaborators.
    """

    def __init__(
        self,
        store: Optional[LeadStore] = None,
        source: Optional[CandidateSource] = None,
        classifier: Optional[WebsiteClassifier] = None,
        owner_resolver: Optional[OwnerDirectoryResolver] = None,
        hook_generator: Optional[HookGenerator] = None,
        demo_generator: Optional[DemoAssetGenerator] = None,
        composer: Optional[MessageComposer] = None,
        config: Optional[PipelineConfig] = None,
    ):
        """
        Initialize the engine.

        Args:
            store: Record repository (in-memory if not provided)
            source: Candidate acquisition source (Google Places when an API
                key is configured, sample data otherwise)
            classifier: Website classifier
            owner_resolver: Owner lookup collaborator
            hook_generator: Personal hook collaborator
            demo_generator: Demo asset collaborator
            composer: Outreach message composer
            config: Thresholds, timeouts and worker count
        """
        self.config = config or create_default_pipeline_config()
        self.store = store or InMemoryLeadStore()
        self.source = source or default_source()
        self.classifier = classifier or WebsiteClassifier(
            WebsiteFetcher(timeout=self.config.timeouts.website_fetch_s)
        )
        self.owner_resolver = owner_resolver or OwnerDirectoryResolver.from_file()
        self.hook_generator = hook_generator or HookGenerator()
        self.demo_generator = demo_generator or DemoAssetGenerator()
        self.scorer = LeadScoringStage()
        self.composer = composer or MessageComposer()

        self._job_pool = ThreadPoolExecutor(
            max_workers=self.config.job_workers, thread_name_prefix="discovery-job"
        )

        self._stats_lock = threading.Lock()
        self.stats = self._empty_stats()

    # =========================================================================
    # Job submission
    # =========================================================================

    def start_job(self, search: SearchConfig, background: bool = True) -> DiscoveryJob:
        """
        Persist a new pending job and hand it to a worker.

        Args:
            search: Validated search configuration
            background: Run on the job pool (True) or inline (False)

        Returns:
            The job as persisted at submission (inline: its final state)
        """
        job = self.store.create_job(
            DiscoveryJob(
                location=search.location,
                business_type=search.business_type,
                filters=search.filters,
            )
        )
        self._bump("jobs_started")
        logger.info(
            "Job %s submitted: '%s' in %s", job.id, search.business_type, search.location
        )

        if background:
            self._job_pool.submit(self.run_job, job.id)
            return job
        return self.run_job(job.id)

    def run_job(self, job_id: str) -> Optional[DiscoveryJob]:
        """
        Drive one job from pending to a terminal state.

        Returns the final job record, or None if the job does not exist.
        """
        job = self.store.get_job(job_id)
        if job is None:
            logger.warning("Job %s not found", job_id)
            return None
        if job.status.is_terminal:
            logger.warning("Job %s already %s; not running it again", job_id, job.status.value)
            return job
        if job.status == JobStatus.RUNNING:
            logger.warning("Job %s is already running", job_id)
            return job

        progress = JobProgress()
        counters = {"qualified_leads": 0, "high_score_leads": 0, "verified_owners": 0}

        calls = ThreadPoolExecutor(
            max_workers=CALL_POOL_WORKERS, thread_name_prefix=f"discovery-call-{job_id[:8]}"
        )
        try:
            self.store.update_job(job_id, status=JobStatus.RUNNING)
            self._process(job, progress, counters, calls)
        except Exception as e:
            logger.exception("Discovery job %s failed", job_id)
            self._bump("jobs_failed")
            return self.store.update_job(
                job_id,
                status=JobStatus.FAILED,
                completed_at=utcnow(),
                error=f"{type(e).__name__}: {str(e)[:200]}",
            )
        finally:
            calls.shutdown(wait=False)

        self._bump("jobs_completed")
        final = self.store.update_job(
            job_id,
            status=JobStatus.COMPLETED,
            progress=JobProgress(google_places=100, social_media=100, owner_verification=100),
            completed_at=utcnow(),
            **counters,
        )
        logger.info(
            "Job %s completed: %d found, %d qualified, %d high score, %d verified owners",
            job_id,
            final.total_found,
            final.qualified_leads,
            final.high_score_leads,
            final.verified_owners,
        )
        return final

    # =========================================================================
    # Pipeline
    # =========================================================================

    def _process(
        self,
        job: DiscoveryJob,
        progress: JobProgress,
        counters: Dict[str, int],
        calls: ThreadPoolExecutor,
    ):
        thresholds = self.config.thresholds

        # Stage 1: Acquisition
        self._advance(job.id, progress, google_places=25)
        candidates = self._acquire(calls, job.location, job.business_type)
        progress.google_places = 100
        self.store.update_job(job.id, progress=progress, total_found=len(candidates))

        total = len(candidates)
        for index, candidate in enumerate(candidates):
            self._bump("candidates_processed")
            self._advance(job.id, progress, social_media=round_half_up(100 * index / total))

            # Stage 2: Classification
            status = self._soft(
                calls,
                "classify",
                WebsiteStatus.OUTDATED_SITE,
                self.classifier.analyze,
                candidate.website_url,
            )

            # Stage 3: Filter Policy
            if not include(status, job.filters):
                self._bump("candidates_filtered")
                logger.debug("Excluded %s (%s)", candidate.business_name, status.value)
                continue

            # Stage 4: Enrichment
            owner = self._soft(
                calls, "owner lookup", OwnerInfo(), self.owner_resolver.resolve, candidate.business_name
            )
            self._advance(
                job.id, progress, owner_verification=round_half_up(100 * index / total)
            )
            hook = self._soft(
                calls,
                "hook generation",
                GENERIC_HOOKS[0],
                self.hook_generator.generate,
                candidate.business_name,
                candidate.social_urls,
            ) or GENERIC_HOOKS[0]
            demo = self._soft(
                calls, "demo assets", DemoAssets(), self.demo_generator.generate, candidate
            )

            lead = self._assemble_lead(job.id, candidate, status, owner, hook, demo)

            if not include_enriched(lead, job.filters):
                self._bump("candidates_filtered")
                logger.debug(
                    "Excluded %s by %s filter",
                    candidate.business_name,
                    rejection_reason(lead, job.filters),
                )
                continue

            # Stage 5: Scoring
            lead_score, breakdown = self.scorer.score(lead)
            lead = lead.model_copy(
                update={
                    "lead_score": lead_score,
                    "score_breakdown": breakdown,
                    "confidence": self.scorer.confidence(lead),
                    "flags": self.scorer.flags(lead),
                }
            )

            if lead_score < thresholds.qualification:
                self._bump("candidates_below_threshold")
                logger.debug("Discarded %s: score %d", candidate.business_name, lead_score)
                continue

            counters["qualified_leads"] += 1
            if lead_score >= thresholds.high_score:
                counters["high_score_leads"] += 1
            if lead.owner_verified:
                counters["verified_owners"] += 1

            # Stage 6: Outreach drafts
            messages = self.composer.compose(lead)
            lead = lead.model_copy(
                update={
                    "outreach_email": messages.email,
                    "outreach_dm": messages.dm,
                    "outreach_sms": messages.sms,
                }
            )

            self.store.create_lead(lead)
            self.store.update_job(job.id, **counters)
            self._bump("leads_persisted")
            logger.info(
                "Lead persisted: %s (score %d, %s)",
                lead.business_name,
                lead_score,
                status.value,
            )

    def _acquire(self, calls: ThreadPoolExecutor, location: str, business_type: str):
        timeout = self.config.timeouts.acquisition_s
        try:
            return self._call(calls, timeout, self.source.search, location, business_type)
        except FuturesTimeout as e:
            raise AcquisitionError(f"Acquisition timed out after {timeout}s") from e
        except AcquisitionError:
            raise
        except Exception as e:
            raise AcquisitionError(f"Acquisition failed: {e}") from e

    def _assemble_lead(
        self,
        job_id: str,
        candidate: RawCandidate,
        status: WebsiteStatus,
        owner: OwnerInfo,
        hook: str,
        demo: DemoAssets,
    ) -> BusinessLead:
        return BusinessLead(
            job_id=job_id,
            business_name=candidate.business_name,
            address=candidate.address,
            city=candidate.city,
            state=candidate.state,
            postal_code=candidate.postal_code,
            phone_primary=candidate.phone_primary,
            email_business=candidate.email_business,
            website_status=status,
            website_url=candidate.website_url,
            google_maps_url=candidate.google_maps_url,
            yelp_url=candidate.yelp_url,
            facebook_url=candidate.facebook_url,
            instagram_url=candidate.instagram_url,
            owner_name=owner.owner_name,
            owner_verified=owner.owner_verified,
            owner_sources=list(owner.owner_sources),
            owner_contact=owner.owner_contact,
            recent_posts=candidate.recent_posts,
            avg_rating=candidate.avg_rating,
            num_reviews=candidate.num_reviews,
            independent_business=is_independent(candidate.business_name),
            personal_hook=hook,
            **demo.model_dump(),
        )

    # =========================================================================
    # Outreach
    # =========================================================================

    def generate_outreach(self, lead_id: str) -> Optional[OutreachResult]:
        """
        Compose drafts and tone variants for a stored lead and attach the
        drafts to it. Returns None when the lead does not exist.
        """
        lead = self.store.get_lead(lead_id)
        if lead is None:
            return None

        messages = self.composer.compose(lead)
        alternatives = self.composer.compose_alternatives(lead)
        self.store.update_lead(
            lead_id,
            outreach_email=messages.email,
            outreach_dm=messages.dm,
            outreach_sms=messages.sms,
        )
        return OutreachResult(messages=messages, alternatives=alternatives)

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics"""
        with self._stats_lock:
            stats = self.stats.copy()
        if stats["candidates_processed"] > 0:
            stats["filter_rate"] = round(
                stats["candidates_filtered"] / stats["candidates_processed"] * 100, 1
            )
            stats["qualification_rate"] = round(
                stats["leads_persisted"] / stats["candidates_processed"] * 100, 1
            )
        return stats

    def reset_stats(self):
        """Reset engine statistics"""
        with self._stats_lock:
            self.stats = self._empty_stats()

    def shutdown(self, wait: bool = True):
        """Stop accepting jobs and release worker threads"""
        self._job_pool.shutdown(wait=wait)

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @staticmethod
    def _call(calls: ThreadPoolExecutor, timeout: float, fn: Callable, *args):
        """Run an external call with a bounded wait."""
        return calls.submit(fn, *args).result(timeout=timeout)

    def _soft(self, calls: ThreadPoolExecutor, label: str, default: Any, fn: Callable, *args):
        """Run an enrichment call; timeouts and errors yield the default."""
        timeout = self.config.timeouts.enrichment_s
        try:
            return self._call(calls, timeout, fn, *args)
        except FuturesTimeout:
            logger.warning("%s timed out after %ss; using default", label, timeout)
        except Exception as e:
            logger.warning("%s failed (%s); using default", label, e)
        return default

    def _advance(self, job_id: str, progress: JobProgress, **values: int):
        """Raise progress fields (never lower them) and publish."""
        changed = False
        for field, value in values.items():
            if value > getattr(progress, field):
                setattr(progress, field, value)
                changed = True
        if changed:
            self.store.update_job(job_id, progress=progress)

    def _bump(self, key: str, amount: int = 1):
        with self._stats_lock:
            self.stats[key] += amount

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            "jobs_started": 0,
            "jobs_completed": 0,
            "jobs_failed": 0,
            "candidates_processed": 0,
            "candidates_filtered": 0,
            "candidates_below_threshold": 0,
            "leads_persisted": 0,
        }


# =============================================================================
# Convenience Functions
# =============================================================================

def default_source() -> CandidateSource:
    """Google Places when an API key is configured, sample data otherwise."""
    if GOOGLE_MAPS_API_KEY:
        return GooglePlacesSource(api_key=GOOGLE_MAPS_API_KEY)
    logger.info("GOOGLE_MAPS_API_KEY not set; using sample data source")
    return SampleDataSource()


def create_engine(
    store: Optional[LeadStore] = None,
    source: Optional[CandidateSource] = None,
    qualification_threshold: Optional[int] = None,
) -> DiscoveryEngine:
    """
    Factory function to create a Discovery Engine with common settings.
    """
    config = create_default_pipeline_config(qualification_threshold=qualification_threshold)
    return DiscoveryEngine(store=store, source=source, config=config)
