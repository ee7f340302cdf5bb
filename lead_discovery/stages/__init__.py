# Pipeline stages module
from .stage1_acquisition import CandidateSource, GooglePlacesSource, SampleDataSource
from .stage2_classifier import WebsiteClassifier, WebsiteFetcher, classify
from .stage3_filters import include, include_enriched
from .stage4_enrichment import OwnerDirectoryResolver, HookGenerator, DemoAssetGenerator
from .stage5_scoring import LeadScoringStage
from .stage6_outreach import MessageComposer
