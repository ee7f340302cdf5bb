"""
Lead Discovery Engine
=====================
Finds local businesses that need a better website and turns them into
scored, outreach-ready leads:
  Stage 1: Acquisition (search results)
  Stage 2: Website Classification
  Stage 3: Filter Policy
  Stage 4: Enrichment (owner, hook, demo assets)
  Stage 5: Weighted Scoring
  Stage 6: Outreach Drafts
"""

__version__ = "1.0.0"
__author__ = "Lead Discovery Team"
