"""
Enrichment Module
=================

Asynchronous enrichment and reconciliation of hidden gems:

- EnrichmentCoordinator: loads the gem list and schedules background photo
  lookups, merged back into the store by gem id
- SubmissionPipeline: upload, geocode fallback, create, merge for new gems
"""

from .coordinator import (
    EnrichmentCoordinator,
    enrichment_coordinator,
)
from .submission import (
    SubmissionPipeline,
    submission_pipeline,
)

__all__ = [
    "EnrichmentCoordinator",
    "enrichment_coordinator",
    "SubmissionPipeline",
    "submission_pipeline",
]
