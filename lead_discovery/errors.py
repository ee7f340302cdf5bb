"""
Exception hierarchy for the Lead Discovery Engine
"""


class DiscoveryError(Exception):
    """Base class for pipeline errors"""


class AcquisitionError(DiscoveryError):
    """Candidate acquisition failed; the owning job must end as failed"""


class StoreError(DiscoveryError):
    """The lead store could not complete an operation"""
