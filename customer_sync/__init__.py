"""Extract, deduplicate and re-index customer records from a search store."""

from .exceptions import ConfigError, StoreError, SyncError
from .pipeline import ExtractionPipeline, RunSummary

__all__ = ["ConfigError", "ExtractionPipeline", "RunSummary", "StoreError", "SyncError"]
