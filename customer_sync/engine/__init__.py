"""Engine components: store access, pagination, normalization, dedup, export."""

from .dedup import DedupRegister
from .models import CanonicalCustomer, SearchPage, SourceHit
from .normalizer import DocumentNormalizer, NormalizationResult
from .pagination import PaginationDriver
from .store import MATCH_ALL, ElasticsearchStore, StoreClient

__all__ = [
    "CanonicalCustomer",
    "DedupRegister",
    "DocumentNormalizer",
    "ElasticsearchStore",
    "MATCH_ALL",
    "NormalizationResult",
    "PaginationDriver",
    "SearchPage",
    "SourceHit",
    "StoreClient",
]
