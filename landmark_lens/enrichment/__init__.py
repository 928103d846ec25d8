"""Enrichment: knowledge-base searchers and the landmark/keyword search sequence."""

from landmark_lens.enrichment.engine import (
    LocationEnricher,
    SearchAttempt,
    build_candidate_terms,
)
from landmark_lens.enrichment.schema import LocationInfo, SearchResult, SearchStatus
from landmark_lens.enrichment.searchers import (
    LocationSearcher,
    WikidataSearcher,
    WikipediaSearcher,
)

__all__ = [
    "LocationEnricher",
    "LocationInfo",
    "LocationSearcher",
    "SearchAttempt",
    "SearchResult",
    "SearchStatus",
    "WikidataSearcher",
    "WikipediaSearcher",
    "build_candidate_terms",
]
