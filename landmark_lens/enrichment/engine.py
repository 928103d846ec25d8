"""Location enrichment: decide what to search for, in what order, and keep the first hit.

Order of operations for one request:

1. If the vision provider named a landmark, look it up in the primary source. A hit ends
   enrichment; the candidate list is never built and the fallback source is never called.
2. Otherwise (or on a miss) build candidate terms from tags then captions, capped at
   MAX_CANDIDATE_TERMS, and try each term against the primary then the fallback source.
3. Nothing found is not an error: the result simply has no location.

Searches run one at a time. An overall time budget bounds the whole sequence; once it is
spent, remaining searches are skipped.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from landmark_lens.ai.schema import VisionFindings
from landmark_lens.enrichment.schema import LocationInfo, SearchStatus
from landmark_lens.enrichment.searchers import LocationSearcher

_log = logging.getLogger(__name__)

MAX_CANDIDATE_TERMS = 3
TAG_CONFIDENCE_THRESHOLD = 0.7

# Substring match against lower-cased tag names.
LOCATION_TAG_VOCABULARY = (
    "building", "architecture", "monument", "statue", "church", "temple", "mosque",
    "palace", "castle", "tower", "bridge", "landmark", "historic", "ancient",
    "cathedral", "museum", "memorial", "plaza", "square", "fountain", "gate",
)

# Exact match against lower-cased, whitespace-split caption tokens.
CAPTION_KEYWORDS = frozenset({
    "statue", "monument", "building", "church", "temple", "palace", "castle",
    "tower", "bridge", "cathedral", "museum", "memorial", "fountain", "gate",
})


def is_location_relevant_tag(tag_name: str) -> bool:
    lowered = tag_name.lower()
    return any(word in lowered for word in LOCATION_TAG_VOCABULARY)


def extract_location_keywords(caption: str) -> list[str]:
    """Return caption tokens that are location keywords, in order, duplicates kept."""
    return [token for token in caption.lower().split() if token in CAPTION_KEYWORDS]


def build_candidate_terms(
    findings: VisionFindings,
    limit: int = MAX_CANDIDATE_TERMS,
    tag_threshold: float = TAG_CONFIDENCE_THRESHOLD,
) -> list[str]:
    """
    Fallback search terms: qualifying tags first, then caption keywords, truncated to limit.

    Terms are not deduplicated, so a word seen both as a tag and in a caption may be
    searched twice if the first attempt misses.
    """
    terms = [
        tag.name
        for tag in findings.tags
        if is_location_relevant_tag(tag.name) and tag.confidence > tag_threshold
    ]
    for caption in findings.captions:
        terms.extend(extract_location_keywords(caption.name))
    return terms[:limit]


@dataclass(frozen=True)
class SearchAttempt:
    source: str
    term: str
    status: SearchStatus


class EnrichmentBudgetExceeded(Exception):
    """Internal signal: the per-request enrichment budget ran out."""


class LocationEnricher:
    """Runs the landmark-first, keyword-fallback search sequence for one set of findings."""

    def __init__(
        self,
        primary: LocationSearcher,
        fallback: LocationSearcher,
        budget_seconds: float | None = None,
        max_terms: int = MAX_CANDIDATE_TERMS,
        tag_threshold: float = TAG_CONFIDENCE_THRESHOLD,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._primary = primary
        self._fallback = fallback
        self._budget_seconds = budget_seconds
        self._max_terms = max_terms
        self._tag_threshold = tag_threshold
        self._log = logger or _log
        self._clock = clock

    def close(self) -> None:
        self._primary.close()
        self._fallback.close()

    def enrich(self, findings: VisionFindings) -> LocationInfo | None:
        location, _ = self.enrich_with_trace(findings)
        return location

    def enrich_with_trace(self, findings: VisionFindings) -> tuple[LocationInfo | None, list[SearchAttempt]]:
        """Return the first location found (or None) and every search attempted, in order."""
        attempts: list[SearchAttempt] = []
        deadline = None if self._budget_seconds is None else self._clock() + self._budget_seconds

        def attempt(searcher: LocationSearcher, term: str) -> LocationInfo | None:
            if deadline is not None and self._clock() >= deadline:
                raise EnrichmentBudgetExceeded
            result = searcher.search(term)
            attempts.append(SearchAttempt(source=searcher.source, term=term, status=result.status))
            if result.status is SearchStatus.error:
                self._log.warning("Treating failed %s lookup of %r as no match", searcher.source, term)
            return result.location if result.found else None

        try:
            if findings.landmark_name:
                location = attempt(self._primary, findings.landmark_name)
                if location is not None:
                    return location, attempts

            terms = build_candidate_terms(findings, limit=self._max_terms, tag_threshold=self._tag_threshold)
            self._log.debug("Candidate search terms: %s", terms)
            for term in terms:
                location = attempt(self._primary, term)
                if location is not None:
                    return location, attempts
                location = attempt(self._fallback, term)
                if location is not None:
                    return location, attempts
        except EnrichmentBudgetExceeded:
            self._log.warning(
                "Enrichment budget of %ss spent after %d searches; returning without location",
                self._budget_seconds,
                len(attempts),
            )
            return None, attempts

        self._log.info("No location found after %d searches", len(attempts))
        return None, attempts
