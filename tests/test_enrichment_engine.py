"""Tests for candidate-term extraction and the landmark-first / keyword-fallback search sequence."""

import logging
from unittest.mock import patch

import pytest
import requests

from landmark_lens.ai.schema import ScoredLabel, VisionFindings
from landmark_lens.enrichment.engine import (
    LocationEnricher,
    SearchAttempt,
    build_candidate_terms,
    extract_location_keywords,
    is_location_relevant_tag,
)
from landmark_lens.enrichment.schema import LocationInfo, SearchStatus

pytestmark = [pytest.mark.fast]

GATE = LocationInfo(name="Brandenburg Gate", source="Wikidata", url="http://www.wikidata.org/entity/Q82425")
TOWER = LocationInfo(name="Eiffel Tower", latitude=48.8584, longitude=2.2945, source="Wikipedia")


def _findings(landmark=None, tags=(), captions=()):
    return VisionFindings(
        landmark_name=landmark,
        landmark_confidence=0.9 if landmark else 0.0,
        tags=[ScoredLabel(name=n, confidence=c) for n, c in tags],
        captions=[ScoredLabel(name=t, confidence=c) for t, c in captions],
    )


# --- candidate terms -------------------------------------------------------


@pytest.mark.parametrize(
    "tag, relevant",
    [
        ("statue", True),
        ("Church", True),
        ("historic site", True),
        ("skyscraper tower", True),
        ("squares", True),
        ("toy", False),
        ("sky", False),
        ("person", False),
    ],
)
def test_tag_relevance_is_case_insensitive_substring(tag, relevant):
    assert is_location_relevant_tag(tag) is relevant


def test_caption_keywords_require_exact_whitespace_tokens():
    assert extract_location_keywords("A Statue next to a church and a bridge") == ["statue", "church", "bridge"]
    assert extract_location_keywords("statues, towers and a gate.") == []
    assert extract_location_keywords("tower   tower") == ["tower", "tower"]


def test_tag_confidence_must_exceed_threshold():
    findings = _findings(tags=[("statue", 0.7), ("monument", 0.71)])
    assert build_candidate_terms(findings) == ["monument"]


def test_candidates_keep_tag_case_and_order_before_caption_keywords():
    findings = _findings(
        tags=[("Tower", 0.95), ("toy", 0.99), ("bridge", 0.8)],
        captions=[("a castle near a river", 0.5)],
    )
    assert build_candidate_terms(findings) == ["Tower", "bridge", "castle"]


def test_candidates_capped_at_three():
    findings = _findings(
        tags=[("building", 0.9), ("tower", 0.95), ("bridge", 0.8), ("castle", 0.99)],
        captions=[("a church", 0.9)],
    )
    assert build_candidate_terms(findings) == ["building", "tower", "bridge"]


def test_duplicate_candidates_are_not_removed():
    findings = _findings(tags=[("statue", 0.91), ("toy", 0.88)], captions=[("a statue of a person", 0.6)])
    assert build_candidate_terms(findings) == ["statue", "statue"]


def test_no_candidates_from_irrelevant_findings():
    findings = _findings(tags=[("dog", 0.99)], captions=[("a dog on a couch", 0.9)])
    assert build_candidate_terms(findings) == []


# --- search sequence -------------------------------------------------------


def test_landmark_hit_short_circuits(primary, fallback, liberty):
    """A landmark the primary source resolves is returned without candidates or fallback calls."""
    primary.responses["Statue of Liberty"] = liberty
    findings = _findings(landmark="Statue of Liberty", tags=[("statue", 0.99)], captions=[("a statue", 0.9)])
    enricher = LocationEnricher(primary, fallback)
    with patch("landmark_lens.enrichment.engine.build_candidate_terms") as build:
        location, attempts = enricher.enrich_with_trace(findings)
    assert location == liberty
    build.assert_not_called()
    assert primary.calls == ["Statue of Liberty"]
    assert fallback.calls == []
    assert attempts == [SearchAttempt("Wikipedia", "Statue of Liberty", SearchStatus.found)]


def test_landmark_miss_is_not_retried_on_fallback(primary, fallback):
    """The landmark name only goes to the primary source; then keyword search starts."""
    fallback.responses["tower"] = TOWER
    findings = _findings(landmark="Unknown Place", tags=[("tower", 0.9)])
    location = LocationEnricher(primary, fallback).enrich(findings)
    assert location == TOWER
    assert primary.calls == ["Unknown Place", "tower"]
    assert fallback.calls == ["tower"]


def test_at_most_three_candidates_are_tried(primary, fallback):
    findings = _findings(
        tags=[("building", 0.9), ("tower", 0.95), ("bridge", 0.8), ("castle", 0.99)],
        captions=[("a church with a fountain", 0.9)],
    )
    location, attempts = LocationEnricher(primary, fallback).enrich_with_trace(findings)
    assert location is None
    assert primary.calls == ["building", "tower", "bridge"]
    assert fallback.calls == ["building", "tower", "bridge"]
    assert [(a.source, a.term) for a in attempts] == [
        ("Wikipedia", "building"),
        ("Wikidata", "building"),
        ("Wikipedia", "tower"),
        ("Wikidata", "tower"),
        ("Wikipedia", "bridge"),
        ("Wikidata", "bridge"),
    ]


def test_caption_keywords_fill_remaining_slots(primary, fallback):
    findings = _findings(tags=[("monument", 0.9)], captions=[("a gate and a fountain and a tower", 0.5)])
    LocationEnricher(primary, fallback).enrich(findings)
    assert primary.calls == ["monument", "gate", "fountain"]


def test_fallback_tried_for_same_candidate_before_next(primary, fallback):
    """A primary miss (disambiguation / no coordinates) goes to the fallback for that same term first."""
    fallback.responses["gate"] = GATE
    primary.responses["tower"] = TOWER
    findings = _findings(tags=[("gate", 0.9), ("tower", 0.9)])
    location = LocationEnricher(primary, fallback).enrich(findings)
    assert location == GATE
    assert primary.calls == ["gate"]
    assert fallback.calls == ["gate"]


def test_search_errors_are_treated_as_no_match(primary, fallback, caplog):
    primary.responses["statue"] = requests.ConnectionError("primary down")
    fallback.responses["statue"] = ValueError("bad json")
    primary.responses["monument"] = TOWER
    findings = _findings(tags=[("statue", 0.9), ("monument", 0.9)])
    location, attempts = LocationEnricher(primary, fallback).enrich_with_trace(findings)
    assert location == TOWER
    assert [a.status for a in attempts] == [SearchStatus.error, SearchStatus.error, SearchStatus.found]
    assert "Treating failed Wikipedia lookup of 'statue' as no match" in caplog.text


def test_first_success_wins_and_duplicate_is_never_tried(primary, fallback, liberty):
    primary.responses["statue"] = liberty
    findings = _findings(tags=[("statue", 0.91), ("toy", 0.88)], captions=[("a statue of a person", 0.6)])
    location = LocationEnricher(primary, fallback).enrich(findings)
    assert location == liberty
    assert primary.calls == ["statue"]
    assert fallback.calls == []


def test_duplicate_term_is_searched_again_after_a_miss(primary, fallback):
    findings = _findings(tags=[("statue", 0.91), ("toy", 0.88)], captions=[("a statue of a person", 0.6)])
    assert LocationEnricher(primary, fallback).enrich(findings) is None
    assert primary.calls == ["statue", "statue"]
    assert fallback.calls == ["statue", "statue"]


def test_nothing_to_search_returns_none(primary, fallback):
    location, attempts = LocationEnricher(primary, fallback).enrich_with_trace(_findings(tags=[("dog", 0.99)]))
    assert location is None
    assert attempts == []
    assert primary.calls == []


def test_budget_exhaustion_skips_remaining_searches(primary, fallback, caplog):
    """Once the enrichment budget is spent, no further searches are issued."""
    clock = iter([0.0, 1.0, 10.0]).__next__
    findings = _findings(landmark="Somewhere", tags=[("tower", 0.9)])
    enricher = LocationEnricher(primary, fallback, budget_seconds=5.0, clock=clock)
    location, attempts = enricher.enrich_with_trace(findings)
    assert location is None
    assert primary.calls == ["Somewhere"]
    assert fallback.calls == []
    assert len(attempts) == 1
    assert "Enrichment budget of 5.0s spent" in caplog.text


def test_injected_logger_receives_messages(primary, fallback):
    records = []

    class _Collect(logging.Handler):
        def emit(self, record):
            records.append(record.getMessage())

    logger = logging.getLogger("enrichment-test-logger")
    logger.setLevel(logging.DEBUG)
    handler = _Collect()
    logger.addHandler(handler)
    try:
        LocationEnricher(primary, fallback, logger=logger).enrich(_findings(tags=[("tower", 0.9)]))
    finally:
        logger.removeHandler(handler)
    assert "Candidate search terms: ['tower']" in records
    assert "No location found after 2 searches" in records


def test_close_closes_both_searchers(primary, fallback):
    LocationEnricher(primary, fallback).close()
    assert primary.closed and fallback.closed
