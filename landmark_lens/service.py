"""Analysis service: vision calls, enrichment and assembly for one image."""

import logging

from landmark_lens.ai.factory import get_vision_analyzer
from landmark_lens.ai.schema import VisionFindings
from landmark_lens.ai.vision_base import GeneralAnalyzer, LandmarkAnalyzer
from landmark_lens.assembler import AnalysisResult, assemble_result
from landmark_lens.core.config import Settings
from landmark_lens.enrichment.engine import LocationEnricher, SearchAttempt
from landmark_lens.enrichment.searchers import WikidataSearcher, WikipediaSearcher

_log = logging.getLogger(__name__)


class AnalysisService:
    """
    Sequential pipeline: landmark call -> general call -> enrichment -> assembly.

    Vision provider errors propagate to the caller; enrichment never raises.
    """

    def __init__(
        self,
        landmark_analyzer: LandmarkAnalyzer,
        general_analyzer: GeneralAnalyzer,
        enricher: LocationEnricher,
    ) -> None:
        self.landmark_analyzer = landmark_analyzer
        self.general_analyzer = general_analyzer
        self.enricher = enricher

    def collect_findings(self, image_bytes: bytes) -> VisionFindings:
        landmark = self.landmark_analyzer.analyze_landmark(image_bytes)
        general = self.general_analyzer.analyze_general(image_bytes)
        return VisionFindings.combine(landmark, general)

    def analyze_with_trace(self, image_bytes: bytes) -> tuple[AnalysisResult, list[SearchAttempt]]:
        findings = self.collect_findings(image_bytes)
        location, attempts = self.enricher.enrich_with_trace(findings)
        _log.info(
            "Analyzed %d bytes: landmark=%s location=%s searches=%d",
            len(image_bytes),
            findings.landmark_name,
            location.name if location else None,
            len(attempts),
        )
        return assemble_result(findings, location), attempts

    def analyze(self, image_bytes: bytes) -> AnalysisResult:
        result, _ = self.analyze_with_trace(image_bytes)
        return result

    def close(self) -> None:
        self.landmark_analyzer.close()
        if self.general_analyzer is not self.landmark_analyzer:
            self.general_analyzer.close()
        self.enricher.close()


def build_analysis_service(settings: Settings, provider: str | None = None) -> AnalysisService:
    """Wire the configured vision provider and the Wikipedia/Wikidata searchers."""
    analyzer = get_vision_analyzer(provider or settings.vision_provider, settings)
    primary = WikipediaSearcher(
        endpoint=settings.wikipedia_endpoint,
        timeout=settings.search_timeout_seconds,
        user_agent=settings.user_agent,
    )
    fallback = WikidataSearcher(
        endpoint=settings.wikidata_endpoint,
        language=settings.search_language,
        timeout=settings.search_timeout_seconds,
        user_agent=settings.user_agent,
    )
    enricher = LocationEnricher(
        primary,
        fallback,
        budget_seconds=settings.enrichment_budget_seconds,
    )
    return AnalysisService(analyzer, analyzer, enricher)
